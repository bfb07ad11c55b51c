"""
Record Generator for the Product Page Scraper.
Merges static page data and the variant matrix into the canonical output record.
"""
from typing import List

from pdp_scraper.models.product import ProductRecord, StaticPageData, Variant


class RecordGenerator:
    """Result Assembler - pure merge, no page access."""

    def assemble(self, static: StaticPageData, variants: List[Variant]) -> ProductRecord:
        """
        Build the ProductRecord.

        The headline price fields mirror the first variant; they stay None when
        there are no variants.
        """
        first = variants[0] if variants else None

        return ProductRecord(
            title=static.title,
            currentPrice=first.currentPrice if first else None,
            originalPrice=first.originalPrice if first else None,
            discount=first.discount if first else None,
            bulkPrice=static.bulkPrice,
            images=list(static.mainImages),
            priceVariations=list(variants),
            selectedColor=static.selectedColor,
            availableColors=list(static.availableColors),
            selectedSize=static.selectedSize,
            availableSizes=list(static.availableSizes),
            coupon=static.coupon,
            specifications=dict(static.specifications),
            description=static.description,
            productHTML=static.productHTML,
        )
