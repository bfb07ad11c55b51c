"""
DOM selectors for the target marketplace product page.

Class names on the page carry hashed suffixes (`sku-item--text--Xy12z`), so
most selectors match on the stable prefix with `[class*=...]`.
"""
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class PageSelectors:
    """Selector set used by the session, extraction and variant layers."""
    # Readiness markers
    load_gate: str = 'h1[data-pl="product-title"]'
    content_ready: str = '[class*="sku--wrap"]'

    # Static fields
    title: str = 'h1[data-pl="product-title"]'
    bulk_price: str = '[class*="banner-promotion-enhance--text"]'
    coupon: str = '[class*="coupon-block--content"]'
    main_images: str = '[class*="slider--img"] img'
    product_html: str = '[class*="pdp-info"]'

    # Variant selectors
    color_option: str = '[class*="sku-item--image"]'
    size_option: str = '[class*="sku-item--text"]'
    selected_class: str = "sku-item--selected"

    # Price display
    current_price: str = '[class*="price-default--current"]'
    original_price: str = '[class*="price-default--original"]'
    discount: str = '[class*="price-default--bannerSupplementary"]'

    # Specifications table
    spec_row: str = '[class*="specification--line"]'
    spec_prop: str = '[class*="specification--prop"]'
    spec_title: str = '[class*="specification--title"]'
    spec_desc: str = '[class*="specification--desc"]'

    # Description, first matching container wins
    description_containers: Tuple[str, ...] = field(default_factory=lambda: (
        "#product-description",
        "#nav-description",
        '[class*="description--product-description"]',
        ".product-description",
    ))
    description_nav_link: Tuple[str, ...] = field(default_factory=lambda: (
        'a[href="#nav-description"]',
        '[class*="navigation--item"][data-key="description"]',
    ))


DEFAULT_SELECTORS = PageSelectors()
