"""
Variant Layer for the Product Page Scraper.
Walks every color x size combination and records the price shown for it.
"""
from typing import List, Optional

from pdp_scraper.adapters.page_query import Handle, PageQuery
from pdp_scraper.config import config
from pdp_scraper.layers.extraction import size_label
from pdp_scraper.models.product import Variant
from pdp_scraper.models.selectors import DEFAULT_SELECTORS, PageSelectors
from pdp_scraper.utils.logger import LayerLogger


class VariantWalker:
    """
    Variant Walker - drives the color/size selectors of one page.

    All controls act on the same rendered page, so the walk is strictly
    sequential: click, settle, read, in on-page order (color-major). The first
    variant is the representative price of the whole record.
    """

    def __init__(
        self,
        selectors: PageSelectors = DEFAULT_SELECTORS,
        color_settle_ms: int = 300,
        color_only_settle_ms: int = 500,
        price_timeout_ms: Optional[int] = None,
    ):
        self.selectors = selectors
        self.color_settle_ms = color_settle_ms
        self.color_only_settle_ms = color_only_settle_ms
        self.price_timeout_ms = price_timeout_ms or config.PRICE_WAIT_TIMEOUT_MS
        self.logger = LayerLogger("variant_walker")

    async def walk(self, page: PageQuery) -> List[Variant]:
        """
        Produce one Variant per reachable (color, size) pair.

        Returns:
            Non-empty list of variants in color-major order
        """
        colors = await page.find_all(self.selectors.color_option)
        sizes = await page.find_all(self.selectors.size_option)

        self.logger.log_action(
            "variant_walk",
            "started",
            colors_count=len(colors),
            sizes_count=len(sizes),
        )

        if colors and sizes:
            variants = await self._walk_colors_and_sizes(page, colors)
            if not variants:
                self.logger.log_fallback(
                    from_source="variant_matrix",
                    to_source="rendered_price",
                    reason="No color/size combination showed a price",
                )
                variants = [await self._read_variant(page, None, None)]
        elif colors:
            variants = await self._walk_colors_only(page, colors)
        else:
            self.logger.log_decision(
                decision="single_variant",
                reason="Page has no color selector",
                sizes_count=len(sizes),
            )
            variants = [await self._read_variant(page, None, None)]

        self.logger.log_action("variant_walk", "completed", variants_count=len(variants))
        return variants

    async def _walk_colors_and_sizes(self, page: PageQuery, colors: List[Handle]) -> List[Variant]:
        variants = []
        for color_el in colors:
            await page.click(color_el)
            await page.pause(self.color_settle_ms)
            color = await self._color_name(page, color_el)

            # Size controls re-render after a color change, query them fresh
            for size_el in await page.find_all(self.selectors.size_option):
                await page.click(size_el)

                if not await page.wait_for(self.selectors.current_price, self.price_timeout_ms):
                    self.logger.log_skip(
                        what="color_sizes",
                        reason=f"Price did not appear within {self.price_timeout_ms}ms",
                        color=color,
                    )
                    break

                size = await size_label(page, size_el)
                variants.append(await self._read_variant(page, color, size))
        return variants

    async def _walk_colors_only(self, page: PageQuery, colors: List[Handle]) -> List[Variant]:
        variants = []
        for color_el in colors:
            await page.click(color_el)
            await page.pause(self.color_only_settle_ms)
            color = await self._color_name(page, color_el)
            variants.append(await self._read_variant(page, color, None))
        return variants

    async def _color_name(self, page: PageQuery, color_el: Handle) -> Optional[str]:
        return (
            await page.find_attr("img", "alt", root=color_el)
            or await page.attr_of(color_el, "title")
        )

    async def _read_variant(self, page: PageQuery, color: Optional[str], size: Optional[str]) -> Variant:
        sel = self.selectors
        return Variant(
            color=color,
            size=size,
            currentPrice=await page.find_text(sel.current_price),
            originalPrice=await page.find_text(sel.original_price),
            discount=await page.find_text(sel.discount),
        )
