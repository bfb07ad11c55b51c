"""
Extraction Layer for the Product Page Scraper.
Reads the static product fields from a rendered page without interacting with it.
"""
import re
from typing import Dict, List, Optional
from urllib.parse import urlsplit, urlunsplit

from pdp_scraper.adapters.page_query import Handle, PageQuery
from pdp_scraper.models.product import (
    ColorOption,
    DescriptionData,
    SizeOption,
    StaticPageData,
)
from pdp_scraper.models.selectors import DEFAULT_SELECTORS, PageSelectors
from pdp_scraper.utils.logger import LayerLogger


# Responsive thumbnail / format suffixes appended by the marketplace CDN:
#   ...abc.jpg_220x220q75.jpg_.avif  ->  ...abc.jpg
#   ...abc.jpg_.webp                 ->  ...abc.jpg
IMAGE_SUFFIX_RE = re.compile(
    r"(?:_\d+x\d+(?:q\d+)?\.(?:jpe?g|png|webp|avif)|_\.(?:avif|webp))$",
    re.IGNORECASE,
)


def canonicalize_image_url(url: Optional[str]) -> Optional[str]:
    """
    Strip resize/format suffixes so one physical image has one URL.

    Suffixes are stripped until none is left, which makes the function
    idempotent. Protocol-relative URLs get an `https:` scheme. A URL that
    cannot be parsed is returned as-is.
    """
    if not url:
        return None
    url = url.strip()
    if url.startswith("//"):
        url = "https:" + url

    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    path = parts.path
    while True:
        stripped = IMAGE_SUFFIX_RE.sub("", path)
        if stripped == path:
            break
        path = stripped
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


class FieldExtractor:
    """
    Field Extractor - pure reads over a `PageQuery`.

    Structural absence is expected: every field resolves to None or an empty
    collection when its element is missing.
    """

    def __init__(self, selectors: PageSelectors = DEFAULT_SELECTORS):
        self.selectors = selectors
        self.logger = LayerLogger("field_extractor")

    async def extract_static(self, page: PageQuery) -> StaticPageData:
        """
        Read every non-interactive field of the product page.

        Args:
            page: Page showing the rendered product

        Returns:
            StaticPageData model
        """
        self.logger.log_action("extract_static", "started")
        sel = self.selectors

        main_images = await self.extract_main_images(page)
        colors = await self.extract_colors(page)
        sizes = await self.extract_sizes(page)
        description = await self.extract_description(page, main_images)

        data = StaticPageData(
            title=await page.find_text(sel.title),
            bulkPrice=await page.find_text(sel.bulk_price),
            coupon=await page.find_text(sel.coupon),
            mainImages=main_images,
            availableColors=colors,
            availableSizes=sizes,
            selectedColor=next((c.name for c in colors if c.isSelected), None),
            selectedSize=next((s.size for s in sizes if s.isSelected), None),
            specifications=await self.extract_specifications(page),
            description=description,
            productHTML=await page.find_html(sel.product_html),
        )

        self.logger.log_action(
            "extract_static",
            "completed",
            title=data.title,
            images_count=len(data.mainImages),
            colors_count=len(colors),
            sizes_count=len(sizes),
            specifications_count=len(data.specifications),
            description_images_count=len(description.images),
        )
        return data

    async def extract_main_images(self, page: PageQuery) -> List[str]:
        images = []
        for img in await page.find_all(self.selectors.main_images):
            src = canonicalize_image_url(await self._image_source(page, img))
            if src:
                images.append(src)
        return images

    async def extract_colors(self, page: PageQuery) -> List[ColorOption]:
        colors = []
        for el in await page.find_all(self.selectors.color_option):
            colors.append(ColorOption(
                name=await page.find_attr("img", "alt", root=el),
                image=canonicalize_image_url(await page.find_attr("img", "src", root=el)),
                isSelected=await page.has_class(el, self.selectors.selected_class),
            ))
        return colors

    async def extract_sizes(self, page: PageQuery) -> List[SizeOption]:
        sizes = []
        for el in await page.find_all(self.selectors.size_option):
            sizes.append(SizeOption(
                size=await size_label(page, el),
                isSelected=await page.has_class(el, self.selectors.selected_class),
            ))
        return sizes

    async def extract_specifications(self, page: PageQuery) -> Dict[str, str]:
        """Label/value pairs of the specifications table; later duplicates win."""
        sel = self.selectors
        specifications: Dict[str, str] = {}
        for row in await page.find_all(sel.spec_row):
            for prop in await page.find_all(sel.spec_prop, root=row):
                title = await page.find_text(sel.spec_title, root=prop)
                desc = await page.find_text(sel.spec_desc, root=prop)
                if title and desc:
                    specifications[title] = desc
        return specifications

    async def extract_description(self, page: PageQuery, main_images: List[str]) -> DescriptionData:
        """
        Description text and images from the first container that exists.

        Falls back to the main images when the container has none.
        """
        container = None
        for selector in self.selectors.description_containers:
            container = await page.find(selector)
            if container is not None:
                self.logger.log_decision(
                    decision="description_container",
                    reason="first matching candidate",
                    selector=selector,
                )
                break

        text: List[str] = []
        images: List[str] = []
        if container is not None:
            for paragraph in await page.find_all("p", root=container):
                content = await page.text_of(paragraph)
                if content:
                    text.append(content)
            for img in await page.find_all("img", root=container):
                src = await self._image_source(page, img)
                if src:
                    images.append(src)

        if not images:
            self.logger.log_fallback(
                from_source="description_images",
                to_source="main_images",
                reason="Description container has no images" if container is not None
                else "No description container found",
                images_count=len(main_images),
            )
            images = list(main_images)

        return DescriptionData(text=text, images=images)

    async def _image_source(self, page: PageQuery, img: Handle) -> Optional[str]:
        # Lazily loaded images keep the real URL in data-src until scrolled into view
        return await page.attr_of(img, "src") or await page.attr_of(img, "data-src")


async def size_label(page: PageQuery, el: Handle) -> Optional[str]:
    """Display label of a size control: its title attribute, else its text."""
    return await page.attr_of(el, "title") or await page.text_of(el)
