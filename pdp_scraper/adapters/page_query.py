"""
Page query capability for the Product Page Scraper.

The extraction and variant layers never talk to the browser protocol directly:
they consume the small `PageQuery` interface below. `PlaywrightPageQuery`
backs it with a live Playwright page; tests back it with an in-memory page.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

# Opaque element handle, whatever the backing implementation uses
Handle = Any


class PageQuery(ABC):
    """
    Read/interact capability over one rendered page.

    Every lookup returns None or an empty list when the element is absent;
    only navigation and interaction calls raise.
    """

    @abstractmethod
    async def goto(self, url: str, timeout_ms: int) -> None:
        """Navigate and return once the DOM content is loaded."""

    @abstractmethod
    async def find(self, selector: str, root: Optional[Handle] = None) -> Optional[Handle]:
        """First element matching `selector`, optionally inside `root`."""

    @abstractmethod
    async def find_all(self, selector: str, root: Optional[Handle] = None) -> List[Handle]:
        """All elements matching `selector` in document order."""

    @abstractmethod
    async def text_of(self, handle: Handle) -> Optional[str]:
        """Trimmed rendered text, None when empty."""

    @abstractmethod
    async def attr_of(self, handle: Handle, name: str) -> Optional[str]:
        """Attribute value, None when missing."""

    @abstractmethod
    async def html_of(self, handle: Handle) -> Optional[str]:
        """Outer HTML of the element."""

    @abstractmethod
    async def has_class(self, handle: Handle, class_name: str) -> bool:
        """True if the element carries `class_name` or a hashed `class_name--xxx`."""

    @abstractmethod
    async def click(self, handle: Handle) -> None:
        """Simulate a user click on the element."""

    @abstractmethod
    async def wait_for(self, selector: str, timeout_ms: int) -> bool:
        """Wait for `selector` to be present; False on timeout."""

    @abstractmethod
    async def pause(self, ms: int) -> None:
        """Settle delay after an interaction."""

    @abstractmethod
    async def content(self) -> str:
        """Rendered HTML of the whole page."""

    @abstractmethod
    async def screenshot(self, path: str) -> None:
        """Full-page screenshot written to `path`."""

    @abstractmethod
    async def scroll_through(self, step_px: int, pause_ms: int, max_steps: int) -> int:
        """Scroll to the bottom in steps, then back to the top. Returns steps taken."""

    # Convenience lookups built on the primitives above

    async def find_text(self, selector: str, root: Optional[Handle] = None) -> Optional[str]:
        handle = await self.find(selector, root)
        if handle is None:
            return None
        return await self.text_of(handle)

    async def find_attr(self, selector: str, name: str, root: Optional[Handle] = None) -> Optional[str]:
        handle = await self.find(selector, root)
        if handle is None:
            return None
        return await self.attr_of(handle, name)

    async def find_html(self, selector: str) -> Optional[str]:
        handle = await self.find(selector)
        if handle is None:
            return None
        return await self.html_of(handle)


_HAS_CLASS_JS = """(el, name) => Array.from(el.classList).some(
    c => c === name || c.startsWith(name + '--')
)"""

_SCROLL_STEP_JS = """(step) => {
    window.scrollBy(0, step);
    return window.innerHeight + window.scrollY >= document.body.scrollHeight;
}"""


class PlaywrightPageQuery(PageQuery):
    """`PageQuery` over a Playwright async page."""

    def __init__(self, page: Page):
        self.page = page

    async def goto(self, url: str, timeout_ms: int) -> None:
        await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

    async def find(self, selector: str, root: Optional[Handle] = None) -> Optional[Handle]:
        return await (root or self.page).query_selector(selector)

    async def find_all(self, selector: str, root: Optional[Handle] = None) -> List[Handle]:
        return await (root or self.page).query_selector_all(selector)

    async def text_of(self, handle: Handle) -> Optional[str]:
        text = (await handle.inner_text()).strip()
        return text or None

    async def attr_of(self, handle: Handle, name: str) -> Optional[str]:
        return await handle.get_attribute(name)

    async def html_of(self, handle: Handle) -> Optional[str]:
        return await handle.evaluate("el => el.outerHTML")

    async def has_class(self, handle: Handle, class_name: str) -> bool:
        return bool(await handle.evaluate(_HAS_CLASS_JS, class_name))

    async def click(self, handle: Handle) -> None:
        await handle.click()

    async def wait_for(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self.page.wait_for_selector(selector, state="attached", timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    async def pause(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def content(self) -> str:
        return await self.page.content()

    async def screenshot(self, path: str) -> None:
        await self.page.screenshot(path=path, full_page=True)

    async def scroll_through(self, step_px: int, pause_ms: int, max_steps: int) -> int:
        steps = 0
        while steps < max_steps:
            steps += 1
            at_bottom = await self.page.evaluate(_SCROLL_STEP_JS, step_px)
            await self.page.wait_for_timeout(pause_ms)
            if at_bottom:
                break
        await self.page.evaluate("() => window.scrollTo(0, 0)")
        return steps
