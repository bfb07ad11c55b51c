"""
Remote Browser Adapter for the Product Page Scraper.
Connects to a remote Chromium over its CDP websocket endpoint.
"""
from typing import Optional

from playwright.async_api import async_playwright, Browser, Playwright

from pdp_scraper.adapters.page_query import PageQuery, PlaywrightPageQuery
from pdp_scraper.config import config
from pdp_scraper.utils.logger import LayerLogger


class BrowserSession:
    """
    One remote browser connection and the page opened on it.

    `close()` is idempotent: the connection is released exactly once no matter
    how many exit paths call it.
    """

    def __init__(self, playwright: Playwright, browser: Browser):
        self._playwright = playwright
        self._browser = browser
        self.page: Optional[PageQuery] = None
        self.closed = False
        self.logger = LayerLogger("browser_session")

    async def open_page(self, width: int = 1366, height: int = 768) -> PageQuery:
        """Open the session's single page."""
        page = await self._browser.new_page(viewport={"width": width, "height": height})
        self.page = PlaywrightPageQuery(page)
        return self.page

    async def close(self) -> None:
        """Release the browser connection."""
        if self.closed:
            return
        self.closed = True
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()
        self.logger.log_action("browser_close", "completed")


class RemoteBrowser:
    """
    Factory of `BrowserSession`s against a remote browser endpoint.

    The endpoint is resolved when a session is opened, so a missing
    configuration surfaces per job rather than at import time.
    """

    def __init__(self, endpoint: Optional[str] = None, timeout_ms: int = 60000):
        self.endpoint = endpoint
        self.timeout_ms = timeout_ms
        self.logger = LayerLogger("remote_browser")

    async def connect(self) -> BrowserSession:
        endpoint = self.endpoint or config.BROWSER_WS
        if not endpoint:
            raise RuntimeError("Remote browser endpoint is not configured (BROWSER_WS)")

        self.logger.log_action("browser_connect", "started")
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.connect_over_cdp(endpoint, timeout=self.timeout_ms)
        except Exception:
            await playwright.stop()
            raise
        self.logger.log_action("browser_connect", "completed")
        return BrowserSession(playwright, browser)
