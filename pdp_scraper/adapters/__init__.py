"""Adapters package initialization."""
from pdp_scraper.adapters.browser import RemoteBrowser, BrowserSession
from pdp_scraper.adapters.page_query import PageQuery, PlaywrightPageQuery

__all__ = ["RemoteBrowser", "BrowserSession", "PageQuery", "PlaywrightPageQuery"]
