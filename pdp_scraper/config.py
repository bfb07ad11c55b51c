"""
Configuration management for the Product Page Scraper.
Handles environment variables and application settings.
"""
import os
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _split_list(value: str) -> List[str]:
    """Split a `|`-separated environment value into trimmed, non-empty items."""
    return [item.strip() for item in value.split("|") if item.strip()]


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Remote browser (CDP websocket endpoint, e.g. a hosted scraping browser)
    # Checked when a job is submitted, NOT at startup
    BROWSER_WS: Optional[str] = os.getenv("BROWSER_WS")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console

    # Target marketplace and forced locale
    MARKETPLACE_DOMAIN: str = os.getenv("MARKETPLACE_DOMAIN", "aliexpress.com")
    LOCALE_CURRENCY: str = os.getenv("LOCALE_CURRENCY", "USD")
    LOCALE_SHIP_TO: str = os.getenv("LOCALE_SHIP_TO", "US")

    # Wait bounds (milliseconds)
    NAVIGATION_TIMEOUT_MS: int = int(os.getenv("NAVIGATION_TIMEOUT_MS", "120000"))
    LOAD_GATE_TIMEOUT_MS: int = int(os.getenv("LOAD_GATE_TIMEOUT_MS", "30000"))
    CONTENT_TIMEOUT_MS: int = int(os.getenv("CONTENT_TIMEOUT_MS", "110000"))
    PRICE_WAIT_TIMEOUT_MS: int = int(os.getenv("PRICE_WAIT_TIMEOUT_MS", "5000"))

    # Acquisition retry policy
    RETRY_MAX_ATTEMPTS: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
    RETRY_BACKOFF_SECONDS: float = float(os.getenv("RETRY_BACKOFF_SECONDS", "5"))

    # Soft-block ("soft 404") signature. The marketplace serves rate-limit
    # pages with a 200 status, only the wording gives them away.
    SOFT_BLOCK_SIGNATURE_VERSION: str = os.getenv("SOFT_BLOCK_SIGNATURE_VERSION", "2024-06")
    SOFT_BLOCK_PHRASES: List[str] = _split_list(
        os.getenv(
            "SOFT_BLOCK_PHRASES",
            "Sorry, the page you requested can not be found|"
            "Sorry, we have detected unusual traffic from your network",
        )
    )

    # Diagnostics captured when the product content never renders
    SNAPSHOT_DIR: str = os.getenv("SNAPSHOT_DIR", "snapshots")
    SNAPSHOT_SCREENSHOT: bool = os.getenv("SNAPSHOT_SCREENSHOT", "false").lower() == "true"

    @classmethod
    def is_browser_configured(cls) -> bool:
        """Check if the remote browser endpoint is configured."""
        return bool(cls.BROWSER_WS)


config = Config()
