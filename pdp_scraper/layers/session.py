"""
Session Layer for the Product Page Scraper.
Owns URL normalization, the connect/navigate retry policy and the readiness
gates; hands a ready page to the extraction layers or fails the job.
"""
import asyncio
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Type
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from pdp_scraper.adapters.browser import BrowserSession, RemoteBrowser
from pdp_scraper.config import config
from pdp_scraper.models.selectors import DEFAULT_SELECTORS, PageSelectors
from pdp_scraper.utils.logger import LayerLogger, get_trace_id


class SoftBlockError(Exception):
    """The page answered 200 but its body is the marketplace's block/404 page."""


class SessionAcquisitionError(Exception):
    """Every connect/navigate attempt failed."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to load page after {attempts} attempt(s): {describe_error(last_error)}"
        )


class ContentNotReadyError(Exception):
    """The page loaded but the product content never rendered. Not retried."""


def describe_error(error: BaseException) -> str:
    """Human-readable error message, falling back to the exception type."""
    message = str(error).strip()
    return message or type(error).__name__


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy for session acquisition.

    `backoff_seconds[i]` is the pause after failed attempt i+1; the last value
    repeats. Exceptions listed in `fatal` are never retried.
    """
    max_attempts: int = 3
    backoff_seconds: Sequence[float] = (5.0,)
    fatal: Tuple[Type[BaseException], ...] = ()

    def is_retryable(self, error: BaseException) -> bool:
        return not isinstance(error, self.fatal)

    def backoff_for(self, attempt: int) -> float:
        if not self.backoff_seconds:
            return 0.0
        index = min(attempt - 1, len(self.backoff_seconds) - 1)
        return float(self.backoff_seconds[index])

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        return cls(
            max_attempts=config.RETRY_MAX_ATTEMPTS,
            backoff_seconds=(config.RETRY_BACKOFF_SECONDS,),
        )


@dataclass(frozen=True)
class SoftBlockSignature:
    """
    Versioned set of phrases identifying a disguised error page.

    Matching is case-insensitive on the visible body text. When the marketplace
    changes its wording, ship a new version through configuration.
    """
    version: str
    phrases: List[str] = field(default_factory=list)

    def matches(self, body_text: str) -> Optional[str]:
        """Return the matching phrase, or None."""
        haystack = body_text.lower()
        for phrase in self.phrases:
            if phrase.lower() in haystack:
                return phrase
        return None

    @classmethod
    def from_config(cls) -> "SoftBlockSignature":
        return cls(
            version=config.SOFT_BLOCK_SIGNATURE_VERSION,
            phrases=list(config.SOFT_BLOCK_PHRASES),
        )


def visible_text(html: str) -> str:
    """Visible text of an HTML document, scripts and styles removed."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text(" ", strip=True)


def normalize_url(url: str, domain: Optional[str] = None) -> str:
    """
    Rewrite marketplace subdomains (`de.`, `m.`, ...) to the canonical `www` host.

    Non-marketplace URLs and URLs that fail to parse are returned unchanged.
    """
    domain = (domain or config.MARKETPLACE_DOMAIN).lower()
    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return url

    if not host:
        return url

    canonical = f"www.{domain}"
    if host == canonical or not host.endswith("." + domain):
        return url

    netloc = canonical
    if port:
        netloc = f"{netloc}:{port}"
    if "@" in parts.netloc:
        netloc = parts.netloc.rsplit("@", 1)[0] + "@" + netloc
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def apply_locale_params(
    url: str,
    currency: Optional[str] = None,
    ship_to: Optional[str] = None,
) -> str:
    """Force currency and shipping region query parameters, replacing existing ones."""
    forced = {
        "currency": currency or config.LOCALE_CURRENCY,
        "ship_to": ship_to or config.LOCALE_SHIP_TO,
    }
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in forced]
    query.extend(forced.items())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def write_snapshot(directory: str, path: str, html: str) -> None:
    """Write a rendered page to disk, creating the snapshot directory if needed."""
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)


class SessionManager:
    """
    Session Manager - connects, navigates and gates on product content.

    Acquisition steps (connect, open page, navigate, soft-block check, load
    gate) are retried under the `RetryPolicy`. The content gate that follows
    is fatal: a page that loaded but never rendered its product block is a
    CAPTCHA or a layout change, not a transient block.
    """

    def __init__(
        self,
        browser: Optional[RemoteBrowser] = None,
        policy: Optional[RetryPolicy] = None,
        signature: Optional[SoftBlockSignature] = None,
        selectors: PageSelectors = DEFAULT_SELECTORS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        snapshot_dir: Optional[str] = None,
    ):
        self.browser = browser or RemoteBrowser()
        self.policy = policy or RetryPolicy.from_config()
        self.signature = signature or SoftBlockSignature.from_config()
        self.selectors = selectors
        self.sleep = sleep
        self.snapshot_dir = snapshot_dir or config.SNAPSHOT_DIR
        self.logger = LayerLogger("session_manager")

    def prepare_url(self, url: str) -> str:
        """Normalize the host and force the locale parameters."""
        normalized = normalize_url(url)
        if normalized != url:
            self.logger.log_decision(
                decision="rewrite_host",
                reason="Marketplace subdomain mapped to canonical host",
                url=url,
                normalized=normalized,
            )
        try:
            return apply_locale_params(normalized)
        except ValueError as e:
            self.logger.log_fallback(
                from_source="locale_url",
                to_source="raw_url",
                reason=f"URL could not be parsed: {describe_error(e)}",
                url=url,
            )
            return normalized

    async def acquire(self, url: str) -> BrowserSession:
        """
        Return a session whose page shows the rendered product.

        Raises:
            SessionAcquisitionError: every attempt failed
            ContentNotReadyError: the page loaded but product content never appeared
        """
        target = self.prepare_url(url)
        self.logger.log_action("acquire_session", "started", url=target)

        session = await self._acquire_with_retries(target)

        try:
            await self._wait_for_content(session)
        except BaseException:
            await self._release_quietly(session)
            raise

        await self._trigger_lazy_loading(session)
        self.logger.log_action("acquire_session", "completed", url=target)
        return session

    async def _acquire_with_retries(self, url: str) -> BrowserSession:
        last_error: Optional[BaseException] = None
        max_attempts = max(1, self.policy.max_attempts)
        attempt = 0

        while attempt < max_attempts:
            attempt += 1
            session: Optional[BrowserSession] = None
            try:
                session = await self.browser.connect()
                await self._open_and_navigate(session, url)
                return session
            except Exception as e:
                last_error = e
                if session is not None:
                    await self._release_quietly(session)

                if not self.policy.is_retryable(e):
                    self.logger.log_error(describe_error(e), error_type="fatal_acquisition", attempt=attempt)
                    break

                if attempt < max_attempts:
                    backoff = self.policy.backoff_for(attempt)
                    self.logger.log_retry(
                        attempt=attempt,
                        max_attempts=max_attempts,
                        error=describe_error(e),
                        backoff_seconds=backoff,
                        error_type=type(e).__name__,
                    )
                    await self.sleep(backoff)

        self.logger.log_error(
            describe_error(last_error),
            error_type="retries_exhausted",
            attempts=attempt,
        )
        raise SessionAcquisitionError(attempt, last_error)

    async def _open_and_navigate(self, session: BrowserSession, url: str) -> None:
        page = await session.open_page()
        self.logger.log_action("navigate", "started", url=url)
        await page.goto(url, timeout_ms=config.NAVIGATION_TIMEOUT_MS)

        phrase = self.signature.matches(visible_text(await page.content()))
        if phrase:
            raise SoftBlockError(
                f"Soft block page detected (signature {self.signature.version}): '{phrase}'"
            )

        if not await page.wait_for(self.selectors.load_gate, config.LOAD_GATE_TIMEOUT_MS):
            raise TimeoutError(
                f"Product page did not load: '{self.selectors.load_gate}' "
                f"missing after {config.LOAD_GATE_TIMEOUT_MS}ms"
            )
        self.logger.log_action("navigate", "completed", url=url)

    async def _wait_for_content(self, session: BrowserSession) -> None:
        if await session.page.wait_for(self.selectors.content_ready, config.CONTENT_TIMEOUT_MS):
            return

        message = (
            f"Product content did not render: '{self.selectors.content_ready}' "
            f"missing after {config.CONTENT_TIMEOUT_MS}ms"
        )
        self.logger.log_error(message, error_type="content_not_ready")
        await self.capture_snapshot(session)
        raise ContentNotReadyError(message)

    async def capture_snapshot(self, session: BrowserSession) -> Optional[str]:
        """
        Save the rendered page for offline debugging.

        Best effort: returns the HTML path, or None if nothing could be captured.
        """
        try:
            html = await session.page.content()
        except Exception as e:
            self.logger.log_error(describe_error(e), error_type="snapshot_failed")
            return None

        soup = BeautifulSoup(html, "lxml")
        page_title = soup.title.get_text(strip=True) if soup.title else None
        self.logger.logger.error(
            "diagnostic_snapshot",
            layer=self.logger.layer_name,
            page_title=page_title,
            html_excerpt=html[:2000],
        )

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        base = os.path.join(self.snapshot_dir, f"{get_trace_id()}_{stamp}")
        try:
            # File I/O off the event loop, other jobs share it
            await asyncio.to_thread(write_snapshot, self.snapshot_dir, f"{base}.html", html)
            if config.SNAPSHOT_SCREENSHOT:
                await session.page.screenshot(f"{base}.png")
        except Exception as e:
            self.logger.log_error(describe_error(e), error_type="snapshot_failed")
            return None

        self.logger.log_action("diagnostic_snapshot", "completed", path=f"{base}.html")
        return f"{base}.html"

    async def _trigger_lazy_loading(self, session: BrowserSession) -> None:
        """Scroll the page and open the description panel. Failures are logged only."""
        page = session.page
        try:
            steps = await page.scroll_through(step_px=800, pause_ms=150, max_steps=30)
            self.logger.log_action("lazy_load_scroll", "completed", steps=steps)

            for selector in self.selectors.description_nav_link:
                link = await page.find(selector)
                if link is not None:
                    await page.click(link)
                    await page.pause(500)
                    self.logger.log_action("open_description", "completed", selector=selector)
                    break
        except Exception as e:
            self.logger.log_fallback(
                from_source="lazy_loaded_page",
                to_source="initial_render",
                reason=describe_error(e),
            )

    async def _release_quietly(self, session: BrowserSession) -> None:
        try:
            await session.close()
        except Exception as e:
            self.logger.log_error(describe_error(e), error_type="browser_close_failed")
