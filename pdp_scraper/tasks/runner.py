"""
Background execution for scrape jobs.

Jobs are fire-and-forget: `submit` schedules the coroutine on the running
event loop and returns its handle immediately. There is no bound on the
number of concurrent jobs and no cancellation; each job runs to completion.
"""
import asyncio
from typing import Coroutine, Set

from pdp_scraper.utils.logger import LayerLogger


class BackgroundRunner:
    """Schedules job coroutines and keeps them referenced until they finish."""

    def __init__(self):
        self._running: Set[asyncio.Task] = set()
        self.logger = LayerLogger("background_runner")

    @property
    def active(self) -> int:
        return len(self._running)

    def submit(self, coro: Coroutine, name: str) -> asyncio.Task:
        """Start `coro` in the background and return its handle."""
        handle = asyncio.get_running_loop().create_task(coro, name=name)
        self._running.add(handle)
        handle.add_done_callback(self._on_done)
        self.logger.log_action("job_dispatch", "completed", job=name, active_jobs=self.active)
        return handle

    def _on_done(self, handle: asyncio.Task) -> None:
        self._running.discard(handle)
        if handle.cancelled():
            return
        error = handle.exception()
        if error is not None:
            self.logger.log_error(
                str(error),
                error_type=type(error).__name__,
                job=handle.get_name(),
            )
