"""Tasks package initialization."""
from pdp_scraper.tasks.store import TaskStore, DuplicateTaskError, TaskTransitionError
from pdp_scraper.tasks.runner import BackgroundRunner

__all__ = [
    "TaskStore",
    "DuplicateTaskError",
    "TaskTransitionError",
    "BackgroundRunner",
]
