"""
Task models for the Product Page Scraper.
A task is one asynchronous scrape job and its lifecycle record.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel

from pdp_scraper.models.product import ProductRecord


class TaskStatus(str, Enum):
    """Job status. PENDING moves exactly once to one of the terminal states."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class Task(BaseModel):
    """Lifecycle record of a scrape job, served as-is by the polling endpoint."""
    id: str
    url: str
    status: TaskStatus = TaskStatus.PENDING
    startedAt: str
    completedAt: Optional[str] = None
    data: Optional[ProductRecord] = None
    error: Optional[str] = None
