"""
In-memory task store for the Product Page Scraper.

Concurrency contract:
- one writer per key: only the orchestrator run of a task moves it to a
  terminal state, and only once
- any number of readers: `get` returns a snapshot copy, never the live entry
- a lock guards the map, so writers to different keys never interfere

State lives for the lifetime of the process; nothing is persisted or evicted.
"""
import threading
import uuid
from typing import Dict, Optional

from pdp_scraper.models.product import ProductRecord
from pdp_scraper.models.task import Task, TaskStatus, utc_now


class DuplicateTaskError(Exception):
    """A task with this id already exists."""


class TaskTransitionError(Exception):
    """The task is unknown or already in a terminal state."""


class TaskStore:
    """Process-wide map from task id to task state."""

    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def create(self, url: str, task_id: Optional[str] = None) -> Task:
        """Register a new pending task."""
        task_id = task_id or f"task_{uuid.uuid4()}"
        task = Task(id=task_id, url=url, status=TaskStatus.PENDING, startedAt=utc_now())
        with self._lock:
            if task_id in self._tasks:
                raise DuplicateTaskError(f"Task {task_id} already exists")
            self._tasks[task_id] = task
        return task.model_copy(deep=True)

    def get(self, task_id: str) -> Optional[Task]:
        """Snapshot of the task, or None if the id is unknown."""
        with self._lock:
            task = self._tasks.get(task_id)
            return task.model_copy(deep=True) if task else None

    def complete(self, task_id: str, data: ProductRecord) -> Task:
        return self._finish(task_id, status=TaskStatus.COMPLETED, data=data)

    def fail(self, task_id: str, error: str) -> Task:
        return self._finish(task_id, status=TaskStatus.FAILED, error=error)

    def _finish(self, task_id: str, **update) -> Task:
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskTransitionError(f"Unknown task {task_id}")
            if current.status.is_terminal:
                raise TaskTransitionError(
                    f"Task {task_id} is already {current.status.value}"
                )
            # Replace the entry instead of mutating it, readers never see a half-written task
            finished = current.model_copy(update={"completedAt": utc_now(), **update})
            self._tasks[task_id] = finished
            return finished.model_copy(deep=True)
