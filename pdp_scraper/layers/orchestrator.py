"""
Orchestration Layer for the Product Page Scraper.
Runs one scrape job end to end and commits its outcome to the task store.
"""
from typing import Optional

from pdp_scraper.adapters.browser import BrowserSession
from pdp_scraper.generators.record_generator import RecordGenerator
from pdp_scraper.layers.extraction import FieldExtractor
from pdp_scraper.layers.session import SessionManager, describe_error
from pdp_scraper.layers.variants import VariantWalker
from pdp_scraper.tasks.store import TaskStore
from pdp_scraper.utils.logger import LayerLogger, set_trace_id


class TaskOrchestrator:
    """
    Task Orchestrator - session -> static fields -> variants -> record.

    The orchestrator is the only writer of its task's store entry. Whatever
    step fails, the task ends `failed` with a readable message, and an
    acquired browser session is released exactly once.
    """

    def __init__(
        self,
        store: TaskStore,
        session_manager: Optional[SessionManager] = None,
        extractor: Optional[FieldExtractor] = None,
        walker: Optional[VariantWalker] = None,
        generator: Optional[RecordGenerator] = None,
    ):
        self.store = store
        self.session_manager = session_manager or SessionManager()
        self.extractor = extractor or FieldExtractor()
        self.walker = walker or VariantWalker()
        self.generator = generator or RecordGenerator()
        self.logger = LayerLogger("task_orchestrator")

    async def run(self, task_id: str, url: str) -> None:
        """Execute the job. Never raises for scrape failures; they are recorded on the task."""
        set_trace_id(task_id)
        self.logger.log_action("scrape", "started", task_id=task_id, url=url)

        try:
            session = await self.session_manager.acquire(url)
        except Exception as e:
            self._record_failure(task_id, e, stage="session")
            return

        try:
            record = await self._extract(session)
        except Exception as e:
            self._record_failure(task_id, e, stage="extraction")
            return
        finally:
            await self._release(session)

        self.store.complete(task_id, record)
        self.logger.log_action(
            "scrape",
            "completed",
            task_id=task_id,
            title=record.title,
            variants_count=len(record.priceVariations),
            current_price=record.currentPrice,
        )

    async def _extract(self, session: BrowserSession):
        static = await self.extractor.extract_static(session.page)
        variants = await self.walker.walk(session.page)
        return self.generator.assemble(static, variants)

    def _record_failure(self, task_id: str, error: BaseException, stage: str) -> None:
        message = describe_error(error)
        self.logger.log_error(message, error_type=type(error).__name__, stage=stage, task_id=task_id)
        self.store.fail(task_id, message)

    async def _release(self, session: BrowserSession) -> None:
        try:
            await session.close()
        except Exception as e:
            self.logger.log_error(describe_error(e), error_type="browser_close_failed")
