"""
Unit tests for the task orchestrator.

The session manager is replaced by a stub; extraction runs against fake pages.
"""
import pytest

from pdp_scraper.layers.extraction import FieldExtractor
from pdp_scraper.layers.orchestrator import TaskOrchestrator
from pdp_scraper.layers.session import ContentNotReadyError, SessionAcquisitionError
from pdp_scraper.models.task import TaskStatus
from pdp_scraper.tasks.store import TaskStore
from tests.fakes import SEL, FakeElement, FakeSession, make_variant_page


class StubSessionManager:
    def __init__(self, session=None, error=None):
        self.session = session
        self.error = error
        self.urls = []

    async def acquire(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        await self.session.open_page()
        return self.session


class ExplodingExtractor(FieldExtractor):
    async def extract_static(self, page):
        raise RuntimeError("Execution context was destroyed")


def product_session(colors=("Black", "White"), sizes=("S", "M")):
    page = make_variant_page(list(colors), list(sizes))
    page.elements[SEL.title] = [FakeElement(text="Earbuds")]
    page.elements[SEL.main_images] = [FakeElement(attrs={"src": "https://i/1.jpg_.avif"})]
    return FakeSession(page)


class TestOrchestrator:

    @pytest.mark.asyncio
    async def test_completed_run(self):
        store = TaskStore()
        task = store.create("https://www.aliexpress.com/item/1.html")
        session = product_session()
        orchestrator = TaskOrchestrator(store, session_manager=StubSessionManager(session))

        await orchestrator.run(task.id, task.url)

        done = store.get(task.id)
        assert done.status == TaskStatus.COMPLETED
        assert done.completedAt is not None
        assert done.data.title == "Earbuds"
        assert len(done.data.priceVariations) == 4
        assert done.data.currentPrice == done.data.priceVariations[0].currentPrice
        assert done.data.description.images == ["https://i/1.jpg"]
        assert session.close_calls == 1

    @pytest.mark.asyncio
    async def test_acquisition_failure_recorded(self):
        store = TaskStore()
        task = store.create("u")
        error = SessionAcquisitionError(3, ConnectionError("ws refused"))
        orchestrator = TaskOrchestrator(store, session_manager=StubSessionManager(error=error))

        await orchestrator.run(task.id, task.url)

        failed = store.get(task.id)
        assert failed.status == TaskStatus.FAILED
        assert "3 attempt(s)" in failed.error
        assert "ws refused" in failed.error
        assert failed.data is None

    @pytest.mark.asyncio
    async def test_content_failure_recorded(self):
        store = TaskStore()
        task = store.create("u")
        error = ContentNotReadyError("Product content did not render")
        orchestrator = TaskOrchestrator(store, session_manager=StubSessionManager(error=error))

        await orchestrator.run(task.id, task.url)

        assert store.get(task.id).error == "Product content did not render"

    @pytest.mark.asyncio
    async def test_extraction_failure_releases_session_once(self):
        store = TaskStore()
        task = store.create("u")
        session = product_session()
        orchestrator = TaskOrchestrator(
            store,
            session_manager=StubSessionManager(session),
            extractor=ExplodingExtractor(),
        )

        await orchestrator.run(task.id, task.url)

        failed = store.get(task.id)
        assert failed.status == TaskStatus.FAILED
        assert failed.error == "Execution context was destroyed"
        assert session.close_calls == 1

    @pytest.mark.asyncio
    async def test_variant_walk_failure_releases_session_once(self):
        store = TaskStore()
        task = store.create("u")
        session = product_session(colors=("Black", "White", "Red"))

        def detached():
            raise RuntimeError("Element is not attached to the DOM")

        session._page.elements[SEL.color_option][1].on_click = detached
        orchestrator = TaskOrchestrator(store, session_manager=StubSessionManager(session))

        await orchestrator.run(task.id, task.url)

        failed = store.get(task.id)
        assert failed.status == TaskStatus.FAILED
        assert failed.error == "Element is not attached to the DOM"
        assert failed.data is None
        # First color was walked before the failure
        assert session._page.elements[SEL.color_option][0].clicks == 1
        assert session.close_calls == 1

    @pytest.mark.asyncio
    async def test_empty_error_message_uses_exception_type(self):
        class SilentExtractor(FieldExtractor):
            async def extract_static(self, page):
                raise KeyError()

        store = TaskStore()
        task = store.create("u")
        orchestrator = TaskOrchestrator(
            store,
            session_manager=StubSessionManager(product_session()),
            extractor=SilentExtractor(),
        )

        await orchestrator.run(task.id, task.url)

        assert store.get(task.id).error == "KeyError"

    @pytest.mark.asyncio
    async def test_product_without_variants(self):
        store = TaskStore()
        task = store.create("u")
        session = product_session(colors=(), sizes=())
        orchestrator = TaskOrchestrator(store, session_manager=StubSessionManager(session))

        await orchestrator.run(task.id, task.url)

        data = store.get(task.id).data
        assert len(data.priceVariations) == 1
        assert data.priceVariations[0].color is None
        assert data.currentPrice == "US $10.00"
