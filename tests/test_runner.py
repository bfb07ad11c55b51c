"""
Unit tests for the background runner.
"""
import asyncio

import pytest

from pdp_scraper.tasks.runner import BackgroundRunner


class TestBackgroundRunner:

    @pytest.mark.asyncio
    async def test_submit_returns_immediately(self):
        runner = BackgroundRunner()
        started = asyncio.Event()
        release = asyncio.Event()

        async def job():
            started.set()
            await release.wait()
            return "done"

        handle = runner.submit(job(), name="task_1")

        assert not handle.done()
        assert runner.active == 1
        await started.wait()

        release.set()
        assert await handle == "done"
        await asyncio.sleep(0)
        assert runner.active == 0

    @pytest.mark.asyncio
    async def test_failed_job_is_dropped(self):
        runner = BackgroundRunner()

        async def job():
            raise RuntimeError("boom")

        handle = runner.submit(job(), name="task_2")
        with pytest.raises(RuntimeError):
            await handle
        await asyncio.sleep(0)

        assert runner.active == 0

    @pytest.mark.asyncio
    async def test_jobs_run_independently(self):
        runner = BackgroundRunner()
        results = []

        async def job(n):
            await asyncio.sleep(0.01 * (3 - n))
            results.append(n)

        handles = [runner.submit(job(n), name=f"task_{n}") for n in range(3)]
        assert runner.active == 3
        await asyncio.gather(*handles)

        assert sorted(results) == [0, 1, 2]
