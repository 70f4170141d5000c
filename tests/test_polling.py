from __future__ import annotations

import asyncio
import unittest

from services.api_client import ApiError
from services.models import CrawlJob, JobLog
from services.polling import JobLogFollower, Poller, run_command


TICK = 0.03


class CountingLoad:
    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    async def __call__(self) -> int:
        self.calls += 1
        if self.fail:
            raise ApiError(503, "Crawler service unavailable")
        return self.calls


class PollerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.load = CountingLoad()
        self.data: list[int] = []
        self.loading: list[bool] = []
        self.notes: list[tuple[str, str]] = []
        self.poller = Poller(
            self.load,
            self.data.append,
            interval_s=TICK,
            notify=lambda message, kind: self.notes.append((message, kind)),
            error_text="Failed to load jobs",
            on_loading=self.loading.append,
            name="test",
        )

    async def asyncTearDown(self) -> None:
        self.poller.stop()

    async def test_start_loads_in_foreground_then_polls(self) -> None:
        await self.poller.start()
        self.assertEqual(self.data, [1])
        self.assertEqual(self.loading, [True, False])

        await asyncio.sleep(TICK * 3.5)
        self.assertGreaterEqual(len(self.data), 3)
        # silent polls never touch the loading indicator
        self.assertEqual(self.loading, [True, False])

    async def test_auto_refresh_off_stops_polling(self) -> None:
        await self.poller.start()
        self.poller.set_auto_refresh(False)
        self.assertFalse(self.poller.running)
        calls = self.load.calls
        await asyncio.sleep(TICK * 3)
        self.assertEqual(self.load.calls, calls)

    async def test_auto_refresh_on_loads_immediately(self) -> None:
        self.poller.auto_refresh = False
        await self.poller.start()
        self.assertEqual(self.load.calls, 1)

        self.poller.set_auto_refresh(True)
        await asyncio.sleep(TICK / 3)
        self.assertEqual(self.load.calls, 2)
        self.assertTrue(self.poller.running)

    async def test_stop_prevents_further_commits(self) -> None:
        await self.poller.start()
        self.poller.stop()
        await asyncio.sleep(TICK * 3)
        self.assertEqual(self.data, [1])
        self.assertFalse(await self.poller.refresh())

    async def test_foreground_failure_is_notified(self) -> None:
        self.load.fail = True
        self.assertFalse(await self.poller.refresh())
        self.assertEqual(self.notes, [("Crawler service unavailable", "negative")])
        self.assertEqual(self.loading, [True, False])

    async def test_silent_failures_keep_last_data(self) -> None:
        await self.poller.start()
        self.load.fail = True
        await asyncio.sleep(TICK * 3)
        self.assertEqual(self.data, [1])
        self.assertEqual(self.notes, [])
        self.assertTrue(self.poller.running)


def job(status: str) -> CrawlJob:
    return CrawlJob(id="db1", job_id="job-1", source="dienmayxanh", category="phone", status=status)


class JobLogFollowerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.statuses = ["running", "completed"]
        self.log_calls = 0
        self.job_calls = 0
        self.shown: list[int] = []
        self.status_seen: list[str] = []
        self.notes: list[tuple[str, str]] = []
        self.follower = JobLogFollower(
            self._fetch_logs,
            self._fetch_job,
            lambda logs: self.shown.append(len(logs)),
            interval_s=TICK,
            notify=lambda message, kind: self.notes.append((message, kind)),
            on_status=self.status_seen.append,
        )

    async def asyncTearDown(self) -> None:
        self.follower.close()

    async def _fetch_logs(self, job_id: str) -> list[JobLog]:
        self.log_calls += 1
        return [JobLog(timestamp="", level="info", message=f"line {i}") for i in range(self.log_calls)]

    async def _fetch_job(self, job_id: str) -> CrawlJob:
        self.job_calls += 1
        status = self.statuses.pop(0) if self.statuses else "completed"
        return job(status)

    async def test_finished_job_is_fetched_once(self) -> None:
        await self.follower.open(job("completed"))
        await asyncio.sleep(TICK * 3)
        self.assertEqual(self.log_calls, 1)
        self.assertEqual(self.job_calls, 0)
        self.assertFalse(self.follower.following)
        self.assertTrue(self.follower.is_open)

    async def test_running_job_is_followed_until_it_leaves_running(self) -> None:
        await self.follower.open(job("running"))
        self.assertTrue(self.follower.following)
        await asyncio.sleep(TICK * 6)

        # open + one tick while running + one tick that sees "completed"
        self.assertEqual(self.log_calls, 3)
        self.assertEqual(self.status_seen, ["running", "completed"])
        self.assertEqual(self.shown, [1, 2, 3])
        self.assertFalse(self.follower.following)

    async def test_close_stops_following(self) -> None:
        self.statuses = ["running"] * 100
        await self.follower.open(job("running"))
        self.follower.close()
        calls = self.log_calls
        await asyncio.sleep(TICK * 3)
        self.assertEqual(self.log_calls, calls)
        self.assertFalse(self.follower.is_open)

    async def test_initial_failure_is_notified(self) -> None:
        async def failing(_job_id):
            raise ApiError(500, "")

        follower = JobLogFollower(
            failing, self._fetch_job, lambda logs: None,
            interval_s=TICK,
            notify=lambda message, kind: self.notes.append((message, kind)),
            error_text="Failed to load logs",
        )
        await follower.open(job("running"))
        self.assertEqual(self.notes, [("Failed to load logs", "negative")])
        self.assertFalse(follower.following)


class RunCommandTests(unittest.IsolatedAsyncioTestCase):
    async def test_success_notifies_and_refreshes(self) -> None:
        notes: list[tuple[str, str]] = []
        refreshed: list[bool] = []

        async def action():
            return {"success": True, "message": "Cancelled"}

        async def refresh():
            refreshed.append(True)

        ok = await run_command(
            action,
            notify=lambda message, kind: notes.append((message, kind)),
            success_message=lambda res: res["message"],
            error_text="Failed to cancel job",
            refresh=refresh,
        )
        self.assertTrue(ok)
        self.assertEqual(notes, [("Cancelled", "positive")])
        self.assertEqual(refreshed, [True])

    async def test_api_error_skips_refresh(self) -> None:
        notes: list[tuple[str, str]] = []
        refreshed: list[bool] = []

        async def action():
            raise ApiError(404, "Job not found")

        async def refresh():
            refreshed.append(True)

        ok = await run_command(
            action,
            notify=lambda message, kind: notes.append((message, kind)),
            success_message="Job cancelled",
            error_text="Failed to cancel job",
            refresh=refresh,
        )
        self.assertFalse(ok)
        self.assertEqual(notes, [("Job not found", "negative")])
        self.assertEqual(refreshed, [])

    async def test_success_false_payload_is_a_failure(self) -> None:
        notes: list[tuple[str, str]] = []

        async def action():
            return {"success": False, "message": "Crawler already running"}

        ok = await run_command(
            action,
            notify=lambda message, kind: notes.append((message, kind)),
            success_message="Crawl finished",
            error_text="Crawl failed",
        )
        self.assertFalse(ok)
        self.assertEqual(notes, [("Crawler already running", "negative")])


if __name__ == "__main__":
    unittest.main()
