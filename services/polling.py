from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from loguru import logger

from services.api_client import ApiError, error_message
from services.models import CrawlJob, JobLog, JobStatus


T = TypeVar("T")
NotifyFn = Callable[[str, str], None]
LoadingFn = Callable[[bool], None]


class Poller(Generic[T]):
	"""
	Keeps a read-only view of a backend resource approximately fresh.

	``start()`` does one foreground load (loading indicator, failures are
	notified) and then, while auto-refresh is on, a scoped task reloads
	silently every ``interval_s``. Silent failures are dropped and the last
	good data stays on screen. ``stop()`` must be called when the view is
	unmounted; nothing is committed after that.
	"""

	def __init__(
		self,
		load: Callable[[], Awaitable[T]],
		on_data: Callable[[T], None],
		*,
		interval_s: float,
		notify: NotifyFn,
		error_text: str = "Failed to load data",
		on_loading: Optional[LoadingFn] = None,
		auto_refresh: bool = True,
		name: str = "poller",
	) -> None:
		self._load = load
		self._on_data = on_data
		self.interval_s = float(interval_s)
		self._notify = notify
		self.error_text = error_text
		self._on_loading = on_loading
		self.auto_refresh = bool(auto_refresh)
		self.name = name

		self._task: Optional[asyncio.Task] = None
		self._alive = True
		self.log = logger.bind(component=f"Poller:{name}")

	@property
	def running(self) -> bool:
		return self._task is not None and not self._task.done()

	async def start(self) -> None:
		await self.refresh()
		if self.auto_refresh:
			self._start_task(immediate=False)

	async def refresh(self) -> bool:
		"""Foreground load: loading indicator on, failure surfaced once."""
		if not self._alive:
			return False
		self._set_loading(True)
		try:
			data = await self._load()
		except ApiError as ex:
			if self._alive:
				self.log.warning(f"[refresh] - load_failed - error={ex!r}")
				self._notify(error_message(ex, self.error_text), "negative")
			return False
		except Exception:
			if self._alive:
				self.log.exception("[refresh] - load_crashed")
				self._notify(self.error_text, "negative")
			return False
		finally:
			self._set_loading(False)

		if not self._alive:
			return False
		self._on_data(data)
		return True

	async def poll_once(self) -> bool:
		"""Silent load: no indicator, failures are only logged."""
		if not self._alive:
			return False
		try:
			data = await self._load()
		except asyncio.CancelledError:
			raise
		except Exception as ex:
			self.log.debug(f"[poll_once] - silent_load_failed - error={ex!r}")
			return False
		if not self._alive:
			return False
		self._on_data(data)
		return True

	def set_auto_refresh(self, enabled: bool) -> None:
		self.auto_refresh = bool(enabled)
		if not self._alive:
			return
		if self.auto_refresh:
			self._start_task(immediate=True)
		else:
			self._cancel_task()
		self.log.debug(f"[set_auto_refresh] - auto_refresh_changed - enabled={self.auto_refresh}")

	def stop(self) -> None:
		self._alive = False
		self._cancel_task()

	# ------------------------------------------------------------------ internals

	def _start_task(self, *, immediate: bool) -> None:
		self._cancel_task()
		self._task = asyncio.get_running_loop().create_task(self._run(immediate))

	def _cancel_task(self) -> None:
		task = self._task
		self._task = None
		if task is not None and not task.done():
			task.cancel()

	async def _run(self, immediate: bool) -> None:
		if immediate:
			await self.poll_once()
		while self._alive and self.auto_refresh:
			await asyncio.sleep(self.interval_s)
			await self.poll_once()

	def _set_loading(self, value: bool) -> None:
		if self._on_loading is not None and self._alive:
			self._on_loading(value)


class JobLogFollower:
	"""
	Log viewer for one crawl job. Opening fetches the logs once; while the
	job is running, a faster task refetches logs and the job status on every
	tick and stops as soon as the status leaves "running", on any error, or
	when the viewer is closed.
	"""

	def __init__(
		self,
		fetch_logs: Callable[[str], Awaitable[list[JobLog]]],
		fetch_job: Callable[[str], Awaitable[CrawlJob]],
		on_logs: Callable[[list[JobLog]], None],
		*,
		interval_s: float,
		notify: NotifyFn,
		on_status: Optional[Callable[[str], None]] = None,
		error_text: str = "Failed to load logs",
	) -> None:
		self._fetch_logs = fetch_logs
		self._fetch_job = fetch_job
		self._on_logs = on_logs
		self._on_status = on_status
		self.interval_s = float(interval_s)
		self._notify = notify
		self.error_text = error_text

		self.job_id: str = ""
		self.status: str = ""
		self._task: Optional[asyncio.Task] = None
		self._generation = 0

	@property
	def is_open(self) -> bool:
		return bool(self.job_id)

	@property
	def following(self) -> bool:
		return self._task is not None and not self._task.done()

	async def open(self, job: CrawlJob) -> None:
		self.close()
		self._generation += 1
		generation = self._generation
		self.job_id = job.job_id
		self.status = job.status

		try:
			logs = await self._fetch_logs(job.job_id)
		except Exception as ex:
			if generation == self._generation:
				logger.warning(f"[JobLogFollower.open] - logs_failed - job_id={job.job_id} error={ex!r}")
				self._notify(error_message(ex, self.error_text), "negative")
			return

		if generation != self._generation:
			return
		self._on_logs(logs)

		if job.status == JobStatus.RUNNING.value:
			self._task = asyncio.get_running_loop().create_task(self._follow(job.job_id, generation))

	async def _follow(self, job_id: str, generation: int) -> None:
		while generation == self._generation:
			await asyncio.sleep(self.interval_s)
			try:
				logs = await self._fetch_logs(job_id)
				if generation != self._generation:
					return
				self._on_logs(logs)

				job = await self._fetch_job(job_id)
				if generation != self._generation:
					return
			except asyncio.CancelledError:
				raise
			except Exception as ex:
				logger.debug(f"[JobLogFollower._follow] - follow_stopped_on_error - job_id={job_id} error={ex!r}")
				return

			self.status = job.status
			if self._on_status is not None:
				self._on_status(job.status)
			if job.status != JobStatus.RUNNING.value:
				logger.debug(f"[JobLogFollower._follow] - job_left_running - job_id={job_id} status={job.status}")
				return

	def close(self) -> None:
		self._generation += 1
		self.job_id = ""
		task = self._task
		self._task = None
		if task is not None and not task.done():
			task.cancel()


SuccessMessage = Union[str, Callable[[Any], str]]


async def run_command(
	action: Callable[[], Awaitable[Any]],
	*,
	notify: NotifyFn,
	success_message: SuccessMessage,
	error_text: str,
	refresh: Optional[Callable[[], Awaitable[Any]]] = None,
) -> bool:
	"""
	One user command (cancel job, toggle/delete schedule, ...): one request,
	one notification, and on success a one-shot refetch of the list so that
	server-side recomputation (next run time, counters) is picked up.
	"""
	try:
		result = await action()
	except ApiError as ex:
		logger.warning(f"[run_command] - command_failed - status={ex.status} error={ex!r}")
		notify(error_message(ex, error_text), "negative")
		return False
	except Exception:
		logger.exception("[run_command] - command_crashed")
		notify(error_text, "negative")
		return False

	if isinstance(result, dict) and result.get("success") is False:
		notify(str(result.get("message") or error_text), "negative")
		return False

	text = success_message(result) if callable(success_message) else success_message
	notify(text, "positive")
	if refresh is not None:
		await refresh()
	return True
