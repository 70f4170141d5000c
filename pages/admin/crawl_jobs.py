"""
Crawler console panels backed by pollers:

- stats counters (auto-refresh can be switched off)
- paginated job history with a log viewer that follows running jobs
"""

from __future__ import annotations

from typing import Any

from nicegui import ui

from layout.app_style import JOB_STATUS_COLORS, LOG_LEVEL_CLASSES, panel_classes, section_title_classes
from layout.context import PageContext
from layout.dialogs import confirm_dialog
from layout.formatters import format_date, format_duration, short_id
from services import crawler_service
from services.app_config import get_app_config
from services.i18n import t
from services.models import CrawlJob, CrawlStats, JobLog
from services.polling import JobLogFollower, Poller, run_command


STAT_TILES = (
	("total", "Total jobs", "work_history", "text-gray-800"),
	("running", "Running", "sync", "text-primary"),
	("completed", "Completed", "task_alt", "text-positive"),
	("failed", "Failed", "error", "text-negative"),
	("cancelled", "Cancelled", "block", "text-orange"),
)


def build_stats_panel(ctx: PageContext) -> Poller[CrawlStats]:
	cfg = get_app_config().polling
	state: dict[str, Any] = {"stats": None}

	@ui.refreshable
	def tiles() -> None:
		stats: CrawlStats | None = state["stats"]
		with ui.row().classes("w-full gap-3"):
			for key, label, icon, color in STAT_TILES:
				with ui.card().classes(panel_classes() + " flex-1 min-w-[140px]"):
					with ui.row().classes("w-full items-center justify-between"):
						ui.label(label).classes("text-sm text-gray-500")
						ui.icon(icon).classes(f"text-xl {color}")
					if stats is None:
						ui.skeleton().classes("w-12 h-7")
					else:
						ui.label(str(getattr(stats, key))).classes(f"text-2xl font-bold {color}")

	def on_data(stats: CrawlStats) -> None:
		state["stats"] = stats
		tiles.refresh()

	poller: Poller[CrawlStats] = Poller(
		lambda: ctx.io(crawler_service.get_crawl_stats, ctx.api),
		on_data,
		interval_s=cfg.stats_interval_s,
		notify=ctx.notify,
		error_text=t("crawler.stats_failed", "Failed to load crawler statistics"),
		on_loading=lambda value: _refresh_button_loading(refresh_button, value),
		name="crawl_stats",
	)
	ctx.on_unmount(poller.stop)

	with ui.card().classes(panel_classes()):
		with ui.row().classes("w-full items-center justify-between"):
			ui.label(t("crawler.stats", "Crawler statistics")).classes(section_title_classes())
			with ui.row().classes("items-center gap-2"):
				ui.checkbox(
					t("crawler.auto_refresh", "Auto refresh"),
					value=poller.auto_refresh,
					on_change=lambda e: poller.set_auto_refresh(bool(e.value)),
				)
				refresh_button = ui.button(icon="refresh", on_click=poller.refresh).props("flat round dense")
		tiles()

	ui.timer(0, poller.start, once=True)
	return poller


def _refresh_button_loading(button: ui.button, value: bool) -> None:
	if value:
		button.props("loading")
	else:
		button.props(remove="loading")


def build_job_history(ctx: PageContext) -> Poller[tuple[int, list[CrawlJob], int]]:
	cfg = get_app_config().polling
	state: dict[str, Any] = {"page": 1, "total_pages": 1, "jobs": [], "loaded": False}

	# ---------------- log viewer ----------------
	with ui.dialog() as logs_dialog, ui.card().classes("w-[900px] max-w-full"):
		with ui.row().classes("w-full items-center justify-between"):
			logs_title = ui.label("").classes("text-lg font-semibold font-mono")
			logs_status = ui.badge("")
		logs_hint = ui.label("").classes("text-xs text-gray-500")
		log_lines: dict[str, list[JobLog]] = {"items": []}

		@ui.refreshable
		def log_view() -> None:
			with ui.scroll_area().classes("w-full h-[420px] bg-gray-50 rounded"):
				if not log_lines["items"]:
					ui.label("No logs").classes("text-sm text-gray-500 p-2")
				for entry in log_lines["items"]:
					with ui.row().classes("w-full gap-2 no-wrap font-mono text-xs"):
						ui.label(format_date(entry.timestamp)).classes("text-gray-400 shrink-0")
						ui.label(entry.level.upper()).classes(
							f"w-16 shrink-0 {LOG_LEVEL_CLASSES.get(entry.level, 'text-gray-700')}"
						)
						ui.label(entry.message).classes("break-all")

		log_view()
		with ui.row().classes("w-full justify-end"):
			ui.button("Close", on_click=logs_dialog.close).props("flat no-caps")

	def show_status(status: str) -> None:
		logs_status.set_text(status)
		logs_status.props(f"color={JOB_STATUS_COLORS.get(status, 'grey')}")
		logs_hint.set_text(
			f"Following live every {cfg.logs_interval_s:g}s" if status == "running" else ""
		)

	def on_logs(logs: list[JobLog]) -> None:
		log_lines["items"] = list(logs)
		log_view.refresh()

	follower = JobLogFollower(
		lambda job_id: ctx.io(crawler_service.get_crawl_job_logs, ctx.api, job_id, cfg.logs_limit),
		lambda job_id: ctx.io(crawler_service.get_crawl_job_detail, ctx.api, job_id),
		on_logs,
		interval_s=cfg.logs_interval_s,
		notify=ctx.notify,
		on_status=show_status,
		error_text=t("crawler.logs_failed", "Failed to load logs"),
	)
	logs_dialog.on("hide", lambda: follower.close())
	ctx.on_unmount(follower.close)

	async def open_logs(job: CrawlJob) -> None:
		logs_title.set_text(job.job_id)
		show_status(job.status)
		log_lines["items"] = []
		log_view.refresh()
		logs_dialog.open()
		await follower.open(job)

	# ---------------- job table ----------------
	async def load() -> tuple[int, list[CrawlJob], int]:
		page = state["page"]
		jobs, total_pages = await ctx.io(
			crawler_service.get_crawl_jobs, ctx.api, page=page, limit=cfg.jobs_page_size
		)
		return page, jobs, total_pages

	def on_data(result: tuple[int, list[CrawlJob], int]) -> None:
		page, jobs, total_pages = result
		# a poll issued before a page change must not overwrite the new page
		if page != state["page"]:
			return
		state["jobs"] = jobs
		state["total_pages"] = total_pages
		state["loaded"] = True
		table.refresh()

	poller: Poller[tuple[int, list[CrawlJob], int]] = Poller(
		load,
		on_data,
		interval_s=cfg.jobs_interval_s,
		notify=ctx.notify,
		error_text=t("crawler.jobs_failed", "Failed to load crawl jobs"),
		on_loading=lambda value: _refresh_button_loading(refresh_button, value),
		name="crawl_jobs",
	)
	ctx.on_unmount(poller.stop)

	async def go_to(page: int) -> None:
		state["page"] = max(1, min(page, state["total_pages"]))
		await poller.refresh()

	def ask_cancel(job: CrawlJob) -> None:
		async def _cancel() -> None:
			await run_command(
				lambda: ctx.io(crawler_service.cancel_crawl_job, ctx.api, job.job_id),
				notify=ctx.notify,
				success_message=t("crawler.cancel_ok", "Job cancelled"),
				error_text=t("crawler.cancel_failed", "Failed to cancel job"),
				refresh=poller.refresh,
			)

		with panel:
			confirm_dialog("Cancel job", f"Cancel crawl job {job.job_id}?", _cancel, mode="warning", yes_label="Cancel job")

	@ui.refreshable
	def table() -> None:
		if not state["loaded"]:
			ui.spinner()
			return
		if not state["jobs"]:
			ui.label("No crawl jobs yet").classes("text-sm text-gray-500")
			return
		with ui.row().classes("w-full px-2 py-1 text-xs uppercase text-gray-500 no-wrap border-b"):
			ui.label("Job ID").classes("w-48")
			ui.label("Source").classes("w-32")
			ui.label("Category").classes("w-24")
			ui.label("Status").classes("w-28")
			ui.label("Items").classes("w-40")
			ui.label("Duration").classes("w-24")
			ui.label("Started").classes("flex-1")
			ui.label("").classes("w-24")
		for job in state["jobs"]:
			with ui.row().classes("w-full px-2 py-1 items-center no-wrap border-b text-sm"):
				ui.label(short_id(job.job_id)).classes("w-48 font-mono text-xs").tooltip(job.job_id)
				ui.label(job.source).classes("w-32")
				ui.label(job.category).classes("w-24")
				with ui.element("div").classes("w-28"):
					ui.badge(job.status, color=JOB_STATUS_COLORS.get(job.status, "grey"))
					if job.is_running and job.progress:
						ui.linear_progress(value=min(1.0, job.progress / 100), show_value=False).classes("mt-1")
				ui.label(f"+{job.new_items} / ~{job.updated_items} / !{job.failed_items}").classes("w-40 text-xs")
				ui.label(format_duration(job.duration)).classes("w-24")
				ui.label(format_date(job.started_at)).classes("flex-1 text-xs")
				with ui.row().classes("w-24 justify-end gap-1 no-wrap"):
					ui.button(icon="article", on_click=lambda j=job: open_logs(j)).props("flat round dense").tooltip("Logs")
					if job.is_cancellable:
						ui.button(icon="cancel", on_click=lambda j=job: ask_cancel(j)).props(
							"flat round dense color=negative"
						).tooltip("Cancel")

		with ui.row().classes("w-full justify-center items-center gap-2 mt-2"):
			page, total = state["page"], state["total_pages"]
			ui.button(icon="chevron_left", on_click=lambda: go_to(page - 1)).props("flat round dense").set_enabled(page > 1)
			ui.label(f"Page {page} / {total}").classes("text-sm")
			ui.button(icon="chevron_right", on_click=lambda: go_to(page + 1)).props("flat round dense").set_enabled(
				page < total
			)

	with ui.card().classes(panel_classes()) as panel:
		with ui.row().classes("w-full items-center justify-between"):
			ui.label(t("crawler.jobs", "Job history")).classes(section_title_classes())
			with ui.row().classes("items-center gap-2"):
				ui.checkbox(
					t("crawler.auto_refresh", "Auto refresh"),
					value=poller.auto_refresh,
					on_change=lambda e: poller.set_auto_refresh(bool(e.value)),
				)
				refresh_button = ui.button(icon="refresh", on_click=poller.refresh).props("flat round dense")
		table()

	ui.timer(0, poller.start, once=True)
	return poller
