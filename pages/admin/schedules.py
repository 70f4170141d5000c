from __future__ import annotations

from typing import Any, Optional

from nicegui import ui

from layout.app_style import JOB_STATUS_COLORS, button_classes, button_props, panel_classes, section_title_classes
from layout.context import PageContext
from layout.dialogs import confirm_dialog
from layout.formatters import format_date
from services import schedule_service
from services.app_config import get_app_config
from services.i18n import t
from services.models import CrawlSchedule
from services.polling import Poller, run_command


CUSTOM_PRESET = "custom"
SCHEDULE_SOURCES = {"dienmayxanh": "Điện Máy Xanh", "thegioididong": "Thế Giới Di Động"}
SCHEDULE_CATEGORIES = {"phone": "Phone", "laptop": "Laptop"}


def _preset_for(cron: str) -> str:
	return cron if cron in {value for _label, value in schedule_service.CRON_PRESETS} else CUSTOM_PRESET


def build_schedules_panel(ctx: PageContext) -> Poller[list[CrawlSchedule]]:
	cfg = get_app_config().polling
	state: dict[str, Any] = {"schedules": [], "loaded": False}

	def on_data(schedules: list[CrawlSchedule]) -> None:
		state["schedules"] = schedules
		state["loaded"] = True
		table.refresh()

	poller: Poller[list[CrawlSchedule]] = Poller(
		lambda: ctx.io(schedule_service.get_schedules, ctx.api),
		on_data,
		interval_s=cfg.schedules_interval_s,
		notify=ctx.notify,
		error_text=t("schedules.load_failed", "Failed to load crawl schedules"),
		name="crawl_schedules",
	)
	ctx.on_unmount(poller.stop)

	# ---------------- create / edit dialog ----------------
	editing: dict[str, Optional[CrawlSchedule]] = {"schedule": None}
	preset_options = {value: label for label, value in schedule_service.CRON_PRESETS}
	preset_options[CUSTOM_PRESET] = "Custom"

	with ui.dialog() as form_dialog, ui.card().classes("w-[520px] max-w-full"):
		form_title = ui.label("").classes("text-lg font-semibold")
		name_input = ui.input("Name").classes("w-full")
		with ui.row().classes("w-full gap-3 no-wrap"):
			source_select = ui.select(SCHEDULE_SOURCES, label="Source", value="dienmayxanh").classes("flex-1")
			category_select = ui.select(SCHEDULE_CATEGORIES, label="Category", value="phone").classes("flex-1")
		preset_select = ui.select(preset_options, label="Frequency", value="0 2 * * *").classes("w-full")
		cron_input = ui.input("Cron expression", value="0 2 * * *").classes("w-full font-mono")
		cron_hint = ui.label("").classes("text-xs text-gray-500")
		timezone_input = ui.input("Timezone", value=schedule_service.DEFAULT_TIMEZONE).classes("w-full")
		active_switch = ui.switch("Active", value=True)

		def _on_preset(e) -> None:
			if e.value and e.value != CUSTOM_PRESET:
				cron_input.value = e.value

		def _on_cron(e) -> None:
			cron_hint.set_text(schedule_service.cron_to_human_readable(str(e.value or "")))

		preset_select.on_value_change(_on_preset)
		cron_input.on_value_change(_on_cron)

		async def save() -> None:
			name = str(name_input.value or "").strip()
			cron = str(cron_input.value or "").strip()
			if not name or not cron:
				ctx.notify(t("schedules.required", "Name and cron expression are required"), "warning")
				return
			timezone = str(timezone_input.value or "").strip() or schedule_service.DEFAULT_TIMEZONE
			schedule = editing["schedule"]
			if schedule is not None:
				# source and category are fixed once a schedule exists
				action = lambda: ctx.io(
					schedule_service.update_schedule, ctx.api, schedule.id,
					name=name, cron_expression=cron, timezone=timezone, is_active=bool(active_switch.value),
				)
				message = t("schedules.update_ok", "Schedule updated")
			else:
				action = lambda: ctx.io(
					schedule_service.create_schedule, ctx.api,
					name=name, source=str(source_select.value), category=str(category_select.value),
					cron_expression=cron, timezone=timezone, is_active=bool(active_switch.value),
				)
				message = t("schedules.create_ok", "Schedule created")

			ok = await run_command(
				action,
				notify=ctx.notify,
				success_message=message,
				error_text=t("schedules.save_failed", "Something went wrong"),
				refresh=poller.refresh,
			)
			if ok:
				form_dialog.close()

		with ui.row().classes("w-full justify-end gap-2"):
			ui.button("Cancel", on_click=form_dialog.close).props("flat no-caps")
			ui.button("Save", icon="save", on_click=save).props(button_props("primary")).classes(button_classes())

	def open_form(schedule: Optional[CrawlSchedule] = None) -> None:
		editing["schedule"] = schedule
		form_title.set_text("Edit schedule" if schedule else "New schedule")
		name_input.value = schedule.name if schedule else ""
		source_select.value = schedule.source if schedule else "dienmayxanh"
		category_select.value = schedule.category if schedule else "phone"
		source_select.set_enabled(schedule is None)
		category_select.set_enabled(schedule is None)
		cron = schedule.cron_expression if schedule else "0 2 * * *"
		preset_select.value = _preset_for(cron)
		cron_input.value = cron
		cron_hint.set_text(schedule_service.cron_to_human_readable(cron))
		timezone_input.value = schedule.timezone if schedule else schedule_service.DEFAULT_TIMEZONE
		active_switch.value = schedule.is_active if schedule else True
		form_dialog.open()

	# ---------------- commands ----------------
	async def toggle(schedule: CrawlSchedule) -> None:
		ok = await run_command(
			lambda: ctx.io(schedule_service.toggle_schedule, ctx.api, schedule.id),
			notify=ctx.notify,
			success_message=t("schedules.toggle_ok", "Schedule status updated"),
			error_text=t("schedules.toggle_failed", "Failed to update schedule status"),
			refresh=poller.refresh,
		)
		if not ok:
			# put the switch back
			table.refresh()

	def ask_delete(schedule: CrawlSchedule) -> None:
		async def _delete() -> None:
			await run_command(
				lambda: ctx.io(schedule_service.delete_schedule, ctx.api, schedule.id),
				notify=ctx.notify,
				success_message=t("schedules.delete_ok", "Schedule deleted"),
				error_text=t("schedules.delete_failed", "Failed to delete schedule"),
				refresh=poller.refresh,
			)

		with panel:
			confirm_dialog("Delete schedule", f'Delete schedule "{schedule.name}"?', _delete, yes_label="Delete")

	@ui.refreshable
	def table() -> None:
		if not state["loaded"]:
			ui.spinner()
			return
		if not state["schedules"]:
			ui.label("No schedules yet").classes("text-sm text-gray-500")
			return
		with ui.row().classes("w-full px-2 py-1 text-xs uppercase text-gray-500 no-wrap border-b"):
			ui.label("Name").classes("flex-1")
			ui.label("Source").classes("w-32")
			ui.label("Category").classes("w-20")
			ui.label("Schedule").classes("w-48")
			ui.label("Next run").classes("w-40")
			ui.label("Last run").classes("w-44")
			ui.label("Active").classes("w-16")
			ui.label("").classes("w-20")
		for schedule in state["schedules"]:
			with ui.row().classes("w-full px-2 py-1 items-center no-wrap border-b text-sm"):
				ui.label(schedule.name).classes("flex-1 line-clamp-1")
				ui.label(schedule.source).classes("w-32")
				ui.label(schedule.category).classes("w-20")
				with ui.column().classes("w-48 gap-0"):
					ui.label(schedule_service.cron_to_human_readable(schedule.cron_expression))
					ui.label(schedule.cron_expression).classes("text-xs font-mono text-gray-500")
				ui.label(format_date(schedule.next_run_at) if schedule.is_active else "-").classes("w-40 text-xs")
				with ui.row().classes("w-44 items-center gap-1 no-wrap"):
					ui.label(format_date(schedule.last_run_at)).classes("text-xs")
					if schedule.last_status:
						ui.badge(schedule.last_status, color=JOB_STATUS_COLORS.get(schedule.last_status, "grey"))
				ui.switch(value=schedule.is_active, on_change=lambda _e, s=schedule: toggle(s)).classes("w-16")
				with ui.row().classes("w-20 justify-end gap-1 no-wrap"):
					ui.button(icon="edit", on_click=lambda s=schedule: open_form(s)).props("flat round dense")
					ui.button(icon="delete", on_click=lambda s=schedule: ask_delete(s)).props(
						"flat round dense color=negative"
					)

	with ui.card().classes(panel_classes()) as panel:
		with ui.row().classes("w-full items-center justify-between"):
			ui.label(t("schedules.title", "Crawl schedules")).classes(section_title_classes())
			with ui.row().classes("items-center gap-2"):
				ui.button(icon="refresh", on_click=poller.refresh).props("flat round dense")
				ui.button(t("schedules.new", "New schedule"), icon="add", on_click=lambda: open_form()).props(
					button_props("primary")
				).classes(button_classes())
		table()

	ui.timer(0, poller.start, once=True)
	return poller
