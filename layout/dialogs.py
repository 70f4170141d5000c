import inspect

from nicegui import ui


HEADER_COLORS = {"info": "bg-primary", "warning": "bg-orange", "success": "bg-green", "error": "bg-negative"}


def confirm_dialog(title: str, message: str, on_yes, *, mode: str = "error", yes_label: str = "Yes") -> None:
	"""Modal yes/cancel question; ``on_yes`` may be sync or async."""
	bg_class = HEADER_COLORS.get(mode, "bg-primary")
	with ui.dialog() as d, ui.card().classes("w-[480px] p-0"):
		with ui.row().classes(f"w-full p-2 {bg_class}"):
			ui.label(title).classes("text-lg font-semibold text-white")
		with ui.column().classes("w-full px-4"):
			ui.label(message).classes("text-sm opacity-80")
			with ui.row().classes("w-full items-center justify-end gap-2 py-2"):
				ui.button("Cancel", on_click=d.close).props("flat no-caps")

				async def _yes() -> None:
					d.close()
					result = on_yes()
					if inspect.isawaitable(result):
						await result

				ui.button(yes_label, on_click=_yes).props("flat no-caps").classes(f"{bg_class} text-white")
	d.on("hide", lambda: d.delete())
	d.open()
