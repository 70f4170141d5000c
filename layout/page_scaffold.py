from __future__ import annotations

from typing import Callable, Literal, Optional
from nicegui import ui

from layout.app_style import section_subtitle_classes


ContentBuilder = Callable[[ui.element], None]
ScrollMode = Literal["scaffold", "none"]


def build_page(
	container: ui.element,
	*,
	title: str | None = None,
	subtitle: str | None = None,
	content: ContentBuilder,
	toolbar: Optional[ContentBuilder] = None,
	content_padding_classes: str = "",
	scroll_mode: ScrollMode = "scaffold",
) -> None:
	"""
	Standard page layout:

	- Fills available height (h-full + min-h-0)
	- Title row with an optional toolbar on the right (refresh buttons, toggles)
	- Scroll behavior selectable:
		- scroll_mode="scaffold": the scaffold content area scrolls (default)
		- scroll_mode="none": page content must manage its own scroll
	"""
	overflow = "overflow-auto" if scroll_mode == "scaffold" else "overflow-hidden"

	with container:
		with ui.column().classes("w-full h-full min-h-0 min-w-0"):
			if title or toolbar:
				with ui.row().classes("w-full items-center justify-between"):
					with ui.column().classes("gap-0"):
						if title:
							ui.label(title).classes("text-2xl font-bold")
						if subtitle:
							ui.label(subtitle).classes(section_subtitle_classes())
					if toolbar is not None:
						with ui.row().classes("items-center gap-2") as toolbar_row:
							toolbar(toolbar_row)

			with ui.column().classes(
				"w-full flex-1 min-h-0 min-w-0 %s %s" % (overflow, content_padding_classes or "")
			) as content_area:
				content(content_area)
