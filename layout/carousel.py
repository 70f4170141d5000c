"""
Generic horizontal-scroll carousel for NiceGUI views.

- The item row gets a DOM id and scrolls horizontally (scrollbar hidden)
- Left/right buttons inject a small JS snippet that scrolls the row by one step
- Works for any item type: the caller supplies ``render_item``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from nicegui import ui


T = TypeVar("T")


def get_safe_dom_id(value: str) -> str:
    """Convert any string into a safe DOM id."""
    return re.sub(r"[^a-zA-Z0-9_-]", "-", value or "")


@dataclass(frozen=True)
class HorizontalScroll:
    """
    scroller_id:
        DOM id of the horizontally scrolling row.
    step_ratio:
        Fraction of the visible width scrolled per click.
    """

    scroller_id: str
    step_ratio: float = 0.8

    def js(self, direction: int) -> str:
        sign = -1 if direction < 0 else 1
        return f"""
        (function () {{
            const scroller = document.getElementById({self.scroller_id!r});
            if (!scroller) return;
            const step = Math.max(120, scroller.clientWidth * {self.step_ratio});
            scroller.scrollBy({{ left: {sign} * step, behavior: "smooth" }});
        }})();
        """

    def scroll(self, direction: int) -> None:
        ui.run_javascript(self.js(direction))


def build_carousel(key: str, items: Iterable[T], render_item: Callable[[T], None], *, title: str | None = None) -> None:
    fx = HorizontalScroll(scroller_id=f"carousel-{get_safe_dom_id(key)}")
    with ui.column().classes("w-full gap-1"):
        with ui.row().classes("w-full items-center justify-between"):
            if title:
                ui.label(title).classes("text-lg font-semibold")
            with ui.row().classes("gap-1"):
                ui.button(icon="chevron_left", on_click=lambda: fx.scroll(-1)).props("flat round dense")
                ui.button(icon="chevron_right", on_click=lambda: fx.scroll(1)).props("flat round dense")
        with ui.row().classes("w-full no-wrap gap-3 overflow-x-auto pb-2").props(f"id={fx.scroller_id}").style(
            "scrollbar-width: none; scroll-snap-type: x mandatory;"
        ):
            for item in items:
                with ui.element("div").classes("shrink-0").style("scroll-snap-align: start;"):
                    render_item(item)
