from __future__ import annotations

from typing import Any

from loguru import logger
from nicegui import ui

from layout.app_style import button_classes, button_props, panel_classes, section_subtitle_classes, section_title_classes
from layout.context import PageContext
from layout.formatters import format_date, format_price
from layout.page_scaffold import build_page
from services import dashboard_service, product_service
from services.api_client import ApiError, error_message
from services.i18n import t


TIME_RANGE_LABELS = {
    "all": "All time",
    "1d": "Last 24 hours",
    "7d": "Last 7 days",
    "30d": "Last 30 days",
    "90d": "Last 90 days",
    "1y": "Last year",
}

RECENT_ACTIVITY_LIMIT = 10


def load_dashboard(api, time_range: str) -> dict[str, Any]:
    """All dashboard sections for one time range, in one blocking call."""
    return {
        "stats": dashboard_service.get_dashboard_stats(api, time_range),
        "activity": dashboard_service.get_recent_activity(api, RECENT_ACTIVITY_LIMIT),
        "analytics": product_service.get_product_analytics(api, time_range),
        "top": product_service.get_top_products(api, time_range),
    }


def _stat_card(title: str, value: Any, hint: str = "", icon: str = "insights") -> None:
    with ui.card().classes(panel_classes() + " min-w-[200px] flex-1"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label(title).classes(section_subtitle_classes())
            ui.icon(icon).classes("text-xl text-primary")
        ui.label(str(value)).classes("text-2xl font-bold")
        if hint:
            ui.label(hint).classes("text-xs text-gray-500")


def _bar_chart(title: str, rows: list[dict], value_key: str = "count") -> None:
    with ui.card().classes(panel_classes() + " flex-1 min-w-[320px]"):
        ui.label(title).classes(section_title_classes())
        ui.echart({
            "tooltip": {"trigger": "axis"},
            "xAxis": {"type": "category", "data": [str(r.get("_id", "")) for r in rows]},
            "yAxis": {"type": "value"},
            "series": [{"type": "bar", "data": [r.get(value_key, 0) for r in rows]}],
        }).classes("w-full h-64")


def _top_list(title: str, rows: list[dict]) -> None:
    with ui.card().classes(panel_classes() + " flex-1 min-w-[320px]"):
        ui.label(title).classes(section_title_classes())
        if not rows:
            ui.label("No data").classes("text-sm text-gray-500")
        for row in rows[:10]:
            product = row.get("product") or {}
            with ui.row().classes("w-full justify-between no-wrap"):
                ui.label(product.get("name") or "Unknown").classes("text-sm line-clamp-1")
                ui.label(str(row.get("count", 0))).classes("text-sm font-semibold")


def _render_sections(data: dict[str, Any]) -> None:
    stats = data.get("stats") or {}
    overview = stats.get("overview") or {}
    analytics = data.get("analytics") or {}
    activity = data.get("activity") or {}
    top = data.get("top") or {}

    with ui.row().classes("w-full gap-4"):
        _stat_card("Product views", analytics.get("totalView", 0), icon="visibility")
        _stat_card("Store redirects", analytics.get("totalRedirect", 0), icon="open_in_new")
        rate = float(analytics.get("redirectRate") or 0) * 100
        _stat_card("Redirect rate", f"{rate:.2f}%", icon="percent")

    with ui.row().classes("w-full gap-4"):
        _stat_card(
            "Products", overview.get("totalProducts", 0),
            f"{overview.get('recentProducts', 0)} new in range", icon="inventory_2",
        )
        _stat_card("Users", overview.get("totalUsers", 0), icon="group")
        _stat_card(
            "In stock", overview.get("activeProducts", 0),
            f"{overview.get('stockPercentage', 0)}% of all products", icon="check_circle",
        )
        _stat_card("Out of stock", overview.get("outOfStockProducts", 0), icon="remove_shopping_cart")

    with ui.row().classes("w-full gap-4"):
        _bar_chart("Views per day", analytics.get("viewStats") or [])
        _bar_chart("Redirects per day", analytics.get("redirectStats") or [])

    with ui.row().classes("w-full gap-4"):
        _bar_chart("Products per category", stats.get("categoryStats") or [])
        _bar_chart("Products per store", (stats.get("storeStats") or [])[:5])

    series = stats.get("timeSeriesData") or []
    if series:
        with ui.card().classes(panel_classes()):
            ui.label("Catalogue over time").classes(section_title_classes())
            ui.echart({
                "tooltip": {"trigger": "axis"},
                "legend": {},
                "xAxis": {"type": "category", "data": [s.get("date", "") for s in series]},
                "yAxis": {"type": "value"},
                "series": [
                    {"name": "Products", "type": "line", "data": [s.get("totalProducts", 0) for s in series]},
                    {"name": "In stock", "type": "line", "data": [s.get("inStockProducts", 0) for s in series]},
                    {"name": "New users", "type": "line", "data": [s.get("newUsers", 0) for s in series]},
                ],
            }).classes("w-full h-72")

    price_range = stats.get("priceRange") or {}
    if price_range.get("highest") and price_range.get("lowest"):
        with ui.row().classes("w-full gap-4"):
            for label, item in (("Most expensive", price_range["highest"]), ("Cheapest", price_range["lowest"])):
                with ui.card().classes(panel_classes() + " flex-1"):
                    ui.label(label).classes(section_subtitle_classes())
                    ui.label(item.get("name", "")).classes("font-semibold")
                    ui.label(format_price(item.get("price"))).classes("text-xl font-bold text-primary")
                    ui.label(f"{item.get('store', '')} • {item.get('category', '')}").classes("text-xs text-gray-500")

    with ui.row().classes("w-full gap-4"):
        _top_list("Most viewed", top.get("topViewed") or [])
        _top_list("Most redirected", top.get("topRedirected") or [])

    with ui.row().classes("w-full gap-4"):
        with ui.card().classes(panel_classes() + " flex-1"):
            ui.label("Recently updated products").classes(section_title_classes())
            for product in activity.get("recentProducts") or []:
                with ui.row().classes("w-full justify-between no-wrap text-sm"):
                    ui.label(product.get("name", "")).classes("line-clamp-1")
                    ui.label(format_date(product.get("updatedAt"))).classes("text-gray-500")
        with ui.card().classes(panel_classes() + " flex-1"):
            ui.label("New users").classes(section_title_classes())
            for user in activity.get("recentUsers") or []:
                with ui.row().classes("w-full justify-between no-wrap text-sm"):
                    ui.label(f"{user.get('name', '')} ({user.get('email', '')})").classes("line-clamp-1")
                    ui.label(format_date(user.get("createdAt"))).classes("text-gray-500")


def render(container: ui.element, ctx: PageContext) -> None:
    state: dict[str, Any] = {"range": "all", "data": None, "loading": True, "seq": 0, "alive": True}
    ctx.on_unmount(lambda: state.update(alive=False))

    @ui.refreshable
    def sections() -> None:
        if state["data"] is None:
            with ui.column().classes("w-full items-center mt-16 gap-2"):
                if state["loading"]:
                    ui.spinner(size="lg")
                    ui.label(t("dashboard.loading", "Loading dashboard..."))
                else:
                    ui.icon("error_outline").classes("text-5xl text-negative")
                    ui.label(t("dashboard.load_failed", "Failed to load dashboard data")).classes("text-negative")
                    ui.button("Retry", on_click=load).props(button_props("primary")).classes(button_classes())
            return
        _render_sections(state["data"])

    async def load() -> None:
        state["seq"] += 1
        seq = state["seq"]
        state["loading"] = True
        if state["data"] is None:
            sections.refresh()
        try:
            data = await ctx.io(load_dashboard, ctx.api, state["range"])
        except ApiError as ex:
            if seq == state["seq"] and state["alive"]:
                logger.warning(f"[dashboard.load] - load_failed - range={state['range']} error={ex!r}")
                ctx.notify(error_message(ex, t("dashboard.load_failed", "Failed to load dashboard data")), "negative")
                state["loading"] = False
                sections.refresh()
            return
        if seq != state["seq"] or not state["alive"]:
            return
        state["data"] = data
        state["loading"] = False
        sections.refresh()

    async def on_range_change(e) -> None:
        state["range"] = e.value
        await load()

    def toolbar(_row: ui.element) -> None:
        ui.select(TIME_RANGE_LABELS, value=state["range"], on_change=on_range_change).props(
            "outlined dense"
        ).classes("min-w-[160px]")
        ui.button("Refresh", icon="refresh", on_click=load).props(button_props("neutral")).classes(button_classes())

    def build_content(_parent: ui.element) -> None:
        sections()
        ui.timer(0, load, once=True)

    build_page(
        container,
        title=t("nav.admin_dashboard", "Dashboard"),
        subtitle=t("dashboard.subtitle", "System overview and statistics"),
        content=build_content,
        toolbar=toolbar,
    )
