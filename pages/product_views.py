"""
Product widgets shared by the storefront listing and the admin product table:
filter bar, product card, pagination bar and the detail dialog with price history.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from loguru import logger
from nicegui import ui

from layout.app_style import button_classes, button_props, panel_classes
from layout.context import PageContext
from layout.formatters import format_change_value, format_date, format_price, page_numbers
from services import product_service
from services.api_client import ApiError, error_message
from services.app_config import get_app_config
from services.i18n import t
from services.models import CATEGORIES, SOURCES, Product, SortOrder
from services.product_filters import ProductFilterController


SORT_LABELS = {
    "": "Default",
    SortOrder.NEWEST.value: "Newest",
    SortOrder.PRICE_ASC.value: "Price: low to high",
    SortOrder.PRICE_DESC.value: "Price: high to low",
    SortOrder.BESTSELLER.value: "Best sellers",
    SortOrder.DISCOUNT.value: "Biggest discount",
}

STOCK_LABELS = {"": "Any stock", "true": "In stock", "false": "Out of stock"}


def _options(values, all_label: str) -> dict[str, str]:
    out = {"": all_label}
    out.update({v: v for v in values})
    return out


# ------------------------------------------------------------------ filter bar

def build_filter_bar(controller: ProductFilterController) -> None:
    """
    Search is live (debounced by the controller); the other inputs only edit
    the draft until "Apply" is pressed.
    """
    # widget values are reset programmatically after "Clear"; their change
    # handlers must not feed that back into the controller
    syncing = {"active": False}

    def guarded(setter: Callable[[object], None]) -> Callable:
        def _handler(e) -> None:
            if not syncing["active"]:
                setter(e.value)
        return _handler

    with ui.card().classes(panel_classes()):
        with ui.row().classes("w-full items-end gap-3"):
            search = ui.input(
                t("products.search", "Search products"),
                on_change=guarded(controller.set_search),
            ).props("clearable outlined dense").classes("min-w-[260px] flex-1")
            search.props("prepend-icon=search")

            category = ui.select(
                _options(CATEGORIES, "All categories"), value="", label="Category",
                on_change=guarded(controller.set_category),
            ).props("outlined dense").classes("min-w-[150px]")
            source = ui.select(
                _options(SOURCES, "All stores"), value="", label="Store",
                on_change=guarded(controller.set_source),
            ).props("outlined dense").classes("min-w-[150px]")
            in_stock = ui.select(
                STOCK_LABELS, value="", label="Stock",
                on_change=guarded(controller.set_in_stock),
            ).props("outlined dense").classes("min-w-[130px]")
            min_price = ui.number(
                "Min price", min=0, step=100000, on_change=guarded(controller.set_min_price),
            ).props("outlined dense").classes("w-36")
            max_price = ui.number(
                "Max price", min=0, step=100000, on_change=guarded(controller.set_max_price),
            ).props("outlined dense").classes("w-36")
            sort = ui.select(
                SORT_LABELS, value="", label="Sort",
                on_change=guarded(controller.set_sort),
            ).props("outlined dense").classes("min-w-[170px]")

            async def do_clear() -> None:
                syncing["active"] = True
                try:
                    search.value = ""
                    for widget in (category, source, in_stock, sort):
                        widget.value = ""
                    min_price.value = None
                    max_price.value = None
                finally:
                    syncing["active"] = False
                await controller.clear_filters()

            ui.button(t("products.apply", "Apply"), icon="filter_alt", on_click=controller.apply_filters).props(
                button_props("primary")
            ).classes(button_classes())
            ui.button(t("products.clear", "Clear filters"), icon="filter_alt_off", on_click=do_clear).props(
                button_props("neutral")
            ).classes(button_classes())


# ------------------------------------------------------------------ card + pagination

def product_card(
    product: Product,
    *,
    on_open: Callable[[Product], Awaitable[None]],
    on_redirect: Callable[[Product], Awaitable[None]],
    extra_actions: Optional[Callable[[Product], None]] = None,
) -> None:
    with ui.card().classes("w-56 p-0 gap-0 overflow-hidden"):
        with ui.element("div").classes("relative w-full h-44 bg-slate-100 cursor-pointer").on(
            "click", lambda p=product: on_open(p)
        ):
            if product.image_url:
                ui.image(product.image_url).props("fit=contain").classes("w-full h-full")
            else:
                ui.icon("image").classes("text-5xl text-gray-300 absolute-center")
            if product.discount:
                ui.badge(f"-{product.discount:g}%", color="negative").classes("absolute top-2 left-2")

        with ui.column().classes("w-full p-2 gap-1 text-xs"):
            ui.label(product.name).classes("font-medium line-clamp-2 cursor-pointer").on(
                "click", lambda p=product: on_open(p)
            )
            with ui.row().classes("w-full items-center justify-between"):
                ui.label(format_price(product.price)).classes("text-sm font-semibold")
                if product.rating:
                    ui.label(f"{product.rating:.1f} ★").classes("text-amber-500")
            if product.original_price and product.original_price > product.price:
                ui.label(format_price(product.original_price)).classes("line-through text-gray-400")
            with ui.row().classes("w-full items-center justify-between text-gray-500"):
                ui.label(f"{product.sold_count} sold" if product.sold_count else product.source)
                ui.badge(
                    "In stock" if product.in_stock else "Out of stock",
                    color="positive" if product.in_stock else "negative",
                ).props("outline")
            if product.promotion:
                ui.label(product.promotion).classes("text-gray-500 line-clamp-1")
            with ui.row().classes("w-full justify-between items-center"):
                ui.button("Go to store", icon="open_in_new", on_click=lambda p=product: on_redirect(p)).props(
                    "flat dense no-caps color=primary"
                )
                if extra_actions is not None:
                    extra_actions(product)


def build_pagination(controller: ProductFilterController) -> None:
    pagination = controller.pagination
    if pagination is None or pagination.total_pages <= 1:
        return

    current = pagination.current_page
    with ui.row().classes("w-full justify-center items-center gap-1 mt-2"):
        ui.button(icon="chevron_left", on_click=lambda: controller.set_page(current - 1)).props(
            "flat round dense"
        ).set_enabled(pagination.has_prev_page or current > 1)
        for number in page_numbers(current, pagination.total_pages):
            if number is None:
                ui.label("...").classes("px-2 text-gray-500")
                continue
            btn = ui.button(str(number), on_click=lambda n=number: controller.set_page(n)).props("dense no-caps")
            btn.props("unelevated color=primary" if number == current else "flat color=grey-8")
        ui.button(icon="chevron_right", on_click=lambda: controller.set_page(current + 1)).props(
            "flat round dense"
        ).set_enabled(pagination.has_next_page or current < pagination.total_pages)
        ui.label(f"{pagination.total_products} products").classes("ml-3 text-sm text-gray-500")


# ------------------------------------------------------------------ redirect + detail

async def redirect_to_store(ctx: PageContext, product: Product) -> None:
    """Records the click-out, then opens the retailer page in a new tab."""
    try:
        await ctx.io(product_service.record_redirect, ctx.api, product.id, product.source)
    except ApiError as ex:
        # tracking failures must not block the user
        logger.warning(f"[redirect_to_store] - record_redirect_failed - product_id={product.id} error={ex!r}")
    if product.source_url:
        ui.navigate.to(product.source_url, new_tab=True)
    else:
        ctx.notify("This product has no store link", "warning")


async def open_product_detail(ctx: PageContext, product: Product) -> None:
    try:
        await ctx.io(product_service.record_view, ctx.api, product.id)
    except ApiError as ex:
        logger.debug(f"[open_product_detail] - record_view_failed - product_id={product.id} error={ex!r}")

    try:
        detail = await ctx.io(product_service.get_product_by_id, ctx.api, product.id)
        history, total = await ctx.io(
            product_service.get_product_history, ctx.api, product.id, get_app_config().catalog.history_limit
        )
    except ApiError as ex:
        ctx.notify(error_message(ex, t("products.detail_failed", "Could not open product details")), "negative")
        return

    with ui.dialog() as dialog, ui.card().classes("w-[720px] max-w-full"):
        with ui.row().classes("w-full items-start gap-4 no-wrap"):
            if detail.image_url:
                ui.image(detail.image_url).props("fit=contain").classes("w-48 h-48 bg-slate-100 rounded")
            with ui.column().classes("gap-1 flex-1"):
                ui.label(detail.name).classes("text-lg font-semibold")
                ui.label(f"{detail.brand} • {detail.category} • {detail.source}").classes("text-sm text-gray-500")
                with ui.row().classes("items-baseline gap-2"):
                    ui.label(format_price(detail.price)).classes("text-2xl font-bold text-primary")
                    if detail.original_price and detail.original_price > detail.price:
                        ui.label(format_price(detail.original_price)).classes("line-through text-gray-400")
                if detail.promotion:
                    ui.label(detail.promotion).classes("text-sm")
                if detail.description:
                    ui.label(detail.description).classes("text-sm text-gray-600 line-clamp-4")
                ui.button("Go to store", icon="open_in_new", on_click=lambda: redirect_to_store(ctx, detail)).props(
                    button_props("primary")
                ).classes(button_classes())

        ui.separator()
        ui.label(f"Price history ({total})").classes("text-base font-semibold")
        if not history:
            ui.label("No changes recorded yet.").classes("text-sm text-gray-500")
        else:
            rows = []
            for index, entry in enumerate(history):
                for change in entry.changes:
                    rows.append({
                        "key": f"{index}-{change.field}",
                        "changed_at": format_date(entry.changed_at),
                        "field": change.field,
                        "old": format_change_value(change.field, change.old_value),
                        "new": format_change_value(change.field, change.new_value),
                    })
            columns = [
                {"name": "changed_at", "label": "Changed at", "field": "changed_at", "align": "left"},
                {"name": "field", "label": "Field", "field": "field", "align": "left"},
                {"name": "old", "label": "Old", "field": "old", "align": "right"},
                {"name": "new", "label": "New", "field": "new", "align": "right"},
            ]
            ui.table(columns=columns, rows=rows, row_key="key").props("dense flat").classes("w-full max-h-80")

        with ui.row().classes("w-full justify-end"):
            ui.button("Close", on_click=dialog.close).props("flat no-caps")

    dialog.on("hide", lambda: dialog.delete())
    dialog.open()
