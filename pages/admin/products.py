from nicegui import ui

from layout.app_style import button_classes, button_props, panel_classes
from layout.context import PageContext
from layout.dialogs import confirm_dialog
from layout.formatters import format_price
from layout.page_scaffold import build_page
from pages.product_views import build_filter_bar, build_pagination, open_product_detail
from services import product_service
from services.app_config import get_app_config
from services.i18n import t
from services.models import Product
from services.polling import run_command
from services.product_filters import ProductFilterController


def render(container: ui.element, ctx: PageContext) -> None:
    controller = ProductFilterController(
        lambda query: ctx.io(product_service.get_all_products, ctx.api, query),
        ctx.notify,
        debounce_s=get_app_config().catalog.search_debounce_s,
        error_text=t("products.load_failed", "Failed to load products"),
    )
    ctx.on_unmount(controller.dispose)

    def ask_delete(product: Product) -> None:
        async def _delete() -> None:
            await run_command(
                lambda: ctx.io(product_service.delete_product, ctx.api, product.id),
                notify=ctx.notify,
                success_message=t("products.delete_ok", "Product deleted"),
                error_text=t("products.delete_failed", "Failed to delete product"),
                refresh=controller.fetch_products,
            )

        with container:
            confirm_dialog("Delete product", f'Delete "{product.name}"?', _delete, yes_label="Delete")

    @ui.refreshable
    def table() -> None:
        if controller.loading:
            ui.linear_progress(show_value=False).props("indeterminate")
        if not controller.products:
            if not controller.loading:
                ui.label(t("products.empty", "No products found")).classes("text-gray-500")
            return
        with ui.card().classes(panel_classes(padded=False)):
            with ui.row().classes("w-full px-4 py-2 text-xs uppercase text-gray-500 no-wrap border-b"):
                ui.label("Name").classes("flex-1")
                ui.label("Category").classes("w-24")
                ui.label("Store").classes("w-32")
                ui.label("Price").classes("w-32 text-right")
                ui.label("Stock").classes("w-24")
                ui.label("").classes("w-24")
            for product in controller.products:
                with ui.row().classes("w-full px-4 py-2 items-center no-wrap border-b text-sm"):
                    ui.label(product.name).classes("flex-1 line-clamp-1 cursor-pointer text-primary").on(
                        "click", lambda p=product: open_product_detail(ctx, p)
                    )
                    ui.label(product.category).classes("w-24")
                    ui.label(product.source).classes("w-32")
                    ui.label(format_price(product.price)).classes("w-32 text-right")
                    ui.badge(
                        "In stock" if product.in_stock else "Out",
                        color="positive" if product.in_stock else "negative",
                    ).props("outline").classes("w-24")
                    with ui.row().classes("w-24 justify-end gap-1"):
                        ui.button(icon="delete", on_click=lambda p=product: ask_delete(p)).props(
                            "flat round dense color=negative"
                        ).tooltip("Delete")
        build_pagination(controller)

    controller.subscribe(lambda: ctx.call_in_ui(table.refresh))

    def build_content(_parent: ui.element) -> None:
        build_filter_bar(controller)
        table()
        ui.timer(0, controller.fetch_products, once=True)

    build_page(
        container,
        title=t("nav.admin_products", "Products"),
        subtitle=t("admin_products.subtitle", "Crawled catalogue"),
        content=build_content,
        toolbar=lambda _row: ui.button("Refresh", icon="refresh", on_click=controller.fetch_products).props(
            button_props("neutral")
        ).classes(button_classes()),
    )
