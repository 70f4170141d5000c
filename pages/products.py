from nicegui import ui

from layout.context import PageContext
from layout.page_scaffold import build_page
from pages.product_views import (
    build_filter_bar,
    build_pagination,
    open_product_detail,
    product_card,
    redirect_to_store,
)
from services import product_service
from services.app_config import get_app_config
from services.i18n import t
from services.product_filters import ProductFilterController


def render(container: ui.element, ctx: PageContext) -> None:
    controller = ProductFilterController(
        lambda query: ctx.io(product_service.get_all_products, ctx.api, query),
        ctx.notify,
        debounce_s=get_app_config().catalog.search_debounce_s,
        error_text=t("products.load_failed", "Failed to load products"),
    )
    ctx.on_unmount(controller.dispose)

    async def on_open(product) -> None:
        await open_product_detail(ctx, product)

    async def on_redirect(product) -> None:
        await redirect_to_store(ctx, product)

    @ui.refreshable
    def results() -> None:
        if controller.loading and not controller.products:
            with ui.row().classes("w-full justify-center mt-8"):
                ui.spinner(size="lg")
            return
        if not controller.products:
            ui.label(t("products.empty", "No products found")).classes("w-full text-center text-gray-500 mt-8")
            return
        if controller.loading:
            ui.linear_progress(show_value=False).props("indeterminate")
        with ui.row().classes("w-full gap-3"):
            for product in controller.products:
                product_card(product, on_open=on_open, on_redirect=on_redirect)
        build_pagination(controller)

    controller.subscribe(lambda: ctx.call_in_ui(results.refresh))

    def build_content(_parent: ui.element) -> None:
        build_filter_bar(controller)
        results()
        ui.timer(0, controller.fetch_products, once=True)

    build_page(
        container,
        title=t("nav.products", "Products"),
        subtitle=t("products.subtitle", "Compare prices across stores"),
        content=build_content,
    )
