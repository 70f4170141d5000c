from nicegui import ui

from layout.app_style import button_classes, button_props
from layout.carousel import build_carousel
from layout.context import PageContext
from layout.page_scaffold import build_page
from layout.router import navigate
from services.i18n import t
from services.models import CATEGORIES


CATEGORY_TILES = {
    "phone": ("smartphone", "Phones"),
    "laptop": ("laptop", "Laptops"),
    "tablet": ("tablet_mac", "Tablets"),
}

SOURCE_TILES = {
    "dienmayxanh": "Điện Máy Xanh",
    "thegioididong": "Thế Giới Di Động",
    "cellphones": "CellphoneS",
}


def render(container: ui.element, ctx: PageContext) -> None:
    def open_products() -> None:
        # the listing is protected; the guard shows the login form when needed
        navigate(ctx, "/products")

    def category_tile(category: str) -> None:
        icon, label = CATEGORY_TILES.get(category, ("category", category))
        with ui.card().classes("w-40 h-32 items-center justify-center cursor-pointer hover:shadow-lg").on(
            "click", lambda: open_products()
        ):
            ui.icon(icon).classes("text-4xl text-primary")
            ui.label(t(f"home.category.{category}", label)).classes("font-semibold")

    def source_tile(source: str) -> None:
        with ui.card().classes("w-56 h-20 items-center justify-center"):
            ui.label(SOURCE_TILES.get(source, source)).classes("text-base font-semibold text-gray-700")

    def build_content(_parent: ui.element) -> None:
        with ui.card().classes("w-full p-8 bg-primary text-white rounded-xl"):
            ui.label(t("home.hero_title", "Find the best price before you buy")).classes("text-3xl font-bold")
            ui.label(
                t(
                    "home.hero_subtitle",
                    "Prices of phones, laptops and tablets collected daily from the big Vietnamese retailers.",
                )
            ).classes("text-lg opacity-90")
            ui.button(t("home.browse", "Browse products"), icon="storefront", on_click=open_products).props(
                "color=white text-color=primary unelevated no-caps"
            ).classes(button_classes() + " mt-4")

        build_carousel("categories", CATEGORIES, category_tile, title=t("home.categories", "Categories"))
        build_carousel("sources", list(SOURCE_TILES), source_tile, title=t("home.sources", "Compared stores"))

        if ctx.session.user is None:
            with ui.row().classes("w-full justify-center mt-4"):
                ui.button(t("header.login", "Login"), icon="login", on_click=lambda: ui.navigate.to("/login")).props(
                    button_props("primary")
                ).classes(button_classes())

    build_page(container, content=build_content)
