from nicegui import ui

from layout.context import PageContext
from layout.page_scaffold import build_page
from layout.router import navigate
from services.i18n import t


def render(container: ui.element, ctx: PageContext) -> None:
    def build_content(_parent: ui.element) -> None:
        with ui.column().classes("w-full items-center mt-16 gap-2"):
            ui.label("404").classes("text-6xl font-bold text-gray-300")
            ui.label(t("not_found.message", "This page does not exist.")).classes("text-lg")
            ui.button(t("not_found.back", "Back to home"), icon="home", on_click=lambda: navigate(ctx, "/")).props(
                "flat no-caps color=primary"
            )

    build_page(container, content=build_content)
