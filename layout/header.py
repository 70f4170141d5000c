from nicegui import ui

from layout.app_style import button_classes, button_props
from layout.context import PageContext
from layout.router import navigate
from services import user_service
from services.api_client import ApiError
from services.app_config import get_app_config
from services.i18n import SUPPORTED_LANGUAGES, get_language, set_language, t
from loguru import logger


def build_header(ctx: PageContext) -> ui.header:
    cfg = get_app_config()
    header = ui.header().classes("h-16 w-full bg-white text-gray-900 border-b border-gray-200")

    with header:
        with ui.row().classes("h-full items-center w-full px-4 gap-2"):
            ui.button(icon="menu", on_click=lambda: ctx.drawer.toggle() if ctx.drawer else None).props(
                "flat round dense"
            ).tooltip("Toggle navigation menu")

            ui.icon("price_check").classes("text-primary text-2xl")
            ui.label(t("app.title", cfg.ui.title)).classes("text-lg font-semibold cursor-pointer").on(
                "click", lambda: navigate(ctx, "/")
            )
            ui.space()

            language_options = {entry["code"]: entry["label"] for entry in SUPPORTED_LANGUAGES}

            def on_language_change(e) -> None:
                logger.info(f"[on_language_change] - user_language_change - selected={e.value}")
                set_language(e.value)
                ui.run_javascript("location.reload()")

            ui.select(
                options=language_options,
                value=get_language(),
                on_change=on_language_change,
            ).props("dense outlined").classes("min-w-[140px]")

            user_area = ui.row().classes("ml-3 items-center gap-2")

    async def do_logout() -> None:
        user = ctx.session.user
        logger.info(f"[do_logout] - logout_clicked - email={user.email if user else '-'}")
        try:
            await ctx.io(user_service.logout, ctx.api)
        except ApiError as ex:
            # the local session is dropped either way
            logger.warning(f"[do_logout] - backend_logout_failed - error={ex!r}")
        ctx.api.clear_cookies()
        ctx.session.logout()
        ui.navigate.to(get_app_config().auth.login_route)

    def render_user_area() -> None:
        user_area.clear()
        user = ctx.session.user
        with user_area:
            if ctx.session.is_checking:
                ui.spinner(size="sm")
                return
            if user is None:
                ui.button(t("header.login", "Login"), icon="login", on_click=lambda: ui.navigate.to("/login")).props(
                    button_props("primary")
                ).classes(button_classes())
                return

            ui.icon("account_circle").classes("text-2xl")
            with ui.column().classes("gap-0"):
                name_label = ui.label(user.name or user.email).classes("text-sm cursor-pointer text-primary")
                name_label.on("click", lambda: navigate(ctx, "/profile"))
                ui.label(user.role).classes("text-xs text-gray-500")
            if user.is_admin:
                ui.button(icon="admin_panel_settings", on_click=lambda: navigate(ctx, "/admin")).props(
                    "flat round dense"
                ).tooltip("Admin console")
            ui.button(t("header.logout", "Logout"), icon="logout", on_click=do_logout).props(
                button_props("danger")
            ).classes(button_classes())

    render_user_area()
    ctx.refresh_header = render_user_area
    return header
