from loguru import logger
from nicegui import ui

from layout.app_style import button_classes, button_props, panel_classes
from layout.context import PageContext
from layout.page_scaffold import build_page
from services import user_service
from services.api_client import ApiError, error_message
from services.app_config import get_app_config
from services.i18n import t


def build_change_password_form(ctx: PageContext) -> None:
    with ui.card().classes(panel_classes() + " max-w-md"):
        old = ui.input("Current password", password=True, password_toggle_button=True).classes("w-full")
        new = ui.input("New password", password=True, password_toggle_button=True).classes("w-full")
        confirm = ui.input("Confirm new password", password=True, password_toggle_button=True).classes("w-full")

        async def submit() -> None:
            old_value, new_value, confirm_value = str(old.value or ""), str(new.value or ""), str(confirm.value or "")
            problem = user_service.validate_password_change(old_value, new_value, confirm_value)
            if problem is not None:
                ctx.notify(t(*problem), "warning")
                return

            submit_button.props("loading")
            try:
                res = await ctx.io(
                    user_service.change_password, ctx.api, old_password=old_value, new_password=new_value
                )
            except ApiError as ex:
                logger.warning(f"[change_password.submit] - change_rejected - status={ex.status}")
                ctx.notify(error_message(ex, t("password.failed", "Failed to change password")), "negative")
                return
            finally:
                submit_button.props(remove="loading")

            user = ctx.session.user
            logger.info(f"[change_password.submit] - password_changed - email={user.email if user else '-'}")
            if (res or {}).get("requireRelogin"):
                ctx.api.clear_cookies()
                ctx.session.logout()
                ctx.notify(t("password.relogin", "Password changed, please sign in again"), "positive")
                ui.navigate.to(get_app_config().auth.login_route)
                return

            ctx.notify(t("password.changed", "Password changed"), "positive")
            for field in (old, new, confirm):
                field.value = ""

        submit_button = ui.button(t("nav.change_password", "Change password"), icon="lock_reset", on_click=submit).props(
            button_props("primary")
        ).classes(button_classes(full=True))


def render(container: ui.element, ctx: PageContext) -> None:
    build_page(
        container,
        title=t("nav.change_password", "Change password"),
        content=lambda _parent: build_change_password_form(ctx),
    )
