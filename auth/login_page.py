from typing import Callable, Optional

from nicegui import ui
from loguru import logger

from layout.context import PageContext
from services import user_service
from services.api_client import ApiError, error_message
from services.app_config import get_app_config
from services.i18n import t
from services.models import User


def home_for(user: User) -> str:
    auth = get_app_config().auth
    return auth.admin_home if user.is_admin else auth.user_home


def build_login_form(ctx: PageContext, on_success: Optional[Callable[[User], None]] = None) -> None:
    """
    Email/password form. On success the session store gets the user, which
    is enough for a route guard showing this form to repaint itself.
    """
    with ui.card().classes("w-96 mx-auto mt-16"):
        ui.label(t("login.title", "Login")).classes("text-xl font-semibold")

        email = ui.input(t("login.email", "Email")).props("type=email").classes("w-full")
        password = ui.input(
            t("login.password", "Password"), password=True, password_toggle_button=True
        ).classes("w-full")
        submit_state = {"busy": False}

        async def do_login() -> None:
            if submit_state["busy"]:
                return
            entered_email = str(email.value or "").strip()
            if not entered_email or not password.value:
                ui.notify("Email and password are required", type="warning")
                return

            submit_state["busy"] = True
            login_button.props("loading")
            logger.info(f"[do_login] - login_submit - email={entered_email}")
            try:
                await ctx.io(user_service.login, ctx.api, email=entered_email, password=str(password.value))
                user = await ctx.io(user_service.get_me, ctx.api)
                if user is None:
                    ui.notify(t("login.failed", "Login failed"), type="negative")
                    return
                logger.success(f"[do_login] - login_success - email={user.email} role={user.role}")
                ctx.session.set_user(user)
                if on_success is not None:
                    on_success(user)
            except ApiError as ex:
                logger.warning(f"[do_login] - login_rejected - email={entered_email} status={ex.status}")
                ui.notify(error_message(ex, t("login.failed", "Login failed")), type="negative")
            except Exception:
                logger.exception(f"[do_login] - login_crashed - email={entered_email}")
                ui.notify(t("login.failed", "Login failed"), type="negative")
            finally:
                submit_state["busy"] = False
                login_button.props(remove="loading")

        login_button = ui.button(t("login.submit", "Sign in"), on_click=do_login).props("color=primary").classes(
            "w-full mt-2"
        )
        password.on("keydown.enter", do_login)
        with ui.row().classes("w-full justify-center gap-1 text-sm"):
            ui.label("No account yet?")
            ui.link("Register", "/register")


def build_register_form(ctx: PageContext) -> None:
    with ui.card().classes("w-96 mx-auto mt-16"):
        ui.label(t("register.title", "Register")).classes("text-xl font-semibold")
        name = ui.input("Name").classes("w-full")
        email = ui.input("Email").props("type=email").classes("w-full")
        password = ui.input("Password", password=True, password_toggle_button=True).classes("w-full")

        async def do_register() -> None:
            if not name.value or not email.value or not password.value:
                ui.notify("All fields are required", type="warning")
                return
            try:
                await ctx.io(
                    user_service.register,
                    ctx.api,
                    email=str(email.value).strip(),
                    password=str(password.value),
                    name=str(name.value).strip(),
                )
            except ApiError as ex:
                ui.notify(error_message(ex, t("register.failed", "Registration failed")), type="negative")
                return
            logger.info(f"[do_register] - account_created - email={email.value}")
            ui.notify("Account created, please sign in", type="positive")
            ui.navigate.to(get_app_config().auth.login_route)

        ui.button("Create account", on_click=do_register).props("color=primary").classes("w-full mt-2")
        with ui.row().classes("w-full justify-center gap-1 text-sm"):
            ui.label("Already registered?")
            ui.link("Sign in", "/login")


def register_login_page() -> None:
    # deferred: the shell imports every page module
    from layout.app_shell import create_page_context

    @ui.page("/login")
    def login_view():
        ctx = create_page_context("/login")
        ctx.session.set_checking(False)

        with ui.column().classes("w-full items-center"):
            ui.label(t("app.title", get_app_config().ui.title)).classes("text-3xl font-bold mt-8 text-primary")
            ui.label("Compare prices on phones, laptops and tablets across retailers.").classes(
                "text-gray-500 italic"
            )
            build_login_form(ctx, on_success=lambda user: ui.navigate.to(home_for(user)))

    @ui.page("/register")
    def register_view():
        ctx = create_page_context("/register")
        ctx.session.set_checking(False)
        with ui.column().classes("w-full items-center"):
            build_register_form(ctx)
