from typing import Any, Optional

from loguru import logger
from nicegui import ui

from layout.app_style import button_classes, button_props, panel_classes, section_title_classes
from layout.context import PageContext
from layout.page_scaffold import build_page
from pages.profile import activity_list
from services import user_service
from services.api_client import ApiError, error_message
from services.i18n import t
from services.polling import run_command


def render(container: ui.element, ctx: PageContext) -> None:
    state: dict[str, Any] = {"users": [], "selected": None, "activity": None, "loading": True}

    @ui.refreshable
    def user_list() -> None:
        if state["loading"]:
            ui.spinner()
            return
        if not state["users"]:
            ui.label("No users").classes("text-sm text-gray-500")
            return
        selected_id = (state["selected"] or {}).get("_id")
        for user in state["users"]:
            row_classes = "w-full px-3 py-2 items-center no-wrap rounded cursor-pointer hover:bg-gray-100"
            if user.get("_id") == selected_id:
                row_classes += " bg-blue-50"
            with ui.row().classes(row_classes).on("click", lambda u=user: select_user(u)):
                with ui.column().classes("gap-0 flex-1"):
                    ui.label(user.get("name", "")).classes("font-medium")
                    ui.label(user.get("email", "")).classes("text-xs text-gray-500")
                ui.badge(user.get("role", "user"), color="primary" if user.get("role") == "admin" else "grey")

    @ui.refreshable
    def detail() -> None:
        selected: Optional[dict] = state["selected"]
        if selected is None:
            ui.label("Select a user to see their activity").classes("text-gray-500 mt-16 self-center")
            return

        with ui.card().classes(panel_classes()):
            ui.label(selected.get("name", "")).classes("text-xl font-semibold")
            ui.label(selected.get("email", "")).classes("text-sm text-gray-500")
            ui.button(
                "Send activity summary", icon="summarize",
                on_click=lambda: send_summary(selected),
            ).props(button_props("neutral")).classes(button_classes())

        activity = state["activity"]
        if activity is None:
            ui.spinner()
        else:
            with ui.grid(columns=2).classes("w-full gap-4"):
                activity_list("Recently viewed", activity.get("viewHistory") or [], date_key="viewedAt")
                activity_list(
                    "Store visits", activity.get("redirectHistory") or [], date_key="redirectedAt", show_source=True
                )
            searches = activity.get("searchHistory") or []
            if searches:
                with ui.row().classes("gap-2"):
                    for search in searches[:10]:
                        ui.chip(str(search.get("keyword", "")), icon="search").props("outline dense")

        with ui.card().classes(panel_classes()):
            ui.label("Send email").classes(section_title_classes())
            subject = ui.input("Subject").classes("w-full")
            text = ui.textarea("Message").classes("w-full")
            send_button = ui.button("Send", icon="send").props(button_props("primary")).classes(button_classes())

            def _sync_enabled(_e=None) -> None:
                send_button.set_enabled(bool(subject.value) and bool(text.value))

            subject.on_value_change(_sync_enabled)
            text.on_value_change(_sync_enabled)
            _sync_enabled()

            async def _send() -> None:
                send_button.props("loading")
                try:
                    ok = await run_command(
                        lambda: ctx.io(
                            user_service.send_email, ctx.api, selected["_id"],
                            subject=str(subject.value), text=str(text.value),
                        ),
                        notify=ctx.notify,
                        success_message=t("users.email_ok", "Email sent"),
                        error_text=t("users.email_failed", "Failed to send email"),
                    )
                finally:
                    send_button.props(remove="loading")
                if ok:
                    subject.value = ""
                    text.value = ""

            send_button.on_click(_send)

    async def load_users() -> None:
        state["loading"] = True
        user_list.refresh()
        try:
            state["users"] = await ctx.io(user_service.list_users, ctx.api)
        except ApiError as ex:
            logger.warning(f"[admin_users.load_users] - list_failed - error={ex!r}")
            ctx.notify(error_message(ex, t("users.load_failed", "Failed to load users")), "negative")
        finally:
            state["loading"] = False
            user_list.refresh()

    async def select_user(user: dict) -> None:
        state["selected"] = user
        state["activity"] = None
        user_list.refresh()
        detail.refresh()
        try:
            activity = await ctx.io(user_service.get_user_activity, ctx.api, user["_id"])
        except ApiError as ex:
            ctx.notify(error_message(ex, t("users.activity_failed", "Failed to load activity")), "negative")
            activity = {}
        # a newer selection wins
        if state["selected"] is user:
            state["activity"] = activity
            detail.refresh()

    async def send_summary(user: dict) -> None:
        await run_command(
            lambda: ctx.io(user_service.send_activity_summary, ctx.api, user["_id"]),
            notify=ctx.notify,
            success_message=t("users.summary_ok", "Activity summary sent"),
            error_text=t("users.summary_failed", "Failed to send activity summary"),
        )

    def build_content(_parent: ui.element) -> None:
        with ui.row().classes("w-full gap-4 no-wrap items-start"):
            with ui.card().classes(panel_classes(padded=False) + " w-80 shrink-0 p-2"):
                user_list()
            with ui.column().classes("flex-1 min-w-0 gap-4"):
                detail()
        ui.timer(0, load_users, once=True)

    build_page(
        container,
        title=t("nav.admin_users", "Users"),
        subtitle=t("admin_users.subtitle", "Accounts and their activity"),
        content=build_content,
        toolbar=lambda _row: ui.button("Refresh", icon="refresh", on_click=load_users).props(
            button_props("neutral")
        ).classes(button_classes()),
    )
