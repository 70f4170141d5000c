from dataclasses import replace

from loguru import logger
from nicegui import ui

from layout.app_style import button_classes, button_props, panel_classes, section_title_classes
from layout.context import PageContext
from layout.formatters import format_date, format_price
from layout.page_scaffold import build_page
from layout.router import navigate
from services import user_service
from services.api_client import ApiError, error_message
from services.i18n import t


def activity_list(title: str, entries: list, *, date_key: str, show_source: bool = False) -> None:
    with ui.card().classes(panel_classes()):
        ui.label(f"{title} ({len(entries)})").classes(section_title_classes())
        if not entries:
            ui.label("Nothing yet.").classes("text-sm text-gray-500")
            return
        for entry in entries[:5]:
            product = entry.get("product") or {}
            with ui.row().classes("w-full items-center gap-3 no-wrap"):
                if product.get("imageUrl"):
                    ui.image(product["imageUrl"]).props("fit=contain").classes("w-12 h-12")
                with ui.column().classes("gap-0 flex-1"):
                    ui.label(product.get("name") or "Unknown").classes("text-sm font-medium line-clamp-1")
                    details = []
                    if product.get("price"):
                        details.append(format_price(product["price"]))
                    if show_source and entry.get("source"):
                        details.append(str(entry["source"]))
                    ui.label(" • ".join(details)).classes("text-xs text-gray-500")
                ui.label(format_date(entry.get(date_key))).classes("text-xs text-gray-500")


def render(container: ui.element, ctx: PageContext) -> None:
    user = ctx.session.user

    @ui.refreshable
    def activity_view(activity: dict | None = None, failed: bool = False) -> None:
        if failed:
            ui.label(t("profile.activity_failed", "Could not load your activity")).classes("text-negative")
            return
        if activity is None:
            ui.spinner()
            return
        with ui.grid(columns=2).classes("w-full gap-4"):
            activity_list("Recently viewed", activity.get("viewHistory") or [], date_key="viewedAt")
            activity_list(
                "Store visits", activity.get("redirectHistory") or [], date_key="redirectedAt", show_source=True
            )
        searches = activity.get("searchHistory") or []
        if searches:
            with ui.card().classes(panel_classes()):
                ui.label(f"Searches ({len(searches)})").classes(section_title_classes())
                with ui.row().classes("gap-2"):
                    for search in searches[:15]:
                        ui.chip(str(search.get("keyword", "")), icon="search").props("outline dense")

    async def load_activity() -> None:
        try:
            activity = await ctx.io(user_service.get_my_activity, ctx.api)
        except ApiError as ex:
            logger.warning(f"[profile.load_activity] - activity_failed - error={ex!r}")
            activity_view.refresh(failed=True)
            return
        activity_view.refresh(activity)

    def build_content(_parent: ui.element) -> None:
        with ui.card().classes(panel_classes() + " max-w-xl"):
            ui.label("Account").classes(section_title_classes())
            ui.label(user.email if user else "-").classes("text-sm text-gray-600")
            ui.badge(user.role if user else "-").props("outline")
            name = ui.input("Name", value=user.name if user else "").classes("w-full")

            async def save_name() -> None:
                new_name = str(name.value or "").strip()
                if not new_name:
                    ctx.notify("Name must not be empty", "warning")
                    return
                try:
                    await ctx.io(user_service.update_me, ctx.api, name=new_name)
                except ApiError as ex:
                    ctx.notify(error_message(ex, t("profile.update_failed", "Failed to update profile")), "negative")
                    return
                current = ctx.session.user
                if current is not None:
                    ctx.session.set_user(replace(current, name=new_name))
                ctx.notify(t("profile.updated", "Profile updated"), "positive")

            with ui.row().classes("gap-2"):
                ui.button("Save", icon="save", on_click=save_name).props(button_props("primary")).classes(
                    button_classes()
                )
                ui.button(
                    t("nav.change_password", "Change password"),
                    icon="password",
                    on_click=lambda: navigate(ctx, "/change-password"),
                ).props(button_props("neutral")).classes(button_classes())

        ui.label("Activity").classes("text-lg font-semibold mt-2")
        activity_view()
        ui.timer(0, load_activity, once=True)

    build_page(container, title=t("nav.profile", "Profile"), content=build_content)
