from loguru import logger
from nicegui import ui

from layout.app_style import button_classes, button_props, panel_classes, section_title_classes
from layout.context import PageContext
from layout.page_scaffold import build_page
from pages.admin.crawl_jobs import build_job_history, build_stats_panel
from pages.admin.schedules import build_schedules_panel
from services import crawler_service
from services.i18n import t
from services.polling import run_command


CRAWLER_BUTTONS = (
    ("dmx", "Điện Máy Xanh (phones)", "smartphone"),
    ("tgdd", "Thế Giới Di Động (phones)", "phone_android"),
    ("tgdd-laptop", "Thế Giới Di Động (laptops)", "laptop"),
)


def render(container: ui.element, ctx: PageContext) -> None:
    pollers: dict = {}
    busy: set[str] = set()

    async def refresh_after_run() -> None:
        for key in ("stats", "jobs"):
            poller = pollers.get(key)
            if poller is not None:
                await poller.poll_once()

    def build_run_panel() -> None:
        with ui.card().classes(panel_classes()):
            ui.label(t("crawler.run", "Run a crawler now")).classes(section_title_classes())
            with ui.row().classes("gap-2"):
                for kind, label, icon in CRAWLER_BUTTONS:
                    button = ui.button(label, icon=icon).props(button_props("primary")).classes(button_classes())

                    async def _run(kind=kind, label=label, button=button) -> None:
                        if kind in busy:
                            return
                        busy.add(kind)
                        button.props("loading")
                        logger.info(f"[crawler.run] - crawl_requested - kind={kind} user={ctx.session.user.email if ctx.session.user else '-'}")
                        ctx.notify(t("crawler.started", "Crawling {label}...", label=label), "info")
                        try:
                            await run_command(
                                lambda: ctx.io(crawler_service.run_crawler, ctx.api, kind),
                                notify=ctx.notify,
                                success_message=lambda res: str((res or {}).get("message") or t("crawler.run_ok", "Crawl finished")),
                                error_text=t("crawler.run_failed", "Crawl failed"),
                                refresh=refresh_after_run,
                            )
                        finally:
                            busy.discard(kind)
                            button.props(remove="loading")

                    button.on_click(_run)

    def build_content(_parent: ui.element) -> None:
        build_run_panel()
        pollers["stats"] = build_stats_panel(ctx)
        pollers["jobs"] = build_job_history(ctx)
        pollers["schedules"] = build_schedules_panel(ctx)

    build_page(
        container,
        title=t("nav.admin_crawler", "Crawler"),
        subtitle=t("crawler.subtitle", "Run crawlers, follow jobs and manage schedules"),
        content=build_content,
    )
