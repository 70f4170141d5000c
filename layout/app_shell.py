from __future__ import annotations

import asyncio

from loguru import logger
from nicegui import app, ui

from auth.session import probe_session
from auth.unauthorized import UnauthorizedRedirect
from layout.context import PageContext
from layout.drawer import build_drawer
from layout.header import build_header
from layout.router import ROUTES, Route, navigate, register_route
from services import user_service
from services.api_client import ApiClient
from services.app_config import get_app_config

from pages import home, not_found, products, profile, change_password
from pages.admin import crawler as admin_crawler
from pages.admin import dashboard as admin_dashboard
from pages.admin import products as admin_products
from pages.admin import users as admin_users


COOKIE_STORAGE_KEY = "backend_cookies"
HEADER_PX = 64


def register_routes() -> None:
	register_route(Route("/", "nav.home", "Home", "home", home.render))
	register_route(Route("/products", "nav.products", "Products", "storefront", products.render, protected=True))
	register_route(Route("/profile", "nav.profile", "Profile", "person", profile.render, protected=True))
	register_route(Route(
		"/change-password", "nav.change_password", "Change password", "password", change_password.render,
		protected=True,
	))
	register_route(Route(
		"/admin", "nav.admin_dashboard", "Dashboard", "dashboard", admin_dashboard.render,
		protected=True, admin_only=True,
	))
	register_route(Route(
		"/admin/products", "nav.admin_products", "Products", "inventory_2", admin_products.render,
		protected=True, admin_only=True,
	))
	register_route(Route(
		"/admin/users", "nav.admin_users", "Users", "group", admin_users.render,
		protected=True, admin_only=True,
	))
	register_route(Route(
		"/admin/crawler", "nav.admin_crawler", "Crawler", "travel_explore", admin_crawler.render,
		protected=True, admin_only=True,
	))
	register_route(Route("/not-found", "nav.not_found", "Not found", "help", not_found.render, in_drawer=False))


def create_page_context(path: str) -> PageContext:
	"""
	Per browser-page objects: REST client (backend cookie restored from the
	user storage), session store, and the 401 handler bound to this page.
	"""
	cfg = get_app_config()
	ctx = PageContext()
	ctx.current_path = path
	ctx.client = ui.context.client
	try:
		ctx.loop = asyncio.get_running_loop()
	except RuntimeError:
		ctx.loop = None

	api = ApiClient(cfg.api.base_url, timeout_s=cfg.api.timeout_s, verify_ssl=cfg.api.verify_ssl)
	api.import_cookies(app.storage.user.get(COOKIE_STORAGE_KEY))

	def _store_cookies(cookies: dict) -> None:
		def _write() -> None:
			app.storage.user[COOKIE_STORAGE_KEY] = cookies
		ctx.call_in_ui(_write)

	api.add_cookie_listener(_store_cookies)

	on_unauthorized = UnauthorizedRedirect(
		ctx.session,
		current_path=lambda: ctx.current_path,
		redirect=lambda target: ui.navigate.to(target),
		protected_prefixes=cfg.auth.protected_prefixes,
		login_path=cfg.auth.login_route,
	)
	# 401s are seen inside io_bound threads; hop back onto the page's loop
	api.add_unauthorized_handler(lambda: ctx.call_in_ui(on_unauthorized))
	ctx.api = api
	return ctx


def build_shell(path: str) -> None:
	cfg = get_app_config()
	ui.colors(primary="#2563eb", secondary="#0ea5e9", accent="#f59e0b")
	ui.dark_mode(cfg.ui.dark_mode)
	ui.page_title(cfg.ui.title)

	ctx = create_page_context(path)

	# --------- LAYOUT ---------
	build_header(ctx)
	build_drawer(ctx)

	with ui.column().classes("w-full").style(f"height: calc(100vh - {HEADER_PX}px);"):
		ctx.main_area = ui.column().classes("w-full h-full min-h-0 min-w-0 p-4 gap-4 overflow-auto")

	def _on_session_change(_session) -> None:
		if ctx.refresh_header:
			ctx.refresh_header()
		if ctx.refresh_drawer:
			ctx.refresh_drawer()

	ctx.session.subscribe(lambda s: ctx.call_in_ui(lambda: _on_session_change(s)))

	def _on_disconnect() -> None:
		logger.debug(f"[build_shell] - client_disconnected - path={ctx.current_path}")
		ctx.leave_route()

	ui.context.client.on_disconnect(_on_disconnect)

	navigate(ctx, path, push_history=False)

	# global session probe, once per page load
	async def _probe() -> None:
		user = await probe_session(ctx.session, lambda: ctx.io(user_service.get_me, ctx.api))
		logger.info(f"[build_shell] - session_probed - path={path} user={user.email if user else None}")

	ui.timer(0, _probe, once=True)


def register_pages() -> None:
	register_routes()

	def _page_factory(path: str):
		def _page() -> None:
			build_shell(path)
		return _page

	for path in list(ROUTES):
		ui.page(path)(_page_factory(path))
