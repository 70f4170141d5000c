from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from loguru import logger
from nicegui import ui

from auth.login_page import build_login_form
from auth.route_guard import GuardState, RouteGuard
from layout.context import PageContext
from services import user_service
from services.i18n import t


# All pages get (container, ctx) so they can reach ctx.api / ctx.session.
RenderFn = Callable[[ui.element, PageContext], None]


@dataclass(frozen=True)
class Route:
	path: str
	label_key: str
	label: str
	icon: str
	render: RenderFn
	protected: bool = False
	admin_only: bool = False
	in_drawer: bool = True


ROUTES: Dict[str, Route] = {}


def register_route(route: Route) -> Route:
	ROUTES[route.path] = route
	return route


def normalize_path(path: str) -> str:
	path = "/" + str(path or "").strip().strip("/")
	return path if path != "" else "/"


def get_visible_routes(ctx: PageContext) -> Dict[str, Route]:
	"""Drawer entries for the current user: admin routes only for admins."""
	user = ctx.session.user
	out: Dict[str, Route] = {}
	for path, route in ROUTES.items():
		if not route.in_drawer:
			continue
		if route.admin_only and not (user and user.is_admin):
			continue
		if route.protected and user is None:
			continue
		out[path] = route
	return out


def _apply_drawer_highlight(ctx: PageContext, active_path: str) -> None:
	"""Update drawer button styles so the active one looks selected."""
	for path, btn in ctx.nav_buttons.items():
		if path == active_path:
			btn.props("unelevated color=primary")
		else:
			btn.props("flat color=grey-8")


def navigate(ctx: PageContext, path: str, *, push_history: bool = True) -> None:
	path = normalize_path(path)
	route = ROUTES.get(path)
	if route is None:
		logger.warning(f"[navigate] - unknown_route - path={path}")
		path, route = "/not-found", ROUTES.get("/not-found")
		if route is None:
			ui.notify(f"Unknown route: {path}", type="negative")
			return

	# stop pollers/controllers of the view being left
	ctx.leave_route()
	ctx.current_path = path

	if push_history:
		ui.run_javascript(f"history.pushState(null, '', '{path}')")

	_apply_drawer_highlight(ctx, path)
	logger.debug(f"[navigate] - route_rendered - path={path} protected={route.protected} admin_only={route.admin_only}")

	if ctx.main_area is None:
		return
	ctx.main_area.clear()
	if route.protected or route.admin_only:
		_render_guarded(ctx, route)
	else:
		route.render(ctx.main_area, ctx)


def _render_guarded(ctx: PageContext, route: Route) -> None:
	"""
	CHECKING -> spinner, DENIED -> login form in place, AUTHORIZED -> page.
	Repaints whenever the session changes the guard state.
	"""
	guard = RouteGuard(
		ctx.session,
		lambda: ctx.io(user_service.get_me, ctx.api),
		admin_only=route.admin_only,
	)
	with ctx.main_area:
		holder = ui.column().classes("w-full h-full min-h-0 min-w-0")

	painted: dict[str, Optional[GuardState]] = {"state": None}

	def paint(_session=None) -> None:
		state = guard.state
		if painted["state"] == state:
			return
		if painted["state"] == GuardState.AUTHORIZED:
			ctx.unmount_view()
		painted["state"] = state
		holder.clear()
		if state == GuardState.CHECKING:
			with holder:
				with ui.row().classes("w-full justify-center items-center gap-3 mt-16"):
					ui.spinner(size="lg")
					ui.label(t("guard.checking", "Checking session..."))
			return
		if state == GuardState.DENIED:
			with holder:
				build_login_form(ctx)
			return
		route.render(holder, ctx)

	unsubscribe = ctx.session.subscribe(lambda _s: ctx.call_in_ui(paint))
	ctx.on_route_leave(unsubscribe)

	if guard.mount():
		async def _reprobe() -> None:
			await guard.reprobe()
			paint()
		with ctx.main_area:
			ui.timer(0, _reprobe, once=True)

	paint()
