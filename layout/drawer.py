from nicegui import ui
from layout.context import PageContext
from layout.router import get_visible_routes, navigate, Route
from services.i18n import t


def _render_drawer_content(ctx: PageContext) -> None:
	"""Rebuild the drawer buttons from the routes visible to the current user."""
	ctx.nav_buttons.clear()
	ctx.drawer_content.clear()
	routes = get_visible_routes(ctx)

	with ctx.drawer_content:
		storefront = {p: r for p, r in routes.items() if not r.admin_only}
		admin = {p: r for p, r in routes.items() if r.admin_only}

		for path, route in storefront.items():
			_add_nav_button(ctx, route, path)

		if admin:
			ui.separator().classes("my-2")
			ui.label("Admin").classes("px-4 text-xs uppercase text-gray-500")
			for path, route in admin.items():
				_add_nav_button(ctx, route, path)

	for path, btn in ctx.nav_buttons.items():
		if path == ctx.current_path:
			btn.props("unelevated color=primary")
		else:
			btn.props("flat color=grey-8")


def build_drawer(ctx: PageContext) -> ui.left_drawer:
	drawer = ui.left_drawer(value=True, bordered=True).props("width=220").classes("bg-gray-50")
	ctx.drawer = drawer

	with drawer:
		# All dynamic content goes into this column (so we can clear/rebuild it)
		ctx.drawer_content = ui.column().classes("w-full gap-1")
		_render_drawer_content(ctx)

	def refresh_drawer() -> None:
		_render_drawer_content(ctx)
	ctx.refresh_drawer = refresh_drawer

	return drawer


def _add_nav_button(ctx: PageContext, route: Route, path: str) -> ui.button:
	btn = ui.button(
		t(route.label_key, route.label),
		icon=route.icon,
		on_click=lambda p=path: navigate(ctx, p),
	).props("flat no-caps").classes("w-full justify-start px-4")
	ctx.nav_buttons[path] = btn
	return btn
