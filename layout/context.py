from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

from loguru import logger
from nicegui import Client, run, ui

from auth.session import SessionStore
from services.api_client import ApiClient


T = TypeVar("T")


@dataclass
class PageContext:
	# -----------------------------
	# Layout UI references
	# -----------------------------

	# Left navigation drawer (header toggles it)
	drawer: Optional[ui.left_drawer] = None

	# Dynamic container inside the drawer, rebuilt on login/logout
	drawer_content: Optional[ui.element] = None
	refresh_drawer: Optional[Callable[[], None]] = None
	refresh_header: Optional[Callable[[], None]] = None

	# The container where the current route is rendered
	# (router clears it and renders the selected page inside)
	main_area: Optional[ui.column] = None

	# Drawer navigation buttons indexed by route path, used for highlighting
	nav_buttons: dict[str, ui.button] = field(default_factory=dict)

	# -------- Per browser client --------
	# REST client; its cookie jar is the backend session
	api: Optional[ApiClient] = None

	# Current user + "checking" flag, changed only through its setters
	session: SessionStore = field(default_factory=SessionStore)

	# NiceGUI client of this page; needed to touch the UI from callbacks
	# that fire outside the UI context (e.g. a 401 seen in an io_bound thread)
	client: Optional[Client] = None
	loop: Optional[asyncio.AbstractEventLoop] = None

	# Path of the route currently rendered (e.g. "/admin/products")
	current_path: str = "/"

	# Cleanup callbacks of the mounted view (pollers, controllers) and of the
	# route itself (guard subscription). The router runs both before rendering
	# the next route; the guard runs the view ones when it stops showing the page.
	_unmount_callbacks: list[Callable[[], None]] = field(default_factory=list)
	_leave_callbacks: list[Callable[[], None]] = field(default_factory=list)

	# ------------------------------------------------------------------ view lifecycle

	def on_unmount(self, callback: Callable[[], None]) -> None:
		self._unmount_callbacks.append(callback)

	def on_route_leave(self, callback: Callable[[], None]) -> None:
		self._leave_callbacks.append(callback)

	def unmount_view(self) -> None:
		callbacks, self._unmount_callbacks = self._unmount_callbacks, []
		self._run_all(callbacks)

	def leave_route(self) -> None:
		self.unmount_view()
		callbacks, self._leave_callbacks = self._leave_callbacks, []
		self._run_all(callbacks)

	@staticmethod
	def _run_all(callbacks: list[Callable[[], None]]) -> None:
		for callback in callbacks:
			try:
				callback()
			except Exception:
				logger.exception("[PageContext.unmount_view] - unmount_callback_failed")

	# ------------------------------------------------------------------ helpers

	async def io(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
		"""Run a blocking REST call off the event loop."""
		return await run.io_bound(fn, *args, **kwargs)

	def notify(self, message: str, kind: str = "info") -> None:
		if self.client is not None:
			with self.client:
				ui.notify(message, type=kind, position="bottom-right")
		else:
			ui.notify(message, type=kind, position="bottom-right")

	def call_in_ui(self, callback: Callable[[], None]) -> None:
		"""Schedule ``callback`` on the event loop inside this page's UI context."""
		def _run() -> None:
			if self.client is not None:
				with self.client:
					callback()
			else:
				callback()

		if self.loop is None:
			_run()
			return
		try:
			running = asyncio.get_running_loop()
		except RuntimeError:
			running = None
		if running is self.loop:
			_run()
		else:
			self.loop.call_soon_threadsafe(_run)
