from __future__ import annotations

from typing import Awaitable, Callable, Optional

from loguru import logger

from services.api_client import ApiError
from services.models import User


SessionListener = Callable[["SessionStore"], None]


class SessionStore:
	"""
	Current user of one browser client plus the "session check in progress"
	flag. Created with the page context, changed only through the setters
	below; listeners are told about every change.
	"""

	def __init__(self) -> None:
		self._user: Optional[User] = None
		self._is_checking = True
		self._listeners: list[SessionListener] = []

	@property
	def user(self) -> Optional[User]:
		return self._user

	@property
	def is_checking(self) -> bool:
		return self._is_checking

	def is_logged_in(self) -> bool:
		return self._user is not None

	def has_role(self, role: str) -> bool:
		return bool(self._user and self._user.role == role)

	def set_user(self, user: Optional[User]) -> None:
		self._user = user
		self._changed()

	def set_checking(self, checking: bool) -> None:
		self._is_checking = bool(checking)
		self._changed()

	def logout(self) -> None:
		if self._user is not None:
			logger.info(f"[SessionStore.logout] - session_cleared - email={self._user.email}")
		self._user = None
		self._changed()

	def subscribe(self, listener: SessionListener) -> Callable[[], None]:
		self._listeners.append(listener)

		def _unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)
		return _unsubscribe

	def _changed(self) -> None:
		for listener in list(self._listeners):
			try:
				listener(self)
			except Exception:
				logger.exception("[SessionStore._changed] - listener_failed")


async def probe_session(store: SessionStore, fetch_me: Callable[[], Awaitable[Optional[User]]]) -> Optional[User]:
	"""Ask the backend who is logged in; any API failure means "nobody"."""
	store.set_checking(True)
	try:
		user = await fetch_me()
		store.set_user(user)
	except ApiError as ex:
		logger.debug(f"[probe_session] - no_session - status={ex.status}")
		store.logout()
	except Exception:
		logger.exception("[probe_session] - probe_crashed")
		store.logout()
	finally:
		store.set_checking(False)
	return store.user
