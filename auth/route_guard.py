from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable, Optional

from loguru import logger

from auth.session import SessionStore
from services.api_client import ApiError
from services.models import User


class GuardState(str, Enum):
	CHECKING = "checking"
	AUTHORIZED = "authorized"
	DENIED = "denied"


def resolve_guard_state(session: SessionStore, *, admin_only: bool = False, local_checking: bool = False) -> GuardState:
	if session.is_checking or local_checking:
		return GuardState.CHECKING
	user = session.user
	if user is None:
		return GuardState.DENIED
	if admin_only and not user.is_admin:
		return GuardState.DENIED
	return GuardState.AUTHORIZED


class RouteGuard:
	"""
	Gate for a protected subtree. When mounted after the global session check
	finished without a user, it runs its own probe once before deciding.
	Denied subtrees are rendered as the login form in place.
	"""

	def __init__(
		self,
		session: SessionStore,
		fetch_me: Callable[[], Awaitable[Optional[User]]],
		*,
		admin_only: bool = False,
	) -> None:
		self.session = session
		self._fetch_me = fetch_me
		self.admin_only = admin_only
		self.local_checking = False

	@property
	def state(self) -> GuardState:
		return resolve_guard_state(self.session, admin_only=self.admin_only, local_checking=self.local_checking)

	def needs_reprobe(self) -> bool:
		return not self.session.is_checking and self.session.user is None and not self.local_checking

	def mount(self) -> bool:
		"""Called when the guarded subtree mounts. True means a local probe must follow."""
		if not self.needs_reprobe():
			return False
		self.local_checking = True
		return True

	async def reprobe(self) -> GuardState:
		self.local_checking = True
		try:
			user = await self._fetch_me()
			self.session.set_user(user)
		except ApiError as ex:
			logger.debug(f"[RouteGuard.reprobe] - reprobe_denied - status={ex.status}")
			self.session.logout()
		except Exception:
			logger.exception("[RouteGuard.reprobe] - reprobe_crashed")
			self.session.logout()
		finally:
			self.local_checking = False
		return self.state
