from __future__ import annotations

from typing import Callable, Iterable

from loguru import logger

from auth.session import SessionStore


DEFAULT_PROTECTED_PREFIXES = ("/admin", "/profile", "/products", "/change-password")


def is_protected_path(path: str, prefixes: Iterable[str] = DEFAULT_PROTECTED_PREFIXES) -> bool:
	path = str(path or "/")
	return any(path.startswith(prefix) for prefix in prefixes)


class UnauthorizedRedirect:
	"""
	Installed on the API client: a 401 from any endpoint clears the session,
	and when the browser sits on a protected path it is sent to the login page.
	"""

	def __init__(
		self,
		session: SessionStore,
		current_path: Callable[[], str],
		redirect: Callable[[str], None],
		*,
		protected_prefixes: Iterable[str] = DEFAULT_PROTECTED_PREFIXES,
		login_path: str = "/login",
	) -> None:
		self.session = session
		self._current_path = current_path
		self._redirect = redirect
		self.protected_prefixes = tuple(protected_prefixes)
		self.login_path = login_path

	def __call__(self) -> None:
		path = self._current_path()
		self.session.logout()
		if is_protected_path(path, self.protected_prefixes):
			logger.info(f"[UnauthorizedRedirect] - session_expired_redirect - path={path}")
			self._redirect(self.login_path)
		else:
			logger.debug(f"[UnauthorizedRedirect] - session_expired_public_path - path={path}")
