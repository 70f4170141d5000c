from auth.session import SessionStore, probe_session
from auth.route_guard import GuardState, RouteGuard, resolve_guard_state
from auth.unauthorized import UnauthorizedRedirect, is_protected_path

__all__ = [
	"SessionStore",
	"probe_session",
	"GuardState",
	"RouteGuard",
	"resolve_guard_state",
	"UnauthorizedRedirect",
	"is_protected_path",
]
