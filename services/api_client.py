from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

import requests
from loguru import logger

from services.logging_setup import log_timing, summarize_for_log


UnauthorizedHandler = Callable[[], None]


# ------------------------------------------------------------------ Errors

class ApiError(Exception):
	"""Non-2xx answer (or transport failure) from the backend."""

	def __init__(self, status: int, message: str = "", payload: Any = None) -> None:
		super().__init__(message or f"HTTP {status}")
		self.status = int(status)
		self.message = str(message or "")
		self.payload = payload


class UnauthorizedError(ApiError):
	pass


class NetworkError(ApiError):
	def __init__(self, message: str) -> None:
		super().__init__(0, message)


def error_message(exc: BaseException, fallback: str) -> str:
	"""Backend message for validation/business failures, fallback text otherwise."""
	if isinstance(exc, NetworkError):
		return fallback
	if isinstance(exc, ApiError) and exc.message:
		return exc.message
	return fallback


# ------------------------------------------------------------------ Client

def _sparse_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
	out: Dict[str, str] = {}
	for key, value in (params or {}).items():
		if value is None or value == "":
			continue
		if isinstance(value, bool):
			out[key] = "true" if value else "false"
		else:
			out[key] = str(value)
	return out


def _join(base: str, path: str) -> str:
	if not path or path == "/":
		return base + "/"
	return base.rstrip("/") + "/" + path.lstrip("/")


class ApiClient:
	"""
	One requests.Session per browser client. The session's cookie jar carries
	the backend session cookie, so every request is sent with credentials.
	"""

	def __init__(
		self,
		base_url: str,
		*,
		timeout_s: float = 15.0,
		verify_ssl: bool = True,
		session: Optional[requests.Session] = None,
	) -> None:
		self.base_url = str(base_url or "").rstrip("/")
		self.timeout_s = float(timeout_s)
		self.verify_ssl = bool(verify_ssl)
		self._session = session or requests.Session()
		self._unauthorized_handlers: list[UnauthorizedHandler] = []
		self._cookie_listeners: list[Callable[[Dict[str, str]], None]] = []
		self._lock = threading.Lock()

	# ---- module instances (users / products / crawler / root)

	def module(self, prefix: str = "") -> "ApiModule":
		return ApiModule(self, prefix)

	@property
	def users(self) -> "ApiModule":
		return self.module("/users")

	@property
	def products(self) -> "ApiModule":
		return self.module("/products")

	@property
	def crawler(self) -> "ApiModule":
		return self.module("/crawler")

	@property
	def root(self) -> "ApiModule":
		return self.module("")

	# ---- hooks

	def add_unauthorized_handler(self, handler: UnauthorizedHandler) -> None:
		self._unauthorized_handlers.append(handler)

	def add_cookie_listener(self, listener: Callable[[Dict[str, str]], None]) -> None:
		self._cookie_listeners.append(listener)

	def export_cookies(self) -> Dict[str, str]:
		with self._lock:
			return requests.utils.dict_from_cookiejar(self._session.cookies)

	def import_cookies(self, cookies: Optional[Dict[str, str]]) -> None:
		if not cookies:
			return
		with self._lock:
			requests.utils.add_dict_to_cookiejar(self._session.cookies, dict(cookies))

	def clear_cookies(self) -> None:
		with self._lock:
			self._session.cookies.clear()
		self._notify_cookie_listeners()

	# ---- requests

	def request(
		self,
		method: str,
		path: str,
		*,
		params: Optional[Dict[str, Any]] = None,
		json: Any = None,
	) -> Any:
		method = str(method or "GET").upper()
		url = _join(self.base_url, path)
		query = _sparse_params(params)
		cookies_before = self.export_cookies()

		with log_timing("ApiClient.request", method=method, url=url, params=query):
			try:
				resp = self._session.request(
					method=method,
					url=url,
					params=query or None,
					json=json,
					timeout=self.timeout_s,
					verify=self.verify_ssl,
				)
			except requests.RequestException as exc:
				logger.warning(f"[ApiClient.request] - network_error - method={method} url={url} error={exc!r}")
				raise NetworkError(str(exc)) from exc

		if self.export_cookies() != cookies_before:
			self._notify_cookie_listeners()

		body = _parse_body(resp)
		status = int(resp.status_code)
		if 200 <= status < 300:
			return body

		message = body.get("message", "") if isinstance(body, dict) else ""
		logger.info(
			f"[ApiClient.request] - http_error - method={method} url={url} status={status} "
			f"body={summarize_for_log(body)}"
		)
		if status == 401:
			self._fire_unauthorized()
			raise UnauthorizedError(status, message, body)
		raise ApiError(status, message, body)

	def get(self, path: str, **kwargs: Any) -> Any:
		return self.request("GET", path, **kwargs)

	def post(self, path: str, **kwargs: Any) -> Any:
		return self.request("POST", path, **kwargs)

	def put(self, path: str, **kwargs: Any) -> Any:
		return self.request("PUT", path, **kwargs)

	def patch(self, path: str, **kwargs: Any) -> Any:
		return self.request("PATCH", path, **kwargs)

	def delete(self, path: str, **kwargs: Any) -> Any:
		return self.request("DELETE", path, **kwargs)

	# ---- internals

	def _fire_unauthorized(self) -> None:
		for handler in list(self._unauthorized_handlers):
			try:
				handler()
			except Exception:
				logger.exception("[ApiClient._fire_unauthorized] - handler_failed")

	def _notify_cookie_listeners(self) -> None:
		cookies = self.export_cookies()
		for listener in list(self._cookie_listeners):
			try:
				listener(cookies)
			except Exception:
				logger.exception("[ApiClient._notify_cookie_listeners] - listener_failed")


class ApiModule:
	"""Client bound to a path prefix, e.g. ``/users``."""

	def __init__(self, client: ApiClient, prefix: str) -> None:
		self.client = client
		self.prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""

	def _path(self, path: str) -> str:
		if not path or path == "/":
			return self.prefix + "/"
		return self.prefix + "/" + path.lstrip("/")

	def get(self, path: str = "/", **kwargs: Any) -> Any:
		return self.client.request("GET", self._path(path), **kwargs)

	def post(self, path: str = "/", **kwargs: Any) -> Any:
		return self.client.request("POST", self._path(path), **kwargs)

	def put(self, path: str = "/", **kwargs: Any) -> Any:
		return self.client.request("PUT", self._path(path), **kwargs)

	def patch(self, path: str = "/", **kwargs: Any) -> Any:
		return self.client.request("PATCH", self._path(path), **kwargs)

	def delete(self, path: str = "/", **kwargs: Any) -> Any:
		return self.client.request("DELETE", self._path(path), **kwargs)


def _parse_body(resp: requests.Response) -> Any:
	if not resp.content:
		return {}
	content_type = resp.headers.get("Content-Type", "")
	if "application/json" in str(content_type or ""):
		try:
			return resp.json()
		except ValueError:
			return {}
	return {"message": resp.text} if resp.status_code >= 400 else {"text": resp.text}
