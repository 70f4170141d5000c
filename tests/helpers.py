from __future__ import annotations

import json
from typing import Any

import requests


def make_response(status: int, body: Any = None, *, text: str | None = None, cookies: dict | None = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    if text is not None:
        resp._content = text.encode("utf-8")
        resp.headers["Content-Type"] = "text/plain"
    elif body is not None:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json; charset=utf-8"
    else:
        resp._content = b""
    resp.encoding = "utf-8"
    return resp


class FakeModule:
    def __init__(self, api: "FakeApi", prefix: str) -> None:
        self.api = api
        self.prefix = prefix

    def _call(self, method: str, path: str = "/", **kwargs: Any) -> Any:
        full = self.prefix + ("/" if path in ("", "/") else "/" + path.lstrip("/"))
        self.api.calls.append((method, full, kwargs))
        return self.api.responses.get((method, full), {})

    def get(self, path: str = "/", **kwargs: Any) -> Any:
        return self._call("GET", path, **kwargs)

    def post(self, path: str = "/", **kwargs: Any) -> Any:
        return self._call("POST", path, **kwargs)

    def put(self, path: str = "/", **kwargs: Any) -> Any:
        return self._call("PUT", path, **kwargs)

    def patch(self, path: str = "/", **kwargs: Any) -> Any:
        return self._call("PATCH", path, **kwargs)

    def delete(self, path: str = "/", **kwargs: Any) -> Any:
        return self._call("DELETE", path, **kwargs)


class FakeApi:
    """Records (method, path, kwargs) and answers from a canned response table."""

    def __init__(self, responses: dict | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str, dict]] = []

    @property
    def users(self) -> FakeModule:
        return FakeModule(self, "/users")

    @property
    def products(self) -> FakeModule:
        return FakeModule(self, "/products")

    @property
    def crawler(self) -> FakeModule:
        return FakeModule(self, "/crawler")

    @property
    def root(self) -> FakeModule:
        return FakeModule(self, "")
