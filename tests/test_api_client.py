from __future__ import annotations

import unittest
from unittest import mock

import requests

from services.api_client import (
    ApiClient,
    ApiError,
    NetworkError,
    UnauthorizedError,
    _sparse_params,
    error_message,
)
from tests.helpers import make_response


class SparseParamsTests(unittest.TestCase):
    def test_drops_empty_values_and_lowercases_booleans(self) -> None:
        params = _sparse_params({"page": 1, "search": "", "category": None, "inStock": True, "x": False})
        self.assertEqual(params, {"page": "1", "inStock": "true", "x": "false"})

    def test_none_params(self) -> None:
        self.assertEqual(_sparse_params(None), {})


class ApiClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = requests.Session()
        self.api = ApiClient("http://backend/api/", session=self.session)

    def _answer(self, response):
        return mock.patch.object(self.session, "request", return_value=response)

    def test_module_prefixes_build_urls(self) -> None:
        with self._answer(make_response(200, {"ok": True})) as req:
            self.assertEqual(self.api.users.get("/me"), {"ok": True})
            self.api.products.get("/", params={"page": 2})
            self.api.root.post("/crawler/run")

        urls = [c.kwargs["url"] for c in req.call_args_list]
        self.assertEqual(urls, [
            "http://backend/api/users/me",
            "http://backend/api/products/",
            "http://backend/api/crawler/run",
        ])
        self.assertEqual(req.call_args_list[1].kwargs["params"], {"page": "2"})
        self.assertIsNone(req.call_args_list[0].kwargs["params"])

    def test_non_2xx_raises_api_error_with_backend_message(self) -> None:
        with self._answer(make_response(400, {"message": "Email already registered"})):
            with self.assertRaises(ApiError) as caught:
                self.api.users.post("/register", json={})
        self.assertEqual(caught.exception.status, 400)
        self.assertEqual(error_message(caught.exception, "fallback"), "Email already registered")

    def test_plain_text_error_body(self) -> None:
        with self._answer(make_response(500, text="boom")):
            with self.assertRaises(ApiError) as caught:
                self.api.root.get("/dashboard/stats")
        self.assertEqual(caught.exception.message, "boom")

    def test_empty_success_body_is_empty_dict(self) -> None:
        with self._answer(make_response(204)):
            self.assertEqual(self.api.products.delete("/abc"), {})

    def test_transport_failure_becomes_network_error(self) -> None:
        with mock.patch.object(self.session, "request", side_effect=requests.ConnectionError("refused")):
            with self.assertRaises(NetworkError) as caught:
                self.api.users.get("/me")
        self.assertEqual(caught.exception.status, 0)
        self.assertEqual(error_message(caught.exception, "Failed to load"), "Failed to load")

    def test_401_fires_handlers_and_raises(self) -> None:
        fired: list[str] = []
        self.api.add_unauthorized_handler(lambda: fired.append("first"))
        self.api.add_unauthorized_handler(lambda: 1 / 0)  # a failing handler does not stop the others
        self.api.add_unauthorized_handler(lambda: fired.append("third"))

        with self._answer(make_response(401, {"message": "Not authenticated"})):
            with self.assertRaises(UnauthorizedError):
                self.api.users.get("/me")
        self.assertEqual(fired, ["first", "third"])

    def test_other_errors_do_not_fire_unauthorized_handlers(self) -> None:
        fired: list[str] = []
        self.api.add_unauthorized_handler(lambda: fired.append("x"))
        with self._answer(make_response(403, {"message": "Forbidden"})):
            with self.assertRaises(ApiError):
                self.api.users.get("/")
        self.assertEqual(fired, [])

    def test_cookie_changes_are_reported(self) -> None:
        seen: list[dict] = []
        self.api.add_cookie_listener(seen.append)

        def _login(**_kwargs):
            self.session.cookies.set("token", "abc")
            return make_response(200, {"message": "ok"})

        with mock.patch.object(self.session, "request", side_effect=_login):
            self.api.users.post("/login", json={"email": "a@b.c", "password": "secret"})
        self.assertEqual(seen, [{"token": "abc"}])

        # same cookies again: no notification
        with self._answer(make_response(200, {})):
            self.api.users.get("/me")
        self.assertEqual(len(seen), 1)

        self.api.clear_cookies()
        self.assertEqual(seen[-1], {})

    def test_import_export_cookies(self) -> None:
        self.api.import_cookies({"token": "restored"})
        self.assertEqual(self.api.export_cookies(), {"token": "restored"})
        self.api.import_cookies(None)
        self.assertEqual(self.api.export_cookies(), {"token": "restored"})


if __name__ == "__main__":
    unittest.main()
