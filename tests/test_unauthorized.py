from __future__ import annotations

import unittest
from unittest import mock

import requests

from auth.session import SessionStore
from auth.unauthorized import UnauthorizedRedirect, is_protected_path
from services import product_service
from services.api_client import ApiClient, UnauthorizedError
from services.models import User
from tests.helpers import make_response


class ProtectedPathTests(unittest.TestCase):
    def test_prefix_match(self) -> None:
        self.assertTrue(is_protected_path("/admin/products"))
        self.assertTrue(is_protected_path("/profile"))
        self.assertFalse(is_protected_path("/"))
        self.assertFalse(is_protected_path("/login"))


class UnauthorizedRedirectTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session_store = SessionStore()
        self.session_store.set_user(User(email="admin@shop.vn", name="Admin", role="admin"))
        self.session_store.set_checking(False)
        self.redirects: list[str] = []
        self.path = "/admin/products"

        self.http = requests.Session()
        self.api = ApiClient("http://backend/api", session=self.http)
        self.api.add_unauthorized_handler(UnauthorizedRedirect(
            self.session_store,
            current_path=lambda: self.path,
            redirect=self.redirects.append,
        ))

    def test_expired_session_on_admin_page_goes_to_login(self) -> None:
        with mock.patch.object(self.http, "request", return_value=make_response(401, {"message": "jwt expired"})):
            with self.assertRaises(UnauthorizedError):
                product_service.get_all_products(self.api, {"page": 1})

        self.assertIsNone(self.session_store.user)
        self.assertEqual(self.redirects, ["/login"])

    def test_expired_session_on_public_page_only_clears_user(self) -> None:
        self.path = "/"
        with mock.patch.object(self.http, "request", return_value=make_response(401, {})):
            with self.assertRaises(UnauthorizedError):
                self.api.users.get("/me")

        self.assertIsNone(self.session_store.user)
        self.assertEqual(self.redirects, [])


if __name__ == "__main__":
    unittest.main()
