from __future__ import annotations

from typing import Any, Optional

from services.api_client import ApiClient
from services.models import User


def register(api: ApiClient, *, email: str, password: str, name: str, role: Optional[str] = None) -> dict[str, Any]:
    body: dict[str, Any] = {"email": email, "password": password, "name": name}
    if role:
        body["role"] = role
    return api.users.post("/register", json=body)


def login(api: ApiClient, *, email: str, password: str) -> dict[str, Any]:
    return api.users.post("/login", json={"email": email, "password": password})


def logout(api: ApiClient) -> dict[str, Any]:
    return api.users.post("/logout", json={})


def get_me(api: ApiClient) -> Optional[User]:
    """Session probe: the current user, or None when the backend answers without one."""
    res = api.users.get("/me")
    return User.from_dict((res or {}).get("user"))


def update_me(api: ApiClient, *, name: Optional[str] = None, email: Optional[str] = None,
              preferences: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    body = {k: v for k, v in {"name": name, "email": email, "preferences": preferences}.items() if v is not None}
    return api.users.put("/me", json=body)


def change_password(api: ApiClient, *, old_password: str, new_password: str) -> dict[str, Any]:
    return api.users.post(
        "/change-password",
        json={"oldPassword": old_password, "newPassword": new_password},
    )


MIN_PASSWORD_LENGTH = 6


def validate_password_change(old_password: str, new_password: str, confirm_password: str) -> Optional[tuple[str, str]]:
    """Checks run before the request; returns ``(i18n_key, english_text)`` of the first failure."""
    if new_password != confirm_password:
        return "password.mismatch", "New password and confirmation do not match"
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return "password.too_short", f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
    if old_password == new_password:
        return "password.same_as_old", "New password must differ from the old one"
    return None


def get_my_activity(api: ApiClient) -> dict[str, Any]:
    res = api.users.get("/me/activity")
    return (res or {}).get("activity") or {}


# ------------------------------------------------------------------ Admin

def list_users(api: ApiClient) -> list[dict[str, Any]]:
    res = api.users.get("/")
    if isinstance(res, list):
        return res
    data = (res or {}).get("data")
    if data is None:
        data = (res or {}).get("users")
    return list(data or [])


def get_user_activity(api: ApiClient, user_id: str) -> dict[str, Any]:
    res = api.users.get(f"/{user_id}/activity")
    return (res or {}).get("activity") or {}


def send_email(api: ApiClient, user_id: str, *, subject: str, text: str) -> dict[str, Any]:
    return api.users.post(f"/{user_id}/send-email", json={"subject": subject, "text": text})


def send_activity_summary(api: ApiClient, user_id: str) -> dict[str, Any]:
    return api.users.post(f"/{user_id}/send-activity-summary")
