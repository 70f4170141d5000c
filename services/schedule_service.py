from __future__ import annotations

from typing import Any, Optional

from services.api_client import ApiClient
from services.models import CrawlSchedule


DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"

CRON_PRESETS: list[tuple[str, str]] = [
    ("Every 30 minutes", "*/30 * * * *"),
    ("Every hour", "0 * * * *"),
    ("Every 6 hours", "0 */6 * * *"),
    ("Daily at 02:00", "0 2 * * *"),
    ("Daily at 14:00", "0 14 * * *"),
    ("Mondays at 08:00", "0 8 * * 1"),
    ("First day of the month at 00:00", "0 0 1 * *"),
]

_KNOWN_PATTERNS = {
    "0 2 * * *": "Daily at 02:00",
    "0 0 * * 0": "Sundays at 00:00",
    "0 0 1 * *": "First day of the month at 00:00",
    "*/30 * * * *": "Every 30 minutes",
    "0 */6 * * *": "Every 6 hours",
}

_WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def get_schedules(api: ApiClient) -> list[CrawlSchedule]:
    res = api.root.get("/crawler/schedules") or {}
    return [CrawlSchedule.from_dict(s) for s in res.get("data") or [] if isinstance(s, dict)]


def create_schedule(
    api: ApiClient,
    *,
    name: str,
    source: str,
    category: str,
    cron_expression: str,
    timezone: str = DEFAULT_TIMEZONE,
    is_active: bool = True,
) -> dict[str, Any]:
    return api.root.post(
        "/crawler/schedules",
        json={
            "name": name,
            "source": source,
            "category": category,
            "cronExpression": cron_expression,
            "timezone": timezone,
            "isActive": is_active,
        },
    )


def update_schedule(
    api: ApiClient,
    schedule_id: str,
    *,
    name: Optional[str] = None,
    cron_expression: Optional[str] = None,
    timezone: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> dict[str, Any]:
    body = {
        "name": name,
        "cronExpression": cron_expression,
        "timezone": timezone,
        "isActive": is_active,
    }
    return api.root.put(f"/crawler/schedules/{schedule_id}", json={k: v for k, v in body.items() if v is not None})


def delete_schedule(api: ApiClient, schedule_id: str) -> dict[str, Any]:
    return api.root.delete(f"/crawler/schedules/{schedule_id}")


def toggle_schedule(api: ApiClient, schedule_id: str) -> dict[str, Any]:
    return api.root.patch(f"/crawler/schedules/{schedule_id}/toggle")


def cron_to_human_readable(cron: str) -> str:
    """Rough English rendering of a five-field cron expression, for table display only."""
    cron = str(cron or "").strip()
    parts = cron.split()
    if len(parts) < 5:
        return cron
    if cron in _KNOWN_PATTERNS:
        return _KNOWN_PATTERNS[cron]

    minute, hour, day_of_month, month, day_of_week = parts[:5]

    if minute == "*":
        result = "every minute"
    elif minute.startswith("*/"):
        result = f"every {minute[2:]} minutes"
    else:
        result = f"minute {minute}"

    if hour != "*":
        if hour.startswith("*/"):
            result += f" every {hour[2:]} hours"
        else:
            result += f" at {hour}:{minute.zfill(2)}"

    if day_of_month != "*":
        result += f" on day {day_of_month}"
    if month != "*":
        result += f" in month {month}"
    if day_of_week != "*":
        if day_of_week.isdigit() and int(day_of_week) % 7 < len(_WEEKDAYS):
            result += f" on {_WEEKDAYS[int(day_of_week) % 7]}"
        else:
            result += f" on weekday {day_of_week}"

    return result or cron
