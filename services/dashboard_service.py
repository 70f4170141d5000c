from __future__ import annotations

from typing import Any, Optional

from services.api_client import ApiClient


def get_dashboard_stats(api: ApiClient, time_range: str = "7d") -> dict[str, Any]:
    res = api.root.get("/dashboard/stats", params={"timeRange": time_range}) or {}
    return res.get("data") or {}


def get_recent_activity(api: ApiClient, limit: Optional[int] = None) -> dict[str, Any]:
    res = api.root.get("/dashboard/recent-activity", params={"limit": limit}) or {}
    return res.get("data") or {}
