from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


def format_price(value: Optional[float]) -> str:
    """Vietnamese dong with dot thousands separators: 12.990.000 ₫"""
    if value is None:
        return "-"
    return f"{int(round(value)):,}".replace(",", ".") + " ₫"


def format_date(value: Optional[str]) -> str:
    if not value:
        return "-"
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return "-"
    return parsed.strftime("%d/%m/%Y %H:%M:%S")


def format_duration(seconds: Optional[int]) -> str:
    if not seconds:
        return "-"
    return f"{seconds // 60}m {seconds % 60}s"


def short_id(value: str, length: int = 20) -> str:
    value = str(value or "")
    return value if len(value) <= length else value[:length] + "..."


PRICE_FIELDS = ("price", "originalPrice")


def format_change_value(field: str, value: Any) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if field in PRICE_FIELDS and isinstance(value, (int, float)):
        return format_price(float(value))
    if field == "discount" and isinstance(value, (int, float)):
        return f"{value:g}%"
    return str(value)


def page_numbers(current: int, total: int) -> list[Optional[int]]:
    """
    Page buttons to show: first two, last two and the neighbours of the
    current page; ``None`` marks a gap (rendered as "...").
    """
    total = max(1, int(total))
    current = min(max(1, int(current)), total)
    keep = sorted({p for p in (1, 2, total - 1, total, current - 1, current, current + 1) if 1 <= p <= total})
    out: list[Optional[int]] = []
    for i, page in enumerate(keep):
        if i > 0 and page != keep[i - 1] + 1:
            out.append(None)
        out.append(page)
    return out
