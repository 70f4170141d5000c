from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppTokens:
    """Shared storefront style tokens."""

    primary: str = "#2563eb"
    secondary: str = "#0ea5e9"
    accent: str = "#f59e0b"
    radius_lg: str = "16px"
    card_width: str = "w-56"


TOKENS = AppTokens()


BUTTON_VARIANTS: dict[str, str] = {
    "primary": "color=primary text-color=white unelevated no-caps",
    "success": "color=positive text-color=white unelevated no-caps",
    "danger": "color=negative text-color=white unelevated no-caps",
    "neutral": "outline color=secondary no-caps",
    "flat": "flat dense no-caps",
}

JOB_STATUS_COLORS: dict[str, str] = {
    "pending": "grey",
    "running": "primary",
    "completed": "positive",
    "failed": "negative",
    "cancelled": "orange",
}

LOG_LEVEL_CLASSES: dict[str, str] = {
    "info": "text-gray-700",
    "warning": "text-amber-600",
    "error": "text-red-600",
}


def button_props(variant: str = "primary") -> str:
    return BUTTON_VARIANTS.get(variant, BUTTON_VARIANTS["primary"])


def button_classes(full: bool = False) -> str:
    base = "h-[40px] px-4 rounded-xl font-semibold"
    return f"{base} w-full" if full else base


def panel_classes(padded: bool = True) -> str:
    base = "w-full rounded-xl shadow-sm"
    return f"{base} p-4" if padded else base


def section_title_classes() -> str:
    return "text-base font-semibold"


def section_subtitle_classes() -> str:
    return "text-sm text-gray-500"

