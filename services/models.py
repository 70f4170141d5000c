from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class SortOrder(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    BESTSELLER = "bestseller"
    DISCOUNT = "discount"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


CATEGORIES = ("phone", "laptop", "tablet")
SOURCES = ("dienmayxanh", "thegioididong", "cellphones")


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float_or_none(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ------------------------------------------------------------------ Users

@dataclass(frozen=True)
class User:
    email: str
    name: str
    role: str = "user"  # "user" | "admin" | "crawler"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Optional["User"]:
        if not data:
            return None
        return cls(
            email=str(data.get("email", "") or ""),
            name=str(data.get("name", "") or ""),
            role=str(data.get("role", "user") or "user"),
        )


# ------------------------------------------------------------------ Products

@dataclass
class Product:
    id: str
    name: str
    price: float
    category: str = ""
    brand: str = ""
    source: str = ""
    source_url: str = ""
    in_stock: bool = True
    original_price: Optional[float] = None
    discount: Optional[float] = None
    image_url: str = ""
    description: str = ""
    sold_count: int = 0
    promotion: str = ""
    rating: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            name=str(data.get("name", "") or ""),
            price=_float_or_none(data.get("price")) or 0.0,
            category=str(data.get("category", "") or ""),
            brand=str(data.get("brand", "") or ""),
            source=str(data.get("source", "") or ""),
            source_url=str(data.get("sourceUrl", "") or ""),
            in_stock=bool(data.get("inStock", True)),
            original_price=_float_or_none(data.get("originalPrice")),
            discount=_float_or_none(data.get("discount")),
            image_url=str(data.get("imageUrl", "") or ""),
            description=str(data.get("description", "") or ""),
            sold_count=_int(data.get("soldCount")),
            promotion=str(data.get("promotion", "") or ""),
            rating=_float_or_none(data.get("rating")),
        )


@dataclass(frozen=True)
class ProductPagination:
    current_page: int = 1
    total_pages: int = 1
    total_products: int = 0
    has_next_page: bool = False
    has_prev_page: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ProductPagination":
        data = data or {}
        return cls(
            current_page=max(1, _int(data.get("currentPage"), 1)),
            total_pages=max(1, _int(data.get("totalPages"), 1)),
            total_products=_int(data.get("totalProducts")),
            has_next_page=bool(data.get("hasNextPage", False)),
            has_prev_page=bool(data.get("hasPrevPage", False)),
        )


@dataclass(frozen=True)
class HistoryChange:
    field: str
    old_value: Any
    new_value: Any


@dataclass
class ProductHistoryEntry:
    changed_at: str
    changes: list[HistoryChange] = field(default_factory=list)
    price: Optional[float] = None
    original_price: Optional[float] = None
    discount: Optional[float] = None
    in_stock: Optional[bool] = None
    crawl_job_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductHistoryEntry":
        changes = [
            HistoryChange(
                field=str(c.get("field", "")),
                old_value=c.get("oldValue"),
                new_value=c.get("newValue"),
            )
            for c in data.get("changes") or []
            if isinstance(c, dict)
        ]
        in_stock = data.get("inStock")
        return cls(
            changed_at=str(data.get("changedAt", "") or ""),
            changes=changes,
            price=_float_or_none(data.get("price")),
            original_price=_float_or_none(data.get("originalPrice")),
            discount=_float_or_none(data.get("discount")),
            in_stock=None if in_stock is None else bool(in_stock),
            crawl_job_id=str(data.get("crawlJobId", "") or ""),
        )


# ------------------------------------------------------------------ Crawler

@dataclass(frozen=True)
class JobLog:
    timestamp: str
    level: str
    message: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobLog":
        return cls(
            timestamp=str(data.get("timestamp", "") or ""),
            level=str(data.get("level", "info") or "info"),
            message=str(data.get("message", "") or ""),
        )


@dataclass
class CrawlJob:
    id: str
    job_id: str
    source: str
    category: str
    status: str
    progress: float = 0
    started_at: str = ""
    completed_at: str = ""
    duration: Optional[int] = None
    new_items: int = 0
    updated_items: int = 0
    failed_items: int = 0
    error: str = ""
    triggered_by: str = ""

    @property
    def is_running(self) -> bool:
        return self.status == JobStatus.RUNNING.value

    @property
    def is_cancellable(self) -> bool:
        return self.status in (JobStatus.RUNNING.value, JobStatus.PENDING.value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrawlJob":
        duration = data.get("duration")
        return cls(
            id=str(data.get("_id", "") or ""),
            job_id=str(data.get("jobId", "") or ""),
            source=str(data.get("source", "") or ""),
            category=str(data.get("category", "") or ""),
            status=str(data.get("status", JobStatus.PENDING.value) or JobStatus.PENDING.value),
            progress=_float_or_none(data.get("progress")) or 0,
            started_at=str(data.get("startedAt", "") or ""),
            completed_at=str(data.get("completedAt", "") or ""),
            duration=None if duration is None else _int(duration),
            new_items=_int(data.get("newItems")),
            updated_items=_int(data.get("updatedItems")),
            failed_items=_int(data.get("failedItems")),
            error=str(data.get("error", "") or ""),
            triggered_by=str(data.get("triggeredBy", "") or ""),
        )


@dataclass(frozen=True)
class CrawlStats:
    total: int = 0
    running: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "CrawlStats":
        data = data or {}
        return cls(**{name: _int(data.get(name)) for name in cls.__dataclass_fields__})


@dataclass
class CrawlSchedule:
    id: str
    name: str
    source: str
    category: str
    cron_expression: str
    timezone: str = "Asia/Ho_Chi_Minh"
    is_active: bool = True
    last_run_at: str = ""
    last_status: str = ""
    next_run_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrawlSchedule":
        return cls(
            id=str(data.get("_id", "") or ""),
            name=str(data.get("name", "") or ""),
            source=str(data.get("source", "") or ""),
            category=str(data.get("category", "") or ""),
            cron_expression=str(data.get("cronExpression", "") or ""),
            timezone=str(data.get("timezone", "") or "Asia/Ho_Chi_Minh"),
            is_active=bool(data.get("isActive", False)),
            last_run_at=str(data.get("lastRunAt", "") or ""),
            last_status=str(data.get("lastStatus", "") or ""),
            next_run_at=str(data.get("nextRunAt", "") or ""),
        )
