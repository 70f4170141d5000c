from __future__ import annotations

from typing import Any

from services.api_client import ApiClient
from services.models import Product, ProductHistoryEntry, ProductPagination


def get_all_products(api: ApiClient, filters: dict[str, Any]) -> tuple[list[Product], ProductPagination]:
    """``filters`` is the sparse query built by the filter controller."""
    res = api.products.get("/", params=filters) or {}
    products = [Product.from_dict(p) for p in res.get("data") or [] if isinstance(p, dict)]
    return products, ProductPagination.from_dict(res.get("pagination"))


def get_product_by_id(api: ApiClient, product_id: str) -> Product:
    res = api.products.get(f"/{product_id}") or {}
    data = res.get("data") if isinstance(res.get("data"), dict) else res
    return Product.from_dict(data)


def get_product_history(api: ApiClient, product_id: str, limit: int = 50) -> tuple[list[ProductHistoryEntry], int]:
    res = api.products.get(f"/{product_id}/history", params={"limit": limit}) or {}
    history = [ProductHistoryEntry.from_dict(h) for h in res.get("data") or [] if isinstance(h, dict)]
    return history, int(res.get("total") or len(history))


def record_view(api: ApiClient, product_id: str) -> Any:
    return api.products.post(f"/{product_id}/view")


def record_redirect(api: ApiClient, product_id: str, source: str) -> Any:
    return api.products.post(f"/{product_id}/redirect", json={"source": source})


def delete_product(api: ApiClient, product_id: str) -> Any:
    return api.products.delete(f"/{product_id}")


def get_product_analytics(api: ApiClient, time_range: str = "all") -> dict[str, Any]:
    res = api.products.get("/analytics", params={"range": time_range}) or {}
    return res.get("analytics") or res


def get_top_products(api: ApiClient, time_range: str = "all") -> dict[str, Any]:
    res = api.products.get("/top-products", params={"range": time_range}) or {}
    return {
        "topViewed": list(res.get("topViewed") or []),
        "topRedirected": list(res.get("topRedirected") or []),
    }
