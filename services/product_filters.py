from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from services.api_client import ApiError, error_message
from services.models import Product, ProductPagination, SortOrder


FetchProductsFn = Callable[[dict[str, Any]], Awaitable[tuple[list[Product], ProductPagination]]]
NotifyFn = Callable[[str, str], None]
ChangeListener = Callable[[], None]

IN_STOCK_VALUES = ("", "true", "false")


def parse_price(value: Any) -> Optional[int]:
    """Price inputs arrive as text or numbers; empty/invalid means "no bound"."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return max(0, int(float(text)))
    except ValueError:
        return None


@dataclass(frozen=True)
class ProductFilters:
    category: str = ""
    source: str = ""
    in_stock: str = ""
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    sort: str = ""


class ProductFilterController:
    """
    Keeps a remote product listing in sync with locally edited filters.

    Two commit policies live side by side:
      - search text is live: every edit restarts a debounce window, and when
        the window closes the page goes back to 1 and a fetch is issued;
      - every other filter is a draft until ``apply_filters()`` commits it.

    A search-triggered fetch (and a page change) carries the last *applied*
    values of the other filters, never unapplied drafts.

    Every fetch is sequence-stamped; responses older than the newest
    dispatched request are dropped, so results never go backwards.
    """

    def __init__(
        self,
        fetch: FetchProductsFn,
        notify: NotifyFn,
        *,
        debounce_s: float = 0.5,
        error_text: str = "Failed to load products",
    ) -> None:
        self._fetch = fetch
        self._notify = notify
        self.debounce_s = float(debounce_s)
        self.error_text = error_text

        self.search: str = ""
        self.draft = ProductFilters()
        self.applied = ProductFilters()
        self.page: int = 1

        self.products: list[Product] = []
        self.pagination: Optional[ProductPagination] = None
        self.loading: bool = False

        self._seq = 0
        self._in_flight = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._alive = True
        self._listeners: list[ChangeListener] = []

    # ------------------------------------------------------------------ listeners

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("[ProductFilterController._changed] - listener_failed")

    # ------------------------------------------------------------------ search (debounced)

    def set_search(self, text: str) -> None:
        self.search = str(text or "")
        self._cancel_debounce()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounced_search())

    @property
    def search_pending(self) -> bool:
        return self._debounce_task is not None and not self._debounce_task.done()

    async def _debounced_search(self) -> None:
        await asyncio.sleep(self.debounce_s)
        # detach first so a new keystroke does not cancel the fetch below
        self._debounce_task = None
        self.page = 1
        await self.fetch_products()

    def _cancel_debounce(self) -> None:
        task = self._debounce_task
        self._debounce_task = None
        if task is not None and not task.done():
            task.cancel()

    # ------------------------------------------------------------------ drafts (apply-gated)

    def set_category(self, value: str) -> None:
        self.draft = replace(self.draft, category=str(value or ""))

    def set_source(self, value: str) -> None:
        self.draft = replace(self.draft, source=str(value or ""))

    def set_in_stock(self, value: Any) -> None:
        if isinstance(value, bool):
            value = "true" if value else "false"
        value = str(value or "").lower()
        self.draft = replace(self.draft, in_stock=value if value in IN_STOCK_VALUES else "")

    def set_min_price(self, value: Any) -> None:
        self.draft = replace(self.draft, min_price=parse_price(value))

    def set_max_price(self, value: Any) -> None:
        self.draft = replace(self.draft, max_price=parse_price(value))

    def set_sort(self, value: Any) -> None:
        value = value.value if isinstance(value, SortOrder) else str(value or "")
        allowed = {s.value for s in SortOrder}
        self.draft = replace(self.draft, sort=value if value in allowed else "")

    # ------------------------------------------------------------------ commands

    async def apply_filters(self) -> bool:
        # the fetch below already carries the current search text
        self._cancel_debounce()
        self.applied = self.draft
        self.page = 1
        return await self.fetch_products()

    async def clear_filters(self) -> bool:
        self._cancel_debounce()
        self.search = ""
        self.draft = ProductFilters()
        self.applied = ProductFilters()
        self.page = 1
        return await self.fetch_products()

    async def set_page(self, page: int) -> bool:
        try:
            self.page = max(1, int(page))
        except (TypeError, ValueError):
            self.page = 1
        return await self.fetch_products()

    def build_query(self) -> dict[str, Any]:
        """Sparse query: only non-empty, non-default values are sent."""
        query: dict[str, Any] = {"page": self.page}
        search = self.search.strip()
        if search:
            query["search"] = search
        f = self.applied
        if f.category:
            query["category"] = f.category
        if f.source:
            query["source"] = f.source
        if f.in_stock:
            query["inStock"] = f.in_stock == "true"
        if f.min_price:
            query["minPrice"] = f.min_price
        if f.max_price:
            query["maxPrice"] = f.max_price
        if f.sort:
            query["sort"] = f.sort
        return query

    async def fetch_products(self) -> bool:
        if not self._alive:
            return False

        self._seq += 1
        seq = self._seq
        query = self.build_query()

        self._in_flight += 1
        self.loading = True
        self._changed()
        try:
            products, pagination = await self._fetch(query)
        except ApiError as ex:
            if self._is_current(seq):
                logger.warning(f"[ProductFilterController.fetch_products] - fetch_failed - query={query} error={ex!r}")
                self._notify(error_message(ex, self.error_text), "negative")
            return False
        except Exception:
            if self._is_current(seq):
                logger.exception(f"[ProductFilterController.fetch_products] - fetch_crashed - query={query}")
                self._notify(self.error_text, "negative")
            return False
        finally:
            self._in_flight -= 1
            self.loading = self._in_flight > 0
            if self._alive:
                self._changed()

        if not self._is_current(seq):
            logger.debug(f"[ProductFilterController.fetch_products] - stale_response_dropped - seq={seq} latest={self._seq}")
            return False

        self.products = list(products)
        self.pagination = pagination
        self._changed()
        return True

    def _is_current(self, seq: int) -> bool:
        return self._alive and seq == self._seq

    # ------------------------------------------------------------------ lifecycle

    def dispose(self) -> None:
        self._alive = False
        self._cancel_debounce()
        self._listeners.clear()
