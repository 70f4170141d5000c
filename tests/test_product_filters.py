from __future__ import annotations

import asyncio
import unittest

from services.api_client import ApiError, NetworkError
from services.models import Product, ProductPagination
from services.product_filters import ProductFilterController, parse_price


DEBOUNCE_S = 0.05


def product(pid: str) -> Product:
    return Product(id=pid, name=f"Product {pid}", price=1000.0)


class RecordingFetch:
    """Answers every query with one product named after the call number."""

    def __init__(self) -> None:
        self.queries: list[dict] = []
        self.delays: list[float] = []
        self.error: Exception | None = None

    async def __call__(self, query: dict):
        self.queries.append(dict(query))
        call_no = len(self.queries)
        delay = self.delays.pop(0) if self.delays else 0
        if delay:
            await asyncio.sleep(delay)
        if self.error is not None:
            raise self.error
        return [product(str(call_no))], ProductPagination(current_page=query.get("page", 1), total_pages=5)


class ParsePriceTests(unittest.TestCase):
    def test_values(self) -> None:
        self.assertIsNone(parse_price(""))
        self.assertIsNone(parse_price(None))
        self.assertIsNone(parse_price("abc"))
        self.assertEqual(parse_price("1500000"), 1500000)
        self.assertEqual(parse_price(2.9), 2)
        self.assertEqual(parse_price("-5"), 0)


class ProductFilterControllerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.fetch = RecordingFetch()
        self.notes: list[tuple[str, str]] = []
        self.ctrl = ProductFilterController(
            self.fetch,
            lambda message, kind: self.notes.append((message, kind)),
            debounce_s=DEBOUNCE_S,
            error_text="Failed to load products",
        )

    async def asyncTearDown(self) -> None:
        self.ctrl.dispose()

    async def _settle(self) -> None:
        await asyncio.sleep(DEBOUNCE_S * 3)

    async def test_typing_burst_issues_single_fetch(self) -> None:
        for text in ("i", "ip", "iph", "iphone"):
            self.ctrl.set_search(text)
            await asyncio.sleep(DEBOUNCE_S / 5)
        self.assertTrue(self.ctrl.search_pending)
        await self._settle()

        self.assertEqual(self.fetch.queries, [{"page": 1, "search": "iphone"}])
        self.assertFalse(self.ctrl.search_pending)
        self.assertEqual([p.id for p in self.ctrl.products], ["1"])

    async def test_search_resets_page(self) -> None:
        await self.ctrl.set_page(3)
        self.ctrl.set_search("galaxy")
        await self._settle()
        self.assertEqual(self.fetch.queries[-1], {"page": 1, "search": "galaxy"})

    async def test_draft_filters_wait_for_apply(self) -> None:
        self.ctrl.set_category("phone")
        self.ctrl.set_in_stock(True)
        self.ctrl.set_min_price("0")
        self.ctrl.set_max_price("20000000")
        self.ctrl.set_sort("price_asc")
        self.ctrl.set_search("samsung")
        await self._settle()
        self.assertEqual(self.fetch.queries[-1], {"page": 1, "search": "samsung"})

        await self.ctrl.apply_filters()
        self.assertEqual(self.fetch.queries[-1], {
            "page": 1,
            "search": "samsung",
            "category": "phone",
            "inStock": True,
            "maxPrice": 20000000,
            "sort": "price_asc",
        })

    async def test_apply_cancels_pending_search(self) -> None:
        self.ctrl.set_search("oppo")
        await self.ctrl.apply_filters()
        await self._settle()
        self.assertEqual(self.fetch.queries, [{"page": 1, "search": "oppo"}])

    async def test_page_change_keeps_applied_filters_only(self) -> None:
        self.ctrl.set_source("cellphones")
        await self.ctrl.apply_filters()
        self.ctrl.set_source("thegioididong")  # draft only
        await self.ctrl.set_page(2)
        self.assertEqual(self.fetch.queries[-1], {"page": 2, "source": "cellphones"})

    async def test_same_page_still_fetches(self) -> None:
        await self.ctrl.set_page(2)
        await self.ctrl.set_page(2)
        self.assertEqual(len(self.fetch.queries), 2)

    async def test_clear_from_page_three(self) -> None:
        self.ctrl.set_category("laptop")
        await self.ctrl.apply_filters()
        await self.ctrl.set_page(3)
        self.ctrl.set_search("dell")
        await self.ctrl.clear_filters()
        await self._settle()

        self.assertEqual(self.fetch.queries[-1], {"page": 1})
        self.assertEqual(self.ctrl.search, "")
        self.assertEqual(self.ctrl.page, 1)
        self.assertEqual(self.ctrl.draft, self.ctrl.applied)

    async def test_failure_keeps_results_and_notifies_once(self) -> None:
        await self.ctrl.fetch_products()
        before = list(self.ctrl.products)

        self.fetch.error = ApiError(500, "Database unavailable")
        ok = await self.ctrl.set_page(2)

        self.assertFalse(ok)
        self.assertEqual(self.ctrl.products, before)
        self.assertFalse(self.ctrl.loading)
        self.assertEqual(self.notes, [("Database unavailable", "negative")])

    async def test_network_failure_uses_generic_text(self) -> None:
        self.fetch.error = NetworkError("connection refused")
        await self.ctrl.fetch_products()
        self.assertEqual(self.notes, [("Failed to load products", "negative")])

    async def test_stale_response_is_dropped(self) -> None:
        self.fetch.delays = [DEBOUNCE_S * 2, 0]
        slow = asyncio.ensure_future(self.ctrl.set_page(2))
        await asyncio.sleep(0)
        fast_ok = await self.ctrl.set_page(3)
        slow_ok = await slow

        self.assertTrue(fast_ok)
        self.assertFalse(slow_ok)
        # second request answered with product "2"; the late first answer is ignored
        self.assertEqual([p.id for p in self.ctrl.products], ["2"])
        self.assertEqual(self.ctrl.pagination.current_page, 3)
        self.assertFalse(self.ctrl.loading)

    async def test_listeners_see_loading_flag(self) -> None:
        states: list[bool] = []
        self.ctrl.subscribe(lambda: states.append(self.ctrl.loading))
        await self.ctrl.fetch_products()
        self.assertEqual(states[0], True)
        self.assertEqual(states[-1], False)

    async def test_dispose_cancels_pending_search(self) -> None:
        self.ctrl.set_search("nokia")
        self.ctrl.dispose()
        await self._settle()
        self.assertEqual(self.fetch.queries, [])
        self.assertFalse(await self.ctrl.fetch_products())


if __name__ == "__main__":
    unittest.main()
