import unittest

from layout.formatters import format_change_value, format_date, format_duration, format_price, page_numbers, short_id


class FormatterTests(unittest.TestCase):
    def test_price(self) -> None:
        self.assertEqual(format_price(12990000), "12.990.000 ₫")
        self.assertEqual(format_price(990), "990 ₫")
        self.assertEqual(format_price(None), "-")

    def test_date(self) -> None:
        self.assertEqual(format_date("2024-05-01T10:00:00Z"), "01/05/2024 10:00:00")
        self.assertEqual(format_date(""), "-")
        self.assertEqual(format_date("yesterday"), "-")

    def test_duration_and_short_id(self) -> None:
        self.assertEqual(format_duration(125), "2m 5s")
        self.assertEqual(format_duration(None), "-")
        self.assertEqual(short_id("crawl-2024"), "crawl-2024")
        self.assertEqual(short_id("x" * 25), "x" * 20 + "...")

    def test_change_values(self) -> None:
        self.assertEqual(format_change_value("price", 1500000), "1.500.000 ₫")
        self.assertEqual(format_change_value("discount", 15), "15%")
        self.assertEqual(format_change_value("inStock", False), "no")
        self.assertEqual(format_change_value("name", None), "-")


class PageNumberTests(unittest.TestCase):
    def test_small_range_has_no_gaps(self) -> None:
        self.assertEqual(page_numbers(1, 1), [1])
        self.assertEqual(page_numbers(2, 4), [1, 2, 3, 4])

    def test_gaps_around_current(self) -> None:
        self.assertEqual(page_numbers(5, 10), [1, 2, None, 4, 5, 6, None, 9, 10])
        self.assertEqual(page_numbers(1, 10), [1, 2, None, 9, 10])

    def test_out_of_range_is_clamped(self) -> None:
        self.assertEqual(page_numbers(40, 5), [1, 2, None, 4, 5])


if __name__ == "__main__":
    unittest.main()
