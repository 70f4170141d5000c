import logging
import unittest

from services.logging_setup import log_timing, parse_level, summarize_for_log


class ParseLevelTests(unittest.TestCase):
    def test_names_and_numbers(self) -> None:
        self.assertEqual(parse_level("debug"), "DEBUG")
        self.assertEqual(parse_level(" success "), "SUCCESS")
        self.assertEqual(parse_level(logging.WARNING), "WARNING")

    def test_unknown_falls_back_to_info(self) -> None:
        self.assertEqual(parse_level("loud"), "INFO")
        self.assertEqual(parse_level(None), "INFO")
        self.assertEqual(parse_level(7), "INFO")


class SummarizeTests(unittest.TestCase):
    def test_credentials_are_redacted(self) -> None:
        out = summarize_for_log({"email": "a@shop.vn", "password": "secret1", "nested": {"newPassword": "x"}})
        self.assertEqual(out, {"email": "a@shop.vn", "password": "***", "nested": {"newPassword": "***"}})

    def test_long_values_are_cut(self) -> None:
        self.assertEqual(summarize_for_log("x" * 200, max_text=10), "xxxxxxxxxx...(200 chars)")
        self.assertEqual(summarize_for_log(list(range(5)), max_items=2), ["0", "1", "...(5 items)"])


class LogTimingTests(unittest.TestCase):
    def test_exceptions_propagate(self) -> None:
        with self.assertRaises(ValueError):
            with log_timing("test.block", url="/products/"):
                raise ValueError("boom")


if __name__ == "__main__":
    unittest.main()
