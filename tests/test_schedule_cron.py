import unittest

from services.schedule_service import CRON_PRESETS, cron_to_human_readable


class CronTextTests(unittest.TestCase):
    def test_known_patterns(self) -> None:
        self.assertEqual(cron_to_human_readable("0 2 * * *"), "Daily at 02:00")
        self.assertEqual(cron_to_human_readable("*/30 * * * *"), "Every 30 minutes")
        self.assertEqual(cron_to_human_readable("0 0 1 * *"), "First day of the month at 00:00")

    def test_composed_text(self) -> None:
        self.assertEqual(cron_to_human_readable("*/15 * * * *"), "every 15 minutes")
        self.assertEqual(cron_to_human_readable("0 */2 * * *"), "minute 0 every 2 hours")
        self.assertEqual(cron_to_human_readable("5 8 * * 1"), "minute 5 at 8:05 on Monday")
        self.assertEqual(cron_to_human_readable("0 3 15 6 *"), "minute 0 at 3:00 on day 15 in month 6")

    def test_sunday_as_seven(self) -> None:
        self.assertTrue(cron_to_human_readable("0 9 * * 7").endswith("on Sunday"))

    def test_short_expression_is_returned_as_is(self) -> None:
        self.assertEqual(cron_to_human_readable("0 2 *"), "0 2 *")
        self.assertEqual(cron_to_human_readable(""), "")

    def test_presets_are_five_fields(self) -> None:
        for _label, cron in CRON_PRESETS:
            self.assertEqual(len(cron.split()), 5, cron)


if __name__ == "__main__":
    unittest.main()
