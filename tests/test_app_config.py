import json
import os
import tempfile
import unittest
from unittest import mock

from services import app_config
from services.app_config import AppConfig, clear_app_config_cache, get_app_config, load_app_config


class AppConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "config", "app_config.json")
        clear_app_config_cache()

    def tearDown(self) -> None:
        clear_app_config_cache()
        self._tmp.cleanup()

    def test_missing_file_writes_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("API_URL", None)
            cfg = load_app_config(self.path)

        self.assertTrue(os.path.exists(self.path))
        self.assertEqual(cfg, AppConfig())
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["polling"]["schedules_interval_s"], 30.0)

    def test_env_api_url_wins_and_is_trimmed(self) -> None:
        with mock.patch.dict(os.environ, {"API_URL": "https://prices.example.vn/api/"}):
            cfg = load_app_config(self.path)
        self.assertEqual(cfg.api.base_url, "https://prices.example.vn/api")

    def test_unknown_keys_are_ignored(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"catalog": {"search_debounce_s": 0.2, "carousel": 8}, "ui": "broken"}, f)

        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("API_URL", None)
            cfg = load_app_config(self.path)

        self.assertEqual(cfg.catalog.search_debounce_s, 0.2)
        self.assertEqual(cfg.catalog.history_limit, 50)
        self.assertEqual(cfg.ui.title, "PriceWatch")

    def test_cached_config_uses_env_path(self) -> None:
        with mock.patch.dict(os.environ, {"APP_CONFIG_PATH": self.path}):
            self.assertEqual(app_config.get_config_path(), self.path)
            first = get_app_config()
            self.assertIs(get_app_config(), first)


if __name__ == "__main__":
    unittest.main()
