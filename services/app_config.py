from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from typing import Any

from loguru import logger

# --------------------------------------------------------------------------------------
# Config location
# --------------------------------------------------------------------------------------

# APP_CONFIG_PATH overrides the default location (useful for production/testing).
DEFAULT_CONFIG_PATH = "config/app_config.json"


def get_config_path() -> str:
    return os.environ.get("APP_CONFIG_PATH") or DEFAULT_CONFIG_PATH


# ------------------------------------------------------------------ Config models

@dataclass
class ApiConfig:
    base_url: str = "http://localhost:5000/api"
    timeout_s: float = 15.0
    verify_ssl: bool = True


@dataclass
class AuthConfig:
    # A 401 on any of these paths sends the browser back to the login screen.
    protected_prefixes: list[str] = field(
        default_factory=lambda: ["/admin", "/profile", "/products", "/change-password"]
    )
    login_route: str = "/login"
    admin_home: str = "/admin"
    user_home: str = "/products"


@dataclass
class PollingConfig:
    stats_interval_s: float = 10.0
    jobs_interval_s: float = 10.0
    logs_interval_s: float = 10.0
    schedules_interval_s: float = 30.0
    jobs_page_size: int = 10
    logs_limit: int = 200


@dataclass
class CatalogConfig:
    search_debounce_s: float = 0.5
    history_limit: int = 50


@dataclass
class UiConfig:
    title: str = "PriceWatch"
    dark_mode: bool = False
    language: str = "en"


@dataclass
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    ui: UiConfig = field(default_factory=UiConfig)


_APP_CONFIG: AppConfig | None = None


def clear_app_config_cache() -> None:
    global _APP_CONFIG
    _APP_CONFIG = None


def get_app_config() -> AppConfig:
    global _APP_CONFIG
    if _APP_CONFIG is None:
        _APP_CONFIG = load_app_config()
    return _APP_CONFIG


def load_app_config(path: str | None = None) -> AppConfig:
    config_path = path or get_config_path()
    log = logger.bind(component="AppConfig", path=config_path)

    if not os.path.exists(config_path):
        log.warning("Config not found. Writing defaults.")
        cfg = AppConfig()
        save_app_config(cfg, config_path)
    else:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        cfg = _from_dict(raw if isinstance(raw, dict) else {})

    env_api_url = os.environ.get("API_URL")
    if env_api_url:
        cfg.api.base_url = env_api_url
    cfg.api.base_url = cfg.api.base_url.rstrip("/")
    log.info(f"[load_app_config] - config_loaded - api={cfg.api.base_url}")
    return cfg


def save_app_config(cfg: AppConfig, path: str | None = None) -> None:
    global _APP_CONFIG
    config_path = path or get_config_path()
    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(asdict(cfg), f, indent=2, sort_keys=True)

    # Keep cache in sync
    _APP_CONFIG = cfg


# ------------------------------------------------------------------ Parsing

def _section(data: dict[str, Any], name: str, cls):
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        return cls()
    known = {k: v for k, v in raw.items() if k in cls.__dataclass_fields__}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        logger.warning(f"[_section] - unknown_config_keys - section={name} keys={unknown}")
    return cls(**known)


def _from_dict(data: dict[str, Any]) -> AppConfig:
    return AppConfig(
        api=_section(data, "api", ApiConfig),
        auth=_section(data, "auth", AuthConfig),
        polling=_section(data, "polling", PollingConfig),
        catalog=_section(data, "catalog", CatalogConfig),
        ui=_section(data, "ui", UiConfig),
    )
