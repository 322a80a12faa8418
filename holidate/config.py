from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

from .config_loader import load_yaml_config
from .data.holiday_api_client import DEFAULT_FEED_URL


def _from_nested(d: dict[str, Any], path: str, default: Any = None) -> Any:
    current: Any = d
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


@dataclass(frozen=True)
class Config:
    api_key: str | None = None
    feed_url: str = DEFAULT_FEED_URL
    country_code: str = "US"
    http_timeout: float | None = None  # seconds per HTTP request, None = no limit
    fetch_timeout: float | None = None  # seconds per (year, country) fetch, None = no limit


def load_config(
    *,
    country_override: str | None = None,
    config_path: str | None = None,
) -> Config:
    yaml_cfg = load_yaml_config(config_path).raw
    load_dotenv(override=False)

    def from_yaml(path: str, default: Any = None) -> Any:
        return _from_nested(yaml_cfg, path, default)

    def env_str(key: str, path: str, default: str | None) -> str | None:
        env_val = os.getenv(key)
        if env_val is not None:
            return env_val
        val = from_yaml(path, default)
        if val is None:
            return default
        return str(val)

    def env_timeout(key: str, path: str) -> float | None:
        raw = os.getenv(key)
        if raw is None:
            raw = from_yaml(path)
        try:
            val = float(raw)
        except (TypeError, ValueError):
            return None
        return val if val > 0 else None

    api_key = env_str("HOLIDAY_API_KEY", "holiday_api.key", None)
    feed_url = env_str("HOLIDAY_API_FEED", "holiday_api.feed_url", DEFAULT_FEED_URL) or DEFAULT_FEED_URL
    country_raw = country_override or env_str("HOLIDAY_COUNTRY", "holidays.country_code", "US") or "US"

    return Config(
        api_key=api_key.strip() if api_key else None,
        feed_url=feed_url.strip(),
        country_code=country_raw.strip().upper(),
        http_timeout=env_timeout("HOLIDAY_HTTP_TIMEOUT", "holiday_api.http_timeout"),
        fetch_timeout=env_timeout("HOLIDAY_FETCH_TIMEOUT", "holidays.fetch_timeout"),
    )


__all__ = ["Config", "load_config"]
