from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://holidayapi.com/v1/holidays?"


class HolidayClientError(RuntimeError):
    """Base error for holiday lookups."""


class HolidayTransportError(HolidayClientError):
    """The HTTP round trip did not complete successfully."""


class HolidayServiceError(HolidayClientError):
    """The service answered with an error field or an unreadable body."""

    def __init__(self, error: Any):
        super().__init__(str(error))
        self.error = error


class HolidayFetchTimeout(HolidayClientError):
    """The fetch did not finish within the configured deadline."""


@dataclass(frozen=True)
class HolidayAPICredentials:
    api_key: str
    feed_url: str = DEFAULT_FEED_URL

    def holidays_url(self, country_code: str, year: int) -> str:
        # The feed URL already ends with "?"; parameters are appended verbatim.
        return f"{self.feed_url}country={country_code}&year={year}&key={self.api_key}"


@dataclass
class HolidayResponse:
    error: Optional[Any] = None
    holidays_by_day: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


def _group_by_date(records: List[Any]) -> Dict[str, List[Dict[str, Any]]]:
    out: Dict[str, List[Dict[str, Any]]] = {}
    for record in records:
        if not isinstance(record, dict):
            continue
        day = str(record.get("date") or "")
        if not day:
            continue
        out.setdefault(day, []).append(record)
    return out


def decode_holiday_response(body: str) -> HolidayResponse:
    """Decode a holiday feed body into per-day records.

    Raises HolidayServiceError when the service reports an error or the body
    is not a holiday payload. An empty ``holidays`` object is a valid year
    without holidays.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise HolidayServiceError("Holiday response is not JSON") from exc

    if not isinstance(data, dict):
        raise HolidayServiceError("Holiday response is not an object")

    if data.get("error") is not None:
        raise HolidayServiceError(data["error"])

    raw = data.get("holidays")
    if isinstance(raw, dict):
        holidays: Dict[str, List[Dict[str, Any]]] = {}
        for day, records in raw.items():
            if isinstance(records, dict):
                records = [records]
            if not isinstance(records, list):
                continue
            holidays[str(day)] = [r for r in records if isinstance(r, dict)]
    elif isinstance(raw, list):
        holidays = _group_by_date(raw)
    else:
        raise HolidayServiceError("Holiday response has no holidays field")

    return HolidayResponse(error=None, holidays_by_day=holidays)


class HolidayAPIClient:
    """Single-shot HTTP transport for the holiday feed."""

    def __init__(
        self,
        creds: HolidayAPICredentials,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.creds = creds
        self.session = session or requests.Session()
        self._timeout = timeout

    def _get(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise HolidayTransportError(f"Holiday request failed: {exc}") from exc

        if resp.status_code != 200:
            raise HolidayTransportError(f"Holiday HTTP {resp.status_code}: {resp.text}")
        return resp.text

    async def fetch(self, url: str) -> str:
        logger.debug("GET %s", url.split("&key=")[0])
        return await asyncio.to_thread(self._get, url)

    def close(self) -> None:
        self.session.close()


__all__ = [
    "DEFAULT_FEED_URL",
    "HolidayAPIClient",
    "HolidayAPICredentials",
    "HolidayClientError",
    "HolidayFetchTimeout",
    "HolidayResponse",
    "HolidayServiceError",
    "HolidayTransportError",
    "decode_holiday_response",
]
