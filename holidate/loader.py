from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, List, Optional

from .data.dates import day_of
from .data.holiday_api_client import (
    DEFAULT_FEED_URL,
    HolidayAPIClient,
    HolidayAPICredentials,
    HolidayClientError,
    HolidayFetchTimeout,
    HolidayResponse,
    HolidayServiceError,
    decode_holiday_response,
)
from .data.holiday_cache import CacheStore, HolidayYear, PendingEntry

if TYPE_CHECKING:  # pragma: no cover
    import requests

    from .config import Config

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[str]]
Decoder = Callable[[str], HolidayResponse]


class HolidayLoader:
    """Answers holiday lookups from a per-(year, country) cache.

    The first lookup that misses a key starts the only fetch for it; lookups
    arriving while that fetch is in flight wait on it and get the same
    outcome. Ready keys are answered without touching the transport.
    """

    def __init__(
        self,
        fetch: Fetch,
        *,
        api_key: str = "",
        feed_url: str = DEFAULT_FEED_URL,
        country_code: str = "US",
        store: Optional[CacheStore] = None,
        decoder: Decoder = decode_holiday_response,
        fetch_timeout: Optional[float] = None,
        client: Optional[HolidayAPIClient] = None,
    ):
        self._fetch = fetch
        self._creds = HolidayAPICredentials(api_key=api_key, feed_url=feed_url)
        self._country_code = country_code
        self.store = store if store is not None else CacheStore()
        self._decoder = decoder
        self._fetch_timeout = fetch_timeout
        self._client = client

    @classmethod
    def from_config(
        cls,
        cfg: "Config",
        *,
        session: Optional["requests.Session"] = None,
    ) -> "HolidayLoader":
        creds = HolidayAPICredentials(api_key=cfg.api_key or "", feed_url=cfg.feed_url)
        client = HolidayAPIClient(creds, session=session, timeout=cfg.http_timeout)
        return cls(
            client.fetch,
            api_key=creds.api_key,
            feed_url=creds.feed_url,
            country_code=cfg.country_code,
            fetch_timeout=cfg.fetch_timeout,
            client=client,
        )

    # ------------------------------------------------------------------
    def country_code(self, code: Optional[str] = None) -> str:
        """Get or set the default country code. Setting keeps the cache."""
        if code:
            self._country_code = code
        return self._country_code

    def close(self) -> None:
        """Release the HTTP client created by from_config, if any."""
        if self._client is not None:
            self._client.close()

    def clear_cache(self) -> None:
        self.store.clear()

    def cached(self, year: int, country_code: Optional[str] = None) -> bool:
        entry = self.store.get(year, country_code or self._country_code)
        return isinstance(entry, HolidayYear)

    # ------------------------------------------------------------------
    async def lookup(self, date: Any, country_code: Optional[str] = None) -> List[str]:
        """Return the holiday names on ``date`` (empty list when none)."""
        year, day_key = day_of(date)
        cc = country_code or self._country_code

        entry = self.store.get(year, cc)
        if isinstance(entry, HolidayYear):
            logger.debug("Holiday cache hit (%s/%s)", cc, year)
            return entry.names_for(day_key)
        if isinstance(entry, PendingEntry):
            logger.debug("Waiting on in-flight holiday fetch (%s/%s)", cc, year)
            return await self.store.add_waiter(year, cc, day_key)

        data = await self._load(year, cc)
        return data.names_for(day_key)

    holidays = lookup

    async def holiday(self, date: Any, country_code: Optional[str] = None) -> bool:
        return len(await self.lookup(date, country_code)) > 0

    async def preload(self, years: Iterable[int], country_code: Optional[str] = None) -> None:
        """Warm the cache for every year; raise the first failure afterwards."""
        cc = country_code or self._country_code
        results = await asyncio.gather(
            *(self.lookup(dt.date(int(year), 1, 1), cc) for year in years),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    # ------------------------------------------------------------------
    async def _load(self, year: int, country_code: str) -> HolidayYear:
        pending = self.store.begin_pending(year, country_code)
        logger.info("Fetching holidays (%s/%s)", country_code, year)
        try:
            data = await self._fetch_year(year, country_code)
        except asyncio.CancelledError:
            self.store.reject(
                year,
                country_code,
                HolidayClientError("holiday fetch cancelled"),
                pending=pending,
            )
            raise
        except Exception as exc:
            logger.warning("Holiday fetch failed (%s/%s): %s", country_code, year, exc)
            self.store.reject(year, country_code, exc, pending=pending)
            raise

        self.store.resolve(year, country_code, data, pending=pending)
        logger.info(
            "Cached holidays (%s/%s): %s days", country_code, year, len(data.names_by_day)
        )
        return data

    async def _fetch_year(self, year: int, country_code: str) -> HolidayYear:
        url = self._creds.holidays_url(country_code, year)
        if self._fetch_timeout:
            body = await self._fetch_with_deadline(url, year, country_code)
        else:
            body = await self._fetch(url)

        response = self._decoder(body)
        if response.error is not None:
            raise HolidayServiceError(response.error)
        return HolidayYear.from_records(year, country_code, response.holidays_by_day)

    async def _fetch_with_deadline(self, url: str, year: int, country_code: str) -> str:
        # Only the loader deadline maps to HolidayFetchTimeout.
        task = asyncio.ensure_future(self._fetch(url))
        try:
            done, _ = await asyncio.wait({task}, timeout=self._fetch_timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not done:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise HolidayFetchTimeout(
                f"Holiday fetch for {country_code}/{year} timed out after {self._fetch_timeout}s"
            )
        return task.result()


__all__ = ["HolidayLoader"]
