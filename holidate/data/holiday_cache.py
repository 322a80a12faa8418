from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

CacheKey = Tuple[int, str]


class CacheStateError(RuntimeError):
    """A cache operation was called on an entry in the wrong state."""


@dataclass
class HolidayYear:
    """Holiday names for one (year, country) keyed by ISO day."""

    year: int
    country_code: str
    names_by_day: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        year: int,
        country_code: str,
        records_by_day: Mapping[str, Iterable[Mapping[str, Any]]],
    ) -> "HolidayYear":
        names_by_day: Dict[str, List[str]] = {}
        for day, records in records_by_day.items():
            names = []
            for record in records:
                name = record.get("name")
                if name is None or not str(name).strip():
                    continue
                names.append(str(name))
            if names:
                names_by_day[day] = names
        return cls(year=year, country_code=country_code, names_by_day=names_by_day)

    def names_for(self, day_key: str) -> List[str]:
        return list(self.names_by_day.get(day_key, ()))


@dataclass
class Waiter:
    day_key: str
    future: "asyncio.Future[List[str]]"


@dataclass
class PendingEntry:
    year: int
    country_code: str
    waiters: List[Waiter] = field(default_factory=list)


Entry = Union[PendingEntry, HolidayYear]


class CacheStore:
    """In-memory holiday cache keyed by (year, country_code).

    An entry is either pending (a fetch is in flight and callers queue behind
    it) or a ready HolidayYear. Failed fetches leave no entry behind.
    Waiters are drained first-in, first-out.
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, year: int, country_code: str) -> Optional[Entry]:
        return self._entries.get((year, country_code))

    def begin_pending(self, year: int, country_code: str) -> PendingEntry:
        key = (year, country_code)
        if key in self._entries:
            raise CacheStateError(f"Entry already exists for {year}/{country_code}")
        pending = PendingEntry(year=year, country_code=country_code)
        self._entries[key] = pending
        return pending

    def add_waiter(
        self,
        year: int,
        country_code: str,
        day_key: str,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> "asyncio.Future[List[str]]":
        entry = self._entries.get((year, country_code))
        if not isinstance(entry, PendingEntry):
            raise CacheStateError(f"No fetch in flight for {year}/{country_code}")
        loop = loop or asyncio.get_running_loop()
        future: "asyncio.Future[List[str]]" = loop.create_future()
        entry.waiters.append(Waiter(day_key=day_key, future=future))
        return future

    def _take_pending(
        self, year: int, country_code: str, pending: Optional[PendingEntry]
    ) -> Tuple[PendingEntry, bool]:
        """Return the pending entry to drain and whether it is still stored."""
        current = self._entries.get((year, country_code))
        if pending is None:
            if not isinstance(current, PendingEntry):
                raise CacheStateError(f"No fetch in flight for {year}/{country_code}")
            return current, True
        return pending, current is pending

    def resolve(
        self,
        year: int,
        country_code: str,
        data: HolidayYear,
        pending: Optional[PendingEntry] = None,
    ) -> None:
        pending, stored = self._take_pending(year, country_code, pending)
        if stored:
            self._entries[(year, country_code)] = data
        waiters, pending.waiters = pending.waiters, []
        for waiter in waiters:
            if not waiter.future.done():
                waiter.future.set_result(data.names_for(waiter.day_key))

    def reject(
        self,
        year: int,
        country_code: str,
        error: BaseException,
        pending: Optional[PendingEntry] = None,
    ) -> None:
        pending, stored = self._take_pending(year, country_code, pending)
        waiters, pending.waiters = pending.waiters, []
        for waiter in waiters:
            if not waiter.future.done():
                waiter.future.set_exception(error)
        if stored:
            del self._entries[(year, country_code)]

    def clear(self) -> None:
        self._entries.clear()


__all__ = [
    "CacheKey",
    "CacheStateError",
    "CacheStore",
    "Entry",
    "HolidayYear",
    "PendingEntry",
    "Waiter",
]
