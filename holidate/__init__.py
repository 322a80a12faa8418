from .data.holiday_api_client import (
    HolidayClientError,
    HolidayFetchTimeout,
    HolidayServiceError,
    HolidayTransportError,
)
from .data.holiday_cache import CacheStore, HolidayYear
from .loader import HolidayLoader

__all__ = [
    "CacheStore",
    "HolidayClientError",
    "HolidayFetchTimeout",
    "HolidayLoader",
    "HolidayServiceError",
    "HolidayTransportError",
    "HolidayYear",
]
