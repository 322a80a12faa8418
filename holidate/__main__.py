from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from .config import load_config
from .data.holiday_api_client import HolidayClientError
from .data.holiday_cache import HolidayYear
from .loader import HolidayLoader

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s - %(message)s")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="holidate", description="Holiday lookups by date and country")
    p.add_argument("--config", type=str, default=None, help="Path to YAML config file")
    sub = p.add_subparsers(dest="cmd")

    h = sub.add_parser("holidays", help="Print holiday names on a date (YYYY-MM-DD)")
    h.add_argument("date", type=str)
    h.add_argument("--country", type=str.upper, default=None, help="Country code override")

    c = sub.add_parser("check", help="Print yes/no depending on whether a date is a holiday")
    c.add_argument("date", type=str)
    c.add_argument("--country", type=str.upper, default=None, help="Country code override")

    pre = sub.add_parser("preload", help="Fetch and summarise whole years")
    pre.add_argument("years", type=int, nargs="+")
    pre.add_argument("--country", type=str.upper, default=None, help="Country code override")
    return p


async def _run(loader: HolidayLoader, ns: argparse.Namespace) -> int:
    if ns.cmd == "holidays":
        for name in await loader.lookup(ns.date, ns.country):
            print(name)
        return 0

    if ns.cmd == "check":
        print("yes" if await loader.holiday(ns.date, ns.country) else "no")
        return 0

    await loader.preload(ns.years, ns.country)
    cc = ns.country or loader.country_code()
    for year in ns.years:
        entry = loader.store.get(year, cc)
        days = len(entry.names_by_day) if isinstance(entry, HolidayYear) else 0
        print(f"{cc} {year}: {days} holiday days")
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    _configure_logging()
    parser = _build_parser()
    ns = parser.parse_args(argv)

    if ns.cmd not in {"holidays", "check", "preload"}:
        parser.print_help()
        return 2

    cfg = load_config(config_path=ns.config)
    if not cfg.api_key:
        logger.warning("HOLIDAY_API_KEY is not set; the service will likely reject requests")
    loader = HolidayLoader.from_config(cfg)

    try:
        return asyncio.run(_run(loader, ns))
    except HolidayClientError as exc:
        logger.error("Holiday lookup failed: %s", exc)
        return 1
    except ValueError as exc:
        logger.error("Invalid date: %s", exc)
        return 2
    finally:
        loader.close()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
