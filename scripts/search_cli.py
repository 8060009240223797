#!/usr/bin/env python3
# scripts/search_cli.py

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Optional

from eventfinder.config import CACHE_TTL_S, setup_logging
from eventfinder.filters import SearchFilters, parse_limit
from eventfinder.normalize import parse_request_date
from eventfinder.pipeline import run_search
from eventfinder.sources.cache import FetchCache
from eventfinder.sources.http import HttpClient


async def _search(filters: SearchFilters) -> dict:
    async with HttpClient(FetchCache(CACHE_TTL_S)) as client:
        response = await run_search(filters, client)
    return response.to_payload()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run one Napa Valley event search and print the JSON envelope.")
    parser.add_argument("--town", default=None, help="Town slug (napa, yountville, st-helena, calistoga, american-canyon) or 'all'.")
    parser.add_argument("--type", default=None, help="Category tag (art, music, food, wellness, nightlife, movies) or 'any'.")
    parser.add_argument("--start", default=None, help="Window start, YYYY-MM-DD or M/D/YYYY.")
    parser.add_argument("--end", default=None, help="Window end, YYYY-MM-DD or M/D/YYYY.")
    parser.add_argument("--limit", default=None, help="Result count, 1-10 (default 5).")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    filters = SearchFilters.build(
        town=args.town,
        category=args.type,
        start=parse_request_date(args.start),
        end=parse_request_date(args.end),
        limit=parse_limit(args.limit),
    )
    payload = asyncio.run(_search(filters))
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if payload.get("ok") else 1


if __name__ == "__main__":
    raise SystemExit(main())
