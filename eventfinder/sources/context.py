from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..config import DETAIL_CONCURRENCY, TIMEZONE
from ..deadline import Deadline
from ..filters import SearchFilters
from .http import HttpClient


@dataclass
class FetchContext:
    """Everything one request's parsers share."""

    client: HttpClient
    deadline: Deadline
    filters: SearchFilters
    today: date
    detail_concurrency: int = DETAIL_CONCURRENCY

    @staticmethod
    def local_today(tz_name: str = TIMEZONE) -> date:
        return datetime.now(ZoneInfo(tz_name)).date()
