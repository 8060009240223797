from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from .models import CanonicalEvent
from .tagging import ANY_TAG, normalize_tag
from .towns import ALL_TOWNS, normalize_town

LIMIT_DEFAULT = 5
LIMIT_MIN = 1
LIMIT_MAX = 10


@dataclass(frozen=True)
class SearchFilters:
    town: str = ALL_TOWNS
    category: str = ANY_TAG
    start: Optional[date] = None
    end: Optional[date] = None
    limit: int = LIMIT_DEFAULT

    @classmethod
    def build(
        cls,
        *,
        town: Optional[str] = None,
        category: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> "SearchFilters":
        return cls(
            town=normalize_town(town),
            category=normalize_tag(category),
            start=start,
            end=end,
            limit=clamp_limit(limit),
        )

    @property
    def has_date_bounds(self) -> bool:
        return self.start is not None or self.end is not None

    @property
    def wants_movies(self) -> bool:
        return self.category == "movies"


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return LIMIT_DEFAULT
    return max(LIMIT_MIN, min(LIMIT_MAX, limit))


def parse_limit(raw: Optional[str]) -> int:
    try:
        return clamp_limit(int((raw or "").strip()))
    except ValueError:
        return LIMIT_DEFAULT


def matches_town(ev: CanonicalEvent, town: str) -> bool:
    return town == ALL_TOWNS or ev.town == town


def matches_category(ev: CanonicalEvent, category: str) -> bool:
    return category == ANY_TAG or ev.tag == category


def matches_dates(ev: CanonicalEvent, start: Optional[date], end: Optional[date]) -> bool:
    """Overlap test. Undated events only pass when no bound is given."""
    if start is None and end is None:
        return True
    if ev.start_date is None:
        return False
    ev_end = ev.end_date or ev.start_date
    if start is not None and ev_end < start:
        return False
    if end is not None and ev.start_date > end:
        return False
    return True


def matches(ev: CanonicalEvent, filters: SearchFilters) -> bool:
    return (
        matches_town(ev, filters.town)
        and matches_category(ev, filters.category)
        and matches_dates(ev, filters.start, filters.end)
    )


def filter_events(events: Iterable[CanonicalEvent], filters: SearchFilters) -> List[CanonicalEvent]:
    return [e for e in events if matches(e, filters)]


def relevant_date(ev: CanonicalEvent, filters: SearchFilters) -> Optional[date]:
    """Earliest date of the event that falls inside the requested window."""
    if ev.start_date is None:
        return None
    if filters.start is not None and ev.start_date < filters.start:
        return filters.start
    return ev.start_date
