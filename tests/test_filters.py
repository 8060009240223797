# tests/test_filters.py
"""
Request filters: date-window overlap, undated handling, limit clamping.
"""
from __future__ import annotations

from datetime import date

import pytest

from eventfinder.filters import (
    SearchFilters,
    filter_events,
    matches_dates,
    parse_limit,
    relevant_date,
)
from eventfinder.models import CanonicalEvent


def _ev(title="Event", start=None, end=None, town="napa", tag="any") -> CanonicalEvent:
    return CanonicalEvent(title=title, start_date=start, end_date=end, town=town, tag=tag, source_id="t")


SPAN = _ev(start=date(2026, 3, 1), end=date(2026, 3, 10))
UNDATED = _ev(title="Coming Soon Film")


class TestDateOverlap:
    def test_span_overlapping_window_matches(self):
        assert matches_dates(SPAN, date(2026, 3, 5), date(2026, 3, 20)) is True

    def test_span_outside_window_does_not_match(self):
        assert matches_dates(SPAN, date(2026, 4, 1), date(2026, 4, 10)) is False

    def test_open_ended_windows(self):
        assert matches_dates(SPAN, date(2026, 3, 10), None) is True
        assert matches_dates(SPAN, date(2026, 3, 11), None) is False
        assert matches_dates(SPAN, None, date(2026, 3, 1)) is True
        assert matches_dates(SPAN, None, date(2026, 2, 28)) is False

    def test_single_day_event(self):
        ev = _ev(start=date(2026, 3, 5))
        assert matches_dates(ev, date(2026, 3, 5), date(2026, 3, 5)) is True


class TestUndated:
    @pytest.mark.parametrize("start,end", [
        (date(2026, 3, 1), None),
        (None, date(2026, 3, 1)),
        (date(2026, 3, 1), date(2026, 3, 31)),
    ])
    def test_excluded_when_any_bound_given(self, start, end):
        assert matches_dates(UNDATED, start, end) is False

    def test_included_without_bounds(self):
        assert matches_dates(UNDATED, None, None) is True


class TestSearchFilters:
    def test_build_normalizes(self):
        f = SearchFilters.build(town=" Yountville ", category="MUSIC", limit=42)
        assert f.town == "yountville"
        assert f.category == "music"
        assert f.limit == 10

    def test_defaults(self):
        f = SearchFilters.build()
        assert (f.town, f.category, f.limit) == ("all", "any", 5)
        assert f.has_date_bounds is False

    def test_unknown_town_matches_nothing(self):
        f = SearchFilters.build(town="sonoma")
        assert filter_events([_ev(town="napa"), _ev(town="all")], f) == []

    def test_town_and_category(self):
        events = [_ev("A", town="napa", tag="music"), _ev("B", town="napa", tag="food"), _ev("C", town="calistoga", tag="music")]
        f = SearchFilters.build(town="napa", category="music")
        assert [e.title for e in filter_events(events, f)] == ["A"]

    @pytest.mark.parametrize("raw,expected", [
        (None, 5), ("", 5), ("abc", 5), ("3", 3), ("0", 1), ("-4", 1), ("50", 10), (" 7 ", 7),
    ])
    def test_parse_limit(self, raw, expected):
        assert parse_limit(raw) == expected


def test_relevant_date_is_clamped_to_window_start():
    f = SearchFilters.build(start=date(2026, 3, 5))
    assert relevant_date(SPAN, f) == date(2026, 3, 5)
    assert relevant_date(SPAN, SearchFilters.build()) == date(2026, 3, 1)
    assert relevant_date(UNDATED, f) is None
