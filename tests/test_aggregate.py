# tests/test_aggregate.py
"""
Aggregation: source fan-out under a deadline, ranking, dedupe, town balancing
and fallback venues. Also the end-to-end run_search response shape.
"""
from __future__ import annotations

import asyncio
import logging
import re
from datetime import date

import pytest

from eventfinder.aggregate import (
    aggregate,
    balance_by_town,
    dedupe_cards,
    eligible_sources,
    rank_events,
    run_sources,
)
from eventfinder.deadline import Deadline
from eventfinder.filters import SearchFilters
from eventfinder.formatting import format_card
from eventfinder.models import CanonicalEvent, GeoPoint
from eventfinder.pipeline import run_search
from eventfinder.sources import registry
from eventfinder.sources.base import BaseAdapter
from eventfinder.sources.context import FetchContext
from eventfinder.sources.types import SourceConfig
from eventfinder.towns import TOWN_ORDER


def _ev(title, *, start=date(2026, 3, 5), town="napa", tag="any", geo=None, source_id="t") -> CanonicalEvent:
    return CanonicalEvent(title=title, start_date=start, town=town, tag=tag, geo=geo, source_id=source_id)


# ---------------------------------------------------------------------------
# Fake adapters
# ---------------------------------------------------------------------------

class FastAdapter(BaseAdapter):
    async def fetch(self, cfg, ctx):
        return [_ev(f"{cfg.source_id} showcase", town="napa")]


class SlowAdapter(BaseAdapter):
    async def fetch(self, cfg, ctx):
        await asyncio.sleep(5)
        return [_ev("Never Arrives")]


class BrokenAdapter(BaseAdapter):
    async def fetch(self, cfg, ctx):
        raise RuntimeError("listing layout changed")


@pytest.fixture
def fake_adapters(monkeypatch):
    monkeypatch.setitem(registry.ADAPTERS, "fast", FastAdapter)
    monkeypatch.setitem(registry.ADAPTERS, "slow", SlowAdapter)
    monkeypatch.setitem(registry.ADAPTERS, "broken", BrokenAdapter)


def _src(source_id, adapter, category="calendar") -> SourceConfig:
    return SourceConfig(source_id=source_id, name=source_id, adapter=adapter, seed_url="https://x.test/", category=category)


def _ctx(filters=None) -> FetchContext:
    return FetchContext(client=None, deadline=Deadline(10), filters=filters or SearchFilters.build(), today=date(2026, 3, 5))


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------

class TestRunSources:
    def test_slow_source_does_not_block_the_others(self, fake_adapters):
        sources = [_src("alpha", "fast"), _src("sloth", "slow"), _src("omega", "fast")]
        run = asyncio.run(run_sources(sources, _ctx(), deadline_s=0.2))
        assert run.timed_out is True
        assert [e.title for e in run.events] == ["alpha showcase", "omega showcase"]

    def test_failed_source_contributes_nothing(self, fake_adapters):
        sources = [_src("alpha", "fast"), _src("oops", "broken")]
        run = asyncio.run(run_sources(sources, _ctx(), deadline_s=1.0))
        assert run.timed_out is False
        assert run.failed_sources == ["oops"]
        assert [e.title for e in run.events] == ["alpha showcase"]

    def test_no_sources(self):
        run = asyncio.run(run_sources([], _ctx(), deadline_s=1.0))
        assert run.events == [] and run.timed_out is False


def test_movie_requests_only_hit_movie_sources():
    sources = [_src("cal", "fast"), _src("cinema", "fast", category="movies")]
    assert [s.source_id for s in eligible_sources(sources, SearchFilters.build(category="movies"))] == ["cinema"]
    assert [s.source_id for s in eligible_sources(sources, SearchFilters.build(category="music"))] == ["cal"]


# ---------------------------------------------------------------------------
# Rank / dedupe
# ---------------------------------------------------------------------------

def test_rank_by_relevant_date_then_title_with_undated_last():
    events = [
        _ev("Zinfandel Night", start=date(2026, 3, 9)),
        _ev("Coming Soon", start=None),
        _ev("Art Fair", start=date(2026, 3, 9)),
        _ev("Early Bird", start=date(2026, 3, 2)),
    ]
    ranked = rank_events(events, SearchFilters.build())
    assert [e.title for e in ranked] == ["Early Bird", "Art Fair", "Zinfandel Night", "Coming Soon"]


def test_identical_header_and_body_collapse_to_one_card():
    a = _ev("Harvest Dinner", source_id="donapa")
    b = _ev("Harvest Dinner", source_id="visit_napa_valley")
    pairs = dedupe_cards([a, b])
    assert len(pairs) == 1
    assert pairs[0][0].source_id == "donapa"


# ---------------------------------------------------------------------------
# Balancing
# ---------------------------------------------------------------------------

class TestBalancing:
    def _two_per_town(self):
        events = []
        for town in reversed(TOWN_ORDER):
            for i in (1, 2):
                events.append(_ev(f"{town} gathering {i}", town=town))
        return events

    def test_one_event_per_town_at_limit_five(self):
        result = aggregate(self._two_per_town(), SearchFilters.build(limit=5))
        expected = [format_card(_ev(f"{town} gathering 1", town=town)).header for town in TOWN_ORDER]
        assert [c.header for c in result.cards] == expected
        assert result.supplemented is False

    def test_leftovers_fill_in_ranked_order(self):
        events = [_ev(f"Napa thing {i}", town="napa") for i in range(4)] + [_ev("Calistoga thing", town="calistoga")]
        pairs = dedupe_cards(rank_events(events, SearchFilters.build()))
        headers = [c.header for c in balance_by_town(pairs, 4)]
        assert headers == ["Napa Thing 0", "Calistoga Thing", "Napa Thing 1", "Napa Thing 2"]

    def test_explicit_town_is_plain_truncation(self):
        events = [_ev(f"Napa thing {i}", town="napa") for i in range(6)]
        result = aggregate(events, SearchFilters.build(town="napa", limit=3))
        assert [c.header for c in result.cards] == ["Napa Thing 0", "Napa Thing 1", "Napa Thing 2"]


# ---------------------------------------------------------------------------
# Fallback venues
# ---------------------------------------------------------------------------

class TestSupplement:
    def test_sparse_results_get_matching_venues(self):
        result = aggregate([_ev("Calistoga Mud Run", town="calistoga")], SearchFilters.build(town="calistoga"))
        assert result.supplemented is True
        assert [c.header for c in result.cards] == ["Calistoga Mud Run", "Indian Springs Calistoga"]
        assert result.cards[1].geo is not None

    def test_category_narrows_venues(self):
        result = aggregate([], SearchFilters.build(category="art", limit=10))
        assert [c.header for c in result.cards] == ["di Rosa Center for Contemporary Art", "Yountville Art Walk"]

    def test_venues_respect_limit(self):
        result = aggregate([], SearchFilters.build(limit=2))
        assert len(result.cards) == 2
        assert result.supplemented is True

    def test_three_results_are_not_supplemented(self):
        events = [_ev(f"Napa thing {i}") for i in range(3)]
        result = aggregate(events, SearchFilters.build())
        assert result.supplemented is False
        assert len(result.cards) == 3


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def test_run_search_response_shape(fake_adapters):
    sources = [_src("alpha", "fast"), _src("sloth", "slow")]
    response = asyncio.run(
        run_search(SearchFilters.build(), client=None, sources=sources, aggregate_deadline_s=0.2, today=date(2026, 3, 5))
    )
    payload = response.to_payload()
    assert payload["ok"] is True
    assert payload["timeout"] is True
    assert payload["supplemented"] is True
    assert payload["count"] == len(payload["results"])
    assert payload["results"][0]["header"] == "Alpha Showcase"
    assert "error" not in payload
    assert len(payload["map"]) == sum(1 for r in payload["results"] if "geo" in r)


def test_map_points_follow_geo():
    ev = _ev("Jazz on the Plaza", geo=GeoPoint(lat=38.3, lon=-122.28))
    result = aggregate([ev], SearchFilters.build(limit=1))
    assert result.cards[0].geo == GeoPoint(lat=38.3, lon=-122.28)


def test_pipeline_summary_line_is_logged(fake_adapters, caplog):
    caplog.set_level(logging.INFO, logger="eventfinder.pipeline")
    asyncio.run(
        run_search(SearchFilters.build(town="napa"), client=None, sources=[_src("alpha", "fast"), _src("oops", "broken")], today=date(2026, 3, 5))
    )
    lines = [r.getMessage() for r in caplog.records if "[pipeline][summary]" in r.getMessage()]
    assert len(lines) == 1
    assert re.search(r"town=napa .* sources_run=2 failed=1 extracted=1 returned=\d+ timeout=False", lines[0])
