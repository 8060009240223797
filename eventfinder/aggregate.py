"""
Run every eligible source under one deadline, then turn the merged events into
a bounded, deduplicated, town-balanced list of cards.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence, Tuple

from .config import AGGREGATE_DEADLINE_S
from .filters import SearchFilters, filter_events, relevant_date
from .formatting import format_card, venue_card
from .models import CanonicalEvent, FormattedCard
from .sources.context import FetchContext
from .sources.registry import get_adapter
from .sources.types import SourceConfig
from .tagging import ANY_TAG
from .towns import ALL_TOWNS, FALLBACK_VENUES, TOWN_ORDER, FallbackVenue

logger = logging.getLogger(__name__)

MIN_RESULTS = 3


@dataclass
class SourceRun:
    events: List[CanonicalEvent] = field(default_factory=list)
    timed_out: bool = False
    failed_sources: List[str] = field(default_factory=list)


@dataclass
class AggregateResult:
    cards: List[FormattedCard] = field(default_factory=list)
    supplemented: bool = False


# ============================================================
# Fan-out
# ============================================================

def eligible_sources(sources: Sequence[SourceConfig], filters: SearchFilters) -> List[SourceConfig]:
    """Movie requests only hit movie sources; everything else skips them."""
    if filters.wants_movies:
        return [s for s in sources if s.category == "movies"]
    return [s for s in sources if s.category != "movies"]


async def run_sources(
    sources: Sequence[SourceConfig],
    ctx: FetchContext,
    deadline_s: float = AGGREGATE_DEADLINE_S,
) -> SourceRun:
    """
    Settle-all-then-filter: every source is its own task; when the deadline
    fires, finished tasks contribute, unfinished ones are cancelled and the run
    is flagged timed out. Output keeps registry order.
    """
    run = SourceRun()
    tasks: List[Tuple[SourceConfig, asyncio.Task]] = []
    for cfg in sources:
        adapter = get_adapter(cfg.adapter)
        logger.info("[source] start source_id=%s adapter=%s", cfg.source_id, cfg.adapter)
        tasks.append((cfg, asyncio.create_task(adapter.run(cfg, ctx), name=cfg.source_id)))

    if not tasks:
        return run

    _, pending = await asyncio.wait([t for _, t in tasks], timeout=deadline_s)
    if pending:
        run.timed_out = True
        for t in pending:
            t.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    for cfg, t in tasks:
        if t in pending or t.cancelled():
            logger.warning("[source] timeout source_id=%s deadline_s=%.1f", cfg.source_id, deadline_s)
            continue
        exc = t.exception()
        if exc is not None:
            run.failed_sources.append(cfg.source_id)
            logger.warning("[source] failed source_id=%s | %s: %s", cfg.source_id, type(exc).__name__, exc)
            continue
        run.events.extend(t.result())

    return run


# ============================================================
# Rank / dedupe / balance
# ============================================================

def rank_key(ev: CanonicalEvent, filters: SearchFilters) -> Tuple[bool, date, str]:
    d = relevant_date(ev, filters)
    return (d is None, d or date.max, ev.title.lower())


def rank_events(events: Sequence[CanonicalEvent], filters: SearchFilters) -> List[CanonicalEvent]:
    return sorted(events, key=lambda ev: rank_key(ev, filters))


def dedupe_cards(events: Sequence[CanonicalEvent]) -> List[Tuple[CanonicalEvent, FormattedCard]]:
    """First occurrence of each header+body wins."""
    seen: set[str] = set()
    out: List[Tuple[CanonicalEvent, FormattedCard]] = []
    for ev in events:
        card = format_card(ev)
        if card.dedupe_key in seen:
            continue
        seen.add(card.dedupe_key)
        out.append((ev, card))
    return out


def balance_by_town(pairs: Sequence[Tuple[CanonicalEvent, FormattedCard]], limit: int) -> List[FormattedCard]:
    """
    Round-robin one card per town in TOWN_ORDER until the limit is reached or
    every town is exhausted, then fill from the leftovers in ranked order.
    """
    buckets: Dict[str, List[int]] = {town: [] for town in TOWN_ORDER}
    for i, (ev, _) in enumerate(pairs):
        if ev.town in buckets:
            buckets[ev.town].append(i)

    picked: List[int] = []
    while len(picked) < limit and any(buckets.values()):
        for town in TOWN_ORDER:
            if len(picked) >= limit:
                break
            if buckets[town]:
                picked.append(buckets[town].pop(0))

    if len(picked) < limit:
        taken = set(picked)
        for i in range(len(pairs)):
            if len(picked) >= limit:
                break
            if i not in taken:
                picked.append(i)

    return [pairs[i][1] for i in picked]


def fallback_venues(filters: SearchFilters) -> List[FallbackVenue]:
    """Venues for the requested town and category; loosened step by step when nothing fits."""
    town_ok = [v for v in FALLBACK_VENUES if filters.town == ALL_TOWNS or v.town == filters.town]
    both_ok = [v for v in town_ok if filters.category == ANY_TAG or v.tag == filters.category]
    return both_ok or town_ok or list(FALLBACK_VENUES)


def aggregate(events: Sequence[CanonicalEvent], filters: SearchFilters) -> AggregateResult:
    kept = filter_events(events, filters)
    pairs = dedupe_cards(rank_events(kept, filters))

    if filters.town == ALL_TOWNS:
        cards = balance_by_town(pairs, filters.limit)
    else:
        cards = [card for _, card in pairs[: filters.limit]]

    result = AggregateResult(cards=cards)
    if len(pairs) < MIN_RESULTS:
        result.supplemented = True
        seen = {c.dedupe_key for c in cards}
        for venue in fallback_venues(filters):
            if len(result.cards) >= filters.limit:
                break
            card = venue_card(venue)
            if card.dedupe_key not in seen:
                seen.add(card.dedupe_key)
                result.cards.append(card)

    return result
