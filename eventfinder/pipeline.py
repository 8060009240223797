from __future__ import annotations

import logging
import time
from datetime import date
from typing import Optional, Sequence

from .aggregate import aggregate, eligible_sources, run_sources
from .config import AGGREGATE_DEADLINE_S, TIMEZONE
from .deadline import Deadline
from .filters import SearchFilters
from .formatting import map_points
from .models import SearchResponse
from .sources.context import FetchContext
from .sources.http import HttpClient
from .sources.registry import SOURCES
from .sources.types import SourceConfig

logger = logging.getLogger(__name__)


async def run_search(
    filters: SearchFilters,
    client: HttpClient,
    *,
    sources: Sequence[SourceConfig] = SOURCES,
    aggregate_deadline_s: float = AGGREGATE_DEADLINE_S,
    today: Optional[date] = None,
) -> SearchResponse:
    """One search request: fan out to sources, aggregate, shape the response."""
    started = time.monotonic()
    selected = eligible_sources(sources, filters)

    ctx = FetchContext(
        client=client,
        deadline=Deadline(aggregate_deadline_s),
        filters=filters,
        today=today or FetchContext.local_today(TIMEZONE),
    )
    run = await run_sources(selected, ctx, aggregate_deadline_s)
    result = aggregate(run.events, filters)

    # Deterministic, grep-friendly summary line.
    logger.info(
        "[pipeline][summary] town=%s type=%s start=%s end=%s limit=%d"
        " sources_run=%d failed=%d extracted=%d returned=%d timeout=%s supplemented=%s elapsed_s=%.2f",
        filters.town, filters.category, filters.start, filters.end, filters.limit,
        len(selected), len(run.failed_sources), len(run.events), len(result.cards),
        run.timed_out, result.supplemented, time.monotonic() - started,
    )

    return SearchResponse(
        ok=True,
        timeout=run.timed_out,
        supplemented=result.supplemented,
        count=len(result.cards),
        results=result.cards,
        map=map_points(result.cards),
    )
