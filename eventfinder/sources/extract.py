"""
Detail-page extraction shared by every link-following adapter.

fetch -> structured data (first Event wins) -> heuristics for missing fields
-> normalize. Failures degrade to a listing-title fallback record or nothing.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from ..errors import FetchError, ValidationError
from ..junk_titles import is_generic_title
from ..models import CanonicalEvent
from ..normalize import descriptor_to_canonical, parse_timestamp, price_from_offer
from .context import FetchContext
from .heuristics import fill_from_page, heuristic_price
from .structured_data import extract_structured_events
from .types import CandidateLink, RawEventDescriptor, SourceConfig

logger = logging.getLogger(__name__)


def extract_descriptor(html: str) -> Tuple[RawEventDescriptor, Optional[str]]:
    """
    Pure extraction from HTML. Returns (descriptor, page_price).
    page_price is only looked up when structured data had no offer.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    structured = extract_structured_events(soup)
    desc = structured[0] if structured else RawEventDescriptor()
    if desc.start and parse_timestamp(desc.start) is None:
        # unreadable structured start; let the page heuristics find one
        desc.start = desc.end = None

    if not desc.name or not desc.start or not desc.description:
        fill_from_page(desc, soup)

    page_price = None if price_from_offer(desc) else heuristic_price(soup)
    return desc, page_price


def fallback_event(link: CandidateLink, cfg: SourceConfig, *, tag: Optional[str] = None) -> Optional[CanonicalEvent]:
    """Known title, unknown everything else. None when the listing title is unusable."""
    if is_generic_title(link.title):
        return None
    try:
        return descriptor_to_canonical(
            RawEventDescriptor(name=link.title, source="listing"),
            source_id=cfg.source_id,
            url=link.url,
            town=cfg.town,
            tag=tag,
        )
    except ValidationError:
        return None


async def extract_or_fallback(
    link: CandidateLink,
    cfg: SourceConfig,
    ctx: FetchContext,
    *,
    tag: Optional[str] = None,
) -> Optional[CanonicalEvent]:
    try:
        html = await ctx.client.fetch_text(link.url, ctx.deadline)
        desc, page_price = extract_descriptor(html)
        if is_generic_title(desc.name) and not is_generic_title(link.title):
            desc.name = link.title
        return descriptor_to_canonical(
            desc,
            source_id=cfg.source_id,
            url=link.url,
            town=cfg.town,
            tag=tag,
            page_price=page_price,
        )
    except ValidationError as e:
        logger.info("[extract] drop source_id=%s url=%s | %s", cfg.source_id, link.url, e)
        return None
    except FetchError as e:
        logger.warning("[extract] fetch failed source_id=%s url=%s | %s: %s", cfg.source_id, link.url, type(e).__name__, e)
    except Exception as e:
        logger.warning("[extract] detail parse failed source_id=%s url=%s | %r", cfg.source_id, link.url, e)

    return fallback_event(link, cfg, tag=tag)


async def extract_all(
    links: Sequence[CandidateLink],
    cfg: SourceConfig,
    ctx: FetchContext,
    *,
    tag: Optional[str] = None,
) -> List[CanonicalEvent]:
    """Bounded-concurrency detail extraction; output keeps discovery order."""
    sem = asyncio.Semaphore(ctx.detail_concurrency)

    async def _one(link: CandidateLink) -> Optional[CanonicalEvent]:
        async with sem:
            return await extract_or_fallback(link, cfg, ctx, tag=tag)

    results = await asyncio.gather(*(_one(link) for link in links))
    return [r for r in results if r is not None]
