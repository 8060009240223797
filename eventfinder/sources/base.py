from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ..filters import filter_events
from ..models import CanonicalEvent
from .context import FetchContext
from .extract import extract_all
from .types import CandidateLink, SourceConfig

logger = logging.getLogger(__name__)


class BaseAdapter(ABC):
    @abstractmethod
    async def fetch(self, cfg: SourceConfig, ctx: FetchContext) -> List[CanonicalEvent]:
        """Return canonical events for one source (unfiltered)."""

    async def run(self, cfg: SourceConfig, ctx: FetchContext) -> List[CanonicalEvent]:
        events = await self.fetch(cfg, ctx)
        kept = filter_events(events, ctx.filters)
        logger.info(
            "[source] done source_id=%s extracted=%d kept=%d",
            cfg.source_id, len(events), len(kept),
        )
        return kept


class DetailPageAdapter(BaseAdapter):
    """
    Strategy:
    - Fetch the listing page
    - Collect candidate detail links of this source's shape
    - Dedupe, cap at cfg.max_items
    - Fetch + extract + normalize each detail page (bounded concurrency)
    """

    tag: Optional[str] = None

    @abstractmethod
    def discover_links(self, soup: BeautifulSoup, cfg: SourceConfig) -> List[CandidateLink]:
        """Candidate detail links in discovery order (may contain duplicates)."""

    async def fetch(self, cfg: SourceConfig, ctx: FetchContext) -> List[CanonicalEvent]:
        html = await ctx.client.fetch_text(cfg.seed_url, ctx.deadline)
        soup = BeautifulSoup(html or "", "html.parser")

        links = dedupe_links(self.discover_links(soup, cfg))[: cfg.max_items]
        logger.info("[source] source_id=%s candidate_links=%d", cfg.source_id, len(links))

        return await extract_all(links, cfg, ctx, tag=self.tag)


# ---------------------------------------------------------------------------
# Link helpers
# ---------------------------------------------------------------------------

def absolute_url(href: Optional[str], base_url: str) -> Optional[str]:
    href = (href or "").strip()
    if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
        return None
    full = href if href.startswith("http") else urljoin(base_url, href)
    full = full.split("#", 1)[0]
    try:
        parsed = urlparse(full)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return full


def anchor_title(a) -> Optional[str]:
    txt = " ".join(a.get_text(" ", strip=True).split())
    return txt or None


def dedupe_links(links: Iterable[CandidateLink]) -> List[CandidateLink]:
    """First occurrence wins, but a later titled duplicate can supply the title."""
    order: List[str] = []
    by_url: dict[str, CandidateLink] = {}
    for link in links:
        seen = by_url.get(link.url)
        if seen is None:
            order.append(link.url)
            by_url[link.url] = link
        elif not seen.title and link.title:
            by_url[link.url] = CandidateLink(url=link.url, title=link.title)
    return [by_url[u] for u in order]
