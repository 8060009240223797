from __future__ import annotations

import logging
from typing import Iterable, List

from bs4 import BeautifulSoup

from ...errors import FetchError
from ...junk_titles import is_generic_title
from ...models import CanonicalEvent
from ...normalize import descriptor_to_canonical
from ..base import BaseAdapter
from ..context import FetchContext
from ..types import RawEventDescriptor, SourceConfig

logger = logging.getLogger(__name__)

VENUE_ADDRESS = "1340 Main St., St. Helena."
VENUE_PHONE = "707-963-9779"
VENUE_EMAIL = "info@cameocinema.com"

# Headings that are site chrome, not films
_NOISE = ("menu", "cameo", "movie times", "coming soon", "see all", "newsletter", "gift card", "membership")


def _contact(url: str) -> str:
    return f"For more information call {VENUE_PHONE}, email {VENUE_EMAIL} or visit their website ({url})."


def film_titles(soup: BeautifulSoup, tags: Iterable[str]) -> List[str]:
    out: List[str] = []
    for el in soup.find_all(list(tags)):
        t = " ".join(el.get_text(" ", strip=True).split())
        if not (2 < len(t) < 80):
            continue
        low = t.lower()
        if any(n in low for n in _NOISE) or is_generic_title(t):
            continue
        if t not in out:
            out.append(t)
    return out


class CinemaAdapter(BaseAdapter):
    """
    Single-screen cinema with no structured dates.

    Strategy:
    - Main page headings are the films now playing: dated today, showtimes
      left to the website
    - The coming-soon page (last alt URL) adds undated records
    - A coming-soon failure does not cost the now-playing records
    """

    tag = "movies"

    async def fetch(self, cfg: SourceConfig, ctx: FetchContext) -> List[CanonicalEvent]:
        html = await ctx.client.fetch_text(cfg.seed_url, ctx.deadline)
        soup = BeautifulSoup(html or "", "html.parser")

        events: List[CanonicalEvent] = []
        for title in film_titles(soup, ("h2", "h3"))[: cfg.max_items]:
            events.append(self._event(cfg, title, cfg.seed_url, ctx.today.isoformat(), "Now playing. Showtimes on website."))

        if cfg.alt_urls:
            coming_url = cfg.alt_urls[-1]
            try:
                coming_html = await ctx.client.fetch_text(coming_url, ctx.deadline)
            except FetchError as e:
                logger.warning("[cinema] coming-soon fetch failed url=%s | %s", coming_url, e)
            else:
                coming = BeautifulSoup(coming_html or "", "html.parser")
                for title in film_titles(coming, ("h2", "h3", "h4")):
                    events.append(self._event(cfg, title, coming_url, None, "Coming soon. Details on website."))

        return events

    def _event(self, cfg: SourceConfig, title: str, url: str, start: str | None, details: str) -> CanonicalEvent:
        return descriptor_to_canonical(
            RawEventDescriptor(name=title, start=start, source="listing"),
            source_id=cfg.source_id,
            url=url,
            town=cfg.town,
            tag=self.tag,
            details=details,
            contact=_contact(url),
            address=VENUE_ADDRESS,
        )
