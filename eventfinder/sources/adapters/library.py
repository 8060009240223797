from __future__ import annotations

from typing import List
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..base import DetailPageAdapter, absolute_url, anchor_title
from ..types import CandidateLink, SourceConfig

# Paths containing /event that are listings, not single events
_INDEX_PATHS = ("/events", "/events/", "/events/month", "/events/week", "/events/list")


class LibraryAdapter(DetailPageAdapter):
    """
    Public library event listing.

    Branches span several towns, so the town is inferred per event from the
    detail page rather than fixed on the source.
    """

    def discover_links(self, soup: BeautifulSoup, cfg: SourceConfig) -> List[CandidateLink]:
        host = (cfg.host or urlparse(cfg.seed_url).netloc).lower()

        links: List[CandidateLink] = []
        for a in soup.find_all("a", href=True):
            url = absolute_url(a.get("href"), cfg.seed_url)
            if not url:
                continue
            u = urlparse(url)
            if host not in u.netloc.lower():
                continue
            # keep event-ish links, avoid search/index pages
            if "/event" not in u.path or u.query or u.path in _INDEX_PATHS:
                continue
            links.append(CandidateLink(url=url, title=anchor_title(a)))
        return links
