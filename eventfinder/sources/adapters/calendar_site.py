from __future__ import annotations

from typing import List
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..base import DetailPageAdapter, absolute_url, anchor_title
from ..types import CandidateLink, SourceConfig


class CalendarSiteAdapter(DetailPageAdapter):
    """
    Generic calendar site (Do Napa, Visit Napa Valley).

    Only links on the source's own host whose path starts with the configured
    prefix (e.g. /event/) are followed; everything else on a calendar page is
    navigation, category or search links.
    """

    def discover_links(self, soup: BeautifulSoup, cfg: SourceConfig) -> List[CandidateLink]:
        host = (cfg.host or urlparse(cfg.seed_url).netloc).lower()
        prefix = cfg.path_prefix or "/event/"

        links: List[CandidateLink] = []
        for a in soup.find_all("a", href=True):
            url = absolute_url(a.get("href"), cfg.seed_url)
            if not url:
                continue
            u = urlparse(url)
            if not u.netloc.lower().endswith(host):
                continue
            if not u.path.startswith(prefix) or u.path.rstrip("/") == prefix.rstrip("/"):
                continue
            title = anchor_title(a) if cfg.use_listing_titles else None
            links.append(CandidateLink(url=url, title=title))
        return links
