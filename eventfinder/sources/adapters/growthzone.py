from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup

from ..base import DetailPageAdapter, absolute_url, anchor_title
from ..types import CandidateLink, SourceConfig

_DETAIL_SELECTOR = "a[href*='/events/details/']"


class GrowthZoneAdapter(DetailPageAdapter):
    """
    Chamber-of-commerce listing template (GrowthZone).

    Detail links look like /events/details/<slug>-<id>; the anchor text is the
    event name and doubles as the fallback title. Every chamber covers one
    town, configured on the source.
    """

    def discover_links(self, soup: BeautifulSoup, cfg: SourceConfig) -> List[CandidateLink]:
        links: List[CandidateLink] = []
        for a in soup.select(_DETAIL_SELECTOR):
            url = absolute_url(a.get("href"), cfg.seed_url)
            if url:
                links.append(CandidateLink(url=url, title=anchor_title(a)))
        return links
