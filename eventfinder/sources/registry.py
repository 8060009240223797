from __future__ import annotations

from typing import Dict, Tuple, Type

from ..config import MAX_CANDIDATES
from .base import BaseAdapter
from .adapters.calendar_site import CalendarSiteAdapter
from .adapters.cinema import CinemaAdapter
from .adapters.growthzone import GrowthZoneAdapter
from .adapters.library import LibraryAdapter
from .types import SourceConfig


ADAPTERS: Dict[str, Type[BaseAdapter]] = {
    "calendar_site": CalendarSiteAdapter,
    "growthzone": GrowthZoneAdapter,
    "library": LibraryAdapter,
    "cinema": CinemaAdapter,
}


SOURCES: Tuple[SourceConfig, ...] = (
    SourceConfig(
        source_id="donapa",
        name="Do Napa",
        adapter="calendar_site",
        seed_url="https://donapa.com/upcoming-events/",
        town="napa",
        host="donapa.com",
        path_prefix="/event/",
        use_listing_titles=False,
        max_items=MAX_CANDIDATES,
    ),
    SourceConfig(
        source_id="napa_library",
        name="Napa County Library Events",
        adapter="library",
        seed_url="https://events.napalibrary.org/events?n=60&r=days",
        host="napalibrary.org",
        max_items=MAX_CANDIDATES,
    ),
    SourceConfig(
        source_id="amcan_chamber",
        name="American Canyon Chamber Events",
        adapter="growthzone",
        seed_url="https://business.amcanchamber.org/events",
        town="american-canyon",
        max_items=MAX_CANDIDATES,
    ),
    SourceConfig(
        source_id="calistoga_chamber",
        name="Calistoga Chamber Events",
        adapter="growthzone",
        seed_url="https://chamber.calistogachamber.net/events",
        town="calistoga",
        max_items=MAX_CANDIDATES,
    ),
    SourceConfig(
        source_id="yountville_chamber",
        name="Yountville Chamber Events",
        adapter="growthzone",
        seed_url="https://web.yountvillechamber.com/events",
        town="yountville",
        max_items=MAX_CANDIDATES,
    ),
    SourceConfig(
        source_id="visit_napa_valley",
        name="Visit Napa Valley Events",
        adapter="calendar_site",
        seed_url="https://www.visitnapavalley.com/events/",
        host="visitnapavalley.com",
        path_prefix="/event/",
        max_items=MAX_CANDIDATES,
    ),
    SourceConfig(
        source_id="cameo",
        name="Cameo Cinema",
        adapter="cinema",
        category="movies",
        seed_url="https://www.cameocinema.com/",
        alt_urls=(
            "https://www.cameocinema.com/movie-calendar",
            "https://www.cameocinema.com/coming-soon",
        ),
        town="st-helena",
        max_items=8,
    ),
)


def get_adapter(name: str) -> BaseAdapter:
    cls = ADAPTERS[name]
    return cls()
