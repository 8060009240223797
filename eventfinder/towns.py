"""
Recognized towns: slugs, place-name patterns, map centroids, and the
always-open fallback venues used when a search comes back nearly empty.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

ALL_TOWNS = "all"

# Round-robin order for balancing results when no town is requested.
TOWN_ORDER: tuple[str, ...] = (
    "napa",
    "yountville",
    "st-helena",
    "calistoga",
    "american-canyon",
)

# Most specific first; the broader "napa" only after every town inside it.
TOWN_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("american-canyon", re.compile(r"american[\s\-_]*canyon|amcan", re.IGNORECASE)),
    ("yountville", re.compile(r"yountville", re.IGNORECASE)),
    ("st-helena", re.compile(r"\b(?:st\.?|saint)[\s\-_]*helena", re.IGNORECASE)),
    ("calistoga", re.compile(r"calistoga", re.IGNORECASE)),
    ("napa", re.compile(r"napa", re.IGNORECASE)),
)

TOWN_CENTROIDS: dict[str, tuple[float, float]] = {
    "napa": (38.2975, -122.2869),
    "yountville": (38.4016, -122.3608),
    "st-helena": (38.5052, -122.4703),
    "calistoga": (38.5788, -122.5797),
    "american-canyon": (38.1749, -122.2608),
}


def is_known_town(slug: Optional[str]) -> bool:
    return slug in TOWN_CENTROIDS


def normalize_town(town: Optional[str]) -> str:
    t = (town or "").strip().lower()
    return t or ALL_TOWNS


def infer_town(*texts: Optional[str]) -> str:
    """First town whose pattern matches any text, in priority order; else "all"."""
    hay = " ".join(t for t in texts if t)
    if not hay:
        return ALL_TOWNS
    for slug, pattern in TOWN_PATTERNS:
        if pattern.search(hay):
            return slug
    return ALL_TOWNS


def town_centroid(slug: Optional[str]) -> Optional[tuple[float, float]]:
    return TOWN_CENTROIDS.get(slug or "")


@dataclass(frozen=True)
class FallbackVenue:
    name: str
    town: str
    tag: str
    lat: float
    lon: float
    blurb: str
    address: str


FALLBACK_VENUES: tuple[FallbackVenue, ...] = (
    FallbackVenue(
        name="Oxbow Public Market",
        town="napa",
        tag="food",
        lat=38.3007,
        lon=-122.2823,
        blurb="Open daily. Local food and wine merchants under one roof.",
        address="610 First St., Napa.",
    ),
    FallbackVenue(
        name="di Rosa Center for Contemporary Art",
        town="napa",
        tag="art",
        lat=38.2669,
        lon=-122.3275,
        blurb="Gallery and sculpture park. Hours on website.",
        address="5200 Sonoma Highway, Napa.",
    ),
    FallbackVenue(
        name="Yountville Art Walk",
        town="yountville",
        tag="art",
        lat=38.4013,
        lon=-122.3606,
        blurb="Self-guided outdoor sculpture walk, open any time.",
        address="Washington St., Yountville.",
    ),
    FallbackVenue(
        name="Cameo Cinema",
        town="st-helena",
        tag="movies",
        lat=38.5055,
        lon=-122.4703,
        blurb="Historic single-screen theater. Showtimes on website.",
        address="1340 Main St., St. Helena.",
    ),
    FallbackVenue(
        name="Indian Springs Calistoga",
        town="calistoga",
        tag="wellness",
        lat=38.5767,
        lon=-122.5749,
        blurb="Mineral pools and mud baths. Reservations on website.",
        address="1712 Lincoln Ave., Calistoga.",
    ),
    FallbackVenue(
        name="American Canyon Wetlands Edge Trail",
        town="american-canyon",
        tag="wellness",
        lat=38.1860,
        lon=-122.2710,
        blurb="Open daily. Flat river-edge trail with bird watching.",
        address="Wetlands Edge Rd., American Canyon.",
    ),
)
