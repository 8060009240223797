from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SourceConfig:
    source_id: str
    name: str
    adapter: str
    seed_url: str
    category: str = "calendar"  # calendar | movies
    alt_urls: Tuple[str, ...] = ()
    town: Optional[str] = None
    max_items: int = 12

    # link shape for the generic calendar adapter
    host: Optional[str] = None
    path_prefix: Optional[str] = None
    use_listing_titles: bool = True


@dataclass(frozen=True)
class CandidateLink:
    url: str
    title: Optional[str] = None


@dataclass
class RawEventDescriptor:
    """
    Whatever a page exposed, before normalization.
    Every field is optional; consumers default rather than assume.
    """
    name: str | None = None
    start: str | None = None
    end: str | None = None
    description: str | None = None

    street_address: str | None = None
    locality: str | None = None

    price: str | None = None
    price_currency: str | None = None
    low_price: str | None = None
    high_price: str | None = None

    latitude: float | None = None
    longitude: float | None = None

    source: str = "unknown"  # jsonld | heuristic | listing
