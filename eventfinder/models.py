from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .tagging import ANY_TAG, KNOWN_TAGS
from .towns import ALL_TOWNS, TOWN_CENTROIDS

WHEN_FALLBACK = "Date and time on website."
DETAILS_FALLBACK = "Details on website."
PRICE_FALLBACK = "Price not provided."
CONTACT_FALLBACK = "For more information visit their website."
ADDRESS_FALLBACK = "Venue address not provided."


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class CanonicalEvent(BaseModel):
    """Normalized record every source converges to. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    title: str = "Event"
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    when: str = WHEN_FALLBACK
    details: str = DETAILS_FALLBACK
    price: str = PRICE_FALLBACK
    contact: str = CONTACT_FALLBACK
    address: str = ADDRESS_FALLBACK

    town: str = ALL_TOWNS
    tag: str = ANY_TAG
    source_id: str
    url: Optional[str] = None
    geo: Optional[GeoPoint] = None

    @model_validator(mode="before")
    @classmethod
    def _fill_fallbacks(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        fallbacks = {
            "title": "Event",
            "when": WHEN_FALLBACK,
            "details": DETAILS_FALLBACK,
            "price": PRICE_FALLBACK,
            "contact": CONTACT_FALLBACK,
            "address": ADDRESS_FALLBACK,
            "town": ALL_TOWNS,
            "tag": ANY_TAG,
        }
        for field, fallback in fallbacks.items():
            v = data.get(field)
            if v is None or (isinstance(v, str) and not v.strip()):
                data[field] = fallback
        if data.get("end_date") is None:
            data["end_date"] = data.get("start_date")
        return data

    @model_validator(mode="after")
    def _check_invariants(self) -> "CanonicalEvent":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(f"end_date {self.end_date} before start_date {self.start_date}")
        if self.start_date is None and self.end_date is not None:
            raise ValueError("end_date without start_date")
        if self.town != ALL_TOWNS and self.town not in TOWN_CENTROIDS:
            raise ValueError(f"unknown town {self.town!r}")
        if self.tag != ANY_TAG and self.tag not in KNOWN_TAGS:
            raise ValueError(f"unknown tag {self.tag!r}")
        return self


class FormattedCard(BaseModel):
    header: str
    body: str
    geo: Optional[GeoPoint] = None

    @property
    def dedupe_key(self) -> str:
        return f"{self.header}|{self.body}"


class MapPoint(BaseModel):
    name: str
    lat: float
    lon: float


class SearchResponse(BaseModel):
    ok: bool = True
    timeout: bool = False
    supplemented: bool = False
    count: int = 0
    results: List[FormattedCard] = Field(default_factory=list)
    map: List[MapPoint] = Field(default_factory=list)
    error: Optional[str] = None

    def to_payload(self) -> dict:
        # geo / error only appear when known
        return self.model_dump(exclude_none=True)
