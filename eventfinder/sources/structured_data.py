"""
Structured-data extraction.

Scan JSON-LD blocks for Schema.org Event objects and turn each into a
RawEventDescriptor. Handles:
- Single Event object
- Array containing Event
- @graph containing Event
- @type as string ("Event") or list (["Event", "Thing"])

When a page carries several events, callers use the first one.
"""
from __future__ import annotations

import html
import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from ..errors import ParseError
from .types import RawEventDescriptor

logger = logging.getLogger(__name__)


def extract_structured_events(soup: BeautifulSoup) -> list[RawEventDescriptor]:
    """Return one descriptor per Event node, in order of appearance."""
    out: list[RawEventDescriptor] = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = _load_block(script.get_text() or "")
        except ParseError as e:
            logger.debug("[structured] skip block: %s", e)
            continue
        for node in _find_events_in_jsonld(data):
            out.append(descriptor_from_jsonld(node))
    return out


def _load_block(raw: str) -> Any:
    raw = raw.strip()
    if not raw:
        raise ParseError("empty ld+json block")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"malformed ld+json: {e}") from e


def _is_event_type(t) -> bool:
    """Check if @type indicates an Event (or a Schema.org subtype like MusicEvent)."""
    if isinstance(t, str):
        return t == "Event" or t.endswith("Event")
    if isinstance(t, list):
        return any(_is_event_type(x) for x in t if isinstance(x, str))
    return False


def _find_events_in_jsonld(data) -> list[dict]:
    """Recursively find Event objects in JSON-LD structure."""
    events = []
    if isinstance(data, dict):
        if _is_event_type(data.get("@type")):
            events.append(data)
        if "@graph" in data and isinstance(data["@graph"], list):
            for item in data["@graph"]:
                events.extend(_find_events_in_jsonld(item))
    elif isinstance(data, list):
        for item in data:
            events.extend(_find_events_in_jsonld(item))
    return events


def _text(v: Any) -> str | None:
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    if not isinstance(v, str):
        return None
    s = " ".join(html.unescape(v).split())
    return s or None


def _first_dict(v: Any) -> dict | None:
    if isinstance(v, list):
        return next((x for x in v if isinstance(x, dict)), None)
    return v if isinstance(v, dict) else None


def _coord(v: Any) -> float | None:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f


def descriptor_from_jsonld(node: dict) -> RawEventDescriptor:
    desc = RawEventDescriptor(
        name=_text(node.get("name")),
        start=_text(node.get("startDate")),
        end=_text(node.get("endDate")),
        description=_text(node.get("description")),
        source="jsonld",
    )

    loc = _first_dict(node.get("location"))
    if loc:
        # String addresses usually mix city/state/zip; too unreliable to show.
        addr = loc.get("address")
        if isinstance(addr, dict):
            desc.street_address = _text(addr.get("streetAddress"))
            desc.locality = _text(addr.get("addressLocality"))

        geo = loc.get("geo")
        if isinstance(geo, dict):
            lat, lon = _coord(geo.get("latitude")), _coord(geo.get("longitude"))
            if lat is not None and lon is not None:
                desc.latitude, desc.longitude = lat, lon

    offer = _first_dict(node.get("offers"))
    if offer:
        desc.price = _text(offer.get("price"))
        desc.price_currency = _text(offer.get("priceCurrency"))
        desc.low_price = _text(offer.get("lowPrice"))
        desc.high_price = _text(offer.get("highPrice"))

    return desc
