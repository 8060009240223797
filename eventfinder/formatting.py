from __future__ import annotations

from typing import Iterable, List

from .models import CONTACT_FALLBACK, CanonicalEvent, FormattedCard, GeoPoint, MapPoint
from .normalize import clean_text, title_case
from .towns import FallbackVenue


def format_card(ev: CanonicalEvent) -> FormattedCard:
    """Header is the title-cased title; body reads when, details, price, contact, address."""
    header = title_case(ev.title) or "Event"
    body = clean_text(" ".join([ev.when, ev.details, ev.price, ev.contact, ev.address]))
    return FormattedCard(header=header, body=body, geo=ev.geo)


def venue_card(venue: FallbackVenue) -> FormattedCard:
    body = clean_text(" ".join([venue.blurb, CONTACT_FALLBACK, venue.address]))
    return FormattedCard(
        header=venue.name,
        body=body,
        geo=GeoPoint(lat=venue.lat, lon=venue.lon),
    )


def map_points(cards: Iterable[FormattedCard]) -> List[MapPoint]:
    return [MapPoint(name=c.header, lat=c.geo.lat, lon=c.geo.lon) for c in cards if c.geo is not None]
