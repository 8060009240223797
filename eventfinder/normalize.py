from __future__ import annotations

import html
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo

from .config import TIMEZONE
from .errors import ValidationError
from .junk_titles import is_generic_title
from .models import (
    ADDRESS_FALLBACK,
    CONTACT_FALLBACK,
    DETAILS_FALLBACK,
    PRICE_FALLBACK,
    WHEN_FALLBACK,
    CanonicalEvent,
    GeoPoint,
)
from .sources.types import RawEventDescriptor
from .tagging import ANY_TAG, KNOWN_TAGS, infer_category
from .towns import infer_town, is_known_town, town_centroid


# ============================================================
# Helpers
# ============================================================

AP_MONTHS = ("Jan.", "Feb.", "March", "April", "May", "June", "July", "Aug.", "Sept.", "Oct.", "Nov.", "Dec.")
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

DESCRIPTION_MAX = 260

_SMALL_WORDS = frozenset({"a", "an", "and", "at", "but", "by", "for", "in", "of", "on", "or", "the", "to", "with"})
_ALL_CAPS_RE = re.compile(r"^[A-Z0-9&]+$")


def clean_text(s: Optional[str]) -> str:
    return " ".join(html.unescape(s or "").split())


def title_case(s: Optional[str]) -> str:
    """Title-case a headline; small words stay lower, all-caps tokens (BBQ, 5K) stay."""
    parts = clean_text(s).split(" ")
    out = []
    for i, w in enumerate(parts):
        if not w:
            continue
        low = w.lower()
        if i > 0 and low in _SMALL_WORDS:
            out.append(low)
        elif _ALL_CAPS_RE.match(w):
            out.append(w)
        else:
            out.append(low[:1].upper() + low[1:])
    return " ".join(out)


def truncate(s: Optional[str], max_len: int = DESCRIPTION_MAX) -> str:
    x = clean_text(s)
    if len(x) <= max_len:
        return x
    cut = x[: max_len - 1]
    if " " in cut[max_len // 2:]:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,;:-–") + "…"


def as_sentence(s: Optional[str]) -> str:
    x = clean_text(s)
    if x and x[-1] not in ".!?…":
        x += "."
    return x


# ============================================================
# Timestamps
# ============================================================

_ISO_STAMP_RE = re.compile(
    r"^\s*(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?\s*(Z|[+-]\d{2}:?\d{2})?)?"
)


@dataclass(frozen=True)
class LocalStamp:
    """A calendar day in the reference zone plus an optional clock time."""

    day: date
    clock: Optional[time] = None


def _offset(raw: str) -> timezone:
    if raw == "Z":
        return timezone.utc
    sign = -1 if raw[0] == "-" else 1
    digits = raw[1:].replace(":", "")
    return timezone(sign * timedelta(hours=int(digits[:2]), minutes=int(digits[2:4])))


def parse_timestamp(raw: Optional[str], tz_name: str = TIMEZONE) -> Optional[LocalStamp]:
    """
    Read an ISO 8601 date or datetime.

    - explicit offset / Z: converted to tz_name before reading the clock
    - no offset: clock digits taken as already local, never shifted
    - 00:00 means "no time known"
    """
    m = _ISO_STAMP_RE.match(raw or "")
    if not m:
        return None
    y, mo, d, hh, mi, ss, off = m.groups()
    try:
        day = date(int(y), int(mo), int(d))
    except ValueError:
        return None
    if hh is None:
        return LocalStamp(day=day)

    h, minute, sec = int(hh), int(mi), int(ss or 0)
    if h > 23 or minute > 59 or sec > 59:
        return LocalStamp(day=day)

    if off:
        aware = datetime(day.year, day.month, day.day, h, minute, sec, tzinfo=_offset(off))
        local = aware.astimezone(ZoneInfo(tz_name))
        day, clock = local.date(), local.time().replace(second=0, microsecond=0)
    else:
        clock = time(h, minute)

    if (clock.hour, clock.minute) == (0, 0):
        clock = None
    return LocalStamp(day=day, clock=clock)


def parse_request_date(raw: Optional[str]) -> Optional[date]:
    """Accept YYYY-MM-DD or M/D/YYYY literally; anything else is no bound."""
    s = (raw or "").strip()
    m = re.fullmatch(r"(\d{4})-(\d{2})-(\d{2})", s)
    if m:
        y, mo, d = (int(g) for g in m.groups())
    else:
        m = re.fullmatch(r"(\d{1,2})/(\d{1,2})/(\d{4})", s)
        if not m:
            return None
        mo, d, y = (int(g) for g in m.groups())
    try:
        return date(y, mo, d)
    except ValueError:
        return None


# ============================================================
# AP-style display
# ============================================================

def ap_date(d: date) -> str:
    return f"{WEEKDAYS[d.weekday()]}, {AP_MONTHS[d.month - 1]} {d.day}"


def ap_date_range(start: date, end: Optional[date] = None) -> str:
    """Single day keeps its weekday; a span drops it so it doesn't read as weekly."""
    if end is None or end <= start:
        return ap_date(start)
    m1, m2 = AP_MONTHS[start.month - 1], AP_MONTHS[end.month - 1]
    if start.year != end.year:
        return f"{m1} {start.day}, {start.year}–{m2} {end.day}, {end.year}"
    if start.month == end.month:
        return f"{m1} {start.day}–{end.day}"
    return f"{m1} {start.day}–{m2} {end.day}"


def _hour12(t: time) -> int:
    return t.hour % 12 or 12


def _meridiem(t: time) -> str:
    return "p.m." if t.hour >= 12 else "a.m."


def ap_time(t: time) -> str:
    h = _hour12(t)
    if t.minute == 0:
        return f"{h} {_meridiem(t)}"
    return f"{h}:{t.minute:02d} {_meridiem(t)}"


def ap_time_range(start: Optional[time], end: Optional[time]) -> Optional[str]:
    if start is None and end is None:
        return None
    if start is None or end is None or start == end:
        return ap_time(start or end)

    t1, t2 = ap_time(start), ap_time(end)
    if _meridiem(start) == _meridiem(end) and 12 not in (_hour12(start), _hour12(end)):
        t1 = t1.rsplit(" ", 1)[0]
    return f"{t1}–{t2}"


def format_when(start: Optional[LocalStamp], end: Optional[LocalStamp] = None) -> Optional[str]:
    if start is None:
        return None
    if end is not None and end.day < start.day:
        end = None
    date_part = ap_date_range(start.day, end.day if end else None)
    time_part = ap_time_range(start.clock, end.clock if end else None)
    return f"{date_part}, {time_part}" if time_part else date_part


# ============================================================
# Price / address / contact
# ============================================================

def _as_number(v: Optional[str]) -> Optional[float]:
    if v is None:
        return None
    try:
        n = float(str(v).replace("$", "").replace(",", "").strip())
    except ValueError:
        return None
    return n if math.isfinite(n) else None


_FREE_WORD_RE = re.compile(r"\bfree\b", re.IGNORECASE)


def _money(v: str, currency: Optional[str]) -> str:
    n = _as_number(v)
    cur = (currency or "USD").upper()
    if n is None:
        return clean_text(v)
    amount = f"{n:.0f}" if n == int(n) else f"{n:.2f}"
    return f"${amount}" if cur == "USD" else f"{amount} {cur}"


def _non_finite(v: Optional[str]) -> bool:
    try:
        return not math.isfinite(float(str(v).replace("$", "").replace(",", "").strip()))
    except ValueError:
        return False


def price_from_offer(desc: RawEventDescriptor) -> Optional[str]:
    """Structured offer price; zero or a "free" label means free. NaN/Infinity count as absent."""
    if desc.price is not None and not _non_finite(desc.price):
        n = _as_number(desc.price)
        if n == 0 or _FREE_WORD_RE.search(str(desc.price)):
            return "Free."
        if n is not None or clean_text(desc.price):
            return f"Tickets {_money(desc.price, desc.price_currency)}."
    if desc.low_price is not None and not _non_finite(desc.low_price):
        low = _as_number(desc.low_price)
        high_raw = None if _non_finite(desc.high_price) else desc.high_price
        high = _as_number(high_raw) if high_raw is not None else None
        if (low == 0 and not high) or _FREE_WORD_RE.search(str(desc.low_price)):
            return "Free."
        if high_raw is not None and high != low:
            return f"Tickets {_money(desc.low_price, desc.price_currency)}–{_money(high_raw, desc.price_currency)}."
        return f"Tickets {_money(desc.low_price, desc.price_currency)}."
    return None


def format_address(desc: RawEventDescriptor) -> Optional[str]:
    street = clean_text(desc.street_address)
    if not street:
        return None
    locality = clean_text(desc.locality)
    text = f"{street}, {locality}" if locality and locality.lower() not in street.lower() else street
    return as_sentence(text)


def contact_phrase(url: Optional[str]) -> str:
    if url:
        return f"For more information visit their website ({url})."
    return CONTACT_FALLBACK


# ============================================================
# Descriptor → CanonicalEvent
# ============================================================

def resolve_town(explicit: Optional[str], *texts: Optional[str]) -> str:
    if is_known_town(explicit):
        return explicit
    return infer_town(*texts)


def resolve_tag(explicit: Optional[str], title: str, description: Optional[str]) -> str:
    if explicit in KNOWN_TAGS:
        return explicit
    return infer_category(title, description)


def descriptor_to_canonical(
    desc: RawEventDescriptor,
    *,
    source_id: str,
    url: Optional[str] = None,
    town: Optional[str] = None,
    tag: Optional[str] = None,
    page_price: Optional[str] = None,
    details: Optional[str] = None,
    contact: Optional[str] = None,
    address: Optional[str] = None,
    tz_name: str = TIMEZONE,
) -> CanonicalEvent:
    """
    Core normalization. Explicit keyword arguments (from the calling parser)
    win over anything inferred from the descriptor.

    Raises ValidationError when the resolved title is empty or generic.
    """
    title = clean_text(desc.name)
    if is_generic_title(title):
        raise ValidationError(f"generic title {title!r} for {url}")

    start = parse_timestamp(desc.start, tz_name)
    end = parse_timestamp(desc.end, tz_name) if start else None
    if end is not None and end.day < start.day:
        end = None

    description = clean_text(desc.description) or None
    addr = address or format_address(desc)
    addr_text = " ".join(x for x in (desc.street_address, desc.locality) if x)

    resolved_town = resolve_town(town, addr_text, title, description, urlparse(url).path if url else None)
    resolved_tag = resolve_tag(tag, title, description)

    geo = None
    if desc.latitude is not None and desc.longitude is not None:
        geo = GeoPoint(lat=desc.latitude, lon=desc.longitude)
    else:
        centroid = town_centroid(resolved_town)
        if centroid:
            geo = GeoPoint(lat=centroid[0], lon=centroid[1])

    return CanonicalEvent(
        title=title,
        start_date=start.day if start else None,
        end_date=end.day if end else None,
        when=format_when(start, end) or WHEN_FALLBACK,
        details=details or (as_sentence(truncate(description)) if description else DETAILS_FALLBACK),
        price=price_from_offer(desc) or page_price or PRICE_FALLBACK,
        contact=contact or contact_phrase(url),
        address=addr or ADDRESS_FALLBACK,
        town=resolved_town,
        tag=resolved_tag if resolved_tag in KNOWN_TAGS else ANY_TAG,
        source_id=source_id,
        url=url,
        geo=geo,
    )
