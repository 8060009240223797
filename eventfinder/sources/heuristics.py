"""
Heuristic extraction for pages without (complete) structured data.

Each field has an ordered list of pure strategies over the parsed document.
The first strategy returning a non-empty result wins.

Dates are read only from machine-readable markup or an explicit
YYYY-MM-DD pair in text. Month names in prose are never parsed: a wrong
date is worse than "Date and time on website."
"""
from __future__ import annotations

import re
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from bs4 import BeautifulSoup

from .types import RawEventDescriptor

T = TypeVar("T")

Strategy = Callable[[BeautifulSoup], Optional[T]]
DateRange = Tuple[str, Optional[str]]

_ISO_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_ISO_PAIR_RE = re.compile(
    r"\b(\d{4}-\d{2}-\d{2})\s*(?:-|–|—|to|through|until)\s*(\d{4}-\d{2}-\d{2})\b",
    re.IGNORECASE,
)
_CURRENCY_RE = re.compile(r"\$\s?(\d{1,4}(?:\.\d{2})?)(?:\s*(?:-|–|to)\s*\$\s?(\d{1,4}(?:\.\d{2})?))?")

FREE_ADMISSION_PHRASES: tuple[str, ...] = (
    "no cover",
    "free admission",
    "admission is free",
    "admission: free",
    "complimentary",
    "free of charge",
    "free entry",
    "free event",
    "free to attend",
    "free and open to the public",
)

_PRICE_SELECTORS = ("[itemprop=price]", ".price", ".event-price", ".cost", ".ticket-price")
_DESCRIPTION_SELECTORS = (".event-description", ".description", "article p", "main p")
_START_META = (
    {"property": "event:start_time"},
    {"itemprop": "startDate"},
    {"name": "startDate"},
)


def first_result(strategies: Sequence[Strategy[T]], soup: BeautifulSoup) -> Optional[T]:
    for strategy in strategies:
        result = strategy(soup)
        if result:
            return result
    return None


def _clean(s: Optional[str]) -> Optional[str]:
    s = " ".join((s or "").split())
    return s or None


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    el = soup.find("meta", attrs=attrs)
    if el and el.get("content"):
        return _clean(el["content"])
    return None


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

def title_from_og(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, property="og:title")


def title_from_h1(soup: BeautifulSoup) -> Optional[str]:
    h1 = soup.find("h1")
    return _clean(h1.get_text(" ", strip=True)) if h1 else None


def title_from_document(soup: BeautifulSoup) -> Optional[str]:
    return _clean(soup.title.get_text(" ", strip=True)) if soup.title else None


TITLE_STRATEGIES: list[Strategy[str]] = [title_from_og, title_from_h1, title_from_document]


# ---------------------------------------------------------------------------
# Description
# ---------------------------------------------------------------------------

def description_from_meta(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, name="description")


def description_from_og(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, property="og:description")


def description_from_content(soup: BeautifulSoup) -> Optional[str]:
    for selector in _DESCRIPTION_SELECTORS:
        el = soup.select_one(selector)
        if el:
            txt = _clean(el.get_text(" ", strip=True))
            if txt:
                return txt
    return None


DESCRIPTION_STRATEGIES: list[Strategy[str]] = [
    description_from_meta,
    description_from_og,
    description_from_content,
]


# ---------------------------------------------------------------------------
# Date / time
# ---------------------------------------------------------------------------

def date_from_time_element(soup: BeautifulSoup) -> Optional[DateRange]:
    """First ISO 8601 <time datetime>; a later <time> in the same parent is the end."""
    for el in soup.find_all("time", datetime=True):
        v = (el.get("datetime") or "").strip()
        if not (v and _ISO_DATE_PREFIX_RE.match(v)):
            continue
        end = None
        for sib in el.find_next_siblings("time", datetime=True):
            w = (sib.get("datetime") or "").strip()
            if w and _ISO_DATE_PREFIX_RE.match(w):
                end = w
                break
        return v, end
    return None


def date_from_meta(soup: BeautifulSoup) -> Optional[DateRange]:
    for attrs in _START_META:
        v = _meta_content(soup, **attrs)
        if v and _ISO_DATE_PREFIX_RE.match(v):
            return v, None
    return None


def date_from_text_pair(soup: BeautifulSoup) -> Optional[DateRange]:
    m = _ISO_PAIR_RE.search(soup.get_text(" ", strip=True))
    if not m:
        return None
    return m.group(1), m.group(2)


DATE_STRATEGIES: list[Strategy[DateRange]] = [
    date_from_time_element,
    date_from_meta,
    date_from_text_pair,
]


# ---------------------------------------------------------------------------
# Price (returns a display phrase)
# ---------------------------------------------------------------------------

def free_phrase_in_text(text: Optional[str]) -> bool:
    low = (text or "").casefold()
    return any(p in low for p in FREE_ADMISSION_PHRASES)


def currency_phrase_in_text(text: Optional[str]) -> Optional[str]:
    m = _CURRENCY_RE.search(text or "")
    if not m:
        return None
    if m.group(2):
        return f"Tickets ${m.group(1)}–${m.group(2)}."
    return f"Tickets ${m.group(1)}."


def _price_cells(soup: BeautifulSoup) -> list[str]:
    out: list[str] = []
    for selector in _PRICE_SELECTORS:
        for el in soup.select(selector):
            txt = _clean(el.get("content") or el.get_text(" ", strip=True))
            if txt:
                out.append(txt)
    return out


def price_from_free_phrase(soup: BeautifulSoup) -> Optional[str]:
    return "Free." if free_phrase_in_text(soup.get_text(" ", strip=True)) else None


def price_from_currency(soup: BeautifulSoup) -> Optional[str]:
    for cell in _price_cells(soup):
        phrase = currency_phrase_in_text(cell)
        if phrase:
            return phrase
    return currency_phrase_in_text(soup.get_text(" ", strip=True))


def price_from_labelled_free(soup: BeautifulSoup) -> Optional[str]:
    # "free" only counts when it is the whole content of a price-labelled element
    for cell in _price_cells(soup):
        if cell.strip(" .!").casefold() == "free":
            return "Free."
    return None


PRICE_STRATEGIES: list[Strategy[str]] = [
    price_from_free_phrase,
    price_from_currency,
    price_from_labelled_free,
]


# ---------------------------------------------------------------------------
# Fill missing fields
# ---------------------------------------------------------------------------

def fill_from_page(desc: RawEventDescriptor, soup: BeautifulSoup) -> RawEventDescriptor:
    """Fill only the fields structured data left empty."""
    if not desc.name:
        desc.name = first_result(TITLE_STRATEGIES, soup)
    if not desc.description:
        desc.description = first_result(DESCRIPTION_STRATEGIES, soup)
    if not desc.start:
        found = first_result(DATE_STRATEGIES, soup)
        if found:
            desc.start, end = found
            desc.end = desc.end or end
    if desc.source == "unknown":
        desc.source = "heuristic"
    return desc


def heuristic_price(soup: BeautifulSoup) -> Optional[str]:
    return first_result(PRICE_STRATEGIES, soup)
