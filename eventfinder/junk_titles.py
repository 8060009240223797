# eventfinder/junk_titles.py
"""
Single source of truth for generic / placeholder title detection.

Imported by:
  - normalize.py          (rejects a record whose resolved title is generic)
  - sources/extract.py    (decides whether a listing title can stand in)
  - adapters/cinema.py    (heading filter)

Rules are deterministic:
  1. Empty or whitespace-only → generic
  2. Exact match (case-insensitive, whitespace-collapsed, trailing
     punctuation ignored) against known link-text placeholders → generic
  3. Contains only whitespace / digits / punctuation (no letters) → generic
"""
from __future__ import annotations

import re

# Link-text placeholders that say nothing about the event
GENERIC_TITLES_EXACT: frozenset[str] = frozenset({
    "read more",
    "details",
    "learn more",
    "view event",
    "event details",
    "more info",
    "view details",
    "tickets",
    "register",
})

# Title is only whitespace, digits and punctuation (no letters)
_STRUCTURAL_ONLY_RE = re.compile(r"^[\s\d\W]*$", re.UNICODE)


def is_generic_title(title: str | None) -> bool:
    """Return True if *title* carries no information worth showing."""
    t = " ".join((title or "").split())
    if not t:
        return True
    low = t.lower().rstrip(" .!:»›>")
    if low in GENERIC_TITLES_EXACT:
        return True
    if _STRUCTURAL_ONLY_RE.fullmatch(t):
        return True
    return False
