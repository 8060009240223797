# eventfinder/tagging.py
"""
Heuristic category tagging for canonical events.

Pure utility: deterministic and free of I/O.

Keywords match whole words (plural -s/-es allowed) on casefold'ed text, so
"concerts" hits "concert" but "start" never hits "art". Groups are checked
in a fixed priority order and the first group with a hit wins.
"""
from __future__ import annotations

import re
from typing import Optional

ANY_TAG = "any"

# ---------------------------------------------------------------------------
# Vocabulary (priority order matters)
# ---------------------------------------------------------------------------

CATEGORY_VOCAB: dict[str, list[str]] = {
    "art": [
        "art", "gallery", "galleries", "exhibit", "exhibition", "painting", "sculpture",
        "museum", "artist", "ceramics", "photography",
    ],
    "music": [
        "music", "concert", "live band", "jazz", "symphony", "orchestra",
        "songwriter", "choir", "bluegrass", "acoustic",
    ],
    "food": [
        "food", "wine", "tasting", "dinner", "brunch", "lunch", "chef",
        "culinary", "cooking", "farmers market", "beer", "cider", "harvest",
    ],
    "wellness": [
        "yoga", "wellness", "meditation", "spa", "fitness", "pilates",
        "hike", "hiking", "running", "mindfulness",
    ],
    "nightlife": [
        "nightlife", "bar", "club", "dj", "comedy", "trivia", "karaoke",
        "happy hour", "late night", "dance party",
    ],
    "movies": ["movie", "film", "cinema", "screening", "matinee"],
}

CATEGORY_ORDER: tuple[str, ...] = tuple(CATEGORY_VOCAB)
KNOWN_TAGS: frozenset[str] = frozenset(CATEGORY_ORDER)


def _keyword_re(kw: str) -> re.Pattern[str]:
    return re.compile(r"\b" + r"\s+".join(re.escape(p) for p in kw.split()) + r"(?:s|es)?\b")


_COMPILED: dict[str, list[re.Pattern[str]]] = {
    tag: [_keyword_re(kw) for kw in kws] for tag, kws in CATEGORY_VOCAB.items()
}


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _normalize_for_matching(text: Optional[str]) -> str:
    """casefold + collapse whitespace."""
    if not text:
        return ""
    s = text.casefold()
    s = re.sub(r"\s+", " ", s).strip()
    return s


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def infer_category(
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> str:
    """
    Deterministic category from title + description text.
    Returns the first matching tag in CATEGORY_ORDER, or "any".
    """
    text = _normalize_for_matching(title) + " " + _normalize_for_matching(description)
    for tag in CATEGORY_ORDER:
        if any(p.search(text) for p in _COMPILED[tag]):
            return tag
    return ANY_TAG


def normalize_tag(tag: Optional[str]) -> str:
    t = (tag or "").strip().lower()
    return t or ANY_TAG
