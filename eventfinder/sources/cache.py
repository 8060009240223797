from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class CacheEntry:
    key: str
    inserted_at: float
    body: str


class FetchCache:
    """
    Time-boxed memo of raw page bodies keyed by URL.

    Entries are replaced as whole values, so concurrent fetches of the same URL
    at worst both hit the network; the last write wins.
    """

    def __init__(self, ttl_s: float = 600.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[str]:
        hit = self._entries.get(key)
        if hit is None:
            return None
        if self._clock() - hit.inserted_at > self.ttl_s:
            # lazy eviction
            self._entries.pop(key, None)
            return None
        return hit.body

    def put(self, key: str, body: str) -> None:
        self._entries[key] = CacheEntry(key=key, inserted_at=self._clock(), body=body)

    def __len__(self) -> int:
        return len(self._entries)
