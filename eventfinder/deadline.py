from __future__ import annotations

import time
from typing import Callable, Optional

from .errors import FetchTimeoutError


class Deadline:
    """
    Cancellation token for deadline-driven work.

    Operations take a Deadline, check it before suspending, and bound their own
    waits by remaining(). A child deadline never outlives its parent.
    """

    def __init__(
        self,
        seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        parent: Optional["Deadline"] = None,
    ) -> None:
        self._clock = clock
        expires_at = clock() + seconds
        if parent is not None:
            expires_at = min(expires_at, parent.expires_at)
        self.expires_at = expires_at

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._clock() >= self.expires_at

    def check(self, what: str = "operation") -> None:
        if self.expired:
            raise FetchTimeoutError(f"deadline exceeded before {what}")

    def child(self, seconds: float) -> "Deadline":
        return Deadline(seconds, clock=self._clock, parent=self)
