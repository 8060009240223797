"""
Error taxonomy.

  NetworkError       non-success status or transport failure
  FetchTimeoutError  per-fetch or aggregate deadline exceeded
  ParseError         malformed structured data / unusable document
  ValidationError    resolved title is empty or a generic placeholder

Per-link and per-source code catches these and degrades; only the API layer
turns anything else into a failure envelope.
"""
from __future__ import annotations


class EventFinderError(Exception):
    pass


class FetchError(EventFinderError):
    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class NetworkError(FetchError):
    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class FetchTimeoutError(FetchError, TimeoutError):
    pass


class ParseError(EventFinderError):
    pass


class ValidationError(EventFinderError):
    pass
