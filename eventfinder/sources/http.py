from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import ACCEPT_LANGUAGE, FETCH_TIMEOUT_S, USER_AGENT
from ..deadline import Deadline
from ..errors import FetchTimeoutError, NetworkError
from .cache import FetchCache

logger = logging.getLogger(__name__)


@dataclass
class HttpResult:
    url: str
    status_code: int
    text: str


class HttpClient:
    """
    Cached GET client. One instance per process (it owns the FetchCache).

    Failures are never retried here; callers decide whether to skip or fall back.
    """

    def __init__(
        self,
        cache: FetchCache,
        *,
        timeout_s: float = FETCH_TIMEOUT_S,
        user_agent: str = USER_AGENT,
        accept_language: str = ACCEPT_LANGUAGE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cache = cache
        self.timeout_s = timeout_s
        self._client = httpx.AsyncClient(
            headers={"User-Agent": user_agent, "Accept-Language": accept_language},
            timeout=httpx.Timeout(timeout_s),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_text(self, url: str, deadline: Deadline | None = None) -> str:
        key = "GET:" + url
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("[http] cache hit url=%s", url)
            return cached

        res = await self.get(url, deadline)
        self.cache.put(key, res.text)
        return res.text

    async def get(self, url: str, deadline: Deadline | None = None) -> HttpResult:
        budget = self.timeout_s
        if deadline is not None:
            deadline.check(f"GET {url}")
            budget = min(budget, deadline.remaining())

        logger.debug("[http] GET url=%s budget_s=%.2f", url, budget)
        try:
            r = await asyncio.wait_for(self._client.get(url), timeout=budget)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise FetchTimeoutError(f"Fetch timed out after {budget:.1f}s for {url}", url=url) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Fetch failed ({type(e).__name__}) for {url}", url=url) from e

        if not r.is_success:
            raise NetworkError(f"Fetch failed {r.status_code} for {url}", url=url, status_code=r.status_code)

        return HttpResult(url=str(r.url), status_code=r.status_code, text=r.text)
