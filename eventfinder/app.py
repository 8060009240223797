from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.responses import Response

from .config import ALLOWED_ORIGINS, CACHE_TTL_S, HANDLER_DEADLINE_S, setup_logging
from .filters import SearchFilters, parse_limit
from .models import SearchResponse
from .normalize import parse_request_date
from .pipeline import run_search
from .sources.cache import FetchCache
from .sources.http import HttpClient

logger = logging.getLogger(__name__)


class PreflightCORSMiddleware(CORSMiddleware):
    """Allowed preflights get 204 with the CORS headers and no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            k: v for k, v in response.headers.items()
            if k.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


def create_app(
    client: Optional[HttpClient] = None,
    *,
    handler_deadline_s: float = HANDLER_DEADLINE_S,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        if client is not None:
            yield
            return
        owned = HttpClient(FetchCache(CACHE_TTL_S))
        app.state.client = owned
        logger.info("[api] startup cache_ttl_s=%.0f origins=%s", CACHE_TTL_S, ",".join(ALLOWED_ORIGINS))
        try:
            yield
        finally:
            await owned.aclose()

    app = FastAPI(title="Napa Valley Event Finder", lifespan=lifespan)
    app.state.client = client
    app.state.handler_deadline_s = handler_deadline_s

    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.get("/api/search")
    async def search(
        request: Request,
        town: Optional[str] = Query(default=None),
        type: Optional[str] = Query(default=None),
        start: Optional[str] = Query(default=None),
        end: Optional[str] = Query(default=None),
        limit: Optional[str] = Query(default=None),
    ):
        filters = SearchFilters.build(
            town=town,
            category=type,
            start=parse_request_date(start),
            end=parse_request_date(end),
            limit=parse_limit(limit),
        )
        deadline_s = request.app.state.handler_deadline_s
        try:
            response = await asyncio.wait_for(
                run_search(filters, request.app.state.client),
                timeout=deadline_s,
            )
        except asyncio.TimeoutError:
            logger.error("[api] handler deadline exceeded deadline_s=%.1f filters=%s", deadline_s, filters)
            envelope = SearchResponse(ok=False, timeout=True, error="timeout")
            return JSONResponse(status_code=504, content=envelope.to_payload())
        except Exception:
            logger.exception("[api] search failed filters=%s", filters)
            envelope = SearchResponse(ok=False, error="internal_error")
            return JSONResponse(status_code=500, content=envelope.to_payload())

        return JSONResponse(content=response.to_payload())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("eventfinder.app:app", host="0.0.0.0", port=8000)
