"""
FastAPI application entrypoint for the media gatekeeper.

The API is PUBLIC (no authentication) and read-only:
- GET /api
- GET /api/songs
- GET /api/albums
- GET /api/albums/{album_id}/songs
- GET /api/songs/{song_id}/stream

CORS allows every origin by default; restrict it via CORS_ALLOW_ORIGINS
(or ALLOWED_ORIGINS) as comma-separated values.
"""

from __future__ import annotations

import logging
import os as _os
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.gatekeeper.catalog import CatalogStore
from src.gatekeeper.db import create_catalog_engine, create_session_factory
from src.gatekeeper.routes_catalog import router as catalog_router
from src.gatekeeper.storage import (
    CapabilityIssuer,
    create_issuer_from_env,
    is_valid_ttl,
    stream_url_ttl_seconds,
)

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Songs", "description": "List songs and obtain short-lived stream URLs."},
    {"name": "Albums", "description": "List albums and their songs."},
    {"name": "Health", "description": "Service liveness."},
]


def configure_logging() -> None:
    logging.basicConfig(
        level=_os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _cors_origins() -> List[str]:
    raw = _os.getenv("CORS_ALLOW_ORIGINS") or _os.getenv("ALLOWED_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


# PUBLIC_INTERFACE
def create_app(
    catalog: Optional[CatalogStore] = None,
    issuer: Optional[CapabilityIssuer] = None,
    stream_ttl_seconds: Optional[int] = None,
) -> FastAPI:
    """
    Build the gatekeeper app.

    Store and issuer handles are created once at startup from the environment
    unless supplied; supplied handles are used as-is and left open on shutdown.
    A supplied TTL must lie within 1 second .. 7 days.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine = None
        owned_issuer = None
        try:
            if catalog is None:
                engine = create_catalog_engine()
                app.state.catalog = CatalogStore(create_session_factory(engine))
            if issuer is None:
                owned_issuer = create_issuer_from_env()
                app.state.issuer = owned_issuer
            logger.info("startup: stream_url_ttl_seconds=%s", app.state.stream_ttl_seconds)
            yield
        finally:
            if owned_issuer is not None:
                owned_issuer.close()
            if engine is not None:
                engine.dispose()
            logger.info("shutdown: handles released")

    app = FastAPI(
        title="Media Gatekeeper API",
        description=(
            "Catalog metadata and short-lived signed URLs for privately stored audio.\n\n"
            "Authentication: none (public API)\n\n"
            "Streaming:\n"
            "- GET /api/songs/{song_id}/stream returns a fresh signed URL valid for a few minutes."
        ),
        version="1.0.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(catalog_router)

    if catalog is not None:
        app.state.catalog = catalog
    if issuer is not None:
        app.state.issuer = issuer
    if stream_ttl_seconds is None:
        stream_ttl_seconds = stream_url_ttl_seconds()
    elif not is_valid_ttl(stream_ttl_seconds):
        raise ValueError(f"stream_ttl_seconds out of range: {stream_ttl_seconds}")
    app.state.stream_ttl_seconds = stream_ttl_seconds
    return app


load_dotenv()
configure_logging()
app = create_app()


def run() -> None:
    port = int(_os.getenv("PORT", "3001"))
    logger.info("Server listening on port %s", port)
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
