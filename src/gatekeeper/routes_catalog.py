"""
Catalog and streaming endpoints (public):
- GET /api (liveness)
- GET /api/songs
- GET /api/albums
- GET /api/albums/{album_id}/songs
- GET /api/songs/{song_id}/stream (short-lived signed URL)

The private storage key is resolved server-side and only ever handed to the
capability issuer; responses carry public metadata or the signed URL.
"""

from __future__ import annotations

import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from src.gatekeeper.catalog import CatalogStore
from src.gatekeeper.errors import IssuerUnavailable, NotFound, StoreUnavailable
from src.gatekeeper.schemas import AlbumPublic, AlbumSongPublic, SongPublic, StreamUrlResponse
from src.gatekeeper.storage import CapabilityIssuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# PUBLIC_INTERFACE
def get_catalog(request: Request) -> CatalogStore:
    """FastAPI dependency returning the shared catalog store."""
    return request.app.state.catalog


# PUBLIC_INTERFACE
def get_issuer(request: Request) -> CapabilityIssuer:
    """FastAPI dependency returning the shared capability issuer."""
    return request.app.state.issuer


# PUBLIC_INTERFACE
def get_stream_ttl(request: Request) -> int:
    """FastAPI dependency returning the configured signed URL lifetime."""
    return request.app.state.stream_ttl_seconds


def _json_404(message: str) -> NoReturn:
    """Raise a JSON 404 error with a predictable shape."""
    raise HTTPException(
        status_code=HTTP_404_NOT_FOUND,
        detail={"error": "not_found", "message": message},
    )


def _json_500(error: str, message: str) -> NoReturn:
    raise HTTPException(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "message": message},
    )


@router.get(
    "",
    response_class=PlainTextResponse,
    summary="Liveness check",
    description="Confirms the process accepts connections.",
    tags=["Health"],
    operation_id="health_check",
)
def health_check() -> str:
    """Return a plain-text confirmation."""
    return "API is running."


@router.get(
    "/songs",
    response_model=List[SongPublic],
    summary="List all songs",
    description="Returns public song metadata, ascending by id.",
    tags=["Songs"],
    operation_id="list_songs",
)
def list_songs(catalog: CatalogStore = Depends(get_catalog)) -> List[SongPublic]:
    try:
        return catalog.list_songs()
    except StoreUnavailable:
        logger.exception("list_songs_failed")
        _json_500("store_unavailable", "Internal server error.")


@router.get(
    "/albums",
    response_model=List[AlbumPublic],
    summary="List all albums",
    description="Returns public album metadata, newest first.",
    tags=["Albums"],
    operation_id="list_albums",
)
def list_albums(catalog: CatalogStore = Depends(get_catalog)) -> List[AlbumPublic]:
    try:
        return catalog.list_albums()
    except StoreUnavailable:
        logger.exception("list_albums_failed")
        _json_500("store_unavailable", "Internal server error.")


@router.get(
    "/albums/{album_id}/songs",
    response_model=List[AlbumSongPublic],
    summary="List songs of an album",
    description="Returns the album's songs ascending by id; 404 when the album has no songs.",
    tags=["Albums"],
    operation_id="list_album_songs",
    responses={404: {"description": "Album not found or empty"}},
)
def list_album_songs(album_id: int, catalog: CatalogStore = Depends(get_catalog)) -> List[AlbumSongPublic]:
    """An unknown album and an album without songs both answer 404."""
    try:
        return catalog.list_songs_for_album(album_id)
    except NotFound:
        logger.info("album_songs_not_found: album_id=%s", album_id)
        _json_404("No songs found for this album.")
    except StoreUnavailable:
        logger.exception("list_album_songs_failed: album_id=%s", album_id)
        _json_500("store_unavailable", "Internal server error.")


@router.get(
    "/songs/{song_id}/stream",
    response_model=StreamUrlResponse,
    summary="Get a stream URL",
    description="Returns a freshly signed, short-lived URL for the song's audio object.",
    tags=["Songs"],
    operation_id="stream_song",
    responses={404: {"description": "Song not found"}},
)
def stream_song(
    song_id: int,
    response: Response,
    catalog: CatalogStore = Depends(get_catalog),
    issuer: CapabilityIssuer = Depends(get_issuer),
    ttl_seconds: int = Depends(get_stream_ttl),
) -> StreamUrlResponse:
    """Resolve the song's storage key and sign a new URL on every call."""
    try:
        storage_key = catalog.get_audio_key(song_id)
    except NotFound:
        logger.info("stream_song_not_found: song_id=%s", song_id)
        _json_404("Song not found.")
    except StoreUnavailable:
        logger.exception("stream_song_lookup_failed: song_id=%s", song_id)
        _json_500("store_unavailable", "Could not generate stream URL.")

    try:
        url = issuer.issue_capability(storage_key, ttl_seconds)
    except (IssuerUnavailable, ValueError):
        logger.exception("stream_song_sign_failed: song_id=%s", song_id)
        _json_500("issuer_unavailable", "Could not generate stream URL.")

    # Signed URLs must not be kept by browsers or proxies.
    response.headers["Cache-Control"] = "no-store"
    return StreamUrlResponse(url=url)
