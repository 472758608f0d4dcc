"""
Read-only access to the song/album catalog.

Every lookup uses bound parameters via SQLAlchemy `select()`; caller-supplied ids
are never formatted into SQL text. Public projections select explicit columns so
`songs.audio_file_name` cannot leak through a listing.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from sqlalchemy import Row, Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from src.gatekeeper.db import get_db_session
from src.gatekeeper.errors import NotFound, StoreUnavailable
from src.gatekeeper.models import Album, Song
from src.gatekeeper.schemas import AlbumPublic, AlbumSongPublic, SongPublic


class CatalogStore:
    """Typed lookups against the `songs` and `albums` tables."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _fetch(self, operation: str, stmt: Select) -> Sequence[Row[Any]]:
        try:
            with get_db_session(self._session_factory) as db:
                return db.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"{operation} failed ({exc.__class__.__name__})") from exc

    # PUBLIC_INTERFACE
    def list_songs(self) -> List[SongPublic]:
        """All songs, ascending by id."""
        stmt = select(Song.id, Song.title, Song.artist, Song.cover_art_url).order_by(Song.id.asc())
        rows = self._fetch("list_songs", stmt)
        return [SongPublic.model_validate(row) for row in rows]

    # PUBLIC_INTERFACE
    def list_albums(self) -> List[AlbumPublic]:
        """All albums, newest (highest id) first."""
        stmt = select(Album.id, Album.title, Album.cover_art_url).order_by(Album.id.desc())
        rows = self._fetch("list_albums", stmt)
        return [AlbumPublic.model_validate(row) for row in rows]

    # PUBLIC_INTERFACE
    def list_songs_for_album(self, album_id: int) -> List[AlbumSongPublic]:
        """
        Songs belonging to `album_id`, ascending by id.

        Raises:
            NotFound: no song references this album (unknown album or empty album).
            StoreUnavailable: connection or query failure.
        """
        stmt = (
            select(Song.id, Song.title, Song.artist)
            .where(Song.album_id == album_id)
            .order_by(Song.id.asc())
        )
        rows = self._fetch("list_songs_for_album", stmt)
        if not rows:
            raise NotFound(f"no songs for album_id={album_id}")
        return [AlbumSongPublic.model_validate(row) for row in rows]

    # PUBLIC_INTERFACE
    def get_audio_key(self, song_id: int) -> str:
        """
        Resolve a public song id to its private storage key.

        Raises:
            NotFound: unknown song, or a song row whose stored key is empty or blank.
            StoreUnavailable: connection or query failure.
        """
        stmt = select(Song.audio_file_name).where(Song.id == song_id)
        rows = self._fetch("get_audio_key", stmt)
        key = rows[0].audio_file_name if rows else None
        if not key or not key.strip():
            raise NotFound(f"no audio for song_id={song_id}")
        return key
