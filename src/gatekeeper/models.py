"""
SQLAlchemy models for the catalog tables (`songs`, `albums`).

`Song.audio_file_name` is the private object-store key. It is mapped here so the
stream route can resolve it, but no public projection ever selects it.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class Album(Base):
    """Album row (public metadata only)."""

    __tablename__ = "albums"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    cover_art_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    songs: Mapped[list["Song"]] = relationship("Song", back_populates="album")


class Song(Base):
    """Song row with public metadata and the private storage key.

    A song may exist without an album; `album_id` is a plain nullable reference.
    """

    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    artist: Mapped[str] = mapped_column(Text, nullable=False)
    cover_art_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    album_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("albums.id"),
        nullable=True,
        index=True,
    )

    # Private: storage key inside the R2 bucket.
    audio_file_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    album: Mapped[Optional[Album]] = relationship("Album", back_populates="songs")
