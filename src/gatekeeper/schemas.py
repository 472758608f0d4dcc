"""
Pydantic models (response shapes) for API endpoints.

None of these carry the private storage key.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SongPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Song id.")
    title: str = Field(..., description="Song title.")
    artist: str = Field(..., description="Song artist.")
    cover_art_url: Optional[str] = Field(None, description="Public cover art URL.")


class AlbumPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Album id.")
    title: str = Field(..., description="Album title.")
    cover_art_url: Optional[str] = Field(None, description="Public cover art URL.")


class AlbumSongPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Song id.")
    title: str = Field(..., description="Song title.")
    artist: str = Field(..., description="Song artist.")


class StreamUrlResponse(BaseModel):
    url: str = Field(..., description="Short-lived signed URL for the audio object.")
