"""
Pydantic models (request/response shapes) for API endpoints.

JSON keys are camelCase (what the browser UI reads); Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from src.api.catalog import Song


class SongWithFavorite(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Catalog song id.")
    name: str = Field(..., description="Song title.")
    artist: str = Field("", description="Performing artist.")
    album_artist: str = Field("", alias="albumArtist", description="Album artist.")
    album: str = Field("", description="Album title.")
    year: str = Field("", description="Release year as listed in the catalog.")
    genre: str = Field("", description="Genre.")
    vocal: str = Field("", description="Vocal credit.")
    url: str = Field("", description="Display or source URL.")
    is_favorite: bool = Field(..., alias="isFavorite", description="Whether the current user favorited it.")

    @classmethod
    def from_song(cls, song: Song, is_favorite: bool) -> "SongWithFavorite":
        return cls(
            id=song.id,
            name=song.name,
            artist=song.artist,
            album_artist=song.album_artist,
            album=song.album,
            year=song.year,
            genre=song.genre,
            vocal=song.vocal,
            url=song.url,
            is_favorite=is_favorite,
        )


class SongListResponse(BaseModel):
    songs: List[SongWithFavorite] = Field(..., description="Full catalog in catalog order.")


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    song_id: StrictStr = Field(..., alias="songId", description="Catalog song id.")
    favorite: StrictBool = Field(..., description="Target state: true to favorite, false to remove.")


class FavoriteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="Always true on success.")
    song_id: str = Field(..., alias="songId", description="Catalog song id.")
    favorite: bool = Field(..., description="State now stored.")


class ErrorResponse(BaseModel):
    success: bool = Field(False)
    error: str = Field(..., description="Machine-readable error code.")
    message: str = Field(..., description="Human-readable message.")
