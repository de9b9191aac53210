"""
Song endpoints (all behind the session gate):
- GET /         home page
- GET /about    about page
- GET /songs    catalog with the caller's favorite flags
- POST /favorite  set/unset one favorite
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from src.api.auth import require_user
from src.api.catalog import Catalog
from src.api.dependencies import get_catalog
from src.api.favorites import set_favorite, songs_with_favorites
from src.api.schemas import (
    ErrorResponse,
    FavoriteRequest,
    FavoriteResponse,
    SongListResponse,
    SongWithFavorite,
)
from src.api.sessions import SessionUser
from src.api.views import templates

router = APIRouter(tags=["Songs"])


@router.get("/", response_class=HTMLResponse, summary="Home page", operation_id="home")
def home(request: Request, user: SessionUser = Depends(require_user)):
    return templates.TemplateResponse(request, "index.html", {"display_name": user.display_name})


@router.get("/about", response_class=HTMLResponse, summary="About page", operation_id="about")
def about(request: Request, user: SessionUser = Depends(require_user)):
    return templates.TemplateResponse(request, "about.html", {"display_name": user.display_name})


@router.get(
    "/songs",
    response_model=SongListResponse,
    summary="List songs",
    description="Returns the whole catalog in catalog order with an isFavorite flag per song.",
    operation_id="list_songs",
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def list_songs(
    user: SessionUser = Depends(require_user),
    catalog: Catalog = Depends(get_catalog),
) -> SongListResponse:
    return SongListResponse(
        songs=[SongWithFavorite.from_song(song, flag) for song, flag in songs_with_favorites(user.id, catalog)]
    )


@router.post(
    "/favorite",
    response_model=FavoriteResponse,
    summary="Set favorite state",
    description="Favorites (favorite=true) or unfavorites (favorite=false) a catalog song. Idempotent.",
    operation_id="set_favorite",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def toggle_favorite(
    req: FavoriteRequest,
    user: SessionUser = Depends(require_user),
    catalog: Catalog = Depends(get_catalog),
) -> FavoriteResponse:
    set_favorite(user.id, req.song_id, req.favorite, catalog)
    return FavoriteResponse(song_id=req.song_id, favorite=req.favorite)
