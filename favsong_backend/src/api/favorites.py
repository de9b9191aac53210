"""
Favorites store: per-user set membership of catalog song ids.

Every write is a single statement in its own transaction:
- favorite on  -> INSERT ... ON CONFLICT DO NOTHING
- favorite off -> DELETE ... WHERE user_id AND song_id
so repeating a toggle, or racing two identical toggles, ends in the same state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Set, Tuple

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.api.catalog import Catalog, Song
from src.api.db import get_db_session
from src.api.errors import InvalidSongId, PersistenceError
from src.api.models import Favorite, User
from src.api.oauth import ProviderProfile

logger = logging.getLogger(__name__)


def _insert_ignoring_conflicts(db: Session, model: Any, values: Dict[str, Any]) -> None:
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values).on_conflict_do_nothing()
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values).on_conflict_do_nothing()
    else:
        # Idempotent inserts rely on ON CONFLICT DO NOTHING.
        raise RuntimeError(f"Unsupported database dialect: {dialect} (use PostgreSQL or SQLite).")
    db.execute(stmt)


# PUBLIC_INTERFACE
def upsert_user(profile: ProviderProfile) -> None:
    """Insert the provider identity into users; an existing row is left untouched."""
    try:
        with get_db_session() as db:
            _insert_ignoring_conflicts(
                db,
                User,
                {"id": profile.id, "login": profile.login, "display_name": profile.display_name},
            )
    except (RuntimeError, SQLAlchemyError) as exc:
        logger.exception("user_upsert_failed: user_id=%s", profile.id)
        raise PersistenceError(f"Could not store user ({exc.__class__.__name__}).") from exc


# PUBLIC_INTERFACE
def set_favorite(user_id: str, song_id: str, favorite: bool, catalog: Catalog) -> None:
    """
    Make (user_id, song_id) membership equal to `favorite`.

    Raises:
        InvalidSongId: song_id is not in the catalog (nothing is written).
        PersistenceError: the statement failed and was rolled back.
    """
    if song_id not in catalog:
        raise InvalidSongId(song_id)

    try:
        with get_db_session() as db:
            if favorite:
                _insert_ignoring_conflicts(db, Favorite, {"user_id": user_id, "song_id": song_id})
            else:
                db.execute(
                    delete(Favorite).where(Favorite.user_id == user_id, Favorite.song_id == song_id)
                )
    except (RuntimeError, SQLAlchemyError) as exc:
        logger.exception("favorite_set_failed: user_id=%s song_id=%s favorite=%s", user_id, song_id, favorite)
        raise PersistenceError(f"Could not update favorite ({exc.__class__.__name__}).") from exc

    logger.info("favorite_set: user_id=%s song_id=%s favorite=%s", user_id, song_id, favorite)


# PUBLIC_INTERFACE
def favorite_song_ids(user_id: str) -> Set[str]:
    """Return the set of song ids the user has favorited."""
    try:
        with get_db_session() as db:
            rows = db.execute(select(Favorite.song_id).where(Favorite.user_id == user_id)).scalars().all()
    except (RuntimeError, SQLAlchemyError) as exc:
        logger.exception("favorite_list_failed: user_id=%s", user_id)
        raise PersistenceError(f"Could not load favorites ({exc.__class__.__name__}).") from exc
    return set(rows)


# PUBLIC_INTERFACE
def is_favorite(user_id: str, song_id: str) -> bool:
    return song_id in favorite_song_ids(user_id)


# PUBLIC_INTERFACE
def songs_with_favorites(user_id: str, catalog: Catalog) -> List[Tuple[Song, bool]]:
    """Catalog songs in catalog order, each paired with the user's favorite flag."""
    favorite_ids = favorite_song_ids(user_id)
    return [(song, song.id in favorite_ids) for song in catalog]
