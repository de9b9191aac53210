"""
Runtime configuration for the favorites backend.

All values come from environment variables (a local `.env` file is loaded first
when present). Required secrets raise RuntimeError when missing so the process
fails at startup instead of on the first login.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

# Anchor relative paths to the backend root (favsong_backend/), not the process CWD.
_BACKEND_ROOT = Path(__file__).resolve().parents[2]

TWITCH_AUTHORIZE_URL = "https://id.twitch.tv/oauth2/authorize"
TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"
TWITCH_USERS_URL = "https://api.twitch.tv/helix/users"


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once by `load_settings()`."""

    client_id: str
    client_secret: str
    session_secret: str
    redirect_uri: str = "http://localhost:3000/auth/twitch/callback"
    oauth_scope: str = "user:read:email"
    oauth_timeout_seconds: float = 10.0
    authorize_url: str = TWITCH_AUTHORIZE_URL
    token_url: str = TWITCH_TOKEN_URL
    users_url: str = TWITCH_USERS_URL
    session_max_age_minutes: int = 4320  # 3 days
    session_cookie_secure: bool = False
    songs_tsv: Path = _BACKEND_ROOT / "songdata.tsv"
    db_auto_create: bool = True
    cors_origins: tuple = ()


def _required(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"{name} env var is required.")
    return value


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _songs_path() -> Path:
    configured = os.getenv("SONGS_TSV", "").strip()
    if not configured:
        return _BACKEND_ROOT / "songdata.tsv"
    raw = Path(configured)
    return raw if raw.is_absolute() else (_BACKEND_ROOT / raw).resolve()


def _csv_env(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


# PUBLIC_INTERFACE
def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env_file: optional path of a dotenv file; defaults to the nearest `.env` from the working directory up.

    Raises:
        RuntimeError: if TWITCH_CLIENT_ID, TWITCH_CLIENT_SECRET or SESSION_SECRET is missing.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    return Settings(
        client_id=_required("TWITCH_CLIENT_ID"),
        client_secret=_required("TWITCH_CLIENT_SECRET"),
        session_secret=_required("SESSION_SECRET"),
        redirect_uri=os.getenv("OAUTH_REDIRECT_URI", Settings.redirect_uri),
        oauth_scope=os.getenv("OAUTH_SCOPE", Settings.oauth_scope),
        oauth_timeout_seconds=_float_env("OAUTH_HTTP_TIMEOUT_SECONDS", Settings.oauth_timeout_seconds),
        authorize_url=os.getenv("TWITCH_AUTHORIZE_URL", TWITCH_AUTHORIZE_URL),
        token_url=os.getenv("TWITCH_TOKEN_URL", TWITCH_TOKEN_URL),
        users_url=os.getenv("TWITCH_USERS_URL", TWITCH_USERS_URL),
        session_max_age_minutes=_int_env("SESSION_MAX_AGE_MINUTES", Settings.session_max_age_minutes),
        session_cookie_secure=_bool_env("SESSION_COOKIE_SECURE", False),
        songs_tsv=_songs_path(),
        db_auto_create=_bool_env("DB_AUTO_CREATE", True),
        cors_origins=tuple(_csv_env("CORS_ALLOW_ORIGINS") or _csv_env("ALLOWED_ORIGINS")),
    )
