"""
Session cookie handling and the auth gate.

The browser holds a signed JWT whose only claim of interest is `sid`, the
opaque token of a server-side session. The gate verifies the signature and
expiry, then resolves the token in the SessionStore:
- Depends(require_user) -> SessionUser or Unauthorized
- Depends(optional_user) -> SessionUser or None
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Request, Response
from jose import JWTError, jwt

from src.api.config import Settings
from src.api.dependencies import get_session_store, get_settings
from src.api.errors import Unauthorized
from src.api.sessions import SessionRecord, SessionStore, SessionUser

SESSION_COOKIE = "favsong_session"
_JWT_ALGORITHM = "HS256"


# PUBLIC_INTERFACE
def sign_session_token(
    token: str,
    *,
    secret: str,
    max_age: timedelta,
    now: Optional[datetime] = None,
) -> str:
    """
    Wrap a session token into a signed cookie value.

    Token contains:
      - sid: server-side session token
      - iat
      - exp
    """
    now = now or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sid": token,
        "iat": int(now.timestamp()),
        "exp": int((now + max_age).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALGORITHM)


# PUBLIC_INTERFACE
def read_session_token(cookie_value: Optional[str], *, secret: str) -> Optional[str]:
    """Return the session token from a signed cookie value, or None if invalid/expired."""
    if not cookie_value:
        return None
    try:
        payload = jwt.decode(cookie_value, secret, algorithms=[_JWT_ALGORITHM])
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) and sid else None


# PUBLIC_INTERFACE
def set_session_cookie(response: Response, record: SessionRecord, settings: Settings) -> None:
    """Attach the signed session cookie for `record` to `response`."""
    max_age = record.expires_at - record.created_at
    response.set_cookie(
        SESSION_COOKIE,
        sign_session_token(record.token, secret=settings.session_secret, max_age=max_age, now=record.created_at),
        max_age=int(max_age.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


# PUBLIC_INTERFACE
def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, httponly=True, samesite="lax")


# PUBLIC_INTERFACE
def current_session(request: Request, settings: Settings, store: SessionStore) -> Optional[SessionRecord]:
    """Resolve the request's session cookie to a live SessionRecord."""
    token = read_session_token(request.cookies.get(SESSION_COOKIE), secret=settings.session_secret)
    if token is None:
        return None
    return store.get(token)


# PUBLIC_INTERFACE
def wants_html(request: Request) -> bool:
    """True for browser navigation requests (Accept includes text/html)."""
    return "text/html" in request.headers.get("accept", "")


# PUBLIC_INTERFACE
def optional_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionUser]:
    """FastAPI dependency returning the logged-in user, if any."""
    record = current_session(request, settings, store)
    return record.user if record else None


# PUBLIC_INTERFACE
def require_user(user: Optional[SessionUser] = Depends(optional_user)) -> SessionUser:
    """
    FastAPI dependency that returns the authenticated user.

    Raises Unauthorized when there is no live session; the exception handler
    redirects browsers to /login and answers API clients with JSON 401.
    """
    if user is None:
        raise Unauthorized("Not authenticated.")
    return user
