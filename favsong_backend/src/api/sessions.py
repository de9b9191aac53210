"""
Server-side session storage.

A session maps an opaque random token (carried, signed, in the client cookie)
to the user that logged in. Only an in-process backend ships; anything
implementing `SessionStore` can replace it.
"""

from __future__ import annotations

import logging
import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionUser:
    """The identity attached to a session."""

    id: str
    login: str
    display_name: str


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user: SessionUser
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SessionStore(ABC):
    """Token -> SessionRecord storage with explicit create/lookup/destroy."""

    @abstractmethod
    def create(self, user: SessionUser) -> SessionRecord:
        """Create a session for `user` and return it (with a fresh token)."""

    @abstractmethod
    def get(self, token: str) -> Optional[SessionRecord]:
        """Return the live session for `token`, or None if unknown/expired."""

    @abstractmethod
    def destroy(self, token: str) -> bool:
        """Remove the session; returns whether one existed."""


class InMemorySessionStore(SessionStore):
    """Process-local session store. Not shared between worker processes."""

    def __init__(
        self,
        *,
        max_age: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._max_age = max_age
        self._clock = clock
        self._records: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    def create(self, user: SessionUser) -> SessionRecord:
        now = self._clock()
        record = SessionRecord(
            token=secrets.token_urlsafe(32),
            user=user,
            created_at=now,
            expires_at=now + self._max_age,
        )
        with self._lock:
            self._purge_expired(now)
            self._records[record.token] = record
        logger.info("session_created: user_id=%s", user.id)
        return record

    def get(self, token: str) -> Optional[SessionRecord]:
        now = self._clock()
        with self._lock:
            record = self._records.get(token)
            if record is None:
                return None
            if record.is_expired(now):
                del self._records[token]
                return None
            return record

    def destroy(self, token: str) -> bool:
        with self._lock:
            record = self._records.pop(token, None)
        if record is not None:
            logger.info("session_destroyed: user_id=%s", record.user.id)
        return record is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _purge_expired(self, now: datetime) -> None:
        # Caller holds the lock.
        expired = [token for token, record in self._records.items() if record.is_expired(now)]
        for token in expired:
            del self._records[token]
