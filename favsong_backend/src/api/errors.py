"""
Error taxonomy for the favorites backend.

Domain modules raise these; `exception_handlers` turns them into HTTP responses.
"""

from __future__ import annotations


class FavSongError(Exception):
    """Base class for all domain errors."""

    error_code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(FavSongError):
    """No session, or the session cookie is invalid/expired."""

    error_code = "unauthorized"


class AuthenticationFailed(FavSongError):
    """Base for failures of the OAuth handshake."""

    error_code = "authentication_failed"


class ExchangeError(AuthenticationFailed):
    """The authorization code could not be traded for an access token."""

    error_code = "exchange_failed"


class ProfileFetchError(AuthenticationFailed):
    """The provider profile for an access token could not be fetched."""

    error_code = "profile_fetch_failed"


class InvalidSongId(FavSongError):
    """The client referenced a song id that is not in the catalog."""

    error_code = "invalid_song_id"

    def __init__(self, song_id: str) -> None:
        super().__init__("Invalid song ID")
        self.song_id = song_id


class PersistenceError(FavSongError):
    """A storage operation failed; the transaction was rolled back."""

    error_code = "persistence_failed"
