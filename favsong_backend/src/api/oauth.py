"""
Twitch OAuth2 authorization-code client.

Flow:
1) authorize_url() -> browser goes to Twitch, comes back with ?code=
2) exchange_code(code) -> access token                      (ExchangeError)
3) fetch_profile(token) -> ProviderProfile                   (ProfileFetchError)

No retries: a failed handshake means the user starts the login again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from src.api.config import Settings
from src.api.errors import ExchangeError, ProfileFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderProfile:
    id: str
    login: str
    display_name: str


def _error_body(response: httpx.Response) -> str:
    # Keep logs short; provider error bodies are small JSON documents.
    return response.text[:300]


class TwitchOAuthClient:
    """Thin wrapper over the Twitch id/helix endpoints."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None) -> None:
        self.settings = settings
        self._client = http_client or httpx.Client(timeout=settings.oauth_timeout_seconds)

    def close(self) -> None:
        self._client.close()

    # PUBLIC_INTERFACE
    def authorize_url(self) -> str:
        """Build the provider URL the login button redirects to."""
        params = {
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "response_type": "code",
            "scope": self.settings.oauth_scope,
        }
        return f"{self.settings.authorize_url}?{urlencode(params)}"

    # PUBLIC_INTERFACE
    def exchange_code(self, code: str) -> str:
        """
        Trade an authorization code for an access token.

        Raises:
            ExchangeError: transport failure, non-2xx answer, or no access_token in the body.
        """
        data = {
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.settings.redirect_uri,
        }
        try:
            response = self._client.post(self.settings.token_url, data=data)
        except httpx.HTTPError as exc:
            raise ExchangeError(f"Token request failed: {exc.__class__.__name__}") from exc

        if response.is_error:
            logger.warning(
                "oauth_exchange_rejected: status=%s body=%s", response.status_code, _error_body(response)
            )
            raise ExchangeError(f"Token endpoint answered {response.status_code}.")

        try:
            payload: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise ExchangeError("Token endpoint returned invalid JSON.") from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise ExchangeError("Token endpoint returned no access_token.")
        return str(access_token)

    # PUBLIC_INTERFACE
    def fetch_profile(self, access_token: str) -> ProviderProfile:
        """
        Fetch the profile behind an access token.

        Raises:
            ProfileFetchError: transport failure, non-2xx answer, or an empty/malformed user list.
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Client-Id": self.settings.client_id,
        }
        try:
            response = self._client.get(self.settings.users_url, headers=headers)
        except httpx.HTTPError as exc:
            raise ProfileFetchError(f"Profile request failed: {exc.__class__.__name__}") from exc

        if response.is_error:
            logger.warning(
                "oauth_profile_rejected: status=%s body=%s", response.status_code, _error_body(response)
            )
            raise ProfileFetchError(f"Users endpoint answered {response.status_code}.")

        try:
            users = response.json().get("data") or []
            user = users[0]
            return ProviderProfile(
                id=str(user["id"]),
                login=str(user.get("login", "")),
                display_name=str(user.get("display_name") or user.get("login", "")),
            )
        except (ValueError, AttributeError, LookupError, TypeError) as exc:
            raise ProfileFetchError("Users endpoint returned no usable profile.") from exc

    # PUBLIC_INTERFACE
    def authenticate(self, code: str) -> ProviderProfile:
        """Run the exchange and profile fetch for a callback code."""
        return self.fetch_profile(self.exchange_code(code))
