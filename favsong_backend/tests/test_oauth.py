"""Tests for the Twitch OAuth client against a mocked transport."""

from typing import Callable, List
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from src.api.config import Settings
from src.api.errors import ExchangeError, ProfileFetchError
from src.api.oauth import ProviderProfile, TwitchOAuthClient


@pytest.fixture
def oauth_settings() -> Settings:
    return Settings(
        client_id="cid",
        client_secret="csecret",
        session_secret="s",
        redirect_uri="http://localhost:3000/auth/twitch/callback",
    )


def make_client(settings: Settings, handler: Callable[[httpx.Request], httpx.Response]) -> TwitchOAuthClient:
    return TwitchOAuthClient(settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestAuthorizeUrl:
    def test_contains_expected_params(self, oauth_settings: Settings) -> None:
        client = make_client(oauth_settings, lambda request: httpx.Response(500))

        url = urlparse(client.authorize_url())
        params = parse_qs(url.query)

        assert f"{url.scheme}://{url.netloc}{url.path}" == "https://id.twitch.tv/oauth2/authorize"
        assert params == {
            "client_id": ["cid"],
            "redirect_uri": ["http://localhost:3000/auth/twitch/callback"],
            "response_type": ["code"],
            "scope": ["user:read:email"],
        }


class TestExchangeCode:
    def test_success_posts_credentials(self, oauth_settings: Settings) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "at-1", "token_type": "bearer"})

        token = make_client(oauth_settings, handler).exchange_code("the-code")

        assert token == "at-1"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "https://id.twitch.tv/oauth2/token"
        form = parse_qs(seen[0].content.decode())
        assert form == {
            "client_id": ["cid"],
            "client_secret": ["csecret"],
            "code": ["the-code"],
            "grant_type": ["authorization_code"],
            "redirect_uri": ["http://localhost:3000/auth/twitch/callback"],
        }

    def test_rejected_code(self, oauth_settings: Settings) -> None:
        client = make_client(
            oauth_settings, lambda request: httpx.Response(400, json={"status": 400, "message": "Invalid authorization code"})
        )
        with pytest.raises(ExchangeError):
            client.exchange_code("expired")

    def test_missing_access_token(self, oauth_settings: Settings) -> None:
        client = make_client(oauth_settings, lambda request: httpx.Response(200, json={"token_type": "bearer"}))
        with pytest.raises(ExchangeError):
            client.exchange_code("c")

    def test_invalid_json(self, oauth_settings: Settings) -> None:
        client = make_client(oauth_settings, lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ExchangeError):
            client.exchange_code("c")

    def test_transport_error(self, oauth_settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(ExchangeError):
            make_client(oauth_settings, handler).exchange_code("c")


class TestFetchProfile:
    def test_success_sends_bearer_and_client_id(self, oauth_settings: Settings) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"data": [{"id": "141981764", "login": "twitchdev", "display_name": "TwitchDev"}]}
            )

        profile = make_client(oauth_settings, handler).fetch_profile("at-1")

        assert profile == ProviderProfile(id="141981764", login="twitchdev", display_name="TwitchDev")
        assert seen[0].method == "GET"
        assert str(seen[0].url) == "https://api.twitch.tv/helix/users"
        assert seen[0].headers["Authorization"] == "Bearer at-1"
        assert seen[0].headers["Client-Id"] == "cid"

    def test_display_name_falls_back_to_login(self, oauth_settings: Settings) -> None:
        client = make_client(oauth_settings, lambda request: httpx.Response(200, json={"data": [{"id": 5, "login": "x"}]}))
        assert client.fetch_profile("t") == ProviderProfile(id="5", login="x", display_name="x")

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(401, json={"error": "Unauthorized"}),
            httpx.Response(200, json={"data": []}),
            httpx.Response(200, json={}),
            httpx.Response(200, json=[1, 2]),
            httpx.Response(200, json={"data": [{"login": "no-id"}]}),
            httpx.Response(200, text="not json"),
        ],
    )
    def test_unusable_answers(self, oauth_settings: Settings, response: httpx.Response) -> None:
        client = make_client(oauth_settings, lambda request: response)
        with pytest.raises(ProfileFetchError):
            client.fetch_profile("t")

    def test_transport_error(self, oauth_settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ProfileFetchError):
            make_client(oauth_settings, handler).fetch_profile("t")


def test_authenticate_chains_exchange_and_profile(oauth_settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth2/token":
            return httpx.Response(200, json={"access_token": "at-9"})
        assert request.headers["Authorization"] == "Bearer at-9"
        return httpx.Response(200, json={"data": [{"id": "u9", "login": "nine", "display_name": "Nine"}]})

    assert make_client(oauth_settings, handler).authenticate("c") == ProviderProfile(
        id="u9", login="nine", display_name="Nine"
    )
