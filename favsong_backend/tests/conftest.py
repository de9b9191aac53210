"""Shared fixtures: SQLite database per test, small catalog, fake Twitch client."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api import db as db_module
from src.api.catalog import Catalog, Song
from src.api.config import Settings
from src.api.errors import ExchangeError, ProfileFetchError
from src.api.main import create_app
from src.api.oauth import ProviderProfile


class FakeTwitchClient:
    """Stands in for TwitchOAuthClient: each known code maps to a profile."""

    def __init__(self, profiles: Dict[str, ProviderProfile]) -> None:
        self.profiles = profiles
        self.codes_seen = []
        self.closed = False

    def authorize_url(self) -> str:
        return "https://id.twitch.tv/oauth2/authorize?client_id=test-client"

    def authenticate(self, code: str) -> ProviderProfile:
        self.codes_seen.append(code)
        if code == "code-no-profile":
            raise ProfileFetchError("Users endpoint answered 401.")
        try:
            return self.profiles[code]
        except KeyError:
            raise ExchangeError("Token endpoint answered 400.")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        client_id="test-client",
        client_secret="test-secret",
        session_secret="session-signing-secret",
        songs_tsv=tmp_path / "songdata.tsv",
    )


@pytest.fixture
def database(tmp_path: Path) -> Iterator[str]:
    url = f"sqlite:///{tmp_path / 'favorites.db'}"
    db_module.configure_engine(url)
    db_module.init_db()
    yield url
    db_module.get_engine().dispose()


@pytest.fixture
def catalog() -> Catalog:
    return Catalog(
        [
            Song(id="42", name="Test Song", artist="Test Artist"),
            Song(id="7", name="Another Song", artist="Someone Else", year="2019"),
            Song(id="100", name="Third Song"),
        ]
    )


@pytest.fixture
def fake_twitch() -> FakeTwitchClient:
    return FakeTwitchClient(
        {
            "code-u1": ProviderProfile(id="u1", login="user_one", display_name="User One"),
            "code-u2": ProviderProfile(id="u2", login="user_two", display_name="User Two"),
        }
    )


@pytest.fixture
def app(settings: Settings, database: str, catalog: Catalog, fake_twitch: FakeTwitchClient) -> FastAPI:
    return create_app(settings, catalog=catalog, oauth_client=fake_twitch)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def login_as():
    """Simulate the provider redirecting back to the callback with `code`."""

    def _login(client: TestClient, code: str = "code-u1"):
        return client.get("/auth/twitch/callback", params={"code": code}, follow_redirects=False)

    return _login
