"""
FastAPI dependencies for the application-scoped collaborators.

Everything is created once in `main.create_app()` and kept on `app.state`;
tests swap them through `app.dependency_overrides`.
"""

from __future__ import annotations

from fastapi import Request

from src.api.catalog import Catalog
from src.api.config import Settings
from src.api.oauth import TwitchOAuthClient
from src.api.sessions import SessionStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_oauth_client(request: Request) -> TwitchOAuthClient:
    return request.app.state.oauth_client
