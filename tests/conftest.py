"""Shared pytest fixtures for meadowlark tests."""

from __future__ import annotations

import re
import shutil
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from meadowlark.app import build_app
from meadowlark.config import PACKAGE_DIR, Settings
from meadowlark.context import RequestContext
from meadowlark.isolation import FaultIsolation
from meadowlark.store import InMemoryDocumentStore

CSRF_META = re.compile(r'<meta name="csrf-token" content="([^"]+)">')


@pytest.fixture
def make_request() -> Any:
    """Factory for creating Starlette Request objects."""

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        query_string: str = "",
    ) -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string.encode(),
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
            ],
            "root_path": "",
        }
        return Request(scope)

    return _make


@pytest.fixture
def make_ctx(make_request: Any) -> Any:
    """Factory for RequestContext objects around a fresh request."""

    def _make(**kwargs: Any) -> RequestContext:
        return RequestContext(request=make_request(**kwargs))

    return _make


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    """Private copy of the package views, so tests may add or remove templates."""
    target = tmp_path / "views"
    shutil.copytree(PACKAGE_DIR / "views", target)
    return target


@pytest.fixture
def settings(tmp_path: Path, views_dir: Path) -> Settings:
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    return Settings(
        env="development",
        cookie_secret="test-secret",
        views_dir=views_dir,
        public_dir=public_dir,
        log_dir=tmp_path / "log",
        base_url="https://meadowlark.test",
        auth_providers={
            "facebook": {
                "authorize_url": "https://www.facebook.com/dialog/oauth",
                "client_id": "fb-client",
            }
        },
    )


@pytest.fixture
def verify() -> AsyncMock:
    """Identity provider callback returning a customer profile."""
    mock = AsyncMock()
    mock.return_value = {"id": "cust-1", "name": "Carla Customer"}
    return mock


@pytest.fixture
def isolation() -> FaultIsolation:
    """Boundary whose failsafe timer and process exit are inert."""
    return FaultIsolation(
        timer_factory=MagicMock(), exit_process=MagicMock(), close_listener=MagicMock()
    )


@pytest.fixture
def app(
    settings: Settings,
    store: InMemoryDocumentStore,
    verify: AsyncMock,
    isolation: FaultIsolation,
) -> FastAPI:
    return build_app(settings, store=store, verify=verify, isolation=isolation)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def csrf_token(client: AsyncClient) -> str:
    """Token from the home page's csrf-token meta tag; the client keeps the session."""
    resp = await client.get("/")
    match = CSRF_META.search(resp.text)
    assert match is not None, "csrf-token meta tag missing"
    return match.group(1)


@pytest.fixture
def login_as(
    client: AsyncClient, store: InMemoryDocumentStore, verify: AsyncMock
) -> Callable[[str], Awaitable[None]]:
    """Log the client in through the provider callback with the given role."""

    async def _login(role: str = "customer") -> None:
        profile_id = f"{role}-1"
        if role != "customer":
            await store.collection("users").insert(
                {
                    "auth_id": f"facebook:{profile_id}",
                    "name": f"{role.title()} User",
                    "role": role,
                }
            )
        verify.return_value = {"id": profile_id, "name": f"{role.title()} User"}
        resp = await client.get("/auth/facebook/callback")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/account"

    return _login
