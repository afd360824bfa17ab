"""Storefront pages, flash messages, auto views and 404 over HTTP."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from meadowlark.catalog import VacationRepository, seed_vacations
from meadowlark.config import Settings
from meadowlark.store import InMemoryDocumentStore


async def _seed(store: InMemoryDocumentStore) -> None:
    await seed_vacations(VacationRepository(store))


class TestPages:
    async def test_home_has_layout_widgets(self, client: AsyncClient) -> None:
        resp = await client.get("/")
        assert resp.status_code == 200
        assert "Welcome to Meadowlark Travel" in resp.text
        assert "Manzanita" in resp.text
        assert '<meta name="csrf-token" content="' in resp.text
        assert "/img/logo" in resp.text

    async def test_about_shows_fortune(self, client: AsyncClient) -> None:
        resp = await client.get("/about")
        assert 'class="fortune"' in resp.text
        assert 'id="mocha"' not in resp.text

    async def test_about_in_test_mode(self, client: AsyncClient) -> None:
        resp = await client.get("/about", params={"test": "1"})
        assert 'id="mocha"' in resp.text
        assert "/qa/tests-about.js" in resp.text

    async def test_vacations_lists_available_only(
        self, client: AsyncClient, store: InMemoryDocumentStore
    ) -> None:
        await _seed(store)
        resp = await client.get("/vacations")
        assert "Hood River Day Trip" in resp.text
        assert "$99.95" in resp.text
        assert "Oregon Coast Getaway" in resp.text
        assert "Rock Climbing in Bend" not in resp.text

    async def test_unknown_path_renders_404(self, client: AsyncClient) -> None:
        resp = await client.get("/no/such/page")
        assert resp.status_code == 404
        assert "404 - Not Found" in resp.text

    async def test_unrouted_write_is_404(
        self, client: AsyncClient, csrf_token: str
    ) -> None:
        resp = await client.post("/no/such/page", headers={"X-CSRF-Token": csrf_token})
        assert resp.status_code == 404

    async def test_static_file_is_served(
        self, client: AsyncClient, settings: Settings
    ) -> None:
        (settings.public_dir / "robots.txt").write_text("User-agent: *\n")
        resp = await client.get("/robots.txt")
        assert resp.status_code == 200
        assert resp.text == "User-agent: *\n"


class TestFlash:
    async def test_subscription_flash_shown_exactly_once(
        self,
        client: AsyncClient,
        store: InMemoryDocumentStore,
        csrf_token: str,
    ) -> None:
        await _seed(store)
        resp = await client.post(
            "/notify-me-when-in-season",
            data={"email": "ann@example.com", "sku": "OC39", "_csrf": csrf_token},
        )
        assert resp.status_code == 303
        assert resp.headers["location"] == "/vacations"

        first = await client.get("/vacations")
        assert "Thank you!" in first.text
        second = await client.get("/vacations")
        assert "Thank you!" not in second.text

        listener = await store.collection("vacation_in_season_listeners").find_one(
            {"email": "ann@example.com"}
        )
        assert listener is not None
        assert listener["skus"] == ["OC39"]

    async def test_unknown_sku_flashes_danger(
        self, client: AsyncClient, csrf_token: str
    ) -> None:
        await client.post(
            "/notify-me-when-in-season",
            data={"email": "ann@example.com", "sku": "NOPE"},
            headers={"X-CSRF-Token": csrf_token},
        )
        resp = await client.get("/")
        assert "alert-danger" in resp.text
        assert "Sorry!" in resp.text

    async def test_form_without_token_is_forbidden(
        self, client: AsyncClient, csrf_token: str
    ) -> None:
        resp = await client.post(
            "/notify-me-when-in-season",
            data={"email": "ann@example.com", "sku": "OC39"},
        )
        assert resp.status_code == 403
        assert "Forbidden" in resp.text


class TestAutoViews:
    async def test_view_without_route_is_rendered(self, client: AsyncClient) -> None:
        resp = await client.get("/tours/hood-river")
        assert resp.status_code == 200
        assert "Hood River Tour" in resp.text

    async def test_resolution_is_cached_case_insensitively(
        self, client: AsyncClient, app: FastAPI
    ) -> None:
        await client.get("/tours/oregon-coast")
        assert app.state.auto_views.cache["/tours/oregon-coast"] == "tours/oregon-coast"

        resp = await client.get("/Tours/Oregon-Coast")
        assert resp.status_code == 200
        assert "Oregon Coast Tour" in resp.text
        assert len(app.state.auto_views.cache) == 1

    async def test_new_view_is_found_without_restart(
        self, client: AsyncClient, views_dir: Path
    ) -> None:
        assert (await client.get("/contact")).status_code == 404
        (views_dir / "contact.html").write_text(
            '{% extends "_layout.html" %}{% block content %}Contact us{% endblock %}'
        )
        resp = await client.get("/contact")
        assert resp.status_code == 200
        assert "Contact us" in resp.text

    async def test_layout_is_not_a_page(self, client: AsyncClient) -> None:
        assert (await client.get("/_layout")).status_code == 404


class TestAdminHost:
    async def test_admin_pages_on_admin_subdomain(self, app: FastAPI) -> None:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://admin.test") as c:
            home = await c.get("/")
            users = await c.get("/users")
            missing = await c.get("/vacations")

        assert "<h1>Admin</h1>" in home.text
        assert "Admin: Users" in users.text
        assert missing.status_code == 404

    async def test_admin_pages_not_on_main_host(self, client: AsyncClient) -> None:
        assert (await client.get("/users")).status_code == 404
