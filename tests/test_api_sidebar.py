"""Tests for sidebar API endpoints."""

from typing import Any

import pytest
from aiohttp import web
from booknav.app_keys import sessions_key
from booknav.config import Config
from booknav.server import create_app
from booknav.sessions import SESSION_COOKIE

PAGE = "https://example.org/book/concepts/cps.html"


@pytest.fixture
def app(test_config: Config) -> web.Application:
    return create_app(test_config)


class TestGetSidebar:
    """Tests for GET /api/sidebar."""

    @pytest.mark.asyncio
    async def test__page__returns_state_and_markup(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/api/sidebar", params={"page": PAGE, "root": "../"})

        assert response.status == 200
        data = await response.json()
        assert data["page"] == PAGE
        assert data["state"]["active"] == 2
        assert data["state"]["expanded"] == [0, 1, 2, 6]
        assert '<a href="../concepts/cps.html" class="active">CPS</a>' in data["html"]

    @pytest.mark.asyncio
    async def test__cookieless_requests__create_no_sessions(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        client = await aiohttp_client(app)

        for _ in range(20):
            response = await client.get("/api/sidebar", params={"page": PAGE})
            assert response.status == 200
            assert SESSION_COOKIE not in response.cookies

        assert len(app[sessions_key]) == 0

    @pytest.mark.asyncio
    async def test__script_without_markup__returns_json_500(
        self,
        aiohttp_client: Any,
        test_config: Config,
    ) -> None:
        script = test_config.book.build_dir / "toc.js"
        script.write_text("console.log(1);")
        client = await aiohttp_client(create_app(test_config.with_overrides(toc_file=script)))

        response = await client.get("/api/sidebar", params={"page": PAGE})

        assert response.status == 500
        data = await response.json()
        assert data["error"] == "Invalid navigation file"

    @pytest.mark.asyncio
    async def test__missing_page__returns_400(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/api/sidebar")

        assert response.status == 400
        data = await response.json()
        assert data["error"] == "Missing page parameter"

    @pytest.mark.asyncio
    async def test__missing_toc__returns_404(
        self,
        aiohttp_client: Any,
        test_config: Config,
    ) -> None:
        test_config.book.toc_file.unlink()
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/api/sidebar", params={"page": PAGE})

        assert response.status == 404


class TestScrollRoundTrip:
    """Tests for scroll persistence through POST /api/sidebar/scroll."""

    @pytest.mark.asyncio
    async def test__stored_scroll__is_restored_once(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        client = await aiohttp_client(app)

        stored = await client.post("/api/sidebar/scroll", json={"scrollTop": 137})
        assert stored.status == 204
        assert SESSION_COOKIE in stored.cookies

        first = await client.get("/api/sidebar", params={"page": PAGE, "root": "../"})
        second = await client.get("/api/sidebar", params={"page": PAGE, "root": "../"})

        first_state = (await first.json())["state"]
        second_state = (await second.json())["state"]
        assert first_state["scroll_top"] == 137
        assert first_state["scroll_restored"] is True
        assert second_state["scroll_restored"] is False

    @pytest.mark.asyncio
    async def test__consumed_session__is_dropped(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        client = await aiohttp_client(app)
        await client.post("/api/sidebar/scroll", json={"scrollTop": 40})
        assert len(app[sessions_key]) == 1

        await client.get("/api/sidebar", params={"page": PAGE})
        assert len(app[sessions_key]) == 0

        # The next click starts a fresh session for the same visitor
        await client.post("/api/sidebar/scroll", json={"scrollTop": 80})
        response = await client.get("/api/sidebar", params={"page": PAGE})

        state = (await response.json())["state"]
        assert state["scroll_top"] == 80
        assert state["scroll_restored"] is True

    @pytest.mark.asyncio
    async def test__sessions__are_isolated(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        client = await aiohttp_client(app)
        await client.post("/api/sidebar/scroll", json={"scrollTop": 137})

        # Dropping the cookie starts a new browser session
        client.session.cookie_jar.clear()
        response = await client.get("/api/sidebar", params={"page": PAGE, "root": "../"})

        state = (await response.json())["state"]
        assert state["scroll_restored"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{"scrollTop": "137"}, {"scrollTop": True}, {"offset": 1}, [137]],
    )
    async def test__invalid_body__returns_400(
        self,
        aiohttp_client: Any,
        app: web.Application,
        body: object,
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.post("/api/sidebar/scroll", json=body)

        assert response.status == 400

    @pytest.mark.asyncio
    async def test__non_json_body__returns_400(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.post("/api/sidebar/scroll", data="not json")

        assert response.status == 400
