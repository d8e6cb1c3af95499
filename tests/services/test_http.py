from __future__ import annotations

from typing import Any

import pytest
from aiohttp import web

from loadingkit.core.exceptions import FetchFailure
from loadingkit.services.http import HttpJsonService

PRODUCTS = [
    {
        "id": 1,
        "title": "Desk Lamp",
        "description": "LED lamp",
        "price": 25.0,
        "category": "lighting",
    },
    {"id": 2, "title": "Phone Stand", "price": 12.5, "category": "accessories"},
]


async def _start_test_server(
    routes: dict[str, tuple[int, Any]],
) -> tuple[web.AppRunner, str]:
    """Serve fixed (status, JSON body) pairs per path on an ephemeral port."""
    app = web.Application()

    def make_handler(status: int, body: Any):
        async def handler(request: web.Request) -> web.Response:
            if isinstance(body, str):
                return web.Response(text=body, status=status)
            return web.json_response(body, status=status)

        return handler

    for path, (status, body) in routes.items():
        app.router.add_get(path, make_handler(status, body))

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    server = site._server
    assert server is not None
    sockets = getattr(server, "sockets", None)
    assert sockets, "Server sockets not available"
    port = sockets[0].getsockname()[1]
    return runner, f"http://127.0.0.1:{port}"


@pytest.mark.asyncio
async def test_fetches_and_maps_products_and_users() -> None:
    runner, base = await _start_test_server(
        {
            "/products": (200, PRODUCTS),
            "/users/7": (200, {"id": 7, "name": "Ada", "email": "ada@example.com"}),
        }
    )
    try:
        async with HttpJsonService(base) as svc:
            products = await svc.get_all_products()
            assert [p.name for p in products] == ["Desk Lamp", "Phone Stand"]
            assert products[1].description == "No description"

            matches = await svc.search_products("phone")
            assert [p.id for p in matches] == ["2"]
            assert products[0].category == "lighting"
            lamps = await svc.search_products("", category="lighting")
            assert [p.id for p in lamps] == ["1"]
            assert await svc.search_products("phone", category="lighting") == []

            user = await svc.get_user("7")
            assert user.id == "7"
            assert user.name == "Ada"
    finally:
        await runner.cleanup()


@pytest.mark.asyncio
async def test_http_errors_become_fetch_failures() -> None:
    runner, base = await _start_test_server(
        {
            "/users/404": (404, {"detail": "missing"}),
            "/products": (200, "not json"),
        }
    )
    try:
        async with HttpJsonService(base) as svc:
            with pytest.raises(FetchFailure, match="HTTP 404"):
                await svc.get_user("404")
            with pytest.raises(FetchFailure):
                await svc.get_all_products()
    finally:
        await runner.cleanup()


@pytest.mark.asyncio
async def test_connection_refused_is_a_fetch_failure() -> None:
    runner, base = await _start_test_server({})
    await runner.cleanup()
    async with HttpJsonService(base, timeout_s=2.0) as svc:
        with pytest.raises(FetchFailure):
            await svc.get_all_products()
