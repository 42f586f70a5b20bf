from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response
from httpx import ASGITransport, AsyncClient

from response_builder.dependencies import Builder
from response_builder.encoding import DEFAULT_ENCODING_OPTIONS, JsonEncoding
from response_builder.main import create_app
from response_builder.responses import as_json_response
from tests.factories import USER_CODES, make_settings

# Pytest only picks up fixtures from conftest.py files. Fixtures defined in other
# modules (like tests/seeds.py) are invisible unless we register them here.
pytest_plugins = ["tests.seeds"]


def _add_demo_routes(app: FastAPI) -> None:
    """Routes that exercise each exception handler and the builder dependency."""

    @app.get("/widgets/{name}")
    async def create_widget(name: str, builder: Builder) -> Response:
        built = builder.success(
            code=20, data={"name": name}, placeholders={"name": name}, http_status=201
        )
        return as_json_response(built)

    @app.get("/stock")
    async def stock(builder: Builder, count: int = Query(ge=0)) -> Response:
        return as_json_response(builder.error(21, data={"count": count}, http_status=409))

    @app.get("/private")
    async def private() -> Response:
        raise HTTPException(status_code=401, detail="Login required")

    @app.get("/forbidden")
    async def forbidden() -> Response:
        raise HTTPException(status_code=403, detail="Forbidden")

    @app.get("/maintenance")
    async def maintenance() -> Response:
        raise HTTPException(status_code=503, detail="Down")

    @app.get("/boom")
    async def boom() -> Response:
        raise RuntimeError("secret internals")

    @app.get("/bad-code")
    async def bad_code(builder: Builder) -> Response:
        return as_json_response(builder.success(code=10_000))


@pytest.fixture
def app() -> FastAPI:
    app = create_app(make_settings(data_always_object=True), USER_CODES)
    _add_demo_routes(app)
    return app


@pytest.fixture
def unescaped_app() -> FastAPI:
    options = DEFAULT_ENCODING_OPTIONS | JsonEncoding.UNESCAPED_UNICODE
    app = create_app(make_settings(encoding_options=options), USER_CODES)
    _add_demo_routes(app)
    return app


async def _client_for(app: FastAPI) -> AsyncIterator[AsyncClient]:
    # raise_app_exceptions=False: Starlette re-raises after the 500 handler runs
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client over the default test app (data_always_object enabled)."""
    async for client in _client_for(app):
        yield client


@pytest_asyncio.fixture
async def unescaped_client(unescaped_app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client over an app configured with UNESCAPED_UNICODE."""
    async for client in _client_for(unescaped_app):
        yield client
