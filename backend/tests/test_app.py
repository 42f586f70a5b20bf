"""Integration tests for the FastAPI wiring and exception handlers."""

import pytest
from httpx import AsyncClient

from response_builder.api_codes import BaseApiCode


@pytest.mark.asyncio
async def test_health_returns_envelope(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "code": 0, "message": "OK", "data": {"status": "ok"}}


@pytest.mark.asyncio
async def test_route_uses_builder_dependency(client: AsyncClient) -> None:
    resp = await client.get("/widgets/gear")
    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == 20
    assert body["message"] == "Widget gear created"
    assert body["data"] == {"name": "gear"}


@pytest.mark.asyncio
async def test_error_envelope_with_explicit_status(client: AsyncClient) -> None:
    resp = await client.get("/stock", params={"count": 0})
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "code": 21, "message": "Out of stock", "data": {"count": 0}}


@pytest.mark.asyncio
async def test_unknown_route_returns_not_found_envelope(client: AsyncClient) -> None:
    resp = await client.get("/nope")
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == BaseApiCode.HTTP_NOT_FOUND
    assert body["message"] == "Unknown method"
    # data_always_object is enabled on the test app
    assert body["data"] == {}


@pytest.mark.asyncio
async def test_http_exception_returns_http_exception_envelope(client: AsyncClient) -> None:
    resp = await client.get("/forbidden")
    assert resp.status_code == 403
    body = resp.json()
    assert body["code"] == BaseApiCode.HTTP_EXCEPTION
    assert body["message"] == "HTTP exception: Forbidden"


@pytest.mark.asyncio
async def test_service_unavailable_envelope(client: AsyncClient) -> None:
    resp = await client.get("/maintenance")
    assert resp.status_code == 503
    assert resp.json()["code"] == BaseApiCode.SERVICE_UNAVAILABLE


@pytest.mark.asyncio
async def test_validation_error_returns_422_envelope(client: AsyncClient) -> None:
    resp = await client.get("/stock", params={"count": -1})
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == BaseApiCode.VALIDATION_EXCEPTION
    assert body["message"] == "Invalid data"
    assert body["data"]["errors"][0]["loc"] == ["query", "count"]


@pytest.mark.asyncio
async def test_unhandled_exception_returns_500_without_details(client: AsyncClient) -> None:
    resp = await client.get("/boom")
    assert resp.status_code == 500
    body = resp.json()
    assert body["code"] == BaseApiCode.UNCAUGHT_EXCEPTION
    assert body["message"] == "Uncaught exception: RuntimeError"
    assert "secret" not in resp.text


@pytest.mark.asyncio
async def test_builder_error_surfaces_as_500(client: AsyncClient) -> None:
    resp = await client.get("/bad-code")
    assert resp.status_code == 500
    assert resp.json()["message"] == "Uncaught exception: CodeOutOfBoundsError"


@pytest.mark.asyncio
async def test_default_encoding_escapes_non_ascii(client: AsyncClient) -> None:
    resp = await client.get("/widgets/ąćę")
    assert "\\u0105\\u0107\\u0119" in resp.text
    assert resp.json()["data"] == {"name": "ąćę"}


@pytest.mark.asyncio
async def test_configured_encoding_keeps_non_ascii(unescaped_client: AsyncClient) -> None:
    resp = await unescaped_client.get("/widgets/ąćę")
    assert '"name":"ąćę"' in resp.text


@pytest.mark.asyncio
async def test_unauthorized_returns_authentication_envelope(client: AsyncClient) -> None:
    resp = await client.get("/private")
    assert resp.status_code == 401
    body = resp.json()
    assert body["code"] == BaseApiCode.AUTHENTICATION_EXCEPTION
    assert body["message"] == "Not authorized"
