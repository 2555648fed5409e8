from __future__ import annotations

import json

import httpx
import pytest

from skilldialog.simulation.transport import HttpSimulationTransport


def _transport(handler, **kwargs) -> HttpSimulationTransport:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        headers={"Authorization": "Bearer token-1"},
    )
    return HttpSimulationTransport("https://api.example.com/", client=client, **kwargs)


@pytest.mark.asyncio
async def test_start_posts_simulation_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "sim-1", "status": "IN_PROGRESS"})

    async with _transport(handler) as transport:
        response = await transport.start_simulation("skill-1", "development", "en-GB", "open my skill", True)

    assert response.status_code == 200
    assert response.body == {"id": "sim-1", "status": "IN_PROGRESS"}
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.example.com/v2/skills/skill-1/stages/development/simulations"
    assert request.headers["Authorization"] == "Bearer token-1"
    assert json.loads(request.content) == {
        "session": {"mode": "FORCE_NEW_SESSION"},
        "input": {"content": "open my skill"},
        "device": {"locale": "en-GB"},
    }


@pytest.mark.asyncio
async def test_start_continuing_session_uses_default_mode() -> None:
    payloads: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json={"id": "sim-2"})

    async with _transport(handler) as transport:
        await transport.start_simulation("skill-1", "live", "en-US", "yes", False)

    assert payloads[0]["session"] == {"mode": "DEFAULT"}


@pytest.mark.asyncio
async def test_get_simulation_reads_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/v2/skills/skill-1/stages/development/simulations/sim-1"
        return httpx.Response(200, json={"id": "sim-1", "status": "SUCCESSFUL"})

    async with _transport(handler) as transport:
        response = await transport.get_simulation("skill-1", "development", "sim-1")

    assert response.ok
    assert response.body["status"] == "SUCCESSFUL"


@pytest.mark.asyncio
async def test_error_status_and_non_json_body_are_returned() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with _transport(handler) as transport:
        response = await transport.get_simulation("skill-1", "development", "sim-1")

    assert response.status_code == 502
    assert response.ok is False
    assert response.body == {}


@pytest.mark.asyncio
async def test_connection_errors_propagate() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _transport(handler) as transport:
        with pytest.raises(httpx.TransportError):
            await transport.start_simulation("skill-1", "development", "en-US", "hi", True)


@pytest.mark.asyncio
async def test_access_token_sets_bearer_header() -> None:
    async with HttpSimulationTransport("https://api.example.com", "secret") as transport:
        assert transport._client.headers["Authorization"] == "Bearer secret"
