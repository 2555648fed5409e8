from __future__ import annotations

import httpx
import pytest
from conftest import finished, in_progress, started

from skilldialog.errors import PollFailure, SimulationError, TransportError
from skilldialog.simulation.transport import SimulationResponse


@pytest.mark.asyncio
async def test_start_returns_response_and_forwards_session_flag(make_client) -> None:
    client, transport = make_client(start=[started("sim-7")])

    response = await client.start_simulation("hello", True)

    assert response.body["id"] == "sim-7"
    assert transport.start_calls == [("hello", True)]


@pytest.mark.asyncio
async def test_start_transport_failure_has_no_response(make_client) -> None:
    client, transport = make_client(start=[httpx.ConnectError("connection refused")])

    with pytest.raises(TransportError) as exc_info:
        await client.start_simulation("hello", True)

    assert exc_info.value.response is None
    assert len(transport.start_calls) == 1


@pytest.mark.asyncio
async def test_start_error_status_keeps_response(make_client) -> None:
    rejected = SimulationResponse(400, {"error": {"message": "Skill is not enabled"}})
    client, _ = make_client(start=[rejected])

    with pytest.raises(TransportError, match="Skill is not enabled") as exc_info:
        await client.start_simulation("hello", False)

    assert exc_info.value.response is rejected


@pytest.mark.asyncio
async def test_start_is_not_retried(make_client) -> None:
    client, transport = make_client(start=[SimulationResponse(503, {}), started()])

    with pytest.raises(TransportError):
        await client.start_simulation("hello", True)

    assert len(transport.start_calls) == 1


@pytest.mark.asyncio
async def test_poll_waits_until_terminal_status(make_client) -> None:
    client, transport = make_client(polls=[in_progress(), in_progress(), finished("done")])

    response = await client.poll_simulation_result("sim-1")

    assert response.body["status"] == "SUCCESSFUL"
    assert transport.poll_calls == ["sim-1", "sim-1", "sim-1"]


@pytest.mark.asyncio
async def test_poll_fails_after_three_transport_failures(make_client) -> None:
    failures = [httpx.ConnectError("down") for _ in range(3)]
    client, transport = make_client(polls=[*failures, finished()])

    with pytest.raises(PollFailure):
        await client.poll_simulation_result("sim-1")

    assert len(transport.poll_calls) == 3


@pytest.mark.asyncio
async def test_poll_recovers_after_two_transport_failures(make_client) -> None:
    client, transport = make_client(
        polls=[httpx.ReadTimeout("slow"), httpx.ConnectError("down"), finished("recovered")]
    )

    response = await client.poll_simulation_result("sim-1")

    assert response.body["status"] == "SUCCESSFUL"
    assert len(transport.poll_calls) == 3


@pytest.mark.asyncio
async def test_retry_budget_is_per_poll_attempt(make_client) -> None:
    client, transport = make_client(
        polls=[
            httpx.ConnectError("down"),
            httpx.ConnectError("down"),
            in_progress(),
            httpx.ConnectError("down"),
            httpx.ConnectError("down"),
            finished(),
        ]
    )

    response = await client.poll_simulation_result("sim-1")

    assert response.body["status"] == "SUCCESSFUL"
    assert len(transport.poll_calls) == 6


@pytest.mark.asyncio
async def test_poll_retries_server_errors(make_client) -> None:
    client, _ = make_client(polls=[SimulationResponse(503, {}), finished()])

    response = await client.poll_simulation_result("sim-1")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_poll_client_error_fails_without_retry(make_client) -> None:
    client, transport = make_client(polls=[SimulationResponse(404, {"message": "Simulation not found"}), finished()])

    with pytest.raises(PollFailure, match="Simulation not found"):
        await client.poll_simulation_result("sim-1")

    assert len(transport.poll_calls) == 1


@pytest.mark.asyncio
async def test_poll_surfaces_service_error(make_client) -> None:
    client, _ = make_client(polls=[finished(error="Skill endpoint timed out")])

    with pytest.raises(SimulationError, match="Skill endpoint timed out"):
        await client.poll_simulation_result("sim-1")
