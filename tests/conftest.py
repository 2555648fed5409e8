from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from skilldialog.model.config_file import ConfigFile
from skilldialog.simulation.client import SimulationClient
from skilldialog.simulation.transport import SimulationResponse

SKILL_ID = "amzn1.ask.skill.test"


class ScriptedTransport:
    """Transport double replaying queued responses or exceptions in order."""

    def __init__(self, start: list[Any] | None = None, polls: list[Any] | None = None) -> None:
        self.start_results = list(start or [])
        self.poll_results = list(polls or [])
        self.start_calls: list[tuple[str, bool]] = []
        self.poll_calls: list[str] = []

    async def start_simulation(
        self, skill_id: str, stage: str, locale: str, utterance: str, new_session: bool
    ) -> SimulationResponse:
        self.start_calls.append((utterance, new_session))
        return self._next(self.start_results)

    async def get_simulation(self, skill_id: str, stage: str, simulation_id: str) -> SimulationResponse:
        self.poll_calls.append(simulation_id)
        return self._next(self.poll_results)

    @staticmethod
    def _next(queue: list[Any]) -> SimulationResponse:
        if not queue:
            raise AssertionError("unexpected request")
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def started(simulation_id: str = "sim-1", status_code: int = 200) -> SimulationResponse:
    return SimulationResponse(status_code, {"id": simulation_id, "status": "IN_PROGRESS"})


def finished(
    text: str = "Hi",
    *,
    should_end_session: bool = False,
    error: str | None = None,
) -> SimulationResponse:
    if error is not None:
        return SimulationResponse(200, {"id": "sim-1", "status": "FAILED", "result": {"error": {"message": error}}})
    invocation = {
        "body": {
            "response": {"outputSpeech": {"ssml": f"<speak>{text}</speak>"}},
            "shouldEndSession": should_end_session,
        }
    }
    return SimulationResponse(
        200,
        {"id": "sim-1", "status": "SUCCESSFUL", "result": {"skillExecutionInfo": {"invocationResponse": invocation}}},
    )


def in_progress() -> SimulationResponse:
    return SimulationResponse(200, {"id": "sim-1", "status": "IN_PROGRESS"})


ClientFactory = Callable[..., tuple[SimulationClient, ScriptedTransport]]


@pytest.fixture
def make_client() -> ClientFactory:
    def _make(start: list[Any] | None = None, polls: list[Any] | None = None) -> tuple[SimulationClient, ScriptedTransport]:
        transport = ScriptedTransport(start, polls)
        client = SimulationClient(transport, skill_id=SKILL_ID, locale="en-US", poll_interval=0)
        return client, transport

    return _make


@pytest.fixture(autouse=True)
def _dispose_config_files() -> Iterator[None]:
    yield
    ConfigFile._registry.clear()
