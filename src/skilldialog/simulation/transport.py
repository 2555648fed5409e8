"""HTTP exchanges with the skill simulation API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

SESSION_MODE_NEW = "FORCE_NEW_SESSION"
SESSION_MODE_DEFAULT = "DEFAULT"


@dataclass(frozen=True)
class SimulationResponse:
    """Status code and decoded JSON body of one API exchange."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class SimulationTransport(Protocol):
    async def start_simulation(
        self, skill_id: str, stage: str, locale: str, utterance: str, new_session: bool
    ) -> SimulationResponse: ...

    async def get_simulation(self, skill_id: str, stage: str, simulation_id: str) -> SimulationResponse: ...


class HttpSimulationTransport:
    """Simulation transport over ``httpx.AsyncClient``.

    Connectivity problems propagate as ``httpx.TransportError``; any answer from
    the service, whatever its status, comes back as a ``SimulationResponse``.

    Usage::

        async with HttpSimulationTransport(api_base, access_token) as transport:
            response = await transport.start_simulation(skill_id, "development", "en-US", "hi", True)
    """

    def __init__(
        self,
        api_base: str,
        access_token: str | None = None,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    def _simulations_url(self, skill_id: str, stage: str) -> str:
        return f"{self._api_base}/v2/skills/{skill_id}/stages/{stage}/simulations"

    async def start_simulation(
        self, skill_id: str, stage: str, locale: str, utterance: str, new_session: bool
    ) -> SimulationResponse:
        payload = {
            "session": {"mode": SESSION_MODE_NEW if new_session else SESSION_MODE_DEFAULT},
            "input": {"content": utterance},
            "device": {"locale": locale},
        }
        response = await self._client.post(self._simulations_url(skill_id, stage), json=payload)
        return _to_simulation_response(response)

    async def get_simulation(self, skill_id: str, stage: str, simulation_id: str) -> SimulationResponse:
        response = await self._client.get(f"{self._simulations_url(skill_id, stage)}/{simulation_id}")
        return _to_simulation_response(response)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpSimulationTransport:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def _to_simulation_response(response: httpx.Response) -> SimulationResponse:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    return SimulationResponse(status_code=response.status_code, body=body)
