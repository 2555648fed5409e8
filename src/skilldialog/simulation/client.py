"""Simulation client: one start request, then polling with per-attempt retry."""

from __future__ import annotations

import asyncio

import httpx
import tenacity
from loguru import logger

from skilldialog.errors import PollFailure, SimulationError, TransportError
from skilldialog.simulation import parser
from skilldialog.simulation.transport import SimulationResponse, SimulationTransport

DEFAULT_POLL_RETRIES = 3
_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class _RetryableStatusError(Exception):
    def __init__(self, response: SimulationResponse) -> None:
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


def _is_retryable(exc: BaseException) -> bool:
    """Request errors and 429/5xx answers are transient, nothing else is."""
    return isinstance(exc, (httpx.RequestError, _RetryableStatusError))


def _log_retry(retry_state: tenacity.RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning("simulation.poll.retry attempt={} error={!r}", retry_state.attempt_number, exc)


def _error_message(response: SimulationResponse, fallback: str) -> str:
    message = parser.view(response.body, ["error", "message"]) or parser.view(response.body, ["message"])
    return message if isinstance(message, str) else fallback


class SimulationClient:
    """Start a skill simulation and wait for its terminal result.

    The client is bound to one skill, locale and stage and delegates the raw
    exchanges to an injected ``SimulationTransport``.
    """

    def __init__(
        self,
        transport: SimulationTransport,
        *,
        skill_id: str,
        locale: str,
        stage: str = "development",
        poll_interval: float = 1.0,
        poll_retries: int = DEFAULT_POLL_RETRIES,
    ) -> None:
        self._transport = transport
        self.skill_id = skill_id
        self.locale = locale
        self.stage = stage
        self._poll_interval = poll_interval
        self._poll_retries = poll_retries

    async def start_simulation(self, utterance: str, new_session: bool) -> SimulationResponse:
        """Send one utterance to the simulation service (no retry).

        Raises:
            TransportError: On a connectivity failure (``response`` is None) or
                when the service answers with a status of 300 or above.
        """
        logger.debug("simulation.start skill={} new_session={}", self.skill_id, new_session)
        try:
            response = await self._transport.start_simulation(
                self.skill_id, self.stage, self.locale, utterance, new_session
            )
        except httpx.RequestError as exc:
            raise TransportError(f"Failed to reach the simulation service: {exc!s}") from exc

        if response.status_code >= 300:
            message = _error_message(response, f"Simulation request failed with HTTP {response.status_code}.")
            raise TransportError(message, response=response)
        if parser.get_simulation_id(response.body) is None:
            raise TransportError("Simulation response did not include a simulation id.", response=response)
        return response

    async def poll_simulation_result(self, simulation_id: str) -> SimulationResponse:
        """Poll until the simulation leaves ``IN_PROGRESS``.

        Raises:
            PollFailure: When one poll attempt exhausts its retry budget or the
                service rejects the status request.
            SimulationError: When the terminal result reports a service error.
        """
        while True:
            response = await self._poll_once(simulation_id)
            if not parser.is_in_progress(response.body):
                break
            await asyncio.sleep(self._poll_interval)

        logger.debug("simulation.poll.done id={} status={}", simulation_id, parser.get_status(response.body))
        message = parser.get_error_message(response.body)
        if message:
            raise SimulationError(message)
        return response

    async def _poll_once(self, simulation_id: str) -> SimulationResponse:
        retryer = tenacity.AsyncRetrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=tenacity.wait_fixed(self._poll_interval),
            stop=tenacity.stop_after_attempt(self._poll_retries),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            return await retryer(self._get_status, simulation_id)
        except httpx.RequestError as exc:
            raise PollFailure(
                f"Failed to retrieve the simulation result after {self._poll_retries} attempts: {exc!s}"
            ) from exc
        except _RetryableStatusError as exc:
            raise PollFailure(
                _error_message(
                    exc.response,
                    f"Failed to retrieve the simulation result after {self._poll_retries} attempts "
                    f"(HTTP {exc.response.status_code}).",
                )
            ) from exc

    async def _get_status(self, simulation_id: str) -> SimulationResponse:
        response = await self._transport.get_simulation(self.skill_id, self.stage, simulation_id)
        if response.status_code in _RETRYABLE_STATUS_CODES:
            raise _RetryableStatusError(response)
        if response.status_code >= 300:
            raise PollFailure(
                _error_message(response, f"Simulation status request failed with HTTP {response.status_code}.")
            )
        return response
