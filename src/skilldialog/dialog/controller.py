"""Dialog session controller: one conversational turn at a time."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from skilldialog.errors import (
    PollFailure,
    SimulationError,
    SkillDialogError,
    TransportError,
    TurnInProgressError,
    ValidationError,
)
from skilldialog.simulation import parser
from skilldialog.simulation.client import SimulationClient


class TurnState(StrEnum):
    IDLE = "idle"
    SENDING = "sending"
    POLLING = "polling"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class SessionState:
    new_session: bool = True
    utterance_history: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TurnSuccess:
    captions: tuple[str, ...]
    session_ended: bool


@dataclass(frozen=True)
class TurnFailure:
    message: str
    error: SkillDialogError


TurnOutcome = TurnSuccess | TurnFailure
CompletionCallback = Callable[[TurnOutcome], None]
StateListener = Callable[[TurnState], None]


class DialogSessionController:
    """Drive dialog turns against the simulation service.

    The controller owns the session state for its whole lifetime: whether the
    next request opens a new skill session and which utterances were sent in
    the current one. Callers must await one turn before submitting the next.
    """

    def __init__(
        self,
        client: SimulationClient,
        *,
        new_session: bool = True,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._client = client
        self._session = SessionState(new_session=new_session)
        self._state = TurnState.IDLE
        self._listeners: list[StateListener] = [on_state_change] if on_state_change is not None else []

    @property
    def skill_id(self) -> str:
        return self._client.skill_id

    @property
    def locale(self) -> str:
        return self._client.locale

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def new_session(self) -> bool:
        return self._session.new_session

    @property
    def history(self) -> tuple[str, ...]:
        """Snapshot of the utterances sent in the current session."""
        return tuple(self._session.utterance_history)

    def subscribe(self, listener: StateListener) -> None:
        """Call ``listener`` on every state transition."""
        self._listeners.append(listener)

    def reset(self) -> None:
        """Start over with a fresh session and an empty history."""
        self._session = SessionState()

    async def evaluate_utterance(self, raw: str, on_complete: CompletionCallback | None = None) -> TurnOutcome:
        """Run one turn for ``raw`` and report its outcome exactly once."""
        if self._state is not TurnState.IDLE:
            raise TurnInProgressError(f"A dialog turn is already {self._state.value}.")

        utterance = raw.strip()
        if not utterance:
            outcome: TurnOutcome = TurnFailure("Utterance must not be empty.", ValidationError("empty utterance"))
        else:
            try:
                outcome = await self._run_turn(utterance)
            finally:
                self._set_state(TurnState.IDLE)

        if on_complete is not None:
            on_complete(outcome)
        return outcome

    async def _run_turn(self, utterance: str) -> TurnOutcome:
        logger.info("dialog.turn.start skill={} new_session={}", self.skill_id, self._session.new_session)
        self._set_state(TurnState.SENDING)
        try:
            start_response = await self._client.start_simulation(utterance, self._session.new_session)
        except TransportError as exc:
            if exc.response is not None:
                self._session.utterance_history.append(utterance)
            return self._fail(str(exc), exc)

        self._session.utterance_history.append(utterance)
        self._set_state(TurnState.POLLING)
        simulation_id = parser.get_simulation_id(start_response.body) or ""
        try:
            result = await self._client.poll_simulation_result(simulation_id)
        except SimulationError as exc:
            return self._fail(str(exc), exc)
        except PollFailure as exc:
            return self._fail(str(exc), exc)

        session_ended = parser.should_end_session(result.body)
        if session_ended:
            logger.info("dialog.session.ended skill={}", self.skill_id)
            self.reset()
        else:
            self._session.new_session = False
        self._set_state(TurnState.SUCCESS)
        return TurnSuccess(captions=tuple(parser.get_caption(result.body)), session_ended=session_ended)

    def _fail(self, message: str, error: SkillDialogError) -> TurnFailure:
        logger.warning("dialog.turn.error skill={} type={} message={}", self.skill_id, type(error).__name__, message)
        self._set_state(TurnState.ERROR)
        return TurnFailure(message, error)

    def _set_state(self, state: TurnState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in self._listeners:
            listener(state)
