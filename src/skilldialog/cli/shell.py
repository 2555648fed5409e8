"""Interactive dialog shell: reads lines and feeds them to the controller."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from skilldialog.cli.render import Renderer
from skilldialog.dialog.commands import SpecialCommand, parse_special_command
from skilldialog.dialog.controller import DialogSessionController, TurnFailure, TurnOutcome, TurnState
from skilldialog.dialog.replay import create_replay
from skilldialog.errors import FilesystemError, ValidationError
from skilldialog.model.resource_states import ResourceStates

SENDING_MESSAGE = "Sending simulation request to Alexa..."
POLLING_MESSAGE = "Waiting for the simulation response..."


class DialogShell:
    """Serialize user input into dialog turns.

    Scripted lines (from a replay file) run first; afterwards the shell reads
    from the renderer's prompt until ``.quit``, Ctrl-D or Ctrl-C.
    """

    def __init__(
        self,
        controller: DialogSessionController,
        renderer: Renderer,
        *,
        states: ResourceStates | None = None,
        profile: str = "default",
        stage: str = "development",
    ) -> None:
        self._controller = controller
        self._renderer = renderer
        self._states = states
        self._profile = profile
        self._stage = stage
        self._stopped = False
        controller.subscribe(self._on_state_change)

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def run(self, script: Sequence[str] = ()) -> None:
        self._renderer.welcome(self._controller.skill_id, self._controller.locale, self._stage)
        for line in script:
            if self._stopped:
                return
            self._renderer.user_message(line)
            await self.handle_line(line)
        await self._run_input_loop()

    async def _run_input_loop(self) -> None:
        while not self._stopped:
            try:
                line = await self._renderer.get_user_input()
            except (KeyboardInterrupt, EOFError):
                self.quit()
                break
            if not line.strip():
                continue
            await self.handle_line(line)

    async def handle_line(self, line: str) -> None:
        try:
            command = parse_special_command(line)
        except ValidationError as exc:
            self._renderer.warn(str(exc))
            return
        if command is None:
            await self._evaluate(line)
            return
        self._run_command(command)

    def quit(self) -> None:
        """Persist the session and stop reading input."""
        if self._stopped:
            return
        self._stopped = True
        self._save_session()
        self._renderer.info("Goodbye!")

    async def _evaluate(self, line: str) -> None:
        with self._renderer.status(SENDING_MESSAGE):
            await self._controller.evaluate_utterance(line, on_complete=self._report)

    def _on_state_change(self, state: TurnState) -> None:
        if state is TurnState.POLLING:
            self._renderer.update_status(POLLING_MESSAGE)

    def _report(self, outcome: TurnOutcome) -> None:
        if isinstance(outcome, TurnFailure):
            self._renderer.error(outcome.message)
            return
        for caption in outcome.captions:
            self._renderer.caption(caption)
        if outcome.session_ended:
            self._renderer.info("Session ended")

    def _run_command(self, command: SpecialCommand) -> None:
        if command.name == "quit":
            self.quit()
        elif command.name == "reset":
            self._controller.reset()
            self._renderer.info("Session reset. The next utterance starts a new session.")
        elif command.name == "record":
            self._record(command)

    def _record(self, command: SpecialCommand) -> None:
        try:
            path = create_replay(
                command.file_path,
                self._controller.history,
                skill_id=self._controller.skill_id,
                locale=self._controller.locale,
                append_quit=command.append_quit,
            )
        except FilesystemError as exc:
            self._renderer.error(str(exc))
            return
        if path is None:
            return
        suffix = ' (appended ".quit" to list of utterances).' if command.append_quit else ""
        self._renderer.info(f"Created replay file at {path}{suffix}")

    def _save_session(self) -> None:
        if self._states is None:
            return
        self._states.set_skill_id(self._profile, self._controller.skill_id)
        try:
            self._states.write()
        except OSError as exc:
            logger.error("dialog.states.save.error path={} error={}", self._states.path, exc)
            self._renderer.error(f"Unable to save resource states to {self._states.path}: {exc}")
