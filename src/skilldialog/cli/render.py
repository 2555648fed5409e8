"""CLI renderer for the dialog shell."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich import get_console
from rich.console import Console
from rich.markup import escape
from rich.status import Status

PROMPT = "User  > "


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or get_console()
        self._prompt_session: PromptSession[str] | None = None
        self._print_lock = threading.Lock()
        self._status: Status | None = None

    def info(self, message: str) -> None:
        """Render an info message."""
        self._print(escape(message))

    def warn(self, message: str) -> None:
        """Render a warning message."""
        self._print(f"[bold yellow]Warn:[/bold yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Render an error message."""
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    def welcome(self, skill_id: str, locale: str, stage: str) -> None:
        """Render welcome message."""
        self._print("[bold blue]Skill dialog[/bold blue] - talk to your skill through the simulation service.")
        self._print(f"[bold]Skill:[/bold] [cyan]{escape(skill_id)}[/cyan]  [bold]Locale:[/bold] {escape(locale)}")
        self._print(f"[bold]Stage:[/bold] [magenta]{escape(stage)}[/magenta]")
        self._print('[dim]Special commands: ".record <fileName> [--append-quit]", ".reset", ".quit"[/dim]')

    def user_message(self, message: str) -> None:
        """Render a scripted user utterance."""
        self._print(f"[bold cyan]{PROMPT}[/bold cyan]{escape(message)}")

    def caption(self, message: str) -> None:
        """Render one spoken response of the skill."""
        self._print(f"[bold yellow]Alexa > [/bold yellow]{escape(message)}")

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Show a spinner while a turn is running."""
        with self.console.status(message) as status:
            self._status = status
            try:
                yield
            finally:
                self._status = None

    def update_status(self, message: str) -> None:
        if self._status is not None:
            self._status.update(message)

    async def get_user_input(self) -> str:
        """Prompt user for input."""
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout(raw=True):
            return await self._prompt_session.prompt_async(PROMPT)

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)


def create_cli_renderer() -> Renderer:
    """Create and return a Renderer instance."""
    return Renderer()
