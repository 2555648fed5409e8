"""CLI main module for skill-dialog."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn, Optional

import typer

from skilldialog.cli.render import Renderer, create_cli_renderer
from skilldialog.cli.shell import DialogShell
from skilldialog.config import Settings, get_settings
from skilldialog.dialog.controller import DialogSessionController
from skilldialog.dialog.replay import ReplayTranscript, load_replay
from skilldialog.errors import ReplayFormatError, SkillIdNotConfiguredError
from skilldialog.logging_utils import bind_skill, configure_logging
from skilldialog.metrics import MetricClient
from skilldialog.model.app_config import AppConfig
from skilldialog.model.resource_states import ResourceStates, default_states_path
from skilldialog.simulation.client import SimulationClient
from skilldialog.simulation.transport import HttpSimulationTransport

app = typer.Typer(
    name="skilldialog",
    help="Simulate a multi-turn dialog with your skill.",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback()
def main_callback() -> None:
    """Simulate a multi-turn dialog with your skill."""


def resolve_skill_id(
    skill_id: Optional[str],
    transcript: Optional[ReplayTranscript],
    settings: Settings,
    states: ResourceStates,
) -> str:
    """Pick the skill id from the option, the replay file, settings or resource states, in that order."""
    candidates = [
        skill_id,
        transcript.skill_id if transcript else None,
        settings.skill_id,
        states.get_skill_id(settings.profile),
    ]
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    raise SkillIdNotConfiguredError(
        f"Failed to obtain skill id for profile {settings.profile!r}. "
        "Pass --skill-id, set SKILLDIALOG_SKILL_ID or run inside a deployed skill project."
    )


async def run_dialog(
    settings: Settings,
    *,
    skill_id: str,
    locale: str,
    states: ResourceStates,
    script: Sequence[str],
    renderer: Renderer,
) -> None:
    bind_skill(skill_id)
    async with HttpSimulationTransport(
        settings.api_base,
        settings.access_token,
        timeout=settings.request_timeout_seconds,
    ) as transport:
        client = SimulationClient(
            transport,
            skill_id=skill_id,
            locale=locale,
            stage=settings.stage,
            poll_interval=settings.poll_interval_seconds,
            poll_retries=settings.poll_retries,
        )
        controller = DialogSessionController(client)
        shell = DialogShell(controller, renderer, states=states, profile=settings.profile, stage=settings.stage)
        await shell.run(script)


def _exit_with_error(renderer: Renderer, message: str) -> NoReturn:
    renderer.error(message)
    raise typer.Exit(1)


@app.command()
def dialog(
    skill_id: Optional[str] = typer.Option(None, "--skill-id", "-s", help="Skill id to simulate against"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale of the simulated device"),
    stage: Optional[str] = typer.Option(None, "--stage", "-g", help="Skill stage"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile holding the skill id"),
    replay: Optional[Path] = typer.Option(None, "--replay", "-r", help="Replay file with scripted utterances"),  # noqa: B008
    workspace: Optional[Path] = typer.Option(None, "--workspace", "-w", help="Skill project root"),  # noqa: B008
) -> None:
    """Start an interactive dialog with a skill."""
    renderer = create_cli_renderer()
    settings = get_settings(stage=stage, profile=profile)
    configure_logging(profile="chat", level=settings.log_level)

    transcript: Optional[ReplayTranscript] = None
    if replay is not None:
        try:
            transcript = load_replay(replay)
        except ReplayFormatError as exc:
            _exit_with_error(renderer, str(exc))

    states = ResourceStates.open(default_states_path(workspace or Path.cwd()))
    try:
        resolved_skill_id = resolve_skill_id(skill_id, transcript, settings, states)
    except SkillIdNotConfiguredError as exc:
        _exit_with_error(renderer, str(exc))
    resolved_locale = locale or (transcript.locale if transcript else None) or settings.locale

    metrics = MetricClient(settings, AppConfig.open(settings.app_config_path))
    metrics.start_action("dialog", "command")
    error: BaseException | None = None
    try:
        asyncio.run(
            run_dialog(
                settings,
                skill_id=resolved_skill_id,
                locale=resolved_locale,
                states=states,
                script=transcript.user_input if transcript else (),
                renderer=renderer,
            )
        )
    except Exception as exc:
        error = exc
        renderer.error(f"Dialog failed: {exc!s}")
        raise typer.Exit(1) from exc
    finally:
        metrics.send_data(error)
        metrics.close()


if __name__ == "__main__":
    app()
