"""Special shell commands understood by the dialog shell."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from skilldialog.errors import ValidationError

COMMAND_PREFIX = "."
APPEND_QUIT_FLAG = "--append-quit"
RECORD_FORMAT = 'Please use the format: ".record <fileName>" or ".record <fileName> --append-quit"'

CommandName = Literal["record", "quit", "reset"]


@dataclass(frozen=True)
class SpecialCommand:
    name: CommandName
    file_path: str | None = None
    append_quit: bool = False


def parse_special_command(line: str) -> SpecialCommand | None:
    """Parse a shell line, returning None when it is an ordinary utterance.

    Raises:
        ValidationError: For an unknown command or malformed arguments.
    """
    stripped = line.strip()
    if not stripped.startswith(COMMAND_PREFIX):
        return None
    name, _, args = stripped[len(COMMAND_PREFIX) :].partition(" ")
    if name == "record":
        return _parse_record(args)
    if name in ("quit", "reset"):
        if args.strip():
            raise ValidationError(f'".{name}" does not take arguments.')
        return SpecialCommand(name=name)
    raise ValidationError(f'Unknown command ".{name}". Available commands: .record, .reset, .quit')


def _parse_record(args: str) -> SpecialCommand:
    parts = args.split()
    if not parts or len(parts) > 2:
        raise ValidationError(f"Incorrect format. {RECORD_FORMAT}")
    append_quit = False
    if len(parts) == 2:
        if parts[1] != APPEND_QUIT_FLAG:
            raise ValidationError(f'Unable to validate arguments: "{parts[1]}". {RECORD_FORMAT}')
        append_quit = True
    return SpecialCommand(name="record", file_path=parts[0], append_quit=append_quit)
