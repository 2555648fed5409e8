from __future__ import annotations

import pytest

from skilldialog.dialog.commands import SpecialCommand, parse_special_command
from skilldialog.errors import ValidationError


def test_plain_utterance_is_not_a_command() -> None:
    assert parse_special_command("open my skill") is None
    assert parse_special_command("  what's 1.5 plus 2") is None


def test_record_command() -> None:
    assert parse_special_command(".record out.json") == SpecialCommand(name="record", file_path="out.json")
    assert parse_special_command(" .record out.json --append-quit ") == SpecialCommand(
        name="record", file_path="out.json", append_quit=True
    )


@pytest.mark.parametrize(
    ("line", "message"),
    [
        (".record", "Incorrect format"),
        (".record a.json --append-quit extra", "Incorrect format"),
        (".record a.json --quit", 'Unable to validate arguments: "--quit"'),
    ],
)
def test_record_command_validation(line: str, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        parse_special_command(line)


def test_quit_and_reset() -> None:
    assert parse_special_command(".quit") == SpecialCommand(name="quit")
    assert parse_special_command(".reset") == SpecialCommand(name="reset")
    with pytest.raises(ValidationError):
        parse_special_command(".quit now")


def test_unknown_command() -> None:
    with pytest.raises(ValidationError, match="Unknown command"):
        parse_special_command(".help")
