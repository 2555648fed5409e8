"""Replay transcripts: record a dialog and read it back as scripted input."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from skilldialog.errors import FilesystemError, ReplayFormatError
from skilldialog.model.config_file import write_json_atomic

QUIT_UTTERANCE = ".quit"


class ReplayTranscript(BaseModel):
    """Replay file content as consumed by the dialog shell."""

    model_config = ConfigDict(populate_by_name=True)

    skill_id: str = Field(alias="skillId")
    locale: str
    type: Literal["text"] = "text"
    user_input: list[str] = Field(default_factory=list, alias="userInput")


def is_non_blank(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def create_replay(
    file_path: str | Path | None,
    utterances: Sequence[str],
    *,
    skill_id: str,
    locale: str,
    append_quit: bool = False,
) -> Path | None:
    """Write ``utterances`` as a replay file, replacing any previous content.

    Returns the written path, or None when ``file_path`` is blank. The caller's
    sequence is copied; ``.quit`` is only ever added to the written copy.
    """
    if isinstance(file_path, Path):
        file_path = str(file_path)
    if not is_non_blank(file_path):
        return None

    user_input = list(utterances)
    if append_quit:
        user_input.append(QUIT_UTTERANCE)
    transcript = ReplayTranscript(skill_id=skill_id, locale=locale, user_input=user_input)
    target = Path(file_path)
    try:
        write_json_atomic(target, transcript.model_dump(by_alias=True))
    except OSError as exc:
        raise FilesystemError(f"Unable to write replay file {target}: {exc.strerror or exc}") from exc
    logger.info("dialog.replay.created path={} utterances={}", target, len(user_input))
    return target


def load_replay(file_path: str | Path) -> ReplayTranscript:
    """Read a replay file written by ``create_replay``."""
    path = Path(file_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ReplayFormatError(f"Unable to read replay file {path}: {exc.strerror or exc}") from exc
    try:
        return ReplayTranscript.model_validate(json.loads(raw))
    except json.JSONDecodeError as exc:
        raise ReplayFormatError(f"Replay file {path} is not valid JSON: {exc.msg}") from exc
    except PydanticValidationError as exc:
        raise ReplayFormatError(f"Replay file {path} is malformed: {exc.error_count()} invalid field(s)") from exc

