"""Process-wide loguru setup and the skill id carried into every record."""

from __future__ import annotations

import contextvars
import sys
from logging import Handler
from typing import Literal, TextIO

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

_FORMATS: dict[LogProfile, str] = {
    # RichHandler renders level and time itself.
    "chat": "[{extra[skill]}] {message}",
    "default": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{line} | skill={extra[skill]} | {message}",
}
_configured: tuple[LogProfile, str] | None = None

_current_skill: contextvars.ContextVar[str] = contextvars.ContextVar("current_skill", default="-")


def current_skill() -> str:
    return _current_skill.get()


def bind_skill(skill_id: str) -> contextvars.Token[str]:
    """Tag every following log record of this context with ``skill_id``."""
    return _current_skill.set(skill_id)


def _add_skill(record: loguru.Record) -> None:
    record["extra"]["skill"] = current_skill()


def _sink(profile: LogProfile) -> Handler | TextIO:
    if profile == "chat":
        # Share rich's console so records do not tear the spinner line.
        return RichHandler(console=get_console(), show_time=False, show_path=False, markup=False)
    return sys.stderr


def configure_logging(*, profile: LogProfile = "default", level: str = "INFO") -> None:
    """Route loguru to stderr or the rich console.

    Calling it again with the same profile and level is a no-op, so commands
    may call it unconditionally.
    """
    global _configured
    wanted = (profile, level.upper())
    if wanted == _configured:
        return

    handler = {
        "sink": _sink(profile),
        "level": wanted[1],
        "format": _FORMATS[profile],
        "backtrace": False,
        "diagnose": False,
    }
    logger.configure(handlers=[handler], patcher=_add_skill)
    _configured = wanted
