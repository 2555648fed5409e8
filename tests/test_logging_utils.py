from __future__ import annotations

import contextvars
import sys
from collections.abc import Iterator

import pytest
from loguru import logger

from skilldialog import logging_utils


@pytest.fixture(autouse=True)
def _restore_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(logging_utils, "_configured", None)
    yield
    logger.configure(handlers=[{"sink": sys.stderr}])


def test_records_carry_the_bound_skill() -> None:
    logging_utils.configure_logging(level="debug")
    captured: list[str] = []
    logger.add(captured.append, format="{extra[skill]} {message}")

    def _log_for_skill() -> None:
        logging_utils.bind_skill("amzn1.ask.skill.one")
        logger.info("dialog.turn.start")

    contextvars.copy_context().run(_log_for_skill)
    logger.info("outside")

    assert [line.strip() for line in captured] == ["amzn1.ask.skill.one dialog.turn.start", "- outside"]


def test_configure_logging_is_idempotent_per_profile_and_level() -> None:
    logging_utils.configure_logging(profile="chat", level="warning")
    logging_utils.configure_logging(profile="chat", level="WARNING")

    assert logging_utils._configured == ("chat", "WARNING")
