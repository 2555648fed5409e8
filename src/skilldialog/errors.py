"""Application-level exception types for skill-dialog."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skilldialog.simulation.transport import SimulationResponse


class SkillDialogError(Exception):
    """Base exception for skill-dialog."""


class ValidationError(SkillDialogError):
    """Raised for bad local input that must never reach the network."""


class ReplayFormatError(ValidationError):
    """Raised when a replay file is not a valid transcript."""


class TransportError(SkillDialogError):
    """Raised when starting a simulation fails.

    ``response`` is set when the service answered with an error status and is
    ``None`` on a pure connectivity failure.
    """

    def __init__(self, message: str, response: SimulationResponse | None = None) -> None:
        super().__init__(message)
        self.response = response


class PollFailure(SkillDialogError):
    """Raised when the retry budget of one poll attempt is exhausted."""


class SimulationError(SkillDialogError):
    """Raised when a terminal simulation result carries a service error."""


class FilesystemError(SkillDialogError):
    """Raised when a replay file cannot be written."""


class TurnInProgressError(SkillDialogError):
    """Raised when a turn is submitted while another one is still running."""


class ConfigurationError(SkillDialogError):
    """Base exception for configuration and startup validation errors."""


class SkillIdNotConfiguredError(ConfigurationError):
    """Raised when no skill id can be resolved for the dialog."""
