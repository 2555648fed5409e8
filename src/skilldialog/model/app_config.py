"""User-level CLI configuration (``~/.ask/cli_config``)."""

from __future__ import annotations

from typing import Any, ClassVar

from skilldialog.model.config_file import ConfigFile


class AppConfig(ConfigFile):
    BASE: ClassVar[dict[str, Any]] = {"profiles": {}}

    def get_share_usage(self) -> bool:
        value = self.get_property(["share_usage"])
        return True if value is None else bool(value)

    def set_share_usage(self, share_usage: bool) -> None:
        self.set_property(["share_usage"], share_usage)

    def get_machine_id(self) -> str | None:
        return self.get_property(["machine_id"])

    def set_machine_id(self, machine_id: str) -> None:
        self.set_property(["machine_id"], machine_id)
