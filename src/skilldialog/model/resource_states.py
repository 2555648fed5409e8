"""Per-project resource states (``.ask/ask-states.json``)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar

from skilldialog.model.config_file import ConfigFile

HIDDEN_FOLDER = ".ask"
STATES_FILE_NAME = "ask-states.json"
BUILD_FILE_NAME = "build.zip"


def default_states_path(project_root: str | Path) -> Path:
    return Path(project_root) / HIDDEN_FOLDER / STATES_FILE_NAME


class ResourceStates(ConfigFile):
    BASE: ClassVar[dict[str, Any]] = {
        "askcliStatesVersion": "2020-03-31",
        "profiles": {},
    }

    def get_skill_id(self, profile: str) -> str | None:
        return self.get_property(["profiles", profile, "skillId"])

    def set_skill_id(self, profile: str, skill_id: str) -> None:
        self.set_property(["profiles", profile, "skillId"], skill_id)

    # skillMetadata
    def get_skill_meta_last_deploy_hash(self, profile: str) -> str | None:
        return self.get_property(["profiles", profile, "skillMetadata", "lastDeployHash"])

    def set_skill_meta_last_deploy_hash(self, profile: str, last_deploy_hash: str) -> None:
        self.set_property(["profiles", profile, "skillMetadata", "lastDeployHash"], last_deploy_hash)

    # code
    def get_code_last_deploy_hash_by_region(self, profile: str, region: str) -> str | None:
        return self.get_property(["profiles", profile, "code", region, "lastDeployHash"])

    def set_code_last_deploy_hash_by_region(self, profile: str, region: str, deploy_hash: str) -> None:
        self.set_property(["profiles", profile, "code", region, "lastDeployHash"], deploy_hash)

    @staticmethod
    def get_code_build_by_region(project_root: str | Path, code_src: str | Path | None) -> dict[str, Path] | None:
        """Build folder and zip mirroring ``code_src`` under the hidden project folder."""
        if not code_src:
            return None
        source = Path(code_src)
        base = (source if source.is_dir() else source.parent).resolve()
        mirror = base.relative_to(Path(project_root).resolve())
        folder = Path(project_root) / HIDDEN_FOLDER / mirror
        return {"folder": folder, "file": folder / BUILD_FILE_NAME}

    # skillInfrastructure
    def get_skill_infra_deploy_state(self, profile: str, infra_type: str) -> Any:
        return self.get_property(["profiles", profile, "skillInfrastructure", infra_type, "deployState"])

    def set_skill_infra_deploy_state(self, profile: str, infra_type: str, deploy_state: Any) -> None:
        self.set_property(["profiles", profile, "skillInfrastructure", infra_type, "deployState"], deploy_state)
