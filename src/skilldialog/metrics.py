"""Usage metrics collected per command and uploaded once it finishes."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from typing import Any

import httpx
import tenacity
from loguru import logger

from skilldialog import __version__
from skilldialog.config import Settings
from skilldialog.model.app_config import AppConfig

CLIENT_ID = "skill-dialog"
ENV_MACHINE_ID = "all_environmental"
UPLOAD_TIMEOUT_SECONDS = 3.0
POST_RETRIES = 3


class MetricActionResult:
    SUCCESS = "Success"
    FAILURE = "Failure"


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class MetricAction:
    def __init__(self, name: str, type: str) -> None:
        self.name = name
        self.type = type
        self.id = str(uuid.uuid4())
        self.start_time = datetime.now(UTC)
        self.end_time: datetime | None = None
        self.result: str | None = None
        self.failure_message = ""
        self._ended = False

    @property
    def ended(self) -> bool:
        return self._ended

    def end(self, error: BaseException | str | None = None) -> None:
        """Close the action; only the first call counts."""
        if self._ended:
            return
        message = str(error) if isinstance(error, BaseException) else error
        self.result = MetricActionResult.FAILURE if message else MetricActionResult.SUCCESS
        self.failure_message = message or ""
        self.end_time = datetime.now(UTC)
        self._ended = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "end_time": _isoformat(self.end_time),
            "failure_message": self.failure_message,
            "name": self.name,
            "result": self.result,
            "start_time": _isoformat(self.start_time),
            "type": self.type,
            "id": self.id,
        }


class MetricClient:
    """Collect command actions and upload them to the metrics endpoint.

    Uploading never raises: network problems are logged and reported through
    the ``success`` flag of ``send_data`` only.
    """

    def __init__(
        self,
        settings: Settings,
        app_config: AppConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings
        self._app_config = app_config
        self._http_client = http_client or httpx.Client(
            timeout=UPLOAD_TIMEOUT_SECONDS,
            headers={"Content-Type": "text/plain"},
        )
        self.server_url = settings.metrics_endpoint
        self.post_retries = POST_RETRIES
        self.enabled = self._is_enabled()
        self.version = __version__
        self.machine_id = self._get_machine_id()
        self.time_started = datetime.now(UTC)
        self.time_uploaded: datetime | None = None
        self.actions: list[MetricAction] = []

    def start_action(self, name: str, type: str) -> MetricAction:
        action = MetricAction(name, type)
        self.actions.append(action)
        return action

    def send_data(self, error: BaseException | str | None = None) -> dict[str, bool]:
        if not self.enabled:
            self.actions = []
            return {"success": True}
        for action in self.actions:
            action.end(error)
        try:
            self._upload()
        except httpx.HTTPError as exc:
            logger.debug("metrics.upload.failed url={} error={!r}", self.server_url, exc)
            return {"success": False}
        self.actions = []
        return {"success": True}

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "machine_id": self.machine_id,
            "time_started": _isoformat(self.time_started),
            "new_user": False,
            "time_uploaded": _isoformat(self.time_uploaded),
            "client_id": CLIENT_ID,
            "actions": [action.to_dict() for action in self.actions],
        }

    def close(self) -> None:
        self._http_client.close()

    def _upload(self) -> None:
        self.time_uploaded = datetime.now(UTC)
        payload = json.dumps({"payload": self.to_dict()})
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception_type(httpx.HTTPError),
            stop=tenacity.stop_after_attempt(self.post_retries),
            reraise=True,
        )
        retryer(self._post, payload)

    def _post(self, payload: str) -> None:
        response = self._http_client.post(self.server_url, content=payload)
        response.raise_for_status()

    def _is_enabled(self) -> bool:
        if self._settings.is_env_profile:
            return True
        if self._settings.share_usage is False:
            return False
        if self._app_config is None or not AppConfig.exists(self._app_config.path):
            return False
        return self._app_config.get_share_usage()

    def _get_machine_id(self) -> str | None:
        if not self.enabled:
            return None
        if self._settings.is_env_profile:
            return ENV_MACHINE_ID
        assert self._app_config is not None
        machine_id = self._app_config.get_machine_id()
        if not machine_id:
            machine_id = str(uuid.uuid4())
            self._app_config.set_machine_id(machine_id)
            try:
                self._app_config.write()
            except OSError as exc:
                logger.warning("metrics.machine_id.save.error path={} error={}", self._app_config.path, exc)
        return machine_id
