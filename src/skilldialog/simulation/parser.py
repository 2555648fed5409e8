"""Accessors over a simulation result body.

Every function here is total: a missing key, a list where a dict was expected
or a body that is not a mapping at all all read as "absent".
"""

from __future__ import annotations

import html
import re
from collections.abc import Sequence
from typing import Any

STATUS_IN_PROGRESS = "IN_PROGRESS"

_SSML_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def view(data: Any, path: Sequence[str | int], default: Any = None) -> Any:
    """Walk ``path`` through nested dicts and lists, returning ``default`` on any miss."""
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return default
            current = current[key]
            continue
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return default if current is None else current


def get_simulation_id(body: Any) -> str | None:
    simulation_id = view(body, ["id"])
    return simulation_id if isinstance(simulation_id, str) and simulation_id else None


def get_status(body: Any) -> str | None:
    status = view(body, ["status"])
    return status if isinstance(status, str) else None


def is_in_progress(body: Any) -> bool:
    return get_status(body) == STATUS_IN_PROGRESS


def _invocation_response(body: Any) -> dict[str, Any]:
    info = view(body, ["result", "skillExecutionInfo"], {})
    response = view(info, ["invocations", 0, "invocationResponse"])
    if response is None:
        response = view(info, ["invocationResponse"], {})
    return response if isinstance(response, dict) else {}


def should_end_session(body: Any) -> bool:
    """Return True iff the skill closed the dialog session."""
    invocation = _invocation_response(body)
    flag = view(invocation, ["body", "response", "shouldEndSession"])
    if flag is None:
        flag = view(invocation, ["body", "shouldEndSession"])
    return flag is True


def strip_ssml(ssml: str) -> str:
    text = html.unescape(_SSML_TAG.sub(" ", ssml))
    return _WHITESPACE.sub(" ", text).strip()


def get_caption(body: Any) -> list[str]:
    """Spoken responses in the order the service returned them."""
    responses = view(body, ["result", "alexaExecutionInfo", "alexaResponses"])
    if isinstance(responses, list):
        captions = [view(item, ["content", "caption"]) for item in responses]
        return [caption for caption in captions if isinstance(caption, str)]

    speech = view(_invocation_response(body), ["body", "response", "outputSpeech"], {})
    ssml = view(speech, ["ssml"])
    if isinstance(ssml, str):
        text = strip_ssml(ssml)
        return [text] if text else []
    text = view(speech, ["text"])
    if isinstance(text, str) and text.strip():
        return [text.strip()]
    return []


def get_error_message(body: Any) -> str | None:
    """Service-reported error message of a result body, if any."""
    for path in (["result", "error", "message"], ["error", "message"]):
        message = view(body, path)
        if isinstance(message, str) and message:
            return message
    return None
