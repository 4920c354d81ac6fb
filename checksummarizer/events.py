"""Decoding of raw webhook deliveries into typed events."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union
from urllib.parse import parse_qs

from pydantic import ValidationError as PydanticValidationError

from checksummarizer.errors import DecodeError
from checksummarizer.schemas import CheckRunEvent

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class PingEvent:
    """Sent by GitHub once, when the webhook is created."""

    zen: str = ""
    hook_id: Optional[int] = None


@dataclass(frozen=True)
class UnknownEvent:
    """Any event type this app does not act upon."""

    event_type: str


WebhookEvent = Union[CheckRunEvent, PingEvent, UnknownEvent]


def _load_json(body: bytes, content_type: Optional[str]) -> Any:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    try:
        if media_type == FORM_CONTENT_TYPE:
            form = parse_qs(body.decode("utf-8"))
            values = form.get("payload")
            if not values:
                raise DecodeError("form-encoded delivery has no payload field")
            return json.loads(values[0])
        return json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"delivery body is not valid JSON: {exc}") from exc


def decode_event(
    event_type: Optional[str],
    body: bytes,
    content_type: Optional[str] = None,
) -> WebhookEvent:
    """
    Turn a validated delivery into a typed event.

    Parameters
    ----------
    event_type:
        Value of the ``X-GitHub-Event`` header.
    body:
        Raw request body, already signature-checked.
    content_type:
        ``Content-Type`` of the delivery; GitHub sends either JSON or a
        form with a single ``payload`` field.

    Raises
    ------
    DecodeError
        When the event type is missing, the body is not JSON, or a
        ``check_run`` payload lacks required fields.
    """
    if not event_type:
        raise DecodeError("missing X-GitHub-Event header")

    payload = _load_json(body, content_type)
    if not isinstance(payload, dict):
        raise DecodeError("delivery body is not a JSON object")

    match event_type:
        case "check_run":
            try:
                return CheckRunEvent.model_validate(payload)
            except PydanticValidationError as exc:
                raise DecodeError(f"invalid check_run payload: {exc}") from exc
        case "ping":
            return PingEvent(zen=str(payload.get("zen") or ""), hook_id=payload.get("hook_id"))
        case _:
            return UnknownEvent(event_type=event_type)
