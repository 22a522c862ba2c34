"""JSON codec for Twilio Media Streams websocket messages."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from relay.errors import MalformedEventError

RESPONSE_PART_MARK = "responsePart"


class StreamStart(BaseModel):
    stream_sid: str = Field(alias="streamSid", min_length=1)
    call_sid: str | None = Field(default=None, alias="callSid")


class StartEvent(BaseModel):
    event: Literal["start"]
    start: StreamStart

    @property
    def stream_sid(self) -> str:
        return self.start.stream_sid


class MediaChunk(BaseModel):
    # Twilio sends the timestamp as a decimal string; lax validation coerces it.
    timestamp: int = Field(ge=0)
    payload: str
    track: str | None = None


class MediaEvent(BaseModel):
    event: Literal["media"]
    media: MediaChunk


class MarkLabel(BaseModel):
    name: str | None = None


class MarkEvent(BaseModel):
    event: Literal["mark"]
    mark: MarkLabel = Field(default_factory=MarkLabel)


class OtherEvent(BaseModel):
    """Any event kind the relay does not act on (connected, stop, dtmf, ...)."""

    event: str


TelephonyEvent = StartEvent | MediaEvent | MarkEvent | OtherEvent

_EVENT_MODELS: dict[str, type[BaseModel]] = {
    "start": StartEvent,
    "media": MediaEvent,
    "mark": MarkEvent,
}


def parse_json_object(raw: str | bytes) -> dict[str, Any]:
    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedEventError(f"Invalid JSON: {exc}") from exc
    if not isinstance(message, dict):
        raise MalformedEventError("Expected a JSON object.")
    return message


def decode_telephony_event(raw: str | bytes) -> TelephonyEvent:
    """Decode one websocket frame from Twilio.

    Raises:
        MalformedEventError: the frame is not JSON, has no ``event`` kind, or a
            known kind is missing required fields.
    """

    message = parse_json_object(raw)
    kind = message.get("event")
    if not isinstance(kind, str) or not kind:
        raise MalformedEventError("Missing 'event' discriminator.")

    model = _EVENT_MODELS.get(kind, OtherEvent)
    try:
        return model.model_validate(message)
    except ValidationError as exc:
        raise MalformedEventError(f"Invalid '{kind}' event: {exc.error_count()} validation error(s)") from exc


def media_event(stream_sid: str, payload: str) -> dict[str, Any]:
    return {"event": "media", "streamSid": stream_sid, "media": {"payload": payload}}


def mark_event(stream_sid: str, name: str = RESPONSE_PART_MARK) -> dict[str, Any]:
    return {"event": "mark", "streamSid": stream_sid, "mark": {"name": name}}


def clear_event(stream_sid: str) -> dict[str, Any]:
    return {"event": "clear", "streamSid": stream_sid}
