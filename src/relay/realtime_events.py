"""JSON codec for the OpenAI Realtime websocket protocol.

Only the handful of client events the relay emits are modelled here. Server
events are decoded into a light envelope; the relay acts on audio deltas,
``input_audio_buffer.speech_started`` and the generation-done events, and treats
everything else as opaque.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from relay.errors import MalformedEventError
from relay.telephony_events import parse_json_object

SPEECH_STARTED = "input_audio_buffer.speech_started"
# Beta and GA names of the same server event.
AUDIO_DELTA_TYPES = frozenset({"response.audio.delta", "response.output_audio.delta"})
# Generation of the current assistant utterance has finished (playback may still be running).
GENERATION_DONE_TYPES = frozenset({"response.audio.done", "response.output_audio.done", "response.done"})

Modality = Literal["text", "audio"]


class SessionConfig(BaseModel):
    """Immutable configuration sent once per realtime connection."""

    model_config = ConfigDict(frozen=True)

    turn_detection: Literal["server_vad", "none"] = "server_vad"
    input_audio_format: str = "g711_ulaw"
    output_audio_format: str = "g711_ulaw"
    voice: str = "alloy"
    instructions: str = ""
    modalities: tuple[Modality, ...] = ("text", "audio")
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    opening_line: str | None = Field(
        default=None,
        description="Assistant message enqueued right after session.update so the AI speaks first.",
    )

    def to_session_payload(self) -> dict[str, Any]:
        return {
            "turn_detection": {"type": "server_vad"} if self.turn_detection == "server_vad" else None,
            "input_audio_format": self.input_audio_format,
            "output_audio_format": self.output_audio_format,
            "voice": self.voice,
            "instructions": self.instructions,
            "modalities": list(self.modalities),
            "temperature": self.temperature,
        }


class RealtimeEvent(BaseModel):
    """Envelope of a server event; unknown fields are kept for logging."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(min_length=1)


class AudioDelta(BaseModel):
    type: str
    delta: str
    item_id: str | None = None


def decode_realtime_event(raw: str | bytes) -> RealtimeEvent:
    message = parse_json_object(raw)
    try:
        return RealtimeEvent.model_validate(message)
    except ValidationError as exc:
        raise MalformedEventError("Realtime event without a 'type'.") from exc


def as_audio_delta(event: RealtimeEvent) -> AudioDelta | None:
    """Return the audio delta carried by ``event``, or None for any other event.

    A delta event with an empty or missing ``delta`` carries nothing to play and
    is treated like any other event.
    """

    if event.type not in AUDIO_DELTA_TYPES:
        return None
    try:
        delta = AudioDelta.model_validate(event.model_dump())
    except ValidationError as exc:
        raise MalformedEventError(f"Invalid '{event.type}' event.") from exc
    return delta if delta.delta else None


def session_update(config: SessionConfig) -> dict[str, Any]:
    return {"type": "session.update", "session": config.to_session_payload()}


def assistant_message_item(text: str) -> dict[str, Any]:
    return {
        "type": "conversation.item.create",
        "item": {
            "type": "message",
            "role": "assistant",
            "content": [{"type": "input_text", "text": text}],
        },
    }


def response_create() -> dict[str, Any]:
    return {"type": "response.create"}


def input_audio_append(payload: str) -> dict[str, Any]:
    return {"type": "input_audio_buffer.append", "audio": payload}


def conversation_item_truncate(item_id: str, audio_end_ms: int, *, content_index: int = 0) -> dict[str, Any]:
    return {
        "type": "conversation.item.truncate",
        "item_id": item_id,
        "content_index": content_index,
        "audio_end_ms": audio_end_ms,
    }
