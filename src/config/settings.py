"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.errors import ConfigurationError

DEFAULT_SYSTEM_MESSAGE = (
    "You are a friendly and concise phone assistant. "
    "Keep answers short, speak naturally and let the caller interrupt you at any time."
)
DEFAULT_OPENING_LINE = "Hello! Thanks for calling. How can I help you today?"

DEFAULT_LOG_EVENT_TYPES = [
    "error",
    "response.content.done",
    "rate_limits.updated",
    "response.done",
    "input_audio_buffer.committed",
    "input_audio_buffer.speech_stopped",
    "input_audio_buffer.speech_started",
    "session.created",
]


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5050)

    # Realtime speech AI
    openai_api_key: str | None = Field(default=None)
    openai_realtime_url: str = Field(default="wss://api.openai.com/v1/realtime")
    openai_realtime_model: str = Field(default="gpt-4o-realtime-preview-2024-10-01")
    voice: str = Field(default="alloy")
    system_message: str = Field(default=DEFAULT_SYSTEM_MESSAGE)
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    turn_detection: Literal["server_vad", "none"] = Field(default="server_vad")
    audio_format: str = Field(
        default="g711_ulaw",
        description="Codec used on both sides; Twilio Media Streams carry 8 kHz mu-law.",
    )
    modalities: list[str] = Field(default_factory=lambda: ["text", "audio"])

    # Conversation opening
    ai_speaks_first: bool = Field(default=True)
    opening_line: str = Field(default=DEFAULT_OPENING_LINE)

    # Session timing
    session_init_delay_ms: int = Field(
        default=100,
        ge=0,
        description="Delay between the realtime socket opening and the session.update.",
    )
    session_idle_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="End the call if the telephony side sends nothing for this long.",
    )

    # Diagnostics
    show_timing_math: bool = Field(default=False)
    log_event_types: list[str] = Field(default_factory=lambda: list(DEFAULT_LOG_EVENT_TYPES))

    # Twilio (Voice)
    twilio_account_sid: str | None = Field(default=None)
    twilio_auth_token: str | None = Field(default=None)
    twilio_from_number: str | None = Field(default=None, description="E.164, e.g. +1305...")
    public_base_url: str | None = Field(
        default=None,
        description="Public base URL for Twilio webhooks (e.g. https://<ngrok>.ngrok-free.app).",
    )
    outbound_call_api_key: str | None = Field(
        default=None,
        description="Optional API key required to call the outbound-call endpoint.",
    )

    @field_validator("modalities")
    @classmethod
    def check_modalities(cls, value: list[str]) -> list[str]:
        unknown = set(value) - {"text", "audio"}
        if unknown or not value:
            raise ValueError(f"modalities must be a non-empty subset of text/audio, got {value!r}")
        return value

    def require_relay(self) -> None:
        """Fail fast when the relay cannot open realtime sessions."""

        if not self.openai_api_key:
            raise ConfigurationError("Missing OPENAI_API_KEY. Please set it in the environment or .env file.")

    def realtime_ws_url(self) -> str:
        return f"{self.openai_realtime_url.rstrip('/')}?model={self.openai_realtime_model}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
