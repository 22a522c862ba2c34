from __future__ import annotations

import pydantic
import pytest

from config.settings import Settings
from integrations.openai_realtime import build_session_config
from relay.errors import ConfigurationError


def test_require_relay_fails_fast_without_api_key():
    settings = Settings(_env_file=None, openai_api_key=None)
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        settings.require_relay()


def test_realtime_url_includes_model():
    settings = Settings(_env_file=None, openai_realtime_model="gpt-4o-realtime-preview")
    assert settings.realtime_ws_url() == "wss://api.openai.com/v1/realtime?model=gpt-4o-realtime-preview"


def test_unknown_modality_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None, modalities=["audio", "video"])


def test_session_config_follows_settings():
    settings = Settings(
        _env_file=None,
        voice="shimmer",
        system_message="Only talk about the weather.",
        temperature=0.6,
        ai_speaks_first=True,
        opening_line="Hi, it's the weather line.",
    )

    config = build_session_config(settings)

    assert config.voice == "shimmer"
    assert config.instructions == "Only talk about the weather."
    assert config.temperature == 0.6
    assert config.input_audio_format == config.output_audio_format == "g711_ulaw"
    assert config.opening_line == "Hi, it's the weather line."


def test_opening_line_can_be_disabled():
    config = build_session_config(Settings(_env_file=None, ai_speaks_first=False))
    assert config.opening_line is None


def test_lists_are_read_from_json_env(monkeypatch):
    monkeypatch.setenv("LOG_EVENT_TYPES", '["error", "response.done"]')
    assert Settings(_env_file=None).log_event_types == ["error", "response.done"]
