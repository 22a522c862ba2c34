"""OpenAI Realtime API connection bootstrap."""

from __future__ import annotations

import logging

import websockets

from config.settings import Settings, get_settings
from relay.realtime_events import SessionConfig
from relay.transports import RealtimeTransport

LOGGER = logging.getLogger(__name__)


def build_session_config(settings: Settings) -> SessionConfig:
    return SessionConfig(
        turn_detection=settings.turn_detection,
        input_audio_format=settings.audio_format,
        output_audio_format=settings.audio_format,
        voice=settings.voice,
        instructions=settings.system_message,
        modalities=tuple(settings.modalities),
        temperature=settings.temperature,
        opening_line=settings.opening_line if settings.ai_speaks_first else None,
    )


async def connect_realtime(settings: Settings | None = None) -> RealtimeTransport:
    """Open the realtime websocket with the proper headers.

    Raises:
        ConfigurationError: no API key is configured.
        websockets.InvalidHandshake / OSError: the connection could not be opened.
    """

    settings = settings or get_settings()
    settings.require_relay()

    url = settings.realtime_ws_url()
    LOGGER.info("Connecting to realtime API: %s", url)
    connection = await websockets.connect(
        url,
        additional_headers={
            "Authorization": f"Bearer {settings.openai_api_key}",
            "OpenAI-Beta": "realtime=v1",
        },
    )
    return RealtimeTransport(connection)
