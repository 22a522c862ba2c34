"""Shared FastAPI dependencies.

Separated so tests can override the realtime connector and Twilio client
without opening network connections.
"""

from __future__ import annotations

from functools import lru_cache

from config.settings import get_settings
from integrations.openai_realtime import build_session_config, connect_realtime
from integrations.twilio_client import TwilioConfig, build_twilio_client, get_twilio_config
from relay.realtime_events import SessionConfig
from relay.session import RealtimeConnector


@lru_cache(maxsize=1)
def get_session_config() -> SessionConfig:
    return build_session_config(get_settings())


def get_realtime_connector() -> RealtimeConnector:
    return connect_realtime


def get_twilio_cfg() -> TwilioConfig:
    return get_twilio_config()


def get_twilio_client():
    return build_twilio_client()
