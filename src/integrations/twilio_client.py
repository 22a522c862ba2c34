from __future__ import annotations

import logging
from dataclasses import dataclass

from config.settings import get_settings
from relay.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TwilioConfig:
    account_sid: str
    auth_token: str
    from_number: str | None
    public_base_url: str

    @property
    def incoming_call_url(self) -> str:
        return f"{self.public_base_url}/incoming-call"


def get_twilio_config() -> TwilioConfig:
    settings = get_settings()
    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        raise ConfigurationError("Twilio credentials are not configured")
    if not settings.public_base_url:
        raise ConfigurationError("PUBLIC_BASE_URL is required for Twilio callbacks")

    return TwilioConfig(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_from_number,
        public_base_url=settings.public_base_url.rstrip("/"),
    )


def build_twilio_client(cfg: TwilioConfig | None = None):
    from twilio.rest import Client

    cfg = cfg or get_twilio_config()
    return Client(cfg.account_sid, cfg.auth_token)


def place_outbound_call(client, cfg: TwilioConfig, to_number: str, from_number: str | None = None) -> str:
    """Ask Twilio to dial ``to_number`` and connect it to this relay; returns the call SID."""

    sender = from_number or cfg.from_number
    if not sender:
        raise ConfigurationError("No sender number given and TWILIO_FROM_NUMBER is not configured")

    call = client.calls.create(
        to=to_number,
        from_=sender,
        url=cfg.incoming_call_url,
        method="POST",
    )
    LOGGER.info("Call initiated with SID: %s", call.sid)
    return str(call.sid)
