from __future__ import annotations

import pytest

from integrations import outbound_call
from integrations.twilio_client import TwilioConfig, place_outbound_call
from relay.errors import ConfigurationError


class _Call:
    sid = "CA999"


class _Calls:
    def __init__(self) -> None:
        self.kwargs: dict | None = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        return _Call()


class _Client:
    def __init__(self) -> None:
        self.calls = _Calls()


def _cfg(from_number: str | None = "+13058943349") -> TwilioConfig:
    return TwilioConfig(
        account_sid="AC1",
        auth_token="token",
        from_number=from_number,
        public_base_url="https://relay.example.com",
    )


def test_place_outbound_call_points_twilio_at_incoming_call():
    client = _Client()

    sid = place_outbound_call(client, _cfg(), "+19177174489")

    assert sid == "CA999"
    assert client.calls.kwargs == {
        "to": "+19177174489",
        "from_": "+13058943349",
        "url": "https://relay.example.com/incoming-call",
        "method": "POST",
    }


def test_explicit_sender_overrides_default():
    client = _Client()
    place_outbound_call(client, _cfg(), "+19177174489", from_number="+15550001111")
    assert client.calls.kwargs["from_"] == "+15550001111"


def test_missing_sender_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        place_outbound_call(_Client(), _cfg(from_number=None), "+19177174489")


def test_cli_places_call_and_prints_sid(monkeypatch, capsys):
    client = _Client()
    monkeypatch.setattr(outbound_call, "get_twilio_config", _cfg)
    monkeypatch.setattr(outbound_call, "build_twilio_client", lambda cfg: client)

    assert outbound_call.main(["--to", "+19177174489"]) == 0
    assert capsys.readouterr().out.strip() == "CA999"


def test_cli_reports_missing_configuration(monkeypatch):
    for name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"):
        monkeypatch.delenv(name, raising=False)

    assert outbound_call.main(["--to", "+19177174489"]) == 2
