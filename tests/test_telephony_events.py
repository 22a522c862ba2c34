from __future__ import annotations

import pytest

from relay.errors import MalformedEventError
from relay.telephony_events import (
    MarkEvent,
    MediaEvent,
    OtherEvent,
    StartEvent,
    clear_event,
    decode_telephony_event,
    mark_event,
    media_event,
)


def test_decode_start_extracts_stream_sid():
    event = decode_telephony_event(
        '{"event": "start", "sequenceNumber": "1", "start": {"streamSid": "MZ1", "callSid": "CA1", "tracks": ["inbound"]}}'
    )
    assert isinstance(event, StartEvent)
    assert event.stream_sid == "MZ1"
    assert event.start.call_sid == "CA1"


def test_decode_media_coerces_string_timestamp():
    event = decode_telephony_event(
        '{"event": "media", "streamSid": "MZ1", "media": {"track": "inbound", "chunk": "2", "timestamp": "140", "payload": "f39/fw=="}}'
    )
    assert isinstance(event, MediaEvent)
    assert event.media.timestamp == 140
    assert event.media.payload == "f39/fw=="


def test_decode_mark_without_name_is_accepted():
    event = decode_telephony_event('{"event": "mark", "streamSid": "MZ1", "mark": {}}')
    assert isinstance(event, MarkEvent)
    assert event.mark.name is None


def test_unknown_kind_decodes_as_other_event():
    event = decode_telephony_event('{"event": "stop", "stop": {"callSid": "CA1"}}')
    assert isinstance(event, OtherEvent)
    assert event.event == "stop"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        '{"streamSid": "MZ1"}',
        '{"event": "start", "start": {}}',
        '{"event": "media", "media": {"payload": "AAA"}}',
        '{"event": "media", "media": {"timestamp": "soon", "payload": "AAA"}}',
    ],
)
def test_malformed_frames_raise(raw):
    with pytest.raises(MalformedEventError):
        decode_telephony_event(raw)


def test_outbound_builders_match_twilio_wire_format():
    assert media_event("S1", "BBB") == {"event": "media", "streamSid": "S1", "media": {"payload": "BBB"}}
    assert mark_event("S1") == {"event": "mark", "streamSid": "S1", "mark": {"name": "responsePart"}}
    assert clear_event("S1") == {"event": "clear", "streamSid": "S1"}
