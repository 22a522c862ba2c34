"""Caller-side playback clock.

All timing is anchored to the media timestamps Twilio reports on inbound
audio, never to wall-clock or AI-side time.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TimestampTracker:
    latest_media_timestamp: int = 0  # ms, from Twilio media events
    response_start_timestamp: int | None = None  # ms, caller clock at first delta of current utterance

    def reset(self) -> None:
        """Start a new stream clock."""

        self.latest_media_timestamp = 0
        self.response_start_timestamp = None

    def observe_media(self, timestamp: int) -> None:
        self.latest_media_timestamp = timestamp

    @property
    def response_in_flight(self) -> bool:
        return self.response_start_timestamp is not None

    def mark_response_started(self) -> bool:
        """Anchor the current utterance to the caller clock; no-op if already anchored.

        Returns True when this call set the anchor.
        """

        if self.response_start_timestamp is not None:
            return False
        self.response_start_timestamp = self.latest_media_timestamp
        return True

    def elapsed_ms(self) -> int:
        """Milliseconds of the in-flight utterance the caller has heard."""

        if self.response_start_timestamp is None:
            raise RuntimeError("No response in flight")
        return self.latest_media_timestamp - self.response_start_timestamp

    def clear_response(self) -> None:
        self.response_start_timestamp = None
