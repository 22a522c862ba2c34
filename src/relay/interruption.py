"""Barge-in handling.

When the caller starts talking while assistant audio is still queued on the
Twilio side, the in-flight assistant item is truncated at the point the caller
actually heard and the buffered playback is flushed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from relay.state import RelayState

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Truncation:
    """What the session must send after an interruption."""

    stream_sid: str | None
    audio_end_ms: int
    item_id: str | None = None


class InterruptionController:
    def __init__(self, *, show_timing_math: bool = False) -> None:
        self._show_timing_math = show_timing_math

    @staticmethod
    def has_outstanding_playback(state: RelayState) -> bool:
        return bool(state.marks) and state.clock.response_in_flight

    def interrupt(self, state: RelayState) -> Truncation | None:
        """Reset the in-flight utterance and describe the truncate/clear to send.

        Returns None, leaving ``state`` untouched, when nothing is being played.
        """

        if not self.has_outstanding_playback(state):
            return None

        elapsed = state.clock.elapsed_ms()
        if self._show_timing_math:
            LOGGER.info(
                "Calculating elapsed time for truncation: %s - %s = %sms",
                state.clock.latest_media_timestamp,
                state.clock.response_start_timestamp,
                elapsed,
            )

        truncation = Truncation(
            stream_sid=state.stream_sid,
            audio_end_ms=elapsed,
            item_id=state.last_assistant_item_id,
        )

        state.marks.clear()
        state.end_utterance()
        return truncation
