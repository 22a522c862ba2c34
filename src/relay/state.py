from __future__ import annotations

from dataclasses import dataclass, field

from relay.marks import MarkQueue
from relay.timestamps import TimestampTracker


@dataclass
class RelayState:
    """Mutable per-call state shared by the Twilio and realtime handlers.

    Owned by one RelaySession; every mutation happens under that session's lock.
    """

    stream_sid: str | None = None
    last_assistant_item_id: str | None = None
    clock: TimestampTracker = field(default_factory=TimestampTracker)
    marks: MarkQueue = field(default_factory=MarkQueue)
    # The AI finished generating the current utterance; it ends once playback drains.
    generation_done: bool = False

    @property
    def latest_media_timestamp(self) -> int:
        return self.clock.latest_media_timestamp

    @property
    def response_start_timestamp(self) -> int | None:
        return self.clock.response_start_timestamp

    def start_stream(self, stream_sid: str) -> None:
        self.stream_sid = stream_sid
        self.clock.reset()
        self.generation_done = False

    def note_audio_relayed(self, item_id: str | None) -> bool:
        """Record one relayed chunk; returns True when it starts a new utterance."""

        self.generation_done = False
        started = self.clock.mark_response_started()
        if item_id:
            self.last_assistant_item_id = item_id
        return started

    def note_generation_done(self) -> bool:
        """The AI finished the current utterance; returns True if it ended right away."""

        self.generation_done = True
        return self._end_utterance_if_played()

    def acknowledge_mark(self) -> bool:
        """Pop one playback acknowledgment; returns True if that ended the utterance."""

        if self.marks.pop() is None:
            return False
        return self._end_utterance_if_played()

    def end_utterance(self) -> None:
        self.last_assistant_item_id = None
        self.clock.clear_response()
        self.generation_done = False

    def _end_utterance_if_played(self) -> bool:
        if not self.generation_done or self.marks or not self.clock.response_in_flight:
            return False
        self.end_utterance()
        return True
