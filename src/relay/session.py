"""Per-call relay between a Twilio media stream and a realtime speech AI session.

One ``RelaySession`` exists per accepted Twilio websocket. It runs two pumps:

- twilio -> openai: caller audio is appended to the realtime input buffer.
- openai -> twilio: assistant audio deltas are played back, each followed by a
  mark so playback progress can be acknowledged.

Both pumps mutate the same ``RelayState``; every handler runs under a
per-session lock so an interruption and an audio delta can never interleave.
When either side goes away the other one is closed. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from relay.errors import MalformedEventError
from relay.interruption import InterruptionController
from relay.realtime_events import (
    GENERATION_DONE_TYPES,
    SPEECH_STARTED,
    AudioDelta,
    RealtimeEvent,
    SessionConfig,
    as_audio_delta,
    assistant_message_item,
    conversation_item_truncate,
    decode_realtime_event,
    input_audio_append,
    response_create,
    session_update,
)
from relay.state import RelayState
from relay.telephony_events import (
    RESPONSE_PART_MARK,
    MarkEvent,
    MediaEvent,
    StartEvent,
    TelephonyEvent,
    clear_event,
    decode_telephony_event,
    mark_event,
    media_event,
)
from relay.transports import RealtimeChannel, TelephonyChannel

LOGGER = logging.getLogger(__name__)

RealtimeConnector = Callable[[], Awaitable[RealtimeChannel]]


class RelaySession:
    def __init__(
        self,
        telephony: TelephonyChannel,
        connect_realtime: RealtimeConnector,
        config: SessionConfig,
        *,
        init_delay_ms: int = 100,
        idle_timeout_seconds: float | None = None,
        show_timing_math: bool = False,
        log_event_types: Iterable[str] = (),
    ) -> None:
        self.telephony = telephony
        self.realtime: RealtimeChannel | None = None
        self.state = RelayState()
        self._connect_realtime = connect_realtime
        self._config = config
        self._init_delay = init_delay_ms / 1000
        self._idle_timeout = idle_timeout_seconds
        self._show_timing_math = show_timing_math
        self._log_event_types = frozenset(log_event_types)
        self._interruptions = InterruptionController(show_timing_math=show_timing_math)
        self._lock = asyncio.Lock()
        self._closed = False

    async def run(self) -> None:
        """Relay until either transport closes, then close the other one."""

        tasks = {
            asyncio.create_task(self._pump_telephony(), name="twilio->openai"),
            asyncio.create_task(self._pump_realtime(), name="openai->twilio"),
        }
        try:
            done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                exc = task.exception()
                if exc is not None:
                    LOGGER.error("Relay pump %s failed", task.get_name(), exc_info=exc)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.realtime is not None and self.realtime.is_open:
            await self.realtime.close()
            LOGGER.info("Disconnected from the OpenAI Realtime API")
        if self.telephony.is_open:
            await self.telephony.close()
        LOGGER.info("Relay session closed (stream=%s)", self.state.stream_sid)

    # -- pumps -----------------------------------------------------------------

    async def _pump_telephony(self) -> None:
        while True:
            try:
                raw = await asyncio.wait_for(self.telephony.receive(), timeout=self._idle_timeout)
            except asyncio.TimeoutError:
                LOGGER.warning("No telephony traffic for %ss; ending call", self._idle_timeout)
                return
            if raw is None:
                LOGGER.info("Client disconnected.")
                return
            await self.on_telephony_message(raw)

    async def _pump_realtime(self) -> None:
        self.realtime = await self._connect_realtime()
        LOGGER.info("Connected to the OpenAI Realtime API")
        await self._initialize_session()
        async for raw in self.realtime:
            await self.on_realtime_message(raw)
        LOGGER.info("Realtime socket closed by peer")

    async def _initialize_session(self) -> None:
        # Let the realtime handshake settle before configuring the session.
        await asyncio.sleep(self._init_delay)
        async with self._lock:
            LOGGER.debug("Sending session update: %s", self._config.to_session_payload())
            await self._send_realtime(session_update(self._config))
            if self._config.opening_line:
                await self._send_realtime(assistant_message_item(self._config.opening_line))
                await self._send_realtime(response_create())

    # -- inbound messages --------------------------------------------------------

    async def on_telephony_message(self, raw: str | bytes) -> None:
        try:
            event = decode_telephony_event(raw)
        except MalformedEventError as exc:
            LOGGER.warning("Dropping telephony message: %s (raw=%r)", exc.detail, raw)
            return
        async with self._lock:
            await self._handle_telephony_event(event)

    async def on_realtime_message(self, raw: str | bytes) -> None:
        try:
            event = decode_realtime_event(raw)
            delta = as_audio_delta(event)
        except MalformedEventError as exc:
            LOGGER.warning("Dropping realtime message: %s (raw=%r)", exc.detail, raw)
            return
        async with self._lock:
            await self._handle_realtime_event(event, delta)

    async def _handle_telephony_event(self, event: TelephonyEvent) -> None:
        if isinstance(event, MediaEvent):
            self.state.clock.observe_media(event.media.timestamp)
            if self._show_timing_math:
                LOGGER.info("Received media message with timestamp: %sms", event.media.timestamp)
            await self._send_realtime(input_audio_append(event.media.payload))
        elif isinstance(event, StartEvent):
            self.state.start_stream(event.stream_sid)
            LOGGER.info("Incoming stream has started %s", event.stream_sid)
        elif isinstance(event, MarkEvent):
            if self.state.acknowledge_mark():
                LOGGER.debug("Assistant utterance fully played")
        else:
            LOGGER.info("Received non-media event: %s", event.event)

    async def _handle_realtime_event(self, event: RealtimeEvent, delta: AudioDelta | None) -> None:
        if event.type in self._log_event_types:
            LOGGER.info("Received event: %s %s", event.type, event.model_dump(exclude={"type"}))

        if delta is not None:
            await self._relay_audio_delta(delta)
        elif event.type == SPEECH_STARTED:
            await self._handle_speech_started()
        elif event.type in GENERATION_DONE_TYPES:
            if self.state.note_generation_done():
                LOGGER.debug("Assistant utterance fully played")

    async def _relay_audio_delta(self, delta: AudioDelta) -> None:
        stream_sid = self.state.stream_sid
        if stream_sid is None:
            LOGGER.debug("Dropping audio delta received before the stream started")
            return
        if not await self._send_telephony(media_event(stream_sid, delta.delta)):
            return

        # First delta of a new response starts the elapsed-time counter.
        if self.state.note_audio_relayed(delta.item_id) and self._show_timing_math:
            LOGGER.info("Setting start timestamp for new response: %sms", self.state.response_start_timestamp)

        if await self._send_telephony(mark_event(stream_sid, RESPONSE_PART_MARK)):
            self.state.marks.push(RESPONSE_PART_MARK)

    async def _handle_speech_started(self) -> None:
        truncation = self._interruptions.interrupt(self.state)
        if truncation is None:
            return
        if truncation.item_id:
            await self._send_realtime(conversation_item_truncate(truncation.item_id, truncation.audio_end_ms))
        await self._send_telephony(clear_event(truncation.stream_sid))

    # -- outbound ----------------------------------------------------------------

    async def _send_realtime(self, event: dict) -> bool:
        if self.realtime is None or not self.realtime.is_open:
            LOGGER.debug("Realtime socket not open; skipping %s", event.get("type"))
            return False
        await self.realtime.send(event)
        return True

    async def _send_telephony(self, event: dict) -> bool:
        if event.get("streamSid") is None or not self.telephony.is_open:
            LOGGER.debug("Telephony socket not ready; skipping %s", event.get("event"))
            return False
        await self.telephony.send(event)
        return True
