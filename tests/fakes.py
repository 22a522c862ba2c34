"""In-memory transports used to drive RelaySession without sockets."""

from __future__ import annotations

import asyncio
import json
import threading
from typing import Any


class FakeTelephony:
    """In-memory stand-in for the Twilio websocket."""

    def __init__(self, frames: list[str] | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self._frames: asyncio.Queue[str | None] | None = None
        self._initial = list(frames or [])

    def _queue(self) -> asyncio.Queue[str | None]:
        if self._frames is None:
            self._frames = asyncio.Queue()
            for frame in self._initial:
                self._frames.put_nowait(frame)
        return self._frames

    def feed(self, frame: str | None) -> None:
        self._queue().put_nowait(frame)

    @property
    def is_open(self) -> bool:
        return not self.closed

    async def receive(self) -> str | None:
        if self.closed:
            return None
        return await self._queue().get()

    async def send(self, event: dict[str, Any]) -> None:
        assert not self.closed
        self.sent.append(event)

    async def close(self) -> None:
        self.closed = True

    def events(self, kind: str) -> list[dict[str, Any]]:
        return [e for e in self.sent if e["event"] == kind]


class FakeRealtime:
    """In-memory stand-in for the realtime API websocket."""

    def __init__(self, messages: list[str] | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        # Set from the event loop thread; lets sync TestClient tests wait for teardown.
        self.closed_event = threading.Event()
        self._messages: asyncio.Queue[str | None] | None = None
        self._initial = list(messages or [])

    def _queue(self) -> asyncio.Queue[str | None]:
        if self._messages is None:
            self._messages = asyncio.Queue()
            for message in self._initial:
                self._messages.put_nowait(message)
        return self._messages

    def feed(self, message: str | None) -> None:
        self._queue().put_nowait(message)

    @property
    def is_open(self) -> bool:
        return not self.closed

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        while not self.closed:
            message = await self._queue().get()
            if message is None:
                return
            yield message

    async def send(self, event: dict[str, Any]) -> None:
        assert not self.closed
        self.sent.append(event)

    async def close(self) -> None:
        self.closed = True
        self.closed_event.set()

    def types(self) -> list[str]:
        return [e["type"] for e in self.sent]


def twilio(event: str, **body: Any) -> str:
    return json.dumps({"event": event, **body})


def realtime(event_type: str, **body: Any) -> str:
    return json.dumps({"type": event_type, **body})
