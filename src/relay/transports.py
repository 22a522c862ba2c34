"""Thin adapters giving both websockets the same small surface.

``TelephonyTransport`` wraps the FastAPI/Starlette websocket Twilio connects to;
``RealtimeTransport`` wraps the ``websockets`` client connection to the speech AI.
The relay session only depends on the two protocols below, so tests can drive
it with in-memory fakes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
from websockets.asyncio.client import ClientConnection
from websockets.protocol import State

LOGGER = logging.getLogger(__name__)


class TelephonyChannel(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def receive(self) -> str | None:
        """Next raw frame, or None once the peer has disconnected."""

    async def send(self, event: dict[str, Any]) -> None: ...

    async def close(self) -> None: ...


class RealtimeChannel(Protocol):
    @property
    def is_open(self) -> bool: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...

    async def send(self, event: dict[str, Any]) -> None: ...

    async def close(self) -> None: ...


class TelephonyTransport:
    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    async def receive(self) -> str | None:
        try:
            return await self._websocket.receive_text()
        except WebSocketDisconnect:
            return None

    async def send(self, event: dict[str, Any]) -> None:
        await self._websocket.send_text(json.dumps(event))

    async def close(self) -> None:
        if not self.is_open:
            return
        try:
            await self._websocket.close()
        except RuntimeError as exc:
            # Peer closed between the state check and our close frame.
            LOGGER.debug("Telephony websocket already closing: %s", exc)


class RealtimeTransport:
    def __init__(self, connection: ClientConnection) -> None:
        self._connection = connection

    @property
    def is_open(self) -> bool:
        return self._connection.state is State.OPEN

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        return self._connection.__aiter__()

    async def send(self, event: dict[str, Any]) -> None:
        await self._connection.send(json.dumps(event))

    async def close(self) -> None:
        await self._connection.close()
