from __future__ import annotations

from collections import deque
from collections.abc import Iterator


class MarkQueue:
    """FIFO of marks sent to Twilio whose playback is not yet acknowledged."""

    def __init__(self) -> None:
        self._pending: deque[str] = deque()

    def push(self, name: str) -> None:
        self._pending.append(name)

    def pop(self) -> str | None:
        """Acknowledge the oldest pending mark; returns None when nothing is pending."""

        if not self._pending:
            return None
        return self._pending.popleft()

    def clear(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending)
