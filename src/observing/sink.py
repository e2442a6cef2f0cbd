"""Conflated single-slot sink merging producer threads into one consumer.

Producers call offer() from any thread; the single consumer awaits get()
on the event loop. The slot holds at most one value: a write replaces
whatever the consumer has not read yet, so bursts collapse to the most
recent value.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SinkClosed(Exception):
    """Raised by get() once the sink is closed and drained."""


class ConflatedSink(Generic[T]):
    """Depth-1, last-value-wins buffer with an awaitable read.

    Args:
        loop: Event loop of the consumer. Defaults to the running loop, so
            a sink built outside a running loop must be given one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._lock = threading.Lock()
        self._event = asyncio.Event()
        self._value: T | None = None
        self._has_value = False
        self._closed = False
        self.dropped = 0

    def offer(self, value: T) -> bool:
        """Store value, replacing any unread one. Safe from any thread.

        Args:
            value: The value to publish.

        Returns:
            False if the sink is closed and the value was discarded.
        """
        with self._lock:
            if self._closed:
                return False
            if self._has_value:
                self.dropped += 1
            self._value = value
            self._has_value = True
        self._wake()
        return True

    async def get(self) -> T:
        """Wait for and take the current value.

        Raises:
            SinkClosed: If the sink is closed and holds no value.
        """
        while True:
            self._event.clear()
            with self._lock:
                if self._has_value:
                    value = self._value
                    self._value = None
                    self._has_value = False
                    return value  # type: ignore[return-value]
                if self._closed:
                    raise SinkClosed()
            await self._event.wait()

    def close(self) -> None:
        """Stop accepting values and wake a waiting consumer."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._wake()

    @property
    def is_closed(self) -> bool:
        """Check if close() has been called."""
        return self._closed

    def _wake(self) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._event.set()
            return
        try:
            self._loop.call_soon_threadsafe(self._event.set)
        except RuntimeError:
            # Loop already closed: the consumer is gone.
            logger.debug("Dropping wake-up, consumer loop is closed.")
