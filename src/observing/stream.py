"""Connectivity stream: the public observation pipeline.

Wires the network callback adapter and the idle mode monitor into one
conflated sink, replays the synthetic transition rule on every value the
consumer reads, and drops consecutive duplicates. Both registrations are
torn down on every exit path.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import AsyncIterator

from src.core.connectivity import Connectivity
from src.host.interfaces import ErrorReporter, HostContext, NetworkRequest, log_error
from src.observing.callback_adapter import NetworkCallbackAdapter
from src.observing.idle_monitor import IdleModeMonitor
from src.observing.sink import ConflatedSink, SinkClosed
from src.observing.transition import propagate_any_connected_state

logger = logging.getLogger(__name__)


class ConnectivityStream:
    """One observation session over a host context.

    Use as an async context manager and iterate it; or call start() and
    stop() explicitly. An instance is single-use: once started it cannot
    be started again, even after stop().

    Args:
        context: Host context to observe.
        request: Network callback request (defaults to Wi-Fi + cellular).
        on_error: Reporter for teardown failures.
    """

    def __init__(
        self,
        context: HostContext,
        request: NetworkRequest | None = None,
        on_error: ErrorReporter = log_error,
    ) -> None:
        self._context = context
        self._request = request
        self._on_error = on_error

        self._started = False
        self._stopped = False
        self._sink: ConflatedSink[Connectivity] | None = None
        self._adapter: NetworkCallbackAdapter | None = None
        self._idle_monitor: IdleModeMonitor | None = None

        self._pending: deque[Connectivity] = deque()
        self._last_emitted = Connectivity()
        self._emitted_any = False

    async def start(self) -> None:
        """Register both monitors and queue the initial snapshot.

        Raises:
            RuntimeError: If this instance was already started.
            Exception: Whatever the host raises while registering.
        """
        if self._started:
            raise RuntimeError(
                "ConnectivityStream is single-use; create a new instance to observe again."
            )
        self._started = True

        self._sink = ConflatedSink()
        self._adapter = NetworkCallbackAdapter(
            self._context, self._sink, self._request, on_error=self._on_error
        )
        self._idle_monitor = IdleModeMonitor(
            self._context, self._sink, on_error=self._on_error
        )

        try:
            self._adapter.start()
            self._idle_monitor.start()
        except Exception as e:
            logger.debug("Connectivity registration failed: %s", e)
            self.stop()
            raise

        initial = Connectivity.create(self._context)
        self._pending.append(initial)
        logger.info(
            "Observing connectivity for %s (initial=%s).", self._context.app_id, initial
        )

    def stop(self) -> None:
        """Unregister both monitors. Runs at most once; never raises teardown errors."""
        if not self._started or self._stopped:
            return
        self._stopped = True
        try:
            if self._adapter is not None:
                self._adapter.stop()
        finally:
            if self._idle_monitor is not None:
                self._idle_monitor.stop()
            if self._sink is not None:
                self._sink.close()
        logger.info("Stopped observing connectivity for %s.", self._context.app_id)

    @property
    def is_active(self) -> bool:
        """True between start() and stop()."""
        return self._started and not self._stopped

    @property
    def last_emitted(self) -> Connectivity:
        """Most recent value handed to the consumer."""
        return self._last_emitted

    async def __aenter__(self) -> ConnectivityStream:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def __aiter__(self) -> ConnectivityStream:
        return self

    async def __anext__(self) -> Connectivity:
        if not self._started:
            raise RuntimeError("ConnectivityStream must be started before iterating.")
        while True:
            if self._stopped:
                raise StopAsyncIteration
            if self._pending:
                value = self._pending.popleft()
                if self._accept(value):
                    return value
                continue
            try:
                current = await self._sink.get()
            except SinkClosed:
                raise StopAsyncIteration from None
            self._pending.extend(propagate_any_connected_state(self._last_emitted, current))

    def _accept(self, value: Connectivity) -> bool:
        """Record value as emitted; False when it repeats the previous one."""
        duplicate = self._emitted_any and value == self._last_emitted
        self._last_emitted = value
        self._emitted_any = True
        if duplicate:
            logger.debug("Suppressed duplicate connectivity %s.", value)
            return False
        logger.debug("Connectivity changed: %s.", value)
        return True


async def observe(
    context: HostContext,
    *,
    request: NetworkRequest | None = None,
    on_error: ErrorReporter = log_error,
) -> AsyncIterator[Connectivity]:
    """Observe connectivity changes of a host.

    Nothing is registered until the first value is requested. Closing
    the iterator (aclose(), or cancelling the consuming task) tears down
    both registrations.

    Args:
        context: Host context to observe.
        request: Network callback request (defaults to Wi-Fi + cellular).
        on_error: Reporter for teardown failures.

    Yields:
        The current connectivity first, then every distinct change.
    """
    async with ConnectivityStream(context, request=request, on_error=on_error) as stream:
        async for connectivity in stream:
            yield connectivity
