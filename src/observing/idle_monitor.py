"""Idle mode monitor.

Listens for the host's power-saving idle mode toggles and publishes a
Connectivity for each one: the empty value while the device is idle,
a fresh snapshot once it wakes up.
"""

from __future__ import annotations

import logging
from typing import Any

from src.core.connectivity import Connectivity
from src.host.interfaces import ErrorReporter, HostContext, log_error
from src.observing.sink import ConflatedSink

logger = logging.getLogger(__name__)

ERROR_MSG_RECEIVER = "could not unregister idle receiver"


class IdleModeMonitor:
    """Publishes connectivity changes caused by device idle mode.

    Args:
        context: Host context providing the power and connectivity services.
        sink: Sink receiving published values.
        on_error: Reporter for teardown failures.
    """

    def __init__(
        self,
        context: HostContext,
        sink: ConflatedSink[Connectivity],
        on_error: ErrorReporter = log_error,
    ) -> None:
        self._context = context
        self._sink = sink
        self._on_error = on_error
        self._handle: Any = None
        self._registered = False

    def start(self) -> None:
        """Register the idle listener. Registration errors propagate."""
        if self._registered:
            return
        self._handle = self._context.power.register_idle_listener(self._on_idle_changed)
        self._registered = True
        logger.debug("Idle receiver registered (handle=%r).", self._handle)

    def stop(self) -> None:
        """Unregister the idle listener; failures are reported, never raised."""
        if not self._registered:
            return
        self._registered = False
        try:
            self._context.power.unregister_idle_listener(self._handle)
            logger.debug("Idle receiver unregistered.")
        except Exception as e:
            self._on_error(ERROR_MSG_RECEIVER, e)
        finally:
            self._handle = None

    @property
    def is_registered(self) -> bool:
        """Check if the listener is currently registered."""
        return self._registered

    def is_idle_mode(self) -> bool:
        """True when the device is idle and this app is not exempt."""
        power = self._context.power
        return power.is_device_idle() and not power.is_ignoring_battery_optimizations(
            self._context.app_id
        )

    def _on_idle_changed(self) -> None:
        if self.is_idle_mode():
            logger.debug("Device entered idle mode.")
            self._sink.offer(Connectivity())
        else:
            self._sink.offer(Connectivity.create(self._context))
