"""In-memory stub implementations for host interfaces.

These stubs enable development and testing without a real platform:
- StubConnectivityService: holds a settable snapshot and fires network callbacks
- StubPowerService: holds settable idle/exemption flags and fires idle listeners

Callbacks are fired synchronously on the calling thread, so tests can
simulate platform notification threads by firing from an executor.
"""

from __future__ import annotations

import itertools
import threading
from typing import Callable

from src.core.connectivity import Connectivity
from src.host.interfaces import (
    ConnectivityService,
    HostContext,
    NetworkCallback,
    NetworkRequest,
    PowerService,
)


class StubConnectivityService(ConnectivityService):
    """Connectivity service whose state is set by the caller.

    Args:
        initial: Snapshot returned until set_connectivity() is called.
    """

    def __init__(self, initial: Connectivity | None = None) -> None:
        self._current = initial if initial is not None else Connectivity()
        self._lock = threading.Lock()
        self._handles = itertools.count(1)
        self._callbacks: dict[int, tuple[NetworkRequest, NetworkCallback]] = {}
        self.snapshot_calls = 0

    def snapshot(self) -> Connectivity:
        """Return the current connectivity."""
        with self._lock:
            self.snapshot_calls += 1
            return self._current

    def set_connectivity(self, connectivity: Connectivity) -> None:
        """Change what snapshot() reports, without notifying anyone."""
        with self._lock:
            self._current = connectivity

    def register_network_callback(
        self, request: NetworkRequest, callback: NetworkCallback
    ) -> int:
        """Register a callback and return its handle."""
        with self._lock:
            handle = next(self._handles)
            self._callbacks[handle] = (request, callback)
        return handle

    def unregister_network_callback(self, handle: int) -> None:
        """Remove a callback.

        Raises:
            KeyError: If the handle is not registered.
        """
        with self._lock:
            if handle not in self._callbacks:
                raise KeyError(f"Network callback {handle!r} is not registered.")
            del self._callbacks[handle]

    def fire_available(self, connectivity: Connectivity | None = None) -> None:
        """Optionally change the snapshot, then call every on_available handler."""
        if connectivity is not None:
            self.set_connectivity(connectivity)
        for callback in self._live_callbacks():
            callback.on_available()

    def fire_lost(self, connectivity: Connectivity | None = None) -> None:
        """Optionally change the snapshot, then call every on_lost handler."""
        if connectivity is not None:
            self.set_connectivity(connectivity)
        for callback in self._live_callbacks():
            callback.on_lost()

    @property
    def registered_requests(self) -> list[NetworkRequest]:
        """Requests of all live registrations (for testing)."""
        with self._lock:
            return [request for request, _ in self._callbacks.values()]

    @property
    def callback_count(self) -> int:
        """Number of live registrations."""
        with self._lock:
            return len(self._callbacks)

    def _live_callbacks(self) -> list[NetworkCallback]:
        with self._lock:
            return [callback for _, callback in self._callbacks.values()]


class StubPowerService(PowerService):
    """Power service whose idle state is set by the caller.

    Args:
        idle: Initial device idle flag.
        exempt_apps: Application ids that ignore battery optimisations.
    """

    def __init__(self, idle: bool = False, exempt_apps: set[str] | None = None) -> None:
        self._idle = idle
        self._exempt_apps = set(exempt_apps or ())
        self._lock = threading.Lock()
        self._handles = itertools.count(1)
        self._listeners: dict[int, Callable[[], None]] = {}

    def is_device_idle(self) -> bool:
        """Check if the device is in idle mode."""
        return self._idle

    def is_ignoring_battery_optimizations(self, app_id: str) -> bool:
        """Check if app_id is in the exemption set."""
        return app_id in self._exempt_apps

    def set_exempt(self, app_id: str, exempt: bool = True) -> None:
        """Add or remove app_id from the exemption set."""
        if exempt:
            self._exempt_apps.add(app_id)
        else:
            self._exempt_apps.discard(app_id)

    def set_idle(self, idle: bool) -> None:
        """Change the idle flag and notify listeners, like the platform does."""
        self._idle = idle
        self.fire_idle_changed()

    def fire_idle_changed(self) -> None:
        """Call every registered idle listener."""
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            listener()

    def register_idle_listener(self, on_change: Callable[[], None]) -> int:
        """Register a listener and return its handle."""
        with self._lock:
            handle = next(self._handles)
            self._listeners[handle] = on_change
        return handle

    def unregister_idle_listener(self, handle: int) -> None:
        """Remove a listener.

        Raises:
            KeyError: If the handle is not registered.
        """
        with self._lock:
            if handle not in self._listeners:
                raise KeyError(f"Idle listener {handle!r} is not registered.")
            del self._listeners[handle]

    @property
    def listener_count(self) -> int:
        """Number of live registrations."""
        with self._lock:
            return len(self._listeners)


def make_stub_context(
    app_id: str = "netwatch",
    initial: Connectivity | None = None,
    idle: bool = False,
) -> HostContext:
    """Build a HostContext backed by fresh stub services."""
    return HostContext(
        app_id=app_id,
        connectivity=StubConnectivityService(initial),
        power=StubPowerService(idle=idle),
    )
