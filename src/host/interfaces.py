"""Abstract host interfaces for the connectivity observer.

All observing code that queries network state or subscribes to platform
notifications must go through these interfaces. Platform-specific
implementations stay behind them; src/host/stubs.py provides in-memory
versions for development and testing.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from src.core.connectivity import Connectivity, NetworkType

logger = logging.getLogger(__name__)

# Receives a diagnostic message and the exception that caused it.
ErrorReporter = Callable[[str, BaseException], None]


def log_error(message: str, exception: BaseException) -> None:
    """Default error reporter: log the message with the exception attached."""
    logger.error(message, exc_info=(type(exception), exception, exception.__traceback__))


class NetworkCapability(Enum):
    """Capabilities a requested network must have."""

    INTERNET = "internet"
    NOT_RESTRICTED = "not_restricted"


@dataclass(frozen=True)
class NetworkRequest:
    """Filter describing which networks a callback is interested in.

    Attributes:
        capabilities: Capabilities every matching network must have.
        transports: Transports a matching network may use (any of).
    """

    capabilities: tuple[NetworkCapability, ...] = (
        NetworkCapability.INTERNET,
        NetworkCapability.NOT_RESTRICTED,
    )
    transports: tuple[NetworkType, ...] = (NetworkType.WIFI, NetworkType.CELLULAR)


@dataclass(frozen=True)
class NetworkCallback:
    """Pair of handlers invoked by the platform on network changes.

    Both handlers may be called from any thread.

    Attributes:
        on_available: Called when a matching network becomes available.
        on_lost: Called when a matching network is lost.
    """

    on_available: Callable[[], None]
    on_lost: Callable[[], None]


class ConnectivityService(ABC):
    """Abstract platform connectivity service."""

    @abstractmethod
    def snapshot(self) -> Connectivity:
        """Return the current connectivity.

        Synchronous and side-effect free.
        """
        ...

    @abstractmethod
    def register_network_callback(
        self, request: NetworkRequest, callback: NetworkCallback
    ) -> Any:
        """Subscribe to availability changes of networks matching a request.

        Args:
            request: Which networks to watch.
            callback: Handlers fired on available/lost.

        Returns:
            An opaque handle for unregister_network_callback().
        """
        ...

    @abstractmethod
    def unregister_network_callback(self, handle: Any) -> None:
        """Cancel a subscription.

        Raises:
            Exception: If the handle is stale or was never registered.
        """
        ...


class PowerService(ABC):
    """Abstract platform power management service."""

    @abstractmethod
    def is_device_idle(self) -> bool:
        """Check if the device is in low-power idle mode."""
        ...

    @abstractmethod
    def is_ignoring_battery_optimizations(self, app_id: str) -> bool:
        """Check if the given application is exempt from idle restrictions."""
        ...

    @abstractmethod
    def register_idle_listener(self, on_change: Callable[[], None]) -> Any:
        """Subscribe to idle mode changes.

        Args:
            on_change: Called (from any thread) whenever idle mode toggles.

        Returns:
            An opaque handle for unregister_idle_listener().
        """
        ...

    @abstractmethod
    def unregister_idle_listener(self, handle: Any) -> None:
        """Cancel an idle mode subscription.

        Raises:
            Exception: If the handle is stale or was never registered.
        """
        ...


@dataclass(frozen=True)
class HostContext:
    """Everything the observer needs from the host.

    Attributes:
        app_id: Identity of this application, used for the battery
            optimisation exemption query.
        connectivity: Connectivity service.
        power: Power management service.
    """

    app_id: str
    connectivity: ConnectivityService
    power: PowerService
