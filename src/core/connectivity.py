"""Connectivity value type.

A Connectivity is one observed network state: the transport in use, a
coarse connection state and a finer detailed state. Values compare equal
on those three fields only; the descriptive fields are informational.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from src.host.interfaces import HostContext


class NetworkType(Enum):
    """Transport classification of a network."""

    NONE = "none"
    WIFI = "wifi"
    CELLULAR = "cellular"
    ETHERNET = "ethernet"
    VPN = "vpn"
    OTHER = "other"


class NetworkState(Enum):
    """Coarse connection state."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    SUSPENDED = "suspended"
    DISCONNECTING = "disconnecting"
    DISCONNECTED = "disconnected"
    UNKNOWN = "unknown"


class DetailedState(Enum):
    """Fine-grained connection state.

    IDLE is distinct from DISCONNECTED: it marks a network that is down
    because the device is in a low-power window, not because it was lost.
    """

    IDLE = "idle"
    SCANNING = "scanning"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    OBTAINING_IPADDR = "obtaining_ipaddr"
    CONNECTED = "connected"
    SUSPENDED = "suspended"
    DISCONNECTING = "disconnecting"
    DISCONNECTED = "disconnected"
    FAILED = "failed"
    BLOCKED = "blocked"
    VERIFYING_POOR_LINK = "verifying_poor_link"
    CAPTIVE_PORTAL_CHECK = "captive_portal_check"

    def to_state(self) -> NetworkState:
        """Map this detailed state to its coarse state."""
        return _DETAILED_TO_STATE[self]


_DETAILED_TO_STATE = {
    DetailedState.IDLE: NetworkState.DISCONNECTED,
    DetailedState.SCANNING: NetworkState.CONNECTING,
    DetailedState.CONNECTING: NetworkState.CONNECTING,
    DetailedState.AUTHENTICATING: NetworkState.CONNECTING,
    DetailedState.OBTAINING_IPADDR: NetworkState.CONNECTING,
    DetailedState.VERIFYING_POOR_LINK: NetworkState.CONNECTING,
    DetailedState.CAPTIVE_PORTAL_CHECK: NetworkState.CONNECTING,
    DetailedState.CONNECTED: NetworkState.CONNECTED,
    DetailedState.SUSPENDED: NetworkState.SUSPENDED,
    DetailedState.DISCONNECTING: NetworkState.DISCONNECTING,
    DetailedState.DISCONNECTED: NetworkState.DISCONNECTED,
    DetailedState.FAILED: NetworkState.DISCONNECTED,
    DetailedState.BLOCKED: NetworkState.DISCONNECTED,
}

# Detailed state picked when only the coarse state is known.
_STATE_TO_DETAILED = {
    NetworkState.CONNECTING: DetailedState.CONNECTING,
    NetworkState.CONNECTED: DetailedState.CONNECTED,
    NetworkState.SUSPENDED: DetailedState.SUSPENDED,
    NetworkState.DISCONNECTING: DetailedState.DISCONNECTING,
    NetworkState.DISCONNECTED: DetailedState.DISCONNECTED,
    NetworkState.UNKNOWN: DetailedState.IDLE,
}


@dataclass(frozen=True)
class Connectivity:
    """Immutable snapshot of network connectivity.

    The default instance means "no connectivity" and seeds every
    observation before a real value arrives.

    Attributes:
        type: Transport in use (NONE when there is no network).
        state: Coarse connection state.
        detailed_state: Fine-grained connection state.
        available: Whether the platform considers the network usable.
        failover: Whether this network replaced a failed one.
        roaming: Whether the device is roaming on this network.
        type_name: Human-readable transport name.
        sub_type_name: Human-readable transport subtype (e.g. "LTE").
        reason: Platform-supplied reason for the last state change.
        extra_info: Platform-supplied extra information (e.g. SSID).
    """

    type: NetworkType = NetworkType.NONE
    state: NetworkState = NetworkState.DISCONNECTED
    detailed_state: DetailedState = DetailedState.IDLE
    available: bool = field(default=False, compare=False)
    failover: bool = field(default=False, compare=False)
    roaming: bool = field(default=False, compare=False)
    type_name: str = field(default="NONE", compare=False)
    sub_type_name: str = field(default="NONE", compare=False)
    reason: str = field(default="", compare=False)
    extra_info: str = field(default="", compare=False)

    @classmethod
    def create(cls, context: HostContext) -> Connectivity:
        """Take a fresh snapshot of the current connectivity.

        Args:
            context: Host context whose connectivity service is queried.

        Returns:
            The connectivity reported by the platform right now.
        """
        return context.connectivity.snapshot()

    @classmethod
    def from_state(
        cls,
        state: NetworkState,
        type: NetworkType = NetworkType.NONE,
        **extra: object,
    ) -> Connectivity:
        """Build a Connectivity from a coarse state only.

        The detailed state is derived from the coarse one. Descriptive
        fields in ``extra`` override the derived availability and name.
        """
        fields = {
            "available": state is NetworkState.CONNECTED,
            "type_name": type.name,
            **extra,
        }
        return cls(
            type=type,
            state=state,
            detailed_state=_STATE_TO_DETAILED[state],
            **fields,
        )

    @property
    def is_connected(self) -> bool:
        """True when the coarse state is CONNECTED."""
        return self.state is NetworkState.CONNECTED

    def __str__(self) -> str:
        return f"{self.type.name}/{self.state.name}/{self.detailed_state.name}"


def has_state(*states: NetworkState) -> Callable[[Connectivity], bool]:
    """Predicate matching values whose coarse state is one of ``states``."""
    wanted = frozenset(states)
    return lambda connectivity: connectivity.state in wanted


def has_type(*types: NetworkType) -> Callable[[Connectivity], bool]:
    """Predicate matching values whose transport is one of ``types``."""
    wanted = frozenset(types)
    return lambda connectivity: connectivity.type in wanted
