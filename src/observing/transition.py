"""Synthetic transition rule applied to consecutive connectivity values."""

from __future__ import annotations

from src.core.connectivity import Connectivity, DetailedState, NetworkState


def propagate_any_connected_state(
    last: Connectivity, current: Connectivity
) -> list[Connectivity]:
    """Return the values to emit for ``current`` given the last emitted one.

    When the transport changes while the previous network was connected
    and the new value looks disconnected (but not merely idle), the
    platform never reported the old network as lost. In that case the
    stale ``last`` is re-emitted after ``current`` so consumers watching
    transitions still see the old connection go away.

    Args:
        last: Most recently emitted value.
        current: Value just read from the sink.

    Returns:
        ``[current, last]`` for a masked disconnect, otherwise ``[current]``.
    """
    type_changed = last.type != current.type
    was_connected = last.state is NetworkState.CONNECTED
    is_disconnected = current.state is NetworkState.DISCONNECTED
    is_not_idle = current.detailed_state is not DetailedState.IDLE

    if type_changed and was_connected and is_disconnected and is_not_idle:
        return [current, last]
    return [current]
