"""Demo entry point.

Observes a stub host while a background thread plays a scripted Wi-Fi to
cellular handover followed by an idle window, logging every value the
stream emits.
"""

from __future__ import annotations

import asyncio
import logging
import time

from src.core.config import Settings, load_settings, request_from_settings
from src.core.connectivity import Connectivity, NetworkState, NetworkType
from src.host.interfaces import HostContext
from src.host.stubs import StubConnectivityService, StubPowerService
from src.observing.stream import observe

logger = logging.getLogger(__name__)


def _play_handover(
    connectivity: StubConnectivityService, power: StubPowerService, step_delay: float
) -> None:
    """Drive the stub services through a handover (runs on a worker thread)."""
    time.sleep(step_delay)
    connectivity.fire_lost(Connectivity.from_state(NetworkState.DISCONNECTED))
    time.sleep(step_delay)
    connectivity.fire_available(
        Connectivity.from_state(NetworkState.CONNECTED, NetworkType.CELLULAR)
    )
    time.sleep(step_delay)
    power.set_idle(True)
    time.sleep(step_delay)
    power.set_idle(False)


async def run(settings: Settings, step_delay: float = 0.2) -> list[Connectivity]:
    """Observe a scripted stub host and return everything that was emitted.

    Args:
        settings: Application settings.
        step_delay: Seconds between scripted platform events.

    Returns:
        The emitted connectivity values, in order.
    """
    connectivity = StubConnectivityService(
        Connectivity.from_state(NetworkState.CONNECTED, NetworkType.WIFI)
    )
    power = StubPowerService()
    context = HostContext(app_id=settings.app_id, connectivity=connectivity, power=power)
    observed: list[Connectivity] = []

    async def consume() -> None:
        async for value in observe(context, request=request_from_settings(settings)):
            logger.info("Connectivity: %s", value)
            observed.append(value)

    consumer = asyncio.create_task(consume())
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(None, _play_handover, connectivity, power, step_delay)
        await asyncio.sleep(step_delay)
    finally:
        consumer.cancel()
        try:
            await consumer
        except asyncio.CancelledError:
            pass
    return observed


def main() -> None:
    """Load settings, configure logging and run the demo."""
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
