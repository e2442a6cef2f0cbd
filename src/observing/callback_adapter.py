"""Network callback adapter.

Registers a NetworkCallback with the host connectivity service and
publishes a fresh snapshot whenever a matching network becomes available
or is lost. The event kind is not encoded in the published value; the
snapshot is the ground truth.
"""

from __future__ import annotations

import logging
from typing import Any

from src.core.connectivity import Connectivity
from src.host.interfaces import (
    ErrorReporter,
    HostContext,
    NetworkCallback,
    NetworkRequest,
    log_error,
)
from src.observing.sink import ConflatedSink

logger = logging.getLogger(__name__)

ERROR_MSG_NETWORK_CALLBACK = "could not unregister network callback"


class NetworkCallbackAdapter:
    """Turns platform available/lost notifications into snapshots.

    Args:
        context: Host context providing the connectivity service.
        sink: Sink receiving published values.
        request: Which networks to watch. Defaults to internet-capable,
            unrestricted Wi-Fi and cellular networks.
        on_error: Reporter for teardown failures.
    """

    def __init__(
        self,
        context: HostContext,
        sink: ConflatedSink[Connectivity],
        request: NetworkRequest | None = None,
        on_error: ErrorReporter = log_error,
    ) -> None:
        self._context = context
        self._sink = sink
        self._request = request if request is not None else NetworkRequest()
        self._on_error = on_error
        self._callback = NetworkCallback(
            on_available=self._on_available,
            on_lost=self._on_lost,
        )
        self._handle: Any = None
        self._registered = False

    def start(self) -> None:
        """Register the network callback. Registration errors propagate."""
        if self._registered:
            return
        self._handle = self._context.connectivity.register_network_callback(
            self._request, self._callback
        )
        self._registered = True
        logger.debug(
            "Network callback registered (transports=%s).",
            ",".join(t.value for t in self._request.transports),
        )

    def stop(self) -> None:
        """Unregister the network callback; failures are reported, never raised."""
        if not self._registered:
            return
        self._registered = False
        try:
            self._context.connectivity.unregister_network_callback(self._handle)
            logger.debug("Network callback unregistered.")
        except Exception as e:
            self._on_error(ERROR_MSG_NETWORK_CALLBACK, e)
        finally:
            self._handle = None

    @property
    def is_registered(self) -> bool:
        """Check if the callback is currently registered."""
        return self._registered

    @property
    def request(self) -> NetworkRequest:
        """The request this adapter registers with."""
        return self._request

    def _on_available(self) -> None:
        self._sink.offer(Connectivity.create(self._context))

    def _on_lost(self) -> None:
        self._sink.offer(Connectivity.create(self._context))
