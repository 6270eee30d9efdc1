"""Delivery path: one logical send, retried across endpoint groups."""

import logging
import threading
from collections.abc import Callable

from stompline.core.endpoints import EndpointSelector
from stompline.core.errors import CancelledError, RetriesExhaustedError, TransportError
from stompline.core.frame import Frame

logger = logging.getLogger("stompline.delivery")


class DeliveryPath:
    """Sends frames through an :class:`EndpointSelector`.

    Transport failures (``TransportError`` from connect or send) rotate to the
    next endpoint group and retry. Any other exception is a logical error and
    propagates immediately.

    Args:
        selector: The endpoint selector owning the active connection.
        max_attempts: Attempts per operation before raising
            ``RetriesExhaustedError``. None retries until some group accepts.
        cancel_event: When set, the next attempt raises ``CancelledError``.
    """

    def __init__(
        self,
        selector: EndpointSelector,
        max_attempts: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.selector = selector
        self.max_attempts = max_attempts
        self.cancel_event = cancel_event
        self.attempts = 0
        self.transport_failures = 0

    def deliver(self, frame: Frame) -> None:
        """Send ``frame`` through the first endpoint group that accepts it."""
        self._with_failover(lambda connection: connection.send(frame), frame.destination)

    def ensure_connected(self) -> None:
        """Connect to the first endpoint group that accepts a handshake."""
        self._with_failover(lambda connection: None, None)

    def _with_failover(self, action: Callable, destination: str | None) -> None:
        target = destination or "broker"
        attempt = 0
        while True:
            if self.cancel_event is not None and self.cancel_event.is_set():
                raise CancelledError(f"delivery to {target} cancelled")

            attempt += 1
            self.attempts += 1
            try:
                action(self.selector.current_connection())
                return
            except TransportError as e:
                self.transport_failures += 1
                logger.warning(
                    f"Transport failure talking to {target}: {e}",
                    extra={
                        "destination": destination,
                        "group": self.selector.index,
                        "attempt": attempt,
                    },
                )
                self.selector.advance()
                if self.max_attempts is not None and attempt >= self.max_attempts:
                    logger.error(
                        f"Giving up on {target} after {attempt} attempts",
                        extra={"destination": destination, "attempt": attempt},
                    )
                    raise RetriesExhaustedError(
                        f"delivery to {target} failed after {attempt} attempts",
                        attempts=attempt,
                        last_error=e,
                    ) from e
