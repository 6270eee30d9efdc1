"""Connection protocol used by the delivery path.

Wire framing and socket I/O live behind this protocol. The producer only
needs to open a session, hand over frames, and close it again.
"""

from collections.abc import Callable, Mapping
from typing import Protocol

from stompline.core.config import EndpointGroup
from stompline.core.frame import Frame


class Connection(Protocol):
    """Protocol for broker connections.

    Implementations must raise ``stompline.core.errors.TransportError`` for
    connection-level failures (unreachable broker, dropped socket, timeout).
    Any other exception is treated as a logical error and is never retried.
    """

    def connect(self, headers: Mapping[str, str]) -> None:
        """Perform the connect handshake.

        Args:
            headers: Connect headers for this endpoint group.
        """
        ...

    def send(self, frame: Frame) -> None:
        """Hand one frame to the broker.

        Args:
            frame: The frame to send.
        """
        ...

    def disconnect(self) -> None:
        """Close the session. Safe to call on a half-open connection."""
        ...


ConnectionFactory = Callable[[EndpointGroup], Connection]
