"""Endpoint selection: which broker group the producer talks to right now."""

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from stompline.core.config import EndpointGroup
from stompline.core.errors import TransportError

if TYPE_CHECKING:
    from stompline.connections.base import Connection, ConnectionFactory

logger = logging.getLogger("stompline.endpoints")


class EndpointSelector:
    """Holds the endpoint groups, the current index and the active connection.

    The selector never reconnects on its own: ``advance()`` only drops the
    active connection and moves to the next group, wrapping around after the
    last one. The next ``current_connection()`` call builds and connects a
    fresh connection.

    Args:
        groups: Endpoint groups in failover order.
        factory: Builds an unconnected ``Connection`` for a group.
        connect_headers: Producer-wide connect headers; a group's own
            connect headers take precedence.
    """

    def __init__(
        self,
        groups: Sequence[EndpointGroup],
        factory: "ConnectionFactory",
        connect_headers: Mapping[str, str] | None = None,
    ) -> None:
        if not groups:
            raise ValueError("EndpointSelector needs at least one endpoint group")
        self.groups = list(groups)
        self.factory = factory
        self.connect_headers = dict(connect_headers or {})
        self._index = 0
        self._connection: "Connection | None" = None

    @property
    def index(self) -> int:
        return self._index

    @property
    def current_group(self) -> EndpointGroup:
        return self.groups[self._index]

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def headers_for(self, group: EndpointGroup) -> dict[str, str]:
        return {**self.connect_headers, **group.connect_headers}

    def current_connection(self) -> "Connection":
        """Return the active connection, connecting to the current group if needed.

        Raises:
            TransportError: If the connect handshake fails. The slot stays empty.
        """
        if self._connection is not None:
            return self._connection

        group = self.current_group
        connection = self.factory(group)
        try:
            connection.connect(self.headers_for(group))
        except TransportError:
            self._close(connection)
            raise
        self._connection = connection
        logger.info(
            f"Connected to endpoint group {group.name}",
            extra={"group": self._index},
        )
        return connection

    def advance(self) -> None:
        """Drop the active connection and select the next group."""
        self._discard()
        previous = self._index
        self._index = (self._index + 1) % len(self.groups)
        logger.warning(
            f"Switching from endpoint group {previous} to {self._index}",
            extra={"group": self._index},
        )

    def disconnect(self) -> None:
        """Drop the active connection without changing the selected group."""
        self._discard()

    def _discard(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            self._close(connection)

    def _close(self, connection: "Connection") -> None:
        try:
            connection.disconnect()
        except TransportError as e:
            logger.debug(
                f"Error while disconnecting from a failed group: {e}",
                extra={"group": self._index},
            )
