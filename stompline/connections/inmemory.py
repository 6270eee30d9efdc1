"""In-memory broker and connection for development and testing."""

from collections import defaultdict
from collections.abc import Callable, Mapping

from stompline.connections.base import ConnectionFactory
from stompline.core.config import EndpointGroup
from stompline.core.errors import TransportError
from stompline.core.frame import Frame


class InMemoryBroker:
    """A broker that keeps frames in per-destination FIFO lists.

    This broker is suitable for development and testing. It provides no
    durability guarantees; frames are lost when the process terminates.

    Set ``up`` to False to make it unreachable: new connects fail and open
    sessions fail on their next send. ``reject`` may be set to a callable
    that raises to simulate a logical (non-transport) send error.
    """

    def __init__(self, name: str = "broker") -> None:
        self.name = name
        self.up = True
        self.reject: Callable[[Frame], None] | None = None
        self.queues: dict[str, list[Frame]] = defaultdict(list)
        self.history: list[Frame] = []
        self.connects: list[dict[str, str]] = []

    def accept(self, frame: Frame) -> None:
        if self.reject is not None:
            self.reject(frame)
        self.queues[frame.destination].append(frame)
        self.history.append(frame)

    def bodies(self, destination: str | None = None) -> list[bytes]:
        """Return received bodies in arrival order, optionally for one destination."""
        frames = self.history if destination is None else self.queues.get(destination, [])
        return [frame.body for frame in frames]

    def clear(self) -> None:
        self.queues.clear()
        self.history.clear()
        self.connects.clear()


class InMemoryConnection:
    """Connection to the first reachable :class:`InMemoryBroker` in a group.

    Args:
        group: The endpoint group this connection serves.
        brokers: Mapping of ``host:port`` to broker.
    """

    def __init__(self, group: EndpointGroup, brokers: Mapping[str, InMemoryBroker]) -> None:
        self.group = group
        self._brokers = brokers
        self._broker: InMemoryBroker | None = None
        self._address: str | None = None

    @classmethod
    def factory(cls, brokers: Mapping[str, InMemoryBroker]) -> ConnectionFactory:
        """Return a connection factory bound to ``brokers``."""

        def build(group: EndpointGroup) -> "InMemoryConnection":
            return cls(group, brokers)

        return build

    @property
    def broker(self) -> InMemoryBroker | None:
        return self._broker

    def connect(self, headers: Mapping[str, str]) -> None:
        for host in self.group.hosts:
            broker = self._brokers.get(host.address)
            if broker is not None and broker.up:
                broker.connects.append(dict(headers))
                self._broker = broker
                self._address = host.address
                return
        raise TransportError("no broker reachable", endpoint=self.group.name)

    def send(self, frame: Frame) -> None:
        if self._broker is None:
            raise TransportError("not connected", endpoint=self.group.name)
        if not self._broker.up:
            raise TransportError("connection lost", endpoint=self._address)
        self._broker.accept(frame)

    def disconnect(self) -> None:
        self._broker = None
        self._address = None
