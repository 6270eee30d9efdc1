"""Redis Streams connection for stompline.

Each destination maps to one stream (``{stream_prefix}{destination}``); every
frame becomes one ``XADD`` entry with a JSON ``headers`` field and the raw
``body``.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from stompline.core.config import EndpointGroup
from stompline.core.errors import TransportError
from stompline.core.frame import Frame

try:
    import redis
except ImportError as e:
    raise ImportError(
        "Redis connection requires the 'redis' package. "
        "Install it with: pip install stompline[redis]"
    ) from e

logger = logging.getLogger("stompline.redis")

_TRANSPORT_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def _sanitize(host: str, port: int, username: str | None, password: str | None) -> str:
    """Describe an endpoint for logging with the password masked."""
    if password:
        return f"{username or ''}:****@{host}:{port}"
    return f"{host}:{port}"


class RedisStreamConnection:
    """Connection that delivers frames to Redis Streams.

    Connect headers understood: ``login`` and ``passcode`` (Redis ACL user
    and password) and ``db``.

    Args:
        group: The endpoint group this connection serves.
        stream_prefix: Prefix for stream keys, prepended to the destination.
        socket_timeout: Per-command socket timeout in seconds.
        maxlen: Approximate cap on stream length, None for unbounded.
    """

    def __init__(
        self,
        group: EndpointGroup,
        stream_prefix: str = "stompline:",
        socket_timeout: float = 5.0,
        maxlen: int | None = None,
    ) -> None:
        self.group = group
        self.stream_prefix = stream_prefix
        self.socket_timeout = socket_timeout
        self.maxlen = maxlen
        self._client: Any = None
        self._address: str | None = None

    @classmethod
    def factory(cls, **kwargs: Any):
        """Return a connection factory passing ``kwargs`` to every connection."""

        def build(group: EndpointGroup) -> "RedisStreamConnection":
            return cls(group, **kwargs)

        return build

    def stream_key(self, destination: str) -> str:
        return f"{self.stream_prefix}{destination}"

    def connect(self, headers: Mapping[str, str]) -> None:
        username = headers.get("login")
        password = headers.get("passcode")
        db = int(headers.get("db", 0))
        last_error: Exception | None = None

        for host in self.group.hosts:
            safe = _sanitize(host.hostname, host.port, username, password)
            client = redis.Redis(
                host=host.hostname,
                port=host.port,
                db=db,
                username=username,
                password=password,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
            )
            try:
                client.ping()
            except _TRANSPORT_ERRORS as e:
                logger.warning(f"Redis at {safe} unreachable: {e}")
                last_error = e
                client.close()
                continue
            except Exception:
                client.close()
                raise
            self._client = client
            self._address = host.address
            logger.info(f"Connected to Redis at {safe}")
            return

        raise TransportError(
            f"no Redis host reachable: {last_error}", endpoint=self.group.name
        ) from last_error

    def send(self, frame: Frame) -> None:
        if self._client is None:
            raise TransportError("not connected", endpoint=self.group.name)
        fields = {
            "headers": json.dumps(dict(frame.headers), default=str),
            "body": frame.body,
        }
        try:
            self._client.xadd(
                self.stream_key(frame.destination),
                fields,
                maxlen=self.maxlen,
                approximate=self.maxlen is not None,
            )
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"XADD failed: {e}", endpoint=self._address) from e

    def disconnect(self) -> None:
        client, self._client = self._client, None
        self._address = None
        if client is None:
            return
        try:
            client.close()
        except _TRANSPORT_ERRORS as e:
            logger.debug(f"Error closing Redis connection: {e}")
