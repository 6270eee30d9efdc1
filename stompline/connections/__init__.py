"""Connection implementations for delivering frames to brokers.

``RedisStreamConnection`` lives in ``stompline.connections.redis_stream`` and
needs the optional ``redis`` extra.
"""

from stompline.connections.base import Connection, ConnectionFactory
from stompline.connections.inmemory import InMemoryBroker, InMemoryConnection

__all__ = ["Connection", "ConnectionFactory", "InMemoryBroker", "InMemoryConnection"]
