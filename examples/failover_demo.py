#!/usr/bin/env python3
"""
Failover Demo - stompline

Sends a batch of orders inside a transaction while the primary broker
goes down halfway through, then shows where every message ended up.

Run modes:
  python failover_demo.py                 # In-memory brokers
  python failover_demo.py --count 20      # More orders
  python failover_demo.py --redis         # Redis Streams on localhost:6379/6380
"""

import argparse
import logging
import sys

from stompline import (
    InMemoryBroker,
    InMemoryConnection,
    TransactionalProducer,
    Transformer,
    json_serializer,
)

logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)


class OrderTransformer(Transformer):
    """One message per order, rejecting orders without a quantity."""

    def transform(self, *orders):
        return [({"destination": "queue/orders", "type": "order"}, order) for order in orders]

    def validate(self, headers, body):
        return body.get("qty", 0) > 0


def run_in_memory(count: int) -> None:
    primary, standby = InMemoryBroker("primary"), InMemoryBroker("standby")
    producer = TransactionalProducer(
        [{"hostname": "primary"}, {"hostname": "standby"}],
        InMemoryConnection.factory({"primary:61613": primary, "standby:61613": standby}),
        serializer=json_serializer,
        default_headers={"persistent": "true"},
    )

    producer.send("queue/orders", {"type": "hello"}, {"hello": "world"})

    def place_orders():
        for i in range(count):
            producer.transform_and_send(OrderTransformer, {"order": i, "qty": i + 1})
        primary.up = False

    producer.run_in_transaction(place_orders)

    print(f"primary received {len(primary.history)} frames")
    print(f"standby received {len(standby.history)} frames")
    for body in standby.bodies("/queue/orders"):
        print(f"  {body.decode()}")


def run_redis(count: int) -> None:
    from stompline.connections.redis_stream import RedisStreamConnection

    producer = TransactionalProducer(
        [{"hostname": "localhost", "port": 6379}, {"hostname": "localhost", "port": 6380}],
        RedisStreamConnection.factory(stream_prefix="demo:"),
        serializer=json_serializer,
        max_attempts=4,
    )
    with producer, producer.transaction():
        for i in range(count):
            producer.transform_and_send(OrderTransformer, {"order": i, "qty": i + 1})
    print(f"sent {count} orders to stream demo:/queue/orders")


def main() -> None:
    parser = argparse.ArgumentParser(description="stompline failover demo")
    parser.add_argument("--count", type=int, default=5, help="number of orders")
    parser.add_argument("--redis", action="store_true", help="use Redis Streams")
    args = parser.parse_args()

    if args.redis:
        run_redis(args.count)
    else:
        run_in_memory(args.count)


if __name__ == "__main__":
    main()
