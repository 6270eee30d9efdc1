"""Pytest configuration, Hypothesis profiles and shared fixtures."""

import pytest
from hypothesis import settings

from stompline.connections.inmemory import InMemoryBroker, InMemoryConnection
from stompline.core.config import EndpointGroup
from stompline.core.producer import TransactionalProducer

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=20)

# Load dev profile by default, CI can override via --hypothesis-profile=ci
settings.load_profile("dev")


@pytest.fixture
def broker_a() -> InMemoryBroker:
    return InMemoryBroker("a")


@pytest.fixture
def broker_b() -> InMemoryBroker:
    return InMemoryBroker("b")


@pytest.fixture
def brokers(broker_a, broker_b) -> dict[str, InMemoryBroker]:
    """Two single-host brokers, reachable at a:61613 and b:61613."""
    return {"a:61613": broker_a, "b:61613": broker_b}


@pytest.fixture
def groups() -> list[EndpointGroup]:
    return [
        EndpointGroup(hosts=[{"hostname": "a"}]),
        EndpointGroup(hosts=[{"hostname": "b"}]),
    ]


@pytest.fixture
def producer(groups, brokers) -> TransactionalProducer:
    """Transactional producer failing over from broker a to broker b."""
    return TransactionalProducer(groups, InMemoryConnection.factory(brokers))
