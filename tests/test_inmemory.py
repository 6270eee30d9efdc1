"""Tests for InMemoryBroker and InMemoryConnection."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from stompline.connections.inmemory import InMemoryBroker, InMemoryConnection
from stompline.core.config import EndpointGroup
from stompline.core.errors import TransportError
from stompline.core.frame import build_frame


@pytest.fixture
def group():
    return EndpointGroup(hosts=[{"hostname": "a"}, {"hostname": "b"}])


@given(count=st.integers(min_value=1, max_value=50))
def test_broker_fifo_per_destination(count: int):
    """Frames sent to a broker are kept in arrival order for each destination."""
    broker = InMemoryBroker()
    connection = InMemoryConnection(
        EndpointGroup(hosts=[{"hostname": "a"}]), {"a:61613": broker}
    )
    connection.connect({})

    for i in range(count):
        connection.send(build_frame(f"/q{i % 3}", {}, str(i)))

    for d in range(3):
        expected = [str(i).encode() for i in range(count) if i % 3 == d]
        assert broker.bodies(f"/q{d}") == expected
    assert len(broker.history) == count


def test_connect_picks_first_live_host(group, brokers, broker_a, broker_b):
    broker_a.up = False
    connection = InMemoryConnection(group, brokers)

    connection.connect({"login": "guest"})

    assert connection.broker is broker_b
    assert broker_b.connects == [{"login": "guest"}]
    assert broker_a.connects == []


def test_connect_with_no_live_host(group, brokers, broker_a, broker_b):
    broker_a.up = False
    broker_b.up = False

    with pytest.raises(TransportError) as exc_info:
        InMemoryConnection(group, brokers).connect({})

    assert exc_info.value.endpoint == "a:61613,b:61613"
    assert "no broker reachable" in str(exc_info.value)


def test_unknown_hosts_are_unreachable(group):
    with pytest.raises(TransportError):
        InMemoryConnection(group, {}).connect({})


def test_send_after_broker_goes_down(group, brokers, broker_a):
    connection = InMemoryConnection(group, brokers)
    connection.connect({})
    broker_a.up = False

    with pytest.raises(TransportError) as exc_info:
        connection.send(build_frame("/q", {}, "x"))

    assert exc_info.value.endpoint == "a:61613"
    assert broker_a.history == []


def test_send_without_connect(group, brokers):
    with pytest.raises(TransportError):
        InMemoryConnection(group, brokers).send(build_frame("/q", {}, "x"))


def test_disconnect_then_send_fails(group, brokers):
    connection = InMemoryConnection(group, brokers)
    connection.connect({})
    connection.disconnect()

    assert connection.broker is None
    with pytest.raises(TransportError):
        connection.send(build_frame("/q", {}, "x"))


def test_clear(broker_a):
    broker_a.accept(build_frame("/q", {}, "x"))
    broker_a.connects.append({})

    broker_a.clear()

    assert broker_a.history == []
    assert broker_a.bodies("/q") == []
    assert broker_a.connects == []
