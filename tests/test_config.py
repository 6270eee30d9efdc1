"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from stompline.connections.inmemory import InMemoryBroker, InMemoryConnection
from stompline.core.config import Endpoint, EndpointGroup, ProducerConfig
from stompline.core.producer import Producer, TransactionalProducer


class TestEndpoint:
    def test_default_port(self):
        assert Endpoint(hostname="mq").port == 61613

    def test_address(self):
        assert Endpoint(hostname=" mq ", port=1234).address == "mq:1234"

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_rejects_bad_port(self, port):
        with pytest.raises(ValidationError):
            Endpoint(hostname="mq", port=port)

    def test_rejects_empty_hostname(self):
        with pytest.raises(ValidationError):
            Endpoint(hostname="  ")

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            Endpoint(hostname="mq", ssl=True)


class TestEndpointGroup:
    def test_single_host_shorthand(self):
        group = EndpointGroup.model_validate({"hostname": "mq", "port": 61614})
        assert group.hosts == [Endpoint(hostname="mq", port=61614)]
        assert group.connect_headers == {}

    def test_shorthand_keeps_connect_headers(self):
        group = EndpointGroup.model_validate(
            {"hostname": "mq", "connect_headers": {"login": "guest"}}
        )
        assert group.hosts[0].port == 61613
        assert group.connect_headers == {"login": "guest"}

    def test_multi_host_group_name(self):
        group = EndpointGroup(hosts=[{"hostname": "a"}, {"hostname": "b", "port": 1}])
        assert group.name == "a:61613,b:1"

    def test_rejects_empty_hosts(self):
        with pytest.raises(ValidationError):
            EndpointGroup(hosts=[])


class TestProducerConfig:
    def test_requires_servers(self):
        with pytest.raises(ValidationError):
            ProducerConfig(servers=[])

    @pytest.mark.parametrize("max_attempts", [0, -3])
    def test_rejects_non_positive_max_attempts(self, max_attempts):
        with pytest.raises(ValidationError):
            ProducerConfig(servers=[{"hostname": "a"}], max_attempts=max_attempts)

    def test_from_config_mapping(self):
        broker = InMemoryBroker()
        producer = TransactionalProducer.from_config(
            {
                "servers": [{"hostname": "a", "connect_headers": {"login": "me"}}],
                "default_headers": {"persistent": "true"},
                "connect_headers": {"login": "guest", "passcode": "guest"},
                "max_attempts": 3,
            },
            InMemoryConnection.factory({"a:61613": broker}),
        )

        assert isinstance(producer, TransactionalProducer)
        assert producer.delivery.max_attempts == 3

        producer.send("q", {}, "x")

        assert broker.connects == [{"login": "me", "passcode": "guest"}]
        assert broker.history[0].headers["persistent"] == "true"

    def test_from_config_model(self):
        config = ProducerConfig(servers=[{"hostname": "a"}, {"hostname": "b"}])
        producer = Producer.from_config(config, InMemoryConnection.factory({}))
        assert [g.name for g in producer.servers] == ["a:61613", "b:61613"]
        assert producer.delivery.max_attempts is None
