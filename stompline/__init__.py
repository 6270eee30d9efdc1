"""stompline - transactional, failover-aware message producer for brokers."""

from stompline.connections import Connection, InMemoryBroker, InMemoryConnection
from stompline.core import (
    BadMessageError,
    BadTransformerError,
    BufferingInProgressError,
    CancelledError,
    ClassRef,
    Endpoint,
    EndpointGroup,
    Frame,
    PreBuilt,
    Producer,
    ProducerConfig,
    ProducerError,
    RetriesExhaustedError,
    SerializationError,
    TransactionalProducer,
    Transformer,
    TransportError,
    UnderflowError,
    ValidationError,
    json_serializer,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Frame",
    "Producer",
    "TransactionalProducer",
    "Transformer",
    "PreBuilt",
    "ClassRef",
    "json_serializer",
    # Configuration
    "Endpoint",
    "EndpointGroup",
    "ProducerConfig",
    # Errors
    "ProducerError",
    "UnderflowError",
    "BufferingInProgressError",
    "BadMessageError",
    "SerializationError",
    "ValidationError",
    "BadTransformerError",
    "TransportError",
    "RetriesExhaustedError",
    "CancelledError",
    # Connections
    "Connection",
    "InMemoryBroker",
    "InMemoryConnection",
    # Meta
    "__version__",
]
