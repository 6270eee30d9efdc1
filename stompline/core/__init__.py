"""Core components for stompline.

Types:
    Frame: Immutable outbound message (destination, headers, body bytes).
    Producer: Sends each frame immediately.
    TransactionalProducer: Producer with nested buffering and scoped rollback.
    EndpointSelector: Tracks endpoint groups and the active connection.
    DeliveryPath: Sends one frame, rotating endpoint groups on transport failure.

Configuration:
    Endpoint, EndpointGroup, ProducerConfig: Validated pydantic models.

Transformers:
    Transformer: Optional base class for message transformers.
    PreBuilt, ClassRef: Explicit transformer references.

Errors:
    See ``stompline.core.errors``.
"""

from stompline.core.config import Endpoint, EndpointGroup, ProducerConfig
from stompline.core.delivery import DeliveryPath
from stompline.core.endpoints import EndpointSelector
from stompline.core.errors import (
    BadMessageError,
    BadTransformerError,
    BufferingInProgressError,
    CancelledError,
    ProducerError,
    RetriesExhaustedError,
    SerializationError,
    TransportError,
    UnderflowError,
    ValidationError,
)
from stompline.core.frame import Frame, build_frame, default_serializer, json_serializer
from stompline.core.producer import Producer, TransactionalProducer
from stompline.core.transformer import ClassRef, PreBuilt, Transformer

__all__ = [
    "Frame",
    "build_frame",
    "default_serializer",
    "json_serializer",
    "Producer",
    "TransactionalProducer",
    "EndpointSelector",
    "DeliveryPath",
    "Endpoint",
    "EndpointGroup",
    "ProducerConfig",
    "Transformer",
    "PreBuilt",
    "ClassRef",
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
]
