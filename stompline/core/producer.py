"""Producers: build frames and hand them to the delivery path.

``Producer`` sends every frame as soon as it is built. ``TransactionalProducer``
adds nested buffering: while a transaction is open, frames are kept in memory
and delivered, in order, when the outermost transaction commits.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from stompline.core.config import EndpointGroup, ProducerConfig
from stompline.core.delivery import DeliveryPath
from stompline.core.endpoints import EndpointSelector
from stompline.core.errors import (
    BadTransformerError,
    BufferingInProgressError,
    UnderflowError,
    ValidationError,
)
from stompline.core.frame import Frame, Serializer, build_frame, default_serializer
from stompline.core.logging import configure_producer_logger
from stompline.core.transformer import as_transformer_ref, resolve_transformer

if TYPE_CHECKING:
    from stompline.connections.base import ConnectionFactory

T = TypeVar("T")


class Producer:
    """Sends messages to the first reachable endpoint group.

    Args:
        servers: Endpoint groups in failover order; plain mappings are
            validated into :class:`EndpointGroup`.
        connection_factory: Builds a connection for an endpoint group.
        serializer: Turns bodies into bytes. The default passes bytes
            through, encodes text as UTF-8 and rejects anything else.
        default_headers: Headers merged into every frame.
        connect_headers: Headers sent with every connect handshake.
        transformer_args: Keyword arguments for class-ref transformers.
        max_attempts: Delivery attempts per frame; None retries forever.
        cancel_event: Set it to abort a blocked delivery with ``CancelledError``.
    """

    def __init__(
        self,
        servers: Sequence[EndpointGroup | Mapping[str, Any]],
        connection_factory: "ConnectionFactory",
        serializer: Serializer = default_serializer,
        default_headers: Mapping[str, Any] | None = None,
        connect_headers: Mapping[str, str] | None = None,
        transformer_args: Mapping[str, Any] | None = None,
        max_attempts: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.servers = [
            s if isinstance(s, EndpointGroup) else EndpointGroup.model_validate(s)
            for s in servers
        ]
        self.serializer = serializer
        self.default_headers = dict(default_headers or {})
        self.transformer_args = dict(transformer_args or {})
        self.selector = EndpointSelector(self.servers, connection_factory, connect_headers)
        self.delivery = DeliveryPath(self.selector, max_attempts, cancel_event)
        configure_producer_logger()
        self._log = logging.getLogger("stompline.producer")

    @classmethod
    def from_config(
        cls,
        config: ProducerConfig | Mapping[str, Any],
        connection_factory: "ConnectionFactory",
        **kwargs: Any,
    ) -> "Producer":
        """Build a producer from a :class:`ProducerConfig` or a plain mapping."""
        if not isinstance(config, ProducerConfig):
            config = ProducerConfig.model_validate(config)
        return cls(
            config.servers,
            connection_factory,
            default_headers=config.default_headers,
            connect_headers=config.connect_headers,
            transformer_args=config.transformer_args,
            max_attempts=config.max_attempts,
            **kwargs,
        )

    def connect(self) -> None:
        """Connect eagerly instead of on the first send."""
        self.delivery.ensure_connected()

    def close(self) -> None:
        """Disconnect the active connection, if any."""
        self.selector.disconnect()

    def __enter__(self) -> "Producer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def build_frame(
        self, destination: str | None, headers: Mapping[str, Any] | None, body: Any
    ) -> Frame:
        return build_frame(
            destination,
            headers,
            body,
            default_headers=self.default_headers,
            serializer=self.serializer,
        )

    def send(
        self,
        destination: str | None,
        headers: Mapping[str, Any] | None = None,
        body: Any = b"",
    ) -> None:
        """Build a frame and send it.

        Args:
            destination: Where to send; None takes it from the headers.
            headers: Message headers, overriding the default headers.
            body: Message body, passed through the serializer.

        Raises:
            SerializationError: If the body can't be serialized.
            BadMessageError: If there is no destination.
        """
        self._dispatch(self.build_frame(destination, headers, body))

    def transform_and_send(self, transformer: Any, *input: Any) -> None:
        """Run ``input`` through a transformer and send every resulting message.

        ``transformer`` may be an instance, a class, an import path, or an
        explicit ``PreBuilt`` / ``ClassRef``. All messages are validated and
        serialized before the first one is sent.

        Raises:
            BadTransformerError: If the transformer can't be resolved.
            ValidationError: If a message fails the transformer's ``validate``.
        """
        resolved = resolve_transformer(as_transformer_ref(transformer), self.transformer_args)
        produced = resolved.transform(*input)
        if produced is None:
            produced = ()
        try:
            messages = [(dict(headers), body) for headers, body in produced]
        except (TypeError, ValueError) as e:
            raise BadTransformerError(
                resolved, f"{resolved!r} must return (headers, body) pairs: {e}"
            ) from e

        validate = getattr(resolved, "validate", None)
        if callable(validate):
            for headers, body in messages:
                self._validate(resolved, validate, headers, body)

        frames = [self.build_frame(None, headers, body) for headers, body in messages]
        for frame in frames:
            self._dispatch(frame)

    def _validate(
        self, transformer: Any, validate: Callable, headers: dict[str, Any], body: Any
    ) -> None:
        try:
            ok = validate(headers, body)
        except Exception as e:
            raise ValidationError(transformer, body, headers) from e
        if not ok:
            raise ValidationError(transformer, body, headers)

    def _dispatch(self, frame: Frame) -> None:
        self.delivery.deliver(frame)


class TransactionalProducer(Producer):
    """Producer with nested, transaction-like buffering.

    While :attr:`depth` is above zero, ``send`` appends frames to an
    in-memory buffer instead of delivering them. ``commit()`` delivers the
    buffer when it brings the depth back to zero.

    ``run_in_transaction`` (or the ``transaction()`` context manager) wraps
    work in begin/commit and, if the work raises, discards the frames it
    queued while keeping those queued by enclosing transactions::

        with producer.transaction():
            producer.send("/queue/a", {}, "1")
            try:
                with producer.transaction():
                    producer.send("/queue/a", {}, "2")
                    raise RuntimeError("boom")
            except RuntimeError:
                pass
            producer.send("/queue/a", {}, "3")
        # "1" and "3" are delivered, "2" is not
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._depth = 0
        self._scoped = 0
        self._buffer: deque[Frame] = deque()

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @property
    def buffered_frames(self) -> tuple[Frame, ...]:
        return tuple(self._buffer)

    def begin(self) -> None:
        """Open a (possibly nested) transaction."""
        self._depth += 1
        self._log.debug("Transaction opened", extra={"depth": self._depth})

    def commit(self) -> None:
        """Close the innermost transaction, flushing if it was the outermost.

        Raises:
            UnderflowError: If no transaction is open. The depth is unchanged.
        """
        if self._depth == 0:
            raise UnderflowError()
        self._depth -= 1
        self._log.debug("Transaction closed", extra={"depth": self._depth})
        if self._depth == 0:
            self._send_buffered()

    def flush_buffered(self) -> None:
        """Deliver every buffered frame now, without touching the depth.

        Raises:
            BufferingInProgressError: If called inside ``run_in_transaction``.
        """
        self._send_buffered()

    def _send_buffered(self) -> None:
        if self._scoped:
            raise BufferingInProgressError()
        if not self._buffer:
            return

        self._log.info(
            f"Flushing {len(self._buffer)} buffered frames",
            extra={"depth": self._depth},
        )
        # Frames leave the buffer only once delivered, so an aborted flush
        # keeps the unsent tail for a later attempt.
        while self._buffer:
            self.delivery.deliver(self._buffer[0])
            self._buffer.popleft()

    def _dispatch(self, frame: Frame) -> None:
        if self._depth:
            self._buffer.append(frame)
            self._log.debug(
                f"Buffered frame for {frame.destination}",
                extra={"destination": frame.destination, "depth": self._depth},
            )
        else:
            self.delivery.deliver(frame)

    @contextmanager
    def transaction(self) -> Iterator["TransactionalProducer"]:
        """Context manager form of :meth:`run_in_transaction`."""
        self.begin()
        self._scoped += 1
        saved = list(self._buffer)
        try:
            yield self
        except BaseException:
            self._buffer.clear()
            self._scoped -= 1
            self.commit()
            self._buffer.extend(saved)
            self._log.debug(
                f"Rolled back transaction, {len(saved)} earlier frames kept",
                extra={"depth": self._depth},
            )
            raise
        self._scoped -= 1
        self.commit()

    def run_in_transaction(self, work: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``work(*args, **kwargs)`` inside a transaction and return its result.

        If ``work`` raises, the frames it queued are dropped, the transaction
        is still closed, and the exception propagates unchanged.
        """
        with self.transaction():
            return work(*args, **kwargs)

    # Names used by the buffering API
    start_buffering = begin
    stop_buffering = commit
    send_buffered = flush_buffered
    buffered_do = run_in_transaction

    # Names used by the transactional API
    txn_begin = begin
    txn_commit = commit
    txn_do = run_in_transaction
