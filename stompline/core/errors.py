"""Exception types raised by stompline producers.

Only ``TransportError`` is retried (by rotating endpoint groups in the
delivery path). Everything else propagates to the caller of the operation
that triggered it.
"""

from typing import Any


class ProducerError(Exception):
    """Base class for all stompline errors."""


class UnderflowError(ProducerError):
    """Raised when ``commit()`` is called outside any transaction."""

    def __init__(self, message: str = "not inside a transaction") -> None:
        super().__init__(message)


class BufferingInProgressError(ProducerError):
    """Raised when ``flush_buffered()`` is called inside a scoped transaction."""

    def __init__(
        self, message: str = "can't flush buffered frames inside a scoped transaction"
    ) -> None:
        super().__init__(message)


class BadMessageError(ProducerError):
    """Raised when a message can't be turned into a frame.

    Attributes:
        message_body: The body the caller tried to send.
        message_headers: The headers the caller tried to send, if known.
        reason: Human-readable description of the failure.
    """

    default_reason = "sending the message didn't work"

    def __init__(
        self,
        message_body: Any,
        message_headers: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> None:
        self.message_body = message_body
        self.message_headers = message_headers
        self.reason = reason or self.default_reason
        super().__init__(self.reason)

    def __str__(self) -> str:
        previous = self.__cause__ if self.__cause__ is not None else "no previous exception"
        return f"{self.reason} ({self.message_body!r}): {previous}"


class SerializationError(BadMessageError):
    """Raised when the serializer can't turn a body into bytes."""

    default_reason = "couldn't serialize message"


class ValidationError(BadMessageError):
    """Raised when a transformed message fails validation.

    The validator's own exception, if it raised one, is the ``__cause__``.
    A validator that simply returned a false value leaves ``__cause__`` unset.
    """

    default_reason = "the message didn't pass validation"

    def __init__(
        self,
        transformer: Any,
        message_body: Any,
        message_headers: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> None:
        self.transformer = transformer
        super().__init__(message_body, message_headers, reason)


class BadTransformerError(ProducerError):
    """Raised when a transformer can't be resolved or has no ``transform``."""

    def __init__(self, transformer: Any, detail: str | None = None) -> None:
        self.transformer = transformer
        message = detail or (
            f"{transformer!r} is not a valid transformer, "
            'it doesn\'t have a "transform" method'
        )
        super().__init__(message)


class TransportError(ProducerError):
    """Connection-level failure reported by a ``Connection``.

    Attributes:
        endpoint: ``host:port`` the failure relates to, when known.
    """

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        self.endpoint = endpoint
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.endpoint:
            return f"{base} [{self.endpoint}]"
        return base


class RetriesExhaustedError(ProducerError):
    """Raised when delivery gives up after ``max_attempts`` transport failures.

    Attributes:
        attempts: Number of attempts made.
        last_error: The last transport error seen.
    """

    def __init__(
        self, message: str, attempts: int = 0, last_error: TransportError | None = None
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.last_error is not None:
            return f"{base} (last error: {self.last_error})"
        return base


class CancelledError(ProducerError):
    """Raised when delivery is cancelled through the producer's cancel event."""

    def __init__(self, message: str = "delivery cancelled") -> None:
        super().__init__(message)
