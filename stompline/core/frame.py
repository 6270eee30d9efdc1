"""Frame model and body serializers for stompline."""

import json
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field, field_validator

from stompline.core.errors import BadMessageError, SerializationError

Serializer = Callable[[Any], bytes]


def default_serializer(body: Any) -> bytes:
    """Pass byte sequences through, encode text as UTF-8, reject anything else."""
    if isinstance(body, bytes):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    raise TypeError(f"can't send a {type(body).__name__} without a serializer")


def json_serializer(body: Any) -> bytes:
    """Serialize a structured body as compact UTF-8 JSON."""
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def normalize_destination(destination: str) -> str:
    """Prefix ``destination`` with ``/`` unless it already starts with one."""
    if destination.startswith("/"):
        return destination
    return f"/{destination}"


class Frame(BaseModel):
    """Immutable outbound message unit.

    Attributes:
        destination: Normalized destination, always starting with ``/``.
        headers: Merged headers, excluding ``destination``. Read-only.
        body: Serialized body bytes.
    """

    destination: str
    headers: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    body: bytes = b""

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        return normalize_destination(v)

    @field_validator("headers")
    @classmethod
    def validate_headers(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        if "destination" in v:
            raise ValueError("destination belongs on the frame, not in its headers")
        # Buffered frames are shared with the flush loop; keep them unchangeable.
        return MappingProxyType(dict(v))

    def wire_headers(self) -> dict[str, Any]:
        """Return every header a transport needs, destination included."""
        return {**self.headers, "destination": self.destination}


def build_frame(
    destination: str | None,
    headers: Mapping[str, Any] | None,
    body: Any,
    *,
    default_headers: Mapping[str, Any] | None = None,
    serializer: Serializer = default_serializer,
) -> Frame:
    """Serialize ``body`` and merge headers into a :class:`Frame`.

    Precedence, lowest to highest: ``default_headers``, ``headers``, then the
    computed ``content-length`` and ``destination``. When ``destination`` is
    None it is taken from the merged headers.

    Raises:
        SerializationError: If the serializer fails.
        BadMessageError: If no destination can be found.
    """
    caller_headers = dict(headers or {})
    try:
        payload = serializer(body)
    except Exception as e:
        raise SerializationError(body, caller_headers) from e
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise SerializationError(
            body,
            caller_headers,
            reason=f"serializer returned {type(payload).__name__}, expected bytes",
        )
    payload = bytes(payload)

    merged: dict[str, Any] = {**(default_headers or {}), **caller_headers}
    merged["content-length"] = len(payload)
    found = merged.pop("destination", None)
    if destination is None:
        destination = found
    if not destination:
        raise BadMessageError(body, caller_headers, reason="message has no destination")

    return Frame(destination=destination, headers=merged, body=payload)
