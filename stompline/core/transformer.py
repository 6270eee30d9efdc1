"""Message transformers: turn arbitrary input into (headers, body) pairs."""

import importlib
import inspect
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from stompline.core.errors import BadTransformerError

Message = tuple[dict[str, Any], Any]


class Transformer(ABC):
    """Base class for transformers.

    Subclassing is optional: any object with a callable ``transform`` works.
    ``transform`` returns zero or more ``(headers, body)`` pairs; the
    destination is normally one of the headers. ``validate`` is optional too;
    it returns a false value or raises to reject a message.

    Class-ref transformers are instantiated with the producer's
    ``transformer_args`` as keyword arguments.
    """

    def __init__(self, **kwargs: Any) -> None:
        self.options = kwargs

    @abstractmethod
    def transform(self, *input: Any) -> Iterable[Message]:
        ...


@dataclass(frozen=True)
class PreBuilt:
    """A transformer instance ready to use."""

    transformer: Any


@dataclass(frozen=True)
class ClassRef:
    """A transformer class, or the import path of one, to instantiate per use.

    ``target`` is a class or a ``"package.module:Class"`` /
    ``"package.module.Class"`` string.
    """

    target: type | str


TransformerRef = PreBuilt | ClassRef


def as_transformer_ref(value: Any) -> TransformerRef:
    """Wrap a bare transformer, class or import path in the matching variant."""
    if isinstance(value, (PreBuilt, ClassRef)):
        return value
    if isinstance(value, str) or inspect.isclass(value):
        return ClassRef(value)
    return PreBuilt(value)


def _import_class(path: str) -> type:
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise BadTransformerError(path, f"{path!r} is not an importable class path")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise BadTransformerError(path, f"can't import {module_name!r}: {e}") from e
    try:
        found = getattr(module, attr)
    except AttributeError as e:
        raise BadTransformerError(path, f"{module_name!r} has no attribute {attr!r}") from e
    if not inspect.isclass(found):
        raise BadTransformerError(path, f"{path!r} is not a class")
    return found


def resolve_transformer(ref: TransformerRef, args: Mapping[str, Any] | None = None) -> Any:
    """Turn a :data:`TransformerRef` into an object with a callable ``transform``.

    Raises:
        BadTransformerError: If the class can't be imported or the result
            has no ``transform`` method.
    """
    if isinstance(ref, PreBuilt):
        transformer = ref.transformer
    else:
        cls = _import_class(ref.target) if isinstance(ref.target, str) else ref.target
        transformer = cls(**dict(args or {}))

    if not callable(getattr(transformer, "transform", None)):
        raise BadTransformerError(transformer)
    return transformer
