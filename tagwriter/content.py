"""Content shapes accepted by :meth:`TagWriter.do_tag`.

Callers may pass plain Python values; :func:`classify` turns them into one of
the explicit variants below so the writer never has to guess at runtime.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Iterable, Tuple, Union

Attribute = Tuple[str, Any]
Builder = Callable[[], Any]


class ContentError(TypeError):
    """Raised for content that cannot be mapped onto a tag."""


@dataclass(frozen=True)
class Empty:
    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = Empty()


@dataclass(frozen=True)
class Text:
    value: Any

    @property
    def text(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Nested:
    builder: Builder


Inner = Union[Empty, Text, Nested]


@dataclass(frozen=True)
class Attributed:
    attributes: Tuple[Attribute, ...] = field(default_factory=tuple)
    inner: Inner = EMPTY

    def __post_init__(self) -> None:
        if not isinstance(self.inner, (Empty, Text, Nested)):
            raise ContentError(
                f"attribute record content must be text, empty or a builder, got {self.inner!r}"
            )
        object.__setattr__(self, "attributes", normalize_attributes(self.attributes))


Content = Union[Empty, Text, Nested, Attributed]

_RECORD_KEYS = {"attr", "content"}


def is_truthy(value: Any) -> bool:
    """False for None, the empty string and numeric zero; true otherwise."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, Empty):
        return False
    return True


def normalize_attributes(attrs: Any) -> Tuple[Attribute, ...]:
    """Return attributes as an ordered tuple of ``(name, value)`` pairs.

    Accepts a mapping (insertion order kept), a sequence of pairs, or the
    flat ``[name1, value1, name2, value2]`` form.
    """
    if attrs is None:
        return ()
    if isinstance(attrs, Mapping):
        return tuple((str(k), v) for k, v in attrs.items())
    if isinstance(attrs, (str, bytes)):
        raise ContentError(f"attributes must be pairs, got {attrs!r}")

    items = list(attrs)
    if not items:
        return ()
    if all(isinstance(item, (tuple, list)) and len(item) == 2 for item in items):
        return tuple((str(k), v) for k, v in items)
    if any(isinstance(item, (tuple, list)) for item in items):
        raise ContentError(f"attribute pairs must have exactly two items: {items!r}")
    if len(items) % 2:
        raise ContentError(f"flat attribute list has an odd number of items: {items!r}")
    return tuple((str(items[i]), items[i + 1]) for i in range(0, len(items), 2))


def _classify_inner(value: Any) -> Inner:
    if isinstance(value, (Empty, Text, Nested)):
        return value
    if isinstance(value, (Attributed, Mapping)):
        raise ContentError("attribute record content cannot be another attribute record")
    if callable(value):
        return Nested(value)
    if isinstance(value, (bytes, bytearray, Set)) or (
        isinstance(value, Sequence) and not isinstance(value, str)
    ):
        raise ContentError(f"content must be a scalar or a builder, got {type(value).__name__}")
    if not is_truthy(value):
        return EMPTY
    return Text(value)


def classify(value: Any) -> Content:
    """Map a raw caller value onto a content variant."""
    if isinstance(value, Attributed):
        return value
    if isinstance(value, Mapping):
        unknown = set(value) - _RECORD_KEYS
        if unknown:
            raise ContentError(f"unknown attribute record keys: {sorted(unknown)}")
        return Attributed(
            attributes=normalize_attributes(value.get("attr")),
            inner=_classify_inner(value.get("content")),
        )
    return _classify_inner(value)


def attributed(attrs: Iterable[Attribute] | Mapping[str, Any], content: Any = None) -> Attributed:
    """Build an attribute record: ``attributed([("id", "x")], "text")``."""
    return Attributed(attributes=normalize_attributes(attrs), inner=_classify_inner(content))


__all__ = [
    "EMPTY",
    "Attributed",
    "Content",
    "ContentError",
    "Empty",
    "Nested",
    "Text",
    "attributed",
    "classify",
    "is_truthy",
    "normalize_attributes",
]
