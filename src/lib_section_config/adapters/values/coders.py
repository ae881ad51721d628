"""Standard value coders and the type-keyed registry.

Purpose
-------
Convert typed Python values to and from the strings stored in a section.
Coders implement :class:`lib_section_config.application.ports.ValueCoder`;
the registry selects one by exact Python type so callers can write
``retrieve_value("port", int)``.

Contents
--------
* :class:`StringCoder`, :class:`IntCoder`, :class:`FloatCoder`,
  :class:`BoolCoder` – scalar coders.
* :class:`SequenceCoder` – ``(a, b, c)`` lists of one item type, optionally
  with a fixed length.
* :class:`CoderRegistry` / :data:`DEFAULT_REGISTRY` – type-keyed lookup.

System Role
-----------
Used by the typed accessors of :mod:`lib_section_config.core`. Every decode
error is reported as :class:`~lib_section_config.domain.errors.DecodingFailure`.
"""

from __future__ import annotations

from typing import Any, Final

from ...application.ports import ValueCoder
from ...domain.errors import DecodingFailure

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"true", "yes", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"false", "no", "off"})


class StringCoder:
    """Identity coder for ``str`` values."""

    def encode(self, value: Any) -> str:
        return str(value)

    def decode(self, text: str) -> str:
        return text


class IntCoder:
    """Decimal integers.

    Examples
    --------
    >>> IntCoder().decode(" 42 ")
    42
    >>> IntCoder().decode("4.2")
    Traceback (most recent call last):
    ...
    lib_section_config.domain.errors.DecodingFailure: Unable to convert '4.2' to integer
    """

    def encode(self, value: Any) -> str:
        return str(int(value))

    def decode(self, text: str) -> int:
        try:
            return int(text.strip())
        except ValueError as exc:
            raise DecodingFailure(f"Unable to convert {text!r} to integer") from exc


class FloatCoder:
    """Floating point numbers using Python's shortest round-trip repr."""

    def encode(self, value: Any) -> str:
        return repr(float(value))

    def decode(self, text: str) -> float:
        try:
            return float(text.strip())
        except ValueError as exc:
            raise DecodingFailure(f"Unable to convert {text!r} to floating-point number") from exc


class BoolCoder:
    """Booleans written as ``true``/``false``; ``yes``/``no`` and ``on``/``off`` are accepted.

    Examples
    --------
    >>> BoolCoder().decode("Yes")
    True
    >>> BoolCoder().encode(False)
    'false'
    """

    def encode(self, value: Any) -> str:
        return "true" if value else "false"

    def decode(self, text: str) -> bool:
        word = text.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise DecodingFailure(f"Unable to convert {text!r} to boolean")


class SequenceCoder:
    """Parenthesised, comma-separated sequences such as ``(0.0, 0.1, 0.9, 1.0)``.

    Items are encoded with *item_coder*; nested parentheses are kept together so
    sequences of sequences work. When *length* is given, decoding a sequence
    with a different number of elements fails.

    Examples
    --------
    >>> coder = SequenceCoder(FloatCoder(), length=4)
    >>> coder.encode([-1.0, -0.1, 0.1, 1.0])
    '(-1.0, -0.1, 0.1, 1.0)'
    >>> coder.decode("(-1, -0.1, 0.1, 1)")
    [-1.0, -0.1, 0.1, 1.0]
    >>> coder.decode("(1, 2)")
    Traceback (most recent call last):
    ...
    lib_section_config.domain.errors.DecodingFailure: Wrong number of elements in (1, 2)
    """

    def __init__(self, item_coder: ValueCoder, *, length: int | None = None) -> None:
        self._item_coder = item_coder
        self._length = length

    def encode(self, value: Any) -> str:
        return "(" + ", ".join(self._item_coder.encode(item) for item in value) + ")"

    def decode(self, text: str) -> list[Any]:
        body = text.strip()
        if len(body) < 2 or body[0] != "(" or body[-1] != ")":
            raise DecodingFailure(f"Missing parentheses around sequence {text!r}")
        items = [self._item_coder.decode(item) for item in _split_items(body[1:-1], text)]
        if self._length is not None and len(items) != self._length:
            raise DecodingFailure(f"Wrong number of elements in {text}")
        return items


def _split_items(body: str, text: str) -> list[str]:
    """Split *body* at top-level commas."""

    if not body.strip():
        return []
    items: list[str] = []
    depth = 0
    start = 0
    for position, char in enumerate(body):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise DecodingFailure(f"Unbalanced parentheses in sequence {text!r}")
        elif char == "," and depth == 0:
            items.append(body[start:position].strip())
            start = position + 1
    if depth != 0:
        raise DecodingFailure(f"Unbalanced parentheses in sequence {text!r}")
    items.append(body[start:].strip())
    return items


class CoderRegistry:
    """Map Python types to value coders.

    Lookups use the exact type, so ``bool`` is never mistaken for ``int``.

    Examples
    --------
    >>> registry = CoderRegistry()
    >>> registry.register(int, IntCoder())
    >>> registry.coder_for(int).decode("7")
    7
    >>> registry.coder_for(complex)
    Traceback (most recent call last):
    ...
    LookupError: No value coder registered for complex
    """

    def __init__(self) -> None:
        self._coders: dict[type, ValueCoder] = {}

    def register(self, kind: type, coder: ValueCoder) -> None:
        self._coders[kind] = coder

    def coder_for(self, kind: type | ValueCoder) -> ValueCoder:
        """Return the coder for *kind*; coder instances are passed through unchanged."""

        if not isinstance(kind, type) and isinstance(kind, ValueCoder):
            return kind
        try:
            return self._coders[kind]  # type: ignore[index]
        except KeyError:
            name = getattr(kind, "__name__", repr(kind))
            raise LookupError(f"No value coder registered for {name}") from None

    def coder_for_value(self, value: Any) -> ValueCoder:
        return self.coder_for(type(value))


def _default_registry() -> CoderRegistry:
    registry = CoderRegistry()
    registry.register(str, StringCoder())
    registry.register(int, IntCoder())
    registry.register(float, FloatCoder())
    registry.register(bool, BoolCoder())
    return registry


DEFAULT_REGISTRY: Final[CoderRegistry] = _default_registry()
"""Registry pre-populated with coders for ``str``, ``int``, ``float`` and ``bool``."""


__all__ = [
    "BoolCoder",
    "CoderRegistry",
    "DEFAULT_REGISTRY",
    "FloatCoder",
    "IntCoder",
    "SequenceCoder",
    "StringCoder",
]
