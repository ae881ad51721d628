"""Ordered tag/value storage for a single configuration section.

Purpose
-------
Hold the ``(tag, value)`` pairs of one section in insertion order with
overwrite-in-place semantics. Values are opaque strings; typing is applied by
value coders at read time.

Contents
--------
* :class:`TagValueStore` – the ordered pair container used by
  :class:`lib_section_config.domain.section.SectionTree` nodes.
"""

from __future__ import annotations

from typing import Iterator


class TagValueStore:
    """Ordered mapping of tags to string values.

    Why
    ----
    A later pair with an existing tag must overwrite the earlier value without
    moving it; ``dict`` insertion order gives exactly that.

    Examples
    --------
    >>> store = TagValueStore()
    >>> store.set("a", "1")
    >>> store.set("b", "2")
    >>> store.set("a", "9")
    >>> list(store.items())
    [('a', '9'), ('b', '2')]
    """

    __slots__ = ("_pairs",)

    def __init__(self) -> None:
        self._pairs: dict[str, str] = {}

    def set(self, tag: str, value: str) -> None:
        """Overwrite *tag* in place, or append it when it is new."""

        if not tag:
            raise ValueError("Tag names must not be empty")
        self._pairs[tag] = value

    def get(self, tag: str) -> str | None:
        return self._pairs.get(tag)

    def remove(self, tag: str) -> bool:
        """Drop *tag*; return ``False`` when it was not present."""

        return self._pairs.pop(tag, None) is not None

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._pairs.items()))

    def tags(self) -> list[str]:
        return list(self._pairs)

    def __contains__(self, tag: object) -> bool:
        return tag in self._pairs

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"TagValueStore({list(self._pairs.items())!r})"
