"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts the core relies on without owning their
implementations: converting typed values to and from their stored string form,
and moving bytes over an ordered transport.

Contents
--------
* :class:`ValueCoder` – type-specific ``encode``/``decode`` pair.
* :class:`ByteStream` – ordered, blocking byte transport (pipes, sockets,
  :class:`io.BytesIO`).

System Role
-----------
The facade hands strings to value coders and the stream codec reads and
writes through a ``ByteStream``. Both protocols are runtime checkable so
adapters can be verified by contract tests.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ValueCoder(Protocol):
    """Convert between a domain value and its string representation.

    Why
    ----
    The section tree only stores strings; typing is applied at the edges so new
    value types never require changes to the tree or the codecs.
    """

    def encode(self, value: Any) -> str:
        """Return the string form of *value*."""

    def decode(self, text: str) -> Any:
        """Return the value encoded by *text* or raise ``DecodingFailure``."""


@runtime_checkable
class ByteStream(Protocol):
    """Ordered, reliable byte transport.

    Why
    ----
    Hand a fully loaded tree to a cooperating process without a shared
    filesystem. ``read`` blocks until *size* bytes are available or the stream
    ends; no seeking is required.
    """

    def read(self, size: int = -1, /) -> bytes:
        """Read up to *size* bytes."""

    def write(self, data: bytes, /) -> Any:
        """Write all of *data*."""
