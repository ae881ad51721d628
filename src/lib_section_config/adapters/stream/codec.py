"""Stream codec: move section trees over an ordered byte stream.

Purpose
-------
Hand a fully loaded configuration tree to a cooperating process (through a
pipe, a socket, or an in-memory buffer) without touching the filesystem.

Wire format
-----------
Sections are written in preorder. For every section::

    name            string
    tag count       uint32
    tag, value      string, string   (repeated, in insertion order)
    subsection count uint32
    subsections     (recursively, in insertion order)

Integers are unsigned 32-bit little-endian; strings are a uint32 byte length
followed by UTF-8 bytes.

Contents
--------
* :func:`write_section` / :func:`read_tree` – tree serialisation.
* :func:`write_string` / :func:`read_string` – string primitives, also used by
  the facade to send the file name ahead of the tree.
* :func:`write_uint` / :func:`read_uint` – count primitives.

System Role
-----------
Used by :meth:`lib_section_config.core.ConfigurationFile.write_to_stream` and
:meth:`lib_section_config.core.ConfigurationFile.from_stream`. The received
tree is an independent copy with clear edit flags.
"""

from __future__ import annotations

import struct
from typing import Final

from ...application.ports import ByteStream
from ...domain.errors import StreamTruncated
from ...domain.section import Section, SectionTree

_UINT: Final[struct.Struct] = struct.Struct("<I")


def write_uint(stream: ByteStream, value: int) -> None:
    stream.write(_UINT.pack(value))


def read_uint(stream: ByteStream) -> int:
    return _UINT.unpack(_read_exact(stream, _UINT.size))[0]


def write_string(stream: ByteStream, text: str) -> None:
    payload = text.encode("utf-8")
    write_uint(stream, len(payload))
    stream.write(payload)


def read_string(stream: ByteStream) -> str:
    payload = _read_exact(stream, read_uint(stream))
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise StreamTruncated(f"Stream carried invalid UTF-8 data: {exc}") from exc


def write_section(stream: ByteStream, section: Section) -> None:
    """Write *section* and its whole subtree to *stream* in preorder.

    Examples
    --------
    >>> import io
    >>> tree = SectionTree()
    >>> tree.root.store_tag_value("net/port", "4242")
    >>> buffer = io.BytesIO()
    >>> write_section(buffer, tree.root)
    >>> _ = buffer.seek(0)
    >>> read_tree(buffer).root.retrieve_tag_value("net/port")
    '4242'
    """

    pending = [section]
    while pending:
        current = pending.pop()
        write_string(stream, current.name)
        pairs = list(current.tag_values())
        write_uint(stream, len(pairs))
        for tag, value in pairs:
            write_string(stream, tag)
            write_string(stream, value)
        children = list(current.subsections())
        write_uint(stream, len(children))
        pending.extend(reversed(children))


def read_tree(stream: ByteStream) -> SectionTree:
    """Read one serialised section (and its subtree) into a new tree.

    The name of the serialised section becomes the name of the new root.

    Raises
    ------
    StreamTruncated
        When the stream ends before the subtree is complete, or carries data
        that cannot belong to a serialised tree.
    """

    tree = SectionTree(read_string(stream))
    # (section, number of its subsections still to be read)
    pending = [(tree.root, _read_header(stream, tree.root))]
    while pending:
        section, remaining = pending.pop()
        if not remaining:
            continue
        pending.append((section, remaining - 1))
        name = read_string(stream)
        if not name:
            raise StreamTruncated(f"Stream carried invalid data: unnamed subsection of {section.path}")
        child = section.add_subsection(name)
        pending.append((child, _read_header(stream, child)))
    tree.root.clear_edit_flag()
    return tree


def _read_header(stream: ByteStream, section: Section) -> int:
    """Read the tag pairs of *section* and return its subsection count."""

    for _ in range(read_uint(stream)):
        tag = read_string(stream)
        if not tag:
            raise StreamTruncated(f"Stream carried invalid data: empty tag in {section.path}")
        section.add_tag_value(tag, read_string(stream))
    return read_uint(stream)


def _read_exact(stream: ByteStream, size: int) -> bytes:
    """Read exactly *size* bytes, looping over short reads from pipes and sockets."""

    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            raise StreamTruncated(f"Stream ended with {remaining} of {size} bytes outstanding")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
