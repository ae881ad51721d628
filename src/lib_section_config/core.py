"""Composition root for ``lib_section_config``.

Purpose
-------
Provide the facade applications use: a configuration file loaded into a
section tree, a cursor ("current section") for relative access, and typed
value access delegated to value coders. The module wires the text codec, the
stream codec, and the merge policy together and exports only stable,
consumer-ready APIs.

Contents
--------
* :class:`SectionValueAccess` – string and typed accessors relative to a base
  section, shared by the two public classes below.
* :class:`ConfigurationSection` – cursor handle into a loaded tree.
* :class:`ConfigurationFile` – owns the tree and the originating file name;
  ``load``/``save``/``merge``/``merge_commandline``/stream transfer.

System Role
-----------
This module connects adapters (text files, byte streams, value coders) with
the domain tree while emitting structured observability signals. It is the
canonical location for adjusting load/save policy.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final, MutableSequence

from .adapters.stream.codec import read_string, read_tree, write_section, write_string
from .adapters.text.codec import read_file, write_file
from .adapters.values.coders import DEFAULT_REGISTRY, CoderRegistry
from .application.merge import merge_commandline, merge_file
from .application.ports import ByteStream, ValueCoder
from .domain.errors import DecodingFailure, SectionNotFound
from .domain.section import Section, SectionTree, split_tag_path
from .observability import log_debug, log_info, make_event

_MISSING: Final[Any] = object()


def _encode(coder: ValueCoder, value: Any) -> str:
    """Encode *value* with *coder*, reporting values the coder rejects as ``DecodingFailure``."""

    try:
        return coder.encode(value)
    except (TypeError, ValueError) as exc:
        raise DecodingFailure(f"Unable to encode {value!r}: {exc}") from exc


class SectionValueAccess:
    """String and typed tag access relative to a base section.

    Why
    ----
    The same accessors are needed on the file facade (relative to its cursor)
    and on detached section cursors; subclasses only say which section is the
    base.

    Default handling
    ----------------
    ``retrieve_*`` with a default never modifies the tree. ``ensure_*`` stores
    the default (creating missing sections) when the tag is absent.

    Errors
    ------
    Strings a coder cannot decode, and values or defaults it cannot encode,
    raise ``DecodingFailure``; the tree is left unchanged in the second case.
    """

    _registry: CoderRegistry

    def _base(self) -> Section:
        raise NotImplementedError

    def retrieve_string(self, tag: str, default: str = _MISSING) -> str:
        """Return the string at *tag*; without *default* a missing tag raises ``TagNotFound``."""

        if default is _MISSING:
            return self._base().retrieve_tag_value(tag)
        return self._base().lookup_tag_value(tag, default)

    def ensure_string(self, tag: str, default: str) -> str:
        return self._base().ensure_tag_value(tag, default)

    def store_string(self, tag: str, value: str) -> None:
        self._base().store_tag_value(tag, value)

    def remove_tag(self, tag: str) -> None:
        """Remove the tag at path *tag*; missing sections or tags are ignored."""

        section_path, name = split_tag_path(tag)
        try:
            section = self._base().resolve(section_path)
        except SectionNotFound:
            return
        section.remove_tag(name)

    def retrieve_value(self, tag: str, kind: type | ValueCoder, default: Any = _MISSING) -> Any:
        """Decode the value at *tag* with the coder for *kind*.

        Examples
        --------
        >>> from lib_section_config.domain.section import SectionTree
        >>> tree = SectionTree()
        >>> tree.root.store_tag_value("port", "4242")
        >>> cursor = ConfigurationSection(tree.root)
        >>> cursor.retrieve_value("port", int)
        4242
        >>> cursor.retrieve_value("timeout", float, 2.5)
        2.5
        >>> tree.root.has_tag("timeout")
        False
        """

        coder = self._registry.coder_for(kind)
        if default is _MISSING:
            text = self._base().retrieve_tag_value(tag)
        else:
            text = self._base().lookup_tag_value(tag, _encode(coder, default))
        return coder.decode(text)

    def ensure_value(self, tag: str, default: Any, kind: type | ValueCoder | None = None) -> Any:
        """Decode the value at *tag*, storing the encoded *default* when it is missing."""

        coder = self._registry.coder_for(kind) if kind is not None else self._registry.coder_for_value(default)
        return coder.decode(self._base().ensure_tag_value(tag, _encode(coder, default)))

    def store_value(self, tag: str, value: Any, kind: type | ValueCoder | None = None) -> None:
        coder = self._registry.coder_for(kind) if kind is not None else self._registry.coder_for_value(value)
        self._base().store_tag_value(tag, _encode(coder, value))


class ConfigurationSection(SectionValueAccess):
    """Cursor pointing at one section of a loaded configuration tree."""

    def __init__(self, section: Section, registry: CoderRegistry | None = None) -> None:
        self._section = section
        self._registry = registry or DEFAULT_REGISTRY

    def __repr__(self) -> str:
        return f"ConfigurationSection({self.path!r})"

    def _base(self) -> Section:
        return self._section

    @property
    def section(self) -> Section:
        return self._section

    @property
    def name(self) -> str:
        return self._section.name

    @property
    def path(self) -> str:
        return self._section.path

    def set_section(self, path: str) -> None:
        """Move this cursor to *path*; raise ``SectionNotFound`` when it does not exist."""

        self._section = self._section.resolve(path)

    def get_section(self, path: str) -> ConfigurationSection:
        """Return a cursor for *path* relative to this one, creating missing sections."""

        return ConfigurationSection(self._section.resolve_or_create(path), self._registry)

    def subsections(self) -> list[ConfigurationSection]:
        return [ConfigurationSection(child, self._registry) for child in self._section.subsections()]


class ConfigurationFile(SectionValueAccess):
    """A configuration file held in memory as a section tree.

    Why
    ----
    Applications need one object that loads settings, applies overrides from
    other files or the command line, offers relative access through a current
    section, and writes edits back only when something changed.

    Parameters
    ----------
    file_name:
        Path of the backing text file. It is parsed immediately unless *tree*
        is supplied.
    registry:
        Value coder registry for typed access; defaults to
        :data:`~lib_section_config.adapters.values.coders.DEFAULT_REGISTRY`.
    tree:
        Already materialised tree (used by :meth:`from_stream`).

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> path = Path(tmp.name) / "demo.cfg"
    >>> _ = path.write_text("net {\\n  port 4242\\n}\\n", encoding="utf-8")
    >>> config = ConfigurationFile(path)
    >>> config.set_current_section("net")
    >>> config.retrieve_value("port", int)
    4242
    >>> config.store_value("timeout", 2.5)
    >>> config.save()
    True
    >>> "timeout 2.5" in path.read_text(encoding="utf-8")
    True
    >>> tmp.cleanup()
    """

    def __init__(
        self,
        file_name: str | Path,
        *,
        registry: CoderRegistry | None = None,
        tree: SectionTree | None = None,
    ) -> None:
        self._file_name = str(file_name)
        self._registry = registry or DEFAULT_REGISTRY
        if tree is None:
            tree = read_file(self._file_name)
            log_info("configuration_loaded", **make_event("/", self._file_name, {"sections": len(tree)}))
        self._tree = tree
        self._current = tree.root

    @classmethod
    def from_stream(cls, stream: ByteStream, *, registry: CoderRegistry | None = None) -> ConfigurationFile:
        """Rebuild a configuration written by :meth:`write_to_stream` on *stream*."""

        file_name = read_string(stream)
        tree = read_tree(stream)
        log_info("stream_read", **make_event("/", file_name, {"sections": len(tree)}))
        return cls(file_name, registry=registry, tree=tree)

    def _base(self) -> Section:
        return self._current

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def tree(self) -> SectionTree:
        return self._tree

    def root_section(self) -> ConfigurationSection:
        return ConfigurationSection(self._tree.root, self._registry)

    def load(self) -> None:
        """Re-read the backing file, discarding unsaved edits and resetting the cursor."""

        tree = read_file(self._file_name)
        self._tree = tree
        self._current = tree.root
        log_info("configuration_loaded", **make_event("/", self._file_name, {"sections": len(tree)}))

    def save(self) -> bool:
        """Write the tree back to the backing file when it has unsaved edits.

        Returns
        -------
        bool
            ``True`` when the file was written, ``False`` when nothing changed.
        """

        root = self._tree.root
        if not root.is_edited():
            log_debug("configuration_unchanged", **make_event("/", self._file_name))
            return False
        write_file(self._file_name, root)
        root.clear_edit_flag()
        log_info("configuration_saved", **make_event("/", self._file_name))
        return True

    def merge(self, file_name: str | Path) -> None:
        """Overlay the contents of *file_name* onto the whole tree."""

        merge_file(self._tree.root, file_name)

    def merge_commandline(self, argv: MutableSequence[str]) -> int:
        """Apply and remove ``-tag value`` pairs from *argv* against the current section."""

        return merge_commandline(self._current, argv)

    def write_to_stream(self, stream: ByteStream) -> None:
        """Send the file name and the whole tree to *stream*."""

        write_string(stream, self._file_name)
        write_section(stream, self._tree.root)
        log_info("stream_written", **make_event("/", self._file_name, {"sections": len(self._tree)}))

    @property
    def current_path(self) -> str:
        return self._current.path

    def set_current_section(self, path: str) -> None:
        """Move the cursor to *path*; raise ``SectionNotFound`` when it does not exist."""

        self._current = self._current.resolve(path)

    def current_section(self) -> ConfigurationSection:
        return ConfigurationSection(self._current, self._registry)

    def get_section(self, path: str) -> ConfigurationSection:
        """Return a cursor for *path* relative to the current section, creating it if needed."""

        return ConfigurationSection(self._current.resolve_or_create(path), self._registry)

    def list_entries(self) -> list[str]:
        """Return subsection names (suffixed with ``/``) followed by the tags of the current section."""

        entries = [f"{child.name}/" for child in self._current.subsections()]
        entries.extend(self._current.tags())
        return entries


__all__ = [
    "ConfigurationFile",
    "ConfigurationSection",
    "SectionValueAccess",
]
