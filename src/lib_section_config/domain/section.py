"""Section tree: the in-memory shape of a configuration file.

Purpose
-------
Model the hierarchy of named sections, each owning an ordered
:class:`~lib_section_config.domain.values.TagValueStore` and an ordered list of
subsections, together with the path resolution rules every other component
relies on. The module contains no I/O.

Contents
--------
* :class:`SectionTree` – arena owning every section node, addressed by stable
  integer indices.
* :class:`Section` – lightweight handle ``(tree, index)`` exposing the tree
  operations (subsection creation, tag storage, path resolution, edit flags).

Path syntax
-----------
Components are separated by ``/``. A leading ``/`` resolves from the root,
``..`` moves to the parent (staying put at the root), and empty or ``.``
components are ignored. For tag paths the final component names the tag.

System Role
-----------
The text and stream codecs build trees through :meth:`SectionTree.root` and
:meth:`Section.add_subsection`; the merge engine and the
:class:`lib_section_config.core.ConfigurationFile` facade only use the
public handle operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .errors import SectionNotFound, TagNotFound
from .values import TagValueStore


@dataclass(slots=True)
class _SectionNode:
    """Arena slot holding one section's data."""

    name: str
    parent: int | None
    children: list[int] = field(default_factory=list)
    values: TagValueStore = field(default_factory=TagValueStore)
    edited: bool = False


class SectionTree:
    """Own every section of one configuration tree.

    Why
    ----
    Parent back-references and child lists are plain indices into one list, so
    the tree needs no manual lifetime management and parent access stays O(1).

    Examples
    --------
    >>> tree = SectionTree()
    >>> net = tree.root.add_subsection("net")
    >>> net.path
    '/net'
    >>> len(tree)
    2
    """

    __slots__ = ("_nodes",)

    def __init__(self, root_name: str = "") -> None:
        self._nodes: list[_SectionNode] = [_SectionNode(root_name, None)]

    @property
    def root(self) -> Section:
        return Section(self, 0)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"SectionTree(sections={len(self._nodes)})"

    def _node(self, index: int) -> _SectionNode:
        return self._nodes[index]

    def _append_child(self, parent: int, name: str) -> int:
        index = len(self._nodes)
        self._nodes.append(_SectionNode(name, parent))
        self._nodes[parent].children.append(index)
        return index

    def _find_child(self, parent: int, name: str) -> int | None:
        for child in self._nodes[parent].children:
            if self._nodes[child].name == name:
                return child
        return None


class Section:
    """Handle addressing one section of a :class:`SectionTree`.

    Two handles compare equal when they address the same node of the same
    tree, so identity checks survive repeated lookups.

    Examples
    --------
    >>> root = SectionTree().root
    >>> root.store_tag_value("net/host/name", "localhost")
    >>> root.retrieve_tag_value("/net/host/name")
    'localhost'
    >>> root.resolve_or_create("net/host") == root.resolve("net/host")
    True
    """

    __slots__ = ("_tree", "_index")

    def __init__(self, tree: SectionTree, index: int) -> None:
        self._tree = tree
        self._index = index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Section):
            return NotImplemented
        return self._tree is other._tree and self._index == other._index

    def __hash__(self) -> int:
        return hash((id(self._tree), self._index))

    def __repr__(self) -> str:
        return f"Section({self.path!r})"

    @property
    def _node(self) -> _SectionNode:
        return self._tree._node(self._index)

    @property
    def tree(self) -> SectionTree:
        return self._tree

    @property
    def name(self) -> str:
        return self._node.name

    @property
    def parent(self) -> Section | None:
        parent = self._node.parent
        return None if parent is None else Section(self._tree, parent)

    @property
    def path(self) -> str:
        """Absolute ``/``-joined path from the root to this section (root is ``/``)."""

        names: list[str] = []
        index: int | None = self._index
        while index is not None:
            node = self._tree._node(index)
            if node.parent is not None:
                names.append(node.name)
            index = node.parent
        return "/" + "/".join(reversed(names))

    def subsections(self) -> Iterator[Section]:
        """Yield direct subsections in insertion order."""

        for child in list(self._node.children):
            yield Section(self._tree, child)

    def find_subsection(self, name: str) -> Section | None:
        """Return the first direct subsection called *name*, or ``None``."""

        child = self._tree._find_child(self._index, name)
        return None if child is None else Section(self._tree, child)

    def tag_values(self) -> Iterator[tuple[str, str]]:
        """Yield ``(tag, value)`` pairs in insertion order."""

        return self._node.values.items()

    def tags(self) -> list[str]:
        return self._node.values.tags()

    def has_tag(self, tag: str) -> bool:
        return tag in self._node.values

    # -- mutation -----------------------------------------------------------

    def add_subsection(self, name: str) -> Section:
        """Append a new empty subsection; sibling names are not checked."""

        if not name:
            raise ValueError("Section names must not be empty")
        return Section(self._tree, self._tree._append_child(self._index, name))

    def add_tag_value(self, tag: str, value: str) -> None:
        """Overwrite *tag* in place or append it, marking this section edited."""

        self._node.values.set(tag, value)
        self.mark_edited()

    def remove_tag(self, tag: str) -> None:
        """Remove *tag*; does nothing when the tag does not exist."""

        if self._node.values.remove(tag):
            self.mark_edited()

    def is_edited(self) -> bool:
        """Return ``True`` when this section or any descendant has unsaved changes."""

        pending = [self._index]
        while pending:
            node = self._tree._node(pending.pop())
            if node.edited:
                return True
            pending.extend(node.children)
        return False

    def clear_edit_flag(self) -> None:
        """Clear the edited flag of this section and all of its descendants."""

        pending = [self._index]
        while pending:
            node = self._tree._node(pending.pop())
            node.edited = False
            pending.extend(node.children)

    def mark_edited(self) -> None:
        """Mark this section and every ancestor as having unsaved changes."""

        index: int | None = self._index
        while index is not None:
            node = self._tree._node(index)
            node.edited = True
            index = node.parent

    # -- navigation ---------------------------------------------------------

    def resolve(self, path: str) -> Section:
        """Return the section reached by *path*; raise :class:`SectionNotFound` if absent."""

        return self._walk(path, create=False)

    def resolve_or_create(self, path: str) -> Section:
        """Return the section reached by *path*, creating missing sections on the way."""

        return self._walk(path, create=True)

    def _walk(self, path: str, *, create: bool) -> Section:
        index = 0 if path.startswith("/") else self._index
        components = path.split("/")
        for position, component in enumerate(components):
            if component in ("", "."):
                continue
            if component == "..":
                parent = self._tree._node(index).parent
                if parent is not None:
                    index = parent
                continue
            child = self._tree._find_child(index, component)
            if child is None:
                if not create:
                    missing = [part for part in components[position:] if part not in ("", ".")]
                    raise SectionNotFound(_join(Section(self._tree, index).path, missing))
                child = self._tree._append_child(index, component)
            index = child
        return Section(self._tree, index)

    # -- tag access ---------------------------------------------------------

    def retrieve_tag_value(self, path: str) -> str:
        """Return the value at tag *path*; raise :class:`TagNotFound` when missing."""

        section_path, tag = split_tag_path(path)
        try:
            section = self.resolve(section_path)
        except SectionNotFound as exc:
            raise TagNotFound(tag, exc.path) from exc
        value = section._node.values.get(tag)
        if value is None:
            raise TagNotFound(tag, section.path)
        return value

    def lookup_tag_value(self, path: str, default: str) -> str:
        """Return the value at tag *path*, or *default* without touching the tree."""

        try:
            return self.retrieve_tag_value(path)
        except TagNotFound:
            return default

    def ensure_tag_value(self, path: str, default: str) -> str:
        """Return the value at tag *path*, storing *default* there when it is missing.

        Missing sections along *path* are created as well.
        """

        section_path, tag = split_tag_path(path)
        section = self.resolve_or_create(section_path)
        value = section._node.values.get(tag)
        if value is None:
            section.add_tag_value(tag, default)
            return default
        return value

    def store_tag_value(self, path: str, value: str) -> None:
        """Store *value* at tag *path*, creating missing sections and the tag."""

        section_path, tag = split_tag_path(path)
        self.resolve_or_create(section_path).add_tag_value(tag, value)


def split_tag_path(path: str) -> tuple[str, str]:
    """Split a tag path into its section part and the tag name.

    Examples
    --------
    >>> split_tag_path("net/host/port")
    ('net/host', 'port')
    >>> split_tag_path("/verbose")
    ('/', 'verbose')
    >>> split_tag_path("level")
    ('', 'level')
    """

    section_path, separator, tag = path.rpartition("/")
    if separator and not section_path:
        section_path = "/"
    return section_path, tag


def _join(prefix: str, parts: list[str]) -> str:
    if not parts:
        return prefix
    return prefix.rstrip("/") + "/" + "/".join(parts)
