"""Application-layer merge policy.

Purpose
-------
Overlay one section tree onto another, or a flat list of ``-tag value``
command-line overrides onto a section. Merging is additive and overwriting:
entries that exist only in the target are never removed.

Contents
    - ``merge_sections``: recursive tree overlay driven by a simple loop.
    - ``merge_file``: parse a file into a scratch tree and overlay it.
    - ``merge_commandline``: consume ``-tag value`` pairs from an argument list
      in place.

System Role
-----------
Called by :class:`lib_section_config.core.ConfigurationFile` for ``merge``
and ``merge_commandline``; free of I/O apart from the file read delegated to
the text codec.
"""

from __future__ import annotations

from pathlib import Path
from typing import MutableSequence

from ..adapters.text.codec import read_file
from ..domain.section import Section
from ..observability import log_debug, log_info, make_event


def merge_sections(target: Section, source: Section) -> None:
    """Overlay *source* onto *target* section by section, tag by tag.

    Source subsections are visited in order and matched by name in the target
    (created when missing); source tags overwrite target tags of the same name.

    Examples
    --------
    >>> from lib_section_config.domain.section import SectionTree
    >>> target, source = SectionTree(), SectionTree()
    >>> target.root.store_tag_value("a/p", "1")
    >>> source.root.store_tag_value("a/p", "2")
    >>> source.root.store_tag_value("b/r", "4")
    >>> merge_sections(target.root, source.root)
    >>> target.root.retrieve_tag_value("a/p"), target.root.retrieve_tag_value("b/r")
    ('2', '4')
    """

    pending = [(target, source)]
    while pending:
        into, overlay = pending.pop()
        for tag, value in overlay.tag_values():
            into.add_tag_value(tag, value)
        children = [(_matching_subsection(into, child.name), child) for child in overlay.subsections()]
        pending.extend(reversed(children))


def _matching_subsection(section: Section, name: str) -> Section:
    """Return the first subsection called *name*, appending one when there is none.

    An appended subsection is marked edited so that empty sections brought in
    by the overlay are written on the next save.
    """

    found = section.find_subsection(name)
    if found is not None:
        return found
    created = section.add_subsection(name)
    created.mark_edited()
    return created


def merge_file(target: Section, file_name: str | Path) -> None:
    """Parse *file_name* into a scratch tree and overlay it onto *target*."""

    scratch = read_file(file_name)
    merge_sections(target, scratch.root)
    log_info("configuration_merged", **make_event(target.path, str(file_name), {"sections": len(scratch)}))


def merge_commandline(section: Section, argv: MutableSequence[str]) -> int:
    """Store ``-tag value`` pairs from *argv* into *section* and remove them.

    Tokens that do not form such a pair stay in *argv* in their original
    relative order. Returns the number of overrides applied.

    Examples
    --------
    >>> from lib_section_config.domain.section import SectionTree
    >>> root = SectionTree().root
    >>> argv = ["-verbose", "true", "run", "-level", "5"]
    >>> merge_commandline(root, argv)
    2
    >>> argv
    ['run']
    >>> root.retrieve_tag_value("level")
    '5'
    """

    remaining: list[str] = []
    applied = 0
    index = 0
    while index < len(argv):
        token = argv[index]
        if len(token) > 1 and token.startswith("-") and index + 1 < len(argv):
            section.store_tag_value(token[1:], argv[index + 1])
            log_debug("commandline_override", section=section.path, file=None, tag=token[1:])
            applied += 1
            index += 2
            continue
        remaining.append(token)
        index += 1
    argv[:] = remaining
    if applied:
        log_info("commandline_merged", **make_event(section.path, None, {"overrides": applied}))
    return applied
