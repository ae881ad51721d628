"""Shared helpers for building and comparing section trees in tests."""

from __future__ import annotations

from pathlib import Path

from hypothesis import strategies as st

from lib_section_config.domain.section import Section, SectionTree

TEXT_CHARS = st.characters(blacklist_categories=("Cs",))
NAME = st.text(alphabet=TEXT_CHARS, min_size=1, max_size=6)
VALUE = st.text(alphabet=TEXT_CHARS, max_size=10)

SECTION_SPEC = st.recursive(
    st.tuples(st.dictionaries(NAME, VALUE, max_size=3), st.just(())),
    lambda children: st.tuples(
        st.dictionaries(NAME, VALUE, max_size=3),
        st.lists(st.tuples(NAME, children), max_size=3, unique_by=lambda child: child[0]).map(tuple),
    ),
    max_leaves=8,
)


def build_tree(spec: tuple) -> SectionTree:
    """Materialise a ``(tags, children)`` spec drawn from :data:`SECTION_SPEC`."""

    tree = SectionTree()
    _fill(tree.root, spec)
    tree.root.clear_edit_flag()
    return tree


def _fill(section: Section, spec: tuple) -> None:
    tags, children = spec
    for tag, value in tags.items():
        section.add_tag_value(tag, value)
    for name, child_spec in children:
        _fill(section.add_subsection(name), child_spec)


def structure(section: Section) -> tuple:
    """Return ``(name, tag pairs, child structures)`` for structural comparisons."""

    return (
        section.name,
        tuple(section.tag_values()),
        tuple(structure(child) for child in section.subsections()),
    )


def write_config(directory: Path, name: str, body: str) -> Path:
    path = directory / name
    path.write_text(body, encoding="utf-8")
    return path
