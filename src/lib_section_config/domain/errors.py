"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the section tree, the codecs, the
merge engine, and consuming applications. The hierarchy lives in the domain
layer so outer layers may depend on it without creating import cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration-related
  issues.
* :class:`MalformedFile` – parsing problems while reading configuration text.
* :class:`SectionNotFound` – strict path resolution hit a missing section.
* :class:`TagNotFound` – strict tag lookup hit a missing section or tag.
* :class:`DecodingFailure` – a value cannot be converted to or from its
  stored string form.
* :class:`StreamTruncated` – a byte stream ended early or carried data that
  cannot form a serialised tree.

System Role
-----------
None of these errors are recovered internally. Callers catch
:class:`ConfigError` to handle every library failure uniformly, or one of the
subclasses when they need the carried details (line numbers, paths, tags).
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_section_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class MalformedFile(ConfigError):
    """Raised when configuration text cannot be parsed into a section tree.

    Why
    ----
    Operators need the file name and the 1-based line number to fix the file
    by hand.

    Attributes
    ----------
    message:
        Human readable description of the problem.
    line_number:
        1-based line on which the problem was detected.
    file_name:
        Name of the file (or pseudo file) being parsed.

    Examples
    --------
    >>> str(MalformedFile("unmatched '}'", 7, "demo.cfg"))
    "demo.cfg:7: unmatched '}'"
    """

    def __init__(self, message: str, line_number: int, file_name: str) -> None:
        super().__init__(f"{file_name}:{line_number}: {message}")
        self.message = message
        self.line_number = line_number
        self.file_name = file_name


class SectionNotFound(ConfigError):
    """Raised by strict path resolution when a section does not exist.

    Examples
    --------
    >>> SectionNotFound("/net/host").path
    '/net/host'
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"Configuration section {path} not found")
        self.path = path


class TagNotFound(ConfigError):
    """Raised by strict tag lookup when the section or the tag is missing.

    Attributes
    ----------
    tag:
        Name of the tag that was requested.
    section_path:
        Absolute path of the section that was searched.
    """

    def __init__(self, tag: str, section_path: str) -> None:
        super().__init__(f"Tag {tag} not found in configuration section {section_path}")
        self.tag = tag
        self.section_path = section_path


class DecodingFailure(ConfigError):
    """Raised when a value cannot be converted to or from its string form.

    Coders raise it for strings that are not a valid encoding of the requested
    type; the typed accessors also raise it when a value (or default) cannot
    be encoded by the selected coder.

    Why
    ----
    Keep decoding problems distinguishable from lookup failures so callers can
    report "present but wrong" separately from "absent".
    """


class StreamTruncated(ConfigError):
    """Raised when a byte stream cannot supply a complete, well-formed serialised tree.

    Covers streams that end early as well as streams carrying invalid data
    (undecodable UTF-8, empty tag or section names).
    """
