"""Text codec: parse configuration files into section trees and write them back.

Purpose
-------
Translate between the human-readable configuration format and
:class:`~lib_section_config.domain.section.SectionTree` instances.

Grammar
-------
A section body is a sequence of entries, each either a subsection block or a
tag/value line::

    # comment
    display {
        width 1024
        title "Main window"
    }
    verbose true

* ``#`` outside a quoted string starts a comment that runs to the end of the
  line.
* Names, tags, and values are bare words or double-quoted strings. Strings
  that are empty or contain whitespace, ``{``, ``}``, ``#``, ``"`` or ``\\``
  are written quoted; inside quotes ``\\\\``, ``\\"``, ``\\n``, ``\\t`` and
  ``\\r`` are the only escapes. Bare words take backslashes literally.
* Several bare words after a tag are joined with one space.
* Indentation is cosmetic.

Contents
--------
* :func:`parse` – recursive-descent parser producing a fresh tree.
* :func:`read_file` – decode and parse a file, reporting its name in errors.
* :func:`dumps` – deterministic writer (tags first, then subsection blocks).
* :func:`write_file` – write :func:`dumps` output to disk.
* :func:`quote` – quoting rule shared by the writer and the tests.

System Role
-----------
Used by :class:`lib_section_config.core.ConfigurationFile` for ``load`` and
``save`` and by :func:`lib_section_config.application.merge.merge_file` to
read overlay files.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ...domain.errors import MalformedFile
from ...domain.section import Section, SectionTree
from ...observability import log_debug, log_error

_WORD: Final[str] = "word"
_QUOTED: Final[str] = "quoted"
_OPEN: Final[str] = "{"
_CLOSE: Final[str] = "}"
_NEWLINE: Final[str] = "newline"
_EOF: Final[str] = "eof"

_ESCAPES: Final[dict[str, str]] = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "r": "\r"}
_ESCAPED_CHARS: Final[dict[str, str]] = {char: "\\" + code for code, char in _ESCAPES.items()}
_DELIMITERS: Final[frozenset[str]] = frozenset('{}#"')
_NEEDS_QUOTES: Final[frozenset[str]] = _DELIMITERS | {"\\"}

_INDENT: Final[str] = "\t"


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    text: str
    line: int


def quote(text: str) -> str:
    """Return *text* as a bare word, or quoted and escaped when it must be.

    Examples
    --------
    >>> quote("1024")
    '1024'
    >>> quote("Main window")
    '"Main window"'
    >>> quote('say "hi"')
    '"say \\\\"hi\\\\""'
    >>> quote("")
    '""'
    """

    if text and not any(char.isspace() or char in _NEEDS_QUOTES for char in text):
        return text
    escaped = "".join(_ESCAPED_CHARS.get(char, char) for char in text)
    return f'"{escaped}"'


def parse(text: str, file_name: str = "<string>") -> SectionTree:
    """Parse *text* into a new :class:`SectionTree` with clear edit flags.

    Raises
    ------
    MalformedFile
        On unmatched braces, unterminated blocks or strings, and stray tokens.

    Examples
    --------
    >>> tree = parse('net {\\n  host "example.org"\\n}\\nverbose true\\n')
    >>> tree.root.retrieve_tag_value("net/host")
    'example.org'
    >>> parse("}\\n", "demo.cfg")
    Traceback (most recent call last):
    ...
    lib_section_config.domain.errors.MalformedFile: demo.cfg:1: unmatched '}'
    """

    tree = SectionTree()
    _Parser(text, file_name).parse_into(tree.root)
    tree.root.clear_edit_flag()
    return tree


def read_file(path: str | Path) -> SectionTree:
    """Read and parse the configuration file at *path*.

    ``OSError`` (for example a missing file) propagates unchanged; undecodable
    bytes are reported as :class:`MalformedFile` on the offending line.
    """

    file_name = str(path)
    payload = Path(path).read_bytes()
    log_debug("config_file_read", section=None, file=file_name, size=len(payload))
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        line = payload.count(b"\n", 0, exc.start) + 1
        log_error("configuration_invalid", section=None, file=file_name, line=line, error=str(exc))
        raise MalformedFile("invalid UTF-8 data", line, file_name) from exc
    try:
        tree = parse(text, file_name)
    except MalformedFile as exc:
        log_error("configuration_invalid", section=None, file=file_name, line=exc.line_number, error=exc.message)
        raise
    log_debug("config_file_parsed", section=None, file=file_name, sections=len(tree))
    return tree


def dumps(section: Section) -> str:
    """Serialise the contents of *section* (not its own name) to text.

    Tags come first in insertion order, followed by one braced block per
    subsection in insertion order.

    Examples
    --------
    >>> tree = SectionTree()
    >>> tree.root.store_tag_value("verbose", "true")
    >>> tree.root.store_tag_value("net/host", "example.org")
    >>> dumps(tree.root).splitlines()
    ['verbose true', '', 'net {', '\\thost example.org', '}']
    """

    lines: list[str] = []
    _write_lines(section, lines)
    return "".join(f"{line}\n" for line in lines)


def write_file(path: str | Path, section: Section) -> None:
    """Write the text form of *section* to *path* (UTF-8)."""

    text = dumps(section)
    Path(path).write_text(text, encoding="utf-8")
    log_debug("config_file_written", section=section.path, file=str(path), size=len(text))


def _write_lines(section: Section, lines: list[str]) -> None:
    """Append the lines of *section*'s contents, walking nested blocks with an explicit stack.

    A ``None`` entry on the stack closes the block opened at its level.
    """

    _write_tags(section, 0, lines)
    pending: list[tuple[Section | None, int]] = [(child, 0) for child in _reversed_children(section)]
    while pending:
        child, level = pending.pop()
        indent = _INDENT * level
        if child is None:
            lines.append(f"{indent}}}")
            continue
        if lines and not lines[-1].endswith("{"):
            lines.append("")
        lines.append(f"{indent}{quote(child.name)} {{")
        _write_tags(child, level + 1, lines)
        pending.append((None, level))
        pending.extend((grandchild, level + 1) for grandchild in _reversed_children(child))


def _write_tags(section: Section, level: int, lines: list[str]) -> None:
    indent = _INDENT * level
    for tag, value in section.tag_values():
        lines.append(f"{indent}{quote(tag)} {quote(value)}")


def _reversed_children(section: Section) -> list[Section]:
    return list(section.subsections())[::-1]


class _Parser:
    """Recursive-descent parser over the token list of one text.

    Nesting is tracked with an explicit stack of open blocks; the depth of a
    file is not limited by the interpreter's recursion limit.
    """

    def __init__(self, text: str, file_name: str) -> None:
        self._file_name = file_name
        self._tokens = _Tokenizer(text, file_name).tokens()
        self._position = 0

    def parse_into(self, section: Section) -> None:
        # (section, line of its opening brace); the outermost body has no brace
        open_blocks: list[tuple[Section, int | None]] = [(section, None)]
        while True:
            current, opened_at = open_blocks[-1]
            token = self._next()
            if token.kind == _NEWLINE:
                continue
            if token.kind == _EOF:
                if opened_at is not None:
                    raise self._error(f"section {current.name!r} is never closed", opened_at)
                return
            if token.kind == _CLOSE:
                if opened_at is None:
                    raise self._error("unmatched '}'", token.line)
                open_blocks.pop()
                continue
            if token.kind == _OPEN:
                raise self._error("missing section name before '{'", token.line)
            opened = self._parse_entry(current, token)
            if opened is not None:
                open_blocks.append((opened, token.line))

    def _peek(self) -> _Token:
        return self._tokens[self._position]

    def _next(self) -> _Token:
        token = self._tokens[self._position]
        if token.kind != _EOF:
            self._position += 1
        return token

    def _error(self, message: str, line: int) -> MalformedFile:
        return MalformedFile(message, line, self._file_name)

    def _parse_entry(self, section: Section, name: _Token) -> Section | None:
        """Parse one entry of *section*; return the subsection when the entry opens a block."""

        if self._peek().kind == _OPEN:
            self._next()
            if not name.text:
                raise self._error("empty section name", name.line)
            return section.add_subsection(name.text)

        words: list[str] = []
        while self._peek().kind in (_WORD, _QUOTED):
            words.append(self._next().text)
        end = self._peek()
        if end.kind in (_OPEN, _CLOSE):
            raise self._error(f"unquoted {end.text!r} in value of tag {name.text!r}", end.line)
        if not words:
            raise self._error(f"missing value for tag {name.text!r}", name.line)
        if not name.text:
            raise self._error("empty tag name", name.line)
        section.add_tag_value(name.text, " ".join(words))
        return None


class _Tokenizer:
    """Split configuration text into tokens, tracking 1-based line numbers."""

    def __init__(self, text: str, file_name: str) -> None:
        self._text = text
        self._file_name = file_name
        self._position = 0
        self._line = 1

    def tokens(self) -> list[_Token]:
        tokens: list[_Token] = []
        text = self._text
        length = len(text)
        while self._position < length:
            char = text[self._position]
            if char == "\n":
                tokens.append(_Token(_NEWLINE, char, self._line))
                self._line += 1
                self._position += 1
            elif char.isspace():
                self._position += 1
            elif char == "#":
                end = text.find("\n", self._position)
                self._position = length if end < 0 else end
            elif char in (_OPEN, _CLOSE):
                tokens.append(_Token(char, char, self._line))
                self._position += 1
            elif char == '"':
                tokens.append(_Token(_QUOTED, self._read_quoted(), self._line))
            else:
                tokens.append(_Token(_WORD, self._read_word(), self._line))
        tokens.append(_Token(_EOF, "", self._line))
        return tokens

    def _read_word(self) -> str:
        text = self._text
        start = self._position
        while self._position < len(text):
            char = text[self._position]
            if char.isspace() or char in _DELIMITERS:
                break
            self._position += 1
        return text[start : self._position]

    def _read_quoted(self) -> str:
        text = self._text
        self._position += 1
        chars: list[str] = []
        while self._position < len(text):
            char = text[self._position]
            if char == '"':
                self._position += 1
                return "".join(chars)
            if char == "\n":
                break
            if char == "\\":
                code = text[self._position + 1 : self._position + 2]
                if code not in _ESCAPES:
                    raise MalformedFile(f"invalid escape sequence '\\{code}'", self._line, self._file_name)
                chars.append(_ESCAPES[code])
                self._position += 2
                continue
            chars.append(char)
            self._position += 1
        raise MalformedFile("unterminated quoted string", self._line, self._file_name)
