from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given

from lib_section_config.adapters.text.codec import dumps, parse, quote, read_file, write_file
from lib_section_config.domain.errors import MalformedFile
from lib_section_config.domain.section import SectionTree
from tests.support import SECTION_SPEC, build_tree, structure, write_config

SAMPLE = """\
# device daemon settings
serverPort 8555

HIDDevice {
    deviceName "Logitech Dual Action"   # quoted because of spaces
    axisValueMappers (a0, a1)

    a0 {
        values (-1.0, -0.1, 0.1, 1.0)
    }
}
"""


def test_parse_sample_structure() -> None:
    tree = parse(SAMPLE, "daemon.cfg")
    root = tree.root
    assert root.retrieve_tag_value("serverPort") == "8555"
    assert root.retrieve_tag_value("HIDDevice/deviceName") == "Logitech Dual Action"
    assert root.retrieve_tag_value("HIDDevice/axisValueMappers") == "(a0, a1)"
    assert root.retrieve_tag_value("HIDDevice/a0/values") == "(-1.0, -0.1, 0.1, 1.0)"
    assert not root.is_edited()


def test_comment_markers_inside_quotes_are_kept() -> None:
    tree = parse('title "# not a comment" # a comment\n')
    assert tree.root.retrieve_tag_value("title") == "# not a comment"


def test_quoted_escapes() -> None:
    tree = parse('message "say \\"hi\\"\\n\\tback\\\\slash"\n')
    assert tree.root.retrieve_tag_value("message") == 'say "hi"\n\tback\\slash'


def test_bare_words_take_backslashes_literally() -> None:
    tree = parse("path C:\\temp\\file\n")
    assert tree.root.retrieve_tag_value("path") == "C:\\temp\\file"


def test_later_tag_overwrites_earlier() -> None:
    tree = parse("a 1\nb 2\na 3\n")
    assert list(tree.root.tag_values()) == [("a", "3"), ("b", "2")]


def test_blocks_on_one_line() -> None:
    tree = parse("empty { }\nouter { inner {\n x 1\n} }\n")
    assert tree.root.resolve("empty").tags() == []
    assert tree.root.retrieve_tag_value("outer/inner/x") == "1"


def test_unmatched_close_reports_line() -> None:
    text = "a 1\nb 2\nsection {\n  c 3\n}\n\n}\n"
    with pytest.raises(MalformedFile) as excinfo:
        parse(text, "broken.cfg")
    assert excinfo.value.line_number == 7
    assert excinfo.value.file_name == "broken.cfg"


def test_unclosed_block_reports_opening_line() -> None:
    with pytest.raises(MalformedFile) as excinfo:
        parse("a 1\nouter {\n  b 2\n", "open.cfg")
    assert excinfo.value.line_number == 2


@pytest.mark.parametrize(
    ("text", "line"),
    [
        ("tag\n", 1),
        ("a 1\ntag value {\n", 2),
        ("{\n}\n", 1),
        ('a "unterminated\n', 1),
        ('a 1\nb "bad \\q escape"\n', 2),
        ('"" {\n}\n', 1),
        ('"" value\n', 1),
    ],
)
def test_malformed_inputs(text: str, line: int) -> None:
    with pytest.raises(MalformedFile) as excinfo:
        parse(text)
    assert excinfo.value.line_number == line


def test_dumps_format() -> None:
    tree = SectionTree()
    root = tree.root
    root.store_tag_value("verbose", "true")
    root.store_tag_value("display/title", "Main window")
    root.store_tag_value("display/size/width", "1024")
    assert dumps(root) == (
        "verbose true\n"
        "\n"
        "display {\n"
        '\ttitle "Main window"\n'
        "\n"
        "\tsize {\n"
        "\t\twidth 1024\n"
        "\t}\n"
        "}\n"
    )


def test_quote_rule() -> None:
    assert quote("plain") == "plain"
    assert quote("") == '""'
    assert quote("a b") == '"a b"'
    assert quote("{") == '"{"'
    assert quote("#") == '"#"'
    assert quote("back\\slash") == '"back\\\\slash"'
    assert quote("line\nbreak") == '"line\\nbreak"'


@given(SECTION_SPEC)
def test_text_round_trip(spec) -> None:
    tree = build_tree(spec)
    reparsed = parse(dumps(tree.root))
    assert structure(reparsed.root) == structure(tree.root)


def test_file_round_trip(tmp_path: Path) -> None:
    tree = parse(SAMPLE)
    target = tmp_path / "out.cfg"
    write_file(target, tree.root)
    assert structure(read_file(target).root) == structure(tree.root)


def test_read_file_reports_file_name(tmp_path: Path) -> None:
    path = write_config(tmp_path, "bad.cfg", "a 1\n}\n")
    with pytest.raises(MalformedFile) as excinfo:
        read_file(path)
    assert excinfo.value.file_name == str(path)
    assert excinfo.value.line_number == 2


def test_read_file_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "binary.cfg"
    path.write_bytes(b"a 1\nb \xff\n")
    with pytest.raises(MalformedFile) as excinfo:
        read_file(path)
    assert excinfo.value.line_number == 2


def test_read_file_missing_propagates_os_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_file(tmp_path / "absent.cfg")


DEEP = 2_000


def test_deeply_nested_text_round_trip() -> None:
    path = "/".join(f"s{level}" for level in range(DEEP))
    text = "".join(f"s{level} {{\n" for level in range(DEEP)) + "x 1\n" + "}\n" * DEEP
    tree = parse(text)
    assert tree.root.retrieve_tag_value(f"{path}/x") == "1"
    assert len(tree) == DEEP + 1

    written = dumps(tree.root)
    assert written.splitlines()[DEEP] == "\t" * DEEP + "x 1"
    assert parse(written).root.retrieve_tag_value(f"{path}/x") == "1"


def test_deeply_nested_unclosed_block_reports_innermost_line() -> None:
    text = "".join(f"s{level} {{\n" for level in range(DEEP)) + "}\n"
    with pytest.raises(MalformedFile) as excinfo:
        parse(text)
    assert excinfo.value.line_number == DEEP - 1
