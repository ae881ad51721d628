"""End-to-end CLI coverage for the commands exposed by lib_section_config.

The tests drive the Click group through ``CliRunner`` against real files in a
temporary directory so load, edit, and save behave exactly as in a shell.
"""

from __future__ import annotations

import json
from pathlib import Path

import lib_cli_exit_tools
from click.testing import CliRunner

from lib_section_config import TagNotFound, cli
from lib_section_config.domain.errors import SectionNotFound
from tests.support import write_config

SERVICE_CONFIG = """\
verbose true

net {
\thost example.org
\tport 4242
}
"""


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def _config(tmp_path: Path, body: str = SERVICE_CONFIG) -> Path:
    return write_config(tmp_path, "service.cfg", body)


def test_cli_list_root_and_section(tmp_path: Path) -> None:
    path = _config(tmp_path)
    result = _runner().invoke(cli.cli, ["list", "--file", str(path)])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["net/", "verbose"]

    result = _runner().invoke(cli.cli, ["list", "--file", str(path), "--section", "net"])
    assert result.output.splitlines() == ["host", "port"]


def test_cli_list_unknown_section_fails(tmp_path: Path) -> None:
    path = _config(tmp_path)
    result = _runner().invoke(cli.cli, ["list", "--file", str(path), "--section", "db"])
    assert result.exit_code != 0
    assert isinstance(result.exception, SectionNotFound)


def test_cli_file_from_environment(tmp_path: Path) -> None:
    path = _config(tmp_path)
    result = _runner().invoke(cli.cli, ["get", "net/port"], env={cli.FILE_ENVVAR: str(path)})
    assert result.exit_code == 0
    assert result.output.strip() == "4242"


def test_cli_get_missing_tag(tmp_path: Path) -> None:
    path = _config(tmp_path)
    result = _runner().invoke(cli.cli, ["get", "--file", str(path), "net/timeout"])
    assert result.exit_code != 0
    assert isinstance(result.exception, TagNotFound)

    result = _runner().invoke(cli.cli, ["get", "--file", str(path), "net/timeout", "--default", "30"])
    assert result.exit_code == 0
    assert result.output.strip() == "30"
    assert path.read_text(encoding="utf-8") == SERVICE_CONFIG


def test_cli_set_and_unset(tmp_path: Path) -> None:
    path = _config(tmp_path)
    result = _runner().invoke(cli.cli, ["set", "--file", str(path), "db/name", "main store"])
    assert result.exit_code == 0
    assert 'name "main store"' in path.read_text(encoding="utf-8")

    result = _runner().invoke(cli.cli, ["unset", "--file", str(path), "verbose"])
    assert result.exit_code == 0
    assert "verbose" not in path.read_text(encoding="utf-8")


def test_cli_merge_applies_sources_in_order(tmp_path: Path) -> None:
    path = _config(tmp_path)
    first = write_config(tmp_path, "first.cfg", "net {\n port 1\n}\n")
    second = write_config(tmp_path, "second.cfg", "net {\n port 2\n}\nextra yes\n")
    result = _runner().invoke(cli.cli, ["merge", "--file", str(path), str(first), str(second)])
    assert result.exit_code == 0
    text = path.read_text(encoding="utf-8")
    assert "\tport 2\n" in text
    assert "extra yes\n" in text
    assert "\thost example.org\n" in text


def test_cli_apply_args_prints_leftovers(tmp_path: Path) -> None:
    path = _config(tmp_path)
    result = _runner().invoke(
        cli.cli,
        ["apply-args", "--file", str(path), "--section", "net", "--", "-port", "8080", "run", "-x"],
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == ["run", "-x"]
    assert "\tport 8080\n" in path.read_text(encoding="utf-8")


def test_cli_apply_args_without_pairs_keeps_file(tmp_path: Path) -> None:
    path = _config(tmp_path, "# keep this comment\n" + SERVICE_CONFIG)
    result = _runner().invoke(cli.cli, ["apply-args", "--file", str(path), "--", "run"])
    assert result.exit_code == 0
    assert json.loads(result.output) == ["run"]
    assert path.read_text(encoding="utf-8").startswith("# keep this comment")


def test_cli_dump_normalises(tmp_path: Path) -> None:
    path = _config(tmp_path, "net { port 4242\n host example.org\n}\nverbose   true # inline\n")
    result = _runner().invoke(cli.cli, ["dump", "--file", str(path)])
    assert result.exit_code == 0
    assert result.output == "verbose true\n\nnet {\n\tport 4242\n\thost example.org\n}\n"

    result = _runner().invoke(cli.cli, ["dump", "--file", str(path), "--section", "net"])
    assert result.output == "port 4242\nhost example.org\n"


def test_cli_missing_file_is_rejected(tmp_path: Path) -> None:
    result = _runner().invoke(cli.cli, ["list", "--file", str(tmp_path / "absent.cfg")])
    assert result.exit_code == 2


def test_cli_info_handles_missing_metadata(monkeypatch) -> None:
    """`cli info` must degrade gracefully when package metadata is unavailable."""

    def _raise_pkg_not_found(*_args, **_kwargs):
        raise cli.metadata.PackageNotFoundError()

    monkeypatch.setattr(cli.metadata, "metadata", _raise_pkg_not_found)
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "metadata unavailable" in result.output


def test_cli_main_restores_traceback_flag(tmp_path: Path) -> None:
    """`cli main` should restore lib_cli_exit_tools tracebacks after execution."""

    path = _config(tmp_path)
    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    exit_code = cli.main(["--traceback", "get", "--file", str(path), "verbose"], restore_traceback=True)
    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous_traceback


def test_cli_main_reports_library_errors(tmp_path: Path) -> None:
    path = _config(tmp_path, "broken {\n")
    exit_code = cli.main(["list", "--file", str(path)])
    assert exit_code != 0


def test_cli_merge_keeps_added_empty_section(tmp_path: Path) -> None:
    path = _config(tmp_path)
    overlay = write_config(tmp_path, "overlay.cfg", "cache {\n}\n")
    result = _runner().invoke(cli.cli, ["merge", "--file", str(path), str(overlay)])
    assert result.exit_code == 0
    assert path.read_text(encoding="utf-8").endswith("}\n\ncache {\n}\n")
