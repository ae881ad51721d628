"""CLI adapter for ``lib_section_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect and edit configuration files from the shell without
writing Python code: list sections, read and write tags, merge overlay files,
and apply ``-tag value`` overrides.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_list` / :func:`cli_get` / :func:`cli_dump` – read-only commands.
* :func:`cli_set` / :func:`cli_unset` / :func:`cli_merge` /
  :func:`cli_apply_args` – commands that save the file when it changed.
* :func:`main` – entry point used by ``console_scripts`` registration.

Configuration
-------------
Every file command takes ``--file``; the ``LIB_SECTION_CONFIG_FILE``
environment variable supplies it when the option is omitted.

System Role
-----------
The CLI lives in the outermost layer. It only talks to
:class:`lib_section_config.core.ConfigurationFile` and lets library errors
propagate so ``lib_cli_exit_tools`` renders them and picks the exit code.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.text.codec import dumps
from .core import ConfigurationFile

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_PASSTHROUGH_CONTEXT_SETTINGS = {"help_option_names": ["--help"], "ignore_unknown_options": True}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

FILE_ENVVAR: Final[str] = "LIB_SECTION_CONFIG_FILE"


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_section_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


_file_option = click.option(
    "--file",
    "file_name",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    envvar=FILE_ENVVAR,
    required=True,
    help=f"Configuration file to operate on (defaults to ${FILE_ENVVAR})",
)

_section_option = click.option(
    "--section",
    default=None,
    help="Section path to operate in (must exist)",
)


@click.group(
    help="Hierarchical section-based configuration file tool",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_section_config",
    message="lib_section_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_section_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_section_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_section_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("list", context_settings=CLICK_CONTEXT_SETTINGS)
@_file_option
@_section_option
def cli_list(file_name: Path, section: Optional[str]) -> None:
    """List subsections (suffixed with ``/``) and tags of a section.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> runner = CliRunner()
    >>> with runner.isolated_filesystem():
    ...     _ = Path("demo.cfg").write_text("verbose true\\nnet {\\n}\\n", encoding="utf-8")
    ...     result = runner.invoke(cli, ["list", "--file", "demo.cfg"])
    >>> result.output.split()
    ['net/', 'verbose']
    """

    config = _open(file_name, section)
    for entry in config.list_entries():
        click.echo(entry)


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@_file_option
@click.argument("tag_path")
@click.option("--default", "default", default=None, help="Value printed when the tag is missing")
def cli_get(file_name: Path, tag_path: str, default: Optional[str]) -> None:
    """Print the value stored at TAG_PATH.

    Without ``--default`` a missing tag is an error; with it the default is
    printed and the file is left untouched.
    """

    config = ConfigurationFile(file_name)
    if default is None:
        click.echo(config.retrieve_string(tag_path))
    else:
        click.echo(config.retrieve_string(tag_path, default))


@cli.command("set", context_settings=CLICK_CONTEXT_SETTINGS)
@_file_option
@click.argument("tag_path")
@click.argument("value")
def cli_set(file_name: Path, tag_path: str, value: str) -> None:
    """Store VALUE at TAG_PATH, creating missing sections, and save the file."""

    config = ConfigurationFile(file_name)
    config.store_string(tag_path, value)
    config.save()


@cli.command("unset", context_settings=CLICK_CONTEXT_SETTINGS)
@_file_option
@click.argument("tag_path")
def cli_unset(file_name: Path, tag_path: str) -> None:
    """Remove the tag at TAG_PATH (if present) and save the file."""

    config = ConfigurationFile(file_name)
    config.remove_tag(tag_path)
    config.save()


@cli.command("merge", context_settings=CLICK_CONTEXT_SETTINGS)
@_file_option
@click.argument(
    "sources",
    nargs=-1,
    required=True,
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
)
def cli_merge(file_name: Path, sources: Sequence[Path]) -> None:
    """Overlay SOURCES onto the file in order and save the result."""

    config = ConfigurationFile(file_name)
    for source in sources:
        config.merge(source)
    config.save()


@cli.command("apply-args", context_settings=_PASSTHROUGH_CONTEXT_SETTINGS)
@_file_option
@_section_option
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def cli_apply_args(file_name: Path, section: Optional[str], args: Sequence[str]) -> None:
    """Apply ``-tag value`` pairs from ARGS, save, and print leftover arguments as JSON.

    Separate the pairs from the command's own options with ``--``.
    """

    config = _open(file_name, section)
    remaining = list(args)
    config.merge_commandline(remaining)
    config.save()
    click.echo(json.dumps(remaining))


@cli.command("dump", context_settings=CLICK_CONTEXT_SETTINGS)
@_file_option
@_section_option
def cli_dump(file_name: Path, section: Optional[str]) -> None:
    """Print the normalised text of the file (or of one section's contents)."""

    config = _open(file_name, section)
    click.echo(dumps(config.current_section().section), nl=False)


def _open(file_name: Path, section: Optional[str]) -> ConfigurationFile:
    """Load *file_name* and move the cursor to *section* when one is given."""

    config = ConfigurationFile(file_name)
    if section:
        config.set_current_section(section)
    return config


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_section_config",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
