"""CLI adapter for ``lib_app_tools`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect properties files and file selections from a shell
without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_properties` – initializes the properties manager from a file,
  applies overrides and prints the resolved properties as JSON.
* :func:`cli_get` – prints one resolved property.
* :func:`cli_files` – prints the files selected by a glob or regex pattern.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It drives the public application API
only. Each invocation is its own process, which matches the once-per-process
lifecycle of :class:`~lib_app_tools.application.properties.PropertiesManager`.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.properties.default import PropertiesFileLoader
from .application.file_list import FileList
from .application.properties import PropertiesManager
from .domain.keys import FixedKeySet
from .observability import trace_scope

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

_EXISTING_FILE = click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True)


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_app_tools")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Properties manager and file list utilities",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_app_tools",
    message="lib_app_tools version %(version)s",
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
        ``lib_cli_exit_tools.config.traceback_force_color``. Binds a fresh
        trace identifier for the rest of the invocation.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    ctx.obj["trace_id"] = ctx.with_resource(trace_scope())
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_app_tools")
    except metadata.PackageNotFoundError:
        click.echo("lib_app_tools (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_app_tools')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("properties", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("defaults_file", type=_EXISTING_FILE)
@click.option(
    "--key",
    "keys",
    multiple=True,
    help="Legal property key (repeatable); defaults to the keys found in DEFAULTS_FILE",
)
@click.option(
    "--override",
    "overrides",
    multiple=True,
    type=_EXISTING_FILE,
    help="Properties file merged over the defaults, in order (repeatable)",
)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_properties(
    defaults_file: Path,
    keys: Sequence[str],
    overrides: Sequence[Path],
    indent: Optional[int],
) -> None:
    """Print the properties resolved from DEFAULTS_FILE and any overrides as JSON."""

    manager = _initialize(defaults_file, keys)
    for override in overrides:
        manager.load(override)
    click.echo(json.dumps(dict(sorted(manager.snapshot().items())), indent=indent))


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("defaults_file", type=_EXISTING_FILE)
@click.argument("key")
@click.option(
    "--key",
    "keys",
    multiple=True,
    help="Legal property key (repeatable); defaults to the keys found in DEFAULTS_FILE",
)
@click.option(
    "--override",
    "overrides",
    multiple=True,
    type=_EXISTING_FILE,
    help="Properties file merged over the defaults, in order (repeatable)",
)
def cli_get(defaults_file: Path, key: str, keys: Sequence[str], overrides: Sequence[Path]) -> None:
    """Print the value of KEY resolved from DEFAULTS_FILE and any overrides."""

    manager = _initialize(defaults_file, keys)
    for override in overrides:
        manager.load(override)
    click.echo(manager.get(key))


@cli.command("files", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument(
    "root",
    required=False,
    default=".",
    type=click.Path(path_type=Path, exists=True, file_okay=False, dir_okay=True, readable=True),
)
@click.option("--glob", "glob_pattern", default=None, help="Glob pattern matched against full paths")
@click.option("--regex", "regex_pattern", default=None, help="Regular expression searched in full paths")
@click.option(
    "--sort/--no-sort",
    default=False,
    help="Sort the result instead of keeping visitation order",
    show_default=True,
)
def cli_files(root: Path, glob_pattern: Optional[str], regex_pattern: Optional[str], sort: bool) -> None:
    """Print the files below ROOT matching --glob or --regex as a JSON array."""

    if (glob_pattern is None) == (regex_pattern is None):
        raise click.UsageError("Pass exactly one of --glob or --regex.")
    if glob_pattern is not None:
        files = FileList.from_glob(glob_pattern, root)
    else:
        files = FileList.from_regex(regex_pattern, root)  # type: ignore[arg-type]
    paths = [str(path) for path in files.result_list()]
    if sort:
        paths.sort()
    click.echo(json.dumps(paths, indent=2))


def _initialize(defaults_file: Path, keys: Sequence[str]) -> PropertiesManager:
    """Initialize the process-wide manager, deriving legal keys from the file when none are given."""

    if keys:
        key_set = FixedKeySet.from_iterable(keys)
    else:
        key_set = FixedKeySet.from_iterable(PropertiesFileLoader().load(defaults_file))
    return PropertiesManager.initialize_from_file(key_set, defaults_file)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_app_tools",
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
