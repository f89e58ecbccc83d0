"""CLI adapter for ``lib_yaml_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose path queries and layered merging on the command line so operators can
inspect what a service will read without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_get` – evaluates a path expression and prints JSON.
* :func:`cli_merge` – merges resources with explicit actions and prints the result.
* :func:`cli_properties` – prints the configuration as ``key=value`` lines.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It invokes the composition root
(:mod:`lib_yaml_config.core`) and never reaches into adapter implementation
details directly. ``lib_cli_exit_tools`` centralises the exit code strategy so
all commands behave consistently across shells and CI.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.config import Config
from .application.flatten import flatten
from .application.merge import MergeAction
from .core import resolve_layered_configs, resolve_multi_config
from .domain.tree import NodeKind, kind_of, scalar_text

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

ACTION_CHOICES: Final[tuple[str, ...]] = tuple(action.value for action in MergeAction)
FORMAT_CHOICES: Final[tuple[str, ...]] = ("yaml", "json")


def _resolve_version() -> str:
    """Return the installed package version with sensible fallbacks.

    Why
        ``click.version_option`` requires a string at decoration time. Fetching
        metadata lazily avoids hard-coding the version and keeps editable installs
        working without additional wiring.
    """

    try:
        return metadata.version("lib_yaml_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="YAML configuration query and merge tool",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_yaml_config",
    message="lib_yaml_config version %(version)s",
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
        meta = metadata.metadata("lib_yaml_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_yaml_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_yaml_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path")
@click.option(
    "--config",
    "-c",
    "resources",
    multiple=True,
    required=True,
    help="Configuration file or glob (repeatable; later files take precedence)",
)
@click.option(
    "--multi-config/--layered",
    default=False,
    help="Concatenate the files into one document instead of merging them as layers",
)
@click.option("--all", "all_values", is_flag=True, default=False, help="Print every match as a JSON list")
@click.option(
    "--extrapolate/--no-extrapolate",
    default=True,
    show_default=True,
    help="Substitute ${...} references in the printed values",
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
@click.option("--yaml12", is_flag=True, default=False, help="Parse with the YAML 1.2 core schema")
def cli_get(
    path: str,
    resources: Sequence[str],
    multi_config: bool,
    all_values: bool,
    extrapolate: bool,
    indent: Optional[int],
    yaml12: bool,
) -> None:
    """Print the value at PATH as JSON.

    Paths use the query syntax of the library, for example
    ``servers[name=primary].port`` or ``'*.port'``. With ``--all`` every
    match is printed as a JSON list; otherwise the path must match exactly one
    value.
    """

    config = _load(resources, multi_config=multi_config, extrapolate=extrapolate, yaml12=yaml12)
    value = config.get_multiple(path) if all_values else config.get(path)
    click.echo(_to_json(value, indent))


@cli.command("merge", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("resources", nargs=-1, required=True)
@click.option(
    "--default-action",
    type=click.Choice(ACTION_CHOICES, case_sensitive=False),
    default=MergeAction.UNION.value,
    show_default=True,
    help="Collision policy for maps and scalars",
)
@click.option(
    "--list-action",
    type=click.Choice(ACTION_CHOICES, case_sensitive=False),
    default=MergeAction.KEEP_EXTRA.value,
    show_default=True,
    help="Collision policy for lists",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default="yaml",
    show_default=True,
    help="Output format",
)
@click.option(
    "--extrapolate/--no-extrapolate",
    default=False,
    show_default=True,
    help="Substitute ${...} references before printing",
)
@click.option("--yaml12", is_flag=True, default=False, help="Parse with the YAML 1.2 core schema")
def cli_merge(
    resources: Sequence[str],
    default_action: str,
    list_action: str,
    output_format: str,
    extrapolate: bool,
    yaml12: bool,
) -> None:
    """Merge RESOURCES in order and print the combined configuration."""

    config = resolve_layered_configs(
        *resources,
        default_action=MergeAction.parse(default_action),
        list_action=MergeAction.parse(list_action),
        extrapolate=extrapolate,
        yaml12=yaml12,
    )
    if output_format.lower() == "json":
        click.echo(_to_json(config.as_dict(), 2))
    else:
        click.echo(config.to_yaml(), nl=False)


@cli.command("properties", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("resources", nargs=-1, required=True)
@click.option("--flatten-lists", is_flag=True, default=False, help="Emit one line per list element")
@click.option(
    "--extrapolate/--no-extrapolate",
    default=True,
    show_default=True,
    help="Substitute ${...} references in the printed values",
)
@click.option("--yaml12", is_flag=True, default=False, help="Parse with the YAML 1.2 core schema")
def cli_properties(resources: Sequence[str], flatten_lists: bool, extrapolate: bool, yaml12: bool) -> None:
    """Print the merged configuration as ``dotted.key=value`` lines."""

    config = resolve_layered_configs(*resources, extrapolate=extrapolate, yaml12=yaml12)
    for key, value in flatten(config, flatten_lists=flatten_lists).items():
        click.echo(f"{key}={_property_text(value)}")


def _load(resources: Sequence[str], *, multi_config: bool, extrapolate: bool, yaml12: bool) -> Config:
    """Load *resources* in the requested mode."""

    if multi_config:
        return resolve_multi_config(*resources, extrapolate=extrapolate, yaml12=yaml12)
    return resolve_layered_configs(*resources, extrapolate=extrapolate, yaml12=yaml12)


def _to_json(value: Any, indent: Optional[int]) -> str:
    """Render *value* as JSON; dates and other YAML scalars fall back to ``str``."""

    separators = (",", ":") if indent is None else None
    return json.dumps(value, indent=indent, separators=separators, ensure_ascii=False, default=str)


def _property_text(value: Any) -> str:
    """Render a flattened value: scalars as YAML text, containers as JSON."""

    if kind_of(value) in (NodeKind.MAPPING, NodeKind.SEQUENCE):
        return _to_json(value, None)
    return scalar_text(value)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_yaml_config",
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
