"""Command line interface for modsort."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from modsort.config import ConfigError, ConfigManager, ModsortConfig
from modsort.host import FabricModsHost
from modsort.sorting import (
    ArchiveWriteError,
    CollectionError,
    ModSorter,
    PathResolutionError,
    SideCategory,
    SortError,
    SortResult,
    SourceNotFoundError,
)

console = Console()

_ERROR_CODES: tuple[tuple[type[Exception], str], ...] = (
    (SourceNotFoundError, "source_not_found"),
    (CollectionError, "collection_failed"),
    (ArchiveWriteError, "archive_failed"),
    (PathResolutionError, "path_exhausted"),
    (ConfigError, "config_error"),
)


def _error_code(exc: Exception) -> str:
    for error_type, code in _ERROR_CODES:
        if isinstance(exc, error_type):
            return code
    return "sort_failed"


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _configure_logging(config: ModsortConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper(), None)
    if not isinstance(level, int):
        raise ConfigError(f"Unknown logging level: {config.logging.level}")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_output_modes(
    ctx: click.Context,
    config: ModsortConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Combine explicit flags with configured defaults.

    Returns:
        tuple[bool, bool]: Effective ``(quiet, summary_only)`` flags.

    Raises:
        click.ClickException: If the requested modes conflict.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _load_config(output_dirname: str | None) -> ModsortConfig:
    overrides: dict[str, Any] = {}
    if output_dirname:
        overrides["sorting.output_dirname"] = output_dirname
    return ConfigManager().load(cli_overrides=overrides or None)


def _relative_to(base: Path, target: Path) -> str:
    try:
        return target.relative_to(base).as_posix()
    except ValueError:
        return target.as_posix()


def _result_table(result: SortResult, base: Path) -> Table:
    table = Table(title=f"Mod zip sets in {_relative_to(base, result.output_directory)}")
    table.add_column("Category")
    table.add_column("Mods", justify="right")
    table.add_column("Archive", overflow="fold")
    for category in SideCategory:
        table.add_row(
            category.label,
            str(result.count(category)),
            _relative_to(base, result.archive_paths[category]),
        )
    return table


def _common_output_options(func):
    func = click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")(func)
    func = click.option("--quiet", is_flag=True, help="Suppress non-error output.")(func)
    func = click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")(
        func
    )
    func = click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="modsort")
def cli() -> None:
    """modsort sorts installed mods into client, server and universal zip sets."""


@cli.command()
@click.argument(
    "mods_dir",
    required=False,
    default="mods",
    type=click.Path(file_okay=False, path_type=str),
)
@click.option(
    "--output-dirname",
    type=str,
    help="Name of the directory created under MODS_DIR for the archives.",
)
@_common_output_options
@click.pass_context
def sort(
    ctx: click.Context,
    mods_dir: str,
    output_dirname: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Sort the mods in MODS_DIR into client, server and universal zip archives.

    Args:
        ctx: Click context used for parameter source inspection.
        mods_dir: Directory containing the installed mods.
        output_dirname: Optional override for the output directory name.
        json_output: If True, emit JSON describing the written archives.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
        verbose: When True, log debug details to stderr.
    """

    try:
        config = _load_config(output_dirname)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        _configure_logging(config, verbose)

        host = FabricModsHost(Path(mods_dir))
        result = ModSorter(host, config).run()
    except (ConfigError, SortError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=result.to_payload())
        return

    base = result.output_directory.parent
    _emit_message(
        _result_table(result, base), mode="detail", quiet=quiet_enabled, summary_only=summary_only
    )
    if result.total_mods() == 0:
        _emit_message(
            "[yellow]No mods found; empty archives were written.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    metrics = ", ".join(
        [f"total={result.total_mods()}"]
        + [f"{category.tag}={result.count(category)}" for category in SideCategory]
    )
    _emit_message(
        f"[green]Created mod zip sets in {result.output_directory}: {metrics}.[/green]",
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command(name="list")
@click.argument(
    "mods_dir",
    required=False,
    default="mods",
    type=click.Path(file_okay=False, path_type=str),
)
@_common_output_options
@click.pass_context
def list_mods(
    ctx: click.Context,
    mods_dir: str,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Show how the mods in MODS_DIR would be sorted without writing archives."""

    try:
        config = _load_config(None)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        _configure_logging(config, verbose)

        descriptors = ModSorter(FabricModsHost(Path(mods_dir)), config).preview()
    except (ConfigError, SortError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data={"mods": [item.model_dump(mode="json") for item in descriptors]})
        return

    table = Table(title=f"Mods in {mods_dir}")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Side")
    table.add_column("Source", overflow="fold")
    for descriptor in descriptors:
        table.add_row(
            descriptor.id,
            descriptor.name,
            descriptor.version,
            descriptor.category.tag,
            descriptor.source_path.name,
        )
    _emit_message(table, mode="detail", quiet=quiet_enabled, summary_only=summary_only)

    counts = {category: 0 for category in SideCategory}
    for descriptor in descriptors:
        counts[descriptor.category] += 1
    metrics = ", ".join(f"{category.tag}={count}" for category, count in counts.items())
    _emit_message(
        f"[green]List summary for {mods_dir}: total={len(descriptors)}, {metrics}.[/green]",
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.group()
def config() -> None:
    """Inspect and update modsort configuration."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore MODSORT__ environment overrides.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""

    try:
        effective = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    rendered = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Persist KEY (dotted, e.g. `archive.compression`) with VALUE parsed as YAML."""

    try:
        ConfigManager().set_value(key, yaml.safe_load(value))
    except (ConfigError, yaml.YAMLError) as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[green]Updated {key}.[/green]")


__all__ = ["cli"]
