"""rulecat CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from rulecat import __version__

if TYPE_CHECKING:
    from collections.abc import Callable

    from rulecat.config import RulesConfig
    from rulecat.processor import ProcessResult


@click.group()
@click.version_option(version=__version__, prog_name="rulecat")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """rulecat - privacy rule ingestion and merge engine."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


_SOURCE_OPTIONS = (
    click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Config file (default: ./rulecat.yml if present).",
    ),
    click.option(
        "--internal",
        "internal_path",
        type=click.Path(path_type=Path),
        default=None,
        help="Built-in rules directory.",
    ),
    click.option(
        "--external",
        "external_path",
        type=click.Path(path_type=Path),
        default=None,
        help="User rules directory; overrides built-in rules with the same id.",
    ),
    click.option(
        "--ignore-internal",
        is_flag=True,
        default=False,
        help="Skip the built-in rules.",
    ),
)


def _source_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the rule-source options shared by ``load`` and ``show``."""
    for option in reversed(_SOURCE_OPTIONS):
        func = option(func)
    return func


def _resolve_config(
    config_path: Path | None,
    internal_path: Path | None,
    external_path: Path | None,
    ignore_internal: bool,
) -> RulesConfig:
    from rulecat.config import DEFAULT_CONFIG_NAME, load_config
    from rulecat.errors import ConfigError

    if config_path is not None and not config_path.exists():
        raise ConfigError(config_path, "Config file not found")
    path = config_path or Path.cwd() / DEFAULT_CONFIG_NAME
    config = load_config(path)
    return config.merged_with(
        internal_rules_path=internal_path,
        external_rules_path=external_path,
        ignore_internal_rules=ignore_internal or None,
    )


def _run(
    config_path: Path | None,
    internal_path: Path | None,
    external_path: Path | None,
    ignore_internal: bool,
) -> ProcessResult:
    """Build the catalogue, exiting with status 1 on fatal errors."""
    from rulecat.errors import ConfigError, RulesPathError
    from rulecat.processor import process_rules

    try:
        config = _resolve_config(config_path, internal_path, external_path, ignore_internal)
        if config.internal_rules_path is None and config.external_rules_path is None:
            click.echo("Error: no rules directory configured.", err=True)
            sys.exit(1)
        return process_rules(config)
    except (ConfigError, RulesPathError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@main.command()
@_source_options
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def load(
    *,
    config_path: Path | None,
    internal_path: Path | None,
    external_path: Path | None,
    ignore_internal: bool,
    output_json: bool,
) -> None:
    """Load, validate and merge rules, then print a summary."""
    result = _run(config_path, internal_path, external_path, ignore_internal)
    counts = result.catalogue.rules.counts()

    if output_json:
        data = {
            "internal_version": result.internal_version,
            "rules_used": result.rules_used,
            "counts": counts,
            "internal_policies": sorted(result.catalogue.internal_policy_ids),
            "diagnostics": [
                {"file": d.file_path, "message": d.message} for d in result.diagnostics
            ],
        }
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return

    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    console = Console()
    console.print(Panel(
        f"Internal rules version: {result.internal_version}",
        title=f"rulecat v{__version__}",
        border_style="blue",
    ))

    table = Table(title="Rules", show_header=False, box=None, padding=(0, 1))
    table.add_column("category", style="cyan")
    table.add_column("count", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)
    console.print()
    console.print(f"  Rules used: [bold]{result.rules_used}[/]")

    if result.diagnostics:
        console.print()
        console.print(f"[red]{len(result.diagnostics)} document(s) rejected:[/]")
        for diag in result.diagnostics:
            click.echo(f"  {diag.file_path}: {diag.message}")


@main.command()
@click.argument("rule_id")
@_source_options
def show(
    rule_id: str,
    *,
    config_path: Path | None,
    internal_path: Path | None,
    external_path: Path | None,
    ignore_internal: bool,
) -> None:
    """Show a rule, policy or threat by id as JSON."""
    from rulecat.exporting import policy_details_for_export, rule_info_for_export

    result = _run(config_path, internal_path, external_path, ignore_internal)
    catalogue = result.catalogue

    if catalogue.lookup_rule(rule_id) is not None:
        data: dict[str, Any] = rule_info_for_export(catalogue, rule_id)
    else:
        details = policy_details_for_export(catalogue, rule_id)
        if details is None:
            click.echo(f"Error: '{rule_id}' not found in rules.", err=True)
            sys.exit(1)
        data = {"id": rule_id, "internal": catalogue.is_internal_policy(rule_id), **details}

    click.echo(json.dumps(data, ensure_ascii=False, indent=2))
