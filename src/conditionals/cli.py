"""Conditionals CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from conditionals import __version__

if TYPE_CHECKING:
    from conditionals.checker import CheckResult


@click.group()
@click.version_option(version=__version__, prog_name="conditionals")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Conditionals - evaluate configuration conditions against property sources."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


_properties_option = click.option(
    "--properties",
    "-p",
    "properties",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML properties file (repeatable; earlier files win).",
)
_env_option = click.option(
    "--env", "use_environ", is_flag=True, help="Also resolve properties from the environment."
)
_set_option = click.option(
    "--set",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    help="Property override (repeatable; wins over files and environment).",
)


def _run_check(
    rules: Path,
    *,
    properties: tuple[Path, ...],
    use_environ: bool,
    overrides: tuple[str, ...],
    only: tuple[str, ...] = (),
) -> CheckResult:
    from conditionals.checker import CheckError
    from conditionals.checker import check as run_check
    from conditionals.resolver import parse_overrides

    try:
        return run_check(
            rules,
            properties=properties,
            use_environ=use_environ,
            overrides=parse_overrides(overrides),
            only=only,
        )
    except (CheckError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)


@main.command()
@click.argument("rules", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_properties_option
@_env_option
@_set_option
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich for TTY, porcelain otherwise).",
)
@click.option("--strict", is_flag=True, default=False, help="Exit 1 if any condition fails.")
@click.pass_context
def check(
    ctx: click.Context,
    rules: Path,
    *,
    properties: tuple[Path, ...],
    use_environ: bool,
    overrides: tuple[str, ...],
    fmt: str | None,
    strict: bool,
) -> None:
    """Evaluate every condition in RULES.

    Exit codes: 0 = all matched, or some failed without --strict,
    1 = some failed with --strict, 2 = configuration error.
    """
    from conditionals.checker import format_json, format_porcelain, format_rich

    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    result = _run_check(
        rules, properties=properties, use_environ=use_environ, overrides=overrides
    )

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    output = formatters[fmt](result)
    if output and not (ctx.obj.get("quiet") and fmt == "rich"):
        click.echo(output)

    if strict and not result.all_matched:
        sys.exit(1)


@main.command()
@click.argument("rules", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("names", nargs=-1, required=True)
@_properties_option
@_env_option
@_set_option
def explain(
    rules: Path,
    names: tuple[str, ...],
    *,
    properties: tuple[Path, ...],
    use_environ: bool,
    overrides: tuple[str, ...],
) -> None:
    """Show the reason trail for the named conditions in RULES."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    result = _run_check(
        rules,
        properties=properties,
        use_environ=use_environ,
        overrides=overrides,
        only=names,
    )

    console = Console()
    table = Table(title="Conditions", show_lines=True)
    table.add_column("condition", style="cyan", no_wrap=True)
    table.add_column("kind", no_wrap=True)
    table.add_column("verdict")
    table.add_column("reasons")
    for r in result.results:
        verdict = "[green]match[/]" if r.matched else "[red]no match[/]"
        table.add_row(
            escape(r.name), r.kind, verdict, "\n".join(escape(x) for x in r.outcome.reasons)
        )
    console.print(table)
