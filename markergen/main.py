"""
markergen — CLI entrypoint.

Usage:
    markergen crds paths=./api output:crds:dir=config/crd
    markergen -w crds          # markers the crds generator understands
    markergen -hh              # detailed help for every option marker

Everything the command prints goes to stderr, except generator output
sent to ``output:stdout`` and json help, which go to stdout.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path

import click

from markergen import __version__
from markergen.core.errors import ConfigError, OptionParseError, RegistryError
from markergen.core.observability.logging_config import resolve_level, setup_logging

USAGE_HINT = "run `markergen ... -w` to see all available markers, or `markergen ... -h` for usage"


def _registry(ctx: click.Context):
    """The options registry and generators for this invocation.

    Tests may inject ``registry``, ``generators`` and ``output_rules``
    through ``ctx.obj``. A registry that cannot be built aborts with exit 2.
    """
    from markergen.adapters.registry import ALL_OUTPUT_RULES
    from markergen.core.config.options import build_options_registry, default_options_registry
    from markergen.core.services.generators.registry import ALL_GENERATORS

    generators: Mapping = ctx.obj.get("generators", ALL_GENERATORS)
    try:
        registry = ctx.obj.get("registry")
        if registry is None:
            if "generators" in ctx.obj or "output_rules" in ctx.obj:
                registry = build_options_registry(
                    generators, ctx.obj.get("output_rules", ALL_OUTPUT_RULES)
                )
            else:
                registry = default_options_registry()
    except RegistryError as e:
        click.secho(f"markergen: {e}", fg="red", err=True)
        sys.exit(2)
    return registry, generators


def _usage_error(ctx: click.Context, error: Exception) -> None:
    click.secho(f"Error: {error}", fg="red", err=True)
    click.echo(ctx.get_usage(), err=True)
    click.echo(USAGE_HINT, err=True)
    sys.exit(1)


def _print_report(report, verbose: bool) -> None:
    for receipt in report.receipts:
        timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
        if receipt.ok:
            click.secho(f"   ✓ {receipt.generator}", fg="green", nl=False, err=True)
            click.echo(f"{timing}", err=True)
            if verbose:
                for dest in receipt.written[:10]:
                    click.echo(f"     │ {dest}", err=True)
        elif receipt.failed:
            click.secho(f"   ✗ {receipt.generator}", fg="red", nl=False, err=True)
            click.echo(f"{timing}", err=True)
            if receipt.error:
                for line in receipt.error.split("\n")[:5]:
                    click.echo(f"     │ {line}", err=True)
        else:
            click.secho(f"   ⊘ {receipt.generator} ", fg="yellow", nl=False, err=True)
            click.echo(f"({receipt.output})", err=True)

    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(report.status, "white")
    click.secho(
        f"   Result: {report.succeeded}/{report.total} succeeded",
        fg=status_color,
        bold=True,
        err=True,
    )


@click.command(context_settings={"help_option_names": []})
@click.version_option(version=__version__, prog_name="markergen")
@click.option(
    "--which-markers",
    "-w",
    count=True,
    help="Print the markers the named generators understand (repeat for more detail, 4 for json).",
)
@click.option(
    "--detailed-help",
    "-h",
    count=True,
    help="Print usage and option markers (repeat for more detail, 4 for json).",
)
@click.option("--help", "show_help", is_flag=True, help="Print usage and a summary of option markers.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to markergen.yml (default: auto-detect).",
)
@click.argument("tokens", nargs=-1)
@click.pass_context
def cli(
    ctx: click.Context,
    which_markers: int,
    detailed_help: int,
    show_help: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: Path | None,
    tokens: tuple[str, ...],
) -> None:
    """Generate code and configuration from markers in Python sources.

    Each TOKEN is a marker: a generator to run (crds, schemas, ...), where
    its output goes (output:crds:dir=out, output:stdout), or where to read
    sources from (paths=./api).
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    registry, generators = _registry(ctx)

    from markergen.core.help.categories import sort_by_category, sort_by_option
    from markergen.core.help.render import HelpLevel, render_help

    # ── Help paths: no config file, no generation ───────────────
    if detailed_help or show_help or which_markers:
        setup_logging(level=resolve_level(debug, verbose, quiet))

        if detailed_help or show_help:
            click.echo(ctx.get_help(), err=True)
            click.echo("", err=True)
            level = HelpLevel.from_count(detailed_help or 1)
            render_help(level, registry, sort_by_option, out=sys.stdout, err=sys.stderr)
            return

        from markergen.core.engine.builder import registry_from_options

        try:
            filtered = registry_from_options(registry, list(tokens), generators)
        except OptionParseError as e:
            _usage_error(ctx, e)
        render_help(
            HelpLevel.from_count(which_markers), filtered, sort_by_category, out=sys.stdout, err=sys.stderr
        )
        return

    from markergen.core.config.loader import load_config

    try:
        config = load_config(config_path)
    except ConfigError as e:
        setup_logging(level=resolve_level(debug, verbose, quiet))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug, verbose, quiet, config.log_level))

    from markergen.core.engine.builder import from_options

    try:
        configuration = from_options(
            registry,
            list(tokens),
            generators,
            config_tokens=config.options,
            config_dir=config.project_dir,
        )
    except OptionParseError as e:
        _usage_error(ctx, e)

    from markergen.core.engine.executor import ExecutionRuntime

    report = ExecutionRuntime(configuration).run()
    if not quiet or not report.all_ok:
        _print_report(report, verbose)

    if not report.all_ok:
        click.secho("not all generators ran successfully", fg="red", err=True)
        sys.exit(1)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
