"""
Root Typer application for the declsite CLI.

Commands:
    build     Render every page of a declaration graph.
    discover  List the pages a build would produce.
    locate    Show the page hosting a source file's root declaration.

A SOURCE is either an engine data directory (``basis/main.wasm`` and
``basis/sources.tar``) or a YAML/JSON declaration-graph document.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from typer import Typer

from declsite.cli.utils import console, fail, index_factory_for, is_engine_source, print_report
from declsite.core.errors import DeclsiteError
from declsite.core.logging import configure_logging
from declsite.core.settings import DeclsiteSettings, load_settings
from declsite.site.generator import SiteGenerator

app = Typer(
    name="declsite",
    help="declsite — static HTML documentation for declaration graphs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from declsite import __version__

        typer.echo(f"declsite {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """declsite CLI — build, inspect and navigate documentation sites."""


# ── Shared setup ─────────────────────────────────────────────────────────


def _settings(
    config: Path | None,
    *,
    verbose: bool = False,
    json_logs: bool | None = None,
    log_level: str | None = None,
    **overrides,
) -> DeclsiteSettings:
    try:
        settings = load_settings(
            config,
            log_level="DEBUG" if verbose else log_level,
            json_logs=json_logs,
            **overrides,
        )
    except DeclsiteError as e:
        fail(e)
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    return settings


def _generator(source: Path, settings: DeclsiteSettings, output_dir: Path | None = None) -> SiteGenerator:
    if output_dir is None:
        output_dir = source if is_engine_source(source) else settings.output_dir
    return SiteGenerator(
        index_factory_for(source),
        output_dir,
        recycle_interval=settings.recycle_interval,
        include_private=settings.include_private,
        max_depth=settings.max_resolution_depth,
    )


# ── declsite build ───────────────────────────────────────────────────────


@app.command("build")
def build_cmd(
    source: Path = typer.Argument(..., help="Engine data directory or graph document."),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o",
        help="Where to write pages (default: SOURCE for engine directories, else settings).",
    ),
    recycle_every: int | None = typer.Option(
        None, "--recycle-every", min=1,
        help="Rebuild the symbol index after this many pages.",
    ),
    include_private: bool | None = typer.Option(
        None, "--include-private/--public-only",
        help="List private members.",
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML settings file."),
    json_logs: bool | None = typer.Option(None, "--json-logs/--console-logs", help="Log format."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Render one HTML page per namespace/container plus a redirecting index.

    Example:
        declsite build std/0.14.1
        declsite build graph.yaml -o site --recycle-every 50
    """
    settings = _settings(
        config,
        verbose=verbose,
        json_logs=json_logs,
        recycle_interval=recycle_every,
        include_private=include_private,
    )
    try:
        gen = _generator(source, settings, output_dir)
        try:
            report = gen.generate()
        finally:
            gen.close()
    except DeclsiteError as e:
        fail(e)
    print_report(report)


# ── declsite discover ────────────────────────────────────────────────────


@app.command("discover")
def discover_cmd(
    source: Path = typer.Argument(..., help="Engine data directory or graph document."),
    include_private: bool | None = typer.Option(
        None, "--include-private/--public-only",
        help="List private members.",
    ),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML settings file."),
) -> None:
    """List page-worthy declarations in discovery order."""
    settings = _settings(
        config,
        json_logs=True if json_out else None,
        include_private=include_private,
        log_level="WARNING" if json_out else None,
    )
    try:
        gen = _generator(source, settings)
        try:
            result = gen.discover()
            pages = [(fqn, gen.resolver.page_of(gen.lookup_page(fqn))) for fqn in result.page_fqns]
        finally:
            gen.close()
    except DeclsiteError as e:
        fail(e)

    if json_out:
        typer.echo(json.dumps({
            "declarations": result.visited_count,
            "pages": [{"fqn": fqn, "path": path} for fqn, path in pages],
        }, indent=2))
        return

    for fqn, path in pages:
        console.print(f"[cyan]{fqn}[/cyan]  {path}")
    console.print(f"[dim]{len(pages)} page(s), {result.visited_count} declaration(s)[/dim]")


# ── declsite locate ──────────────────────────────────────────────────────


@app.command("locate")
def locate_cmd(
    source: Path = typer.Argument(..., help="Engine data directory or graph document."),
    file_path: str = typer.Argument(..., help="Source file path as known to the index."),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML settings file."),
) -> None:
    """Print the page hosting the root declaration of FILE_PATH."""
    settings = _settings(config)
    try:
        gen = _generator(source, settings)
        try:
            href = gen.locate(file_path)
        finally:
            gen.close()
    except DeclsiteError as e:
        fail(e)

    if href is None:
        console.print(f"[yellow]No declaration for file[/yellow] {file_path}")
        raise typer.Exit(code=1)
    typer.echo(href)
