"""
CLI utility helpers: consoles, source loading and error output.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import typer
from rich.console import Console
from rich.table import Table

from declsite.core.errors import DeclsiteError, MissingConfigError
from declsite.site.model import SiteReport
from declsite.symbols.memory import MemorySymbolIndex
from declsite.symbols.protocols import SymbolIndex

console = Console()
err_console = Console(stderr=True)

GRAPH_SUFFIXES = frozenset({".yaml", ".yml", ".json"})


# ── Source loading ───────────────────────────────────────────────────────


def is_engine_source(source: Path) -> bool:
    """A directory is an engine data directory; a file is a graph document."""
    return source.is_dir()


def index_factory_for(source: Path) -> Callable[[], SymbolIndex]:
    """Return a symbol index factory for an engine directory or graph document."""
    if is_engine_source(source):
        from declsite.symbols.wasm import engine_index_factory

        return engine_index_factory(source)

    if not source.is_file():
        raise MissingConfigError(str(source), f"Source not found: {source}")
    if source.suffix.lower() not in GRAPH_SUFFIXES:
        raise MissingConfigError(
            str(source),
            f"Expected an engine data directory or a .yaml/.json graph document: {source}",
        )

    def factory() -> SymbolIndex:
        return MemorySymbolIndex.from_file(source)

    return factory


# ── Output helpers ───────────────────────────────────────────────────────


def fail(error: DeclsiteError) -> None:
    """Print a declsite error and exit non-zero."""
    err_console.print(f"[bold red]Error[/bold red] ({error.__class__.__name__}): {error.message}")
    context = error.context.to_dict()
    for key, value in context.items():
        err_console.print(f"  [cyan]{key}[/cyan]: {value}")
    raise typer.Exit(code=1)


def print_report(report: SiteReport) -> None:
    """Summarize a generation run."""
    console.print(f"[bold green]Generated {len(report.pages)} page(s)[/bold green] in {report.output_dir}")
    console.print(f"[dim]{report.visited_count} declaration(s), {report.recycle_count} index rebuild(s)[/dim]")
    if report.dead_links:
        table = Table(title=f"{len(report.dead_links)} dead link(s)", show_lines=False, pad_edge=False)
        table.add_column("fqn", overflow="fold")
        table.add_column("page", overflow="fold")
        for link in report.dead_links:
            table.add_row(link.fqn, link.page)
        console.print(table)
