"""Data models for site generation.

Plain dataclasses describing discovery output, member grouping, dead
links and the final run report. All derived from the symbol index for
one run; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from declsite.symbols.protocols import Decl

PAGE_SUFFIX = ".html"
INDEX_PAGE = "index.html"


@dataclass(frozen=True)
class DeadLink:
    """A cross-reference whose FQN did not resolve to a declaration.

    Attributes:
        fqn: The unresolved name taken from the placeholder href.
        page: Page being rendered when the link was found ("" if unknown).
    """

    fqn: str
    page: str = ""


@dataclass(frozen=True)
class DiscoveryResult:
    """Outcome of the discovery walk.

    Attributes:
        page_fqns: FQNs of page-worthy declarations, in traversal order.
        visited_count: Number of distinct declarations reached.
    """

    page_fqns: tuple[str, ...]
    visited_count: int

    @property
    def page_count(self) -> int:
        return len(self.page_fqns)


@dataclass
class MemberBuckets:
    """A declaration's direct members grouped for rendering.

    Every member lands in exactly one bucket after alias resolution.
    """

    namespaces: list[Decl] = field(default_factory=list)
    containers: list[Decl] = field(default_factory=list)
    types: list[Decl] = field(default_factory=list)
    variables: list[Decl] = field(default_factory=list)
    functions: list[Decl] = field(default_factory=list)
    error_sets: list[Decl] = field(default_factory=list)
    values: list[Decl] = field(default_factory=list)

    def all(self) -> list[Decl]:
        return (
            self.namespaces + self.containers + self.types + self.variables
            + self.functions + self.error_sets + self.values
        )


@dataclass(frozen=True)
class NavItem:
    """One breadcrumb entry."""

    name: str
    href: str
    class_name: str = ""


@dataclass
class SiteReport:
    """Summary of a generation run.

    Attributes:
        output_dir: Root the pages were written under.
        pages: Mapping of page FQN to the written file.
        index_path: The redirecting ``index.html``.
        dead_links: Cross-references rendered as inert anchors.
        visited_count: Declarations reached during discovery.
        recycle_count: How many times the symbol index was rebuilt.
    """

    output_dir: Path
    pages: dict[str, Path] = field(default_factory=dict)
    index_path: Path | None = None
    dead_links: list[DeadLink] = field(default_factory=list)
    visited_count: int = 0
    recycle_count: int = 0

    @property
    def total_bytes(self) -> int:
        total = 0
        for path in self.pages.values():
            total += path.stat().st_size
        return total
