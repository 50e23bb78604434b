"""Site generator: discovery, then one page per page-worthy declaration.

Architecture::

    ┌──────────────────┐
    │  index_factory() │  builds a SymbolIndex (engine or graph document)
    └────────┬─────────┘
             ▼
    ┌──────────────────────────────────────────────────────────┐
    │                     SiteGenerator                         │
    │  discover() → render_index() → render_pages() → report    │
    └───┬──────────────────┬─────────────────────┬─────────────┘
        ▼                  ▼                     ▼
    page_fqns         index.html         <fqn>.html × N

Rendering is strictly sequential. Every ``recycle_interval`` pages the
symbol index is closed and rebuilt from the factory, because the engine
never releases memory it hands out for query results. Handles do not
survive a rebuild, so pages are looked up again by FQN and the resolver,
fixer and renderer are rebuilt around the new index.
"""

from __future__ import annotations

import html
import uuid
from pathlib import Path
from typing import Callable

from declsite.core.errors import MissingDeclarationError
from declsite.core.logging import LogContext, get_logger
from declsite.site.fixup import LinkFixer
from declsite.site.model import INDEX_PAGE, DeadLink, DiscoveryResult, SiteReport
from declsite.site.renderer import PageRenderer
from declsite.site.resolver import DEFAULT_MAX_DEPTH, DeclarationResolver
from declsite.site.templates import INDEX_TEMPLATE, render_template
from declsite.site.walker import GraphWalker
from declsite.symbols.protocols import Decl, SymbolIndex

logger = get_logger(__name__)

DEFAULT_RECYCLE_INTERVAL = 100

IndexFactory = Callable[[], SymbolIndex]


class SiteGenerator:
    """Orchestrates a full documentation build.

    Examples:
        >>> gen = SiteGenerator(lambda: MemorySymbolIndex.from_file(Path("std.yaml")),
        ...                     output_dir=Path("site"))
        >>> report = gen.generate()
        >>> sorted(report.pages)
        ['std', 'std.mem']
    """

    def __init__(
        self,
        index_factory: IndexFactory,
        output_dir: Path,
        *,
        recycle_interval: int = DEFAULT_RECYCLE_INTERVAL,
        include_private: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        if recycle_interval < 1:
            raise ValueError("recycle_interval must be >= 1")
        self.index_factory = index_factory
        self.output_dir = Path(output_dir)
        self.recycle_interval = recycle_interval
        self.include_private = include_private
        self.max_depth = max_depth

        self.index: SymbolIndex | None = None
        self.resolver: DeclarationResolver | None = None
        self.renderer: PageRenderer | None = None
        self.recycle_count = 0
        self.dead_links: list[DeadLink] = []

    # ------------------------------------------------------------------
    # Symbol index lifecycle
    # ------------------------------------------------------------------

    def _bind(self, index: SymbolIndex) -> None:
        self.index = index
        self.resolver = DeclarationResolver(index, max_depth=self.max_depth)
        fixer = LinkFixer(self.resolver)
        fixer.dead_links = self.dead_links
        self.renderer = PageRenderer(self.resolver, fixer, include_private=self.include_private)

    def _ensure_index(self) -> SymbolIndex:
        if self.index is None:
            self._bind(self.index_factory())
        return self.index

    def recycle(self) -> None:
        """Drop the current index and build a fresh one."""
        if self.index is not None:
            self.index.close()
        self.index = None
        self._bind(self.index_factory())
        self.recycle_count += 1
        logger.info("symbol_index_recycled", count=self.recycle_count)

    def close(self) -> None:
        if self.index is not None:
            self.index.close()
        self.index = None
        self.resolver = None
        self.renderer = None

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def discover(self) -> DiscoveryResult:
        """Walk the graph once and list the pages to render."""
        self._ensure_index()
        walker = GraphWalker(self.resolver, include_private=self.include_private)
        return walker.discover()

    def render_index(self) -> Path:
        """Write ``index.html`` redirecting to the root declaration's page."""
        index = self._ensure_index()
        root = self.resolver.resolve_alias(index.root_declaration())
        path = self.output_dir / INDEX_PAGE
        path.write_text(
            render_template(INDEX_TEMPLATE, {
                "TITLE": html.escape(index.fqn(root)),
                "URL": self.resolver.page_of(root),
            }),
            encoding="utf-8",
        )
        logger.info("index_rendered", path=str(path))
        return path

    def lookup_page(self, fqn: str) -> Decl:
        """Find a discovered page declaration again in the current index.

        Raises:
            MissingDeclarationError: The FQN no longer resolves.
        """
        decl = self._ensure_index().find_by_fqn(fqn)
        if decl is None:
            raise MissingDeclarationError(fqn)
        return self.resolver.resolve_alias(decl)

    def render_pages(self, page_fqns: tuple[str, ...] | list[str]) -> dict[str, Path]:
        """Render and write every page in order, recycling the index as configured."""
        pages: dict[str, Path] = {}
        for count, fqn in enumerate(page_fqns, start=1):
            decl = self.lookup_page(fqn)
            path = self.output_dir / self.resolver.page_of(decl)
            content = self.renderer.render_page(decl)
            path.write_text(content, encoding="utf-8")
            pages[fqn] = path
            logger.debug("page_rendered", fqn=fqn, path=str(path), size=len(content))

            if count % self.recycle_interval == 0:
                self.recycle()
        return pages

    def generate(self) -> SiteReport:
        """Run discovery and rendering; return a report of what was written."""
        with LogContext(run_id=uuid.uuid4().hex[:12]):
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.dead_links.clear()
            self.recycle_count = 0

            discovery = self.discover()
            report = SiteReport(output_dir=self.output_dir, visited_count=discovery.visited_count)
            report.index_path = self.render_index()
            report.pages = self.render_pages(discovery.page_fqns)
            report.dead_links = list(self.dead_links)
            report.recycle_count = self.recycle_count

            if report.dead_links:
                logger.warning("dead_links_found", count=len(report.dead_links))
            logger.info(
                "site_generated",
                pages=len(report.pages),
                output_dir=str(self.output_dir),
                recycles=report.recycle_count,
            )
            return report

    def locate(self, file_path: str) -> str | None:
        """Href of the page hosting the root declaration of a source file."""
        decl = self._ensure_index().find_file_root(file_path)
        if decl is None:
            return None
        return self.resolver.link_of(decl)


def generate_site(
    index_factory: IndexFactory,
    output_dir: Path,
    *,
    recycle_interval: int = DEFAULT_RECYCLE_INTERVAL,
    include_private: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> SiteReport:
    """Build a complete site and release the symbol index afterwards."""
    gen = SiteGenerator(
        index_factory,
        output_dir,
        recycle_interval=recycle_interval,
        include_private=include_private,
        max_depth=max_depth,
    )
    try:
        return gen.generate()
    finally:
        gen.close()


__all__ = ["DEFAULT_RECYCLE_INTERVAL", "SiteGenerator", "generate_site"]
