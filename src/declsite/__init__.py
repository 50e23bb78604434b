"""
declsite: static HTML documentation for declaration graphs.

Turns a hierarchical graph of program declarations (namespaces,
containers, functions, types, error sets, values) into cross-linked
static pages: one page per namespace or container, every other
declaration nested in the page of its nearest such ancestor.

Usage::

    from pathlib import Path
    from declsite import MemorySymbolIndex, generate_site

    report = generate_site(
        lambda: MemorySymbolIndex.from_file(Path("graph.yaml")),
        output_dir=Path("site"),
    )
    print(len(report.pages), "pages")
"""

from declsite.core.errors import DeclsiteError
from declsite.site import SiteGenerator, SiteReport, generate_site
from declsite.symbols import Category, MemorySymbolIndex, SymbolIndex

__version__ = "0.1.0"

__all__ = [
    "Category",
    "DeclsiteError",
    "MemorySymbolIndex",
    "SiteGenerator",
    "SiteReport",
    "SymbolIndex",
    "generate_site",
    "__version__",
]
