"""Static site generation over a declaration graph.

Stages, leaves first: resolver (aliases, pages, links, lineage), walker
(discovery), classifier (member grouping), fixup (cross-references),
renderer (recursive page markup) and generator (the full run).
"""

from .classifier import categorize_members
from .fixup import LinkFixer
from .generator import SiteGenerator, generate_site
from .model import DeadLink, DiscoveryResult, MemberBuckets, NavItem, SiteReport
from .renderer import PageRenderer
from .resolver import DeclarationResolver, sanitize_fqn, split_fqn
from .templates import render_template
from .walker import GraphWalker

__all__ = [
    "categorize_members",
    "LinkFixer",
    "SiteGenerator",
    "generate_site",
    "DeadLink",
    "DiscoveryResult",
    "MemberBuckets",
    "NavItem",
    "SiteReport",
    "PageRenderer",
    "DeclarationResolver",
    "sanitize_fqn",
    "split_fqn",
    "render_template",
    "GraphWalker",
]
