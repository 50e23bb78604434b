"""Discovery walk over the declaration graph.

Visits every declaration reachable from the root exactly once and
records, in traversal order, the FQNs that get their own page.
"""

from __future__ import annotations

from declsite.core.logging import get_logger
from declsite.site.model import DiscoveryResult
from declsite.site.resolver import DeclarationResolver
from declsite.symbols.protocols import Decl

logger = get_logger(__name__)


class GraphWalker:
    """Depth-first discovery using an explicit stack.

    The visited set is keyed by resolved (post-alias) handles, so two
    names aliasing the same target are expanded once. Every declaration
    is pushed at most once, which bounds the walk even on cyclic graphs.
    """

    def __init__(self, resolver: DeclarationResolver, *, include_private: bool = False):
        self.resolver = resolver
        self.index = resolver.index
        self.include_private = include_private

    def discover(self, root: Decl | None = None) -> DiscoveryResult:
        """Walk from ``root`` (default: the index root) and collect page FQNs."""
        if root is None:
            root = self.index.root_declaration()
        root = self.resolver.resolve_alias(root)

        logger.info("discovery_started", root=self.index.fqn(root))

        stack: list[Decl] = [root]
        visited: set[Decl] = {root}
        page_fqns: list[str] = []

        while stack:
            decl = stack.pop()
            if self.resolver.category(decl).is_page_worthy:
                page_fqns.append(self.index.fqn(decl))
            for member in self.index.members(decl, self.include_private):
                member = self.resolver.resolve_alias(member)
                if member not in visited:
                    visited.add(member)
                    stack.append(member)

        result = DiscoveryResult(page_fqns=tuple(page_fqns), visited_count=len(visited))
        logger.info(
            "discovery_completed",
            declarations=result.visited_count,
            pages=result.page_count,
        )
        return result


__all__ = ["GraphWalker"]
