"""Declaration resolution: aliases, hosting pages, links and lineage.

Every declaration is addressable. Namespaces and containers own a page
named after their FQN; everything else lives on the page of its nearest
page-worthy ancestor, under an anchor equal to its own FQN::

    std                 -> std.html
    std.mem             -> std.mem.html
    std.mem.copy        -> std.mem.html#std.mem.copy
    std.mem.Allocator   -> (alias) resolved first, then routed as its target
"""

from __future__ import annotations

import re
from urllib.parse import quote

from declsite.core.errors import CorruptGraphError, UnroutableDeclarationError
from declsite.site.model import PAGE_SUFFIX
from declsite.symbols.protocols import Category, Decl, SymbolIndex

DEFAULT_MAX_DEPTH = 256

# URI-encoder reserved characters that stay literal; "/", "?" and "#"
# are escaped so a page name is one path segment and a valid fragment.
_FQN_SAFE = ";,:@&=+$!*'()"

_FQN_SEGMENT_RE = re.compile(r'(@"[^"]*")|[^.]+')


def sanitize_fqn(fqn: str) -> str:
    """Percent-encode an FQN for use as a file name or URL fragment."""
    return quote(fqn, safe=_FQN_SAFE)


def split_fqn(fqn: str) -> list[str]:
    """Split an FQN into segments, keeping ``@"quoted.names"`` whole.

    >>> split_fqn('std.@"weird.name".x')
    ['std', '@"weird.name"', 'x']
    """
    if not fqn:
        return []
    return [m.group(0) for m in _FQN_SEGMENT_RE.finditer(fqn)]


class DeclarationResolver:
    """Canonicalizes handles and computes where a declaration is rendered.

    Walks (alias chains, parent chains) are bounded by ``max_depth`` so a
    misbehaving index cannot loop forever.

    Examples:
        >>> resolver = DeclarationResolver(index)
        >>> resolver.link_of(index.find_by_fqn("std.mem.copy"))
        'std.mem.html#std.mem.copy'
    """

    def __init__(self, index: SymbolIndex, *, max_depth: int = DEFAULT_MAX_DEPTH):
        self.index = index
        self.max_depth = max_depth

    def category(self, decl: Decl) -> Category:
        """Category of ``decl`` as reported by the index, validated."""
        return Category.coerce(self.index.classify(decl))

    def resolve_alias(self, decl: Decl) -> Decl:
        """Follow alias links until a non-alias declaration is reached.

        Raises:
            CorruptGraphError: The chain is longer than ``max_depth``
                (in practice: the aliases form a cycle).
        """
        current = decl
        for _ in range(self.max_depth + 1):
            if self.category(current) != Category.ALIAS:
                return current
            current = self.index.alias_target(current)
        raise CorruptGraphError(
            f"Alias chain exceeds {self.max_depth} steps",
            depth=self.max_depth,
        ).with_context(decl=decl, fqn=self.index.fqn(decl))

    def is_page_worthy(self, decl: Decl) -> bool:
        """True if the resolved declaration gets its own page."""
        return self.category(self.resolve_alias(decl)).is_page_worthy

    def page_of(self, decl: Decl) -> str:
        """Page path (file name) hosting ``decl``.

        Raises:
            UnroutableDeclarationError: No namespace/container ancestor.
            CorruptGraphError: The parent chain exceeds ``max_depth``.
        """
        current: Decl | None = decl
        for _ in range(self.max_depth + 1):
            if current is None:
                raise UnroutableDeclarationError(
                    "Declaration has no namespace or container ancestor"
                ).with_context(decl=decl, fqn=self.index.fqn(decl))
            current = self.resolve_alias(current)
            if self.category(current).is_page_worthy:
                return sanitize_fqn(self.index.fqn(current)) + PAGE_SUFFIX
            current = self.index.parent(current)
        raise CorruptGraphError(
            f"Parent chain exceeds {self.max_depth} steps",
            depth=self.max_depth,
        ).with_context(decl=decl, fqn=self.index.fqn(decl))

    def link_of(self, decl: Decl) -> str:
        """Href for ``decl``: its page, plus an anchor unless it owns the page."""
        decl = self.resolve_alias(decl)
        page = self.page_of(decl)
        if self.category(decl).is_page_worthy:
            return page
        return page + "#" + sanitize_fqn(self.index.fqn(decl))

    def lineage_of(self, decl: Decl) -> list[Decl]:
        """Declarations from the graph root down to ``decl`` (inclusive)."""
        items: list[Decl] = []
        current: Decl | None = decl
        while current is not None:
            if len(items) > self.max_depth:
                raise CorruptGraphError(
                    f"Lineage exceeds {self.max_depth} steps",
                    depth=self.max_depth,
                ).with_context(decl=decl, fqn=self.index.fqn(decl))
            items.append(current)
            current = self.index.parent(current)
        items.reverse()
        return items


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DeclarationResolver",
    "sanitize_fqn",
    "split_fqn",
]
