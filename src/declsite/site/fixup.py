"""Cross-reference fixup for engine-produced HTML fragments.

The engine links to other declarations with placeholder anchors whose
href is ``#`` followed by the target's FQN::

    <a href="#std.mem.Allocator">Allocator</a>

The fixer replaces each placeholder with the resolved page+anchor href.
Unknown names degrade to ``<a href="#"`` and are recorded as dead links.
Resolved hrefs never start with ``#`` so running the fixer again leaves
its output unchanged.
"""

from __future__ import annotations

import re

from declsite.core.logging import get_logger
from declsite.site.model import DeadLink
from declsite.site.resolver import DeclarationResolver

logger = get_logger(__name__)

PLACEHOLDER_RE = re.compile(r'<a href="#([^"]+)"')


class LinkFixer:
    """Rewrites placeholder anchors using a :class:`DeclarationResolver`.

    Attributes:
        page: Page currently being rendered, attached to dead-link records.
        dead_links: Every unresolved placeholder seen so far.
    """

    def __init__(self, resolver: DeclarationResolver):
        self.resolver = resolver
        self.page = ""
        self.dead_links: list[DeadLink] = []

    def fix(self, html: str) -> str:
        """Return ``html`` with every placeholder href resolved."""
        if not html:
            return html
        return PLACEHOLDER_RE.sub(self._replace, html)

    def _replace(self, match: re.Match[str]) -> str:
        fqn = match.group(1)
        decl = self.resolver.index.find_by_fqn(fqn)
        if decl is None:
            self.dead_links.append(DeadLink(fqn=fqn, page=self.page))
            logger.warning("dead_link", fqn=fqn, page=self.page)
            return '<a href="#"'
        return f'<a href="{self.resolver.link_of(decl)}"'


__all__ = ["LinkFixer", "PLACEHOLDER_RE"]
