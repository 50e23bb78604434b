"""Recursive page renderer.

Renders one page-worthy declaration and its entire member tree into a
single HTML document::

    render_page(std.mem)
      ├── breadcrumb nav          (lineage of std.mem)
      └── render_decl(std.mem, ancestors=[])                 h1 / h2
            ├── prototype, docs, params, errors, fields      (fixed-up fragments)
            ├── namespaces / containers                      (link lists)
            └── types / vars / values / fns / error sets
                  └── render_decl(member, ancestors=[std.mem])   h2 / h3
                        └── ...

A declaration already on the ancestor stack is rendered in cyclic mode:
header only, no content sections and no further recursion. This is the
only thing that stops a container that (transitively) lists itself.
Nesting deeper than ``PageRenderer.max_nesting`` raises
:class:`~declsite.core.errors.CorruptGraphError`.
"""

from __future__ import annotations

import html
import sys

from declsite.core.errors import CorruptGraphError
from declsite.site.classifier import categorize_members
from declsite.site.fixup import LinkFixer
from declsite.site.model import NavItem
from declsite.site.resolver import DeclarationResolver, sanitize_fqn, split_fqn
from declsite.site.templates import (
    CONTAINERS_TEMPLATE,
    DECL_TEMPLATE,
    DOC_TESTS_TEMPLATE,
    FIELDS_TEMPLATE,
    FN_ERRORS_TEMPLATE,
    FN_PROTO_TEMPLATE,
    LINK_ITEM_TEMPLATE,
    MEMBER_SECTIONS,
    MEMBERS_TEMPLATE,
    NAMESPACES_TEMPLATE,
    NAV_ITEM_TEMPLATE,
    PAGE_TEMPLATE,
    PARAMS_TEMPLATE,
    SHORT_DOCS_TEMPLATE,
    SOURCE_TEMPLATE,
    TLD_DOCS_TEMPLATE,
    render_template,
)
from declsite.symbols.protocols import Category, Decl

# Python frames one nesting level costs (render_decl, render_members, join)
_FRAMES_PER_LEVEL = 4

# Content keys blanked in cyclic mode
_CONTENT_KEYS = (
    "CONTENT:fnProto",
    "CONTENT:tldDocs",
    "CONTENT:params",
    "CONTENT:listFnErrors",
    "CONTENT:fields",
    "CONTENT:namespaces",
    "CONTENT:containers",
    "CONTENT:types",
    "CONTENT:globalVars",
    "CONTENT:values",
    "CONTENT:fns",
    "CONTENT:errSets",
    "CONTENT:docTests",
    "CONTENT:source",
)


def source_anchor(fqn: str) -> str:
    """Id of a declaration's source-code section heading."""
    return f"src.zig-{sanitize_fqn(fqn)}"


class PageRenderer:
    """Renders declaration pages against one symbol index.

    A renderer is bound to the index its resolver wraps; build a new one
    after the index is recycled.
    """

    def __init__(
        self,
        resolver: DeclarationResolver,
        fixer: LinkFixer | None = None,
        *,
        include_private: bool = False,
    ):
        self.resolver = resolver
        self.index = resolver.index
        self.fixer = fixer or LinkFixer(resolver)
        self.include_private = include_private
        self.max_nesting = min(resolver.max_depth, sys.getrecursionlimit() // _FRAMES_PER_LEVEL)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def render_page(self, decl: Decl) -> str:
        """Full HTML document for the page owned by ``decl``."""
        self.fixer.page = self.resolver.page_of(decl)
        return render_template(PAGE_TEMPLATE, {
            "TITLE": html.escape(self.index.fqn(decl)),
            "CONTENT:listNav": self.render_nav(decl),
            "CONTENT:body": self.render_decl(decl),
        })

    def nav_items(self, decl: Decl) -> list[NavItem]:
        """Breadcrumb entries: root FQN prefixes, then the lineage."""
        lineage = self.resolver.lineage_of(decl)
        if not lineage:
            return []

        items: list[NavItem] = []
        root_parts = split_fqn(self.index.fqn(lineage[0]))
        for i in range(len(root_parts) - 1):
            prefix_decl = self.index.find_by_fqn(".".join(root_parts[: i + 1]))
            href = self.resolver.link_of(prefix_decl) if prefix_decl is not None else "#"
            items.append(NavItem(name=root_parts[i], href=href))

        for lineage_decl in lineage:
            items.append(NavItem(
                name=self.index.name(lineage_decl),
                href=self.resolver.link_of(lineage_decl),
            ))

        if items:
            last = items[-1]
            items[-1] = NavItem(name=last.name, href=last.href, class_name="active")
        return items

    def render_nav(self, decl: Decl) -> str:
        return "".join(
            render_template(NAV_ITEM_TEMPLATE, {
                "HREF": item.href,
                "CLASS": item.class_name,
                "NAME": html.escape(item.name),
            })
            for item in self.nav_items(decl)
        )

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def render_decl(self, decl: Decl, ancestors: tuple[Decl, ...] = ()) -> str:
        """Render ``decl`` nested ``len(ancestors)`` levels deep.

        Args:
            decl: Declaration to render (already alias-resolved).
            ancestors: Declarations currently open on this render path.
        """
        depth = len(ancestors)
        header = f"h{depth + 1}"
        subheader = f"h{depth + 2}"
        fqn = self.index.fqn(decl)
        source_id = source_anchor(fqn)

        replacements = {
            "ID:header": sanitize_fqn(fqn),
            "TAG:header": header,
            "ID:sectSourceHeader": source_id,
            "CONTENT:declHeaderCategory": html.escape(self.index.category_name(decl)),
            "CONTENT:declHeaderIdentifier": html.escape(fqn if depth == 0 else self.index.name(decl)),
        }

        if depth > self.max_nesting:
            raise CorruptGraphError(
                f"Member nesting exceeds {self.max_nesting} levels",
                depth=self.max_nesting,
            ).with_context(decl=decl, fqn=fqn)

        if decl in ancestors:
            replacements.update({key: "" for key in _CONTENT_KEYS})
            return render_template(DECL_TEMPLATE, replacements)

        members = categorize_members(self.resolver, decl, include_private=self.include_private)
        child_ancestors = ancestors + (decl,)

        replacements.update({
            "CONTENT:fnProto": self.render_fn_proto(decl),
            "CONTENT:tldDocs": self.render_docs(decl),
            "CONTENT:params": self.render_params(decl, subheader),
            "CONTENT:listFnErrors": self.render_fn_errors(decl, subheader),
            "CONTENT:fields": self.render_fields(decl, subheader),
            "CONTENT:namespaces": self.render_links(members.namespaces, NAMESPACES_TEMPLATE, subheader),
            "CONTENT:containers": self.render_links(members.containers, CONTAINERS_TEMPLATE, subheader),
            "CONTENT:docTests": self.render_doc_tests(decl, subheader),
            "CONTENT:source": self.render_source(decl, subheader, source_id),
        })
        for bucket, key, heading, section_class, list_class in MEMBER_SECTIONS:
            replacements[key] = self.render_members(
                getattr(members, bucket),
                subheader,
                child_ancestors,
                heading=heading,
                section_class=section_class,
                list_class=list_class,
            )
        return render_template(DECL_TEMPLATE, replacements)

    def render_members(
        self,
        members: list[Decl],
        subheader: str,
        ancestors: tuple[Decl, ...],
        *,
        heading: str,
        section_class: str,
        list_class: str,
    ) -> str:
        if not members:
            return ""
        return render_template(MEMBERS_TEMPLATE, {
            "CLASS": section_class,
            "HEADER": heading,
            "CONTENT_CLASS": list_class,
            "TAG:subheader": subheader,
            "CONTENT": "".join(self.render_decl(member, ancestors) for member in members),
        })

    # ------------------------------------------------------------------
    # Content sections (each omitted when it has nothing to show)
    # ------------------------------------------------------------------

    def render_fn_proto(self, decl: Decl) -> str:
        if self.resolver.category(decl) != Category.FUNCTION:
            return ""
        code = self.index.fn_proto_html(decl, False)
        if not code:
            return ""
        return render_template(FN_PROTO_TEMPLATE, {"CONTENT": self.fixer.fix(code)})

    def render_docs(self, decl: Decl) -> str:
        docs = self.index.docs_html(decl)
        if not docs:
            return ""
        return render_template(TLD_DOCS_TEMPLATE, {"CONTENT": self.fixer.fix(docs)})

    def render_params(self, decl: Decl, subheader: str) -> str:
        params = self.index.params(decl)
        if not params:
            return ""
        return render_template(PARAMS_TEMPLATE, {
            "TAG:subheader": subheader,
            "CONTENT": self._divs(self.index.param_html(decl, param) for param in params),
        })

    def render_fn_errors(self, decl: Decl, subheader: str) -> str:
        errors = self.index.error_set(decl)
        if not errors:
            return ""
        return render_template(FN_ERRORS_TEMPLATE, {
            "TAG:subheader": subheader,
            "CONTENT": self._divs(self.index.error_html(decl, error) for error in errors),
        })

    def render_fields(self, decl: Decl, subheader: str) -> str:
        if self.resolver.category(decl) == Category.TYPE_FUNCTION:
            fields = self.index.type_function_fields(decl)
        else:
            fields = self.index.fields(decl)
        if not fields:
            return ""
        return render_template(FIELDS_TEMPLATE, {
            "TAG:subheader": subheader,
            "CONTENT": self._divs(self.index.field_html(decl, field) for field in fields),
        })

    def render_links(self, decls: list[Decl], template: str, subheader: str) -> str:
        """Link list for namespace or container members (they have their own pages)."""
        if not decls:
            return ""
        items = []
        for decl in decls:
            short_docs = self.index.docs_html(decl, True)
            items.append(render_template(LINK_ITEM_TEMPLATE, {
                "HREF": self.resolver.link_of(decl),
                "NAME": html.escape(self.index.fqn(decl)),
                "CONTENT:shortDocs": (
                    render_template(SHORT_DOCS_TEMPLATE, {"CONTENT": self.fixer.fix(short_docs)})
                    if short_docs else ""
                ),
            }))
        return render_template(template, {"TAG:subheader": subheader, "CONTENT": "".join(items)})

    def render_doc_tests(self, decl: Decl, subheader: str) -> str:
        tests = self.index.doctest_html(decl)
        if not tests:
            return ""
        return render_template(DOC_TESTS_TEMPLATE, {
            "TAG:subheader": subheader,
            "CONTENT": self.fixer.fix(tests),
        })

    def render_source(self, decl: Decl, subheader: str, source_id: str) -> str:
        source = self.index.source_html(decl)
        if not source:
            return ""
        return render_template(SOURCE_TEMPLATE, {
            "TAG:subheader": subheader,
            "ID:sectSourceHeader": source_id,
            "CONTENT": self.fixer.fix(source),
        })

    def _divs(self, fragments) -> str:
        return "".join(f"<div>{self.fixer.fix(fragment)}</div>" for fragment in fragments)


__all__ = ["PageRenderer", "source_anchor"]
