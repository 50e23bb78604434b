"""
Symbol index contract consumed by the site generator.

The analysis engine that parses source text is opaque to declsite. All the
generator needs is the query surface below: category and naming queries,
containment and parent links, alias targets, and pre-rendered HTML
fragments. Anything with this shape works, which keeps the renderer
testable against :class:`declsite.symbols.memory.MemorySymbolIndex`.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── Decl            — integer declaration handle
        ├── Category        — closed category enum (engine wire values)
        └── SymbolIndex     — query protocol
              ├── memory.MemorySymbolIndex  (side-table, tests + graph documents)
              └── wasm.WasmSymbolIndex      (compiled analysis engine)

Guardrails:
    ❌ DON'T: Keep handles across a symbol index rebuild
    ✅ DO: Re-resolve by FQN after the generator recycles the index

Tags:
    protocol, symbol-index, contract, declsite
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Protocol, Sequence, runtime_checkable

from declsite.core.errors import UnknownCategoryError

# Identity of a declaration within one symbol index instance.
Decl = int


class Category(IntEnum):
    """Declaration categories, numbered as the analysis engine reports them."""

    NAMESPACE = 0
    CONTAINER = 1
    GLOBAL_VARIABLE = 2
    FUNCTION = 3
    PRIMITIVE = 4
    ERROR_SET = 5
    GLOBAL_CONST = 6
    ALIAS = 7
    TYPE = 8
    TYPE_TYPE = 9
    TYPE_FUNCTION = 10

    @classmethod
    def coerce(cls, value: Any) -> Category:
        """Map a raw category value onto the enum.

        Raises:
            UnknownCategoryError: ``value`` is outside the closed set.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError) as e:
            raise UnknownCategoryError(value, cause=e) from e

    @property
    def is_page_worthy(self) -> bool:
        """Namespaces and containers get their own page."""
        return self in (Category.NAMESPACE, Category.CONTAINER)

    @property
    def label(self) -> str:
        """Fallback header label when the index has no wording of its own."""
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: dict[Category, str] = {
    Category.NAMESPACE: "namespace",
    Category.CONTAINER: "container",
    Category.GLOBAL_VARIABLE: "global variable",
    Category.FUNCTION: "function",
    Category.PRIMITIVE: "primitive",
    Category.ERROR_SET: "error set",
    Category.GLOBAL_CONST: "global const",
    Category.ALIAS: "alias",
    Category.TYPE: "type",
    Category.TYPE_TYPE: "type",
    Category.TYPE_FUNCTION: "type function",
}


@runtime_checkable
class SymbolIndex(Protocol):
    """
    Query surface of a declaration graph.

    Fragment producers return an empty string when they do not apply to
    the declaration. List queries return an empty sequence. Field, param
    and error handles are only meaningful together with the declaration
    they were listed from.
    """

    # Identity and naming
    def classify(self, decl: Decl) -> Category: ...

    def category_name(self, decl: Decl) -> str: ...

    def name(self, decl: Decl) -> str: ...

    def fqn(self, decl: Decl) -> str: ...

    # Structure
    def parent(self, decl: Decl) -> Decl | None: ...

    def members(self, decl: Decl, include_private: bool = False) -> Sequence[Decl]: ...

    def type_function_members(self, decl: Decl) -> Sequence[Decl]: ...

    def alias_target(self, decl: Decl) -> Decl: ...

    def fields(self, decl: Decl) -> Sequence[int]: ...

    def type_function_fields(self, decl: Decl) -> Sequence[int]: ...

    def params(self, decl: Decl) -> Sequence[int]: ...

    def error_set(self, decl: Decl) -> Sequence[int]: ...

    # HTML fragments
    def docs_html(self, decl: Decl, short: bool = False) -> str: ...

    def fn_proto_html(self, decl: Decl, linkify_name: bool = False) -> str: ...

    def source_html(self, decl: Decl) -> str: ...

    def doctest_html(self, decl: Decl) -> str: ...

    def field_html(self, decl: Decl, field: int) -> str: ...

    def param_html(self, decl: Decl, param: int) -> str: ...

    def error_html(self, decl: Decl, error: int) -> str: ...

    # Lookup
    def find_by_fqn(self, fqn: str) -> Decl | None: ...

    def find_file_root(self, path: str) -> Decl | None: ...

    def root_declaration(self) -> Decl: ...

    # Lifecycle
    def close(self) -> None: ...


__all__ = ["Decl", "Category", "CATEGORY_LABELS", "SymbolIndex"]
