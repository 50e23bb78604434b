"""In-memory symbol index backed by a side table of declaration records.

Handles are list positions, so identity is plain integer equality. The
index is filled either programmatically (:meth:`MemorySymbolIndex.add`) or
from a declaration-graph document, a nested YAML/JSON tree::

    name: std
    category: namespace
    members:
      - name: mem
        category: namespace
        docs: "<p>Memory utilities.</p>"
        members:
          - name: copy
            category: function
            proto: "<span>fn copy(dest: []u8, src: []const u8) void</span>"
            params: ["<code>dest</code>", "<code>src</code>"]
      - name: Allocator
        category: alias
        alias: std.mem.Allocator
      - ref: std            # extra containment edge to an existing declaration

Tags:
    symbol-index, in-memory, graph-document, declsite
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from declsite.core.errors import DeclsiteError, InvalidGraphDocumentError, MissingConfigError
from declsite.core.logging import get_logger
from declsite.symbols.protocols import Category, Decl

logger = get_logger(__name__)

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Keys a declaration node in a graph document may carry
_NODE_KEYS = frozenset({
    "name", "category", "label", "private", "alias", "members", "type_fn_members",
    "docs", "short_docs", "proto", "source", "doctest",
    "fields", "type_fn_fields", "params", "errors", "file",
})


def quote_name(name: str) -> str:
    """Quote a declaration name that is not a plain identifier."""
    if _IDENTIFIER_RE.fullmatch(name):
        return name
    return f'@"{name}"'


def _parse_category(value: Category | int | str) -> Category | int:
    """Accept an enum member, its wire value, or its name.

    Unknown integers are kept as-is so an index can reproduce a category
    the renderer does not know about.
    """
    if isinstance(value, Category):
        return value
    if isinstance(value, str):
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return Category[key]
        except KeyError as e:
            raise InvalidGraphDocumentError(f"Unknown category name: {value!r}", cause=e) from e
    try:
        return Category(value)
    except ValueError:
        return value


def _sequence(node: Mapping[str, Any], key: str) -> list[Any]:
    """List-valued node key; an empty YAML value (``fields:``) counts as none."""
    value = node.get(key)
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise InvalidGraphDocumentError(f"'{key}' must be a list, got {value!r}")
    return list(value)


@dataclass
class DeclRecord:
    """One row of the side table."""

    name: str
    fqn: str
    category: Category | int
    parent: Decl | None = None
    label: str = ""
    members: list[tuple[Decl, bool]] = field(default_factory=list)
    type_fn_members: list[Decl] = field(default_factory=list)
    alias: Decl | None = None
    docs: str = ""
    short_docs: str = ""
    proto: str = ""
    source: str = ""
    doctest: str = ""
    fields: list[str] = field(default_factory=list)
    type_fn_fields: list[str] = field(default_factory=list)
    params: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    file: str | None = None


class MemorySymbolIndex:
    """Side-table implementation of :class:`~declsite.symbols.protocols.SymbolIndex`.

    Examples:
        >>> index = MemorySymbolIndex()
        >>> root = index.add("root", Category.NAMESPACE)
        >>> f = index.add("f", Category.FUNCTION, parent=root, errors=["<dt>E</dt>"])
        >>> index.fqn(f)
        'root.f'
        >>> index.find_by_fqn("root.f") == f
        True
    """

    def __init__(self) -> None:
        self._records: list[DeclRecord] = []
        self._by_fqn: dict[str, Decl] = {}
        self._by_file: dict[str, Decl] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add(
        self,
        name: str,
        category: Category | int | str,
        parent: Decl | None = None,
        *,
        private: bool = False,
        label: str = "",
        docs: str = "",
        short_docs: str = "",
        proto: str = "",
        source: str = "",
        doctest: str = "",
        fields: Iterable[str] = (),
        type_fn_fields: Iterable[str] = (),
        params: Iterable[str] = (),
        errors: Iterable[str] = (),
        file: str | None = None,
        listed: bool = True,
    ) -> Decl:
        """Register a declaration and return its handle.

        The declaration is listed among its parent's members unless
        ``listed`` is false (used for type-function members, which the
        engine reports through a separate query).
        """
        if parent is None:
            fqn = quote_name(name)
        else:
            fqn = f"{self._record(parent).fqn}.{quote_name(name)}"
        if fqn in self._by_fqn:
            raise InvalidGraphDocumentError(f"Duplicate declaration: {fqn}")

        decl = len(self._records)
        self._records.append(
            DeclRecord(
                name=name,
                fqn=fqn,
                category=_parse_category(category),
                parent=parent,
                label=label,
                docs=docs,
                short_docs=short_docs,
                proto=proto,
                source=source,
                doctest=doctest,
                fields=list(fields),
                type_fn_fields=list(type_fn_fields),
                params=list(params),
                errors=list(errors),
                file=file,
            )
        )
        self._by_fqn[fqn] = decl
        if file is not None:
            self._by_file[file] = decl
        if parent is not None and listed:
            self._record(parent).members.append((decl, private))
        return decl

    def add_member(self, owner: Decl, member: Decl, *, private: bool = False) -> None:
        """Add an extra containment edge (the member keeps its own parent)."""
        self._record(member)
        self._record(owner).members.append((member, private))

    def add_type_function_member(self, owner: Decl, member: Decl) -> None:
        self._record(member)
        self._record(owner).type_fn_members.append(member)

    def set_alias(self, decl: Decl, target: Decl) -> None:
        self._record(target)
        self._record(decl).alias = target

    # ------------------------------------------------------------------
    # Graph documents
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, tree: Mapping[str, Any]) -> MemorySymbolIndex:
        """Build an index from a nested declaration tree.

        Raises:
            InvalidGraphDocumentError: Malformed node, duplicate FQN, or an
                alias/ref naming a declaration that does not exist.
        """
        index = cls()
        pending_aliases: list[tuple[Decl, str]] = []
        pending_refs: list[tuple[Decl, str, bool]] = []
        index._load_node(tree, None, pending_aliases, pending_refs, listed=True)

        for decl, target_fqn in pending_aliases:
            target = index.find_by_fqn(target_fqn)
            if target is None:
                raise InvalidGraphDocumentError(
                    f"Alias {index.fqn(decl)} targets unknown declaration {target_fqn}"
                )
            index.set_alias(decl, target)

        for owner, target_fqn, private in pending_refs:
            target = index.find_by_fqn(target_fqn)
            if target is None:
                raise InvalidGraphDocumentError(
                    f"Member reference in {index.fqn(owner)} names unknown declaration {target_fqn}"
                )
            index.add_member(owner, target, private=private)

        return index

    @classmethod
    def from_file(cls, path: Path) -> MemorySymbolIndex:
        """Load a graph document (``.json``, otherwise YAML)."""
        path = Path(path)
        if not path.is_file():
            raise MissingConfigError(str(path), f"Declaration graph not found: {path}")
        logger.debug("graph_document_loading", path=str(path))
        with open(path, encoding="utf-8") as f:
            try:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
            except (json.JSONDecodeError, yaml.YAMLError) as e:
                raise InvalidGraphDocumentError(f"Invalid graph document {path}: {e}", cause=e) from e
        if not isinstance(data, Mapping):
            raise InvalidGraphDocumentError(f"Declaration graph must be a mapping: {path}")
        return cls.from_dict(data)

    def _load_node(
        self,
        node: Mapping[str, Any],
        parent: Decl | None,
        pending_aliases: list[tuple[Decl, str]],
        pending_refs: list[tuple[Decl, str, bool]],
        *,
        listed: bool,
    ) -> Decl:
        if not isinstance(node, Mapping):
            raise InvalidGraphDocumentError(f"Declaration node must be a mapping, got {node!r}")
        unknown = set(node) - _NODE_KEYS
        if unknown:
            raise InvalidGraphDocumentError(f"Unknown keys in declaration node: {sorted(unknown)}")
        if "name" not in node or "category" not in node:
            raise InvalidGraphDocumentError(f"Declaration node needs 'name' and 'category': {dict(node)!r}")

        decl = self.add(
            str(node["name"]),
            node["category"],
            parent,
            private=bool(node.get("private", False)),
            label=node.get("label") or "",
            docs=node.get("docs") or "",
            short_docs=node.get("short_docs") or "",
            proto=node.get("proto") or "",
            source=node.get("source") or "",
            doctest=node.get("doctest") or "",
            fields=_sequence(node, "fields"),
            type_fn_fields=_sequence(node, "type_fn_fields"),
            params=_sequence(node, "params"),
            errors=_sequence(node, "errors"),
            file=node.get("file"),
            listed=listed,
        )
        if "alias" in node:
            pending_aliases.append((decl, str(node["alias"])))

        for child in _sequence(node, "members"):
            if isinstance(child, Mapping) and "ref" in child:
                pending_refs.append((decl, str(child["ref"]), bool(child.get("private", False))))
                continue
            self._load_node(child, decl, pending_aliases, pending_refs, listed=True)

        for child in _sequence(node, "type_fn_members"):
            member = self._load_node(child, decl, pending_aliases, pending_refs, listed=False)
            self._record(decl).type_fn_members.append(member)

        return decl

    # ------------------------------------------------------------------
    # SymbolIndex queries
    # ------------------------------------------------------------------

    def _record(self, decl: Decl) -> DeclRecord:
        if self._closed:
            raise DeclsiteError("Symbol index has been closed")
        # -1 is the engine's "not found" handle
        if isinstance(decl, int) and decl < 0:
            raise DeclsiteError(f"Unknown declaration handle: {decl!r}")
        try:
            return self._records[decl]
        except (IndexError, TypeError) as e:
            raise DeclsiteError(f"Unknown declaration handle: {decl!r}", cause=e) from e

    def classify(self, decl: Decl) -> Category:
        return self._record(decl).category  # type: ignore[return-value]

    def category_name(self, decl: Decl) -> str:
        record = self._record(decl)
        return record.label or Category.coerce(record.category).label

    def name(self, decl: Decl) -> str:
        return self._record(decl).name

    def fqn(self, decl: Decl) -> str:
        return self._record(decl).fqn

    def parent(self, decl: Decl) -> Decl | None:
        return self._record(decl).parent

    def members(self, decl: Decl, include_private: bool = False) -> list[Decl]:
        return [m for m, private in self._record(decl).members if include_private or not private]

    def type_function_members(self, decl: Decl) -> list[Decl]:
        return list(self._record(decl).type_fn_members)

    def alias_target(self, decl: Decl) -> Decl:
        target = self._record(decl).alias
        if target is None:
            raise DeclsiteError(f"Declaration is not an alias: {self.fqn(decl)}")
        return target

    def fields(self, decl: Decl) -> list[int]:
        return list(range(len(self._record(decl).fields)))

    def type_function_fields(self, decl: Decl) -> list[int]:
        record = self._record(decl)
        start = len(record.fields)
        return list(range(start, start + len(record.type_fn_fields)))

    def params(self, decl: Decl) -> list[int]:
        return list(range(len(self._record(decl).params)))

    def error_set(self, decl: Decl) -> list[int]:
        return list(range(len(self._record(decl).errors)))

    def docs_html(self, decl: Decl, short: bool = False) -> str:
        record = self._record(decl)
        return record.short_docs if short else record.docs

    def fn_proto_html(self, decl: Decl, linkify_name: bool = False) -> str:
        return self._record(decl).proto

    def source_html(self, decl: Decl) -> str:
        return self._record(decl).source

    def doctest_html(self, decl: Decl) -> str:
        return self._record(decl).doctest

    def field_html(self, decl: Decl, field: int) -> str:
        record = self._record(decl)
        return (record.fields + record.type_fn_fields)[field]

    def param_html(self, decl: Decl, param: int) -> str:
        return self._record(decl).params[param]

    def error_html(self, decl: Decl, error: int) -> str:
        return self._record(decl).errors[error]

    def find_by_fqn(self, fqn: str) -> Decl | None:
        if self._closed:
            raise DeclsiteError("Symbol index has been closed")
        return self._by_fqn.get(fqn)

    def find_file_root(self, path: str) -> Decl | None:
        if self._closed:
            raise DeclsiteError("Symbol index has been closed")
        return self._by_file.get(path)

    def root_declaration(self) -> Decl:
        if not self._records:
            raise InvalidGraphDocumentError("Declaration graph is empty")
        return 0

    def close(self) -> None:
        self._closed = True

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["MemorySymbolIndex", "DeclRecord", "quote_name"]
