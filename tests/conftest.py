"""
Shared pytest fixtures for declsite tests.

Provides:
- ``sample_index``: a small standard-library-like graph built in memory
- ``sample_tree`` / ``graph_file``: the same graph as a YAML document
- ``index_factory``: a counting factory over the sample graph
- Logging isolation between tests

Graph used throughout::

    std                         namespace  (file std.zig)
    ├── mem                     namespace  (file mem.zig)
    │   ├── copy                function   (2 params, doctest)
    │   └── Allocator           container  (1 field)
    │       └── alloc           function   (1 error)
    ├── Alloc                   alias -> std.mem.Allocator
    ├── max_int                 global const
    └── _internal               function   (private)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml

from declsite.site.resolver import DeclarationResolver
from declsite.symbols.memory import MemorySymbolIndex
from declsite.symbols.protocols import Category


@pytest.fixture(autouse=True)
def _reset_logging():
    """Keep structlog configuration and bound context per-test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def build_sample_index() -> MemorySymbolIndex:
    index = MemorySymbolIndex()
    std = index.add(
        "std",
        Category.NAMESPACE,
        file="std.zig",
        docs='<p>Standard library. See <a href="#std.mem.copy">copy</a>.</p>',
    )
    mem = index.add(
        "mem",
        Category.NAMESPACE,
        parent=std,
        file="mem.zig",
        docs="<p>Memory utilities.</p>",
        short_docs="<p>Memory.</p>",
    )
    index.add(
        "copy",
        Category.FUNCTION,
        parent=mem,
        proto='<span>fn copy(dest: []u8, src: []const u8) <a href="#std.mem.Allocator">Allocator</a></span>',
        params=["<code>dest</code>", "<code>src</code>"],
        doctest="<span>copy(a, b);</span>",
        source="<span>pub fn copy() void {}</span>",
    )
    allocator = index.add(
        "Allocator",
        Category.CONTAINER,
        parent=mem,
        fields=["<code>ptr: *anyopaque</code>"],
    )
    index.add(
        "alloc",
        Category.FUNCTION,
        parent=allocator,
        errors=["<dt>OutOfMemory</dt>"],
    )
    alias = index.add("Alloc", Category.ALIAS, parent=std)
    index.set_alias(alias, allocator)
    index.add("max_int", Category.GLOBAL_CONST, parent=std, docs="<p>Largest value.</p>")
    index.add("_internal", Category.FUNCTION, parent=std, private=True)
    return index


@pytest.fixture
def sample_index() -> MemorySymbolIndex:
    return build_sample_index()


@pytest.fixture
def resolver(sample_index: MemorySymbolIndex) -> DeclarationResolver:
    return DeclarationResolver(sample_index)


@pytest.fixture
def sample_tree() -> dict[str, Any]:
    """The sample graph as a declaration-graph document."""
    return {
        "name": "std",
        "category": "namespace",
        "file": "std.zig",
        "docs": '<p>Standard library. See <a href="#std.mem.copy">copy</a>.</p>',
        "members": [
            {
                "name": "mem",
                "category": "namespace",
                "file": "mem.zig",
                "docs": "<p>Memory utilities.</p>",
                "short_docs": "<p>Memory.</p>",
                "members": [
                    {
                        "name": "copy",
                        "category": "function",
                        "proto": "<span>fn copy(dest: []u8, src: []const u8) void</span>",
                        "params": ["<code>dest</code>", "<code>src</code>"],
                    },
                    {
                        "name": "Allocator",
                        "category": "container",
                        "fields": ["<code>ptr: *anyopaque</code>"],
                        "members": [
                            {"name": "alloc", "category": "function", "errors": ["<dt>OutOfMemory</dt>"]},
                        ],
                    },
                ],
            },
            {"name": "Alloc", "category": "alias", "alias": "std.mem.Allocator"},
            {"name": "max_int", "category": "global_const"},
            {"name": "_internal", "category": "function", "private": True},
        ],
    }


@pytest.fixture
def graph_file(tmp_path: Path, sample_tree: dict[str, Any]) -> Path:
    path = tmp_path / "graph.yaml"
    path.write_text(yaml.safe_dump(sample_tree, sort_keys=False), encoding="utf-8")
    return path


class CountingFactory:
    """Index factory that records how many indexes it built."""

    def __init__(self, build=build_sample_index):
        self.build = build
        self.calls = 0

    def __call__(self) -> MemorySymbolIndex:
        self.calls += 1
        return self.build()


@pytest.fixture
def index_factory() -> CountingFactory:
    return CountingFactory()
