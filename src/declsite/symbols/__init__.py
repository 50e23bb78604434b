"""Symbol index contract and implementations.

``declsite.symbols.wasm`` needs the optional ``wasmtime`` dependency and
is imported only by callers that load an engine bundle.
"""

from .memory import MemorySymbolIndex
from .protocols import CATEGORY_LABELS, Category, Decl, SymbolIndex

__all__ = [
    "CATEGORY_LABELS",
    "Category",
    "Decl",
    "MemorySymbolIndex",
    "SymbolIndex",
]
