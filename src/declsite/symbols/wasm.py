"""Symbol index backed by the compiled analysis engine (WebAssembly).

The engine ships as two payloads in a documentation data directory:

- ``basis/main.wasm``   — the compiled analysis module
- ``basis/sources.tar`` — the packed source archive it analyses

The module is hosted with ``wasmtime``. Its exports return strings and
slices packed into one 64-bit integer: the low 32 bits are a pointer into
linear memory, the high 32 bits a length. String inputs (FQN and file
lookups) are copied into a buffer the module hands out through
``set_input_string``.

The engine never frees memory it allocated for query results, so a long
run must drop the instance and build a new one; see
:class:`declsite.site.generator.SiteGenerator` for the recycling policy.

Requires the ``wasm`` extra::

    pip install declsite[wasm]

Tags:
    symbol-index, wasm, ffi, declsite
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Callable

from wasmtime import Engine, FuncType, Linker, Module, Store, ValType

from declsite.core.errors import DeclsiteError, ErrorCategory, MissingConfigError
from declsite.core.logging import get_logger
from declsite.symbols.protocols import Category, Decl

logger = get_logger(__name__)

WASM_PATH = Path("basis") / "main.wasm"
SOURCES_PATH = Path("basis") / "sources.tar"

_U64_MASK = 0xFFFF_FFFF_FFFF_FFFF

# Engine log levels (js.log import)
_LOG_LEVELS = {0: "error", 1: "warning", 2: "info", 3: "debug"}


def unpack_ptr_len(packed: int) -> tuple[int, int]:
    """Split a packed 64-bit result into ``(ptr, len)``."""
    packed &= _U64_MASK
    return packed & 0xFFFF_FFFF, packed >> 32


def _to_i64(value: int) -> int:
    """Reinterpret an unsigned 64-bit handle as the signed wasm i64."""
    value &= _U64_MASK
    return value - (1 << 64) if value >= (1 << 63) else value


class EngineError(DeclsiteError):
    """The analysis engine could not be loaded or misbehaved."""

    default_category = ErrorCategory.ENGINE


class WasmSymbolIndex:
    """:class:`~declsite.symbols.protocols.SymbolIndex` over the analysis engine.

    Examples:
        >>> wasm_bytes, tar_bytes = load_engine_bundle(Path("std/0.14.1"))
        >>> index = WasmSymbolIndex(wasm_bytes, tar_bytes)
        >>> index.fqn(index.root_declaration())
        'std'
    """

    def __init__(self, wasm_bytes: bytes, tar_bytes: bytes):
        self._engine = Engine()
        self._store = Store(self._engine)
        try:
            module = Module(self._engine, wasm_bytes)
            linker = Linker(self._engine)
            linker.define_func(
                "js",
                "log",
                FuncType([ValType.i32(), ValType.i32(), ValType.i32()], []),
                self._log,
                access_caller=True,
            )
            instance = linker.instantiate(self._store, module)
        except Exception as e:
            raise EngineError("Failed to instantiate analysis engine", cause=e) from e

        self._exports = instance.exports(self._store)
        self._memory = self._exports["memory"]
        self._load_sources(tar_bytes)

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _log(caller, level: int, ptr: int, length: int) -> None:
        data = caller["memory"].read(caller, ptr, ptr + length) if length else b""
        message = bytes(data).decode("utf-8", errors="replace")
        method = _LOG_LEVELS.get(level, "info")
        getattr(logger, method)("engine_log", message=message)

    def _call(self, export: str, *args: int) -> int:
        if self._store is None:
            raise EngineError("Symbol index has been closed")
        return self._exports[export](self._store, *args)

    def _read(self, ptr: int, length: int) -> bytes:
        return bytes(self._memory.read(self._store, ptr, ptr + length))

    def _string(self, packed: int) -> str:
        ptr, length = unpack_ptr_len(packed)
        if length == 0:
            return ""
        return self._read(ptr, length).decode("utf-8")

    def _slice32(self, packed: int) -> list[int]:
        ptr, length = unpack_ptr_len(packed)
        if length == 0:
            return []
        return list(struct.unpack(f"<{length}I", self._read(ptr, length * 4)))

    def _slice64(self, packed: int) -> list[int]:
        ptr, length = unpack_ptr_len(packed)
        if length == 0:
            return []
        return list(struct.unpack(f"<{length}Q", self._read(ptr, length * 8)))

    def _set_input_string(self, text: str) -> None:
        data = text.encode("utf-8")
        ptr = self._call("set_input_string", len(data))
        self._memory.write(self._store, data, ptr)

    def _load_sources(self, tar_bytes: bytes) -> None:
        ptr = self._call("alloc", len(tar_bytes))
        self._memory.write(self._store, tar_bytes, ptr)
        self._call("unpack", ptr, len(tar_bytes))

    @staticmethod
    def _optional(result: int) -> Decl | None:
        return None if result == -1 else result

    # ------------------------------------------------------------------
    # SymbolIndex queries
    # ------------------------------------------------------------------

    def classify(self, decl: Decl) -> Category:
        return Category.coerce(self._call("categorize_decl", decl, 0))

    def category_name(self, decl: Decl) -> str:
        return self._string(self._call("decl_category_name", decl))

    def name(self, decl: Decl) -> str:
        return self._string(self._call("decl_name", decl))

    def fqn(self, decl: Decl) -> str:
        return self._string(self._call("decl_fqn", decl))

    def module_name(self, module: int) -> str:
        return self._string(self._call("module_name", module))

    def parent(self, decl: Decl) -> Decl | None:
        return self._optional(self._call("decl_parent", decl))

    def members(self, decl: Decl, include_private: bool = False) -> list[Decl]:
        return self._slice32(self._call("namespace_members", decl, int(include_private)))

    def type_function_members(self, decl: Decl) -> list[Decl]:
        return self._slice32(self._call("type_fn_members", decl))

    def alias_target(self, decl: Decl) -> Decl:
        # The engine records the aliasee while categorizing.
        self._call("categorize_decl", decl, 0)
        return self._call("get_aliasee")

    def fields(self, decl: Decl) -> list[int]:
        return self._slice32(self._call("decl_fields", decl))

    def type_function_fields(self, decl: Decl) -> list[int]:
        return self._slice32(self._call("type_fn_fields", decl))

    def params(self, decl: Decl) -> list[int]:
        return self._slice32(self._call("decl_params", decl))

    def error_set(self, decl: Decl) -> list[int]:
        return self._slice64(self._call("decl_error_set", decl))

    def docs_html(self, decl: Decl, short: bool = False) -> str:
        return self._string(self._call("decl_docs_html", decl, int(short)))

    def fn_proto_html(self, decl: Decl, linkify_name: bool = False) -> str:
        return self._string(self._call("decl_fn_proto_html", decl, int(linkify_name)))

    def source_html(self, decl: Decl) -> str:
        return self._string(self._call("decl_source_html", decl))

    def doctest_html(self, decl: Decl) -> str:
        return self._string(self._call("decl_doctest_html", decl))

    def field_html(self, decl: Decl, field: int) -> str:
        return self._string(self._call("decl_field_html", decl, field))

    def param_html(self, decl: Decl, param: int) -> str:
        return self._string(self._call("decl_param_html", decl, param))

    def error_html(self, decl: Decl, error: int) -> str:
        return self._string(self._call("error_html", decl, _to_i64(error)))

    def find_by_fqn(self, fqn: str) -> Decl | None:
        self._set_input_string(fqn)
        return self._optional(self._call("find_decl"))

    def find_file_root(self, path: str) -> Decl | None:
        self._set_input_string(path)
        return self._optional(self._call("find_file_root"))

    def root_declaration(self) -> Decl:
        root = self.find_by_fqn(self.module_name(0))
        if root is None:
            raise EngineError("Analysis engine reports no root declaration")
        return root

    def close(self) -> None:
        """Drop the instance so its linear memory can be reclaimed."""
        self._exports = None
        self._memory = None
        self._store = None
        self._engine = None


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_engine_bundle(data_dir: Path) -> tuple[bytes, bytes]:
    """Read the engine module and source archive from a data directory.

    Raises:
        MissingConfigError: Either payload is missing.
    """
    data_dir = Path(data_dir)
    payloads: list[bytes] = []
    for rel in (WASM_PATH, SOURCES_PATH):
        path = data_dir / rel
        if not path.is_file():
            raise MissingConfigError(str(path), f"Engine payload not found: {path}")
        payloads.append(path.read_bytes())
    return payloads[0], payloads[1]


def engine_index_factory(data_dir: Path) -> Callable[[], WasmSymbolIndex]:
    """Return a callable that builds a fresh engine-backed index.

    Each call re-reads both payloads, so a recycled index starts from a
    clean module instance.
    """
    data_dir = Path(data_dir)

    def factory() -> WasmSymbolIndex:
        logger.info(
            "engine_loading",
            wasm=str(data_dir / WASM_PATH),
            sources=str(data_dir / SOURCES_PATH),
        )
        wasm_bytes, tar_bytes = load_engine_bundle(data_dir)
        return WasmSymbolIndex(wasm_bytes, tar_bytes)

    return factory


__all__ = [
    "EngineError",
    "WasmSymbolIndex",
    "engine_index_factory",
    "load_engine_bundle",
    "unpack_ptr_len",
]
