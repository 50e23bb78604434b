"""Tests for the engine-backed index helpers that need no engine module."""

import pytest

pytest.importorskip("wasmtime")

from declsite.core.errors import ErrorCategory, MissingConfigError  # noqa: E402
from declsite.symbols.wasm import (  # noqa: E402
    SOURCES_PATH,
    WASM_PATH,
    EngineError,
    _to_i64,
    engine_index_factory,
    load_engine_bundle,
    unpack_ptr_len,
)

pytestmark = pytest.mark.wasm


class TestPacking:
    def test_unpack_ptr_len(self):
        assert unpack_ptr_len((5 << 32) | 16) == (16, 5)

    def test_unpack_signed_result(self):
        """wasm i64 results arrive signed; the length is still the high half."""
        packed = (0xFFFF_FFFF << 32) | 8
        signed = packed - (1 << 64)
        assert unpack_ptr_len(signed) == (8, 0xFFFF_FFFF)

    @pytest.mark.parametrize(
        "value,expected",
        [(0, 0), (42, 42), ((1 << 63) - 1, (1 << 63) - 1), ((1 << 64) - 1, -1), (1 << 63, -(1 << 63))],
    )
    def test_to_i64(self, value, expected):
        assert _to_i64(value) == expected


class TestBundle:
    def test_missing_payloads(self, tmp_path):
        with pytest.raises(MissingConfigError):
            load_engine_bundle(tmp_path)

    def test_reads_both_payloads(self, tmp_path):
        (tmp_path / WASM_PATH).parent.mkdir(parents=True)
        (tmp_path / WASM_PATH).write_bytes(b"\0asm")
        (tmp_path / SOURCES_PATH).write_bytes(b"tar")
        assert load_engine_bundle(tmp_path) == (b"\0asm", b"tar")

    def test_factory_is_lazy(self, tmp_path):
        factory = engine_index_factory(tmp_path)
        with pytest.raises(MissingConfigError):
            factory()

    def test_engine_error_category(self):
        assert EngineError("trap").category == ErrorCategory.ENGINE
