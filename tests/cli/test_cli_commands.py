"""Tests for declsite.cli — command smoke tests via CliRunner.

Every command runs against a YAML declaration graph written to tmp_path,
so no engine bundle is needed.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from declsite import __version__
from declsite.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv("DECLSITE_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("DECLSITE_RECYCLE_INTERVAL", raising=False)
    monkeypatch.chdir(tmp_path)


# ─── Root ────────────────────────────────────────────────────────────────


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"declsite {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "build" in result.output
        assert "discover" in result.output


# ─── build ───────────────────────────────────────────────────────────────


class TestBuild:
    def test_build_graph_document(self, graph_file, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(app, ["build", str(graph_file), "-o", str(out), "--console-logs"])
        assert result.exit_code == 0, result.output
        assert "Generated 3 page(s)" in result.output
        assert {p.name for p in out.iterdir()} == {
            "index.html", "std.html", "std.mem.html", "std.mem.Allocator.html",
        }

    def test_default_output_dir_from_settings(self, graph_file, tmp_path):
        result = runner.invoke(app, ["build", str(graph_file)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "site" / "index.html").is_file()

    def test_config_file(self, graph_file, tmp_path):
        config = tmp_path / "declsite.yaml"
        config.write_text(f"output_dir: {tmp_path / 'from-config'}\nrecycle_interval: 1\n", encoding="utf-8")
        result = runner.invoke(app, ["build", str(graph_file), "--config", str(config)])
        assert result.exit_code == 0, result.output
        assert "3 index rebuild(s)" in result.output
        assert (tmp_path / "from-config" / "std.html").is_file()

    def test_recycle_option(self, graph_file, tmp_path):
        result = runner.invoke(app, ["build", str(graph_file), "-o", str(tmp_path / "o"), "--recycle-every", "2"])
        assert result.exit_code == 0, result.output
        assert "1 index rebuild(s)" in result.output

    def test_include_private(self, graph_file, tmp_path):
        out = tmp_path / "o"
        result = runner.invoke(app, ["build", str(graph_file), "-o", str(out), "--include-private"])
        assert result.exit_code == 0, result.output
        assert "_internal" in (out / "std.html").read_text(encoding="utf-8")

    def test_missing_source(self, tmp_path):
        result = runner.invoke(app, ["build", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1

    def test_unsupported_source(self, tmp_path):
        source = tmp_path / "graph.txt"
        source.write_text("name: std\n", encoding="utf-8")
        result = runner.invoke(app, ["build", str(source)])
        assert result.exit_code == 1

    def test_invalid_document(self, tmp_path):
        source = tmp_path / "bad.yaml"
        source.write_text("name: std\n", encoding="utf-8")
        result = runner.invoke(app, ["build", str(source)])
        assert result.exit_code == 1
        assert not (tmp_path / "site" / "index.html").exists()

    def test_graph_error_exits_non_zero(self, tmp_path):
        source = tmp_path / "cyclic.yaml"
        source.write_text(
            "name: root\n"
            "category: namespace\n"
            "members:\n"
            "  - {name: A, category: alias, alias: root.B}\n"
            "  - {name: B, category: alias, alias: root.A}\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["build", str(source), "-o", str(tmp_path / "o")])
        assert result.exit_code == 1


# ─── discover ────────────────────────────────────────────────────────────


class TestDiscover:
    def test_json(self, graph_file):
        result = runner.invoke(app, ["discover", str(graph_file), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["declarations"] == 6
        assert data["pages"] == [
            {"fqn": "std", "path": "std.html"},
            {"fqn": "std.mem.Allocator", "path": "std.mem.Allocator.html"},
            {"fqn": "std.mem", "path": "std.mem.html"},
        ]

    def test_text(self, graph_file):
        result = runner.invoke(app, ["discover", str(graph_file)])
        assert result.exit_code == 0, result.output
        assert "std.mem.Allocator.html" in result.output
        assert "3 page(s), 6 declaration(s)" in result.output

    def test_writes_nothing(self, graph_file, tmp_path):
        runner.invoke(app, ["discover", str(graph_file)])
        assert not (tmp_path / "site").exists()


# ─── locate ──────────────────────────────────────────────────────────────


class TestLocate:
    def test_known_file(self, graph_file):
        result = runner.invoke(app, ["locate", str(graph_file), "mem.zig"])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip().splitlines()[-1] == "std.mem.html"

    def test_unknown_file(self, graph_file):
        result = runner.invoke(app, ["locate", str(graph_file), "nope.zig"])
        assert result.exit_code == 1
        assert "No declaration for file" in result.output
