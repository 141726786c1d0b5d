"""Unit tests for the CLI: command registration and basic behavior."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from outputcas.cli.app import app
from outputcas.config import settings
from outputcas.core.hasher import DigestEngine

runner = CliRunner()


class TestCliApp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "tree" in result.output
        assert "manifest" in result.output

    def test_tree_command(self, tmp_path: Path, write_tree):
        out = write_tree(tmp_path / "out", {"a.txt": "a", "sub": {"b.txt": "b"}})
        result = runner.invoke(app, ["tree", str(out)])
        assert result.exit_code == 0, result.output
        assert "Root digest" in result.output
        assert "Tree digest" in result.output

    def test_tree_rejects_symlink(self, tmp_path: Path, write_tree):
        out = write_tree(tmp_path / "out", {"a": "a"})
        (out / "l").symlink_to(out / "a")
        result = runner.invoke(app, ["tree", str(out), "--no-allow-symlinks"])
        assert result.exit_code == 1

    def test_tree_bad_digest_function(self, tmp_path: Path):
        result = runner.invoke(app, ["tree", str(tmp_path), "-d", "nope"])
        assert result.exit_code == 2


class TestManifestCommand:
    def test_json_output(self, exec_root: Path, write_tree):
        write_tree(exec_root, {"app.bin": "binary", "out": {"x": "1"}})
        result = runner.invoke(
            app,
            [
                "--log-level", "WARNING",
                "manifest", "--exec-root", str(exec_root),
                "--file", "app.bin", "--file", "missing.bin",
                "--dir", "out", "--json",
            ],
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert [f["path"] for f in payload["result"]["output_files"]] == ["app.bin"]
        assert [d["path"] for d in payload["result"]["output_directories"]] == ["out"]
        assert len(payload["digest_to_file"]) == 2
        assert len(payload["digest_to_upload_unit"]) == 1
        assert payload["stored"] == 0

    def test_store_option(self, exec_root: Path, tmp_path: Path, write_tree):
        write_tree(exec_root, {"out": {"x": "1", "y": "2"}})
        store = tmp_path / "blobs"
        result = runner.invoke(
            app,
            ["manifest", "-r", str(exec_root), "--dir", "out", "--store", str(store)],
        )
        assert result.exit_code == 0, result.output
        assert "Stored 3 blobs" in result.output
        assert store.exists()

    def test_mismatched_output_exits_nonzero(self, exec_root: Path):
        (exec_root / "out").mkdir()
        result = runner.invoke(app, ["manifest", "-r", str(exec_root), "--file", "out"])
        assert result.exit_code == 1
        assert "Output rejected" in result.output

    def test_bad_digest_function_setting(self, exec_root: Path, monkeypatch):
        monkeypatch.setattr(settings, "digest_function", "nope")
        result = runner.invoke(app, ["manifest", "-r", str(exec_root)])
        assert result.exit_code == 2
        assert "Unsupported digest function" in result.output

    def test_corrupted_store_exits_nonzero(self, exec_root: Path, tmp_path: Path):
        (exec_root / "a.txt").write_text("1")
        digest = DigestEngine().compute(b"1")
        store = tmp_path / "blobs"
        blob = store / digest.hash[:2] / digest.hash[2:4] / digest.hash
        blob.parent.mkdir(parents=True)
        blob.write_bytes(b"tampered")

        result = runner.invoke(
            app, ["manifest", "-r", str(exec_root), "--file", "a.txt", "--store", str(store)]
        )
        assert result.exit_code == 1
        assert "Cannot store blobs" in result.output
