"""Shared test fixtures for outputcas."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from outputcas.core.hasher import DigestEngine
from outputcas.core.upload_manifest import UploadManifest
from outputcas.models.results import ActionResult


@pytest.fixture
def engine() -> DigestEngine:
    """Provide a SHA-256 digest engine."""
    return DigestEngine("sha256")


@pytest.fixture
def exec_root(tmp_path: Path) -> Path:
    """Provide an empty execution root."""
    root = tmp_path / "execroot"
    root.mkdir()
    return root


@pytest.fixture
def result() -> ActionResult:
    """Provide an empty result record."""
    return ActionResult()


@pytest.fixture
def make_manifest(
    engine: DigestEngine, result: ActionResult, exec_root: Path
) -> Callable[..., UploadManifest]:
    """Factory fixture: build an UploadManifest over the test exec root."""

    def _factory(allow_symlinks: bool = False, inline_content_limit: int = 0) -> UploadManifest:
        return UploadManifest(
            engine,
            result,
            exec_root,
            allow_symlinks=allow_symlinks,
            inline_content_limit=inline_content_limit,
        )

    return _factory


@pytest.fixture
def manifest(make_manifest: Callable[..., UploadManifest]) -> UploadManifest:
    """Convenience: a manifest with symlinks disallowed and no inline budget."""
    return make_manifest()


@pytest.fixture
def write_tree() -> Callable[[Path, dict], Path]:
    """Factory fixture: materialize a nested dict as files and directories.

    String or bytes values become files; dict values become directories.
    """

    def _write(base: Path, layout: dict) -> Path:
        base.mkdir(parents=True, exist_ok=True)
        for name, value in layout.items():
            target = base / name
            if isinstance(value, dict):
                _write(target, value)
            elif isinstance(value, bytes):
                target.write_bytes(value)
            else:
                target.write_text(value)
        return base

    return _write
