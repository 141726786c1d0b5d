"""Tests for outputcas data models: immutability and serialization."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from outputcas.models import (
    ActionResult,
    ContentDigest,
    ContentOutcome,
    DirectoryNode,
    FileStatus,
    OutputFile,
    TreeSnapshot,
    UploadUnit,
)


class TestContentDigest:
    def test_frozen(self):
        digest = ContentDigest(hash="ab", size_bytes=1)
        with pytest.raises(ValidationError):
            digest.hash = "cd"  # type: ignore[misc]

    def test_equality_needs_both_fields(self):
        assert ContentDigest(hash="ab", size_bytes=1) == ContentDigest(hash="ab", size_bytes=1)
        assert ContentDigest(hash="ab", size_bytes=1) != ContentDigest(hash="ab", size_bytes=2)


class TestFileStatusKind:
    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (FileStatus(is_file=True), "file"),
            (FileStatus(is_directory=True), "directory"),
            (FileStatus(is_symlink=True), "symbolic link"),
            (FileStatus(is_special=True), "special file"),
        ],
    )
    def test_kind(self, status: FileStatus, kind: str):
        assert status.kind == kind


class TestResultModels:
    def test_action_result_is_mutable_accumulator(self):
        result = ActionResult()
        result.output_files.append(
            OutputFile(path="a", digest=ContentDigest(hash="00", size_bytes=0))
        )
        assert len(result.output_files) == 1

    def test_binary_stream_json_roundtrip(self):
        result = ActionResult(stdout_raw=b"\xff\x00binary")
        restored = ActionResult.model_validate_json(result.model_dump_json())
        assert restored.stdout_raw == b"\xff\x00binary"

    def test_upload_unit_binary_json(self):
        unit = UploadUnit(content=b"\x80", digest=ContentDigest(hash="aa", size_bytes=1))
        assert UploadUnit.model_validate_json(unit.model_dump_json()) == unit

    def test_content_outcome_flags(self):
        assert ContentOutcome().is_inlined is False
        outcome = ContentOutcome(inline=b"x", digest=ContentDigest(hash="a", size_bytes=1))
        assert outcome.is_inlined and outcome.is_referenced

    def test_snapshot_counts(self):
        snapshot = TreeSnapshot(root=DirectoryNode(), children=[DirectoryNode(), DirectoryNode()])
        assert snapshot.node_count == 3
        assert snapshot.file_digests == []
