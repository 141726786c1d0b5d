"""Canonical serialization and content digests.

Every synthesized blob (directory nodes, tree snapshots) is serialized
with ``canonical_json_bytes`` before hashing, so equal models always
produce equal bytes and therefore equal digests.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from outputcas.core.errors import UnexpectedIOError
from outputcas.models.digests import ContentDigest

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def model_bytes(model: BaseModel) -> bytes:
    """Canonical bytes of a pydantic model."""
    return canonical_json_bytes(model.model_dump(mode="json"))


class DigestEngine:
    """Computes ``ContentDigest`` values with a configurable hash function.

    Parameters
    ----------
    function:
        Any algorithm name ``hashlib.new`` accepts (``sha256``, ``sha1``,
        ``blake2b`` ...).
    chunk_size:
        Read size used when streaming files.
    """

    def __init__(self, function: str = "sha256", *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        try:
            hashlib.new(function)
        except ValueError as exc:
            raise ValueError(f"Unsupported digest function: {function}") from exc
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._function = function
        self._chunk_size = chunk_size

    @property
    def function(self) -> str:
        return self._function

    def _new(self) -> Any:
        return hashlib.new(self._function)

    def compute(self, data: bytes) -> ContentDigest:
        """Digest an in-memory buffer."""
        h = self._new()
        h.update(data)
        return ContentDigest(hash=h.hexdigest(), size_bytes=len(data))

    def compute_file(self, path: Path) -> ContentDigest:
        """Digest a file by streaming it; symlinks are followed."""
        h = self._new()
        size = 0
        try:
            with open(path, "rb") as f:
                while chunk := f.read(self._chunk_size):
                    h.update(chunk)
                    size += len(chunk)
        except OSError as exc:
            logger.error("Unexpected error while reading %s: %s", path, exc)
            raise UnexpectedIOError(f"Cannot read {path}: {exc}") from exc
        logger.debug("Digested %s (%d bytes)", path, size)
        return ContentDigest(hash=h.hexdigest(), size_bytes=size)

    def compute_model(self, model: BaseModel) -> tuple[bytes, ContentDigest]:
        """Serialize a model canonically and digest the result."""
        data = model_bytes(model)
        return data, self.compute(data)

    def empty(self) -> ContentDigest:
        """Digest of zero bytes."""
        return self.compute(b"")
