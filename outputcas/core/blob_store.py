"""Content-addressed local blob store.

Storage layout: {base_path}/{hash[0:2]}/{hash[2:4]}/{hash}
No delete method: blobs are immutable once stored.

The store drains a manifest's registries to local disk.  It is a local
sink for inspection and tests, not a remote transport.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from outputcas.core.hasher import DigestEngine
from outputcas.core.upload_manifest import UploadManifest
from outputcas.models.digests import ContentDigest

logger = logging.getLogger(__name__)


class BlobIntegrityError(RuntimeError):
    """Raised when blob bytes do not match the digest they are stored under."""


class LocalBlobStore:
    """Digest keyed, immutable blob store.

    Storing the same content twice is a no-op (idempotent). There is no
    update or delete.

    Parameters
    ----------
    base_path:
        Root directory for blob storage.
    engine:
        Digest engine used to verify blobs.  Must use the same hash
        function as the manifest that produced the digests.
    """

    def __init__(self, base_path: Path, engine: DigestEngine | None = None) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)
        self._engine = engine or DigestEngine()

    def _blob_path(self, digest: ContentDigest) -> Path:
        h = digest.hash
        return self._base / h[:2] / h[2:4] / h

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def put(self, digest: ContentDigest, data: bytes) -> Path:
        """Store in-memory ``data`` under ``digest``.

        Raises
        ------
        BlobIntegrityError
            If ``data`` does not hash to ``digest``, or an existing blob at
            that address is corrupt.
        """
        actual = self._engine.compute(data)
        if actual != digest:
            raise BlobIntegrityError(
                f"Blob content hashes to {actual}, not the declared {digest}"
            )
        path = self._blob_path(digest)
        if path.exists():
            self._verify_existing(digest)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            logger.debug("Stored blob %s", digest)
        return path

    def put_file(self, digest: ContentDigest, source: Path) -> Path:
        """Copy the file at ``source`` into the store under ``digest``."""
        actual = self._engine.compute_file(source)
        if actual != digest:
            raise BlobIntegrityError(
                f"File {source} hashes to {actual}, not the declared {digest}"
            )
        path = self._blob_path(digest)
        if path.exists():
            self._verify_existing(digest)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, path)
            logger.debug("Stored blob %s from %s", digest, source)
        return path

    def drain(self, manifest: UploadManifest) -> int:
        """Store every blob a manifest registered.  Returns the blob count."""
        count = 0
        for digest, source in manifest.digest_to_file.items():
            self.put_file(digest, source)
            count += 1
        for digest, unit in manifest.digest_to_upload_unit.items():
            self.put(digest, unit.content)
            count += 1
        logger.info("Drained %d blobs into %s", count, self._base)
        return count

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def get(self, digest: ContentDigest) -> bytes:
        """Return the bytes stored under ``digest``."""
        path = self._blob_path(digest)
        if not path.exists():
            raise FileNotFoundError(f"Blob not found: {digest}")
        return path.read_bytes()

    # ------------------------------------------------------------------
    # Check and verify
    # ------------------------------------------------------------------

    def contains(self, digest: ContentDigest) -> bool:
        return self._blob_path(digest).exists()

    def verify(self, digest: ContentDigest) -> bool:
        """Re-hash stored data and compare against ``digest``."""
        path = self._blob_path(digest)
        if not path.exists():
            return False
        return self._engine.compute_file(path) == digest

    def _verify_existing(self, digest: ContentDigest) -> None:
        if not self.verify(digest):
            raise BlobIntegrityError(f"Existing blob {digest} failed integrity check")
