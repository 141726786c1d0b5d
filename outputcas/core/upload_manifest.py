"""Upload manifest: turns action outputs into a populated ActionResult.

The manifest classifies every declared output, digests files, builds tree
snapshots for directories, decides whether small content rides inline in
the result, and accumulates two registries the caller later transmits:

- ``digest_to_file``: blobs still on disk, streamed from their path.
- ``digest_to_upload_unit``: blobs already in memory (tree snapshots,
  referenced ``add_content`` payloads).

One manifest corresponds to one unit of work.  Its registries and inline
byte counter are unsynchronized, so never share an instance across threads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from outputcas.config import OutputcasSettings
from outputcas.core import fs_probe
from outputcas.core.errors import IllegalOutputError, MismatchedOutputError
from outputcas.core.hasher import DigestEngine
from outputcas.core.tree_builder import TreeBuilder, relative_output_path
from outputcas.models.digests import ContentDigest, UploadUnit
from outputcas.models.filesystem import FileStatus
from outputcas.models.results import (
    ActionResult,
    ContentOutcome,
    InsertionPolicy,
    OutputDirectory,
    OutputFile,
)

logger = logging.getLogger(__name__)


class UploadManifest:
    """Adds output metadata to an ``ActionResult``.

    Parameters
    ----------
    engine:
        Digest engine for file contents and synthesized blobs.
    result:
        The caller-owned record descriptors are appended into.
    exec_root:
        Output paths are reported relative to this directory.
    allow_symlinks:
        Accept symlink outputs (uploaded as their target's content).
    inline_content_limit:
        Total bytes ``add_content`` may embed inline across all calls.
    """

    def __init__(
        self,
        engine: DigestEngine,
        result: ActionResult,
        exec_root: Path,
        *,
        allow_symlinks: bool = False,
        inline_content_limit: int = 0,
    ) -> None:
        self._engine = engine
        self._result = result
        self._exec_root = Path(exec_root)
        self._allow_symlinks = allow_symlinks
        self._inline_content_limit = inline_content_limit

        self._digest_to_file: dict[ContentDigest, Path] = {}
        self._digest_to_upload_unit: dict[ContentDigest, UploadUnit] = {}
        self._inline_bytes_used = 0

    @classmethod
    def from_settings(
        cls,
        settings: OutputcasSettings,
        exec_root: Path,
        result: ActionResult | None = None,
    ) -> UploadManifest:
        """Build a manifest configured from ``OutputcasSettings``."""
        engine = DigestEngine(
            settings.digest_function, chunk_size=settings.read_chunk_size
        )
        return cls(
            engine,
            result if result is not None else ActionResult(),
            exec_root,
            allow_symlinks=settings.allow_symlinks,
            inline_content_limit=settings.inline_content_limit,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def result(self) -> ActionResult:
        return self._result

    @property
    def engine(self) -> DigestEngine:
        return self._engine

    @property
    def digest_to_file(self) -> Mapping[ContentDigest, Path]:
        """Digests of files to stream from disk."""
        return MappingProxyType(self._digest_to_file)

    @property
    def digest_to_upload_unit(self) -> Mapping[ContentDigest, UploadUnit]:
        """Digests of in-memory blobs (tree snapshots, referenced content)."""
        return MappingProxyType(self._digest_to_upload_unit)

    @property
    def inline_bytes_used(self) -> int:
        return self._inline_bytes_used

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def add_files(
        self,
        files: Iterable[Path],
        policy: InsertionPolicy = InsertionPolicy.ALWAYS_INSERT,
    ) -> None:
        """Add declared file outputs.

        Files always travel by reference through ``digest_to_file``;
        ``policy`` only exists to match ``add_content``.

        Raises
        ------
        MismatchedOutputError
            If a directory exists where a file was declared.
        IllegalOutputError
            For a special file, or a symlink when symlinks are not allowed.
        """
        for file in files:
            file = Path(file)
            status = fs_probe.stat_if_found(file, follow_symlinks=False)
            if status is None:
                # Declared outputs the action did not produce are ignored.
                logger.debug("Output file %s was not produced, skipping", file)
                continue
            if status.is_directory:
                self._mismatched(file, status, "file")
            elif status.is_file:
                self._add_file(file)
            elif self._allow_symlinks and status.is_symlink:
                self._check_symlink_target(file)
                self._add_file(file)
            else:
                self._illegal(file, status.kind)

    def add_directories(self, dirs: Iterable[Path]) -> None:
        """Add declared directory outputs.

        Each directory becomes a tree snapshot registered as an upload
        unit; every file inside it lands in ``digest_to_file``.

        Raises
        ------
        MismatchedOutputError
            If a file or symlink exists where a directory was declared.
        IllegalOutputError
            For special files here or anywhere inside the tree.
        """
        for directory in dirs:
            directory = Path(directory)
            status = fs_probe.stat_if_found(directory, follow_symlinks=False)
            if status is None:
                logger.debug(
                    "Output directory %s was not produced, skipping", directory
                )
                continue
            if status.is_directory:
                self._add_directory(directory)
            elif status.is_file or status.is_symlink:
                self._mismatched(directory, status, "directory")
            else:
                self._illegal(directory, status.kind)

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------

    def add_content(self, content: bytes, policy: InsertionPolicy) -> ContentOutcome:
        """Decide whether ``content`` rides inline, by digest, or both.

        Content is inlined while the cumulative inline total stays within
        ``inline_content_limit``; past that, ``inline`` is empty.  A digest
        reference is attached (and the content registered for upload) for
        ``ALWAYS_INSERT``, or for ``INSERT_ABOVE_LIMIT`` when it did not fit.
        """
        content = bytes(content)
        within_limit = (
            self._inline_bytes_used + len(content) <= self._inline_content_limit
        )
        if within_limit:
            inline = content
            self._inline_bytes_used += len(content)
        else:
            inline = b""

        digest: ContentDigest | None = None
        if policy is InsertionPolicy.ALWAYS_INSERT or (
            not within_limit and policy is InsertionPolicy.INSERT_ABOVE_LIMIT
        ):
            digest = self._engine.compute(content)
            self._digest_to_upload_unit[digest] = UploadUnit(
                content=content, digest=digest
            )

        logger.debug(
            "add_content: %d bytes, inline=%s, referenced=%s",
            len(content), within_limit, digest is not None,
        )
        return ContentOutcome(inline=inline, digest=digest)

    def add_stdout(self, content: bytes, policy: InsertionPolicy) -> ContentOutcome:
        """Apply ``add_content`` to captured stdout and record it."""
        outcome = self.add_content(content, policy)
        self._result.stdout_raw = outcome.inline
        self._result.stdout_digest = outcome.digest
        return outcome

    def add_stderr(self, content: bytes, policy: InsertionPolicy) -> ContentOutcome:
        """Apply ``add_content`` to captured stderr and record it."""
        outcome = self.add_content(content, policy)
        self._result.stderr_raw = outcome.inline
        self._result.stderr_digest = outcome.digest
        return outcome

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _relative(self, path: Path) -> str:
        return relative_output_path(path, self._exec_root)

    def _check_output_name(self, path: Path) -> None:
        if not fs_probe.is_portable_name(self._relative(path)):
            self._illegal(path, "output with a non-UTF-8 name")

    def _add_file(self, file: Path) -> None:
        self._check_output_name(file)
        digest = self._engine.compute_file(file)
        self._result.output_files.append(
            OutputFile(
                path=self._relative(file),
                digest=digest,
                is_executable=fs_probe.is_executable(file),
            )
        )
        self._digest_to_file[digest] = file
        logger.info("Added output file %s (%s)", self._relative(file), digest)

    def _add_directory(self, directory: Path) -> None:
        self._check_output_name(directory)
        builder = TreeBuilder(
            self._engine,
            self._digest_to_file,
            allow_symlinks=self._allow_symlinks,
            exec_root=self._exec_root,
        )
        _, snapshot = builder.build(directory)
        blob, digest = self._engine.compute_model(snapshot)

        self._result.output_directories.append(
            OutputDirectory(path=self._relative(directory), tree_digest=digest)
        )
        self._digest_to_upload_unit[digest] = UploadUnit(content=blob, digest=digest)
        logger.info(
            "Added output directory %s (tree %s, %d directories)",
            self._relative(directory), digest, snapshot.node_count,
        )

    def _check_symlink_target(self, link: Path) -> None:
        problem = fs_probe.symlink_target_problem(link)
        if problem is not None:
            self._illegal(link, problem)

    def _mismatched(self, path: Path, status: FileStatus, expected: str) -> None:
        rel = self._relative(path)
        logger.warning(
            "Output %s is a %s, expected a %s", rel, status.kind, expected
        )
        raise MismatchedOutputError(rel, status.kind, expected)

    def _illegal(self, path: Path, kind: str) -> None:
        rel = self._relative(path)
        logger.warning("Rejecting illegal output %s (%s)", rel, kind)
        raise IllegalOutputError(rel, kind)
