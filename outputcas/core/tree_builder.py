"""Merkle tree builder for directory outputs.

Walks a directory depth-first, post-order.  Each directory's node is
finalized only after all of its children, and its digest is the digest of
the node's canonical bytes, so identical subtrees always hash the same no
matter where they are mounted or what order the filesystem lists them in.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from outputcas.core import fs_probe
from outputcas.core.errors import IllegalOutputError
from outputcas.core.hasher import DigestEngine
from outputcas.models.digests import ContentDigest
from outputcas.models.filesystem import DirentType
from outputcas.models.tree import (
    DirectoryNode,
    DirectoryNodeRef,
    FileNode,
    TreeSnapshot,
)

logger = logging.getLogger(__name__)


def relative_output_path(path: Path, exec_root: Path | None) -> str:
    """Render ``path`` relative to ``exec_root`` in POSIX form."""
    if exec_root is None:
        return Path(path).as_posix()
    return Path(os.path.relpath(path, exec_root)).as_posix()


class TreeBuilder:
    """Builds a ``TreeSnapshot`` for one output directory.

    Parameters
    ----------
    engine:
        Digest engine used for file contents and directory nodes.
    digest_to_file:
        Registry that every walked file's digest -> path is recorded into.
        The manifest passes its own so tree files get streamed later.
    allow_symlinks:
        Whether symlinks inside the tree are digested as files (by their
        target's content) or rejected.
    exec_root:
        Only used to render paths in error messages.
    """

    def __init__(
        self,
        engine: DigestEngine,
        digest_to_file: dict[ContentDigest, Path] | None = None,
        *,
        allow_symlinks: bool = False,
        exec_root: Path | None = None,
    ) -> None:
        self._engine = engine
        self._digest_to_file = digest_to_file if digest_to_file is not None else {}
        self._allow_symlinks = allow_symlinks
        self._exec_root = exec_root

    @property
    def digest_to_file(self) -> dict[ContentDigest, Path]:
        return self._digest_to_file

    def build(self, path: Path) -> tuple[DirectoryNode, TreeSnapshot]:
        """Walk ``path`` and return its root node and full snapshot."""
        children: list[DirectoryNode] = []
        root = self._compute_directory(Path(path), children)
        snapshot = TreeSnapshot(root=root, children=children)
        logger.debug(
            "Built tree for %s: %d directories, %d files",
            path, snapshot.node_count, len(snapshot.file_digests),
        )
        return root, snapshot

    def directory_digest(self, node: DirectoryNode) -> ContentDigest:
        _, digest = self._engine.compute_model(node)
        return digest

    def _compute_directory(
        self, path: Path, children: list[DirectoryNode]
    ) -> DirectoryNode:
        files: list[FileNode] = []
        directories: list[DirectoryNodeRef] = []

        for dirent in fs_probe.list_sorted(path):
            name = dirent.name
            child = path / name
            if not fs_probe.is_portable_name(name):
                self._illegal(child, "entry with a non-UTF-8 name")
            if dirent.type is DirentType.DIRECTORY:
                node = self._compute_directory(child, children)
                directories.append(
                    DirectoryNodeRef(name=name, digest=self.directory_digest(node))
                )
                children.append(node)
            elif dirent.type is DirentType.FILE or (
                dirent.type is DirentType.SYMLINK and self._allow_symlinks
            ):
                if dirent.type is DirentType.SYMLINK:
                    self._check_symlink_target(child)
                digest = self._engine.compute_file(child)
                files.append(
                    FileNode(
                        name=name,
                        digest=digest,
                        is_executable=fs_probe.is_executable(child),
                    )
                )
                self._digest_to_file[digest] = child
            else:
                kind = "symbolic link" if dirent.type is DirentType.SYMLINK else "special file"
                self._illegal(child, kind)

        return DirectoryNode(files=files, directories=directories)

    def _check_symlink_target(self, link: Path) -> None:
        problem = fs_probe.symlink_target_problem(link)
        if problem is not None:
            self._illegal(link, problem)

    def _illegal(self, path: Path, kind: str) -> None:
        rel = relative_output_path(path, self._exec_root)
        logger.warning("Rejecting illegal output %s (%s)", rel, kind)
        raise IllegalOutputError(rel, kind)
