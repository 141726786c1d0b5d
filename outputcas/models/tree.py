"""Merkle directory tree models.

A ``DirectoryNode`` only holds digests of its children, never the child
nodes themselves.  The full structure of an output directory travels as a
``TreeSnapshot``: the root node plus a flat list of every descendant node,
from which the hierarchy can be rebuilt by digest lookup.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from outputcas.models.digests import ContentDigest


class FileNode(BaseModel):
    """A file entry inside a directory node."""

    model_config = ConfigDict(frozen=True)

    name: str
    digest: ContentDigest
    is_executable: bool = False


class DirectoryNodeRef(BaseModel):
    """A subdirectory entry inside a directory node, by digest."""

    model_config = ConfigDict(frozen=True)

    name: str
    digest: ContentDigest


class DirectoryNode(BaseModel):
    """One directory's contents.  Both lists are sorted by name."""

    model_config = ConfigDict(frozen=True)

    files: list[FileNode] = Field(default_factory=list)
    directories: list[DirectoryNodeRef] = Field(default_factory=list)


class TreeSnapshot(BaseModel):
    """Root node plus every descendant directory node, flattened.

    ``children`` is in post-order and keeps duplicates when the same
    subtree appears more than once.
    """

    model_config = ConfigDict(frozen=True)

    root: DirectoryNode
    children: list[DirectoryNode] = Field(default_factory=list)

    @property
    def node_count(self) -> int:
        return 1 + len(self.children)

    @property
    def file_digests(self) -> list[ContentDigest]:
        """Digests of every file entry across root and children."""
        nodes = [self.root, *self.children]
        return [f.digest for node in nodes for f in node.files]
