"""outputcas data models: pydantic v2, value types frozen."""

from outputcas.models.digests import ContentDigest, UploadUnit
from outputcas.models.filesystem import Dirent, DirentType, FileStatus
from outputcas.models.results import (
    ActionResult,
    ContentOutcome,
    InsertionPolicy,
    OutputDirectory,
    OutputFile,
)
from outputcas.models.tree import (
    DirectoryNode,
    DirectoryNodeRef,
    FileNode,
    TreeSnapshot,
)

__all__ = [
    # digests
    "ContentDigest",
    "UploadUnit",
    # filesystem
    "FileStatus",
    "DirentType",
    "Dirent",
    # tree
    "FileNode",
    "DirectoryNodeRef",
    "DirectoryNode",
    "TreeSnapshot",
    # results
    "InsertionPolicy",
    "OutputFile",
    "OutputDirectory",
    "ContentOutcome",
    "ActionResult",
]
