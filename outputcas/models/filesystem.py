"""Filesystem status and directory entry models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class FileStatus(BaseModel):
    """Result of a single stat call. Never cached across calls."""

    model_config = ConfigDict(frozen=True)

    is_file: bool = False
    is_directory: bool = False
    is_symlink: bool = False
    is_special: bool = False
    size_bytes: int = 0
    last_modified_ms: int = 0

    @property
    def kind(self) -> str:
        """Human-readable kind, as used in output error messages."""
        if self.is_symlink:
            return "symbolic link"
        if self.is_directory:
            return "directory"
        if self.is_file:
            return "file"
        return "special file"


class DirentType(str, Enum):
    """Classification of a directory entry."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    UNKNOWN = "unknown"


class Dirent(BaseModel):
    """An immediate child of a directory."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: DirentType
