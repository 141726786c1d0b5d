"""Filesystem status probe and sorted directory enumeration.

Symlinks are never followed unless the caller asks, so a symlinked output
shows up as a symlink instead of silently taking its target's type.
"""

from __future__ import annotations

import errno
import logging
import os
import stat as stat_mod
from pathlib import Path

from outputcas.core.errors import PathNotFoundError, UnexpectedIOError
from outputcas.models.filesystem import Dirent, DirentType, FileStatus

logger = logging.getLogger(__name__)

_NOT_FOUND_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR})
_EXEC_BITS = stat_mod.S_IXUSR | stat_mod.S_IXGRP | stat_mod.S_IXOTH


def _status_from(st: os.stat_result) -> FileStatus:
    mode = st.st_mode
    is_file = stat_mod.S_ISREG(mode)
    is_directory = stat_mod.S_ISDIR(mode)
    is_symlink = stat_mod.S_ISLNK(mode)
    return FileStatus(
        is_file=is_file,
        is_directory=is_directory,
        is_symlink=is_symlink,
        is_special=not (is_file or is_directory or is_symlink),
        size_bytes=st.st_size,
        last_modified_ms=st.st_mtime_ns // 1_000_000,
    )


def stat(path: Path, follow_symlinks: bool = False) -> FileStatus:
    """Stat ``path``.

    Raises
    ------
    PathNotFoundError
        If the path (or one of its parent components) does not exist.
    UnexpectedIOError
        For every other ``OSError`` (permissions, I/O failures ...).
    """
    try:
        st = os.stat(path, follow_symlinks=follow_symlinks)
    except OSError as exc:
        if exc.errno in _NOT_FOUND_ERRNOS:
            raise PathNotFoundError(
                exc.errno, "No such file or directory", str(path)
            ) from exc
        logger.error("Unexpected error while probing %s: %s", path, exc)
        raise UnexpectedIOError(f"Cannot stat {path}: {exc}") from exc
    return _status_from(st)


def stat_nullable(path: Path, follow_symlinks: bool = False) -> FileStatus | None:
    """Like ``stat`` but returns ``None`` when the path does not exist."""
    try:
        return stat(path, follow_symlinks)
    except PathNotFoundError:
        return None


stat_if_found = stat_nullable


def is_executable(path: Path) -> bool:
    """Whether any execute bit is set on ``path`` (links followed)."""
    try:
        mode = os.stat(path).st_mode
    except OSError as exc:
        raise UnexpectedIOError(f"Cannot stat {path}: {exc}") from exc
    return bool(mode & _EXEC_BITS)


def dirent_type(status: FileStatus | None) -> DirentType:
    if status is None or status.is_special:
        return DirentType.UNKNOWN
    if status.is_file:
        return DirentType.FILE
    if status.is_directory:
        return DirentType.DIRECTORY
    if status.is_symlink:
        return DirentType.SYMLINK
    return DirentType.UNKNOWN


def list_sorted(path: Path) -> list[Dirent]:
    """List the immediate children of ``path``, sorted by name bytes.

    Entries removed between listing and stat are skipped.
    """
    path = Path(path)
    try:
        with os.scandir(path) as it:
            names = [entry.name for entry in it]
    except OSError as exc:
        if exc.errno in _NOT_FOUND_ERRNOS:
            raise PathNotFoundError(
                exc.errno, "No such file or directory", str(path)
            ) from exc
        logger.error("Unexpected error while listing %s: %s", path, exc)
        raise UnexpectedIOError(f"Cannot list {path}: {exc}") from exc

    dirents: list[Dirent] = []
    for name in sorted(names, key=os.fsencode):
        status = stat_nullable(path / name, follow_symlinks=False)
        if status is None:
            logger.debug("Skipping vanished entry %s", path / name)
            continue
        dirents.append(Dirent(name=name, type=dirent_type(status)))
    return dirents


def symlink_target_problem(link: Path) -> str | None:
    """Why a permitted symlink still cannot be uploaded, or ``None``.

    Symlinks are uploaded as their target's content, so the target must be
    an existing regular file.
    """
    target = stat_nullable(link, follow_symlinks=True)
    if target is None:
        return "dangling symbolic link"
    if not target.is_file:
        return f"symbolic link to a {target.kind}"
    return None


def is_portable_name(name: str) -> bool:
    """Whether ``name`` round-trips through UTF-8.

    Undecodable bytes come back from the OS as lone surrogates, which
    canonical JSON cannot carry.
    """
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
