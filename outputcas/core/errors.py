"""Output policy and filesystem errors.

Only ``PathNotFoundError`` is ever absorbed (a declared output the action
did not produce).  Everything else aborts the call that raised it.
"""

from __future__ import annotations


class PathNotFoundError(FileNotFoundError):
    """Raised by the status probe when a path does not exist."""


class UnexpectedIOError(RuntimeError):
    """Raised for any filesystem failure other than not-found."""


class OutputError(RuntimeError):
    """Base for outputs that exist but cannot be uploaded as declared.

    Parameters
    ----------
    path:
        Output path, relative to the exec root.
    kind:
        What was actually found ("file", "directory", "symbolic link",
        "special file").
    """

    def __init__(self, path: str, kind: str, message: str) -> None:
        super().__init__(message)
        self.path = path
        self.kind = kind


class MismatchedOutputError(OutputError):
    """A file was declared but a directory exists there, or vice versa."""

    def __init__(self, path: str, kind: str, expected_kind: str) -> None:
        super().__init__(
            path,
            kind,
            f"Output {path} is a {kind}. It was expected to be a {expected_kind}.",
        )
        self.expected_kind = expected_kind


class IllegalOutputError(OutputError):
    """A disallowed symlink or a special file."""

    def __init__(self, path: str, kind: str) -> None:
        super().__init__(
            path,
            kind,
            f"Output {path} is a {kind}. Only regular files and directories may be "
            "uploaded to a remote cache. "
            "Change the file type or enable symlink uploads.",
        )
