"""Action result record and content insertion models.

``ActionResult`` is the accumulator a caller hands to the manifest.  Unlike
the value models it is mutable: the manifest appends descriptors into it,
the caller serializes and transmits it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from outputcas.models.digests import ContentDigest


class InsertionPolicy(str, Enum):
    """When ``add_content`` should also reference content by digest."""

    UNKNOWN_INSERTION_POLICY = "unknown"
    ALWAYS_INSERT = "always_insert"
    INSERT_ABOVE_LIMIT = "insert_above_limit"


class OutputFile(BaseModel):
    """Descriptor for a file output."""

    model_config = ConfigDict(frozen=True)

    path: str  # POSIX, relative to the exec root
    digest: ContentDigest
    is_executable: bool = False


class OutputDirectory(BaseModel):
    """Descriptor for a directory output, pointing at its tree snapshot."""

    model_config = ConfigDict(frozen=True)

    path: str
    tree_digest: ContentDigest


class ContentOutcome(BaseModel):
    """What ``add_content`` decided for one piece of content.

    ``inline`` is always present (empty once the inline budget is spent);
    ``digest`` is set only when the policy asked for a reference.
    """

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    inline: bytes = b""
    digest: ContentDigest | None = None

    @property
    def is_inlined(self) -> bool:
        return bool(self.inline)

    @property
    def is_referenced(self) -> bool:
        return self.digest is not None


class ActionResult(BaseModel):
    """Caller-owned record of everything an action produced."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    output_files: list[OutputFile] = Field(default_factory=list)
    output_directories: list[OutputDirectory] = Field(default_factory=list)
    stdout_raw: bytes = b""
    stdout_digest: ContentDigest | None = None
    stderr_raw: bytes = b""
    stderr_digest: ContentDigest | None = None
