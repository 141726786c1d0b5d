"""Content digest and upload unit models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ContentDigest(BaseModel):
    """A content hash plus the byte length of the hashed content.

    Frozen, so two digests compare (and hash) equal iff both fields match.
    This is what lets a digest key the manifest registries.
    """

    model_config = ConfigDict(frozen=True)

    hash: str  # lowercase hex
    size_bytes: int

    def __str__(self) -> str:
        return f"{self.hash}/{self.size_bytes}"


class UploadUnit(BaseModel):
    """A fully materialized blob waiting to be transmitted.

    Used for serialized tree snapshots and for any ``add_content`` payload
    that gets referenced by digest.
    """

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    content: bytes
    digest: ContentDigest
