"""outputcas: content-addressed upload manifests for build action outputs.

Turns the files and directories a build action produced into digests,
Merkle tree snapshots and a populated action result, and records which
blobs still need to be uploaded to a remote cache.
"""

__version__ = "0.1.0"

from outputcas.core.errors import (
    IllegalOutputError,
    MismatchedOutputError,
    OutputError,
    PathNotFoundError,
    UnexpectedIOError,
)
from outputcas.core.hasher import DigestEngine
from outputcas.core.tree_builder import TreeBuilder
from outputcas.core.upload_manifest import UploadManifest
from outputcas.models import ActionResult, ContentDigest, InsertionPolicy

__all__ = [
    "UploadManifest",
    "TreeBuilder",
    "DigestEngine",
    "ActionResult",
    "ContentDigest",
    "InsertionPolicy",
    "OutputError",
    "MismatchedOutputError",
    "IllegalOutputError",
    "PathNotFoundError",
    "UnexpectedIOError",
    "__version__",
]
