"""Runtime configuration: env-driven.

Reads from a .env file and OUTPUTCAS_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INLINE_CONTENT_LIMIT = 1024 * 1024


class OutputcasSettings(BaseSettings):
    """Settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export OUTPUTCAS_LOG_LEVEL=DEBUG
        export OUTPUTCAS_ALLOW_SYMLINKS=true
        export OUTPUTCAS_INLINE_CONTENT_LIMIT=4096
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OUTPUTCAS_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Digesting
    digest_function: str = "sha256"
    read_chunk_size: int = Field(default=64 * 1024, gt=0)

    # Output policy
    allow_symlinks: bool = False
    inline_content_limit: int = Field(default=DEFAULT_INLINE_CONTENT_LIMIT, ge=0)

    # Local blob store used by ``outputcas manifest --store``
    store_path: Path = Path(".outputcas/blobs")


# Module-level singleton: import as `from outputcas.config import settings`
settings = OutputcasSettings()
