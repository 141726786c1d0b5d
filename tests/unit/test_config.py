"""Tests for runtime settings: env-driven overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from outputcas.config import DEFAULT_INLINE_CONTENT_LIMIT, OutputcasSettings


class TestOutputcasSettings:
    def test_defaults(self):
        settings = OutputcasSettings()
        assert settings.log_level == "INFO"
        assert settings.digest_function == "sha256"
        assert settings.allow_symlinks is False
        assert settings.inline_content_limit == DEFAULT_INLINE_CONTENT_LIMIT
        assert settings.store_path == Path(".outputcas/blobs")

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OUTPUTCAS_ALLOW_SYMLINKS", "true")
        monkeypatch.setenv("OUTPUTCAS_INLINE_CONTENT_LIMIT", "4096")
        monkeypatch.setenv("OUTPUTCAS_DIGEST_FUNCTION", "sha1")
        settings = OutputcasSettings()
        assert settings.allow_symlinks is True
        assert settings.inline_content_limit == 4096
        assert settings.digest_function == "sha1"

    def test_negative_inline_limit_rejected(self):
        with pytest.raises(ValidationError):
            OutputcasSettings(inline_content_limit=-1)
