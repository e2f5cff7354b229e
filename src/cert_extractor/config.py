"""
Configuration: typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables prefixed with CERT_EXTRACTOR_
  - Fall back to a .env file
  - Validate types and constraints at startup

env_nested_delimiter="__" maps CERT_EXTRACTOR_YQ__BINARY → yq.binary.
List settings take JSON: CERT_EXTRACTOR_PEM_FILES='["/etc/ssl/a.pem"]'.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class YqSettings(BaseModel):
    """External query evaluator used for structured documents."""

    binary: str = Field(default="yq", description="yq executable name or path")
    timeout_seconds: float = Field(
        default=30, gt=0, description="Timeout for a single yq invocation"
    )


class ExtractorSettings(BaseSettings):
    """
    Root settings for the extractor.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CERT_EXTRACTOR_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    yq: YqSettings = Field(default_factory=lambda: YqSettings())
    max_workers: int = Field(default=4, ge=1, description="Sources parsed in parallel")
    log_level: str = Field(default="INFO")

    pem_files: list[Path] = Field(default_factory=list, description="PEM files to scan")
    kubeconfig_files: list[Path] = Field(
        default_factory=list, description="kubeconfig files to scan with the well-known paths"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Reject names the logging module does not know."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level
