"""Configuration schema for drupal_config_sync.

Pydantic models for the YAML config file, one per section (``sync`` and
``logging``).

Usage:
    from drupal_config_sync.config_schema import build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = load_config(yaml_fallbacks=unified.sync.model_dump())
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class SyncConfig(BaseModel):
    """Sync pass settings.

    Every field is optional: env vars and CLI args can supply them
    instead.
    """

    config_directory: str | None = Field(
        default=None, description="Configuration export directory"
    )
    projects_dir: str | None = Field(
        default=None, description="Directory holding project records"
    )
    max_parallel_reads: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum concurrent file reads during a pass (1-64)",
    )
    include_base_field_overrides: bool = Field(
        default=True,
        description="Index core.base_field_override files as bundle fields",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


class UnifiedConfig(BaseModel):
    """Top-level configuration.  ``UnifiedConfig()`` is always valid."""

    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Validate the dict returned by ``load_hierarchical_config()``.

    Missing sections get defaults.

    Raises:
        pydantic.ValidationError: If a section has invalid values.
    """
    if not raw_data:
        return UnifiedConfig()
    return UnifiedConfig(**raw_data)
