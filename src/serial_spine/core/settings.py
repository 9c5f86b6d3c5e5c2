"""Settings for serial-spine.

The executor itself takes no configuration: ``SerialExecutor()`` is all a
caller ever needs.  What *is* configurable is the ambient behaviour around
it (log level and format, the service name stamped on every log line, and
the threshold above which a single work item is reported as slow).

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked when first loaded
    - **Environment-driven:** ``SERIAL_SPINE_*`` env vars and ``.env`` files
    - **Extra ignore:** Unknown env vars don't cause startup failures
    - **Cached:** ``get_settings()`` loads once per process

Examples:
    >>> from serial_spine.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.log_level
    'INFO'

    Overriding through the environment::

        SERIAL_SPINE_LOG_LEVEL=DEBUG
        SERIAL_SPINE_SLOW_WORK_SECONDS=2.5

Tags:
    settings, configuration, pydantic, environment, serial-spine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SerialSpineSettings(BaseSettings):
    """Ambient settings read from ``SERIAL_SPINE_*`` environment variables.

    Fields
    ──────
    log_level          : Structlog log level
    log_json           : JSON output (True), console (False), auto-detect (None)
    service_name       : ``service.name`` stamped on every log line
    slow_work_seconds  : Warn when one work item runs longer than this
    """

    model_config = SettingsConfigDict(
        env_prefix="SERIAL_SPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "serial-spine"

    # ── Executor ─────────────────────────────────────────────────
    slow_work_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Log a warning when a single work item runs longer than this",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> SerialSpineSettings:
    """Return the process-wide settings (loaded once)."""
    return SerialSpineSettings()


__all__ = ["SerialSpineSettings", "get_settings"]
