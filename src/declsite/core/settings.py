"""Settings for a declsite run.

Every knob of the generator can come from ``DECLSITE_*`` environment
variables, a ``.env`` file, a YAML config file, or explicit overrides
(highest priority last)::

    env / .env  <  config.yaml  <  load_settings(**overrides)

Examples:
    >>> from declsite.core.settings import load_settings
    >>> settings = load_settings(recycle_interval=50)
    >>> settings.recycle_interval
    50

Tags:
    settings, configuration, pydantic, environment, declsite
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError, MissingConfigError


class DeclsiteSettings(BaseSettings):
    """Configuration for site generation.

    Fields
    ──────
    output_dir           : Where pages are written when the CLI is not told otherwise
    recycle_interval     : Pages rendered between symbol index rebuilds
    include_private      : List private members during discovery and rendering
    max_resolution_depth : Bound on alias chains and lineage walks
    log_level            : Structlog log level
    json_logs            : Force JSON log lines (None = auto-detect from tty)
    """

    model_config = SettingsConfigDict(
        env_prefix="DECLSITE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Output ───────────────────────────────────────────────────
    output_dir: Path = Field(default=Path("site"), description="Directory for generated pages")

    # ── Generation policy ────────────────────────────────────────
    recycle_interval: int = Field(default=100, ge=1)
    include_private: bool = False
    max_resolution_depth: int = Field(default=256, ge=1)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return value


def load_settings(config_path: Path | None = None, **overrides: Any) -> DeclsiteSettings:
    """Build settings from an optional YAML file plus explicit overrides.

    Overrides whose value is ``None`` are ignored so CLI options that
    were not given fall through to the file and the environment.

    Raises:
        MissingConfigError: ``config_path`` does not exist.
        ConfigError: The file is not a YAML mapping.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise MissingConfigError(str(config_path), f"Config file not found: {config_path}")
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}", cause=e) from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file must contain a mapping: {config_path}")
        data.update(loaded)

    data.update({k: v for k, v in overrides.items() if v is not None})
    return DeclsiteSettings(**data)


__all__ = ["DeclsiteSettings", "load_settings"]
