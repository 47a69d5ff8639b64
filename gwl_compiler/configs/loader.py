"""Configuration loader for GWL generation.

Loads and validates ``gwl.yaml`` into frozen pydantic models.  Device
limits (points per ``write`` call, negligible-motion tolerance) come from
the config so the writer hardcodes nothing beyond its defaults.

Usage::

    from gwl_compiler.configs.loader import load_config
    cfg = load_config()                    # default path
    cfg = load_config("/custom/gwl.yaml")  # explicit path
    writer = GWLWriter.from_config(cfg)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gwl_compiler.utils.fs import load_yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Models -- mirror the YAML structure
# ---------------------------------------------------------------------------


class DeviceConfig(BaseModel):
    """Instrument limits used by the writer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_points_per_write: int = Field(
        200, gt=0, description="Points accepted per write call",
    )
    zero_tolerance_um: float = Field(
        1e-12, ge=0.0, description="Largest axis move treated as no move (um)",
    )


class RotateConfig(BaseModel):
    """Log file rotation, passed to ``setup_logging(rotate=...)``.

    Unset fields fall back to the handler defaults for the chosen mode.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: Literal["size", "time"] = Field("size", description="Rotate by size or time")
    max_bytes: Optional[int] = Field(None, gt=0, description="Size mode: bytes per file")
    when: Optional[str] = Field(None, description="Time mode: interval unit (e.g. 'D')")
    interval: Optional[int] = Field(None, gt=0, description="Time mode: interval count")
    backup_count: Optional[int] = Field(None, ge=0, description="Rotated files kept")


class LoggingConfig(BaseModel):
    """Arguments for ``setup_logging``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str = Field("INFO", description="Root log level")
    file: Optional[str] = Field(None, description="Log file path")
    json_lines: bool = Field(False, description="JSON lines in the log file")
    color: bool = Field(True, description="ANSI colors on a terminal")
    tz: Literal["UTC", "local"] = Field("UTC", description="Timestamp zone")
    quiet_libs: Tuple[str, ...] = Field((), description="Loggers held at WARNING")
    rotate: Optional[RotateConfig] = Field(None, description="File rotation")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"level must be one of {_LOG_LEVELS}, got '{v}'")
        return v

    def setup_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``setup_logging`` besides the level."""
        return {
            "log_file": self.file,
            "json": self.json_lines,
            "color": self.color,
            "tz": self.tz,
            "quiet_libs": list(self.quiet_libs),
            "rotate": (
                self.rotate.model_dump(exclude_none=True) if self.rotate else None
            ),
        }


class GWLConfig(BaseModel):
    """Complete configuration loaded from ``gwl.yaml``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    device: DeviceConfig = Field(default_factory=DeviceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> GWLConfig:
    """Load and validate the GWL configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``gwl.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    GWLConfig
        Validated, frozen configuration.

    Raises
    ------
    ConfigError
        If the file is empty, malformed, or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "gwl.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    try:
        data: Any = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed configuration file {path}: {exc}") from exc

    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration root must be a mapping, got {type(data).__name__}"
        )

    try:
        config = GWLConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc

    logger.info("Configuration loaded successfully")
    return config
