"""Device configuration loading and validation."""

from gwl_compiler.configs.loader import (
    ConfigError,
    DeviceConfig,
    GWLConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "ConfigError",
    "DeviceConfig",
    "GWLConfig",
    "LoggingConfig",
    "load_config",
]
