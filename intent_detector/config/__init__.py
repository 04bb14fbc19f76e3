"""Configuration loader utilities."""

from .loader import (
    DEFAULT_CONFIG_PATH,
    Credentials,
    DetectorConfig,
    load_config,
    load_credentials,
    validate_config,
)

__all__ = [
    "Credentials",
    "DetectorConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_credentials",
    "validate_config",
]
