"""Configuration rules for descriptor discovery and output layout."""

from rules.config import (
    ConfigError,
    SerializerConfig,
    check_output_dir,
    load_config,
    resolve_output_dir,
    resolve_source_dirs,
)

__all__ = [
    "ConfigError",
    "SerializerConfig",
    "check_output_dir",
    "load_config",
    "resolve_output_dir",
    "resolve_source_dirs",
]
