from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contract.artifacts import DEFAULT_VERSION

CONFIG_FILENAME = "builtins-serializer.toml"


class SerializerConfig(BaseModel):
    """Configuration for built-ins serialization."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default="out/builtins",
        description="Output directory for serialized built-ins",
    )
    sources: list[str] = Field(
        default_factory=lambda: ["."],
        description="Directories (relative to the root) holding descriptor files",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for descriptor files to include (empty = all)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for descriptor files to exclude",
    )
    version: list[int] = Field(
        default_factory=lambda: list(DEFAULT_VERSION),
        description="Binary format version written before each built-ins file",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, v: Any) -> Any:
        """Validate that the version is a non-empty list of int32 components.

        Note: this runs in `mode="before"` so that booleans and strings from
        TOML are reported instead of being coerced.
        """
        if not isinstance(v, (list, tuple)) or not v:
            msg = "version must be a non-empty list of integers"
            raise ValueError(msg)

        for component in v:
            if isinstance(component, bool) or not isinstance(component, int):
                msg = f"Invalid version component {component!r}: expected integer"
                raise ValueError(msg)
            if not 0 <= component <= 0x7FFFFFFF:
                msg = f"Version component {component} is out of int32 range"
                raise ValueError(msg)

        return list(v)


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def _resolve_within_root(root: Path, relative: str, label: str) -> Path:
    if not relative:
        msg = f"{label} must be a non-empty relative path"
        raise ConfigError(msg)

    if relative.startswith("~"):
        msg = f"{label} must be a relative path within the project root"
        raise ConfigError(msg)

    relative_path = Path(relative)
    if relative_path.is_absolute():
        msg = f"{label} must be a relative path within the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved = (resolved_root / relative_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve {label} '{relative}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"{label} '{relative}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the project root.

    The output directory is deleted and recreated on every run, so it must be
    a non-empty relative path that stays inside the root and is not the root
    itself.
    """
    resolved = _resolve_within_root(root, output_dir, "output_dir")
    if resolved == root.resolve():
        msg = "output_dir must not be the project root"
        raise ConfigError(msg)
    return resolved


def resolve_source_dirs(root: Path, sources: list[str]) -> list[Path]:
    return [_resolve_within_root(root, source, "source") for source in sources]


def check_output_dir(root: Path, out_dir: Path, source_dirs: list[Path]) -> Path:
    """Reject an output directory whose recreation would delete inputs.

    ``out_dir`` is removed before every run, so it must not be the project
    root, contain it, or contain any source directory.
    """
    resolved = out_dir.expanduser().resolve()
    protected = [("project root", root.resolve())]
    protected.extend(("source directory", source.resolve()) for source in source_dirs)
    for label, path in protected:
        if resolved == path or resolved in path.parents:
            msg = f"Output directory '{out_dir}' would delete the {label} '{path}'"
            raise ConfigError(msg)
    return resolved


def load_config(root: Path) -> SerializerConfig:
    """Load configuration from builtins-serializer.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return SerializerConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return SerializerConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
