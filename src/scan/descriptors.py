"""Loading of package fragments from descriptor dumps."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from descriptors.models import PackageFragment
from scan.files import find_descriptor_files

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from rules.config import SerializerConfig


class DescriptorLoadError(Exception):
    """Raised when a descriptor file cannot be read or validated."""


def load_fragment(path: Path) -> PackageFragment:
    try:
        data = orjson.loads(path.read_bytes())
    except OSError as exc:
        msg = f"Failed to read {path}: {exc}"
        raise DescriptorLoadError(msg) from exc
    except orjson.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise DescriptorLoadError(msg) from exc

    try:
        return PackageFragment.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid descriptors in {path}: {exc}"
        raise DescriptorLoadError(msg) from exc


def load_fragments(paths: Iterable[Path]) -> list[PackageFragment]:
    return [load_fragment(path) for path in paths]


def discover_fragments(
    source_dirs: Iterable[Path],
    config: SerializerConfig,
    *,
    output_dir: Path | None = None,
) -> list[PackageFragment]:
    """Load every descriptor file found under ``source_dirs``, in scan order."""
    fragments: list[PackageFragment] = []
    for source_dir in source_dirs:
        if not source_dir.is_dir():
            msg = f"Source directory does not exist: {source_dir}"
            raise DescriptorLoadError(msg)
        fragments.extend(
            load_fragments(
                find_descriptor_files(
                    source_dir,
                    output_dir=output_dir,
                    include_patterns=config.include,
                    exclude_patterns=config.exclude,
                    nested_gitignore=config.nested_gitignore,
                )
            )
        )
    return fragments


__all__ = [
    "DescriptorLoadError",
    "discover_fragments",
    "load_fragment",
    "load_fragments",
]
