from __future__ import annotations

from typing import TYPE_CHECKING

from rules.config import (
    check_output_dir,
    load_config,
    resolve_output_dir,
    resolve_source_dirs,
)
from scan.descriptors import discover_fragments
from serialization.serializer import BuiltInsSerializer

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from rules.config import SerializerConfig


def generate_builtins(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: SerializerConfig | None = None,
    on_complete: Callable[[int, int], None] | None = None,
) -> dict[str, object]:
    """Serialize the built-ins descriptors found under a project root.

    Args:
        root: Project root holding the descriptor sources and config file
        out_dir: Optional output directory (default: config output dir)
        config: Optional configuration (default: loaded from root)
        on_complete: Optional callback receiving total bytes and files

    Returns:
        Dictionary with counters, package names and written artifact paths.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    source_dirs = resolve_source_dirs(root, config.sources)
    out_dir = check_output_dir(root, out_dir, source_dirs)
    fragments = discover_fragments(source_dirs, config, output_dir=out_dir)

    serializer = BuiltInsSerializer(version=config.version)
    result = serializer.serialize(out_dir, fragments, on_complete=on_complete)

    return {
        "total_bytes": result.total_bytes,
        "total_files": result.total_files,
        "packages": [package.fq_name for package in result.packages],
        "artifacts": [
            str(out_dir / path) for package in result.packages for path in package.paths
        ],
    }
