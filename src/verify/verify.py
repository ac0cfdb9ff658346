"""Reproducibility check for a serialized built-ins directory."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from serialization.write import generate_builtins


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)


def _artifact_index(directory: Path) -> dict[str, Path]:
    """Map each file below ``directory`` by its POSIX relative path."""
    return {
        path.relative_to(directory).as_posix(): path
        for path in directory.rglob("*")
        if path.is_file()
    }


def compare_artifact_trees(expected_dir: Path, actual_dir: Path) -> DeterminismResult:
    """Compare two artifact directories file by file and byte by byte."""
    expected = _artifact_index(expected_dir)
    actual = _artifact_index(actual_dir)

    missing = sorted(expected.keys() - actual.keys())
    extra = sorted(actual.keys() - expected.keys())
    mismatches = sorted(
        rel_path
        for rel_path in expected.keys() & actual.keys()
        if expected[rel_path].read_bytes() != actual[rel_path].read_bytes()
    )

    return DeterminismResult(
        ok=not (missing or extra or mismatches),
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
    )


def verify_determinism(*, root: Path, artifacts_dir: Path) -> DeterminismResult:
    """Re-serialize ``root`` into a scratch directory and diff it with ``artifacts_dir``.

    ``missing`` lists files only present in ``artifacts_dir``, ``extra`` files
    only produced by the fresh run, ``mismatches`` files whose bytes differ.
    All three hold POSIX paths relative to the artifact root.

    Raises:
        FileNotFoundError: If artifacts_dir does not exist.
        NotADirectoryError: If artifacts_dir is not a directory.
    """
    if not artifacts_dir.exists():
        msg = f"Artifacts directory does not exist: {artifacts_dir}"
        raise FileNotFoundError(msg)
    if not artifacts_dir.is_dir():
        msg = f"Artifacts path is not a directory: {artifacts_dir}"
        raise NotADirectoryError(msg)

    with tempfile.TemporaryDirectory(prefix="builtins-verify-") as scratch:
        fresh_dir = Path(scratch) / "builtins"
        generate_builtins(root=root, out_dir=fresh_dir)
        return compare_artifact_trees(artifacts_dir, fresh_dir)
