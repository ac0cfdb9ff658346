"""Discovery of descriptor dump files below a source directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

DESCRIPTOR_GLOB = "*.json"


def _resolves_inside(path: Path, root: Path) -> bool:
    """True when ``path`` still lies below ``root`` after resolving symlinks."""
    try:
        path.resolve().relative_to(root.resolve())
    except (OSError, ValueError):
        return False
    return True


def _gitignore_files(root: Path) -> list[Path]:
    candidates = {root / ".gitignore", *root.rglob(".gitignore")}
    return sorted(
        (path for path in candidates if path.is_file()),
        key=lambda p: p.relative_to(root).as_posix(),
    )


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    """Return a predicate for ignored paths, or None when nothing is ignored.

    Only the root ``.gitignore`` is honored unless ``nested_gitignore`` is
    set, in which case every ``.gitignore`` file below ``root`` applies to
    its own subtree.
    """
    if not nested_gitignore:
        top_level = root / ".gitignore"
        if not top_level.is_file():
            return None
        return cast("Callable[[str], bool]", parse_gitignore(top_level))

    matchers = [parse_gitignore(path) for path in _gitignore_files(root)]
    if not matchers:
        return None

    def is_ignored(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # path outside this .gitignore's base directory
                continue
        return False

    return is_ignored


@dataclass
class DescriptorFileFilter:
    """Decides which files under ``root`` are descriptor inputs."""

    root: Path
    output_dir: Path | None = None
    include_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    is_ignored: Callable[[str], bool] | None = None

    def accepts(self, path: Path) -> bool:
        if path.is_symlink() or not path.is_file():
            return False
        if not _resolves_inside(path, self.root):
            return False
        if self.output_dir is not None and _resolves_inside(path, self.output_dir):
            return False
        if self.is_ignored is not None and self.is_ignored(str(path)):
            return False

        rel_path = path.relative_to(self.root).as_posix()
        if self.include_patterns and not any(
            fnmatch(rel_path, pattern) for pattern in self.include_patterns
        ):
            return False
        return not any(fnmatch(rel_path, pattern) for pattern in self.exclude_patterns)


def find_descriptor_files(
    directory: Path,
    *,
    output_dir: Path | None = None,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Yield the ``*.json`` descriptor files below ``directory``.

    Symlinks, files resolving outside ``directory``, anything inside
    ``output_dir`` and git-ignored files are skipped. ``include_patterns``
    and ``exclude_patterns`` are fnmatch globs over the POSIX path relative
    to ``directory``. Files come out in relative-path order so that repeated
    runs load fragments identically.
    """
    descriptor_filter = DescriptorFileFilter(
        root=directory,
        output_dir=output_dir,
        include_patterns=list(include_patterns or []),
        exclude_patterns=list(exclude_patterns or []),
        is_ignored=_build_gitignore_matcher(
            directory, nested_gitignore=nested_gitignore
        ),
    )
    accepted = [
        path for path in directory.rglob(DESCRIPTOR_GLOB) if descriptor_filter.accepts(path)
    ]
    yield from sorted(accepted, key=lambda p: p.relative_to(directory).as_posix())


__all__ = ["DESCRIPTOR_GLOB", "DescriptorFileFilter", "find_descriptor_files"]
