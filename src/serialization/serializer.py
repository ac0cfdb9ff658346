"""Top-level built-ins serialization driver."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contract.artifacts import DEFAULT_VERSION
from serialization.package import PackageAggregator
from serialization.populate import DescriptorPopulator
from serialization.writer import ArtifactWriter

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

    from descriptors.models import PackageFragment
    from serialization.package import PackageResult
    from serialization.populate import MessagePopulator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerializationResult:
    total_bytes: int
    total_files: int
    packages: tuple[PackageResult, ...] = field(default_factory=tuple)


def group_by_package(
    fragments: Iterable[PackageFragment],
) -> dict[str, list[PackageFragment]]:
    """Group fragments by package identity, packages in lexicographic order."""
    grouped: dict[str, list[PackageFragment]] = defaultdict(list)
    for fragment in fragments:
        grouped[fragment.fq_name].append(fragment)
    return {fq_name: grouped[fq_name] for fq_name in sorted(grouped)}


class BuiltInsSerializer:
    """Serializes package fragments into the built-ins artifact layout."""

    def __init__(
        self,
        *,
        version: Sequence[int] = DEFAULT_VERSION,
        populator: MessagePopulator | None = None,
    ) -> None:
        self.version = tuple(version)
        self.populator = populator if populator is not None else DescriptorPopulator()

    def serialize(
        self,
        dest_dir: Path,
        fragments: Iterable[PackageFragment],
        on_complete: Callable[[int, int], None] | None = None,
    ) -> SerializationResult:
        """Recreate ``dest_dir`` and write every package found in ``fragments``.

        Args:
            dest_dir: Destination directory; deleted and recreated first.
            fragments: Package fragments; several may share one package.
            on_complete: Optional callback receiving total bytes and files.

        Returns:
            SerializationResult with the counters of this run only.

        Raises:
            ArtifactWriteError: If any artifact cannot be written.
            MalformedSymbolError: If the input cannot be serialized as given.
        """
        writer = ArtifactWriter(dest_dir)
        writer.prepare()

        aggregator = PackageAggregator(self.populator, writer, self.version)
        results = [
            aggregator.serialize_package(fq_name, package_fragments)
            for fq_name, package_fragments in group_by_package(fragments).items()
        ]

        result = SerializationResult(
            total_bytes=writer.counters.total_bytes,
            total_files=writer.counters.total_files,
            packages=tuple(results),
        )
        logger.info(
            "Total bytes written: %d to %d files",
            result.total_bytes,
            result.total_files,
        )
        if on_complete is not None:
            on_complete(result.total_bytes, result.total_files)
        return result


__all__ = ["BuiltInsSerializer", "SerializationResult", "group_by_package"]
