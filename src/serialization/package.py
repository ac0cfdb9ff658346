"""Per-package aggregation of class, package and string-table artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contract.artifacts import (
    builtins_file_path,
    package_file_path,
    string_table_file_path,
)
from serialization.class_encoder import ClassEncoder, emittable_classes
from serialization.errors import MalformedSymbolError
from serialization.messages import BuiltInsMessage
from serialization.string_table import StringTable
from serialization.version import write_version_envelope

if TYPE_CHECKING:
    from collections.abc import Sequence

    from descriptors.models import ClassSymbol, PackageFragment
    from serialization.class_encoder import EncodedClass
    from serialization.populate import MessagePopulator
    from serialization.writer import ArtifactWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageResult:
    fq_name: str
    class_paths: tuple[str, ...] = field(default_factory=tuple)
    package_path: str = ""
    string_table_path: str = ""
    builtins_path: str = ""

    @property
    def paths(self) -> tuple[str, ...]:
        return (
            *self.class_paths,
            self.package_path,
            self.string_table_path,
            self.builtins_path,
        )


class PackageAggregator:
    """Serializes every fragment of one package into its four artifact kinds."""

    def __init__(
        self,
        populator: MessagePopulator,
        writer: ArtifactWriter,
        version: Sequence[int],
    ) -> None:
        self.populator = populator
        self.writer = writer
        self.version = tuple(version)

    def serialize_package(
        self,
        fq_name: str,
        fragments: Sequence[PackageFragment],
    ) -> PackageResult:
        logger.debug("Serializing package %r (%d fragments)", fq_name, len(fragments))
        string_table = StringTable()
        encoder = ClassEncoder(self.populator, string_table, self.writer)

        classes = emittable_classes(c for fragment in fragments for c in fragment.classes)
        _check_unique(fq_name, classes)

        encoded: list[EncodedClass] = []
        for symbol in classes:
            encoded.extend(encoder.encode(symbol, fq_name))

        package_message = self.populator.populate_package_message(fragments, string_table)
        package_path = package_file_path(fq_name)
        self.writer.write(package_path, package_message.to_bytes())

        strings_stream, qualified_names_stream = string_table.build_outputs()
        string_table_path = string_table_file_path(fq_name)
        self.writer.write(string_table_path, strings_stream + qualified_names_stream)

        strings, qualified_names = string_table.build_messages()
        bundle = BuiltInsMessage(
            strings=strings,
            qualified_names=qualified_names,
            package=package_message,
        )
        payload = bundle.write_with_class_payloads([e.payload for e in encoded])
        builtins_path = builtins_file_path(fq_name)
        self.writer.write(builtins_path, write_version_envelope(self.version, payload))

        return PackageResult(
            fq_name=fq_name,
            class_paths=tuple(e.path for e in encoded),
            package_path=package_path,
            string_table_path=string_table_path,
            builtins_path=builtins_path,
        )


def _check_unique(fq_name: str, classes: Sequence[ClassSymbol]) -> None:
    """Reject two emittable classes that would share one artifact path."""
    pending = [((symbol.name,), symbol) for symbol in classes]
    seen: set[tuple[str, ...]] = set()
    while pending:
        names, symbol = pending.pop()
        if names in seen:
            dotted = ".".join(names)
            msg = f"Duplicate class {dotted} in package {fq_name!r}"
            raise MalformedSymbolError(msg)
        seen.add(names)
        pending.extend(((*names, n.name), n) for n in emittable_classes(symbol.nested))


__all__ = ["PackageAggregator", "PackageResult"]
