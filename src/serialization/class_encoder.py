"""Encoding of class-like symbols into standalone class messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contract.artifacts import class_metadata_path
from descriptors.models import ClassId, ClassKind, sort_class_symbols

if TYPE_CHECKING:
    from collections.abc import Iterable

    from descriptors.models import ClassSymbol
    from serialization.messages import ClassMessage
    from serialization.populate import MessagePopulator
    from serialization.string_table import StringTable
    from serialization.writer import ArtifactWriter


@dataclass(frozen=True)
class EncodedClass:
    class_id: ClassId
    path: str
    message: ClassMessage
    payload: bytes


def emittable_classes(symbols: Iterable[ClassSymbol]) -> list[ClassSymbol]:
    """Sort siblings and drop enum entries, which are values, not declarations."""
    return [s for s in sort_class_symbols(list(symbols)) if s.kind != ClassKind.ENUM_ENTRY]


class ClassEncoder:
    """Encodes a class and its nested classes, one file per class."""

    def __init__(
        self,
        populator: MessagePopulator,
        string_table: StringTable,
        writer: ArtifactWriter,
    ) -> None:
        self.populator = populator
        self.string_table = string_table
        self.writer = writer

    def encode(self, symbol: ClassSymbol, package_fq_name: str) -> list[EncodedClass]:
        """Encode ``symbol`` and every nested class, parent first, depth first."""
        class_id = ClassId(package_fq_name=package_fq_name, relative_names=(symbol.name,))
        encoded: list[EncodedClass] = []
        self._encode(symbol, class_id, encoded)
        return encoded

    def _encode(
        self,
        symbol: ClassSymbol,
        class_id: ClassId,
        encoded: list[EncodedClass],
    ) -> None:
        message = self.populator.populate_class_message(symbol, class_id, self.string_table)
        payload = message.to_bytes()
        path = class_metadata_path(class_id)
        self.writer.write(path, payload)
        encoded.append(
            EncodedClass(class_id=class_id, path=path, message=message, payload=payload)
        )

        for nested in emittable_classes(symbol.nested):
            self._encode(nested, class_id.nested(nested.name), encoded)


__all__ = ["ClassEncoder", "EncodedClass", "emittable_classes"]
