"""Per-package string table.

Strings and qualified-name compositions are interned into dense, append-only
index spaces. Messages refer to names only through these indices, so one
table must back exactly one combined built-ins file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from serialization.messages import (
    QualifiedNameKind,
    QualifiedNameMessage,
    QualifiedNameTableMessage,
    StringTableMessage,
)
from serialization.wire import write_delimited

if TYPE_CHECKING:
    from collections.abc import Sequence

    from descriptors.models import ClassId

ROOT_QUALIFIED_NAME = -1


class StringTable:
    """Deduplicating store of strings and qualified names."""

    def __init__(self) -> None:
        self._strings: list[str] = []
        self._string_index: dict[str, int] = {}
        self._qualified_names: list[QualifiedNameMessage] = []
        self._qualified_name_index: dict[tuple[int, int, QualifiedNameKind], int] = {}

    @classmethod
    def from_messages(
        cls,
        strings: StringTableMessage,
        qualified_names: QualifiedNameTableMessage,
    ) -> StringTable:
        """Rebuild a table from its serialized messages, keeping every index."""
        table = cls()
        for value in strings.string:
            table._string_index.setdefault(value, len(table._strings))
            table._strings.append(value)
        for entry in qualified_names.qualified_name:
            key = (entry.parent_qualified_name, entry.short_name, entry.kind)
            table._qualified_name_index.setdefault(key, len(table._qualified_names))
            table._qualified_names.append(entry)
        return table

    def __len__(self) -> int:
        return len(self._strings)

    @property
    def strings(self) -> tuple[str, ...]:
        return tuple(self._strings)

    def intern(self, value: str) -> int:
        index = self._string_index.get(value)
        if index is None:
            index = len(self._strings)
            self._strings.append(value)
            self._string_index[value] = index
        return index

    def intern_qualified_name(
        self,
        parts: Sequence[str],
        *,
        kind: QualifiedNameKind = QualifiedNameKind.PACKAGE,
        parent: int = ROOT_QUALIFIED_NAME,
    ) -> int:
        """Intern ``parts`` as a chain below ``parent``; return the last link.

        An empty ``parts`` returns ``parent`` unchanged.
        """
        index = parent
        for part in parts:
            key = (index, self.intern(part), kind)
            existing = self._qualified_name_index.get(key)
            if existing is None:
                existing = len(self._qualified_names)
                self._qualified_names.append(
                    QualifiedNameMessage(
                        parent_qualified_name=key[0],
                        short_name=key[1],
                        kind=kind,
                    )
                )
                self._qualified_name_index[key] = existing
            index = existing
        return index

    def intern_package(self, fq_name: str) -> int:
        parts = fq_name.split(".") if fq_name else []
        return self.intern_qualified_name(parts)

    def intern_class_id(self, class_id: ClassId) -> int:
        package_index = self.intern_qualified_name(class_id.package_segments)
        return self.intern_qualified_name(
            class_id.relative_names,
            kind=QualifiedNameKind.CLASS,
            parent=package_index,
        )

    def resolve_string(self, index: int) -> str:
        return self._strings[index]

    def resolve_qualified_name(self, index: int) -> str:
        """Render a qualified name index as ``pkg/path/Outer.Inner``."""
        package_parts: list[str] = []
        class_parts: list[str] = []
        while index != ROOT_QUALIFIED_NAME:
            entry = self._qualified_names[index]
            name = self._strings[entry.short_name]
            if entry.kind == QualifiedNameKind.PACKAGE:
                package_parts.append(name)
            else:
                class_parts.append(name)
            index = entry.parent_qualified_name
        package_path = "/".join(reversed(package_parts))
        class_path = ".".join(reversed(class_parts))
        if package_path and class_path:
            return f"{package_path}/{class_path}"
        return package_path or class_path

    def build_messages(self) -> tuple[StringTableMessage, QualifiedNameTableMessage]:
        return (
            StringTableMessage(string=list(self._strings)),
            QualifiedNameTableMessage(qualified_name=list(self._qualified_names)),
        )

    def build_outputs(self) -> tuple[bytes, bytes]:
        """Return the length-delimited string pool and qualified-name streams."""
        strings, qualified_names = self.build_messages()
        return (
            write_delimited(strings.to_bytes()),
            write_delimited(qualified_names.to_bytes()),
        )


__all__ = ["ROOT_QUALIFIED_NAME", "StringTable"]
