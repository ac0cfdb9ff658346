"""Population of schema messages from descriptor models."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from descriptors.models import (
    ClassId,
    ClassKind,
    sort_callables,
    sort_class_symbols,
)
from serialization.flags import callable_flags, class_flags
from serialization.messages import (
    CallableMessage,
    ClassMessage,
    PackageMessage,
    TypeMessage,
    TypeParameterMessage,
    ValueParameterMessage,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from descriptors.models import CallableSymbol, ClassSymbol, PackageFragment, TypeRef
    from serialization.string_table import StringTable


class MessagePopulator(Protocol):
    """Builds the class and package messages for the serializer."""

    def populate_class_message(
        self,
        symbol: ClassSymbol,
        class_id: ClassId,
        string_table: StringTable,
    ) -> ClassMessage: ...

    def populate_package_message(
        self,
        fragments: Sequence[PackageFragment],
        string_table: StringTable,
    ) -> PackageMessage: ...


class DescriptorPopulator:
    """Default populator working directly on descriptor models."""

    def populate_class_message(
        self,
        symbol: ClassSymbol,
        class_id: ClassId,
        string_table: StringTable,
    ) -> ClassMessage:
        flags = class_flags(
            symbol.kind,
            symbol.modality,
            symbol.visibility,
            is_companion=symbol.is_companion,
        )
        fq_name = string_table.intern_class_id(class_id)

        nested = sort_class_symbols(symbol.nested)
        companion = next(
            (n for n in nested if n.is_companion and n.kind == ClassKind.OBJECT),
            None,
        )

        return ClassMessage(
            flags=flags,
            fq_name=fq_name,
            companion_object_name=(
                string_table.intern(companion.name) if companion is not None else None
            ),
            type_parameter=[
                TypeParameterMessage(id=i, name=string_table.intern(name))
                for i, name in enumerate(symbol.type_parameters)
            ],
            supertype=[_type(ref, string_table) for ref in symbol.supertypes],
            nested_class_name=[
                string_table.intern(n.name)
                for n in nested
                if n.kind != ClassKind.ENUM_ENTRY
            ],
            function=[_callable(c, string_table) for c in sort_callables(symbol.functions)],
            property=[
                _callable(c, string_table) for c in sort_callables(symbol.properties)
            ],
            enum_entry=[
                string_table.intern(n.name)
                for n in nested
                if n.kind == ClassKind.ENUM_ENTRY
            ],
        )

    def populate_package_message(
        self,
        fragments: Sequence[PackageFragment],
        string_table: StringTable,
    ) -> PackageMessage:
        functions = [f for fragment in fragments for f in fragment.functions]
        properties = [p for fragment in fragments for p in fragment.properties]
        return PackageMessage(
            function=[_callable(c, string_table) for c in sort_callables(functions)],
            property=[_callable(c, string_table) for c in sort_callables(properties)],
        )


def _type(ref: TypeRef, string_table: StringTable) -> TypeMessage:
    return TypeMessage(
        class_name=string_table.intern_class_id(ClassId.parse(ref.class_id)),
        nullable=ref.nullable,
    )


def _callable(symbol: CallableSymbol, string_table: StringTable) -> CallableMessage:
    return CallableMessage(
        flags=callable_flags(symbol.kind, symbol.visibility),
        name=string_table.intern(symbol.name),
        return_type=_type(symbol.return_type, string_table),
        value_parameter=[
            ValueParameterMessage(
                name=string_table.intern(p.name),
                type=_type(p.type, string_table),
            )
            for p in symbol.value_parameters
        ],
    )


__all__ = ["DescriptorPopulator", "MessagePopulator"]
