"""Built-ins metadata messages.

Field numbers are part of the on-disk contract and must not be reused:

    StringTable          { repeated string string = 1; }
    QualifiedName        { int32 parent_qualified_name = 1 [default -1];
                           int32 short_name = 2;
                           Kind kind = 3 [default PACKAGE]; }
    QualifiedNameTable   { repeated QualifiedName qualified_name = 1; }
    Type                 { int32 class_name = 1; bool nullable = 2; }
    ValueParameter       { int32 name = 1; Type type = 2; }
    Callable             { int32 flags = 1; int32 name = 2; Type return_type = 3;
                           repeated ValueParameter value_parameter = 4; }
    TypeParameter        { int32 id = 1; int32 name = 2; }
    Class                { int32 flags = 1; int32 fq_name = 3;
                           int32 companion_object_name = 4;
                           repeated TypeParameter type_parameter = 5;
                           repeated Type supertype = 6;
                           repeated int32 nested_class_name = 7;
                           repeated Callable function = 9;
                           repeated Callable property = 10;
                           repeated int32 enum_entry = 13; }
    Package              { repeated Callable function = 3;
                           repeated Callable property = 4; }
    BuiltIns             { StringTable strings = 1;
                           QualifiedNameTable qualified_names = 2;
                           Package package = 3;
                           repeated Class class = 4; }

Every integer that names a string or qualified name is an index into the
string table of the same package.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from serialization.errors import WireFormatError
from serialization.wire import LENGTH_DELIMITED, VARINT, WireWriter, iter_fields, to_int32

if TYPE_CHECKING:
    from collections.abc import Iterator


class QualifiedNameKind(IntEnum):
    CLASS = 0
    PACKAGE = 1
    LOCAL = 2


def _varint(message: str, field_number: int, wire_type: int, value: int | bytes) -> int:
    if wire_type != VARINT or not isinstance(value, int):
        msg = f"{message}.{field_number}: expected varint"
        raise WireFormatError(msg)
    return to_int32(value)


def _payload(message: str, field_number: int, wire_type: int, value: int | bytes) -> bytes:
    if wire_type != LENGTH_DELIMITED or not isinstance(value, bytes):
        msg = f"{message}.{field_number}: expected length-delimited payload"
        raise WireFormatError(msg)
    return value


class WireMessage(BaseModel):
    """Base for messages with a fixed wire encoding."""

    model_config = ConfigDict(extra="forbid")

    message_name: ClassVar[str] = "Message"

    def write_fields(self, writer: WireWriter) -> None:
        raise NotImplementedError

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        writer = WireWriter()
        self.write_fields(writer)
        return writer.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        try:
            return cls(**cls.read_fields(iter_fields(data)))
        except (ValidationError, ValueError) as exc:
            msg = f"{cls.message_name}: {exc}"
            raise WireFormatError(msg) from exc


class StringTableMessage(WireMessage):
    message_name: ClassVar[str] = "StringTable"

    string: list[str] = Field(default_factory=list)

    def write_fields(self, writer: WireWriter) -> None:
        for value in self.string:
            writer.string(1, value)

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        strings: list[str] = []
        for number, wire_type, value in fields:
            if number == 1:
                raw = _payload(cls.message_name, number, wire_type, value)
                try:
                    strings.append(raw.decode("utf-8"))
                except UnicodeDecodeError as exc:
                    msg = f"StringTable.1: invalid UTF-8 at entry {len(strings)}"
                    raise WireFormatError(msg) from exc
        return {"string": strings}


class QualifiedNameMessage(WireMessage):
    message_name: ClassVar[str] = "QualifiedName"

    parent_qualified_name: int = -1
    short_name: int
    kind: QualifiedNameKind = QualifiedNameKind.PACKAGE

    def write_fields(self, writer: WireWriter) -> None:
        if self.parent_qualified_name != -1:
            writer.int32(1, self.parent_qualified_name)
        writer.int32(2, self.short_name)
        if self.kind != QualifiedNameKind.PACKAGE:
            writer.int32(3, self.kind)

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for number, wire_type, value in fields:
            if number == 1:
                out["parent_qualified_name"] = _varint(cls.message_name, number, wire_type, value)
            elif number == 2:
                out["short_name"] = _varint(cls.message_name, number, wire_type, value)
            elif number == 3:
                out["kind"] = QualifiedNameKind(_varint(cls.message_name, number, wire_type, value))
        if "short_name" not in out:
            msg = "QualifiedName: missing required field short_name"
            raise WireFormatError(msg)
        return out


class QualifiedNameTableMessage(WireMessage):
    message_name: ClassVar[str] = "QualifiedNameTable"

    qualified_name: list[QualifiedNameMessage] = Field(default_factory=list)

    def write_fields(self, writer: WireWriter) -> None:
        for entry in self.qualified_name:
            writer.length_delimited(1, entry.to_bytes())

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        entries = [
            QualifiedNameMessage.from_bytes(_payload(cls.message_name, number, wire_type, value))
            for number, wire_type, value in fields
            if number == 1
        ]
        return {"qualified_name": entries}


class TypeMessage(WireMessage):
    message_name: ClassVar[str] = "Type"

    class_name: int
    nullable: bool = False

    def write_fields(self, writer: WireWriter) -> None:
        writer.int32(1, self.class_name)
        if self.nullable:
            writer.boolean(2, True)

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for number, wire_type, value in fields:
            if number == 1:
                out["class_name"] = _varint(cls.message_name, number, wire_type, value)
            elif number == 2:
                out["nullable"] = bool(_varint(cls.message_name, number, wire_type, value))
        if "class_name" not in out:
            msg = "Type: missing required field class_name"
            raise WireFormatError(msg)
        return out


class ValueParameterMessage(WireMessage):
    message_name: ClassVar[str] = "ValueParameter"

    name: int
    type: TypeMessage

    def write_fields(self, writer: WireWriter) -> None:
        writer.int32(1, self.name)
        writer.length_delimited(2, self.type.to_bytes())

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for number, wire_type, value in fields:
            if number == 1:
                out["name"] = _varint(cls.message_name, number, wire_type, value)
            elif number == 2:
                out["type"] = TypeMessage.from_bytes(
                    _payload(cls.message_name, number, wire_type, value)
                )
        return out


class CallableMessage(WireMessage):
    message_name: ClassVar[str] = "Callable"

    flags: int = 0
    name: int
    return_type: TypeMessage
    value_parameter: list[ValueParameterMessage] = Field(default_factory=list)

    def write_fields(self, writer: WireWriter) -> None:
        writer.int32(1, self.flags)
        writer.int32(2, self.name)
        writer.length_delimited(3, self.return_type.to_bytes())
        for parameter in self.value_parameter:
            writer.length_delimited(4, parameter.to_bytes())

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {"value_parameter": []}
        for number, wire_type, value in fields:
            if number == 1:
                out["flags"] = _varint(cls.message_name, number, wire_type, value)
            elif number == 2:
                out["name"] = _varint(cls.message_name, number, wire_type, value)
            elif number == 3:
                out["return_type"] = TypeMessage.from_bytes(
                    _payload(cls.message_name, number, wire_type, value)
                )
            elif number == 4:
                out["value_parameter"].append(
                    ValueParameterMessage.from_bytes(
                        _payload(cls.message_name, number, wire_type, value)
                    )
                )
        return out


class TypeParameterMessage(WireMessage):
    message_name: ClassVar[str] = "TypeParameter"

    id: int
    name: int

    def write_fields(self, writer: WireWriter) -> None:
        writer.int32(1, self.id)
        writer.int32(2, self.name)

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for number, wire_type, value in fields:
            if number == 1:
                out["id"] = _varint(cls.message_name, number, wire_type, value)
            elif number == 2:
                out["name"] = _varint(cls.message_name, number, wire_type, value)
        return out


class ClassMessage(WireMessage):
    message_name: ClassVar[str] = "Class"

    flags: int = 0
    fq_name: int
    companion_object_name: int | None = None
    type_parameter: list[TypeParameterMessage] = Field(default_factory=list)
    supertype: list[TypeMessage] = Field(default_factory=list)
    nested_class_name: list[int] = Field(default_factory=list)
    function: list[CallableMessage] = Field(default_factory=list)
    property: list[CallableMessage] = Field(default_factory=list)
    enum_entry: list[int] = Field(default_factory=list)

    def write_fields(self, writer: WireWriter) -> None:
        writer.int32(1, self.flags)
        writer.int32(3, self.fq_name)
        if self.companion_object_name is not None:
            writer.int32(4, self.companion_object_name)
        for type_parameter in self.type_parameter:
            writer.length_delimited(5, type_parameter.to_bytes())
        for supertype in self.supertype:
            writer.length_delimited(6, supertype.to_bytes())
        for name in self.nested_class_name:
            writer.int32(7, name)
        for function in self.function:
            writer.length_delimited(9, function.to_bytes())
        for prop in self.property:
            writer.length_delimited(10, prop.to_bytes())
        for name in self.enum_entry:
            writer.int32(13, name)

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type_parameter": [],
            "supertype": [],
            "nested_class_name": [],
            "function": [],
            "property": [],
            "enum_entry": [],
        }
        name = cls.message_name
        for number, wire_type, value in fields:
            if number == 1:
                out["flags"] = _varint(name, number, wire_type, value)
            elif number == 3:
                out["fq_name"] = _varint(name, number, wire_type, value)
            elif number == 4:
                out["companion_object_name"] = _varint(name, number, wire_type, value)
            elif number == 5:
                out["type_parameter"].append(
                    TypeParameterMessage.from_bytes(_payload(name, number, wire_type, value))
                )
            elif number == 6:
                out["supertype"].append(
                    TypeMessage.from_bytes(_payload(name, number, wire_type, value))
                )
            elif number == 7:
                out["nested_class_name"].append(_varint(name, number, wire_type, value))
            elif number == 9:
                out["function"].append(
                    CallableMessage.from_bytes(_payload(name, number, wire_type, value))
                )
            elif number == 10:
                out["property"].append(
                    CallableMessage.from_bytes(_payload(name, number, wire_type, value))
                )
            elif number == 13:
                out["enum_entry"].append(_varint(name, number, wire_type, value))
        if "fq_name" not in out:
            msg = "Class: missing required field fq_name"
            raise WireFormatError(msg)
        return out


class PackageMessage(WireMessage):
    message_name: ClassVar[str] = "Package"

    function: list[CallableMessage] = Field(default_factory=list)
    property: list[CallableMessage] = Field(default_factory=list)

    def write_fields(self, writer: WireWriter) -> None:
        for function in self.function:
            writer.length_delimited(3, function.to_bytes())
        for prop in self.property:
            writer.length_delimited(4, prop.to_bytes())

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {"function": [], "property": []}
        for number, wire_type, value in fields:
            if number == 3:
                out["function"].append(
                    CallableMessage.from_bytes(_payload(cls.message_name, number, wire_type, value))
                )
            elif number == 4:
                out["property"].append(
                    CallableMessage.from_bytes(_payload(cls.message_name, number, wire_type, value))
                )
        return out


class BuiltInsMessage(WireMessage):
    """Combined per-package message: every class, the package and its tables."""

    message_name: ClassVar[str] = "BuiltIns"

    strings: StringTableMessage = Field(default_factory=StringTableMessage)
    qualified_names: QualifiedNameTableMessage = Field(
        default_factory=QualifiedNameTableMessage
    )
    package: PackageMessage = Field(default_factory=PackageMessage)
    class_: list[ClassMessage] = Field(default_factory=list, alias="class")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def write_fields(self, writer: WireWriter) -> None:
        writer.length_delimited(1, self.strings.to_bytes())
        writer.length_delimited(2, self.qualified_names.to_bytes())
        writer.length_delimited(3, self.package.to_bytes())
        for class_message in self.class_:
            writer.length_delimited(4, class_message.to_bytes())

    def write_with_class_payloads(self, class_payloads: list[bytes]) -> bytes:
        """Encode using already-serialized class messages instead of re-encoding."""
        writer = WireWriter()
        writer.length_delimited(1, self.strings.to_bytes())
        writer.length_delimited(2, self.qualified_names.to_bytes())
        writer.length_delimited(3, self.package.to_bytes())
        for payload in class_payloads:
            writer.length_delimited(4, payload)
        return writer.getvalue()

    @classmethod
    def read_fields(cls, fields: Iterator[tuple[int, int, int | bytes]]) -> dict[str, Any]:
        out: dict[str, Any] = {"class_": []}
        for number, wire_type, value in fields:
            payload = _payload(cls.message_name, number, wire_type, value)
            if number == 1:
                out["strings"] = StringTableMessage.from_bytes(payload)
            elif number == 2:
                out["qualified_names"] = QualifiedNameTableMessage.from_bytes(payload)
            elif number == 3:
                out["package"] = PackageMessage.from_bytes(payload)
            elif number == 4:
                out["class_"].append(ClassMessage.from_bytes(payload))
        return out


def read_class_payloads(data: bytes) -> list[bytes]:
    """Return the raw class message payloads of an encoded BuiltIns message."""
    return [
        _payload(BuiltInsMessage.message_name, number, wire_type, value)
        for number, wire_type, value in iter_fields(data)
        if number == 4
    ]


__all__ = [
    "BuiltInsMessage",
    "CallableMessage",
    "ClassMessage",
    "PackageMessage",
    "QualifiedNameKind",
    "QualifiedNameMessage",
    "QualifiedNameTableMessage",
    "StringTableMessage",
    "TypeMessage",
    "TypeParameterMessage",
    "ValueParameterMessage",
    "WireMessage",
    "read_class_payloads",
]
