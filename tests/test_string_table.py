from __future__ import annotations

from descriptors.models import ClassId
from serialization.messages import (
    QualifiedNameKind,
    QualifiedNameTableMessage,
    StringTableMessage,
)
from serialization.string_table import ROOT_QUALIFIED_NAME, StringTable
from serialization.wire import read_delimited


def test_intern_assigns_dense_indices_and_reuses_existing() -> None:
    table = StringTable()

    assert table.intern("Any") == 0
    assert table.intern("Int") == 1
    assert table.intern("Any") == 0
    assert table.strings == ("Any", "Int")
    assert len(table) == 2


def test_intern_class_id_builds_package_then_class_chain() -> None:
    table = StringTable()
    class_id = ClassId(
        package_fq_name="kotlin.collections", relative_names=("Map", "Entry")
    )

    index = table.intern_class_id(class_id)

    assert table.strings == ("kotlin", "collections", "Map", "Entry")
    _, qualified_names = table.build_messages()
    entries = qualified_names.qualified_name
    assert [(e.parent_qualified_name, e.short_name, e.kind) for e in entries] == [
        (-1, 0, QualifiedNameKind.PACKAGE),
        (0, 1, QualifiedNameKind.PACKAGE),
        (1, 2, QualifiedNameKind.CLASS),
        (2, 3, QualifiedNameKind.CLASS),
    ]
    assert index == 3
    assert table.resolve_qualified_name(index) == "kotlin/collections/Map.Entry"


def test_qualified_names_share_common_prefixes() -> None:
    table = StringTable()

    entry = table.intern_class_id(ClassId.parse("kotlin/collections/Map.Entry"))
    outer = table.intern_class_id(ClassId.parse("kotlin/collections/Map"))
    package = table.intern_package("kotlin.collections")

    assert outer == 2
    assert package == 1
    assert entry == 3
    _, qualified_names = table.build_messages()
    assert len(qualified_names.qualified_name) == 4


def test_same_short_name_as_package_and_class_are_distinct() -> None:
    table = StringTable()

    package = table.intern_package("kotlin")
    klass = table.intern_class_id(ClassId.parse("kotlin"))

    assert package != klass
    assert table.strings == ("kotlin",)


def test_root_package_has_no_entry() -> None:
    table = StringTable()

    assert table.intern_package("") == ROOT_QUALIFIED_NAME

    index = table.intern_class_id(ClassId.parse("Foo"))
    _, qualified_names = table.build_messages()
    assert qualified_names.qualified_name[index].parent_qualified_name == -1
    assert table.resolve_qualified_name(index) == "Foo"


def test_build_outputs_are_length_delimited_messages() -> None:
    table = StringTable()
    table.intern("a")

    strings_stream, qualified_names_stream = table.build_outputs()

    assert strings_stream == b"\x03\x0a\x01a"
    assert qualified_names_stream == b"\x00"

    payload, end = read_delimited(strings_stream)
    assert end == len(strings_stream)
    assert StringTableMessage.from_bytes(payload).string == ["a"]


def test_from_messages_preserves_indices() -> None:
    table = StringTable()
    index = table.intern_class_id(ClassId.parse("kotlin/Int.Companion"))
    strings, qualified_names = table.build_messages()

    rebuilt = StringTable.from_messages(
        StringTableMessage.from_bytes(strings.to_bytes()),
        QualifiedNameTableMessage.from_bytes(qualified_names.to_bytes()),
    )

    assert rebuilt.resolve_qualified_name(index) == "kotlin/Int.Companion"
    assert rebuilt.intern("Int") == table.intern("Int")
    assert rebuilt.intern_class_id(ClassId.parse("kotlin/Int.Companion")) == index
