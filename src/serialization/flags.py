"""Bit packing for the ``flags`` fields of Class and Callable messages.

Class flags:    bits 0-2 visibility, 3-4 modality, 5-7 class kind, 8 companion.
Callable flags: bits 0-2 visibility, 3-4 callable kind.
"""

from __future__ import annotations

from descriptors.models import CallableKind, ClassKind, Modality, Visibility
from serialization.errors import UnsupportedSymbolError

VISIBILITY_CODES: dict[Visibility, int] = {
    Visibility.INTERNAL: 0,
    Visibility.PRIVATE: 1,
    Visibility.PROTECTED: 2,
    Visibility.PUBLIC: 3,
}

MODALITY_CODES: dict[Modality, int] = {
    Modality.FINAL: 0,
    Modality.OPEN: 1,
    Modality.ABSTRACT: 2,
    Modality.SEALED: 3,
}

CLASS_KIND_CODES: dict[ClassKind, int] = {
    ClassKind.CLASS: 0,
    ClassKind.INTERFACE: 1,
    ClassKind.ENUM_CLASS: 2,
    ClassKind.ENUM_ENTRY: 3,
    ClassKind.ANNOTATION_CLASS: 4,
    ClassKind.OBJECT: 5,
}

CALLABLE_KIND_CODES: dict[CallableKind, int] = {
    CallableKind.FUN: 0,
    CallableKind.VAL: 1,
    CallableKind.VAR: 2,
}

_COMPANION_BIT = 1 << 8


def _lookup(table: dict, key: object, what: str) -> int:
    try:
        return table[key]
    except KeyError as exc:
        msg = f"Unsupported {what}: {key!r}"
        raise UnsupportedSymbolError(msg) from exc


def class_flags(
    kind: ClassKind,
    modality: Modality,
    visibility: Visibility,
    *,
    is_companion: bool = False,
) -> int:
    flags = _lookup(VISIBILITY_CODES, visibility, "visibility")
    flags |= _lookup(MODALITY_CODES, modality, "modality") << 3
    flags |= _lookup(CLASS_KIND_CODES, kind, "class kind") << 5
    if is_companion:
        flags |= _COMPANION_BIT
    return flags


def callable_flags(kind: CallableKind, visibility: Visibility) -> int:
    flags = _lookup(VISIBILITY_CODES, visibility, "visibility")
    flags |= _lookup(CALLABLE_KIND_CODES, kind, "callable kind") << 3
    return flags


def class_kind_from_flags(flags: int) -> ClassKind:
    code = (flags >> 5) & 0x7
    for kind, value in CLASS_KIND_CODES.items():
        if value == code:
            return kind
    msg = f"Unknown class kind code {code}"
    raise UnsupportedSymbolError(msg)


__all__ = ["callable_flags", "class_flags", "class_kind_from_flags"]
