"""Descriptor input models for built-in declarations."""

from descriptors.models import (
    CallableKind,
    CallableSymbol,
    ClassId,
    ClassKind,
    ClassSymbol,
    Modality,
    PackageFragment,
    TypeRef,
    ValueParameter,
    Visibility,
    sort_callables,
    sort_class_symbols,
)

__all__ = [
    "CallableKind",
    "CallableSymbol",
    "ClassId",
    "ClassKind",
    "ClassSymbol",
    "Modality",
    "PackageFragment",
    "TypeRef",
    "ValueParameter",
    "Visibility",
    "sort_callables",
    "sort_class_symbols",
]
