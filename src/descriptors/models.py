"""Descriptor models for resolved built-in declarations.

These models are the read-only input of the serializer: a forest of package
fragments, each owning class-like symbols that may nest arbitrarily deep.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClassKind(str, Enum):
    """Kind tag of a class-like symbol."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM_CLASS = "enum_class"
    ENUM_ENTRY = "enum_entry"
    ANNOTATION_CLASS = "annotation_class"
    OBJECT = "object"


class Modality(str, Enum):
    FINAL = "final"
    OPEN = "open"
    ABSTRACT = "abstract"
    SEALED = "sealed"


class Visibility(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    INTERNAL = "internal"
    PRIVATE = "private"


class CallableKind(str, Enum):
    FUN = "fun"
    VAL = "val"
    VAR = "var"


def _check_simple_name(value: str) -> str:
    if not value:
        msg = "name must be non-empty"
        raise ValueError(msg)
    if "/" in value or "." in value:
        msg = f"name {value!r} must not contain '/' or '.'"
        raise ValueError(msg)
    return value


class _Descriptor(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class TypeRef(_Descriptor):
    """Reference to a classifier by class id (``pkg/path/Outer.Inner``)."""

    class_id: str = Field(description="Class id of the referenced classifier")
    nullable: bool = False

    @field_validator("class_id")
    @classmethod
    def validate_class_id(cls, v: str) -> str:
        ClassId.parse(v)
        return v


class ValueParameter(_Descriptor):
    name: str
    type: TypeRef

    validate_name = field_validator("name")(_check_simple_name)


class CallableSymbol(_Descriptor):
    """A function or property declared in a class or package."""

    name: str
    kind: CallableKind = CallableKind.FUN
    visibility: Visibility = Visibility.PUBLIC
    value_parameters: list[ValueParameter] = Field(default_factory=list)
    return_type: TypeRef

    validate_name = field_validator("name")(_check_simple_name)


class ClassSymbol(_Descriptor):
    """A class-like symbol together with its nested class-like symbols."""

    name: str
    kind: ClassKind = ClassKind.CLASS
    modality: Modality = Modality.FINAL
    visibility: Visibility = Visibility.PUBLIC
    is_companion: bool = False
    type_parameters: list[str] = Field(default_factory=list)
    supertypes: list[TypeRef] = Field(default_factory=list)
    functions: list[CallableSymbol] = Field(default_factory=list)
    properties: list[CallableSymbol] = Field(default_factory=list)
    nested: list[ClassSymbol] = Field(default_factory=list)

    validate_name = field_validator("name")(_check_simple_name)


class PackageFragment(_Descriptor):
    """Declarations of one package contributed by a single source."""

    fq_name: str = Field(
        default="", description="Dotted package name, empty for the root package"
    )
    classes: list[ClassSymbol] = Field(default_factory=list)
    functions: list[CallableSymbol] = Field(default_factory=list)
    properties: list[CallableSymbol] = Field(default_factory=list)

    @field_validator("fq_name")
    @classmethod
    def validate_fq_name(cls, v: str) -> str:
        if v:
            for segment in v.split("."):
                _check_simple_name(segment)
        return v


class ClassId(BaseModel):
    """Fully-qualified identity of a class: package plus nested class path."""

    model_config = ConfigDict(frozen=True)

    package_fq_name: str
    relative_names: tuple[str, ...]

    @classmethod
    def parse(cls, value: str) -> ClassId:
        """Parse ``pkg/path/Outer.Inner`` into a class id."""
        package_path, _, class_path = value.rpartition("/")
        if not class_path:
            msg = f"class id {value!r} has no class name"
            raise ValueError(msg)
        package_parts = [p for p in package_path.split("/") if p] if package_path else []
        names = tuple(class_path.split("."))
        for part in (*package_parts, *names):
            _check_simple_name(part)
        return cls(package_fq_name=".".join(package_parts), relative_names=names)

    @property
    def package_segments(self) -> tuple[str, ...]:
        if not self.package_fq_name:
            return ()
        return tuple(self.package_fq_name.split("."))

    @property
    def relative_class_name(self) -> str:
        return ".".join(self.relative_names)

    def nested(self, name: str) -> ClassId:
        return ClassId(
            package_fq_name=self.package_fq_name,
            relative_names=(*self.relative_names, name),
        )

    def as_string(self) -> str:
        package_path = "/".join(self.package_segments)
        if package_path:
            return f"{package_path}/{self.relative_class_name}"
        return self.relative_class_name

    def __str__(self) -> str:
        return self.as_string()


def sort_class_symbols(symbols: list[ClassSymbol]) -> list[ClassSymbol]:
    """Return siblings in the total order used for every emitted listing."""
    return sorted(symbols, key=lambda s: (s.name, s.kind.value))


def _type_key(ref: TypeRef) -> tuple[str, bool]:
    return (ref.class_id, ref.nullable)


def _callable_key(c: CallableSymbol) -> tuple:
    return (
        c.name,
        c.kind.value,
        [(p.name, *_type_key(p.type)) for p in c.value_parameters],
        _type_key(c.return_type),
        c.visibility.value,
    )


def sort_callables(callables: list[CallableSymbol]) -> list[CallableSymbol]:
    """Order callables by every encoded field, so overloads never tie."""
    return sorted(callables, key=_callable_key)


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
