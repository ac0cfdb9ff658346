"""Built-ins artifact contract definitions.

This module defines the stable file layout shared by the serializer and any
runtime that loads the serialized built-ins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from descriptors.models import ClassId

# Binary format version written in front of every combined built-ins file.
DEFAULT_VERSION: tuple[int, ...] = (1, 0, 0)

# Artifact extension constants (stable contract identifiers).
CLASS_EXTENSION = "kotlin_class"
PACKAGE_EXTENSION = "kotlin_package"
STRING_TABLE_EXTENSION = "kotlin_string_table"
BUILTINS_EXTENSION = "kotlin_builtins"

# Short name used for the root package, which has no last segment.
DEFAULT_PACKAGE_NAME = "default-package"


# ---------------------------------------------------------------------------
# Deterministic artifact paths
# ---------------------------------------------------------------------------
# All paths are POSIX relative paths under the destination directory.
# - package directory: package segments joined by "/" ("" for root)
# - class file:        <pkg dir>/<Outer.Inner>.kotlin_class
# - package files:     <pkg dir>/<short name>.<ext>


def package_directory(fq_name: str) -> str:
    return fq_name.replace(".", "/")


def package_short_name(fq_name: str) -> str:
    if not fq_name:
        return DEFAULT_PACKAGE_NAME
    return fq_name.rsplit(".", 1)[-1]


def _in_package(fq_name: str, filename: str) -> str:
    directory = package_directory(fq_name)
    return f"{directory}/{filename}" if directory else filename


def class_metadata_path(class_id: ClassId) -> str:
    return _in_package(
        class_id.package_fq_name,
        f"{class_id.relative_class_name}.{CLASS_EXTENSION}",
    )


def package_file_path(fq_name: str) -> str:
    return _in_package(fq_name, f"{package_short_name(fq_name)}.{PACKAGE_EXTENSION}")


def string_table_file_path(fq_name: str) -> str:
    return _in_package(
        fq_name, f"{package_short_name(fq_name)}.{STRING_TABLE_EXTENSION}"
    )


def builtins_file_path(fq_name: str) -> str:
    return _in_package(fq_name, f"{package_short_name(fq_name)}.{BUILTINS_EXTENSION}")
