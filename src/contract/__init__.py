"""Stable artifact contract surface for builtins-serializer.

This module exposes the file layout constants and path functions that the
serializer, the validator and downstream loaders agree on.
"""

from contract.artifacts import (
    BUILTINS_EXTENSION,
    CLASS_EXTENSION,
    DEFAULT_VERSION,
    PACKAGE_EXTENSION,
    STRING_TABLE_EXTENSION,
    builtins_file_path,
    class_metadata_path,
    package_file_path,
    string_table_file_path,
)


def __getattr__(name: str) -> object:
    if name in {"ValidationMessage", "ValidationResult", "validate_artifacts"}:
        from contract.validation import (
            ValidationMessage,
            ValidationResult,
            validate_artifacts,
        )

        return {
            "ValidationMessage": ValidationMessage,
            "ValidationResult": ValidationResult,
            "validate_artifacts": validate_artifacts,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "BUILTINS_EXTENSION",
    "CLASS_EXTENSION",
    "DEFAULT_VERSION",
    "PACKAGE_EXTENSION",
    "STRING_TABLE_EXTENSION",
    "ValidationMessage",
    "ValidationResult",
    "builtins_file_path",
    "class_metadata_path",
    "package_file_path",
    "string_table_file_path",
    "validate_artifacts",
]
