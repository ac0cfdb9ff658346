"""Validation helpers for serialized built-ins artifacts."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contract.artifacts import (
    BUILTINS_EXTENSION,
    CLASS_EXTENSION,
    PACKAGE_EXTENSION,
    STRING_TABLE_EXTENSION,
)
from serialization.errors import WireFormatError
from serialization.messages import (
    BuiltInsMessage,
    QualifiedNameTableMessage,
    StringTableMessage,
    read_class_payloads,
)
from serialization.version import read_version_envelope
from serialization.wire import read_delimited

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


@dataclass(frozen=True)
class ValidationMessage:
    artifact: str
    path: Path
    message: str

    def location(self) -> str:
        return str(self.path)

    def to_dict(self) -> dict[str, object]:
        return {
            "artifact": self.artifact,
            "path": str(self.path),
            "message": self.message,
        }


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_artifacts(
    artifacts_dir: Path, *, version: Sequence[int] | None = None
) -> ValidationResult:
    """Check that every package in ``artifacts_dir`` is complete and consistent.

    A package is identified by its ``.kotlin_builtins`` file. For each one the
    package and string-table files must exist, the version header must parse
    (and equal ``version`` when given), and the standalone class files must be
    exactly the class messages listed in the combined file.
    """
    result = ValidationResult()

    if not artifacts_dir.exists():
        result.errors.append(
            ValidationMessage(
                artifact="artifacts_dir",
                path=artifacts_dir,
                message="Artifacts directory does not exist.",
            )
        )
        return result

    if not artifacts_dir.is_dir():
        result.errors.append(
            ValidationMessage(
                artifact="artifacts_dir",
                path=artifacts_dir,
                message="Artifacts path is not a directory.",
            )
        )
        return result

    builtins_files = sorted(
        artifacts_dir.rglob(f"*.{BUILTINS_EXTENSION}"),
        key=lambda p: _package_name(artifacts_dir, p.parent),
    )
    if not builtins_files:
        result.warnings.append(
            ValidationMessage(
                artifact="artifacts_dir",
                path=artifacts_dir,
                message="No built-ins packages found.",
            )
        )

    package_dirs: set[Path] = set()
    for builtins_path in builtins_files:
        package_dirs.add(builtins_path.parent)
        _validate_package(artifacts_dir, builtins_path, result, version=version)

    for class_path in sorted(artifacts_dir.rglob(f"*.{CLASS_EXTENSION}")):
        if class_path.parent not in package_dirs:
            result.errors.append(
                ValidationMessage(
                    artifact="class",
                    path=class_path,
                    message="Class file has no built-ins file in its package.",
                )
            )

    return result


def _package_name(artifacts_dir: Path, package_dir: Path) -> str:
    return ".".join(package_dir.relative_to(artifacts_dir).parts)


def _validate_package(
    artifacts_dir: Path,
    builtins_path: Path,
    result: ValidationResult,
    *,
    version: Sequence[int] | None,
) -> None:
    package_dir = builtins_path.parent
    short_name = builtins_path.name[: -len(BUILTINS_EXTENSION) - 1]
    result.packages.append(_package_name(artifacts_dir, package_dir))

    companions = {
        "package": package_dir / f"{short_name}.{PACKAGE_EXTENSION}",
        "string_table": package_dir / f"{short_name}.{STRING_TABLE_EXTENSION}",
    }
    missing = False
    for artifact_name, path in companions.items():
        if not path.is_file():
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    message="Required artifact file is missing.",
                )
            )
            missing = True

    try:
        found_version, payload = read_version_envelope(builtins_path.read_bytes())
        bundle = BuiltInsMessage.from_bytes(payload)
        class_payloads = read_class_payloads(payload)
    except WireFormatError as exc:
        result.errors.append(
            ValidationMessage(
                artifact="builtins",
                path=builtins_path,
                message=f"Unreadable built-ins file: {exc}",
            )
        )
        return

    if version is not None and found_version != tuple(version):
        result.errors.append(
            ValidationMessage(
                artifact="builtins",
                path=builtins_path,
                message=(
                    f"Version mismatch: expected {tuple(version)}, "
                    f"found {found_version}."
                ),
            )
        )

    _validate_indices(builtins_path, bundle, result)
    _validate_class_files(package_dir, class_payloads, result)

    if missing:
        return

    if companions["package"].read_bytes() != bundle.package.to_bytes():
        result.errors.append(
            ValidationMessage(
                artifact="package",
                path=companions["package"],
                message="Package file differs from the built-ins package message.",
            )
        )

    _validate_string_table(companions["string_table"], bundle, result)


def _validate_string_table(
    path: Path, bundle: BuiltInsMessage, result: ValidationResult
) -> None:
    data = path.read_bytes()
    try:
        strings_payload, pos = read_delimited(data)
        qualified_payload, pos = read_delimited(data, pos)
        strings = StringTableMessage.from_bytes(strings_payload)
        qualified_names = QualifiedNameTableMessage.from_bytes(qualified_payload)
    except WireFormatError as exc:
        result.errors.append(
            ValidationMessage(
                artifact="string_table",
                path=path,
                message=f"Unreadable string table: {exc}",
            )
        )
        return

    if pos != len(data):
        result.errors.append(
            ValidationMessage(
                artifact="string_table",
                path=path,
                message=f"Trailing {len(data) - pos} bytes after string table.",
            )
        )
    if strings != bundle.strings or qualified_names != bundle.qualified_names:
        result.errors.append(
            ValidationMessage(
                artifact="string_table",
                path=path,
                message="String table file differs from the built-ins string table.",
            )
        )


def _validate_indices(
    builtins_path: Path, bundle: BuiltInsMessage, result: ValidationResult
) -> None:
    string_count = len(bundle.strings.string)
    name_count = len(bundle.qualified_names.qualified_name)
    for i, entry in enumerate(bundle.qualified_names.qualified_name):
        if not 0 <= entry.short_name < string_count or not (
            -1 <= entry.parent_qualified_name < i
        ):
            result.errors.append(
                ValidationMessage(
                    artifact="builtins",
                    path=builtins_path,
                    message=f"Qualified name {i} has an out-of-range reference.",
                )
            )
    for class_message in bundle.class_:
        if not 0 <= class_message.fq_name < name_count:
            result.errors.append(
                ValidationMessage(
                    artifact="builtins",
                    path=builtins_path,
                    message=(
                        f"Class fq_name {class_message.fq_name} is not in the "
                        "qualified name table."
                    ),
                )
            )


def _validate_class_files(
    package_dir: Path, class_payloads: list[bytes], result: ValidationResult
) -> None:
    expected = Counter(class_payloads)
    for class_path in sorted(package_dir.glob(f"*.{CLASS_EXTENSION}")):
        payload = class_path.read_bytes()
        if expected[payload] <= 0:
            result.errors.append(
                ValidationMessage(
                    artifact="class",
                    path=class_path,
                    message="Class file is not listed in the built-ins file.",
                )
            )
            continue
        expected[payload] -= 1

    unmatched = sum(count for count in expected.values() if count > 0)
    if unmatched:
        result.errors.append(
            ValidationMessage(
                artifact="class",
                path=package_dir,
                message=f"{unmatched} class messages have no standalone class file.",
            )
        )
