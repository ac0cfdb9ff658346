from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from contract.validation import ValidationResult, validate_artifacts
from descriptors.models import PackageFragment
from serialization.serializer import BuiltInsSerializer
from serialization.version import read_version_envelope, write_version_envelope
from serialization.write import generate_builtins

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_builtins"


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    repo_root = tmp_path / "repo"
    shutil.copytree(FIXTURE_ROOT, repo_root)
    out_dir = tmp_path / "artifacts"
    generate_builtins(root=repo_root, out_dir=out_dir)
    return out_dir


def _messages(result: ValidationResult) -> list[str]:
    return [error.message for error in result.errors]


def test_generated_artifacts_validate(artifacts_dir: Path) -> None:
    result = validate_artifacts(artifacts_dir, version=[1, 0, 0])

    assert result.ok, _messages(result)
    assert result.warnings == []
    assert result.packages == ["kotlin", "kotlin.collections"]


def test_missing_artifacts_dir_is_reported(tmp_path: Path) -> None:
    result = validate_artifacts(tmp_path / "missing")

    assert _messages(result) == ["Artifacts directory does not exist."]


def test_artifacts_path_must_be_directory(tmp_path: Path) -> None:
    path = tmp_path / "file"
    path.write_text("x", encoding="utf-8")

    result = validate_artifacts(path)

    assert _messages(result) == ["Artifacts path is not a directory."]


def test_empty_artifacts_dir_warns(tmp_path: Path) -> None:
    result = validate_artifacts(tmp_path)

    assert result.ok
    assert [w.message for w in result.warnings] == ["No built-ins packages found."]


def test_deleted_class_file_is_reported(artifacts_dir: Path) -> None:
    (artifacts_dir / "kotlin" / "Int.Companion.kotlin_class").unlink()

    result = validate_artifacts(artifacts_dir)

    assert _messages(result) == ["1 class messages have no standalone class file."]


def test_tampered_class_file_is_reported(artifacts_dir: Path) -> None:
    path = artifacts_dir / "kotlin" / "collections" / "List.kotlin_class"
    path.write_bytes(path.read_bytes() + b"\x08\x01")

    result = validate_artifacts(artifacts_dir)

    assert "Class file is not listed in the built-ins file." in _messages(result)


def test_missing_string_table_is_reported(artifacts_dir: Path) -> None:
    (artifacts_dir / "kotlin" / "kotlin.kotlin_string_table").unlink()

    result = validate_artifacts(artifacts_dir)

    assert [e.artifact for e in result.errors] == ["string_table"]
    assert _messages(result) == ["Required artifact file is missing."]


def test_tampered_string_table_is_reported(artifacts_dir: Path) -> None:
    path = artifacts_dir / "kotlin" / "collections" / "collections.kotlin_string_table"
    path.write_bytes(path.read_bytes() + b"\x00")

    result = validate_artifacts(artifacts_dir)

    assert _messages(result) == ["Trailing 1 bytes after string table."]


def test_tampered_package_file_is_reported(artifacts_dir: Path) -> None:
    (artifacts_dir / "kotlin" / "kotlin.kotlin_package").write_bytes(b"")

    result = validate_artifacts(artifacts_dir)

    assert _messages(result) == [
        "Package file differs from the built-ins package message."
    ]


def test_version_mismatch_is_reported(artifacts_dir: Path) -> None:
    path = artifacts_dir / "kotlin" / "kotlin.kotlin_builtins"
    _, payload = read_version_envelope(path.read_bytes())
    path.write_bytes(write_version_envelope((2, 0), payload))

    result = validate_artifacts(artifacts_dir, version=[1, 0, 0])

    assert _messages(result) == ["Version mismatch: expected (1, 0, 0), found (2, 0)."]


def test_unreadable_builtins_file_is_reported(artifacts_dir: Path) -> None:
    (artifacts_dir / "kotlin" / "kotlin.kotlin_builtins").write_bytes(b"\x00\x00")

    result = validate_artifacts(artifacts_dir)

    assert [e.artifact for e in result.errors] == ["builtins"]
    assert _messages(result)[0].startswith("Unreadable built-ins file")


def test_orphan_class_file_is_reported(artifacts_dir: Path) -> None:
    orphan = artifacts_dir / "stray" / "Lost.kotlin_class"
    orphan.parent.mkdir()
    orphan.write_bytes(b"\x18\x00")

    result = validate_artifacts(artifacts_dir)

    assert _messages(result) == ["Class file has no built-ins file in its package."]
    assert result.errors[0].path == orphan


def test_packages_are_reported_in_package_name_order(tmp_path: Path) -> None:
    fragments = [
        PackageFragment.model_validate({"fq_name": name, "classes": [{"name": "A"}]})
        for name in ("kotlin.text", "kotlin", "kotlin.collections")
    ]
    out_dir = tmp_path / "out"
    serialized = BuiltInsSerializer().serialize(out_dir, fragments)

    result = validate_artifacts(out_dir)

    assert result.ok, _messages(result)
    assert result.packages == ["kotlin", "kotlin.collections", "kotlin.text"]
    assert result.packages == [p.fq_name for p in serialized.packages]
