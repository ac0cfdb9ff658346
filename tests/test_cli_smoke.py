from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from cli import main

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_builtins"


def _copy_fixture(root: Path) -> None:
    shutil.copytree(FIXTURE_ROOT, root)


def test_cli_generate_reports_totals(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)

    exit_code = main(["generate", str(repo_root)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("Total bytes written: ")
    assert out.rstrip().endswith(" to 14 files")
    assert (repo_root / "out" / "builtins" / "kotlin").is_dir()


def test_cli_generate_out_dir_flag(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    custom_out_dir = tmp_path / "custom-builtins"

    exit_code = main(["generate", str(repo_root), "--out-dir", str(custom_out_dir)])

    assert exit_code == 0
    assert (custom_out_dir / "kotlin" / "kotlin.kotlin_builtins").is_file()


def test_cli_generate_reports_bad_descriptors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    (repo_root / "src" / "broken.json").write_text("{", encoding="utf-8")

    exit_code = main(["generate", str(repo_root)])

    assert exit_code == 1
    assert "Invalid JSON" in capsys.readouterr().err


def test_cli_generate_reports_config_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    (repo_root / "builtins-serializer.toml").write_text(
        'output_dir = "../outside"\n', encoding="utf-8"
    )

    exit_code = main(["generate", str(repo_root)])

    assert exit_code == 1
    assert "escapes the project root" in capsys.readouterr().err


def test_cli_validate_after_generate(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)

    assert main(["generate", str(repo_root)]) == 0
    assert main(["validate", str(repo_root)]) == 0


def test_cli_validate_default_artifacts_dir_reports_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    monkeypatch.chdir(repo_root)

    exit_code = main(["validate"])

    err = capsys.readouterr().err
    assert exit_code == 1
    assert "Artifacts directory does not exist." in err
    assert str((repo_root / "out" / "builtins").resolve()) in err


def test_cli_verify_missing_artifacts_dir(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)

    exit_code = main(["verify", str(repo_root)])

    assert exit_code == 2
    assert "Artifacts directory does not exist" in capsys.readouterr().err


def test_cli_verify_detects_tampering(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    assert main(["generate", str(repo_root)]) == 0
    assert main(["verify", str(repo_root)]) == 0

    tampered = repo_root / "out" / "builtins" / "kotlin" / "Any.kotlin_class"
    tampered.write_bytes(b"")

    exit_code = main(["verify", str(repo_root)])

    assert exit_code == 1
    assert "mismatches: " in capsys.readouterr().err


@pytest.mark.parametrize("target", [".", "..", "src", "src/kotlin/.."])
def test_cli_generate_refuses_out_dir_over_inputs(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], target: str
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    before = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))

    exit_code = main(["generate", str(repo_root), "--out-dir", str(repo_root / target)])

    assert exit_code == 1
    assert "would delete" in capsys.readouterr().err
    assert sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*")) == before
