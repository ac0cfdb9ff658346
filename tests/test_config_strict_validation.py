from __future__ import annotations

from pathlib import Path

import pytest

from rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    check_output_dir,
    load_config,
    resolve_output_dir,
    resolve_source_dirs,
)


def _write_config(repo_root: Path, toml_content: str) -> None:
    (repo_root / CONFIG_FILENAME).write_text(toml_content, encoding="utf-8")


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "sources = [")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
sources = ["core", "extra"]
exclude = ["**/draft_*.json"]
version = [1, 0, 7]
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.sources == ["core", "extra"]
    assert config.exclude == ["**/draft_*.json"]
    assert config.version == [1, 0, 7]


@pytest.mark.parametrize(
    "version",
    ["[]", "[true, 0]", '["1", "0"]', "[1, -1]", "[2147483648]", '"1.0.0"'],
)
def test_bad_version_rejected(tmp_path: Path, version: str) -> None:
    _write_config(tmp_path, f"version = {version}")

    with pytest.raises(ConfigError, match="version"):
        load_config(tmp_path)


def test_empty_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.output_dir == "out/builtins"
    assert config.sources == ["."]
    assert config.include == []
    assert config.exclude == []
    assert config.version == [1, 0, 0]


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.output_dir == "out/builtins"
    assert config.nested_gitignore is False


def test_output_dir_resolves_inside_root(tmp_path: Path) -> None:
    resolved = resolve_output_dir(tmp_path, "out/builtins")

    assert resolved == (tmp_path / "out" / "builtins").resolve()


@pytest.mark.parametrize("output_dir", ["../elsewhere", "/tmp/builtins", "~/builtins", ""])
def test_output_dir_outside_root_rejected(tmp_path: Path, output_dir: str) -> None:
    with pytest.raises(ConfigError, match="output_dir"):
        resolve_output_dir(tmp_path, output_dir)


def test_output_dir_equal_to_root_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="must not be the project root"):
        resolve_output_dir(tmp_path, ".")


def test_source_dirs_escaping_root_rejected(tmp_path: Path) -> None:
    assert resolve_source_dirs(tmp_path, ["."]) == [tmp_path.resolve()]

    with pytest.raises(ConfigError, match="escapes the project root"):
        resolve_source_dirs(tmp_path, ["src", "../outside"])


def test_check_output_dir_accepts_separate_directory(tmp_path: Path) -> None:
    sources = [tmp_path / "src"]

    assert check_output_dir(tmp_path, tmp_path / "out" / "builtins", sources) == (
        tmp_path / "out" / "builtins"
    ).resolve()
    assert check_output_dir(tmp_path, tmp_path.parent / "elsewhere", sources) == (
        tmp_path.parent / "elsewhere"
    ).resolve()


@pytest.mark.parametrize(
    ("relative", "label"),
    [
        (".", "project root"),
        ("..", "project root"),
        ("src", "source directory"),
        ("src/../src", "source directory"),
    ],
)
def test_check_output_dir_rejects_inputs(tmp_path: Path, relative: str, label: str) -> None:
    sources = [tmp_path / "src" / "kotlin"]

    with pytest.raises(ConfigError, match=f"would delete the {label}"):
        check_output_dir(tmp_path, tmp_path / relative, sources)
