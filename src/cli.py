"""Command-line interface for builtins-serializer."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from contract.validation import validate_artifacts
from rules.config import ConfigError, load_config, resolve_output_dir
from scan.descriptors import DescriptorLoadError
from serialization.errors import SerializationError
from serialization.write import generate_builtins
from verify.verify import verify_determinism


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="builtins-serializer")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate", help="Serialize built-ins descriptors"
    )
    _add_common_paths(generate_parser)
    generate_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory, deleted and recreated (default: config output dir)",
    )

    validate_parser = subparsers.add_parser(
        "validate", help="Validate serialized built-ins"
    )
    _add_common_paths(validate_parser)
    validate_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify serialization is reproducible"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    return parser


def _resolve_output_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _resolve_artifacts_dir(root: Path, artifacts_dir: str | None) -> Path:
    if artifacts_dir is None:
        config = load_config(root)
        return resolve_output_dir(root, config.output_dir)
    return Path(artifacts_dir).expanduser().resolve()


def _report_completion(total_bytes: int, total_files: int) -> None:
    sys.stdout.write(f"Total bytes written: {total_bytes} to {total_files} files\n")


def _handle_generate(root: Path, out_dir: str | None) -> int:
    resolved_out_dir = _resolve_output_dir(out_dir)
    try:
        generate_builtins(
            root=root,
            out_dir=resolved_out_dir,
            on_complete=_report_completion,
        )
    except (ConfigError, DescriptorLoadError, SerializationError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    return 0


def _handle_validate(root: Path, artifacts_dir: str | None) -> int:
    try:
        config = load_config(root)
        resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    result = validate_artifacts(resolved_artifacts_dir, version=config.version)
    for warning in result.warnings:
        sys.stderr.write(f"{warning.location()}: warning: {warning.message}\n")
    if result.errors:
        for error in result.errors:
            sys.stderr.write(f"{error.location()}: {error.message}\n")
        return 1
    return 0


def _handle_verify(root: Path, artifacts_dir: str | None) -> int:
    try:
        resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    try:
        result = verify_determinism(root=root, artifacts_dir=resolved_artifacts_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"artifacts-dir: {resolved_artifacts_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    except (ConfigError, DescriptorLoadError, SerializationError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    root = Path(args.root).expanduser().resolve()

    if args.command == "generate":
        return _handle_generate(root, args.out_dir)

    if args.command == "validate":
        return _handle_validate(root, args.artifacts_dir)

    if args.command == "verify":
        return _handle_verify(root, args.artifacts_dir)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
