"""Output file handling and run counters."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from typing import TYPE_CHECKING

from serialization.errors import ArtifactWriteError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Counters:
    total_bytes: int = 0
    total_files: int = 0


class ArtifactWriter:
    """Writes artifacts below one destination directory and counts them."""

    def __init__(self, dest_dir: Path) -> None:
        self.dest_dir = dest_dir
        self.counters = Counters()

    def prepare(self) -> bool:
        """Delete and recreate the destination directory.

        Failures are logged and reported through the return value; the write
        phase still runs and surfaces its own errors.
        """
        if self.dest_dir.exists():
            try:
                shutil.rmtree(self.dest_dir)
            except OSError as exc:
                logger.warning("Could not delete %s: %s", self.dest_dir, exc)
        try:
            self.dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not make directories: %s (%s)", self.dest_dir, exc)
            return False
        return True

    def write(self, relative_path: str, data: bytes) -> Path:
        path = self.dest_dir / relative_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as handle:
                handle.write(data)
        except OSError as exc:
            msg = f"Failed to write {path}: {exc}"
            raise ArtifactWriteError(msg) from exc
        self.counters.total_bytes += len(data)
        self.counters.total_files += 1
        logger.debug("Wrote %s (%d bytes)", relative_path, len(data))
        return path


__all__ = ["ArtifactWriter", "Counters"]
