"""Numbered version files written to a caller-chosen directory."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import List

from ..errors import StagingConflict

logger = logging.getLogger(__name__)


class StagingArea:
    """Directory holding ``ver0``, ``ver1`` ... one file per snapshot index."""

    def __init__(self, directory: Path, prefix: str = "ver", suffix: str = ""):
        self.directory = Path(directory)
        self.prefix = prefix
        self.suffix = suffix
        self._pattern = re.compile(rf"^{re.escape(prefix)}(\d+){re.escape(suffix)}$")

    def path_for(self, index: int) -> Path:
        if index < 0:
            raise ValueError(f"Version index must be non-negative, got {index}")
        return self.directory / f"{self.prefix}{index}{self.suffix}"

    def is_empty(self) -> bool:
        return not self.directory.exists() or not any(self.directory.iterdir())

    def clear(self) -> None:
        """Remove everything inside the staging directory."""

        if not self.directory.exists():
            return
        for child in self.directory.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
        logger.debug("Cleared staging area %s", self.directory)

    def prepare(self, clean: bool = False) -> None:
        """Make sure the directory exists and holds no earlier output.

        With ``clean`` leftovers are deleted, otherwise a non-empty directory
        raises :class:`StagingConflict`.
        """

        if not self.is_empty():
            if not clean:
                raise StagingConflict(self.directory)
            self.clear()
        self.directory.mkdir(parents=True, exist_ok=True)

    def write(self, index: int, data: bytes) -> Path:
        """Create the file for ``index``; it must not exist yet."""

        target = self.path_for(index)
        try:
            with open(target, "xb") as handle:
                handle.write(data)
        except FileExistsError as exc:
            raise StagingConflict(target) from exc
        return target

    def read_bytes(self, index: int) -> bytes:
        return self.path_for(index).read_bytes()

    def read_lines(self, index: int, encoding: str = "utf-8") -> List[str]:
        """Return the staged version's lines without terminators."""
        return self.read_bytes(index).decode(encoding, errors="replace").splitlines()

    def indices(self) -> List[int]:
        """Sorted indices of the version files currently staged."""

        if not self.directory.exists():
            return []
        found = []
        for child in self.directory.iterdir():
            match = self._pattern.match(child.name)
            if match and child.is_file():
                found.append(int(match.group(1)))
        return sorted(found)
