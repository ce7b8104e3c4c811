"""Value types produced by the repository backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class CommitRef:
    """Immutable view of one commit in the repository graph."""

    hexsha: str
    parents: Tuple[str, ...]
    timestamp: datetime
    author: str = ""
    message: str = ""

    @property
    def short_sha(self) -> str:
        return self.hexsha[:8]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


class ChangeType(str, Enum):
    """Kind of change a :class:`DiffEntry` describes."""

    ADD = "A"
    DELETE = "D"
    MODIFY = "M"
    RENAME = "R"
    COPY = "C"
    TYPE_CHANGE = "T"

    @classmethod
    def from_git(cls, code: Optional[str]) -> "ChangeType":
        """Map a git raw-diff status letter onto a change type."""
        if not code:
            return cls.MODIFY
        try:
            return cls(code[0])
        except ValueError:
            # Unmerged or unknown entries are reported as modifications.
            return cls.MODIFY


@dataclass(frozen=True, slots=True)
class DiffEntry:
    """A single path-level change between two trees."""

    change_type: ChangeType
    old_path: Optional[str]
    new_path: Optional[str]
    score: Optional[int] = None

    @property
    def is_rename_or_copy(self) -> bool:
        return self.change_type in (ChangeType.RENAME, ChangeType.COPY)


@dataclass(frozen=True, slots=True)
class RenameDetection:
    """Parameters handed to git's similarity-based rename detector.

    ``threshold`` is the minimum similarity percentage, ``detect_copies``
    enables copy detection on top of rename detection.
    """

    threshold: int = 50
    detect_copies: bool = True

    def diff_options(self) -> dict:
        """Return keyword options understood by ``Diffable.diff``."""
        options = {"find_renames": f"{self.threshold}%"}
        if self.detect_copies:
            options["find_copies"] = f"{self.threshold}%"
            # Also consider files left unmodified by the commit as copy sources.
            options["find_copies_harder"] = True
        return options
