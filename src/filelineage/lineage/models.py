"""Lineage and snapshot records derived from repository history."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..errors import BackendUnavailable, InconsistentLineage
from ..git.models import CommitRef


@dataclass(frozen=True, slots=True)
class LineageEntry:
    """A commit paired with the name the tracked file had at that commit."""

    commit: CommitRef
    path: str


@dataclass(slots=True)
class Lineage:
    """Ordered history of one file, most recent commit first.

    ``error`` is set when the backend failed part way through the walk; the
    entries collected up to that point are still valid.
    """

    entries: List[LineageEntry] = field(default_factory=list)
    error: Optional[BackendUnavailable] = None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[LineageEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> LineageEntry:
        return self.entries[index]

    @property
    def complete(self) -> bool:
        return self.error is None

    @property
    def commit_ids(self) -> List[str]:
        return [entry.commit.hexsha for entry in self.entries]

    @property
    def paths(self) -> List[str]:
        """Distinct file names in the order the walk discovered them."""
        seen: List[str] = []
        for entry in self.entries:
            if entry.path not in seen:
                seen.append(entry.path)
        return seen


@dataclass(slots=True)
class Snapshot:
    """Content of the tracked file at one version index.

    Index 0 is the synthetic empty version that precedes the file's
    creation, so ``commit`` and ``path`` are ``None`` there.
    """

    index: int
    content: bytes
    commit: Optional[CommitRef] = None
    path: Optional[str] = None
    staged_path: Optional[Path] = None

    @property
    def is_placeholder(self) -> bool:
        return self.commit is None

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding, errors="replace")

    def lines(self, encoding: str = "utf-8") -> List[str]:
        """Return the content split into lines without terminators."""
        return self.text(encoding).splitlines()


@dataclass(slots=True)
class MaterializationResult:
    """Snapshots produced from a lineage plus the slots that failed."""

    snapshots: List[Snapshot] = field(default_factory=list)
    missing: Dict[int, InconsistentLineage] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.missing

    def __len__(self) -> int:
        return len(self.snapshots)

    def __getitem__(self, index: int) -> Snapshot:
        for snapshot in self.snapshots:
            if snapshot.index == index:
                return snapshot
        raise IndexError(f"No snapshot at index {index}")

    def raise_for_missing(self) -> None:
        """Raise the error of the lowest missing slot, if any."""
        if self.missing:
            raise self.missing[min(self.missing)]

    def by_commit(self) -> Dict[str, Snapshot]:
        """Map commit SHAs to their snapshot, newest commit first."""
        real = [snapshot for snapshot in self.snapshots if snapshot.commit is not None]
        return {
            snapshot.commit.hexsha: snapshot
            for snapshot in sorted(real, key=lambda s: s.index, reverse=True)
        }
