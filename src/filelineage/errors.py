"""Exception hierarchy shared by the walker, materializer and diff wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .git.models import CommitRef
    from .lineage.models import Lineage


class FileLineageError(Exception):
    """Base class for every error raised by filelineage."""


class BackendUnavailable(FileLineageError):
    """The repository could not be opened or queried.

    ``partial_lineage`` carries whatever the walker had already validated
    when the backend failed, so callers can still inspect it.
    """

    def __init__(self, message: str, partial_lineage: Optional["Lineage"] = None):
        super().__init__(message)
        self.partial_lineage = partial_lineage


class InconsistentLineage(FileLineageError):
    """A lineage path does not exist in the tree of its commit."""

    def __init__(self, index: int, commit: "CommitRef", path: str):
        super().__init__(
            f"slot {index}: '{path}' not found in tree of commit {commit.short_sha}"
        )
        self.index = index
        self.commit = commit
        self.path = path


class StagingConflict(FileLineageError):
    """A snapshot slot or staged file is already occupied."""

    def __init__(self, target: Union[int, Path, str]):
        super().__init__(
            f"Staging target already holds content: {target}. "
            "Clear the staging area before materializing again."
        )
        self.target = target


class PatchConflict(FileLineageError):
    """A patch or delta does not apply cleanly to its base."""


class PathNotInTree(FileLineageError, LookupError):
    """The backend could not find a blob for a path inside a commit tree."""

    def __init__(self, commit: "CommitRef", path: str):
        super().__init__(f"'{path}' is not a file in commit {commit.short_sha}")
        self.commit = commit
        self.path = path
