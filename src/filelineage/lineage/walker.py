"""Rename-aware walk over the history of a single file.

The walk repeatedly asks the backend for the commits touching the current
name of the file. Once a name's history is exhausted, the oldest commit
found under that name is compared against each of its ancestors until git's
rename detector reports where the file came from, and the walk continues
under the old name.
"""

from __future__ import annotations

import logging
from typing import Optional, Set

from ..errors import BackendUnavailable
from ..git.backend import RepositoryBackend
from ..git.models import CommitRef
from .models import Lineage, LineageEntry

logger = logging.getLogger(__name__)


def paths_match(candidate: Optional[str], tracked: str, mode: str = "exact") -> bool:
    """Return True when ``candidate`` names the tracked file.

    ``exact`` requires equal paths. ``suffix`` also accepts a candidate whose
    trailing path components equal ``tracked``, so ``src/a.txt`` matches
    ``a.txt`` but ``src/ba.txt`` does not.
    """

    if candidate is None:
        return False
    candidate = candidate.strip("/")
    tracked = tracked.strip("/")
    if candidate == tracked:
        return True
    if mode == "suffix":
        return candidate.endswith("/" + tracked)
    return False


def find_renamed_path(
    backend: RepositoryBackend,
    boundary: CommitRef,
    tracked_path: str,
    *,
    path_match: str = "exact",
    exclude_merges: bool = True,
) -> Optional[str]:
    """Return the name ``tracked_path`` had before it was renamed or copied.

    Parameters
    ----------
    backend:
        Repository to query.
    boundary:
        Oldest known commit in which the file carries ``tracked_path``.
    tracked_path:
        Current name of the file.

    Returns
    -------
    The predecessor path, or ``None`` when no ancestor of ``boundary``
    explains the file as a rename or copy.
    """

    for ancestor in backend.ancestors(boundary, exclude_merges=exclude_merges):
        if ancestor.hexsha == boundary.hexsha:
            continue
        for entry in backend.tree_diff(ancestor, boundary):
            if entry.is_rename_or_copy and paths_match(entry.new_path, tracked_path, path_match):
                logger.debug(
                    "%s %s -> %s between %s and %s (score %s)",
                    entry.change_type.name.lower(),
                    entry.old_path,
                    entry.new_path,
                    ancestor.short_sha,
                    boundary.short_sha,
                    entry.score,
                )
                return entry.old_path
    return None


def walk(
    backend: RepositoryBackend,
    initial_path: str,
    *,
    path_match: str = "exact",
    exclude_merges: bool = True,
    strict: bool = False,
) -> Lineage:
    """Collect every commit that touched ``initial_path`` under any of its names.

    The result is ordered most recent first and never repeats a commit. A
    backend failure stops the walk: with ``strict`` it is raised with the
    partial lineage attached, otherwise it is stored on ``Lineage.error``.
    """

    lineage = Lineage()
    visited: Set[str] = set()
    current_path = initial_path

    try:
        while True:
            boundary: Optional[CommitRef] = None
            log = backend.log(current_path, exclude_merges=exclude_merges)
            logger.debug("%d commits touch %s", len(log), current_path)
            for commit in log:
                # Already recorded under a newer name, usually the rename commit.
                if commit.hexsha in visited:
                    continue
                visited.add(commit.hexsha)
                lineage.entries.append(LineageEntry(commit, current_path))
                boundary = commit

            if boundary is None:
                break

            previous_path = find_renamed_path(
                backend,
                boundary,
                current_path,
                path_match=path_match,
                exclude_merges=exclude_merges,
            )
            if previous_path is None:
                break
            logger.info(
                "Following %s back to %s at %s", current_path, previous_path, boundary.short_sha
            )
            current_path = previous_path
    except BackendUnavailable as exc:
        logger.warning(
            "History walk for %s stopped after %d commits: %s", initial_path, len(lineage), exc
        )
        lineage.error = exc
        if strict:
            exc.partial_lineage = lineage
            raise

    return lineage
