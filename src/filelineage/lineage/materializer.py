"""Turn a lineage into indexed content snapshots, oldest first."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..errors import InconsistentLineage, PathNotInTree, StagingConflict
from ..git.backend import RepositoryBackend
from .models import Lineage, MaterializationResult, Snapshot
from .staging import StagingArea

logger = logging.getLogger(__name__)


def _store(
    slots: Dict[int, Snapshot], snapshot: Snapshot, staging: Optional[StagingArea]
) -> None:
    if snapshot.index in slots:
        raise StagingConflict(snapshot.index)
    if staging is not None:
        snapshot.staged_path = staging.write(snapshot.index, snapshot.content)
    slots[snapshot.index] = snapshot


def materialize(
    backend: RepositoryBackend,
    lineage: Lineage,
    *,
    staging: Optional[StagingArea] = None,
) -> MaterializationResult:
    """Fetch the file content for every lineage entry.

    Parameters
    ----------
    backend:
        Repository the lineage was walked from.
    lineage:
        Entries ordered most recent first, as returned by ``walk``.
    staging:
        Optional staging area; each snapshot is also written there as
        ``<prefix><index><suffix>``. Existing files are never overwritten.

    Returns
    -------
    ``len(lineage) + 1`` snapshots on success. Index 0 is always empty, index
    ``len(lineage)`` holds the newest version. Entries whose path is missing
    from their commit are reported in ``missing`` instead.
    """

    slots: Dict[int, Snapshot] = {}
    result = MaterializationResult()

    _store(slots, Snapshot(index=0, content=b""), staging)

    index = len(lineage)
    for entry in lineage:
        try:
            content = backend.read_blob(entry.commit, entry.path)
        except PathNotInTree:
            error = InconsistentLineage(index, entry.commit, entry.path)
            logger.warning("Skipping version %d: %s", index, error)
            result.missing[index] = error
        else:
            _store(
                slots,
                Snapshot(index=index, content=content, commit=entry.commit, path=entry.path),
                staging,
            )
        index -= 1

    result.snapshots = [slots[key] for key in sorted(slots)]
    return result
