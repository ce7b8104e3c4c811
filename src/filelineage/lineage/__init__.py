"""File lineage walking and snapshot materialization."""

from .materializer import materialize
from .models import Lineage, LineageEntry, MaterializationResult, Snapshot
from .staging import StagingArea
from .walker import find_renamed_path, paths_match, walk

__all__ = [
    "Lineage",
    "LineageEntry",
    "MaterializationResult",
    "Snapshot",
    "StagingArea",
    "find_renamed_path",
    "materialize",
    "paths_match",
    "walk",
]
