"""Line diff and patch helpers for comparing snapshots."""

from .engine import Delta, DeltaKind, apply_deltas, apply_patch, diff_lines, unified_diff

__all__ = [
    "Delta",
    "DeltaKind",
    "apply_deltas",
    "apply_patch",
    "diff_lines",
    "unified_diff",
]
