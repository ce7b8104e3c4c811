"""Line diffs between snapshots and unified patch application.

Deltas come from :class:`difflib.SequenceMatcher`; unified patches are
parsed and applied with ``whatthepatch``.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

import whatthepatch
from whatthepatch.exceptions import HunkException

from ..errors import PatchConflict


class DeltaKind(str, Enum):
    CHANGE = "change"
    DELETE = "delete"
    INSERT = "insert"


_OPCODE_KINDS = {
    "replace": DeltaKind.CHANGE,
    "delete": DeltaKind.DELETE,
    "insert": DeltaKind.INSERT,
}


@dataclass(frozen=True, slots=True)
class Delta:
    """One changed region: source lines at ``source_position`` become target lines.

    Positions are zero-based line offsets into the source and target texts.
    """

    kind: DeltaKind
    source_position: int
    source_lines: tuple
    target_position: int
    target_lines: tuple

    def __str__(self) -> str:
        return (
            f"[{self.kind.name}Delta, position: {self.source_position}, "
            f"lines: {list(self.source_lines)} to {list(self.target_lines)}]"
        )


def diff_lines(source: Sequence[str], target: Sequence[str]) -> List[Delta]:
    """Compute the deltas turning ``source`` into ``target``."""

    matcher = difflib.SequenceMatcher(None, list(source), list(target), autojunk=False)
    deltas: List[Delta] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        deltas.append(
            Delta(
                kind=_OPCODE_KINDS[tag],
                source_position=i1,
                source_lines=tuple(source[i1:i2]),
                target_position=j1,
                target_lines=tuple(target[j1:j2]),
            )
        )
    return deltas


def apply_deltas(base: Sequence[str], deltas: Iterable[Delta]) -> List[str]:
    """Apply deltas produced by :func:`diff_lines` to ``base``.

    Raises :class:`PatchConflict` when a delta's source lines are not found
    at its position in ``base``.
    """

    result = list(base)
    # Later positions first so earlier offsets stay valid.
    for delta in sorted(deltas, key=lambda d: d.source_position, reverse=True):
        start = delta.source_position
        end = start + len(delta.source_lines)
        if tuple(result[start:end]) != delta.source_lines:
            raise PatchConflict(
                f"Delta at line {start + 1} does not match the base text"
            )
        result[start:end] = list(delta.target_lines)
    return result


def unified_diff(
    source: Sequence[str],
    target: Sequence[str],
    fromfile: str = "a",
    tofile: str = "b",
    context: int = 3,
) -> List[str]:
    """Return a unified diff document as a list of lines without terminators."""

    return list(
        difflib.unified_diff(
            list(source), list(target), fromfile=fromfile, tofile=tofile, n=context, lineterm=""
        )
    )


def apply_patch(base: Sequence[str], patch_lines: Sequence[str]) -> List[str]:
    """Apply a unified diff document to ``base`` and return the patched lines.

    Every file section of the document is applied in order. An empty
    document leaves ``base`` unchanged.
    """

    result = list(base)
    document = "\n".join(line.rstrip("\r\n") for line in patch_lines)
    try:
        for diff in whatthepatch.parse_patch(document):
            if not diff.changes:
                continue
            result = whatthepatch.apply_diff(diff, result)
    except HunkException as exc:
        raise PatchConflict(str(exc)) from exc
    return result
