"""Runtime configuration for walking and staging file history."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

import yaml

from .git.models import RenameDetection

PATH_MATCH_MODES = ("exact", "suffix")


@dataclass(slots=True)
class LineageConfig:
    """Settings shared by the CLI and library entry points.

    Attributes
    ----------
    base_dir:
        Root directory for runtime artefacts such as staged versions and
        cloned repositories. Defaults to ``~/.filelineage``.
    staging_dir:
        Directory receiving the numbered version files. Derived from
        ``base_dir`` when not provided explicitly.
    clone_dir:
        Directory remote repositories are cloned into.
    rename_threshold:
        Minimum similarity percentage git must report before a delete/add
        pair counts as a rename or copy.
    detect_copies:
        Whether copies are followed in addition to renames.
    exclude_merges:
        Skip merge commits in every history query.
    path_match:
        ``"exact"`` compares full paths when resolving renames, ``"suffix"``
        also accepts paths ending in ``/<tracked path>``.
    version_prefix, version_suffix:
        Naming of staged files, ``ver0``, ``ver1`` and so on by default.
    """

    base_dir: Path = field(default_factory=lambda: Path.home() / ".filelineage")
    staging_dir: Path | None = None
    clone_dir: Path | None = None
    rename_threshold: int = 50
    detect_copies: bool = True
    exclude_merges: bool = True
    path_match: str = "exact"
    version_prefix: str = "ver"
    version_suffix: str = ""

    def __post_init__(self) -> None:
        if self.path_match not in PATH_MATCH_MODES:
            raise ValueError(
                f"path_match must be one of {PATH_MATCH_MODES}, got {self.path_match!r}"
            )
        if not 0 <= self.rename_threshold <= 100:
            raise ValueError("rename_threshold must be between 0 and 100")

    def resolved_staging_dir(self) -> Path:
        """Return the staging directory, creating it when missing."""

        target = self.staging_dir or self.base_dir / "staging"
        target.mkdir(parents=True, exist_ok=True)
        return target.resolve()

    def resolved_clone_dir(self) -> Path:
        """Return the parent directory for cloned repositories."""
        target = self.clone_dir or self.base_dir / "clones"
        target.mkdir(parents=True, exist_ok=True)
        return target.resolve()

    def rename_detection(self) -> RenameDetection:
        return RenameDetection(
            threshold=self.rename_threshold,
            detect_copies=self.detect_copies,
        )


def _coerce(name: str, value: Any) -> Any:
    if name in ("base_dir", "staging_dir", "clone_dir") and value is not None:
        return Path(value).expanduser()
    return value


def load_config(path: Path) -> LineageConfig:
    """Build a :class:`LineageConfig` from a YAML or JSON override file.

    Parameters
    ----------
    path:
        File holding a mapping of field names to values. ``.json`` files
        are read with :mod:`json`, everything else with PyYAML.

    Returns
    -------
    Configuration with the overrides applied on top of the defaults.
    """

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")

    known = {f.name for f in fields(LineageConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")

    overrides: Dict[str, Any] = {key: _coerce(key, value) for key, value in data.items()}
    return LineageConfig(**overrides)

