"""Command line utilities for following a file through its git history."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from .config import LineageConfig, load_config
from .diff import apply_patch, diff_lines, unified_diff
from .errors import BackendUnavailable, PatchConflict, StagingConflict
from .git.backend import open_repository
from .lineage import StagingArea, materialize, walk


def _resolve_config(args: argparse.Namespace) -> LineageConfig:
    config = load_config(args.config) if args.config is not None else LineageConfig()
    if getattr(args, "out", None) is not None:
        config.staging_dir = args.out
    return config


def _staging_area(config: LineageConfig) -> StagingArea:
    return StagingArea(
        config.resolved_staging_dir(),
        prefix=config.version_prefix,
        suffix=config.version_suffix,
    )


def _walk(args: argparse.Namespace, config: LineageConfig):
    backend = open_repository(args.repo, config)
    lineage = walk(
        backend,
        args.path,
        path_match=config.path_match,
        exclude_merges=config.exclude_merges,
    )
    if lineage.error is not None:
        print(f"Warning: history incomplete: {lineage.error}", file=sys.stderr)
    return backend, lineage


def _history(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    _, lineage = _walk(args, config)
    if not len(lineage):
        print(f"No commits found for {args.path}")
        return 0

    print(f"History of {args.path} ({len(lineage)} commits):")
    for entry in lineage:
        commit = entry.commit
        print(f"  {commit.short_sha}  {commit.timestamp:%Y-%m-%d %H:%M}  {entry.path}")
    if len(lineage.paths) > 1:
        print(f"Names: {' <- '.join(lineage.paths)}")
    return 0


def _materialize(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    backend, lineage = _walk(args, config)
    staging = _staging_area(config)
    try:
        staging.prepare(clean=args.clean)
        result = materialize(backend, lineage, staging=staging)
    except StagingConflict as e:
        print(f"Error: {e}")
        return 1

    print(f"Staged {len(result)} versions into {staging.directory}")
    for snapshot in result.snapshots:
        if snapshot.commit is None:
            print(f"  {snapshot.staged_path.name:>8}  (empty)")
        else:
            print(
                f"  {snapshot.staged_path.name:>8}  {snapshot.commit.short_sha}  {snapshot.path}"
            )
    for index, error in sorted(result.missing.items()):
        print(f"  Missing version {index}: {error}")
    return 0 if result.ok else 1


def _diff(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    staging = _staging_area(config)
    left = staging.read_lines(args.left)
    right = staging.read_lines(args.right)

    if args.unified:
        for line in unified_diff(
            left,
            right,
            fromfile=staging.path_for(args.left).name,
            tofile=staging.path_for(args.right).name,
        ):
            print(line)
    else:
        for delta in diff_lines(left, right):
            print(delta)
    return 0


def _patch(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    staging = _staging_area(config)
    base = staging.read_lines(args.base)
    patch_lines = args.patch_file.read_text(encoding="utf-8").splitlines()
    try:
        result = apply_patch(base, patch_lines)
    except PatchConflict as e:
        print(f"Error: patch does not apply: {e}")
        return 1
    for line in result:
        print(line)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML or JSON file overriding the default settings",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    history_parser = subparsers.add_parser("history", help="List the commits of a file")
    history_parser.add_argument("repo", help="Path or clone URL of the git repository")
    history_parser.add_argument("path", help="File path relative to the repository root")
    history_parser.set_defaults(func=_history)

    materialize_parser = subparsers.add_parser(
        "materialize", help="Write every version of a file to the staging directory"
    )
    materialize_parser.add_argument("repo", help="Path or clone URL of the git repository")
    materialize_parser.add_argument("path", help="File path relative to the repository root")
    materialize_parser.add_argument("--out", type=Path, help="Staging directory")
    materialize_parser.add_argument(
        "--clean",
        action="store_true",
        help="Delete earlier output in the staging directory first",
    )
    materialize_parser.set_defaults(func=_materialize)

    diff_parser = subparsers.add_parser("diff", help="Compare two staged versions")
    diff_parser.add_argument("left", type=int, help="Older version index")
    diff_parser.add_argument("right", type=int, help="Newer version index")
    diff_parser.add_argument("--out", type=Path, help="Staging directory")
    diff_parser.add_argument(
        "--unified", action="store_true", help="Print a unified diff instead of deltas"
    )
    diff_parser.set_defaults(func=_diff)

    patch_parser = subparsers.add_parser(
        "patch", help="Apply a unified diff file to a staged version"
    )
    patch_parser.add_argument("base", type=int, help="Version index to patch")
    patch_parser.add_argument("patch_file", type=Path, help="Unified diff document")
    patch_parser.add_argument("--out", type=Path, help="Staging directory")
    patch_parser.set_defaults(func=_patch)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except BackendUnavailable as e:
        print(f"Error: {e}")
        return 1
    except FileNotFoundError as e:
        print(f"Error: {e.filename} does not exist")
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
