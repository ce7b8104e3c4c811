"""GitPython-backed access to commits, tree diffs and blobs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Protocol

from git import Commit, Repo
from git.exc import BadName, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..errors import BackendUnavailable, PathNotInTree
from .models import ChangeType, CommitRef, DiffEntry, RenameDetection

if TYPE_CHECKING:
    from ..config import LineageConfig

logger = logging.getLogger(__name__)

_QUERY_ERRORS = (GitCommandError, BadName, ValueError)


class RepositoryBackend(Protocol):
    """Read-only repository operations the walker and materializer rely on."""

    def log(self, path: str, exclude_merges: bool = True) -> List[CommitRef]:
        ...

    def ancestors(self, commit: CommitRef, exclude_merges: bool = True) -> Iterator[CommitRef]:
        ...

    def tree_diff(self, older: CommitRef, newer: CommitRef) -> List[DiffEntry]:
        ...

    def read_blob(self, commit: CommitRef, path: str) -> bytes:
        ...


class GitBackend:
    """Wrapper around gitpython exposing the :class:`RepositoryBackend` calls."""

    def __init__(self, repo: Repo, rename_detection: Optional[RenameDetection] = None):
        self.repo = repo
        self.rename_detection = rename_detection or RenameDetection()
        self._commits: Dict[str, Commit] = {}

    @classmethod
    def open_local(
        cls, repo_path: Path, rename_detection: Optional[RenameDetection] = None
    ) -> "GitBackend":
        """Open an existing repository, searching parent directories for ``.git``."""

        try:
            repo = Repo(Path(repo_path).resolve(), search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise BackendUnavailable(f"Not a valid git repository: {repo_path}") from exc
        return cls(repo, rename_detection)

    @classmethod
    def clone(
        cls,
        uri: str,
        directory: Path,
        rename_detection: Optional[RenameDetection] = None,
    ) -> "GitBackend":
        """Clone ``uri`` (with submodules) into ``directory`` and open it."""

        logger.info("Cloning %s into %s", uri, directory)
        try:
            repo = Repo.clone_from(uri, directory, multi_options=["--recurse-submodules"])
        except GitCommandError as exc:
            raise BackendUnavailable(f"Could not clone {uri}: {exc}") from exc
        return cls(repo, rename_detection)

    @property
    def working_dir(self) -> Optional[Path]:
        return Path(self.repo.working_dir) if self.repo.working_dir else None

    def log(self, path: str, exclude_merges: bool = True) -> List[CommitRef]:
        """Return the commits touching ``path`` reachable from HEAD, newest first."""

        if not self.repo.head.is_valid():
            # Empty repository, nothing has ever been committed.
            return []
        return list(self._iter_commits("HEAD", path, exclude_merges))

    def ancestors(self, commit: CommitRef, exclude_merges: bool = True) -> Iterator[CommitRef]:
        """Yield ``commit`` and all of its ancestors, newest first."""

        return self._iter_commits(commit.hexsha, None, exclude_merges)

    def tree_diff(self, older: CommitRef, newer: CommitRef) -> List[DiffEntry]:
        """Compare two trees recursively with rename and copy detection."""

        try:
            diffs = self._commit(older).diff(
                self._commit(newer), **self.rename_detection.diff_options()
            )
        except _QUERY_ERRORS as exc:
            raise BackendUnavailable(
                f"Could not diff {older.short_sha}..{newer.short_sha}: {exc}"
            ) from exc

        entries: List[DiffEntry] = []
        for diff in diffs:
            change_type = ChangeType.from_git(diff.change_type)
            old_path = diff.rename_from or diff.a_path
            new_path = diff.rename_to or diff.b_path
            if change_type is ChangeType.ADD:
                old_path = None
            elif change_type is ChangeType.DELETE:
                new_path = None
            entries.append(
                DiffEntry(
                    change_type=change_type,
                    old_path=old_path,
                    new_path=new_path,
                    score=getattr(diff, "score", None),
                )
            )
        return entries

    def read_blob(self, commit: CommitRef, path: str) -> bytes:
        """Return the bytes stored at ``path`` in the tree of ``commit``."""

        tree = self._commit(commit).tree
        try:
            item = tree / path
        except KeyError as exc:
            raise PathNotInTree(commit, path) from exc
        if item.type != "blob":
            raise PathNotInTree(commit, path)
        return item.data_stream.read()

    def _commit(self, ref: CommitRef) -> Commit:
        commit = self._commits.get(ref.hexsha)
        if commit is None:
            try:
                commit = self.repo.commit(ref.hexsha)
            except _QUERY_ERRORS as exc:
                raise BackendUnavailable(f"Unknown commit {ref.hexsha}") from exc
            self._commits[ref.hexsha] = commit
        return commit

    def _iter_commits(
        self, rev: str, path: Optional[str], exclude_merges: bool
    ) -> Iterator[CommitRef]:
        kwargs = {}
        if exclude_merges:
            kwargs["no_merges"] = True
        try:
            for commit in self.repo.iter_commits(rev, paths=path or "", **kwargs):
                self._commits.setdefault(commit.hexsha, commit)
                yield _to_ref(commit)
        except _QUERY_ERRORS as exc:
            raise BackendUnavailable(f"Could not read history of {rev}: {exc}") from exc


def _to_ref(commit: Commit) -> CommitRef:
    return CommitRef(
        hexsha=commit.hexsha,
        parents=tuple(parent.hexsha for parent in commit.parents),
        timestamp=commit.committed_datetime,
        author=str(commit.author),
        message=commit.message.strip() if isinstance(commit.message, str) else "",
    )


def is_remote_location(location: str) -> bool:
    """Return True for clone URLs such as ``https://...`` or ``git@host:repo``."""

    return "://" in location or (location.startswith("git@") and ":" in location)


def open_repository(location: str, config: "LineageConfig") -> GitBackend:
    """Open a local repository, or clone a remote one into the clone directory.

    A previously cloned copy of the same URL is reused instead of cloning
    again.
    """

    detection = config.rename_detection()
    if not is_remote_location(location):
        return GitBackend.open_local(Path(location).expanduser(), detection)

    name = location.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    target = config.resolved_clone_dir() / (name or "cloned-repo")
    if (target / ".git").exists():
        logger.info("Reusing existing clone at %s", target)
        return GitBackend.open_local(target, detection)
    return GitBackend.clone(location, target, detection)
