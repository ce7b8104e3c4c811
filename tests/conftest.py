from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from git import Commit, Repo

from filelineage.git import GitBackend

BASE_TIMESTAMP = 1_600_000_000


class RepoBuilder:
    """Builds a throwaway repository one commit at a time.

    Every commit gets a timestamp one minute after the previous one so the
    commit order is unambiguous.
    """

    def __init__(self, root: Path):
        self.root = root
        self.repo = Repo.init(root)
        with self.repo.config_writer() as writer:
            writer.set_value("user", "name", "Test User")
            writer.set_value("user", "email", "test@example.com")
        self._tick = 0

    def _commit(
        self, message: str, parents: Optional[List[Commit]] = None, head: bool = True
    ) -> Commit:
        self._tick += 1
        date = f"{BASE_TIMESTAMP + self._tick * 60} +0000"
        return self.repo.index.commit(
            message, parent_commits=parents, head=head, author_date=date, commit_date=date
        )

    def write(
        self,
        path: str,
        content: str,
        message: Optional[str] = None,
        *,
        parents: Optional[List[Commit]] = None,
        head: bool = True,
    ) -> Commit:
        """Commit ``content`` at ``path``.

        ``parents`` overrides the parent commits, so passing two of them
        records a merge. With ``head=False`` the branch is left where it was.
        """
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        self.repo.index.add([path])
        return self._commit(message or f"Update {path}", parents, head)

    def write_many(self, files: Dict[str, str], message: str) -> Commit:
        for path, content in files.items():
            target = self.root / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            self.repo.index.add([path])
        return self._commit(message)

    def rename(self, old: str, new: str, content: Optional[str] = None) -> Commit:
        source = self.root / old
        target = self.root / new
        target.parent.mkdir(parents=True, exist_ok=True)
        source.rename(target)
        if content is not None:
            target.write_text(content, encoding="utf-8")
        self.repo.index.remove([old], working_tree=False)
        self.repo.index.add([new])
        return self._commit(f"Rename {old} to {new}")

    def delete(self, path: str) -> Commit:
        (self.root / path).unlink()
        self.repo.index.remove([path], working_tree=False)
        return self._commit(f"Delete {path}")

    def copy(self, old: str, new: str) -> Commit:
        target = self.root / new
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.root / old, target)
        self.repo.index.add([new])
        return self._commit(f"Copy {old} to {new}")

    def backend(self, **kwargs) -> GitBackend:
        return GitBackend(self.repo, **kwargs)


def numbered(prefix: str, count: int = 8, changed: Optional[Dict[int, str]] = None) -> str:
    """Return ``count`` lines of text, replacing the ones listed in ``changed``."""
    lines: List[str] = []
    for number in range(1, count + 1):
        lines.append((changed or {}).get(number, f"{prefix} line {number}"))
    return "\n".join(lines) + "\n"


@pytest.fixture
def repo_builder(tmp_path) -> RepoBuilder:
    return RepoBuilder(tmp_path / "repo")


@pytest.fixture
def three_commit_repo(repo_builder):
    """``a.txt`` created, modified, and modified again."""
    commits = [
        repo_builder.write("a.txt", "first\n", "Create a.txt"),
        repo_builder.write("a.txt", "first\nsecond\n", "Extend a.txt"),
        repo_builder.write("a.txt", "first\nsecond\nthird\n", "Extend a.txt again"),
    ]
    return repo_builder, commits


@pytest.fixture
def rename_chain_repo(repo_builder):
    """``A.txt`` renamed to ``B.txt`` at the second commit and to ``C.txt`` at the fifth."""
    commits = [
        repo_builder.write("A.txt", numbered("alpha"), "Create A"),
        repo_builder.rename("A.txt", "B.txt"),
        repo_builder.write("B.txt", numbered("alpha", changed={2: "beta"}), "Edit B"),
        repo_builder.write("B.txt", numbered("alpha", changed={2: "beta", 5: "gamma"}), "Edit B again"),
        repo_builder.rename("B.txt", "C.txt"),
    ]
    return repo_builder, commits


@pytest.fixture
def merge_repo(repo_builder):
    """``a.txt`` edited on a side branch and on the main line, then merged by hand."""
    base = repo_builder.write("a.txt", "base\n", "Create a.txt")
    side = repo_builder.write("a.txt", "side\n", "Edit a.txt on a branch", parents=[base], head=False)
    main = repo_builder.write("a.txt", "main\n", "Edit a.txt on main")
    merge = repo_builder.write("a.txt", "main\nside\n", "Merge branch", parents=[main, side])
    return repo_builder, {"base": base, "side": side, "main": main, "merge": merge}
