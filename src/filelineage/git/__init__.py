"""Git integration for reading commits, tree diffs and blobs."""

from .backend import GitBackend, RepositoryBackend, is_remote_location, open_repository
from .models import ChangeType, CommitRef, DiffEntry, RenameDetection

__all__ = [
    "ChangeType",
    "CommitRef",
    "DiffEntry",
    "GitBackend",
    "RenameDetection",
    "RepositoryBackend",
    "is_remote_location",
    "open_repository",
]
