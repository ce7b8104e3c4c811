"""filelineage package.

Follows one file through a git repository's history, across renames and
copies, and rebuilds the file's content at every commit that changed it.
"""

__all__ = [
    "cli",
    "config",
    "diff",
    "errors",
    "git",
    "lineage",
]
