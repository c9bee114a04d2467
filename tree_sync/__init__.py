"""
Tree Sync - copy a directory tree to another mount path.

Features:
- Files, folders and subfolders copied recursively
- Symbolic links recreated with their exact target
- Hard links recreated as aliases instead of duplicate copies
- A bounded pool of worker threads shared by the whole tree
- Per-entry error reporting with distinct exit codes
"""

from .models import EntryKind, ErrorKind, HardLinkFallback, SyncResult, SyncStatus
from .walker import TreeSync, sync_tree

__version__ = "1.0.0"

__all__ = [
    "EntryKind",
    "ErrorKind",
    "HardLinkFallback",
    "SyncResult",
    "SyncStatus",
    "TreeSync",
    "sync_tree",
]
