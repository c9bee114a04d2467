"""Data models for tree sync."""

import os
from dataclasses import dataclass, asdict, field
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional


class EntryKind(Enum):
    """Kinds of filesystem objects visited during traversal."""
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    REGULAR = "regular"
    SPECIAL = "special"


class ErrorKind(Enum):
    """Reasons a single entry failed to replicate."""
    NOT_FOUND = "not_found"
    IO_FAILURE = "io_failure"
    LINK_FAILURE = "link_failure"
    DEPENDENCY_FAILURE = "dependency_failure"


class SyncStatus(Enum):
    """Overall outcome of one sync run."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class HardLinkFallback(Enum):
    """What to do when a hard link cannot span source and destination."""
    FAIL = "fail"
    COPY = "copy"


class HardLinkIdentity(NamedTuple):
    """The storage object shared by every alias of a hard-linked file."""
    device: int
    inode: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "HardLinkIdentity":
        return cls(st.st_dev, st.st_ino)


@dataclass(frozen=True)
class Entry:
    """A filesystem object and where it goes in the destination tree."""
    source: Path
    destination: Path
    kind: EntryKind
    identity: Optional[HardLinkIdentity] = None

    def child_paths(self, name: str) -> tuple[Path, Path]:
        """Source and destination paths of a child of this directory."""
        return self.source / name, self.destination / name


@dataclass(frozen=True)
class CopyFailure:
    """Record of an entry that failed to replicate."""
    path: str
    kind: ErrorKind
    error: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CopyFailure":
        return cls(path=data["path"], kind=ErrorKind(data["kind"]), error=data["error"])


@dataclass
class SyncResult:
    """Aggregated outcome of syncing one tree."""
    source: str
    destination: str
    directories: int = 0
    files: int = 0
    symlinks: int = 0
    hardlinks: int = 0
    skipped: int = 0
    failures: list[CopyFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def replicated(self) -> int:
        return self.directories + self.files + self.symlinks + self.hardlinks

    @property
    def status(self) -> SyncStatus:
        if not self.failures:
            return SyncStatus.SUCCESS
        # The destination root on its own does not count as a copied entry.
        root = 1 if self.directories else 0
        if self.replicated - root == 0:
            return SyncStatus.FAILED
        return SyncStatus.PARTIAL

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "destination": self.destination,
            "status": self.status.value,
            "directories": self.directories,
            "files": self.files,
            "symlinks": self.symlinks,
            "hardlinks": self.hardlinks,
            "skipped": self.skipped,
            "failures": [f.to_dict() for f in self.failures],
        }
