"""Entry classification."""

import os
import stat
from pathlib import Path

from .errors import CopyError
from .models import Entry, EntryKind, ErrorKind, HardLinkIdentity


def stat_entry(path: Path) -> tuple[EntryKind, os.stat_result]:
    """
    Determine the kind of the object at path without following links.

    Symbolic links are checked before anything else, so a link is never
    mistaken for a hard-linked file. A regular file counts as hard-linked
    when the filesystem reports more than one link to it; the other
    aliases may live outside the tree being synced.

    Raises:
        CopyError: NOT_FOUND if the path vanished, IO_FAILURE otherwise.
    """
    try:
        st = os.lstat(path)
    except FileNotFoundError as e:
        raise CopyError(path, ErrorKind.NOT_FOUND, e) from e
    except OSError as e:
        raise CopyError(path, ErrorKind.IO_FAILURE, e) from e

    mode = st.st_mode
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK, st
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY, st
    if stat.S_ISREG(mode):
        if st.st_nlink > 1:
            return EntryKind.HARDLINK, st
        return EntryKind.REGULAR, st
    return EntryKind.SPECIAL, st


def classify(path: Path) -> EntryKind:
    """Return the EntryKind of path."""
    kind, _ = stat_entry(path)
    return kind


def hard_link_identity(st: os.stat_result) -> HardLinkIdentity:
    return HardLinkIdentity.from_stat(st)


def make_entry(source: Path, destination: Path) -> Entry:
    """Classify source and pair it with its destination path."""
    kind, st = stat_entry(source)
    identity = hard_link_identity(st) if kind is EntryKind.HARDLINK else None
    return Entry(source=source, destination=destination, kind=kind, identity=identity)
