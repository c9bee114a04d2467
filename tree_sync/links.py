"""Recreation of symbolic links and hard links at the destination."""

import errno
import logging
import os
import stat
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Optional

from .copier import copy_file
from .errors import CopyError
from .models import Entry, ErrorKind, HardLinkIdentity

logger = logging.getLogger(__name__)


def copy_symlink(entry: Entry) -> bool:
    """
    Recreate a symbolic link with the same target string.

    The target is copied verbatim, never resolved or rewritten, so
    dangling and relative links come out exactly as they went in.

    Returns:
        True if a link was created, False if the destination already existed.
    """
    if os.path.lexists(entry.destination):
        logger.info(f"Symlink already exists at destination: {entry.destination}")
        return False
    try:
        target = os.readlink(entry.source)
    except FileNotFoundError as e:
        raise CopyError(entry.source, ErrorKind.NOT_FOUND, e) from e
    except OSError as e:
        raise CopyError(entry.source, ErrorKind.LINK_FAILURE, e) from e

    logger.debug(f"Linking {entry.destination} -> {target}")
    try:
        os.symlink(target, entry.destination)
    except OSError as e:
        raise CopyError(entry.source, ErrorKind.LINK_FAILURE, e) from e
    return True


class HardLinkTable:
    """
    Destination copies of hard-linked files that could not alias the source.

    When source and destination sit on different filesystems, the first
    alias of each identity is copied into the destination and every later
    alias is hard-linked to that copy, so the destination keeps the same
    sharing as the source.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._copies: dict[HardLinkIdentity, Future] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._copies)

    def register(self, entry: Entry) -> None:
        """Record an alias already present in the destination as the copy to link to."""
        try:
            st = os.lstat(entry.destination)
        except OSError:
            # Removed again since the existence check; nothing to link to.
            return
        if not stat.S_ISREG(st.st_mode):
            return
        with self._lock:
            if entry.identity not in self._copies:
                existing = Future()
                existing.set_result(entry.destination)
                self._copies[entry.identity] = existing

    def replicate(self, entry: Entry) -> bool:
        with self._lock:
            canonical = self._copies.get(entry.identity)
            owner = canonical is None
            if owner:
                canonical = Future()
                self._copies[entry.identity] = canonical

        if owner:
            try:
                copy_file(entry.source, entry.destination)
            except CopyError as e:
                canonical.set_exception(e)
                raise
            canonical.set_result(entry.destination)
            logger.debug(f"Copied first alias of {entry.identity} to {entry.destination}")
            return True

        try:
            first = canonical.result()
        except CopyError as e:
            raise CopyError(entry.source, ErrorKind.LINK_FAILURE,
                            f"first alias could not be copied: {e.error}") from e
        _link(entry.source, first, entry.destination)
        return True


def _link(path: Path, target: Path, dst: Path) -> None:
    logger.debug(f"Hard linking {dst} -> {target}")
    try:
        os.link(target, dst)
    except OSError as e:
        raise CopyError(path, ErrorKind.LINK_FAILURE, e) from e


def copy_hardlink(entry: Entry, table: Optional[HardLinkTable] = None) -> bool:
    """
    Create a new alias of the source file's data at the destination.

    The destination is linked straight to the source path, which only works
    when both live on the same filesystem. A cross-device failure is reported
    as LINK_FAILURE unless a HardLinkTable is given, in which case aliases are
    deduplicated inside the destination instead.

    Returns:
        True if an alias was created, False if the destination already existed.
    """
    if os.path.lexists(entry.destination):
        logger.info(f"Hard link already exists at destination: {entry.destination}")
        if table is not None:
            table.register(entry)
        return False
    try:
        _link(entry.source, entry.source, entry.destination)
    except CopyError as e:
        cause = e.__cause__
        if table is not None and isinstance(cause, OSError) and cause.errno == errno.EXDEV:
            return table.replicate(entry)
        raise
    return True
