"""Recursive tree replication over a bounded worker pool."""

import errno
import logging
import os
import threading
from concurrent.futures import Future
from functools import partial
from pathlib import Path
from typing import Callable, Optional, Union

from .classifier import make_entry
from .copier import copy_file
from .errors import CopyError
from .links import HardLinkTable, copy_hardlink, copy_symlink
from .models import (
    CopyFailure,
    Entry,
    EntryKind,
    ErrorKind,
    HardLinkFallback,
    SyncResult,
)
from .pool import TaskPool, WaitGroup

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Entry], None]


class TreeSync:
    """
    One-way replication of a source directory tree into a destination.

    Each directory goes through the same steps: list its children, create
    the destination directory, classify and submit one task per child, and
    report to its parent once every child has finished. Waiting for children
    is tracked by a WaitGroup rather than a blocked thread, so the pool bound
    holds for trees of any depth.
    """

    def __init__(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        parallelism: int,
        hardlink_fallback: HardLinkFallback = HardLinkFallback.FAIL,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.source = Path(source)
        self.destination = Path(destination)
        self.parallelism = parallelism
        self.hardlink_fallback = HardLinkFallback(hardlink_fallback)
        self.on_progress = on_progress
        self.result = SyncResult(source=str(self.source), destination=str(self.destination))
        self.pool: Optional[TaskPool] = None

        self._table = HardLinkTable() if self.hardlink_fallback is HardLinkFallback.COPY else None
        self._lock = threading.Lock()
        self._finished = threading.Event()
        self._errors: list[BaseException] = []

    def _check_roots(self) -> None:
        if not self.source.exists():
            raise FileNotFoundError(errno.ENOENT, "Source does not exist", str(self.source))
        if not self.source.is_dir():
            raise NotADirectoryError(errno.ENOTDIR, "Source is not a directory", str(self.source))
        src = self.source.resolve()
        dst = self.destination.resolve()
        if dst == src or src in dst.parents:
            raise ValueError(f"Destination {self.destination} lies inside source {self.source}")

    def run(self) -> SyncResult:
        """
        Replicate the whole tree and return the aggregated result.

        Blocks the calling thread until every task has finished. Per-entry
        failures end up in the result; an unexpected exception raised by a
        task is re-raised here once the run has drained.
        """
        self._check_roots()
        root = Entry(source=self.source, destination=self.destination, kind=EntryKind.DIRECTORY)

        logger.info(f"Syncing {self.source} -> {self.destination} with {self.parallelism} workers")
        with TaskPool(self.parallelism) as pool:
            self.pool = pool
            group = WaitGroup(self._complete)
            self._submit_directory(root, group)
            group.close()
            self._finished.wait()

        if self._errors:
            raise self._errors[0]
        logger.info(f"Sync finished with status {self.result.status.value}: "
                    f"{self.result.replicated} replicated, {len(self.result.failures)} failed")
        return self.result

    def _complete(self, failures: list[CopyFailure]) -> None:
        with self._lock:
            self.result.failures = failures
        self._finished.set()

    def _count(self, counter: str) -> None:
        with self._lock:
            setattr(self.result, counter, getattr(self.result, counter) + 1)

    def _progress(self, entry: Entry) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(entry)
        except Exception as e:
            self._unexpected(entry, e)

    def _unexpected(self, entry: Entry, error: BaseException) -> None:
        logger.error(f"Unexpected error while copying {entry.source}: {error!r}")
        with self._lock:
            self._errors.append(error)

    # Directories

    def _submit_directory(self, entry: Entry, parent: WaitGroup) -> None:
        parent.add()
        future = self.pool.submit(self._walk_directory, entry, parent)
        future.add_done_callback(partial(self._directory_done, entry, parent))

    def _directory_done(self, entry: Entry, parent: WaitGroup, future: Future) -> None:
        # A directory reports to its parent through its own WaitGroup; the
        # future only matters when the walk itself blew up.
        error = future.exception()
        if error is not None:
            self._unexpected(entry, error)
            self._report(entry, parent, [])

    def _report(self, entry: Entry, parent: WaitGroup, failures: list[CopyFailure]) -> None:
        # Runs inside Future callbacks, where concurrent.futures only logs
        # exceptions. Anything raised here must still end the run.
        try:
            parent.done(failures)
        except Exception as e:
            self._unexpected(entry, e)
            self._finished.set()

    def _walk_directory(self, entry: Entry, parent: WaitGroup) -> None:
        group = WaitGroup(partial(self._directory_complete, entry), parent=parent)

        try:
            names = sorted(os.listdir(entry.source))
        except FileNotFoundError as e:
            group.close(self._failed(CopyError(entry.source, ErrorKind.NOT_FOUND, e)))
            return
        except OSError as e:
            group.close(self._failed(CopyError(entry.source, ErrorKind.IO_FAILURE, e)))
            return

        try:
            entry.destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            failures = self._failed(CopyError(entry.source, ErrorKind.IO_FAILURE, e))
            reason = f"destination directory {entry.destination} could not be created"
            failures.extend(
                CopyFailure(str(entry.source / name), ErrorKind.DEPENDENCY_FAILURE, reason)
                for name in names
            )
            group.close(failures)
            return
        self._count("directories")
        logger.debug(f"Created directory {entry.destination} ({len(names)} entries)")

        failures = []
        for name in names:
            source, destination = entry.child_paths(name)
            try:
                child = make_entry(source, destination)
            except CopyError as e:
                failures.extend(self._failed(e))
                continue

            if child.kind is EntryKind.DIRECTORY:
                self._submit_directory(child, group)
            elif child.kind is EntryKind.SPECIAL:
                logger.warning(f"Skipping special file: {source}")
                self._count("skipped")
                self._progress(child)
            else:
                self._submit_leaf(child, group)
        group.close(failures)

    def _directory_complete(self, entry: Entry, failures: list[CopyFailure]) -> None:
        self._progress(entry)

    # Leaves

    def _submit_leaf(self, entry: Entry, parent: WaitGroup) -> None:
        parent.add()
        future = self.pool.submit(self._replicate, entry)
        future.add_done_callback(partial(self._leaf_done, entry, parent))

    def _leaf_done(self, entry: Entry, parent: WaitGroup, future: Future) -> None:
        error = future.exception()
        if error is None:
            failures = []
        elif isinstance(error, CopyError):
            failures = self._failed(error)
        else:
            self._unexpected(entry, error)
            failures = []
        self._progress(entry)
        self._report(entry, parent, failures)

    def _replicate(self, entry: Entry) -> None:
        if entry.kind is EntryKind.SYMLINK:
            counter = "symlinks" if copy_symlink(entry) else "skipped"
        elif entry.kind is EntryKind.HARDLINK:
            counter = "hardlinks" if copy_hardlink(entry, self._table) else "skipped"
        else:
            copy_file(entry.source, entry.destination)
            counter = "files"
        self._count(counter)

    @staticmethod
    def _failed(error: CopyError) -> list[CopyFailure]:
        logger.warning(f"Failed to copy {error.path} ({error.kind.value}): {error.error}")
        return [error.to_failure()]


def sync_tree(
    source: Union[str, Path],
    destination: Union[str, Path],
    parallelism: int,
    hardlink_fallback: HardLinkFallback = HardLinkFallback.FAIL,
    on_progress: Optional[ProgressCallback] = None,
) -> SyncResult:
    """Replicate source into destination using at most parallelism workers."""
    return TreeSync(source, destination, parallelism, hardlink_fallback, on_progress).run()
