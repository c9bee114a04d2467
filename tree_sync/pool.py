"""Bounded task execution shared by a whole sync."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from .models import CopyFailure

logger = logging.getLogger(__name__)


class TaskPool:
    """
    A fixed number of worker threads executing copy tasks.

    Every task of one sync, at any depth of the tree, goes through the same
    pool, so no more than max_workers tasks ever run at once. Submitting
    only queues work; it never waits for a task to finish or for a free
    worker, which makes it safe to call from inside a running task.

    The queue itself is unbounded: every entry discovered but not yet copied
    is held in memory as a pending Future. Very wide trees therefore cost
    memory in proportion to the number of entries waiting, not to
    max_workers.
    """

    def __init__(self, max_workers: int):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="tree-sync")
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0
        self.submitted = 0

    def __enter__(self) -> "TaskPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def _run(self, fn: Callable, args: tuple):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            return fn(*args)
        finally:
            with self._lock:
                self.active -= 1

    def submit(self, fn: Callable, *args) -> Future:
        """Queue fn(*args) for execution on a worker thread."""
        with self._lock:
            self.submitted += 1
        return self._executor.submit(self._run, fn, args)

    def shutdown(self) -> None:
        logger.debug(f"Shutting down pool: {self.submitted} tasks run, peak concurrency {self.peak}")
        self._executor.shutdown(wait=True)


class WaitGroup:
    """
    Counts the outstanding child tasks of one directory.

    The group starts with a single pending slot held by the dispatcher and
    released by close(), so it cannot complete while children are still
    being submitted. When the count reaches zero, on_complete receives every
    failure reported by the children and the group reports itself done to
    its parent. Completion climbs the chain of parents in a loop, so a deep
    tree finishing all at once does not grow the call stack.
    """

    def __init__(
        self,
        on_complete: Optional[Callable[[list[CopyFailure]], None]] = None,
        parent: Optional["WaitGroup"] = None,
    ):
        self._lock = threading.Lock()
        self._pending = 1
        self._failures: list[CopyFailure] = []
        self._on_complete = on_complete
        self.parent = parent

    def add(self) -> None:
        with self._lock:
            if self._pending == 0:
                raise RuntimeError("WaitGroup already completed")
            self._pending += 1

    def _release(self, failures: Iterable[CopyFailure]) -> Optional[list[CopyFailure]]:
        """Drop one pending slot; return the collected failures if that was the last."""
        with self._lock:
            if self._pending == 0:
                raise RuntimeError("WaitGroup already completed")
            self._failures.extend(failures)
            self._pending -= 1
            if self._pending:
                return None
            return list(self._failures)

    def done(self, failures: Iterable[CopyFailure] = ()) -> None:
        group = self
        while group is not None:
            collected = group._release(failures)
            if collected is None:
                return
            if group._on_complete is not None:
                group._on_complete(collected)
            group, failures = group.parent, collected

    def close(self, failures: Iterable[CopyFailure] = ()) -> None:
        """Release the dispatcher's slot once every child is submitted."""
        self.done(failures)
