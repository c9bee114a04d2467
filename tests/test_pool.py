"""Tests for tree_sync.pool module."""

import sys
import threading
import time

import pytest

from tree_sync.models import CopyFailure, ErrorKind
from tree_sync.pool import TaskPool, WaitGroup


class TestTaskPool:
    """Tests for TaskPool."""

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            TaskPool(0)

    def test_runs_submitted_task(self):
        with TaskPool(2) as pool:
            future = pool.submit(lambda x, y: x + y, 2, 3)
            assert future.result(timeout=5) == 5
        assert pool.submitted == 1

    def test_exception_is_kept_on_future(self):
        def boom():
            raise RuntimeError("boom")

        with TaskPool(1) as pool:
            future = pool.submit(boom)
            assert isinstance(future.exception(timeout=5), RuntimeError)
        assert pool.active == 0

    def test_peak_never_exceeds_bound(self):
        with TaskPool(3) as pool:
            futures = [pool.submit(time.sleep, 0.02) for _ in range(20)]
            for future in futures:
                future.result(timeout=5)
        assert 1 <= pool.peak <= 3

    def test_submit_from_inside_task(self):
        results = []

        with TaskPool(1) as pool:
            def inner():
                results.append("inner")

            def outer():
                # Queue work without waiting on it, even with a single worker.
                return pool.submit(inner)

            inner_future = pool.submit(outer).result(timeout=5)
            inner_future.result(timeout=5)

        assert results == ["inner"]


class TestWaitGroup:
    """Tests for WaitGroup."""

    def test_completes_on_close_without_children(self):
        seen = []
        group = WaitGroup(seen.append)
        group.close()
        assert seen == [[]]

    def test_waits_for_every_child(self):
        seen = []
        group = WaitGroup(seen.append)
        group.add()
        group.add()
        group.close()
        assert seen == []

        group.done()
        assert seen == []
        group.done()
        assert seen == [[]]

    def test_collects_all_failures(self):
        seen = []
        first = CopyFailure("/a", ErrorKind.IO_FAILURE, "one")
        second = CopyFailure("/b", ErrorKind.NOT_FOUND, "two")
        own = CopyFailure("/c", ErrorKind.LINK_FAILURE, "three")

        group = WaitGroup(seen.append)
        group.add()
        group.add()
        group.done([first])
        group.done([second])
        group.close([own])

        assert len(seen) == 1
        assert set(seen[0]) == {first, second, own}

    def test_does_not_complete_before_close(self):
        seen = []
        group = WaitGroup(seen.append)
        group.add()
        group.done()
        assert seen == []

    def test_done_after_completion_raises(self):
        group = WaitGroup(lambda failures: None)
        group.close()
        with pytest.raises(RuntimeError):
            group.done()
        with pytest.raises(RuntimeError):
            group.add()

    def test_concurrent_done_completes_once(self):
        calls = []
        group = WaitGroup(calls.append)
        for _ in range(50):
            group.add()
        group.close()

        threads = [threading.Thread(target=group.done) for _ in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == [[]]

    def test_completion_reaches_parent(self):
        seen = []
        root = WaitGroup(lambda failures: seen.append(("root", failures)))
        root.add()
        child = WaitGroup(lambda failures: seen.append(("child", failures)), parent=root)
        root.close()
        assert seen == []

        failure = CopyFailure("/a", ErrorKind.IO_FAILURE, "one")
        child.close([failure])

        assert seen == [("child", [failure]), ("root", [failure])]

    def test_group_without_callback_still_reports_to_parent(self):
        seen = []
        root = WaitGroup(seen.append)
        root.add()
        child = WaitGroup(parent=root)
        root.close()

        child.close()

        assert seen == [[]]

    def test_long_chain_completes_without_recursion(self):
        depth = sys.getrecursionlimit() * 5
        seen = []
        root = WaitGroup(seen.append)
        groups = [root]
        for _ in range(depth):
            groups[-1].add()
            groups.append(WaitGroup(parent=groups[-1]))
        for group in groups[:-1]:
            group.close()

        failure = CopyFailure("/deep", ErrorKind.NOT_FOUND, "gone")
        groups[-1].close([failure])

        assert seen == [[failure]]
