"""
Unit tests for the fixed-size thread pool.
"""

import threading
import time

import pytest

from previewserver.core.thread_pool import DEFAULT_WORKERS, ThreadPool


def wait_until(predicate, timeout: float = 5.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def pool():
    pool = ThreadPool(num_workers=2, idle_timeout=0.1)
    pool.start()
    yield pool
    pool.shutdown(wait=True)


class TestThreadPool:

    def test_default_size(self):
        assert DEFAULT_WORKERS == 16
        assert ThreadPool().num_workers == 16

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            ThreadPool(num_workers=0)

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError, match="not started"):
            ThreadPool(num_workers=1).submit(print)

    def test_executes_tasks(self, pool: ThreadPool):
        results = []
        done = threading.Event()

        def task(value):
            results.append(value)
            if len(results) == 3:
                done.set()

        for value in range(3):
            assert pool.submit(task, args=(value,))

        assert done.wait(5.0)
        assert sorted(results) == [0, 1, 2]

    def test_kwargs(self, pool: ThreadPool):
        received = {}
        done = threading.Event()

        def task(name=None):
            received["name"] = name
            done.set()

        pool.submit(task, kwargs={"name": "guide.html"})

        assert done.wait(5.0)
        assert received == {"name": "guide.html"}

    def test_submit_blocks_when_all_workers_busy(self, pool: ThreadPool):
        release = threading.Event()

        assert pool.submit(release.wait, args=(5.0,))
        assert pool.submit(release.wait, args=(5.0,))

        # Both slots are held by running tasks
        assert pool.submit(print, timeout=0.1) is False

        release.set()
        assert pool.submit(lambda: None, timeout=5.0) is True

    def test_failing_task_does_not_kill_worker(self, pool: ThreadPool):
        def boom():
            raise RuntimeError("boom")

        for _ in range(4):
            pool.submit(boom)

        assert wait_until(lambda: pool.stats["tasks"]["failed"] == 4)
        assert pool.stats["workers"]["total"] == 2

        done = threading.Event()
        pool.submit(done.set)
        assert done.wait(5.0)

    def test_stats(self, pool: ThreadPool):
        done = threading.Event()
        pool.submit(done.set)

        assert done.wait(5.0)
        assert wait_until(lambda: pool.stats["tasks"]["completed"] == 1)

        stats = pool.stats
        assert stats["workers"]["total"] == 2
        assert stats["tasks"]["failed"] == 0

    def test_submit_after_shutdown(self):
        pool = ThreadPool(num_workers=1, idle_timeout=0.1)
        pool.start()
        pool.shutdown(wait=True)

        with pytest.raises(RuntimeError):
            pool.submit(print)

    def test_seventeenth_submit_waits_for_default_pool(self):
        pool = ThreadPool(idle_timeout=0.1)
        pool.start()
        release = threading.Event()
        try:
            for _ in range(DEFAULT_WORKERS):
                assert pool.submit(release.wait, args=(5.0,))

            assert pool.submit(print, timeout=0.2) is False

            release.set()
            assert pool.submit(lambda: None, timeout=5.0) is True
        finally:
            release.set()
            pool.shutdown(wait=True)
