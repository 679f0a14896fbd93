"""
Unit tests for the thread pool.
"""

import threading

import pytest

from shorturl.core.thread_pool import ThreadPool


class TestThreadPool:

    def test_runs_tasks(self):
        pool = ThreadPool(workers=2, queue_size=10)
        pool.start()

        done = threading.Event()
        results = []

        def task(value):
            results.append(value)
            if len(results) == 3:
                done.set()

        for value in range(3):
            assert pool.submit(task, args=(value,)) is True

        assert done.wait(5.0)
        pool.shutdown(wait=True, timeout=5.0)

        assert sorted(results) == [0, 1, 2]
        assert pool.stats["completed"] == 3

    def test_submit_before_start(self):
        pool = ThreadPool(workers=1)

        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)

    def test_submit_after_shutdown(self):
        pool = ThreadPool(workers=1)
        pool.start()
        pool.shutdown(wait=True, timeout=5.0)

        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)

    def test_full_queue_rejects(self):
        pool = ThreadPool(workers=1, queue_size=1)
        pool.start()

        started = threading.Event()
        release = threading.Event()

        def blocker():
            started.set()
            release.wait(5.0)

        assert pool.submit(blocker) is True
        assert started.wait(5.0)

        assert pool.submit(lambda: None) is True    # fills the queue
        assert pool.submit(lambda: None) is False   # rejected
        assert pool.busy_workers == 1
        assert pool.pending == 1

        release.set()
        pool.shutdown(wait=True, timeout=5.0)

    def test_failing_task_does_not_kill_worker(self):
        pool = ThreadPool(workers=1, queue_size=10)
        pool.start()

        done = threading.Event()

        def boom():
            raise RuntimeError("boom")

        pool.submit(boom)
        pool.submit(done.set)

        assert done.wait(5.0)
        pool.shutdown(wait=True, timeout=5.0)

        assert pool.stats["failed"] == 1

    def test_needs_a_worker(self):
        with pytest.raises(ValueError):
            ThreadPool(workers=0)

    def test_shutdown_with_stuck_workers_and_full_queue(self):
        pool = ThreadPool(workers=1, queue_size=1)
        pool.start()

        started = threading.Event()
        release = threading.Event()

        def blocker():
            started.set()
            release.wait(10.0)

        pool.submit(blocker)
        assert started.wait(5.0)
        assert pool.submit(lambda: None) is True

        finished = threading.Event()

        def stop():
            pool.shutdown(wait=True, timeout=0.5)
            finished.set()

        threading.Thread(target=stop, daemon=True).start()

        try:
            assert finished.wait(3.0)
        finally:
            release.set()
