"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads pulling connections from a bounded queue.
Used when the server runs with workers > 0; with workers == 0 every
connection is handled inline on the accept thread instead.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Thread Pool                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   submit(task) ──► ┌───┬───┬───┬───┬───┐  bounded queue.Queue       │
    │                    │ T │ T │ T │   │   │                            │
    │                    └─┬─┴───┴───┴───┴───┘                            │
    │                      │                                              │
    │          ┌───────────┼───────────┐                                  │
    │          ▼           ▼           ▼                                  │
    │      Worker-0    Worker-1    Worker-2                               │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Queue full → submit() returns False immediately. The caller decides what
to do with the rejected work (the server answers 503).

=============================================================================
SHUTDOWN: POISON PILLS
=============================================================================

    shutdown()
        └─ for each worker: queue.put(None)
        └─ a worker that gets None leaves its loop

Tasks already in the queue ahead of the pills still run. A pill that cannot
be queued in time means every worker is stuck; shutdown gives up on them
(they are daemon threads) rather than blocking forever.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred function call."""
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread.

        loop:
            task = queue.get()
            None  → exit
            task  → run it, log (never raise) any exception
            queue.task_done()
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int):
        # daemon=True: a stuck client cannot keep the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s")
        except Exception as e:
            # One bad task must not take the worker down with it
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool with a bounded task queue.

    Usage:
        pool = ThreadPool(workers=4, queue_size=64)
        pool.start()

        if not pool.submit(handle_connection, args=(conn,)):
            ...  # queue full, reject

        pool.shutdown(wait=True)
    """

    PILL_TIMEOUT = 5.0

    def __init__(self, workers: int = 4, queue_size: int = 64):
        if workers < 1:
            raise ValueError("ThreadPool needs at least one worker")

        self.workers = workers
        self.queue_size = queue_size

        self._task_queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._workers: list = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    def start(self):
        """Spawn the workers. Calling it twice is a no-op."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.workers} workers")
            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()

            self._started = True

    def submit(self, func: Callable[..., Any], args: tuple = (), kwargs: Optional[dict] = None) -> bool:
        """
        Queue a task without blocking.

        Returns:
            True if the task was queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        try:
            self._task_queue.put_nowait(Task(func=func, args=args, kwargs=kwargs or {}))
            return True
        except queue.Full:
            return False

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the workers.

        Args:
            wait: Join the workers before returning.
            timeout: Per-worker join timeout when waiting, and how long to
                wait for room in the queue for each poison pill.
        """
        with self._lock:
            if self._shutdown or not self._started:
                self._shutdown = True
                return
            self._shutdown = True

        logger.info("Shutting down thread pool...")

        # Queued tasks drain first, then each worker takes a pill. If the queue
        # stays full (every worker stuck on a slow client) the daemon workers
        # are abandoned.
        pill_timeout = timeout if timeout is not None else self.PILL_TIMEOUT
        for _ in self._workers:
            try:
                self._task_queue.put(None, timeout=pill_timeout)
            except queue.Full:
                logger.warning(
                    f"Task queue still full after {pill_timeout}s, abandoning workers"
                )
                return

        if wait:
            for worker in self._workers:
                worker.join(timeout)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} did not stop within {timeout}s")

        logger.info("Thread pool shutdown complete")

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def pending(self) -> int:
        """Tasks waiting in the queue."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        return {
            "workers": len(self._workers),
            "busy": self.busy_workers,
            "pending": self.pending,
            "completed": sum(w.tasks_completed for w in self._workers),
            "failed": sum(w.tasks_failed for w in self._workers),
        }
