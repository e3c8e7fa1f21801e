"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads that run submitted tasks. The accept loop is
the only producer; it hands every connection to the pool and moves on.

=============================================================================
FIXED SIZE, BLOCKING SUBMIT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Thread Pool (16)                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop                                                        │
    │       │                                                              │
    │       │ submit(task)                                                 │
    │       ▼                                                              │
    │   ┌───────────────────┐   all 16 slots taken?                       │
    │   │  slots (16)       │── yes ──► submit() BLOCKS until one frees    │
    │   └─────────┬─────────┘                                             │
    │             │ slot acquired                                          │
    │             ▼                                                        │
    │   ┌───────────────────┐                                             │
    │   │  TASK QUEUE       │   never holds more than 16 tasks            │
    │   └─────────┬─────────┘                                             │
    │             │ get()                                                  │
    │             ▼                                                        │
    │   ┌──────────┐ ┌──────────┐       ┌───────────┐                     │
    │   │ Worker 0 │ │ Worker 1 │  ...  │ Worker 15 │                     │
    │   └──────────┘ └──────────┘       └───────────┘                     │
    │        │                                                             │
    │        └── task done (or failed) → slot released                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A slot is held from submit() until the task finishes, so at most
num_workers tasks are ever in flight or waiting. When every worker is busy
the accept loop stops accepting: that is the backpressure. Connections
that keep arriving wait in the kernel's listen backlog instead.

=============================================================================
WORKER LIFECYCLE
=============================================================================

    while not shutdown:
        task = queue.get()      ← blocks until a task is available
        if task is None:        ← poison pill
            break
        execute(task)           ← exceptions logged, never re-raised
        release slot

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


DEFAULT_WORKERS = 16


class WorkerState(Enum):
    """Worker thread states."""
    IDLE = "idle"        # Waiting for task
    BUSY = "busy"        # Executing task
    STOPPED = "stopped"  # Thread exited


@dataclass
class Task:
    """
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        submitted_at: Time the task was submitted.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the queue.

    A failing task is logged and counted; the worker carries on with the
    next one.
    """

    def __init__(
        self,
        task_queue: queue.Queue,
        slots: threading.Semaphore,
        worker_id: int,
        idle_timeout: float = 60.0
    ):
        # daemon=True: workers never keep the process alive on exit
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.slots = slots
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            if task is None:
                break

            try:
                self._execute_task(task)
            finally:
                self.slots.release()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        """
        Execute a single task.

        Exceptions are caught here so one bad task never takes the worker
        (or the accept loop) down with it.
        """
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)

            elapsed = time.time() - start_time
            waited = start_time - task.submitted_at
            logger.debug(
                f"Worker {self.worker_id} completed task in {elapsed:.3f}s "
                f"(queued {waited:.3f}s)"
            )
            self.tasks_completed += 1

        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(
                f"Worker {self.worker_id} task failed after {elapsed:.3f}s: {e}"
            )
            self.tasks_failed += 1

        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        """Signal the worker to stop."""
        self._shutdown.set()


class ThreadPool:
    """
    Fixed-size thread pool with blocking submit.

        pool = ThreadPool(num_workers=16)
        pool.start()

        pool.submit(handle_connection, args=(conn, handler))   # may block

        pool.stats    # {"workers": {"busy": 3, ...}, "tasks": {...}}
        pool.shutdown()
    """

    def __init__(self, num_workers: int = DEFAULT_WORKERS, idle_timeout: float = 60.0):
        """
        Initialize the thread pool.

        Args:
            num_workers: Number of worker threads, and the maximum number
                         of tasks in flight at once.
            idle_timeout: Seconds an idle worker waits before re-checking
                          for shutdown.
        """
        if num_workers < 1:
            raise ValueError("num_workers must be >= 1")

        self.num_workers = num_workers
        self.idle_timeout = idle_timeout

        # One slot per worker: acquired by submit(), released by the worker
        self._slots = threading.Semaphore(num_workers)
        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue()

        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    def start(self):
        """Start all worker threads."""
        with self._lock:
            if self._started:
                return

            logger.debug(f"Starting thread pool with {self.num_workers} workers")
            for worker_id in range(self.num_workers):
                worker = Worker(
                    task_queue=self._task_queue,
                    slots=self._slots,
                    worker_id=worker_id,
                    idle_timeout=self.idle_timeout,
                )
                self._workers.append(worker)
                worker.start()

            self._started = True

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Submit a task for execution.

        Blocks while every worker is busy.

        Args:
            func: The function to execute.
            args: Positional arguments for the function.
            kwargs: Keyword arguments for the function.
            timeout: Maximum seconds to wait for a free worker.
                     None waits as long as it takes.

        Returns:
            True if the task was accepted, False if timeout expired first.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        if not self._slots.acquire(timeout=timeout):
            return False

        self._task_queue.put(Task(func=func, args=args, kwargs=kwargs or {}))
        return True

    def shutdown(self, wait: bool = False, timeout: float = 2.0):
        """
        Stop the workers.

        Tasks already running are not interrupted. Each worker gets one
        poison pill; tasks queued behind the pills are dropped.

        Args:
            wait: Join each worker thread (up to timeout seconds each).
            timeout: Per-worker join timeout.
        """
        if not self._started:
            return

        logger.debug("Shutting down thread pool...")
        self._shutdown = True

        for worker in self._workers:
            worker.shutdown()
            self._task_queue.put(None)

        if wait:
            for worker in self._workers:
                worker.join(timeout=timeout)

        self._workers.clear()
        self._started = False

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def busy_workers(self) -> int:
        """Get count of busy workers."""
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        """Get count of idle workers."""
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def stats(self) -> dict:
        """Worker and task counts, for logging and tests."""
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self._task_queue.qsize(),
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
