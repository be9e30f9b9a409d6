"""Task queues: an abstract interface and a thread-pool implementation."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future

_log = logging.getLogger(__name__)

Task = Callable[[], object]


class TaskQueue(ABC):
    """A queue that runs submitted callables somewhere else."""

    name: str = ""

    @abstractmethod
    def run_task_in_queue(self, task: Task) -> None:
        """Submit a task to be run by the queue."""

    def sync_task_in_queue(self, task: Task) -> None:
        """Run a task in the queue and wait until it has finished.

        An exception raised by the task is raised again here.
        """
        done: Future[None] = Future()

        def wrapper() -> None:
            try:
                task()
            except BaseException as exc:
                done.set_exception(exc)
            else:
                done.set_result(None)

        self.run_task_in_queue(wrapper)
        done.result()


class ConcurrentTaskQueue(TaskQueue):
    """A pool of worker threads that take tasks from a shared queue."""

    def __init__(self, thread_num: int, name: str) -> None:
        if thread_num <= 0:
            raise ValueError("thread_num must be positive")
        self.name = name
        self._tasks: deque[Task] = deque()
        self._cond = threading.Condition()
        self._stopped = False
        self._threads = [
            threading.Thread(target=self._worker, name=f"{name}{i}", daemon=True)
            for i in range(thread_num)
        ]
        for thread in self._threads:
            thread.start()

    def run_task_in_queue(self, task: Task) -> None:
        with self._cond:
            self._tasks.append(task)
            self._cond.notify()

    def task_count(self) -> int:
        """Number of tasks waiting to be run."""
        with self._cond:
            return len(self._tasks)

    def stop(self) -> None:
        """Stop all workers and wait for them to exit."""
        with self._cond:
            if self._stopped:
                return
            self._stopped = True
            self._cond.notify_all()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join()

    def __enter__(self) -> ConcurrentTaskQueue:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _worker(self) -> None:
        while not self._stopped:
            with self._cond:
                while not self._stopped and not self._tasks:
                    self._cond.wait()
                if not self._tasks:
                    continue
                task = self._tasks.popleft()
            try:
                task()
            except Exception:
                _log.exception("task in queue %r failed", self.name)