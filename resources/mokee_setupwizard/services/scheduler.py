"""
Scheduling service for the setup wizard.

All wizard state lives on a single navigation thread (the host's UI loop).
This module provides the queue that other threads post back to and the
worker pool that long-running work (connectivity probe, authenticator
calls) runs on.
"""

import queue
import logging
import threading
from typing import Callable, Optional, Any
from concurrent.futures import ThreadPoolExecutor, Future


class Scheduler:
    """
    Navigation queue plus worker pool.

    ``run_on_navigation_thread`` may be called from any thread; the queued
    tasks run when the navigation thread calls ``run_pending``.
    """

    def __init__(self, max_workers: int = 2):
        """
        Initialize scheduler.

        Args:
            max_workers: Size of the worker thread pool
        """
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="setupwizard-worker")
        self._outstanding = 0
        self._outstanding_lock = threading.Lock()
        self._closed = False
        self._draining = False

        self._logger = logging.getLogger(__name__)

    @property
    def closed(self) -> bool:
        return self._closed

    def run_on_navigation_thread(self, task: Callable[[], None]) -> None:
        """Post a task to the navigation thread; dropped once shut down."""
        if self._closed:
            self._logger.debug("Scheduler shut down, dropping navigation task")
            return
        self._queue.put(task)

    def run_worker(self, task: Callable[[], Any],
                   on_done: Optional[Callable[[Future], None]] = None) -> Future:
        """
        Run a task on the worker pool.

        Args:
            task: Callable executed off the navigation thread
            on_done: Called on the navigation thread with the finished future

        Returns:
            The worker future
        """
        with self._outstanding_lock:
            self._outstanding += 1

        future = self._executor.submit(task)

        def _finished(done: Future) -> None:
            with self._outstanding_lock:
                self._outstanding -= 1
            if on_done is not None:
                self.run_on_navigation_thread(lambda: on_done(done))

        future.add_done_callback(_finished)
        return future

    def run_pending(self, timeout: Optional[float] = None) -> int:
        """
        Run queued navigation tasks on the calling thread.

        Args:
            timeout: Seconds to wait for a first task; None returns immediately
                when the queue is empty

        Returns:
            Number of tasks executed
        """
        executed = 0
        self._draining = True
        try:
            while True:
                try:
                    if timeout is not None and executed == 0:
                        task = self._queue.get(timeout=timeout)
                    else:
                        task = self._queue.get_nowait()
                except queue.Empty:
                    break

                if self._closed:
                    continue

                try:
                    task()
                except Exception as e:
                    self._logger.error(f"Navigation task failed: {e}")
                executed += 1
        finally:
            self._draining = False
        return executed

    def has_pending_work(self) -> bool:
        """Whether workers are running or navigation tasks are queued."""
        with self._outstanding_lock:
            busy = self._outstanding > 0
        return busy or not self._queue.empty()

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work; queued and later-posted tasks are dropped."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)
        self._logger.debug("Scheduler shut down")


class InlineScheduler(Scheduler):
    """
    Scheduler for headless runs and tests.

    Workers run synchronously on the calling thread and posted tasks run as
    soon as the task currently executing returns.
    """

    def __init__(self):
        super().__init__(max_workers=1)

    def run_worker(self, task: Callable[[], Any],
                   on_done: Optional[Callable[[Future], None]] = None) -> Future:
        future: Future = Future()
        try:
            future.set_result(task())
        except Exception as e:
            future.set_exception(e)

        if on_done is not None:
            self.run_on_navigation_thread(lambda: on_done(future))
        return future

    def run_on_navigation_thread(self, task: Callable[[], None]) -> None:
        super().run_on_navigation_thread(task)
        if not self._draining:
            self.run_pending()
