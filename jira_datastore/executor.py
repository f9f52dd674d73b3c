"""
Bounded worker pool with caller-runs backpressure.

When every worker is busy and the queue is full, submit() runs the task
on the calling thread instead of blocking or dropping it.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, List, Optional

SHUTDOWN_TIMEOUT = 60.0


class CallerRunsExecutor:
    """
    ThreadPoolExecutor wrapper with a fixed queue bound.

    Args:
        max_workers: Number of worker threads
        queue_size: Tasks allowed to wait for a worker, defaults to max_workers
        logger: Logger for pool lifecycle messages
    """

    def __init__(
        self,
        max_workers: int,
        queue_size: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger('jira_datastore.executor')
        self.max_workers = max_workers
        self.queue_size = max_workers if queue_size is None else queue_size
        self._slots = threading.BoundedSemaphore(self.max_workers + self.queue_size)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='jira-datastore'
        )
        self._futures: List[Future] = []
        self.caller_runs = 0

        self.logger.debug(f"Executor Thread Pool: {max_workers}")

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """
        Schedule fn on a worker, or run it here if the pool is saturated.

        An exception raised by a task run on the calling thread propagates
        to the caller.
        """
        if not self._slots.acquire(blocking=False):
            self.caller_runs += 1
            future = Future()
            future.set_result(fn(*args, **kwargs))
            self._futures.append(future)
            return future

        future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(lambda _: self._slots.release())
        self._futures.append(future)
        return future

    @property
    def futures(self) -> List[Future]:
        return list(self._futures)

    def cancel(self) -> None:
        """Cancel every task that has not started yet."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def shutdown(self, timeout: float = SHUTDOWN_TIMEOUT) -> List[Future]:
        """
        Wait for submitted work, then cancel whatever is left.

        Args:
            timeout: Seconds to wait for running and queued tasks

        Returns:
            Futures that had not finished when the pool was cancelled
        """
        self.logger.debug("Shutting down thread executor.")
        pending = []
        try:
            _, not_done = wait(self._futures, timeout=timeout)
            pending = list(not_done)
        except KeyboardInterrupt as e:
            self.logger.debug("Interrupted.", exc_info=e)
            pending = [f for f in self._futures if not f.done()]
        finally:
            self.cancel()

        if pending:
            self.logger.warning(
                f"{len(pending)} task(s) still running after {timeout}s, cancelled"
            )
        return pending

    def __enter__(self) -> 'CallerRunsExecutor':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
