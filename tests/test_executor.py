"""
Tests for the caller-runs worker pool.
"""

import logging
import threading
from unittest.mock import patch

import pytest

from jira_datastore.executor import CallerRunsExecutor


def blocking_task(started, release):
    """Task that signals it started, then waits to be released."""

    def block():
        started.set()
        release.wait(5)
        return 'worker'

    return block


class TestCallerRunsExecutor:
    """Test backpressure and bounded shutdown."""

    def test_runs_tasks_on_workers(self):
        """Test tasks complete on the pool."""
        executor = CallerRunsExecutor(2)
        futures = [executor.submit(pow, n, 2) for n in range(2)]
        assert executor.shutdown(timeout=5) == []
        assert [f.result() for f in futures] == [0, 1]

    def test_caller_runs_when_full(self):
        """Test the caller runs the task when workers and queue are full."""
        release = threading.Event()
        started = threading.Event()
        block = blocking_task(started, release)

        executor = CallerRunsExecutor(1, queue_size=1)
        try:
            running = executor.submit(block)
            assert started.wait(5)
            queued = executor.submit(block)

            overflow = executor.submit(threading.current_thread)

            assert overflow.done()
            assert overflow.result() is threading.current_thread()
            assert executor.caller_runs == 1
        finally:
            release.set()
            assert executor.shutdown(timeout=5) == []

        assert running.result() == 'worker'
        assert queued.result() == 'worker'

    def test_caller_runs_exception_propagates(self):
        """Test a failing task run by the caller raises from submit."""
        release = threading.Event()
        started = threading.Event()
        executor = CallerRunsExecutor(1, queue_size=0)

        try:
            executor.submit(blocking_task(started, release))
            assert started.wait(5)
            with pytest.raises(ValueError):
                executor.submit(int, 'x')
            assert executor.caller_runs == 1
        finally:
            release.set()
            executor.shutdown(timeout=5)

    def test_worker_exception_kept_in_future(self):
        """Test a failing worker task stores its exception."""
        executor = CallerRunsExecutor(1)
        future = executor.submit(int, 'x')
        executor.shutdown(timeout=5)
        with pytest.raises(ValueError):
            future.result()

    def test_cancel_drops_queued_tasks(self):
        """Test cancel() cancels queued but not running work."""
        release = threading.Event()
        started = threading.Event()
        executor = CallerRunsExecutor(1, queue_size=1)

        running = executor.submit(blocking_task(started, release))
        assert started.wait(5)
        queued = executor.submit(blocking_task(threading.Event(), release))

        executor.cancel()
        release.set()

        assert queued.cancelled()
        assert running.result(timeout=5) == 'worker'

    def test_shutdown_cancels_stragglers(self, caplog):
        """Test work pending after the timeout is cancelled and reported."""
        release = threading.Event()
        started = threading.Event()
        block = blocking_task(started, release)

        executor = CallerRunsExecutor(1, queue_size=1)
        running = executor.submit(block)
        assert started.wait(5)
        queued = executor.submit(block)

        with caplog.at_level(logging.WARNING):
            pending = executor.shutdown(timeout=0.1)
        release.set()

        assert set(pending) == {running, queued}
        assert queued.cancelled()
        assert 'still running' in caplog.text
        running.result(timeout=5)

    def test_interrupt_during_shutdown(self, caplog):
        """Test KeyboardInterrupt while draining cancels queued work."""
        release = threading.Event()
        started = threading.Event()
        block = blocking_task(started, release)

        executor = CallerRunsExecutor(1, queue_size=1)
        running = executor.submit(block)
        assert started.wait(5)
        queued = executor.submit(block)

        with patch('jira_datastore.executor.wait', side_effect=KeyboardInterrupt):
            with caplog.at_level(logging.DEBUG, logger='jira_datastore.executor'):
                pending = executor.shutdown(timeout=5)
        release.set()

        assert set(pending) == {running, queued}
        assert queued.cancelled()
        assert 'Interrupted.' in caplog.text
        assert running.result(timeout=5) == 'worker'

    def test_context_manager(self):
        """Test leaving the block drains the pool."""
        with CallerRunsExecutor(2) as executor:
            future = executor.submit(sum, [1, 2, 3])
        assert future.result() == 6
        assert executor.futures == [future]
