"""pytest configuration and fixtures for future tests."""

import pytest

from pledge import TaskQueue, set_reactor


@pytest.fixture(autouse=True)
def queue() -> TaskQueue:
    """Install a fresh TaskQueue as the default reactor for each test.

    Yields:
        The installed queue, restored to the previous default afterwards.
    """
    task_queue = TaskQueue()
    previous = set_reactor(task_queue)
    yield task_queue
    set_reactor(previous)


@pytest.fixture
def drain(queue):
    """Run every pending reaction on the default queue.

    Returns:
        Callable that drains the queue and returns the number of jobs run.
    """
    def _drain(max_turns=None) -> int:
        return queue.run_until_idle(max_turns)
    return _drain
