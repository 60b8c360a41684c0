"""
Reactor Control

Schedulers that run future reactions after the current synchronous frame.
"""

import asyncio
import logging
import traceback
from collections import deque
from contextlib import contextmanager
from typing import Callable, Deque, Iterator, List, Optional

logger = logging.getLogger(__name__)

Job = Callable[[], None]


class Reactor:
    """
    Task queue contract used by futures.

    A reactor accepts zero-argument jobs and runs each one later, never
    inside the call to ``schedule``. Jobs run in the order they were
    scheduled.
    """

    def schedule(self, job: Job) -> None:
        """Enqueue a job."""
        raise NotImplementedError("Reactor.schedule must be overridden by subclass")

    def flush(self) -> int:
        """
        Run whatever the reactor can run synchronously.

        Returns:
            Number of jobs run (0 for reactors driven elsewhere)
        """
        return 0


class TaskQueue(Reactor):
    """
    Deterministic microtask queue.

    Nothing runs until the owner steps the queue, which makes the order of
    reactions fully observable in tests.

    Listeners added with add_listener() are called after every schedule(),
    which lets an event loop drain the queue on demand.

    Example:
        queue = TaskQueue()
        future = Future.resolve(1, reactor=queue).then(lambda x: x + 1)
        queue.run_until_idle()
        assert future.get() == 2
    """

    def __init__(self, max_turns: Optional[int] = None):
        """
        Create a task queue.

        Args:
            max_turns: Default cap for run_until_idle (None = unbounded)
        """
        self._jobs: Deque[Job] = deque()
        self._draining = False
        self.max_turns = max_turns
        self._listeners: List[Job] = []
        self.stats = {
            'jobs_scheduled': 0,
            'jobs_run': 0,
            'jobs_failed': 0,
        }

    def schedule(self, job: Job) -> None:
        self._jobs.append(job)
        self.stats['jobs_scheduled'] += 1
        for listener in list(self._listeners):
            listener()

    def add_listener(self, listener: Job) -> None:
        """Call listener() each time a job is scheduled."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Job) -> None:
        """Stop notifying listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def pending(self) -> int:
        """Number of jobs waiting to run."""
        return len(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)

    def step(self) -> bool:
        """
        Run the oldest job.

        Returns:
            False if the queue was empty
        """
        if not self._jobs:
            return False

        job = self._jobs.popleft()
        try:
            job()
        except Exception as e:
            self.stats['jobs_failed'] += 1
            logger.error("Job %r raised %s: %s", job, type(e).__name__, e)
            logger.error(traceback.format_exc())
        self.stats['jobs_run'] += 1
        return True

    def run_until_idle(self, max_turns: Optional[int] = None) -> int:
        """
        Run jobs, including ones scheduled while draining, until the queue is empty.

        Args:
            max_turns: Stop after this many jobs (defaults to self.max_turns)

        Returns:
            Number of jobs run. A nested call made from inside a job returns 0.
        """
        if self._draining:
            return 0

        limit = max_turns if max_turns is not None else self.max_turns
        ran = 0
        self._draining = True
        try:
            while limit is None or ran < limit:
                if not self.step():
                    break
                ran += 1
        finally:
            self._draining = False

        if self._jobs:
            logger.debug(f"Stopped draining after {ran} jobs, {len(self._jobs)} still pending")
        return ran

    def flush(self) -> int:
        return self.run_until_idle()

    def clear(self) -> int:
        """Drop every pending job and return how many were dropped."""
        dropped = len(self._jobs)
        self._jobs.clear()
        return dropped

    def __repr__(self) -> str:
        return f"TaskQueue(pending={len(self._jobs)})"


class AsyncioReactor(Reactor):
    """
    Reactor backed by an asyncio event loop.

    Jobs go through ``loop.call_soon``; the loop drains them.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop: Event loop to schedule on (None = running loop at schedule time)
        """
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule(self, job: Job) -> None:
        self.loop.call_soon(job)

    def __repr__(self) -> str:
        return f"AsyncioReactor(loop={self._loop!r})"


_default_reactor: Optional[Reactor] = None


def build_reactor(kind: str, max_turns: Optional[int] = None) -> Reactor:
    """
    Build a reactor by configuration name.

    Args:
        kind: "queue" or "asyncio"
        max_turns: Drain cap for a task queue

    Returns:
        New reactor
    """
    if kind == "queue":
        return TaskQueue(max_turns=max_turns)
    if kind == "asyncio":
        return AsyncioReactor()
    raise ValueError(f"Unknown reactor kind: {kind!r}")


def get_reactor() -> Reactor:
    """Return the process default reactor, building it from configuration on first use."""
    global _default_reactor
    if _default_reactor is None:
        from ..config import get_config
        config = get_config()
        _default_reactor = build_reactor(config.reactor, config.max_drain_turns)
        logger.debug(f"Default reactor initialized: {_default_reactor!r}")
    return _default_reactor


def set_reactor(reactor: Optional[Reactor]) -> Optional[Reactor]:
    """
    Replace the default reactor.

    Args:
        reactor: New default (None = rebuild from configuration on next use)

    Returns:
        The previous default
    """
    global _default_reactor
    previous = _default_reactor
    _default_reactor = reactor
    return previous


@contextmanager
def use_reactor(reactor: Reactor) -> Iterator[Reactor]:
    """Install a default reactor for the duration of a with block."""
    previous = set_reactor(reactor)
    try:
        yield reactor
    finally:
        set_reactor(previous)
