"""
pledge - Promises/A+ futures for Python

A from-scratch deferred-computation primitive with continuation chaining,
adoption of duck-typed thenables, and collection combinators.

Features:
- Promises/A+ state machine and resolution procedure
- then / catch / finally_ chaining
- all, all_settled, any, race combinators
- Pluggable reactors: deterministic TaskQueue or asyncio event loop
- Awaitable from asyncio code

Example:
    from pledge import Future, TaskQueue

    queue = TaskQueue()
    f = Future(lambda resolve, reject: resolve(20), reactor=queue)
    doubled = f.then(lambda x: x * 2)
    queue.run_until_idle()
    assert doubled.get() == 40

Scheduling:
    Unless configured otherwise, the default reactor is a process-wide
    TaskQueue, and nothing attached with then() runs until it is drained:

        from pledge import get_reactor
        get_reactor().run_until_idle()

    Awaiting a future from asyncio code drains the queue automatically.
    To have an event loop run handlers instead, set PLEDGE_REACTOR=asyncio
    or call configure(reactor="asyncio") before the first future is created.
"""

from .config import PledgeConfig, configure, get_config
from .core import (
    Future,
    FutureState,
    SettledResult,
    Deferred,
    resolve,
    reject,
    deferred,
    when_all,
    when_all_settled,
    when_any,
    race,
    resolve_future,
    is_thenable,
    Latch,
    Reactor,
    TaskQueue,
    AsyncioReactor,
    get_reactor,
    set_reactor,
    use_reactor,
    PledgeError,
    ChainingCycleError,
    NotIterableError,
    AggregateError,
    RejectedError,
    FuturePendingError,
)

__all__ = [
    "Future",
    "FutureState",
    "SettledResult",
    "Deferred",
    "resolve",
    "reject",
    "deferred",
    "when_all",
    "when_all_settled",
    "when_any",
    "race",
    "resolve_future",
    "is_thenable",
    "Latch",
    "Reactor",
    "TaskQueue",
    "AsyncioReactor",
    "get_reactor",
    "set_reactor",
    "use_reactor",
    "PledgeConfig",
    "configure",
    "get_config",
    "PledgeError",
    "ChainingCycleError",
    "NotIterableError",
    "AggregateError",
    "RejectedError",
    "FuturePendingError",
]

__version__ = "0.1.0"
