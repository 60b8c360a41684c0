"""
pledge Core

Promises/A+ futures, the resolution procedure, combinators, and the
reactors that run reactions.
"""

from .types import FutureState, SettledResult, Deferred
from .exceptions import (
    PledgeError,
    ChainingCycleError,
    NotIterableError,
    AggregateError,
    RejectedError,
    FuturePendingError,
)
from .reactor import (
    Reactor,
    TaskQueue,
    AsyncioReactor,
    get_reactor,
    set_reactor,
    use_reactor,
)
from .resolution import Latch, resolve_future, is_thenable
from .future import Future, resolve, reject, deferred
from .combinators import when_all, when_all_settled, when_any, race

__all__ = [
    'Future',
    'FutureState',
    'SettledResult',
    'Deferred',
    'resolve',
    'reject',
    'deferred',
    'when_all',
    'when_all_settled',
    'when_any',
    'race',
    'resolve_future',
    'is_thenable',
    'Latch',
    'Reactor',
    'TaskQueue',
    'AsyncioReactor',
    'get_reactor',
    'set_reactor',
    'use_reactor',
    'PledgeError',
    'ChainingCycleError',
    'NotIterableError',
    'AggregateError',
    'RejectedError',
    'FuturePendingError',
]
