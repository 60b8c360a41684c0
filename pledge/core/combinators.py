"""
Higher-Order Future Patterns

Combinators that aggregate the settlement of a collection of futures,
thenables, or plain values into a single future.
"""

import logging
from typing import Any, Iterable, List, Optional

from .exceptions import AggregateError, NotIterableError
from .future import Future
from .reactor import Reactor
from .types import SettledResult

logger = logging.getLogger(__name__)


def _materialize(iterable: Iterable[Any]) -> List[Any]:
    """
    Snapshot the input before any asynchronous work starts.

    Raises:
        NotIterableError: If the input cannot be iterated
    """
    try:
        iterator = iter(iterable)
    except TypeError as e:
        raise NotIterableError(detail=str(e)) from e
    return list(iterator)


def _start(iterable: Iterable[Any], reactor: Optional[Reactor], future_type: type):
    """Create the aggregate future and the normalized inputs, or a rejected aggregate."""
    aggregate = future_type(reactor=reactor)
    try:
        items = _materialize(iterable)
    except Exception as e:
        logger.debug("Combinator input rejected with %s", type(e).__name__)
        aggregate.reject(e)
        return aggregate, None
    return aggregate, [future_type.resolve(item, reactor=reactor) for item in items]


def when_all(iterable: Iterable[Any], reactor: Optional[Reactor] = None,
             future_type: type = Future) -> Future:
    """
    Wait for all inputs to fulfill.

    Args:
        iterable: Futures, thenables, or plain values
        reactor: Reactor for the aggregate (None = default)

    Returns:
        Future fulfilled with the values in input order, or rejected with the
        first rejection reason

    Example:
        when_all([fetch_user(), fetch_orders(), 42]).then(
            lambda results: render(*results))
    """
    aggregate, futures = _start(iterable, reactor, future_type)
    if futures is None:
        return aggregate
    if not futures:
        aggregate.resolve([])
        return aggregate

    results: List[Any] = [None] * len(futures)
    remaining = len(futures)

    def make_on_value(index):
        def on_value(value):
            nonlocal remaining
            results[index] = value
            remaining -= 1
            if remaining == 0:
                aggregate.resolve(results)
        return on_value

    for index, future in enumerate(futures):
        future.then(make_on_value(index), aggregate.reject)

    return aggregate


def when_all_settled(iterable: Iterable[Any], reactor: Optional[Reactor] = None,
                     future_type: type = Future) -> Future:
    """
    Wait for all inputs to settle, whatever the outcome.

    Returns:
        Future fulfilled with a SettledResult per input, in input order
    """
    aggregate, futures = _start(iterable, reactor, future_type)
    if futures is None:
        return aggregate
    if not futures:
        aggregate.resolve([])
        return aggregate

    results: List[Optional[SettledResult]] = [None] * len(futures)
    remaining = len(futures)

    def record(index, outcome):
        nonlocal remaining
        results[index] = outcome
        remaining -= 1
        if remaining == 0:
            aggregate.resolve(results)

    for index, future in enumerate(futures):
        future.then(
            lambda value, index=index: record(index, SettledResult.fulfilled(value)),
            lambda reason, index=index: record(index, SettledResult.rejected(reason)),
        )

    return aggregate


def when_any(iterable: Iterable[Any], reactor: Optional[Reactor] = None,
             future_type: type = Future) -> Future:
    """
    Wait for the first input to fulfill.

    Returns:
        Future fulfilled with the first value, or rejected with an
        AggregateError holding every reason (settlement order) once all
        inputs have rejected. Empty input rejects immediately.
    """
    aggregate, futures = _start(iterable, reactor, future_type)
    if futures is None:
        return aggregate
    if not futures:
        aggregate.reject(AggregateError([]))
        return aggregate

    reasons: List[Any] = []

    def on_reason(reason):
        reasons.append(reason)
        if len(reasons) == len(futures):
            aggregate.reject(AggregateError(reasons))

    for future in futures:
        future.then(aggregate.resolve, on_reason)

    return aggregate


def race(iterable: Iterable[Any], reactor: Optional[Reactor] = None,
         future_type: type = Future) -> Future:
    """
    Adopt whichever input settles first.

    Returns:
        Future settled like the first input to settle. Empty input never settles.
    """
    aggregate, futures = _start(iterable, reactor, future_type)
    if futures is None:
        return aggregate

    for future in futures:
        future.then(aggregate.resolve, aggregate.reject)

    return aggregate
