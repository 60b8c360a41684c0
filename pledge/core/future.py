"""
Promises/A+ Future

A value that may not be available yet, with continuation chaining and
adoption of foreign thenables. Reactions always run through a Reactor,
never inline.
"""

import asyncio
import logging
import types
from typing import TypeVar, Generic, Callable, Iterable, List, Any, Optional

from .exceptions import FuturePendingError, RejectedError
from .reactor import Reactor, TaskQueue, get_reactor
from .resolution import resolve_future
from .types import Deferred, FutureState, SettledResult

logger = logging.getLogger(__name__)

T = TypeVar('T')

Executor = Callable[[Callable[[Any], None], Callable[[Any], None]], Any]


class hybridmethod:
    """
    Method with one body for instance access and another for class access.

    ``Future.resolve(x)`` builds a future; ``future.resolve(x)`` settles one.
    """

    def __init__(self, instance_func: Callable, class_func: Optional[Callable] = None):
        self.instance_func = instance_func
        self.class_func = class_func
        self.__doc__ = instance_func.__doc__

    def classmethod(self, class_func: Callable) -> 'hybridmethod':
        self.class_func = class_func
        return self

    def __get__(self, obj, owner):
        if obj is None:
            return types.MethodType(self.class_func, owner)
        return types.MethodType(self.instance_func, obj)


def as_exception(reason: Any) -> BaseException:
    """Return reason itself if it can be raised, else wrap it in RejectedError."""
    if isinstance(reason, BaseException):
        return reason
    return RejectedError(reason)


class Future(Generic[T]):
    """
    Promises/A+ future.

    Settles at most once, to either a value or a rejection reason. Handlers
    attached with then() run on the future's reactor after the current
    synchronous frame, in the order they were attached.

    Examples:
        # Executor style
        f = Future(lambda resolve, reject: resolve(21))
        f.then(lambda x: x * 2)

        # Factories
        Future.resolve(1).then(print)
        Future.all([Future.resolve(1), 2])

        # Async/await (asyncio bridge)
        result = await f
    """

    def __init__(self, executor: Optional[Executor] = None, reactor: Optional[Reactor] = None):
        """
        Create a future.

        Args:
            executor: Called synchronously with (resolve, reject). An exception
                raised by it rejects the future. None leaves the future pending.
            reactor: Scheduler for reactions (None = default reactor)
        """
        self._state = FutureState.PENDING
        self._result: Any = None
        self._fulfilled_reactions: List[Callable[[], None]] = []
        self._rejected_reactions: List[Callable[[], None]] = []
        self._reactor = reactor if reactor is not None else get_reactor()

        if executor is not None:
            try:
                executor(self.resolve, self.reject)
            except Exception as e:
                self.reject(e)

    # State transitions

    @hybridmethod
    def resolve(self, value: Any = None) -> None:
        """Fulfill with value. No-op once settled."""
        self._settle(FutureState.FULFILLED, value)

    @resolve.classmethod
    def resolve(cls, value: Any = None, reactor: Optional[Reactor] = None) -> 'Future':
        """
        Normalize value into a future.

        A future of this type is returned unchanged. A thenable is adopted by
        a new future. Anything else gives a new fulfilled future.
        """
        if isinstance(value, cls):
            return value
        future = cls(reactor=reactor)
        resolve_future(future, value)
        return future

    @hybridmethod
    def reject(self, reason: Any = None) -> None:
        """Reject with reason. No-op once settled."""
        self._settle(FutureState.REJECTED, reason)

    @reject.classmethod
    def reject(cls, reason: Any = None, reactor: Optional[Reactor] = None) -> 'Future':
        """Create a future already rejected with reason."""
        future = cls(reactor=reactor)
        future.reject(reason)
        return future

    def _settle(self, state: FutureState, result: Any) -> None:
        if self._state is not FutureState.PENDING:
            return
        self._state = state
        self._result = result

        reactions = (self._fulfilled_reactions if state is FutureState.FULFILLED
                     else self._rejected_reactions)
        self._fulfilled_reactions = []
        self._rejected_reactions = []

        for reaction in reactions:
            self._reactor.schedule(reaction)
        logger.debug("Future settled as %s, scheduled %d reactions", state.value, len(reactions))

    # Chaining

    def then(self, on_fulfilled: Optional[Callable[[Any], Any]] = None,
             on_rejected: Optional[Callable[[Any], Any]] = None) -> 'Future':
        """
        Attach continuation handlers.

        Args:
            on_fulfilled: Called with the value (non-callable = pass value through)
            on_rejected: Called with the reason (non-callable = pass reason through)

        Returns:
            New future settled from the handler's return value

        Example:
            future.then(lambda x: x * 2).then(lambda y: str(y))
        """
        child = self.__class__(reactor=self._reactor)
        fulfilled_job = self._reaction(child, on_fulfilled, FutureState.FULFILLED)
        rejected_job = self._reaction(child, on_rejected, FutureState.REJECTED)

        if self._state is FutureState.FULFILLED:
            self._reactor.schedule(fulfilled_job)
        elif self._state is FutureState.REJECTED:
            self._reactor.schedule(rejected_job)
        else:
            self._fulfilled_reactions.append(fulfilled_job)
            self._rejected_reactions.append(rejected_job)

        return child

    def _reaction(self, child: 'Future', handler: Any, state: FutureState) -> Callable[[], None]:
        def job():
            if not callable(handler):
                if state is FutureState.FULFILLED:
                    child.resolve(self._result)
                else:
                    child.reject(self._result)
                return

            try:
                value = handler(self._result)
            except Exception as e:
                child.reject(e)
                return
            resolve_future(child, value)

        return job

    def catch(self, on_rejected: Optional[Callable[[Any], Any]] = None) -> 'Future':
        """Shorthand for then(None, on_rejected)."""
        return self.then(None, on_rejected)

    def finally_(self, on_finally: Optional[Callable[[], Any]] = None) -> 'Future':
        """
        Run on_finally() on either outcome, then pass the outcome through.

        If on_finally returns a future or thenable, it is waited for first. A
        raise from on_finally, or a rejection of what it returned, replaces
        the original outcome.
        """
        if not callable(on_finally):
            return self.then(on_finally, on_finally)

        cls = self.__class__
        reactor = self._reactor

        def on_value(value):
            return cls.resolve(on_finally(), reactor=reactor).then(lambda _: value)

        def on_reason(reason):
            return cls.resolve(on_finally(), reactor=reactor).then(
                lambda _: cls.reject(reason, reactor=reactor))

        return self.then(on_value, on_reason)

    # Inspection

    @property
    def state(self) -> FutureState:
        return self._state

    @property
    def result(self) -> Any:
        """Value or reason once settled, None while pending."""
        return self._result

    @property
    def reactor(self) -> Reactor:
        return self._reactor

    def is_pending(self) -> bool:
        return self._state is FutureState.PENDING

    def is_fulfilled(self) -> bool:
        return self._state is FutureState.FULFILLED

    def is_rejected(self) -> bool:
        return self._state is FutureState.REJECTED

    def is_settled(self) -> bool:
        return self._state is not FutureState.PENDING

    def get(self) -> T:
        """
        Get the value without waiting.

        Returns:
            The fulfillment value

        Raises:
            The rejection reason (wrapped in RejectedError if not an exception),
            or FuturePendingError if not settled yet
        """
        if self._state is FutureState.FULFILLED:
            return self._result
        if self._state is FutureState.REJECTED:
            raise as_exception(self._result)
        raise FuturePendingError()

    def __await__(self):
        """
        Make future awaitable.

        Integrates with Python's asyncio event loop. A TaskQueue reactor is
        flushed before suspending, and while suspended the running loop
        drains it whenever new jobs are scheduled, so a future settled later
        (from a callback or another task) still wakes the awaiter.
        """
        async def _await_impl():
            reactor = self._reactor
            reactor.flush()
            if self._state is not FutureState.PENDING:
                return self.get()

            loop = asyncio.get_running_loop()
            py_future = loop.create_future()

            def on_value(value):
                if not py_future.done():
                    py_future.set_result(value)

            def on_reason(reason):
                if not py_future.done():
                    py_future.set_exception(as_exception(reason))

            drain_pending = False

            def drain():
                nonlocal drain_pending
                if py_future.done():
                    drain_pending = False
                    return
                reactor.run_until_idle()
                drain_pending = False
                if reactor.pending and not py_future.done():
                    drain_soon()

            def drain_soon():
                nonlocal drain_pending
                if not drain_pending:
                    drain_pending = True
                    loop.call_soon_threadsafe(drain)

            self.then(on_value, on_reason)
            reactor.flush()
            if not isinstance(reactor, TaskQueue):
                return await py_future

            reactor.add_listener(drain_soon)
            try:
                if reactor.pending:
                    drain_soon()
                return await py_future
            finally:
                reactor.remove_listener(drain_soon)

        return _await_impl().__await__()

    def __repr__(self) -> str:
        if self._state is FutureState.PENDING:
            return "<Future pending>"
        return f"<Future {self._state.value}: {self._result!r}>"

    # Combinators

    @classmethod
    def all(cls, iterable: Iterable[Any], reactor: Optional[Reactor] = None) -> 'Future[List[Any]]':
        """Fulfill with every value in input order, or reject with the first reason."""
        from .combinators import when_all
        return when_all(iterable, reactor=reactor, future_type=cls)

    @classmethod
    def all_settled(cls, iterable: Iterable[Any],
                    reactor: Optional[Reactor] = None) -> 'Future[List[SettledResult]]':
        """Fulfill with a SettledResult per input once all have settled."""
        from .combinators import when_all_settled
        return when_all_settled(iterable, reactor=reactor, future_type=cls)

    @classmethod
    def any(cls, iterable: Iterable[Any], reactor: Optional[Reactor] = None) -> 'Future':
        """Fulfill with the first value, or reject with AggregateError if all reject."""
        from .combinators import when_any
        return when_any(iterable, reactor=reactor, future_type=cls)

    @classmethod
    def race(cls, iterable: Iterable[Any], reactor: Optional[Reactor] = None) -> 'Future':
        """Adopt whichever input settles first."""
        from .combinators import race
        return race(iterable, reactor=reactor, future_type=cls)

    @classmethod
    def deferred(cls, reactor: Optional[Reactor] = None) -> Deferred:
        """Create a pending future plus external resolve/reject handles."""
        return deferred(reactor=reactor, future_type=cls)


def resolve(value: Any = None, reactor: Optional[Reactor] = None) -> Future:
    """Normalize value into a future (see Future.resolve)."""
    return Future.resolve(value, reactor=reactor)


def reject(reason: Any = None, reactor: Optional[Reactor] = None) -> Future:
    """Create a rejected future."""
    return Future.reject(reason, reactor=reactor)


def deferred(reactor: Optional[Reactor] = None, future_type: type = Future) -> Deferred:
    """
    Create a future whose settlement is triggered from outside.

    Example:
        d = deferred()
        d.future.then(print)
        d.resolve("done")
    """
    handles = {}

    def executor(resolve, reject):
        handles['resolve'] = resolve
        handles['reject'] = reject

    future = future_type(executor, reactor=reactor)
    return Deferred(future=future, resolve=handles['resolve'], reject=handles['reject'])
