"""
Resolution Procedure

Settles a future from an arbitrary handler return value: another future,
a foreign thenable, or a plain value.
"""

import logging
from typing import Any, Callable, List, Optional, TYPE_CHECKING

from .exceptions import ChainingCycleError

if TYPE_CHECKING:
    from .future import Future

logger = logging.getLogger(__name__)

# Exact instances of these built-ins never carry a then member. Subclasses may.
SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes)

_UNSET = object()


class Latch:
    """One-shot gate. Only the first try_acquire() succeeds."""

    __slots__ = ("_open",)

    def __init__(self):
        self._open = True

    def try_acquire(self) -> bool:
        if not self._open:
            return False
        self._open = False
        return True

    @property
    def consumed(self) -> bool:
        return not self._open

    def __repr__(self) -> str:
        return f"Latch(consumed={self.consumed})"


def read_then(value: Any) -> Optional[Any]:
    """
    Read the continuation member of a candidate thenable.

    Returns:
        The ``then`` member, or None when the value has none

    Raises:
        Whatever the member lookup raises, except AttributeError
    """
    if type(value) in SCALAR_TYPES:
        return None
    try:
        return getattr(value, "then")
    except AttributeError:
        return None


def is_thenable(value: Any) -> bool:
    """Check whether value exposes a callable ``then``."""
    try:
        return callable(read_then(value))
    except Exception:
        return False


class _ThenableCall:
    """
    One guarded invocation of a foreign ``then``.

    Both callbacks and the exception boundary around the call share a
    single latch. A value delivered while ``then`` is still on the stack is
    parked in ``adopted`` for the caller's work list instead of recursing.
    """

    def __init__(self, target: "Future"):
        self.target = target
        self.latch = Latch()
        self.adopted: Any = _UNSET
        self._in_call = False

    def on_value(self, value: Any) -> None:
        if not self.latch.try_acquire():
            return
        if self._in_call:
            self.adopted = value
        else:
            resolve_future(self.target, value)

    def on_reason(self, reason: Any) -> None:
        if not self.latch.try_acquire():
            return
        self.target.reject(reason)

    def invoke(self, then: Callable[..., Any]) -> None:
        self._in_call = True
        try:
            then(self.on_value, self.on_reason)
        except Exception as e:
            if self.latch.try_acquire():
                self.target.reject(e)
        finally:
            self._in_call = False


def resolve_future(target: "Future", value: Any) -> None:
    """
    Settle ``target`` according to ``value``.

    - ``value is target``: reject with ChainingCycleError
    - a Future: adopt its eventual state
    - an object with a callable ``then``: call it once, first signal wins
    - anything else: fulfill with ``value``

    Thenables that resolve synchronously with further thenables are
    unwound iteratively, so nesting depth does not grow the stack.

    Args:
        target: Future to settle
        value: Handler return value
    """
    from .future import Future

    work: List[Any] = [value]
    while work:
        value = work.pop()

        if value is target:
            logger.debug("Chaining cycle detected, rejecting %s", type(target).__name__)
            target.reject(ChainingCycleError())
            return

        if isinstance(value, Future):
            value.then(lambda inner: resolve_future(target, inner), target.reject)
            return

        try:
            then = read_then(value)
        except Exception as e:
            target.reject(e)
            return

        if not callable(then):
            target.resolve(value)
            return

        call = _ThenableCall(target)
        call.invoke(then)
        if call.adopted is not _UNSET:
            work.append(call.adopted)
