"""Future exception hierarchy."""

from typing import Any, List, Optional


class PledgeError(Exception):
    """Base exception for all future operations."""

    def __init__(self, message: str, code: Optional[int] = None, detail: Optional[str] = None):
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(message)


class ChainingCycleError(PledgeError, TypeError):
    """A handler returned the very future it was meant to settle."""

    def __init__(self, message: str = "Chaining cycle detected for promise", **kwargs):
        super().__init__(message, **kwargs)


class NotIterableError(PledgeError, TypeError):
    """Combinator input could not be iterated."""

    def __init__(self, message: str = "Argument is not iterable", **kwargs):
        super().__init__(message, **kwargs)


class AggregateError(PledgeError):
    """Every input of ``any`` rejected.

    Attributes:
        errors: Rejection reasons in the order the inputs settled.
    """

    def __init__(self, errors: List[Any], message: str = "All promises were rejected", **kwargs):
        self.errors = list(errors)
        super().__init__(message, **kwargs)

    def __repr__(self) -> str:
        return f"AggregateError({self.errors!r})"


class RejectedError(PledgeError):
    """Raised in place of a rejection reason that is not an exception."""

    def __init__(self, reason: Any):
        self.reason = reason
        super().__init__(f"Future rejected with {reason!r}")


class FuturePendingError(PledgeError):
    """Value requested from a future that has not settled."""

    def __init__(self, message: str = "Future not ready", **kwargs):
        super().__init__(message, **kwargs)
