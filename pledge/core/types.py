"""Core types for futures."""

from enum import Enum
from dataclasses import dataclass
from typing import Any, Callable, Literal, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from .future import Future


class FutureState(Enum):
    """Settlement states. Only PENDING may transition, and only once."""

    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class SettledResult(BaseModel):
    """Outcome of one input of ``all_settled``.

    Both outcomes carry their payload under ``value``; ``reason`` is a
    convenience view for rejected slots.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: Literal["fulfilled", "rejected"]
    value: Any = None

    @property
    def reason(self) -> Any:
        return self.value if self.status == "rejected" else None

    @classmethod
    def fulfilled(cls, value: Any) -> "SettledResult":
        return cls(status=FutureState.FULFILLED.value, value=value)

    @classmethod
    def rejected(cls, reason: Any) -> "SettledResult":
        return cls(status=FutureState.REJECTED.value, value=reason)


@dataclass
class Deferred:
    """A future together with the handles that settle it from outside.

    Attributes:
        future: The pending future.
        resolve: Fulfills ``future``.
        reject: Rejects ``future``.
    """
    future: "Future"
    resolve: Callable[[Any], None]
    reject: Callable[[Any], None]

    @property
    def promise(self) -> "Future":
        """Alias of ``future`` for Promises/A+ adapters."""
        return self.future
