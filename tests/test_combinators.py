"""
Comprehensive tests for future combinators (combinators.py).

Tests:
- when_all / Future.all: wait for all inputs
- when_all_settled / Future.all_settled: collect every outcome
- when_any / Future.any: first fulfillment or AggregateError
- race / Future.race: first settlement
- Non-iterable inputs
- Uses randomized inputs per project guidelines
"""

import random
import string

import pytest

from pledge import (
    Future, SettledResult, TaskQueue, deferred,
    AggregateError, NotIterableError,
)
from pledge.core.combinators import when_all, when_all_settled, when_any, race


# =============================================================================
# Test Fixtures and Helpers
# =============================================================================

class Thenable:
    """Foreign deferred object that fulfills synchronously."""

    def __init__(self, value):
        self.value = value

    def then(self, on_value, on_reason):
        on_value(self.value)


def random_string(length: int = 10) -> str:
    """Generate a random string."""
    return ''.join(random.choices(string.ascii_letters, k=length))


def random_int(min_val: int = -1000, max_val: int = 1000) -> int:
    """Generate a random integer."""
    return random.randint(min_val, max_val)


# =============================================================================
# when_all Tests
# =============================================================================

class TestWhenAll:
    """Tests for when_all combinator."""

    def test_when_all_basic(self, drain):
        """Test waiting for all futures to complete."""
        values = [random_int() for _ in range(5)]
        aggregate = Future.all([Future.resolve(v) for v in values])
        drain()
        assert aggregate.get() == values

    def test_when_all_empty_list(self):
        """Test with empty list of futures."""
        aggregate = Future.all([])
        assert aggregate.is_fulfilled()
        assert aggregate.get() == []

    def test_when_all_preserves_order(self, drain):
        """Test that results are in input order, not completion order."""
        slow, fast, medium = deferred(), deferred(), deferred()
        aggregate = when_all([slow.future, fast.future, medium.future])

        fast.resolve("fast")
        drain()
        medium.resolve("medium")
        drain()
        assert aggregate.is_pending()

        slow.resolve("slow")
        drain()
        assert aggregate.get() == ["slow", "fast", "medium"]

    def test_when_all_randomized_order(self, drain):
        """Test with inputs settled in random order."""
        count = random.randint(5, 20)
        handles = [deferred() for _ in range(count)]
        values = [random_int() for _ in range(count)]
        aggregate = Future.all([h.future for h in handles])

        order = list(range(count))
        random.shuffle(order)
        for index in order:
            handles[index].resolve(values[index])
        drain()

        assert aggregate.get() == values

    def test_when_all_mixed_types(self, drain):
        """Test with futures, thenables and plain values."""
        aggregate = Future.all([
            42,
            Future.resolve("hello"),
            Thenable([1, 2, 3]),
            {"key": "value"},
            None,
        ])
        drain()
        assert aggregate.get() == [42, "hello", [1, 2, 3], {"key": "value"}, None]

    def test_when_all_first_rejection_wins(self, drain):
        """Test that the first rejection rejects the aggregate."""
        first, second = deferred(), deferred()
        aggregate = Future.all([first.future, second.future])

        second.reject("second failed")
        drain()
        assert aggregate.is_rejected()
        assert aggregate.result == "second failed"

        first.resolve(1)
        drain()
        assert aggregate.result == "second failed"

    def test_when_all_later_rejection_ignored(self, drain):
        """Test that only the first reason is kept."""
        a, b = deferred(), deferred()
        aggregate = Future.all([a.future, b.future])
        a.reject("a")
        b.reject("b")
        drain()
        assert aggregate.result == "a"

    def test_when_all_generator_input(self, drain):
        """Test that any iterable is accepted."""
        aggregate = Future.all(Future.resolve(i * i) for i in range(5))
        drain()
        assert aggregate.get() == [0, 1, 4, 9, 16]

    def test_when_all_input_snapshot(self, drain):
        """Test that the input is materialized eagerly."""
        items = [Future.resolve(1), Future.resolve(2)]
        aggregate = Future.all(items)
        items.append(Future.resolve(3))
        drain()
        assert aggregate.get() == [1, 2]

    def test_when_all_not_iterable(self):
        """Test a non-iterable argument."""
        aggregate = Future.all(42)
        assert aggregate.is_rejected()
        assert isinstance(aggregate.result, NotIterableError)
        assert isinstance(aggregate.result, TypeError)
        assert aggregate.result.message == "Argument is not iterable"

    def test_when_all_iteration_error(self):
        """Test an iterable that fails while being consumed."""
        error = RuntimeError("broken source")

        def source():
            yield 1
            raise error

        aggregate = Future.all(source())
        assert aggregate.result is error

    def test_when_all_explicit_reactor(self):
        """Test passing a reactor to the combinator."""
        other = TaskQueue()
        aggregate = when_all([1, 2], reactor=other)
        assert aggregate.reactor is other
        other.run_until_idle()
        assert aggregate.get() == [1, 2]

    def test_when_all_many(self, drain):
        """Test many parallel inputs."""
        aggregate = Future.all([Future.resolve(i) for i in range(100)])
        drain()
        assert aggregate.get() == list(range(100))


# =============================================================================
# when_all_settled Tests
# =============================================================================

class TestWhenAllSettled:
    """Tests for when_all_settled combinator."""

    def test_all_settled_mixed(self, drain):
        """Test collecting fulfilled and rejected outcomes."""
        aggregate = Future.all_settled([Future.resolve(1), Future.reject("e")])
        drain()
        assert [r.model_dump() for r in aggregate.get()] == [
            {"status": "fulfilled", "value": 1},
            {"status": "rejected", "value": "e"},
        ]

    def test_all_settled_result_models(self, drain):
        """Test SettledResult helpers."""
        aggregate = when_all_settled([Future.resolve(1), Future.reject("e")])
        drain()
        ok, bad = aggregate.get()
        assert ok == SettledResult.fulfilled(1)
        assert ok.reason is None
        assert bad == SettledResult(status="rejected", value="e")
        assert bad.reason == "e"

    def test_all_settled_preserves_order(self, drain):
        """Test input order regardless of completion order."""
        a, b, c = deferred(), deferred(), deferred()
        aggregate = Future.all_settled([a.future, b.future, c.future])
        c.reject("c")
        b.resolve("b")
        a.resolve("a")
        drain()
        assert [(r.status, r.value) for r in aggregate.get()] == [
            ("fulfilled", "a"),
            ("fulfilled", "b"),
            ("rejected", "c"),
        ]

    def test_all_settled_never_rejects(self, drain):
        """Test that all rejections still fulfill the aggregate."""
        reasons = [random_string() for _ in range(5)]
        aggregate = Future.all_settled([Future.reject(r) for r in reasons])
        drain()
        assert aggregate.is_fulfilled()
        assert [r.reason for r in aggregate.get()] == reasons

    def test_all_settled_waits_for_all(self, drain):
        """Test that the aggregate waits for the last input."""
        pending = deferred()
        aggregate = Future.all_settled([Future.resolve(1), pending.future])
        drain()
        assert aggregate.is_pending()
        pending.reject("late")
        drain()
        assert aggregate.is_fulfilled()

    def test_all_settled_empty(self):
        """Test with empty input."""
        assert Future.all_settled([]).get() == []

    def test_all_settled_not_iterable(self):
        """Test a non-iterable argument."""
        aggregate = Future.all_settled(None)
        assert isinstance(aggregate.result, NotIterableError)


# =============================================================================
# when_any Tests
# =============================================================================

class TestWhenAny:
    """Tests for when_any combinator."""

    def test_when_any_first_fulfillment(self, drain):
        """Test that the first fulfilled input wins."""
        slow, fast = deferred(), deferred()
        aggregate = Future.any([slow.future, fast.future])
        fast.resolve("fast")
        drain()
        slow.resolve("slow")
        drain()
        assert aggregate.get() == "fast"

    def test_when_any_skips_rejections(self, drain):
        """Test that rejections before a fulfillment are ignored."""
        aggregate = when_any([Future.reject("x"), Future.resolve(2)])
        drain()
        assert aggregate.get() == 2

    def test_when_any_empty(self):
        """Test with empty input."""
        aggregate = Future.any([])
        assert aggregate.is_rejected()
        assert isinstance(aggregate.result, AggregateError)
        assert aggregate.result.errors == []
        assert aggregate.result.message == "All promises were rejected"

    def test_when_any_all_rejected(self, drain):
        """Test that reasons are kept in settlement order."""
        a, b = deferred(), deferred()
        aggregate = Future.any([a.future, b.future])
        b.reject("b")
        a.reject("a")
        drain()
        assert isinstance(aggregate.result, AggregateError)
        assert aggregate.result.errors == ["b", "a"]

    def test_when_any_all_rejected_input_order(self, drain):
        """Test reasons for inputs that were already rejected."""
        reasons = [random_string() for _ in range(3)]
        aggregate = Future.any([Future.reject(r) for r in reasons])
        drain()
        assert aggregate.result.errors == reasons

    def test_when_any_not_iterable(self):
        """Test a non-iterable argument."""
        aggregate = Future.any(object())
        assert isinstance(aggregate.result, NotIterableError)


# =============================================================================
# race Tests
# =============================================================================

class TestRace:
    """Tests for race combinator."""

    def test_race_first_fulfillment(self, drain):
        """Test that the first settlement is adopted."""
        slow, fast = deferred(), deferred()
        aggregate = Future.race([slow.future, fast.future])
        fast.resolve("fast")
        drain()
        slow.resolve("slow")
        drain()
        assert aggregate.get() == "fast"

    def test_race_first_rejection(self, drain):
        """Test that a rejection can win the race."""
        slow, fast = deferred(), deferred()
        aggregate = race([slow.future, fast.future])
        fast.reject("fast failed")
        slow.resolve("slow")
        drain()
        assert aggregate.is_rejected()
        assert aggregate.result == "fast failed"

    def test_race_plain_value(self, drain):
        """Test that a plain value wins against a pending future."""
        aggregate = Future.race([deferred().future, 7])
        drain()
        assert aggregate.get() == 7

    def test_race_empty_never_settles(self, drain):
        """Test that an empty race stays pending."""
        aggregate = Future.race([])
        drain(max_turns=100)
        assert aggregate.is_pending()

    def test_race_not_iterable(self):
        """Test a non-iterable argument."""
        aggregate = Future.race(3.5)
        assert isinstance(aggregate.result, NotIterableError)
