"""
Future Chaining Demo

Demonstrates Promises/A+ futures with explicit chains, combinators, and
Python async/await.
"""

import asyncio
from pledge import (
    Future, TaskQueue, AsyncioReactor, AggregateError, deferred, use_reactor
)


# Example 1: Explicit .then() chaining on a deterministic task queue
def example_explicit_chaining():
    """Demo of explicit continuation chains."""
    print("\n=== Example 1: Explicit Chaining ===")

    queue = TaskQueue()
    chained = (Future.resolve(10, reactor=queue)
               .then(lambda x: x * 2)        # 20
               .then(lambda x: x + 5)        # 25
               .then(lambda x: f"Result: {x}"))

    print(f"Before draining: {chained!r}")
    ran = queue.run_until_idle()
    print(f"After {ran} jobs: {chained.get()}")


# Example 2: Error recovery with catch/finally_
def example_error_handling():
    """Demo of error handling in futures."""
    print("\n=== Example 2: Error Handling ===")

    queue = TaskQueue()

    def fail(x):
        raise ValueError(f"cannot handle {x}")

    recovered = (Future.resolve(1, reactor=queue)
                 .then(fail)
                 .catch(lambda e: f"recovered from {e}")
                 .finally_(lambda: print("cleanup ran")))

    queue.run_until_idle()
    print(f"Recovered: {recovered.get()}")


# Example 3: Combinators
def example_combinators():
    """Demo of all / all_settled / any / race."""
    print("\n=== Example 3: Combinators ===")

    queue = TaskQueue()
    with use_reactor(queue):
        slow = deferred()
        fast = deferred()

        everything = Future.all([slow.future, fast.future, 3])
        settled = Future.all_settled([Future.resolve(1), Future.reject("e")])
        first = Future.race([slow.future, fast.future])
        nothing = Future.any([Future.reject("a"), Future.reject("b")])

        fast.resolve("fast")
        slow.resolve("slow")
        queue.run_until_idle()

    print(f"all: {everything.get()}")
    print(f"all_settled: {[r.model_dump() for r in settled.get()]}")
    print(f"race: {first.get()}")
    try:
        nothing.get()
    except AggregateError as e:
        print(f"any: {e.message} {e.errors}")


# Example 4: Async/await on an asyncio reactor
async def example_async_await():
    """Demo of awaiting futures from asyncio code."""
    print("\n=== Example 4: Async/Await ===")

    reactor = AsyncioReactor()
    d = deferred(reactor=reactor)
    asyncio.get_running_loop().call_later(0.01, d.resolve, 42)

    result = await d.future.then(lambda x: x + 1)
    print(f"Awaited: {result}")


def main():
    example_explicit_chaining()
    example_error_handling()
    example_combinators()
    asyncio.run(example_async_await())


if __name__ == "__main__":
    main()
