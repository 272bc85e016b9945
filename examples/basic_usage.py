"""
Basic usage examples for lazyiter.

This demonstrates the core functionality of the iterator and stream library.
"""

import asyncio

from lazyiter import (
    Nothing,
    Some,
    into_iter,
    into_stream,
    iter_irange,
    iter_range,
    set_yield_interval,
    zip_iters,
)


def example_map_reduce():
    """Example: Map and reduce operations."""
    print("=== Map and Reduce Example ===")

    # Sum of squares from 0 to 999
    result = iter_range(1000).map(lambda x: x * x).sum()
    print(f"Sum of squares 0-999: {result}")

    # reduce is seeded with the first element and returns an Opt
    product = iter_irange(1, 10).reduce(lambda a, b: a * b)
    print(f"Product of 1-10: {product.unwrap()}")


def example_filter():
    """Example: Filtering elements."""
    print("\n=== Filter Example ===")

    # filter discards the elements its predicate accepts
    odds = iter_range(10).filter(lambda x: x % 2 == 0).collect()
    print(f"Odd numbers below 10: {odds}")

    # filter_map keeps the Some payloads
    numbers = (
        into_iter(["1", "two", "3", "four"])
        .filter_map(lambda s: Some(int(s)) if s.isdigit() else Nothing)
        .collect()
    )
    print(f"Parsed numbers: {numbers}")


def example_take_enumerate_zip():
    """Example: Bounding, indexing and combining iterators."""
    print("\n=== Take / Enumerate / Zip Example ===")

    words = ["hello", "world", "lazy", "iterators"]
    print(f"First two: {into_iter(words).take(2).collect()}")
    print(f"Numbered from 1: {into_iter(words).enumerate(1).collect()}")

    # zip pulls every member each round and stops at the shortest
    pairs = zip_iters(words, iter_range(100)).collect()
    print(f"Zipped: {pairs}")


def example_search():
    """Example: Searching and aggregating."""
    print("\n=== Search Example ===")

    words = ["a", "abc", "ab", "abcdef", "abcde"]
    first_long = into_iter(words).find(lambda word, index: len(word) > 3)
    print(f"First word longer than 3: {first_long}")
    print(f"Third word: {into_iter(words).nth(3)}")
    print(f"Joined: {into_iter(words).join(', ')}")
    print(f"Any divisible by 7 (1-99): {iter_range(1, 100).any(lambda x: x % 7 == 0)}")


def example_early_exit():
    """Example: Releasing a source early."""
    print("\n=== Early Exit Example ===")

    def lines():
        try:
            for number in range(1_000_000):
                yield f"line {number}"
        finally:
            print("Source closed")

    with into_iter(lines()).map(str.upper) as upper:
        print(next(upper))
        print(next(upper))


async def example_streams():
    """Example: Async streams with coroutine callbacks."""
    print("\n=== Stream Example ===")

    async def fetch(x):
        await asyncio.sleep(0)
        return x * 10

    async def ticks():
        for tick in range(5):
            await asyncio.sleep(0)
            yield tick

    values = await into_stream(ticks()).map(fetch).collect()
    print(f"Fetched: {values}")

    # Hand control back to the loop every 100 pulls from a sync source
    set_yield_interval(100)
    total = await iter_range(10_000).stream().filter(lambda x: x % 3).sum()
    print(f"Sum of multiples of 3 below 10,000: {total}")

    replay = await into_stream(ticks()).to_iter()
    print(f"Replayed synchronously: {replay.collect()}")


def main():
    """Run all examples."""
    print("lazyiter - Lazy Iterators and Streams for Python\n")

    example_map_reduce()
    example_filter()
    example_take_enumerate_zip()
    example_search()
    example_early_exit()
    asyncio.run(example_streams())

    print("\n=== All Examples Complete ===")


if __name__ == "__main__":
    main()
