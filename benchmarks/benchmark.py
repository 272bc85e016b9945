"""
Benchmarks comparing lazyiter chains with plain Python generator pipelines.

Every element crosses one ``next()`` call per stage, so these numbers show
the per-stage overhead of the pull protocol rather than any speedup:
    python benchmarks/benchmark.py
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any

from lazyiter import into_iter, iter_range, set_yield_interval

# ---------------------------------------------------------------------------
# Worker functions
# ---------------------------------------------------------------------------


def _square(x: int) -> int:
    return x * x


def _double(x: int) -> int:
    return x * 2


def _increment(x: int) -> int:
    return x + 1


def _is_odd(x: int) -> bool:
    return x % 2 == 1


def _not_divisible_by_3(x: int) -> bool:
    return x % 3 != 0


def _add(a: int, b: int) -> int:
    return a + b


# ---------------------------------------------------------------------------
# Benchmark harness
# ---------------------------------------------------------------------------


def benchmark(
    name: str,
    lazy_fn: Callable[[], Any],
    plain_fn: Callable[[], Any],
    iterations: int = 3,
):
    """
    Benchmark a lazyiter chain against its plain Python equivalent.

    Args:
        name: Name of the benchmark
        lazy_fn: Function using lazyiter
        plain_fn: Function using builtins and generator expressions
        iterations: Number of times to run each function
    """
    print(f"\n{'=' * 60}")
    print(f"Benchmark: {name}")
    print(f"{'=' * 60}")

    # Warm-up, and make sure both sides agree
    assert lazy_fn() == plain_fn(), name

    lazy_times = []
    for _ in range(iterations):
        start = time.perf_counter()
        lazy_fn()
        lazy_times.append(time.perf_counter() - start)

    plain_times = []
    for _ in range(iterations):
        start = time.perf_counter()
        plain_fn()
        plain_times.append(time.perf_counter() - start)

    avg_lazy = sum(lazy_times) / len(lazy_times)
    avg_plain = sum(plain_times) / len(plain_times)
    overhead = avg_lazy / avg_plain

    print(f"lazyiter (avg): {avg_lazy:.4f} seconds")
    print(f"Plain (avg):    {avg_plain:.4f} seconds")
    print(f"Overhead:       {overhead:.2f}x")

    return overhead


# ---------------------------------------------------------------------------
# Individual benchmarks
# ---------------------------------------------------------------------------


def bench_sum_of_squares():
    """Benchmark: Sum of squares."""
    N = 1_000_000

    def lazy():
        return iter_range(N).map(_square).sum()

    def plain():
        return sum(x * x for x in range(N))

    return benchmark("Sum of Squares", lazy, plain)


def bench_filter_sum():
    """Benchmark: Filter and sum."""
    N = 1_000_000

    def lazy():
        # filter drops odd numbers, keeping the even ones
        return iter_range(N).filter(_is_odd).sum()

    def plain():
        return sum(x for x in range(N) if x % 2 == 0)

    return benchmark("Filter Even Numbers and Sum", lazy, plain)


def bench_complex_pipeline():
    """Benchmark: Complex multi-stage pipeline."""
    N = 500_000

    def lazy():
        return (
            iter_range(N)
            .map(_double)
            .filter(_not_divisible_by_3)
            .map(_increment)
            .sum()
        )

    def plain():
        return sum((x * 2) + 1 for x in range(N) if (x * 2) % 3 == 0)

    return benchmark("Complex Pipeline", lazy, plain)


def bench_list_zip():
    """Benchmark: Zipping and enumerating lists."""
    N = 500_000
    left = list(range(N))
    right = list(range(N, 0, -1))

    def lazy():
        return into_iter(left).zip(right).enumerate().take(N // 2).count()

    def plain():
        return sum(1 for _ in zip(range(N // 2), enumerate(zip(left, right))))

    return benchmark("Zip, Enumerate and Take", lazy, plain)


def bench_reduce():
    """Benchmark: Reduce operation."""
    N = 1_000_000

    def lazy():
        return iter_range(1, N).reduce(_add).unwrap()

    def plain():
        result = 1
        for x in range(2, N):
            result = result + x
        return result

    return benchmark("Reduce", lazy, plain)


def yield_interval_benchmark():
    """Benchmark a bridged stream with different yield intervals."""
    print(f"\n{'=' * 60}")
    print("Stream Bridge Yield Interval Benchmark")
    print(f"{'=' * 60}")

    N = 200_000
    intervals = [0, 1, 10, 100, 1000]

    async def drain():
        return await iter_range(N).stream().map(_square).sum()

    for interval in intervals:
        set_yield_interval(interval)
        run_times = []
        for _ in range(3):
            start = time.perf_counter()
            asyncio.run(drain())
            run_times.append(time.perf_counter() - start)

        avg_time = sum(run_times) / len(run_times)
        print(f"Interval: {interval:4d}  Time: {avg_time:.4f}s")

    set_yield_interval(0)


def main():
    """Run all benchmarks."""
    print("lazyiter Benchmarks")
    print("=" * 60)
    print("These benchmarks compare lazyiter chains with plain generators.")
    print("=" * 60)

    overheads = []
    overheads.append(bench_sum_of_squares())
    overheads.append(bench_filter_sum())
    overheads.append(bench_complex_pipeline())
    overheads.append(bench_list_zip())
    overheads.append(bench_reduce())

    yield_interval_benchmark()

    print(f"\n{'=' * 60}")
    print("Summary")
    print(f"{'=' * 60}")
    print(f"Average overhead: {sum(overheads) / len(overheads):.2f}x")
    print(f"Best overhead:    {min(overheads):.2f}x")
    print(f"Worst overhead:   {max(overheads):.2f}x")


if __name__ == "__main__":
    main()
