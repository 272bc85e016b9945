"""
Asynchronous lazy streams.

``Stream`` mirrors ``Iter`` for asyncio code: the same stages and terminal
operations, with every protocol call awaitable. User callables may be
plain functions or coroutine functions; awaitable results are awaited
before use.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from .option import Nothing, Opt, Some
from .protocols import AsyncProducer, PullResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")

type MaybeAwaitable[V] = V | Awaitable[V]


async def resolve(value: MaybeAwaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


class Stream[T](ABC):
    """
    Base class for asynchronous lazy streams.

    Behaves exactly like :class:`~lazyiter.core.Iter`, including the
    exhaustion latch and the single forwarding of forced operations,
    except that ``next``, ``force_return`` and ``force_throw`` are
    coroutines.
    """

    _finished = False
    _forced = False

    # Pull protocol

    async def next(self) -> PullResult[T]:
        """Advance by exactly one element."""
        if self._finished or self._forced:
            return PullResult.exhausted()
        result = await self._pull()
        if result.done:
            self._finished = True
        return result

    async def force_return(self, value: Any = None) -> PullResult[T]:
        """Shut the chain down early, releasing upstream resources once."""
        if self._forced:
            return PullResult.exhausted(value)
        self._forced = True
        logger.debug("Forced return on %s", type(self).__name__)
        result = await self._forced_return(value)
        return PullResult.exhausted(value) if self._finished else result

    async def force_throw(self, error: BaseException) -> PullResult[T]:
        """Propagate an external failure into the chain."""
        if self._forced:
            return PullResult.exhausted()
        self._forced = True
        logger.debug("Forced throw of %r on %s", error, type(self).__name__)
        result = await self._forced_throw(error)
        return PullResult.exhausted() if self._finished else result

    @abstractmethod
    async def _pull(self) -> PullResult[T]: ...

    async def _forced_return(self, value: Any) -> PullResult[T]:
        return PullResult.exhausted(value)

    async def _forced_throw(self, error: BaseException) -> PullResult[T]:
        return PullResult.exhausted()

    # Python iteration

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        result = await self.next()
        if result.done:
            raise StopAsyncIteration
        return result.value

    async def aclose(self) -> None:
        """Release upstream resources; same as ``force_return()``."""
        await self.force_return()

    async def __aenter__(self) -> Stream[T]:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.force_return()

    @asynccontextmanager
    async def _release_on_error(self):
        try:
            yield
        except BaseException:
            # The original failure wins over one raised while releasing.
            try:
                await self.force_return()
            except Exception:
                logger.warning(
                    "Error while releasing %s after a failure",
                    type(self).__name__,
                    exc_info=True,
                )
            raise

    # Constructors

    @staticmethod
    def of(source: AsyncIterable[T] | Iterable[T] | AsyncProducer[T]) -> Stream[T]:
        """Wrap an async iterable, iterable or pull-protocol object."""
        from .adapters import into_stream

        return into_stream(source)

    @staticmethod
    def once(value: T) -> Stream[T]:
        """A stream producing ``value`` a single time."""
        from .producers import OnceStream

        return OnceStream(value)

    @staticmethod
    def never() -> Stream[Any]:
        """The shared, permanently exhausted stream."""
        from .producers import NEVER_STREAM

        return NEVER_STREAM

    # Stages

    def take(self, count: int) -> TakeStream[T]:
        """Yield at most ``count`` elements."""
        return TakeStream(self, count)

    def enumerate(self, start: int = 0) -> EnumerateStream[T]:
        """Pair each element with a running index starting at ``start``."""
        return EnumerateStream(self, start)

    def map(self, func: Callable[[T], MaybeAwaitable[U]]) -> MapStream[T, U]:
        """
        Apply a function to each element.

        Args:
            func: Function or coroutine function to apply

        Returns:
            A new stream of transformed elements
        """
        return MapStream(self, func)

    def awaited(self) -> MapStream[Any, Any]:
        """Await every element of a stream of awaitables."""
        return MapStream(self, _await_value)

    def filter(self, predicate: Callable[[T], MaybeAwaitable[bool]]) -> FilterStream[T]:
        """
        Drop the elements for which ``predicate`` returns True.

        As with :meth:`Iter.filter <lazyiter.core.Iter.filter>`, the
        predicate selects what to discard, the inverse of the builtin
        ``filter``.
        """
        return FilterStream(self, predicate)

    def filter_map(
        self, func: Callable[[T], MaybeAwaitable[Opt[U]]]
    ) -> FilterMapStream[T, U]:
        """Map each element to an ``Opt`` and keep only the ``Some`` payloads."""
        return FilterMapStream(self, func)

    def zip(self, *others: Any) -> ZipStream:
        """
        Advance this stream and ``others`` in lockstep.

        Every member is awaited on every round, in order, even after one of
        them is exhausted.
        """
        from .adapters import into_stream

        return ZipStream(self, *(into_stream(other) for other in others))

    # Terminal operations

    async def opt_next(self) -> Opt[T]:
        """Pull one element as an ``Opt``."""
        result = await self.next()
        return Nothing if result.done else Some(result.value)

    async def nth(self, n: int) -> Opt[T]:
        """Skip ``n - 1`` elements and return the next one."""
        for _ in range(1, n):
            if (await self.next()).done:
                return Nothing
        return await self.opt_next()

    async def all(self, predicate: Callable[[T], Any] | None = None) -> bool:
        """
        Check whether every element is truthy (or satisfies ``predicate``).

        The whole stream is always drained.
        """
        result = True
        async with self._release_on_error():
            async for value in self:
                if predicate is not None:
                    value = await resolve(predicate(value))
                result = bool(value) and result
        return result

    async def any(self, predicate: Callable[[T], Any] | None = None) -> bool:
        """
        Check whether any element is truthy (or satisfies ``predicate``).

        The whole stream is always drained.
        """
        result = False
        async with self._release_on_error():
            async for value in self:
                if predicate is not None:
                    value = await resolve(predicate(value))
                result = bool(value) or result
        return result

    async def sum(self) -> T:
        """Sum all elements, starting from 0."""
        total = 0
        async with self._release_on_error():
            async for value in self:
                total += value
        return total

    async def min(self) -> T:
        """Fold the elements with ``min``, starting from 0."""
        smallest = 0
        async with self._release_on_error():
            async for value in self:
                smallest = min(value, smallest)
        return smallest

    async def max(self) -> T:
        """Fold the elements with ``max``, starting from 0."""
        largest = 0
        async with self._release_on_error():
            async for value in self:
                largest = max(value, largest)
        return largest

    async def join(self, sep: str) -> str:
        """Join the string form of every element with ``sep``."""
        first = await self.next()
        if first.done:
            return ""

        parts = [str(first.value)]
        async with self._release_on_error():
            async for value in self:
                parts.append(str(value))
        return sep.join(parts)

    async def count(self) -> int:
        """Count the remaining elements."""
        count = 0
        async for _ in self:
            count += 1
        return count

    async def for_each(self, func: Callable[[T], MaybeAwaitable[Any]]) -> None:
        """Call (and await, if needed) a function on each element."""
        async with self._release_on_error():
            async for value in self:
                await resolve(func(value))

    async def fold(self, init: R, func: Callable[[R, T], MaybeAwaitable[R]]) -> R:
        """Left-fold every element into an accumulator."""
        async with self._release_on_error():
            async for value in self:
                init = await resolve(func(init, value))
        return init

    async def reduce(self, func: Callable[[T, T], MaybeAwaitable[T]]) -> Opt[T]:
        """Left-fold the elements, seeded with the first one."""
        first = await self.next()
        if first.done:
            return Nothing

        accumulator = first.value
        async with self._release_on_error():
            async for value in self:
                accumulator = await resolve(func(accumulator, value))
        return Some(accumulator)

    async def find(self, predicate: Callable[[T, int], MaybeAwaitable[bool]]) -> Opt[T]:
        """Return the first element accepted by ``predicate(element, index)``."""
        index = 0
        async with self._release_on_error():
            async for value in self:
                if await resolve(predicate(value, index)):
                    return Some(value)
                index += 1
        return Nothing

    async def find_map(
        self, func: Callable[[T, int], MaybeAwaitable[Opt[U]]]
    ) -> Opt[U]:
        """Return the first ``Some`` produced by ``func(element, index)``."""
        index = 0
        async with self._release_on_error():
            async for value in self:
                found = await resolve(func(value, index))
                if found.some:
                    return found
                index += 1
        return Nothing

    async def collect(self, factory: Callable[[list[T]], R] | None = None) -> list[T] | R:
        """
        Drain the stream.

        Args:
            factory: Optional constructor applied to the collected list

        Returns:
            A list of elements, or ``factory(list)``
        """
        items = [value async for value in self]
        if factory is None:
            return items
        return factory(items)

    async def to_iter(self):
        """Drain the stream and return a synchronous ``Iter`` over its elements."""
        from .bridge import stream_to_iter

        return await stream_to_iter(self)


async def _await_value(value: Any) -> Any:
    return await resolve(value)


# Concrete stages


class TakeStream(Stream[T]):
    """Stream that stops after a fixed number of elements."""

    def __init__(self, upstream: AsyncProducer[T], count: int):
        self.upstream = upstream
        self.remaining = max(0, int(count))

    async def _pull(self) -> PullResult[T]:
        if self.remaining <= 0:
            return PullResult.exhausted()
        self.remaining -= 1
        return await self.upstream.next()

    async def _forced_return(self, value: Any) -> PullResult[T]:
        return self._cap(await self.upstream.force_return(value))

    async def _forced_throw(self, error: BaseException) -> PullResult[T]:
        return self._cap(await self.upstream.force_throw(error))

    def _cap(self, result: PullResult[T]) -> PullResult[T]:
        if self.remaining <= 0 and not result.done:
            return PullResult.exhausted(result.value)
        return result


class EnumerateStream(Stream[tuple[int, T]]):
    """Stream that pairs elements with a running index."""

    def __init__(self, upstream: AsyncProducer[T], start: int = 0):
        self.upstream = upstream
        self.index = start

    async def _pull(self) -> PullResult[tuple[int, T]]:
        return self._pair(await self.upstream.next())

    async def _forced_return(self, value: Any) -> PullResult[tuple[int, T]]:
        return self._pair(await self.upstream.force_return(value))

    async def _forced_throw(self, error: BaseException) -> PullResult[tuple[int, T]]:
        return self._pair(await self.upstream.force_throw(error))

    def _pair(self, result: PullResult[T]) -> PullResult[tuple[int, T]]:
        if result.done:
            return result
        pair = (self.index, result.value)
        self.index += 1
        return PullResult.produced(pair)


class MapStream[T, U](Stream[U]):
    """Stream that maps a (possibly async) function over elements."""

    def __init__(self, upstream: AsyncProducer[T], func: Callable[[T], MaybeAwaitable[U]]):
        self.upstream = upstream
        self.func = func

    async def _pull(self) -> PullResult[U]:
        return await self._apply(await self.upstream.next())

    async def _forced_return(self, value: Any) -> PullResult[U]:
        return await self._apply(await self.upstream.force_return(value))

    async def _forced_throw(self, error: BaseException) -> PullResult[U]:
        return await self._apply(await self.upstream.force_throw(error))

    async def _apply(self, result: PullResult[T]) -> PullResult[U]:
        if result.done:
            return result
        return PullResult.produced(await resolve(self.func(result.value)))


class FilterStream(Stream[T]):
    """Stream that discards elements matching a (possibly async) predicate."""

    def __init__(
        self, upstream: AsyncProducer[T], predicate: Callable[[T], MaybeAwaitable[bool]]
    ):
        self.upstream = upstream
        self.predicate = predicate

    async def _pull(self) -> PullResult[T]:
        while True:
            result = await self.upstream.next()
            if result.done or not await resolve(self.predicate(result.value)):
                return result

    async def _forced_return(self, value: Any) -> PullResult[T]:
        return await self.upstream.force_return(value)

    async def _forced_throw(self, error: BaseException) -> PullResult[T]:
        return await self.upstream.force_throw(error)


class FilterMapStream[T, U](Stream[U]):
    """Stream that maps elements to options and unwraps the present ones."""

    def __init__(
        self, upstream: AsyncProducer[T], func: Callable[[T], MaybeAwaitable[Opt[U]]]
    ):
        self.upstream = upstream
        self.func = func

    async def _pull(self) -> PullResult[U]:
        while True:
            result = await self.upstream.next()
            if result.done:
                return result
            mapped = await resolve(self.func(result.value))
            if mapped.some:
                return PullResult.produced(mapped.value)

    async def _forced_return(self, value: Any) -> PullResult[U]:
        return await self._unwrap(await self.upstream.force_return(value), value)

    async def _forced_throw(self, error: BaseException) -> PullResult[U]:
        return await self._unwrap(await self.upstream.force_throw(error), None)

    async def _unwrap(self, result: PullResult[T], final: Any) -> PullResult[U]:
        if result.done:
            return result
        mapped = await resolve(self.func(result.value))
        if mapped.some:
            return PullResult.produced(mapped.value)
        return PullResult.exhausted(final)


class ZipStream(Stream[tuple[Any, ...]]):
    """
    Stream that awaits one element from every upstream per round.

    Upstreams are awaited one after another, left to right; a round with
    any exhausted member reports exhaustion carrying the partial row.
    """

    def __init__(self, *upstreams: AsyncProducer[Any]):
        self.upstreams = upstreams

    async def _pull(self) -> PullResult[tuple[Any, ...]]:
        if not self.upstreams:
            return PullResult.exhausted(())

        row = []
        done = False
        for upstream in self.upstreams:
            result = await upstream.next()
            done = result.done or done
            row.append(result.value)
        return PullResult(done, tuple(row))

    async def _forced_return(self, value: Any) -> PullResult[tuple[Any, ...]]:
        await self._fan_out(lambda upstream: upstream.force_return(value))
        return PullResult.exhausted(value)

    async def _forced_throw(self, error: BaseException) -> PullResult[tuple[Any, ...]]:
        await self._fan_out(lambda upstream: upstream.force_throw(error))
        return PullResult.exhausted()

    async def _fan_out(self, force: Callable[[AsyncProducer[Any]], Awaitable[Any]]) -> None:
        first_error = None
        for upstream in self.upstreams:
            try:
                await force(upstream)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                else:
                    logger.warning("Additional error while forcing zip member: %r", exc)
        if first_error is not None:
            raise first_error
