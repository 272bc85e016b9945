"""
Source producers.

Producers adapt foreign sequences (Python iterables, async iterables,
objects speaking the pull protocol) and simple values into ``Iter`` and
``Stream`` instances. They sit at the head of every chain and own no
upstream stage.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable
from typing import Any, TypeVar

from .core import Iter
from .protocols import PullResult
from .streams import Stream, resolve

T = TypeVar("T")


def _speaks_pull_protocol(source: Any) -> bool:
    return callable(getattr(source, "next", None))


class IterWrapper(Iter[T]):
    """
    Iterator over a foreign sequence.

    Accepts either an object with a pull-protocol ``next()`` method or any
    Python iterable. Forced operations map onto the source's own
    ``force_return``/``force_throw`` or, for native iterators, onto the
    generator ``close``/``throw`` methods; sources without them are simply
    treated as exhausted.
    """

    def __init__(self, source: Iterable[T] | Any):
        """
        Create an iterator over a foreign source.

        Args:
            source: A pull-protocol object or an iterable

        Raises:
            TypeError: If the source is neither
        """
        if _speaks_pull_protocol(source):
            self.iterator = source
            self._native = False
        elif isinstance(source, Iterable):
            self.iterator = iter(source)
            self._native = True
        else:
            raise TypeError(f"{type(source).__name__!r} object is not iterable")

    def _pull(self) -> PullResult[T]:
        if not self._native:
            return self.iterator.next()
        try:
            return PullResult.produced(next(self.iterator))
        except StopIteration as stop:
            return PullResult.exhausted(stop.value)

    def _forced_return(self, value: Any) -> PullResult[T]:
        if self._finished:
            # A drained source holds nothing to release.
            return PullResult.exhausted(value)
        if not self._native:
            force_return = getattr(self.iterator, "force_return", None)
            if force_return is None:
                return PullResult.exhausted(value)
            return force_return(value)

        close = getattr(self.iterator, "close", None)
        if close is not None:
            close()
        return PullResult.exhausted(value)

    def _forced_throw(self, error: BaseException) -> PullResult[T]:
        if self._finished:
            return PullResult.exhausted()
        if not self._native:
            force_throw = getattr(self.iterator, "force_throw", None)
            if force_throw is None:
                return PullResult.exhausted()
            return force_throw(error)

        throw = getattr(self.iterator, "throw", None)
        if throw is None:
            return PullResult.exhausted()
        try:
            return PullResult.produced(throw(error))
        except StopIteration as stop:
            return PullResult.exhausted(stop.value)


class OnceIter(Iter[T]):
    """Iterator producing a single value."""

    def __init__(self, value: T):
        self.value = value
        self.taken = False

    def _pull(self) -> PullResult[T]:
        if self.taken:
            return PullResult.exhausted()
        self.taken = True
        return PullResult.produced(self.value)


class NeverIter(Iter[Any]):
    """Iterator that is exhausted from the start."""

    _finished = True

    def _pull(self) -> PullResult[Any]:
        return PullResult.exhausted()


class RangeIter(Iter[int]):
    """
    Iterator over an arithmetic progression.

    The direction of the stop test follows the sign of the step: a positive
    step stops once the current value reaches ``end`` from below, a
    negative one once it reaches ``end`` from above.
    """

    def __init__(self, start: int, end: int | None = None, step: int | None = None):
        """
        Create a range iterator.

        Args:
            start: First value, or the (exclusive) end when ``end`` is None
            end: Exclusive end value
            step: Increment; defaults to 1 when counting up, -1 when down

        Raises:
            ValueError: If step is zero
        """
        if end is None:
            start, end = 0, start
        if step is None:
            step = 1 if start <= end else -1
        if step == 0:
            raise ValueError("Range step cannot be zero")

        self.current = start
        self.end = end
        self.step = step

    @classmethod
    def inclusive(
        cls, start: int, end: int | None = None, step: int | None = None
    ) -> RangeIter:
        """Create a range whose end value is itself produced."""
        producer = cls(start, end, step)
        producer.end += producer.step
        return producer

    def _pull(self) -> PullResult[int]:
        if self.step > 0:
            reached = self.current >= self.end
        else:
            reached = self.current <= self.end
        if reached:
            return PullResult.exhausted()

        value = self.current
        self.current += self.step
        return PullResult.produced(value)


class StreamWrapper(Stream[T]):
    """
    Stream over a foreign async source.

    Accepts an object with a pull-protocol ``next()`` method (its results
    may or may not be awaitable) or any async iterable. Forced operations
    map onto ``force_return``/``force_throw`` or the async generator
    ``aclose``/``athrow`` methods.
    """

    def __init__(self, source: AsyncIterable[T] | Any):
        if _speaks_pull_protocol(source):
            self.iterator = source
            self._native = False
        elif isinstance(source, AsyncIterable):
            self.iterator = aiter(source)
            self._native = True
        else:
            raise TypeError(f"{type(source).__name__!r} object is not async iterable")

    async def _pull(self) -> PullResult[T]:
        if not self._native:
            return await resolve(self.iterator.next())
        try:
            return PullResult.produced(await anext(self.iterator))
        except StopAsyncIteration:
            return PullResult.exhausted()

    async def _forced_return(self, value: Any) -> PullResult[T]:
        if self._finished:
            return PullResult.exhausted(value)
        if not self._native:
            force_return = getattr(self.iterator, "force_return", None)
            if force_return is None:
                return PullResult.exhausted(value)
            return await resolve(force_return(value))

        aclose = getattr(self.iterator, "aclose", None)
        if aclose is not None:
            await aclose()
        return PullResult.exhausted(value)

    async def _forced_throw(self, error: BaseException) -> PullResult[T]:
        if self._finished:
            return PullResult.exhausted()
        if not self._native:
            force_throw = getattr(self.iterator, "force_throw", None)
            if force_throw is None:
                return PullResult.exhausted()
            return await resolve(force_throw(error))

        athrow = getattr(self.iterator, "athrow", None)
        if athrow is None:
            return PullResult.exhausted()
        try:
            return PullResult.produced(await athrow(error))
        except StopAsyncIteration:
            return PullResult.exhausted()


class OnceStream(Stream[T]):
    """Stream producing a single value."""

    def __init__(self, value: T):
        self.value = value
        self.taken = False

    async def _pull(self) -> PullResult[T]:
        if self.taken:
            return PullResult.exhausted()
        self.taken = True
        return PullResult.produced(self.value)


class NeverStream(Stream[Any]):
    """Stream that is exhausted from the start."""

    _finished = True

    async def _pull(self) -> PullResult[Any]:
        return PullResult.exhausted()


NEVER = NeverIter()
NEVER_STREAM = NeverStream()
