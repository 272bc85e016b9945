"""
Core lazy iterator implementations.

This module contains the ``Iter`` base class, which carries the pull
protocol, the chainable stages and the terminal operations, and the
concrete stage classes built on top of it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from .option import Nothing, Opt, Some
from .protocols import Producer, PullResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class Iter[T](ABC):
    """
    Base class for lazy iterators.

    An ``Iter`` is a producer: each call to :meth:`next` pulls exactly one
    element through the chain of stages. Subclasses implement ``_pull``
    and, when they own an upstream, ``_forced_return`` and
    ``_forced_throw``.

    Exhaustion latches. Once ``next`` reports it (``_finished``) or a
    forced operation ran (``_forced``), every later ``next`` reports it
    again without touching upstream.

    Forced operations are forwarded upstream exactly once, even after
    ``next`` has reported exhaustion: a ``take`` whose count is spent or a
    ``zip`` with one exhausted member still has live sources to release.
    A stage that had already finished reports plain exhaustion instead of
    whatever its upstream returned.
    """

    _finished = False
    _forced = False

    # Pull protocol

    def next(self) -> PullResult[T]:
        """
        Advance by exactly one element.

        Returns:
            A produced element, or an exhausted result
        """
        if self._finished or self._forced:
            return PullResult.exhausted()
        result = self._pull()
        if result.done:
            self._finished = True
        return result

    def force_return(self, value: Any = None) -> PullResult[T]:
        """
        Shut the chain down early, releasing upstream resources once.

        Args:
            value: Final value carried by the exhausted result

        Returns:
            The upstream's shutdown result, passed through this stage
        """
        if self._forced:
            return PullResult.exhausted(value)
        self._forced = True
        logger.debug("Forced return on %s", type(self).__name__)
        result = self._forced_return(value)
        return PullResult.exhausted(value) if self._finished else result

    def force_throw(self, error: BaseException) -> PullResult[T]:
        """
        Propagate an external failure into the chain.

        Args:
            error: The exception raised outside the chain

        Returns:
            The upstream's unwinding result, passed through this stage
        """
        if self._forced:
            return PullResult.exhausted()
        self._forced = True
        logger.debug("Forced throw of %r on %s", error, type(self).__name__)
        result = self._forced_throw(error)
        return PullResult.exhausted() if self._finished else result

    @abstractmethod
    def _pull(self) -> PullResult[T]: ...

    def _forced_return(self, value: Any) -> PullResult[T]:
        return PullResult.exhausted(value)

    def _forced_throw(self, error: BaseException) -> PullResult[T]:
        return PullResult.exhausted()

    # Python iteration

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        result = self.next()
        if result.done:
            raise StopIteration(result.value)
        return result.value

    def close(self) -> None:
        """Release upstream resources; same as ``force_return()``."""
        self.force_return()

    def __enter__(self) -> Iter[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.force_return()

    @contextmanager
    def _release_on_error(self):
        try:
            yield
        except BaseException:
            # The original failure wins over one raised while releasing.
            try:
                self.force_return()
            except Exception:
                logger.warning(
                    "Error while releasing %s after a failure",
                    type(self).__name__,
                    exc_info=True,
                )
            raise

    # Constructors

    @staticmethod
    def of(source: Iterable[T] | Producer[T]) -> Iter[T]:
        """Wrap an iterable or pull-protocol object."""
        from .adapters import into_iter

        return into_iter(source)

    @staticmethod
    def once(value: T) -> Iter[T]:
        """An iterator producing ``value`` a single time."""
        from .producers import OnceIter

        return OnceIter(value)

    @staticmethod
    def never() -> Iter[Any]:
        """The shared, permanently exhausted iterator."""
        from .producers import NEVER

        return NEVER

    @staticmethod
    def range(start: int, end: int | None = None, step: int | None = None) -> Iter[int]:
        """A half-open arithmetic range; see :func:`lazyiter.iter_range`."""
        from .producers import RangeIter

        return RangeIter(start, end, step)

    @staticmethod
    def irange(start: int, end: int | None = None, step: int | None = None) -> Iter[int]:
        """A closed arithmetic range; see :func:`lazyiter.iter_irange`."""
        from .producers import RangeIter

        return RangeIter.inclusive(start, end, step)

    # Stages

    def take(self, count: int) -> TakeIter[T]:
        """
        Yield at most ``count`` elements.

        Args:
            count: Maximum number of elements; negative counts act as 0

        Returns:
            A new iterator that stops pulling once the count is spent
        """
        return TakeIter(self, count)

    def enumerate(self, start: int = 0) -> EnumerateIter[T]:
        """
        Pair each element with a running index.

        Args:
            start: First index (default 0)

        Returns:
            A new iterator of ``(index, element)`` tuples
        """
        return EnumerateIter(self, start)

    def map(self, func: Callable[[T], U]) -> MapIter[T, U]:
        """
        Apply a function to each element.

        Args:
            func: Function to apply to each element

        Returns:
            A new iterator of transformed elements
        """
        return MapIter(self, func)

    def filter(self, predicate: Callable[[T], bool]) -> FilterIter[T]:
        """
        Drop the elements for which ``predicate`` returns True.

        Note that this is the inverse of the builtin ``filter``: the
        predicate selects what to discard, and elements for which it
        returns False are kept.

        Args:
            predicate: Function that returns True for elements to discard

        Returns:
            A new iterator of the retained elements
        """
        return FilterIter(self, predicate)

    def filter_map(self, func: Callable[[T], Opt[U]]) -> FilterMapIter[T, U]:
        """
        Map each element to an ``Opt`` and keep only the ``Some`` payloads.

        Args:
            func: Function returning ``Some(x)`` to emit ``x``, or ``Nothing``

        Returns:
            A new iterator of unwrapped payloads
        """
        return FilterMapIter(self, func)

    def zip(self, *others: Iterable[Any] | Producer[Any]) -> ZipIter:
        """
        Advance this iterator and ``others`` in lockstep.

        Every member is pulled on every round, even after one of them is
        exhausted.

        Args:
            *others: Iterables or producers to zip with this one

        Returns:
            A new iterator of tuples
        """
        from .adapters import into_iter

        return ZipIter(self, *(into_iter(other) for other in others))

    # Terminal operations

    def opt_next(self) -> Opt[T]:
        """Pull one element as an ``Opt``."""
        result = self.next()
        return Nothing if result.done else Some(result.value)

    def nth(self, n: int) -> Opt[T]:
        """
        Skip ``n - 1`` elements and return the next one.

        ``nth(1)`` is the next element; any ``n <= 1`` behaves like
        :meth:`opt_next`.
        """
        for _ in range(1, n):
            if self.next().done:
                return Nothing
        return self.opt_next()

    def all(self, predicate: Callable[[T], Any] | None = None) -> bool:
        """
        Check whether every element is truthy (or satisfies ``predicate``).

        The whole iterator is always drained: unlike the builtin ``all``,
        a false element does not stop the traversal.
        """
        if predicate is None:
            predicate = bool

        result = True
        with self._release_on_error():
            for value in self:
                result = bool(predicate(value)) and result
        return result

    def any(self, predicate: Callable[[T], Any] | None = None) -> bool:
        """
        Check whether any element is truthy (or satisfies ``predicate``).

        Like :meth:`all`, the whole iterator is always drained.
        """
        if predicate is None:
            predicate = bool

        result = False
        with self._release_on_error():
            for value in self:
                result = bool(predicate(value)) or result
        return result

    def sum(self) -> T:
        """Sum all elements, starting from 0."""
        total = 0
        with self._release_on_error():
            for value in self:
                total += value
        return total

    def min(self) -> T:
        """
        Fold the elements with ``min``, starting from 0.

        Because the fold is seeded with 0, an iterator of positive numbers
        returns 0 rather than its smallest element.
        """
        smallest = 0
        with self._release_on_error():
            for value in self:
                smallest = min(value, smallest)
        return smallest

    def max(self) -> T:
        """
        Fold the elements with ``max``, starting from 0.

        An iterator of negative numbers therefore returns 0.
        """
        largest = 0
        with self._release_on_error():
            for value in self:
                largest = max(value, largest)
        return largest

    def join(self, sep: str) -> str:
        """Join the string form of every element with ``sep``."""
        first = self.next()
        if first.done:
            return ""

        parts = [str(first.value)]
        with self._release_on_error():
            for value in self:
                parts.append(str(value))
        return sep.join(parts)

    def count(self) -> int:
        """Count the remaining elements."""
        count = 0
        for _ in self:
            count += 1
        return count

    def for_each(self, func: Callable[[T], Any]) -> None:
        """
        Call a function on each element.

        If ``func`` raises, the iterator is released before the error
        propagates.
        """
        with self._release_on_error():
            for value in self:
                func(value)

    def fold(self, init: R, func: Callable[[R, T], R]) -> R:
        """
        Left-fold every element into an accumulator.

        Args:
            init: Initial accumulator value
            func: Function combining the accumulator and an element

        Returns:
            The final accumulator
        """
        with self._release_on_error():
            for value in self:
                init = func(init, value)
        return init

    def reduce(self, func: Callable[[T, T], T]) -> Opt[T]:
        """
        Left-fold the elements, seeded with the first one.

        Returns:
            ``Nothing`` for an empty iterator, otherwise ``Some`` of the
            result; ``func`` is not called for a single element
        """
        first = self.next()
        if first.done:
            return Nothing

        accumulator = first.value
        with self._release_on_error():
            for value in self:
                accumulator = func(accumulator, value)
        return Some(accumulator)

    def find(self, predicate: Callable[[T, int], bool]) -> Opt[T]:
        """
        Return the first element accepted by ``predicate``.

        Args:
            predicate: Called with the element and its 0-based index

        Returns:
            ``Some`` of the match, or ``Nothing`` once exhausted
        """
        with self._release_on_error():
            for index, value in enumerate(self):
                if predicate(value, index):
                    return Some(value)
        return Nothing

    def find_map(self, func: Callable[[T, int], Opt[U]]) -> Opt[U]:
        """
        Return the first ``Some`` produced by ``func``.

        Args:
            func: Called with the element and its 0-based index
        """
        with self._release_on_error():
            for index, value in enumerate(self):
                found = func(value, index)
                if found.some:
                    return found
        return Nothing

    def collect(self, factory: Callable[[Iterable[T]], R] | None = None) -> list[T] | R:
        """
        Drain the iterator into a collection.

        Args:
            factory: Optional collection constructor (``set``, ``dict``,
                ...); a list is built when omitted

        Returns:
            The collected elements
        """
        if factory is None:
            return list(self)
        return factory(self)

    def stream(self):
        """Present this iterator as a ``Stream``."""
        from .bridge import iter_to_stream

        return iter_to_stream(self)


# Concrete stages


class TakeIter(Iter[T]):
    """Iterator that stops after a fixed number of elements."""

    def __init__(self, upstream: Producer[T], count: int):
        self.upstream = upstream
        self.remaining = max(0, int(count))

    def _pull(self) -> PullResult[T]:
        if self.remaining <= 0:
            return PullResult.exhausted()
        self.remaining -= 1
        return self.upstream.next()

    def _forced_return(self, value: Any) -> PullResult[T]:
        return self._cap(self.upstream.force_return(value))

    def _forced_throw(self, error: BaseException) -> PullResult[T]:
        return self._cap(self.upstream.force_throw(error))

    def _cap(self, result: PullResult[T]) -> PullResult[T]:
        # A spent counter wins over whatever upstream still had.
        if self.remaining <= 0 and not result.done:
            return PullResult.exhausted(result.value)
        return result


class EnumerateIter(Iter[tuple[int, T]]):
    """Iterator that pairs elements with a running index."""

    def __init__(self, upstream: Producer[T], start: int = 0):
        self.upstream = upstream
        self.index = start

    def _pull(self) -> PullResult[tuple[int, T]]:
        return self._pair(self.upstream.next())

    def _forced_return(self, value: Any) -> PullResult[tuple[int, T]]:
        return self._pair(self.upstream.force_return(value))

    def _forced_throw(self, error: BaseException) -> PullResult[tuple[int, T]]:
        return self._pair(self.upstream.force_throw(error))

    def _pair(self, result: PullResult[T]) -> PullResult[tuple[int, T]]:
        if result.done:
            return result
        pair = (self.index, result.value)
        self.index += 1
        return PullResult.produced(pair)


class MapIter[T, U](Iter[U]):
    """Iterator that maps a function over elements."""

    def __init__(self, upstream: Producer[T], func: Callable[[T], U]):
        self.upstream = upstream
        self.func = func

    def _pull(self) -> PullResult[U]:
        return self._apply(self.upstream.next())

    def _forced_return(self, value: Any) -> PullResult[U]:
        return self._apply(self.upstream.force_return(value))

    def _forced_throw(self, error: BaseException) -> PullResult[U]:
        return self._apply(self.upstream.force_throw(error))

    def _apply(self, result: PullResult[T]) -> PullResult[U]:
        if result.done:
            return result
        return PullResult.produced(self.func(result.value))


class FilterIter(Iter[T]):
    """Iterator that discards elements matching a predicate."""

    def __init__(self, upstream: Producer[T], predicate: Callable[[T], bool]):
        self.upstream = upstream
        self.predicate = predicate

    def _pull(self) -> PullResult[T]:
        while True:
            result = self.upstream.next()
            if result.done or not self.predicate(result.value):
                return result

    def _forced_return(self, value: Any) -> PullResult[T]:
        return self.upstream.force_return(value)

    def _forced_throw(self, error: BaseException) -> PullResult[T]:
        return self.upstream.force_throw(error)


class FilterMapIter[T, U](Iter[U]):
    """Iterator that maps elements to options and unwraps the present ones."""

    def __init__(self, upstream: Producer[T], func: Callable[[T], Opt[U]]):
        self.upstream = upstream
        self.func = func

    def _pull(self) -> PullResult[U]:
        while True:
            result = self.upstream.next()
            if result.done:
                return result
            mapped = self.func(result.value)
            if mapped.some:
                return PullResult.produced(mapped.value)

    def _forced_return(self, value: Any) -> PullResult[U]:
        return self._unwrap(self.upstream.force_return(value), value)

    def _forced_throw(self, error: BaseException) -> PullResult[U]:
        return self._unwrap(self.upstream.force_throw(error), None)

    def _unwrap(self, result: PullResult[T], final: Any) -> PullResult[U]:
        if result.done:
            return result
        mapped = self.func(result.value)
        if mapped.some:
            return PullResult.produced(mapped.value)
        return PullResult.exhausted(final)


class ZipIter(Iter[tuple[Any, ...]]):
    """
    Iterator that pulls one element from every upstream per round.

    A round in which any upstream is exhausted reports exhaustion, with the
    partial row (including the exhausted members' final values) as the
    final value.
    """

    def __init__(self, *upstreams: Producer[Any]):
        self.upstreams = upstreams

    def _pull(self) -> PullResult[tuple[Any, ...]]:
        if not self.upstreams:
            return PullResult.exhausted(())

        row = []
        done = False
        for upstream in self.upstreams:
            result = upstream.next()
            done = result.done or done
            row.append(result.value)
        return PullResult(done, tuple(row))

    def _forced_return(self, value: Any) -> PullResult[tuple[Any, ...]]:
        self._fan_out(lambda upstream: upstream.force_return(value))
        return PullResult.exhausted(value)

    def _forced_throw(self, error: BaseException) -> PullResult[tuple[Any, ...]]:
        self._fan_out(lambda upstream: upstream.force_throw(error))
        return PullResult.exhausted()

    def _fan_out(self, force: Callable[[Producer[Any]], Any]) -> None:
        # Every member is forced; the first failure is raised afterwards.
        first_error = None
        for upstream in self.upstreams:
            try:
                force(upstream)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                else:
                    logger.warning("Additional error while forcing zip member: %r", exc)
        if first_error is not None:
            raise first_error
