"""
Adapters for converting standard Python objects into lazy iterators.

This module provides the ergonomic interface for creating ``Iter`` and
``Stream`` chains from common Python data structures and values.
"""

from collections.abc import AsyncIterable, Iterable
from typing import Any, TypeVar, overload

from .bridge import IterStream, iter_to_stream
from .core import Iter, ZipIter
from .producers import (
    NEVER,
    NEVER_STREAM,
    IterWrapper,
    OnceIter,
    OnceStream,
    RangeIter,
    StreamWrapper,
)
from .protocols import AsyncProducer, Producer
from .streams import Stream, ZipStream

T = TypeVar("T")


def into_iter[T](source: Iterable[T] | Producer[T]) -> Iter[T]:
    """
    Convert an iterable into a lazy iterator.

    Args:
        source: Any iterable, or an object with a pull-protocol ``next()``

    Returns:
        ``source`` itself if it already is an ``Iter``, else a wrapper

    Raises:
        TypeError: If the source cannot be iterated

    Example:
        >>> from lazyiter import into_iter
        >>> into_iter([1, 2, 3]).map(lambda x: x * 2).collect()
        [2, 4, 6]
    """
    if isinstance(source, Iter):
        return source
    return IterWrapper(source)


def into_stream[T](
    source: AsyncIterable[T] | Iterable[T] | AsyncProducer[T],
) -> Stream[T]:
    """
    Convert an async iterable or iterable into a lazy stream.

    Synchronous sources are bridged (see :func:`lazyiter.bridge.iter_to_stream`);
    async iterables and pull-protocol objects are wrapped directly.

    Args:
        source: Any async iterable, iterable or pull-protocol object

    Returns:
        ``source`` itself if it already is a ``Stream``, else a wrapper
    """
    if isinstance(source, Stream):
        return source
    if isinstance(source, Iter):
        return IterStream(source)
    if isinstance(source, AsyncIterable) or callable(getattr(source, "next", None)):
        return StreamWrapper(source)
    return iter_to_stream(source)


@overload
def iter_range(end: int) -> RangeIter: ...


@overload
def iter_range(start: int, end: int, step: int | None = None) -> RangeIter: ...


def iter_range(start: int, end: int | None = None, step: int | None = None) -> RangeIter:
    """
    Create an iterator over a half-open range.

    ``iter_range(5)`` counts 0..4, ``iter_range(5, 0)`` counts down 5..1.

    Args:
        start: Starting value, or the end when called with one argument
        end: Ending value (exclusive)
        step: Step size; defaults to +1 or -1 depending on direction

    Returns:
        A RangeIter

    Example:
        >>> from lazyiter import iter_range
        >>> iter_range(5).collect()
        [0, 1, 2, 3, 4]
    """
    return RangeIter(start, end, step)


@overload
def iter_irange(end: int) -> RangeIter: ...


@overload
def iter_irange(start: int, end: int, step: int | None = None) -> RangeIter: ...


def iter_irange(start: int, end: int | None = None, step: int | None = None) -> RangeIter:
    """
    Create an iterator over a closed range (the end value is included).

    Example:
        >>> from lazyiter import iter_irange
        >>> iter_irange(5).collect()
        [0, 1, 2, 3, 4, 5]
    """
    return RangeIter.inclusive(start, end, step)


def once[T](value: T) -> Iter[T]:
    """Create an iterator producing ``value`` once."""
    return OnceIter(value)


def never() -> Iter[Any]:
    """Return the shared empty iterator."""
    return NEVER


def stream_once[T](value: T) -> Stream[T]:
    """Create a stream producing ``value`` once."""
    return OnceStream(value)


def stream_never() -> Stream[Any]:
    """Return the shared empty stream."""
    return NEVER_STREAM


def zip_iters(*sources: Iterable[Any] | Producer[Any]) -> ZipIter:
    """
    Zip several sources into an iterator of tuples.

    Unlike the builtin ``zip``, every source is pulled on every round; the
    first round in which any source is exhausted ends the iteration.
    """
    return ZipIter(*(into_iter(source) for source in sources))


def zip_streams(*sources: Any) -> ZipStream:
    """Zip several async (or sync) sources into a stream of tuples."""
    return ZipStream(*(into_stream(source) for source in sources))
