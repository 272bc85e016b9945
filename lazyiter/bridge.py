"""
Bridge functions that connect the two protocol families.

A synchronous ``Iter`` can be driven from asyncio code as a ``Stream``,
and a finished ``Stream`` can be turned back into an ``Iter``.
"""

import asyncio
import logging
from collections.abc import AsyncIterable, Iterable
from typing import Any, TypeVar

from .config import RuntimeConfig
from .core import Iter
from .producers import IterWrapper, StreamWrapper
from .protocols import Producer, PullResult
from .streams import Stream

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IterStream(Stream[T]):
    """
    Stream that drives a synchronous producer.

    Every ``yield_interval`` pulls (see :mod:`lazyiter.config`) the stream
    suspends once with ``asyncio.sleep(0)`` so that a long synchronous
    source does not monopolise the event loop.
    """

    def __init__(self, upstream: Producer[T]):
        self.upstream = upstream
        self._pulls = 0

    async def _pull(self) -> PullResult[T]:
        interval = RuntimeConfig.global_config().yield_interval
        if interval:
            self._pulls += 1
            if self._pulls >= interval:
                self._pulls = 0
                await asyncio.sleep(0)
        return self.upstream.next()

    async def _forced_return(self, value: Any) -> PullResult[T]:
        return self.upstream.force_return(value)

    async def _forced_throw(self, error: BaseException) -> PullResult[T]:
        return self.upstream.force_throw(error)


def iter_to_stream(source: Iterable[T] | Producer[T]) -> IterStream[T]:
    """
    Present a synchronous source as a ``Stream``.

    Args:
        source: An ``Iter``, pull-protocol object or iterable

    Returns:
        A stream pulling from the source on demand

    Example:
        >>> from lazyiter import iter_range
        >>> stream = iter_to_stream(iter_range(3))
    """
    upstream = source if isinstance(source, Iter) else IterWrapper(source)
    logger.debug("Bridging %s into a stream", type(upstream).__name__)
    return IterStream(upstream)


async def stream_to_iter(stream: Stream[T] | AsyncIterable[T]) -> Iter[T]:
    """
    Drain a stream and return an ``Iter`` over the collected elements.

    Args:
        stream: A ``Stream`` or any async iterable

    Returns:
        A synchronous iterator replaying the stream's elements
    """
    if not isinstance(stream, Stream):
        stream = StreamWrapper(stream)
    items = await stream.collect()
    logger.debug("Collected %d stream elements into an iterator", len(items))
    return IterWrapper(items)
