"""
lazyiter - Composable Lazy Iterators and Streams for Python

A pull-based iteration library with chainable stages (map, filter,
filter_map, take, enumerate, zip) and terminal operations, implemented
once for synchronous iteration and once for asyncio.
"""

from .adapters import (
    into_iter,
    into_stream,
    iter_irange,
    iter_range,
    never,
    once,
    stream_never,
    stream_once,
    zip_iters,
    zip_streams,
)
from .bridge import IterStream, iter_to_stream, stream_to_iter
from .config import RuntimeConfig, get_yield_interval, set_yield_interval
from .core import Iter
from .errors import LazyIterError, UnwrapError
from .option import Nothing, Opt, Some
from .producers import IterWrapper, RangeIter, StreamWrapper
from .protocols import AsyncProducer, Producer, PullResult
from .result import Err, Ok, Result
from .streams import Stream

__version__ = "0.1.0"

__all__ = [
    "Iter",
    "Stream",
    "PullResult",
    "Producer",
    "AsyncProducer",
    "into_iter",
    "into_stream",
    "iter_range",
    "iter_irange",
    "once",
    "never",
    "stream_once",
    "stream_never",
    "zip_iters",
    "zip_streams",
    "IterWrapper",
    "StreamWrapper",
    "RangeIter",
    "IterStream",
    "iter_to_stream",
    "stream_to_iter",
    "Opt",
    "Some",
    "Nothing",
    "Result",
    "Ok",
    "Err",
    "LazyIterError",
    "UnwrapError",
    "RuntimeConfig",
    "set_yield_interval",
    "get_yield_interval",
]
