"""
Core protocol definitions for lazy iterators and streams.

These protocols define the pull interface that every producer and stage
implements, once for immediate (synchronous) iteration and once for
asyncio-based iteration.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)  # Covariant for Producer (output only)


@dataclass(frozen=True)
class PullResult[T]:
    """
    Outcome of a single protocol call.

    Either an element was produced (``done`` is False and ``value`` holds
    the element) or the producer is exhausted (``done`` is True and
    ``value`` holds an optional final value).
    """

    done: bool
    value: T | Any = None

    @classmethod
    def produced(cls, value: T) -> PullResult[T]:
        """Build a result carrying an element."""
        return cls(False, value)

    @classmethod
    def exhausted(cls, value: Any = None) -> PullResult[Any]:
        """Build a result reporting exhaustion."""
        return cls(True, value)


@runtime_checkable
class Producer(Protocol[T_co]):
    """
    A synchronous producer exposing the pull protocol.

    Stages wrap exactly one producer (zip wraps several) and expose the
    same three operations to their own consumer.
    """

    @abstractmethod
    def next(self) -> PullResult[T_co]:
        """
        Advance by exactly one element.

        Returns:
            A produced element, or an exhausted result
        """
        ...

    @abstractmethod
    def force_return(self, value: Any = None) -> PullResult[T_co]:
        """
        Request cooperative early shutdown.

        Args:
            value: Final value to carry in the exhausted result

        Returns:
            The result of shutting down the upstream chain
        """
        ...

    @abstractmethod
    def force_throw(self, error: BaseException) -> PullResult[T_co]:
        """
        Propagate an external failure into the chain.

        Args:
            error: The exception raised outside the chain

        Returns:
            The result of unwinding the upstream chain
        """
        ...


@runtime_checkable
class AsyncProducer(Protocol[T_co]):
    """A suspension-capable producer; every operation is awaitable."""

    @abstractmethod
    def next(self) -> Awaitable[PullResult[T_co]]: ...

    @abstractmethod
    def force_return(self, value: Any = None) -> Awaitable[PullResult[T_co]]: ...

    @abstractmethod
    def force_throw(self, error: BaseException) -> Awaitable[PullResult[T_co]]: ...
