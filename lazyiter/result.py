"""
Fallible values.

``Result`` holds either a success payload (``Ok``) or a failure payload
(``Err``). The iterator core never produces one directly; callers wrap
aggregate results in it, and ``Opt.transpose`` / ``Result.transpose``
convert between the two containers.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from .errors import UnwrapError
from .option import Nothing, Opt, Some

if TYPE_CHECKING:
    from .core import Iter

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


@dataclass(frozen=True)
class Result[T, E]:
    """
    Either ``Ok(value)`` or ``Err(error)``.

    Build instances with :func:`Ok` and :func:`Err`.
    """

    ok: bool
    value: T | E

    def __repr__(self) -> str:
        return f"{'Ok' if self.ok else 'Err'}({self.value!r})"

    def ok_value(self) -> Opt[T]:
        """The success payload as an option."""
        return Some(self.value) if self.ok else Nothing

    def err_value(self) -> Opt[E]:
        """The failure payload as an option."""
        return Nothing if self.ok else Some(self.value)

    def __iter__(self) -> Iterator[T]:
        return self.iter()

    def iter(self) -> Iter[T]:
        """Iterate over the success payload: one element for Ok, none for Err."""
        from .core import Iter

        return Iter.once(self.value) if self.ok else Iter.never()

    async def resolve(self) -> Result[Any, E]:
        """Await the payload of an Ok."""
        return Ok(await self.value) if self.ok else self

    async def resolve_err(self) -> Result[T, Any]:
        """Await the payload of an Err."""
        return self if self.ok else Err(await self.value)

    async def resolve_both(self) -> Result[Any, Any]:
        """Await the payload whichever variant this is."""
        return Result(self.ok, await self.value)

    def and_(self, other: Result[U, E] | Callable[[T], Result[U, E]]) -> Result[U, E]:
        if not self.ok:
            return self
        return other(self.value) if callable(other) else other

    def or_(self, other: Result[T, F] | Callable[[E], Result[T, F]]) -> Result[T, F]:
        if self.ok:
            return self
        return other(self.value) if callable(other) else other

    def map(self, func: Callable[[T], U]) -> Result[U, E]:
        return Ok(func(self.value)) if self.ok else self

    def map_err(self, func: Callable[[E], F]) -> Result[T, F]:
        return self if self.ok else Err(func(self.value))

    def collapse(self) -> T | E:
        """Return the payload regardless of variant."""
        return self.value

    def or_raise(self) -> T:
        """
        Return the success payload, raising the failure payload otherwise.

        Raises:
            BaseException: The error itself, if it is an exception
            UnwrapError: If the error is not an exception
        """
        if self.ok:
            return self.value
        if isinstance(self.value, BaseException):
            raise self.value
        raise UnwrapError(f"Result is Err({self.value!r})")

    def unwrap(
        self, msg: str | Callable[[E], BaseException] = "Failed to unwrap Result"
    ) -> T:
        """
        Return the success payload.

        Args:
            msg: Message for the raised UnwrapError, or a factory that
                builds the exception from the error payload

        Raises:
            UnwrapError: If this is Err and ``msg`` is a string
        """
        if self.ok:
            return self.value
        if callable(msg):
            raise msg(self.value)
        raise UnwrapError(msg)

    def unwrap_err(
        self, msg: str | Callable[[T], BaseException] = "Failed to unwrap Result"
    ) -> E:
        """Return the failure payload; mirror image of :meth:`unwrap`."""
        if not self.ok:
            return self.value
        if callable(msg):
            raise msg(self.value)
        raise UnwrapError(msg)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default

    def unwrap_or_else(self, default: Callable[[E], T]) -> T:
        return self.value if self.ok else default(self.value)

    def map_or(self, default: U, func: Callable[[T], U]) -> U:
        return func(self.value) if self.ok else default

    def map_or_else(self, default: Callable[[E], U], func: Callable[[T], U]) -> U:
        return func(self.value) if self.ok else default(self.value)

    def transpose(self) -> Opt[Result[Any, E]]:
        """Turn ``Result[Opt[T], E]`` into ``Opt[Result[T, E]]``."""
        return self.value.map(Ok) if self.ok else Some(self)

    @staticmethod
    def catch(
        func: Callable[[], T], *exc_types: type[BaseException]
    ) -> Result[T, BaseException]:
        """
        Call ``func`` and capture its exception as an Err.

        Args:
            func: Zero-argument callable to run
            *exc_types: Exception types to capture (default ``Exception``);
                anything else propagates

        Example:
            >>> Result.catch(lambda: int("x"), ValueError).ok
            False
        """
        catching = exc_types or (Exception,)
        try:
            return Ok(func())
        except catching as exc:
            return Err(exc)

    @staticmethod
    async def acatch(
        func: Awaitable[T] | Callable[[], Awaitable[T]],
        *exc_types: type[BaseException],
    ) -> Result[T, BaseException]:
        """Async counterpart of :meth:`catch`; accepts an awaitable or a factory."""
        catching = exc_types or (Exception,)
        try:
            awaitable = func if inspect.isawaitable(func) else func()
            return Ok(await awaitable)
        except catching as exc:
            return Err(exc)


def Ok(value: T) -> Result[T, Any]:
    """Wrap a success payload."""
    return Result(True, value)


def Err(error: E) -> Result[Any, E]:
    """Wrap a failure payload."""
    return Result(False, error)
