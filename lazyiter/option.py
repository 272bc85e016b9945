"""
Optional values.

``Opt`` is the two-variant container the iterator core uses for "present
or absent" results: it is what ``filter_map`` callbacks return and what
``find``, ``reduce``, ``nth`` and ``opt_next`` hand back.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from .errors import UnwrapError

if TYPE_CHECKING:
    from .core import Iter
    from .result import Result

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True)
class Opt[T]:
    """
    A value that is either present (``Some``) or absent (``Nothing``).

    Build instances with :func:`Some` and the :data:`Nothing` constant
    rather than calling the constructor directly.
    """

    some: bool
    value: T | None = None

    def __repr__(self) -> str:
        return f"Some({self.value!r})" if self.some else "Nothing"

    def __iter__(self) -> Iterator[T]:
        return self.iter()

    def iter(self) -> Iter[T]:
        """Iterate over the payload: one element for Some, none for Nothing."""
        from .core import Iter

        return Iter.once(self.value) if self.some else Iter.never()

    async def resolve(self) -> Opt[Any]:
        """Await the payload of a Some."""
        return Some(await self.value) if self.some else self

    def and_(self, other: Opt[U] | Callable[[T], Opt[U]]) -> Opt[U]:
        """Return Nothing if absent, else ``other`` (called with the payload if callable)."""
        if not self.some:
            return self
        return other(self.value) if callable(other) else other

    def or_(self, other: Opt[T] | Callable[[], Opt[T]]) -> Opt[T]:
        """Return self if present, else ``other`` (called if callable)."""
        if self.some:
            return self
        return other() if callable(other) else other

    def xor(self, other: Opt[T]) -> Opt[T]:
        """Return whichever side is present, or Nothing if both or neither are."""
        if other.some:
            return Nothing if self.some else other
        return self

    def filter(self, predicate: Callable[[T], bool]) -> Opt[T]:
        """Keep the payload only if ``predicate`` accepts it."""
        return self if self.some and predicate(self.value) else Nothing

    def map(self, func: Callable[[T], U]) -> Opt[U]:
        return Some(func(self.value)) if self.some else self

    def unwrap(self, msg: str = "Failed to unwrap Opt") -> T:
        """
        Return the payload.

        Raises:
            UnwrapError: If this is Nothing
        """
        if self.some:
            return self.value
        raise UnwrapError(msg)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.some else default

    def unwrap_or_else(self, default: Callable[[], T]) -> T:
        return self.value if self.some else default()

    def map_or(self, default: U, func: Callable[[T], U]) -> U:
        return func(self.value) if self.some else default

    def map_or_else(self, default: Callable[[], U], func: Callable[[T], U]) -> U:
        return func(self.value) if self.some else default()

    def ok_or(self, err: E) -> Result[T, E]:
        """Convert to a Result, using ``err`` for Nothing."""
        from .result import Err, Ok

        return Ok(self.value) if self.some else Err(err)

    def ok_or_else(self, err: Callable[[], E]) -> Result[T, E]:
        from .result import Err, Ok

        return Ok(self.value) if self.some else Err(err())

    def transpose(self) -> Result[Opt[Any], Any]:
        """Turn ``Opt[Result[T, E]]`` into ``Result[Opt[T], E]``."""
        from .result import Ok

        return self.value.map(Some) if self.some else Ok(Nothing)

    @staticmethod
    def zip(*opts: Opt[Any]) -> Opt[tuple[Any, ...]]:
        """
        Combine several options.

        Returns:
            Some of a tuple of every payload, or Nothing if any is absent
        """
        values = []
        for opt in opts:
            if not opt.some:
                return Nothing
            values.append(opt.value)
        return Some(tuple(values))


def Some(value: T) -> Opt[T]:
    """Wrap a present value."""
    return Opt(True, value)


Nothing: Opt[Any] = Opt(False, None)
