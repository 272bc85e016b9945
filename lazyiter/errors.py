"""Exceptions raised by lazyiter."""


class LazyIterError(Exception):
    """Base class for errors raised by the library itself."""


class UnwrapError(LazyIterError, ValueError):
    """An ``Opt`` or ``Result`` was unwrapped on the wrong variant."""
