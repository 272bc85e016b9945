"""
Runtime configuration for lazy iteration.

This module manages the process-wide settings that affect how synchronous
producers are driven from asyncio code.
"""

import logging
import os
import threading

logger = logging.getLogger(__name__)


class RuntimeConfig:
    """
    Global configuration for the iterator runtime.

    The only tunable today is the bridge yield interval: how many elements
    a synchronous producer may hand to a stream before the stream gives
    control back to the event loop.
    """

    _instance: "RuntimeConfig | None" = None
    _lock = threading.Lock()

    def __init__(self):
        self._yield_interval: int | None = None

    @classmethod
    def global_config(cls) -> "RuntimeConfig":
        """Get the global runtime configuration instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = RuntimeConfig()
        return cls._instance

    @property
    def yield_interval(self) -> int:
        """
        Number of bridged pulls between cooperative yields to the loop.

        Zero disables yielding; bridged producers then run without ever
        suspending.
        """
        if self._yield_interval is None:
            env_interval = os.environ.get("LAZYITER_YIELD_INTERVAL")
            if env_interval:
                try:
                    self._yield_interval = max(0, int(env_interval))
                except ValueError:
                    logger.warning(
                        "Ignoring invalid LAZYITER_YIELD_INTERVAL=%r",
                        env_interval,
                    )

            if self._yield_interval is None:
                self._yield_interval = 0

        return self._yield_interval

    @yield_interval.setter
    def yield_interval(self, value: int) -> None:
        """Set the yield interval."""
        if value < 0:
            raise ValueError("Yield interval must be at least 0")
        with self._lock:
            self._yield_interval = value

    def reset(self) -> None:
        """Forget explicit settings so the environment is read again."""
        with self._lock:
            self._yield_interval = None


# Global configuration instance
_global_config = RuntimeConfig.global_config()


def set_yield_interval(interval: int) -> None:
    """
    Set how often bridged synchronous producers yield to the event loop.

    Args:
        interval: Pulls between yields (0 disables yielding)

    Example:
        >>> from lazyiter import set_yield_interval
        >>> set_yield_interval(1000)
    """
    _global_config.yield_interval = interval


def get_yield_interval() -> int:
    """
    Get the current bridge yield interval.

    Returns:
        Pulls between yields (0 when yielding is disabled)
    """
    return _global_config.yield_interval
