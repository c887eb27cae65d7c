"""
clock.py - Logical Clocks

The liquidation core reads time exactly once per operation through the
Clock protocol. ManualClock lets tests and simulations move time explicitly;
SystemClock reads wall-clock time.
"""

from __future__ import annotations
import time


class ManualClock:
    """
    Clock whose time only changes when told to.

    Time can only move forward, never backward.

    Example:
        clock = ManualClock(1_700_000_000)
        clock.advance(5)
        clock.now()  # 1_700_000_005
    """

    def __init__(self, initial_time: int = 0):
        if not isinstance(initial_time, int) or initial_time < 0:
            raise ValueError(f"initial_time must be a non-negative int, got {initial_time!r}")
        self._now = initial_time

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move time forward by `seconds` and return the new time."""
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards: advance({seconds})")
        self._now += seconds
        return self._now

    def set(self, new_time: int) -> None:
        """
        Jump to an absolute time.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._now:
            raise ValueError(f"Cannot move time backwards: {new_time} < {self._now}")
        self._now = new_time

    def __repr__(self) -> str:
        return f"ManualClock({self._now})"


class SystemClock:
    """Wall-clock time truncated to whole seconds."""

    def now(self) -> int:
        return int(time.time())
