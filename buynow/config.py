"""
config.py - Liquidation Settings

Owner-gated durations of the three sale phases. A liquidation copies the
durations in force when it is created; later changes only apply to
liquidations created afterwards.
"""

from __future__ import annotations
from typing import Optional

from .core import (
    PeriodDurations, InvalidArgument,
    DEFAULT_GRACE_PERIOD_DURATION, DEFAULT_BUY_NOW_PERIOD_DURATION,
    DEFAULT_AUCTION_PERIOD_DURATION,
)
from .events import (
    EventLog,
    GracePeriodDurationChanged, BuyNowPeriodDurationChanged,
    AuctionPeriodDurationChanged,
)
from .governance import Ownable


def _check_duration(current: int, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgument(f"duration must be an int, got {type(value).__name__}")
    if value <= 0:
        raise InvalidArgument("duration is 0")
    if value == current:
        raise InvalidArgument("new value is the same")


class LiquidationSettings(Ownable):
    """
    Phase durations with owner-only setters.

    Example:
        settings = LiquidationSettings("admin", grace_period_duration=5,
                                       buy_now_period_duration=5,
                                       auction_period_duration=5)
        settings.set_grace_period_duration("admin", 6)
    """

    def __init__(
        self,
        owner: str,
        grace_period_duration: int = DEFAULT_GRACE_PERIOD_DURATION,
        buy_now_period_duration: int = DEFAULT_BUY_NOW_PERIOD_DURATION,
        auction_period_duration: int = DEFAULT_AUCTION_PERIOD_DURATION,
        events: Optional[EventLog] = None,
        verbose: bool = True,
    ):
        super().__init__(owner, events=events, verbose=verbose)
        # PeriodDurations validates all three on construction
        self._durations = PeriodDurations(
            grace_period=grace_period_duration,
            buy_now_period=buy_now_period_duration,
            auction_period=auction_period_duration,
        )

    @property
    def durations(self) -> PeriodDurations:
        return self._durations

    @property
    def grace_period_duration(self) -> int:
        return self._durations.grace_period

    @property
    def buy_now_period_duration(self) -> int:
        return self._durations.buy_now_period

    @property
    def auction_period_duration(self) -> int:
        return self._durations.auction_period

    def set_grace_period_duration(self, caller: str, value: int) -> None:
        self._only_owner(caller)
        current = self._durations.grace_period
        _check_duration(current, value)
        self._durations = PeriodDurations(value, self._durations.buy_now_period, self._durations.auction_period)
        self._emit(GracePeriodDurationChanged(current_value=current, new_value=value))

    def set_buy_now_period_duration(self, caller: str, value: int) -> None:
        self._only_owner(caller)
        current = self._durations.buy_now_period
        _check_duration(current, value)
        self._durations = PeriodDurations(self._durations.grace_period, value, self._durations.auction_period)
        self._emit(BuyNowPeriodDurationChanged(current_value=current, new_value=value))

    def set_auction_period_duration(self, caller: str, value: int) -> None:
        self._only_owner(caller)
        current = self._durations.auction_period
        _check_duration(current, value)
        self._durations = PeriodDurations(self._durations.grace_period, self._durations.buy_now_period, value)
        self._emit(AuctionPeriodDurationChanged(current_value=current, new_value=value))
