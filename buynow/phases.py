"""
phases.py - Time-Derived Liquidation Phases

The phase of a liquidation is never stored. It is recomputed from the frozen
maturities and the current time on every access:

    now < grace_period_maturity                    -> GRACE_PERIOD
    grace_period_maturity <= now < buy_now_maturity -> BUY_NOW_PERIOD
    buy_now_maturity <= now < auction_maturity      -> AUCTION_PERIOD
    auction_maturity <= now                         -> EXPIRED

An inactive (empty) record is always in phase NONE.
"""
from __future__ import annotations
from typing import Optional, Tuple

from .core import Liquidation, Phase, PeriodDurations


def compute_maturities(start_time: int, durations: PeriodDurations) -> Tuple[int, int, int]:
    """Return (grace, buy_now, auction) maturities for a liquidation starting at start_time."""
    grace = start_time + durations.grace_period
    buy_now = grace + durations.buy_now_period
    auction = buy_now + durations.auction_period
    return grace, buy_now, auction


def phase_at(liquidation: Liquidation, now: int) -> Phase:
    if not liquidation.is_active:
        return Phase.NONE
    if now < liquidation.grace_period_maturity:
        return Phase.GRACE_PERIOD
    if now < liquidation.buy_now_period_maturity:
        return Phase.BUY_NOW_PERIOD
    if now < liquidation.auction_period_maturity:
        return Phase.AUCTION_PERIOD
    return Phase.EXPIRED


def price_at(liquidation: Liquidation, now: int) -> Optional[int]:
    """
    Frozen price payable at `now`, or None outside the purchasable phases.

    The grace period price is only payable by the borrower.
    """
    phase = phase_at(liquidation, now)
    if phase == Phase.GRACE_PERIOD:
        return liquidation.grace_period_price
    if phase == Phase.BUY_NOW_PERIOD:
        return liquidation.buy_now_period_price
    return None
