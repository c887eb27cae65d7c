"""
pricing.py - Frozen Sale Prices for Liquidations

All prices are computed once, when a liquidation is created, from the loan's
economics. They are never recomputed afterwards.

=== FORMULAS ===

    interest_amount = principal * (10000 + interest_rate_bps) // 10000
    apr             = interest_rate_bps * 31_536_000 // (maturity - start_time)
    period_price    = principal + interest_amount + principal * apr * days // 365

    grace period price   : days = 2
    buy-now period price : days = 17

=== ARITHMETIC ===

Plain Python ints with floor division. Operands are non-negative, so floor
and truncation toward zero agree. No floats and no Decimal: results are
bit-for-bit reproducible.

Note that interest_amount includes the principal (it is the full amount owed
on the loan), so the principal appears twice in every period price.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from .core import (
    Loan, InvalidArgument,
    BPS_SCALE, SECONDS_PER_YEAR, DAYS_PER_YEAR,
    GRACE_PERIOD_PRICE_DAYS, BUY_NOW_PERIOD_PRICE_DAYS,
)


def _require_amount(name: str, value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgument(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {value}")


# =============================================================================
# PURE CALCULATION FUNCTIONS
# =============================================================================

def calculate_interest_amount(principal: int, interest_rate_bps: int) -> int:
    """
    Amount owed on the loan: principal grossed up by the interest rate.

    Example:
        principal 10**17, 250 bps -> 102_500_000_000_000_000
    """
    _require_amount("principal", principal)
    _require_amount("interest_rate_bps", interest_rate_bps)
    return principal * (BPS_SCALE + interest_rate_bps) // BPS_SCALE


def calculate_apr(interest_rate_bps: int, start_time: int, maturity: int) -> int:
    """
    Annualize the loan's interest rate over its duration (basis points).

    Raises:
        ZeroDivisionError: If maturity == start_time. Loans of zero duration
            must be rejected when they are created, not here.
        InvalidArgument: If maturity precedes start_time.

    Example:
        250 bps over 30 days -> 250 * 31_536_000 // 2_592_000 = 3041
    """
    _require_amount("interest_rate_bps", interest_rate_bps)
    _require_amount("start_time", start_time)
    _require_amount("maturity", maturity)
    if maturity < start_time:
        raise InvalidArgument(f"maturity {maturity} precedes start_time {start_time}")
    return interest_rate_bps * SECONDS_PER_YEAR // (maturity - start_time)


def calculate_period_price(principal: int, interest_amount: int, apr: int, days: int) -> int:
    """Sale price accruing `days` of the annual rate on top of the amount owed."""
    _require_amount("principal", principal)
    _require_amount("interest_amount", interest_amount)
    _require_amount("apr", apr)
    _require_amount("days", days)
    return principal + interest_amount + principal * apr * days // DAYS_PER_YEAR


def calculate_grace_period_price(principal: int, interest_amount: int, apr: int) -> int:
    return calculate_period_price(principal, interest_amount, apr, GRACE_PERIOD_PRICE_DAYS)


def calculate_buy_now_period_price(principal: int, interest_amount: int, apr: int) -> int:
    return calculate_period_price(principal, interest_amount, apr, BUY_NOW_PERIOD_PRICE_DAYS)


# =============================================================================
# RESULT TYPE AND CONVENIENCE
# =============================================================================

@dataclass(frozen=True, slots=True)
class LiquidationPrices:
    """Everything the pricing engine freezes into a liquidation."""
    interest_amount: int
    apr: int
    grace_period_price: int
    buy_now_period_price: int


def calculate_prices(
    principal: int,
    interest_rate_bps: int,
    start_time: int,
    maturity: int,
) -> LiquidationPrices:
    """
    Compute all frozen prices from explicit loan economics.

    Args:
        principal: Amount lent
        interest_rate_bps: Interest over the loan's life (basis points)
        start_time: Loan start (POSIX seconds)
        maturity: Loan maturity (POSIX seconds)

    Returns:
        LiquidationPrices
    """
    interest_amount = calculate_interest_amount(principal, interest_rate_bps)
    apr = calculate_apr(interest_rate_bps, start_time, maturity)
    return LiquidationPrices(
        interest_amount=interest_amount,
        apr=apr,
        grace_period_price=calculate_grace_period_price(principal, interest_amount, apr),
        buy_now_period_price=calculate_buy_now_period_price(principal, interest_amount, apr),
    )


def price_loan(loan: Loan) -> LiquidationPrices:
    """calculate_prices() with the economics read off a Loan."""
    return calculate_prices(
        loan.principal, loan.interest_rate_bps, loan.start_time, loan.maturity
    )
