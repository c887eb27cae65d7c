"""
Core types and protocols for the collateral liquidation system.

This module provides the foundational data structures and protocols:
1. Constants: fixed-point scales, day-count conventions, default durations
2. Protocols: read-only and capability interfaces for external collaborators
3. Immutable data structures: Collateral, Loan, Liquidation, PeriodDurations
4. Enums: LoanStatus, Phase
5. Exceptions: LiquidationError and its taxonomy

All amounts are integers in the currency's base unit. All times are integer
POSIX seconds. Nothing in this module mutates state.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, Tuple, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Rates are expressed in parts per 10,000 (basis points).
BPS_SCALE = 10_000

# Fixed 365-day year, no leap-year adjustment.
SECONDS_PER_DAY = 24 * 60 * 60
DAYS_PER_YEAR = 365
SECONDS_PER_YEAR = DAYS_PER_YEAR * SECONDS_PER_DAY  # 31_536_000

# Day multipliers used by the sale price formulas. These are fixed and do not
# follow the configured period durations.
GRACE_PERIOD_PRICE_DAYS = 2
BUY_NOW_PERIOD_PRICE_DAYS = 17

# Default period durations (seconds). Grace + buy-now spans the 17 days the
# buy-now price accrues for.
DEFAULT_GRACE_PERIOD_DURATION = 2 * SECONDS_PER_DAY
DEFAULT_BUY_NOW_PERIOD_DURATION = 15 * SECONDS_PER_DAY
DEFAULT_AUCTION_PERIOD_DURATION = 15 * SECONDS_PER_DAY


# ============================================================================
# ENUMS
# ============================================================================

class LoanStatus(str, Enum):
    """Status of a loan as reported by the loan ledger."""
    PENDING = "pending"         # Created, funds not yet released
    STARTED = "started"         # Funds released, repayment outstanding
    PAID = "paid"               # Fully repaid
    DEFAULTED = "defaulted"     # Past maturity without repayment


class Phase(str, Enum):
    """
    Sale phase of a liquidation, always derived from time.

    NONE: no active liquidation for the key.
    GRACE_PERIOD: only the borrower may buy, at the grace period price.
    BUY_NOW_PERIOD: anyone may buy, at the buy-now price.
    AUCTION_PERIOD: configured window with no settlement rule.
    EXPIRED: past the auction window, record still present.
    """
    NONE = "none"
    GRACE_PERIOD = "grace_period"
    BUY_NOW_PERIOD = "buy_now_period"
    AUCTION_PERIOD = "auction_period"
    EXPIRED = "expired"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LiquidationError(Exception):
    """Base exception for all liquidation-related errors."""
    pass


class AuthorizationError(LiquidationError):
    """Caller lacks the identity or role the operation requires."""
    pass


class ValidationError(LiquidationError):
    """Malformed input or wrong linkage between inputs."""
    pass


class StateError(LiquidationError):
    """Operation is invalid for the current phase, loan status or custody."""
    pass


class NotFoundError(LiquidationError):
    """Referenced liquidation or registry entry does not exist."""
    pass


class SettlementError(LiquidationError):
    """Raised by collaborators when a transfer cannot be carried out."""
    pass


class CallerNotBorrower(AuthorizationError):
    """Raised when someone other than the borrower buys during the grace period."""
    pass


class NotOwner(AuthorizationError):
    """Raised when a non-owner calls an owner-only operation."""
    pass


class NotProposedOwner(AuthorizationError):
    """Raised when someone other than the proposed owner claims ownership."""
    pass


class InvalidArgument(ValidationError):
    """Raised for empty identifiers, non-positive durations and unchanged values."""
    pass


class CollateralNotInLoan(ValidationError):
    """Raised when the collateral item is not part of the loan's collateral list."""
    pass


class CollateralNotInCustody(StateError):
    """Raised when the custodian does not hold the collateral item."""
    pass


class LoanNotDefaulted(StateError):
    """Raised when the loan does not exist or is not in DEFAULTED status."""
    pass


class WrongPhase(StateError):
    """Raised when a purchase is attempted outside its phase window."""
    pass


class LiquidationAlreadyActive(StateError):
    """Raised when a liquidation already exists for the collateral item."""
    pass


class LiquidationNotFound(NotFoundError):
    """Raised when no active liquidation exists for the collateral item."""
    pass


class NotRegistered(NotFoundError):
    """Raised when a currency type or collaborator is missing from the registry."""
    pass


class CustodyError(SettlementError):
    """Raised by a custodian asked to transfer an item it does not hold."""
    pass


class FundsError(SettlementError):
    """Base class for funds transfer failures."""
    pass


class InsufficientFunds(FundsError):
    """Raised when the payer's balance is below the amount."""
    pass


class InsufficientAllowance(FundsError):
    """Raised when the payer has not approved enough for the spender."""
    pass


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

CollateralKey = Tuple[str, int]


@dataclass(frozen=True, slots=True)
class Collateral:
    """
    A uniquely identified asset pledged against a loan.

    Attributes:
        collateral_type: Identifier of the asset collection (e.g. an NFT contract).
        token_id: Identifier of the item within the collection.
        amount: Value attributed to the item by the loan (informational).
    """
    collateral_type: str
    token_id: int
    amount: int = 0

    @property
    def key(self) -> CollateralKey:
        return (self.collateral_type, self.token_id)


@dataclass(frozen=True, slots=True)
class Loan:
    """
    Read-only view of a loan as exposed by a LoanLedger.

    Attributes:
        loan_id: Identifier of the loan within the borrower's loans.
        borrower: Wallet that took the loan.
        principal: Amount lent, in currency base units.
        interest_rate_bps: Interest over the loan's life in basis points.
        maturity: Loan maturity (POSIX seconds).
        start_time: When funds were released (POSIX seconds).
        status: Current LoanStatus.
        collaterals: Ordered collateral items pledged against the loan.
    """
    loan_id: int
    borrower: str
    principal: int
    interest_rate_bps: int
    maturity: int
    start_time: int
    status: LoanStatus
    collaterals: Tuple[Collateral, ...] = ()

    @property
    def defaulted(self) -> bool:
        return self.status == LoanStatus.DEFAULTED

    def has_collateral(self, collateral_type: str, token_id: int) -> bool:
        """Membership by (collateral_type, token_id); amounts are ignored."""
        key = (collateral_type, token_id)
        return any(c.key == key for c in self.collaterals)


@dataclass(frozen=True, slots=True)
class PeriodDurations:
    """Lengths (seconds) of the three sale phases, frozen into each liquidation."""
    grace_period: int = DEFAULT_GRACE_PERIOD_DURATION
    buy_now_period: int = DEFAULT_BUY_NOW_PERIOD_DURATION
    auction_period: int = DEFAULT_AUCTION_PERIOD_DURATION

    def __post_init__(self):
        for name in ("grace_period", "buy_now_period", "auction_period"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise InvalidArgument(f"{name} duration must be a positive int, got {value!r}")


@dataclass(frozen=True, slots=True)
class Liquidation:
    """
    An active liquidation of one collateral item - frozen at creation.

    Maturities and prices are computed once when the liquidation is created
    and never recomputed. The phase is not stored; see buynow.phases.

    Attributes:
        collateral_type, token_id: Unique key of the liquidation.
        start_time: Creation time (POSIX seconds).
        grace_period_maturity: start_time + grace period duration.
        buy_now_period_maturity: grace_period_maturity + buy-now duration.
        auction_period_maturity: buy_now_period_maturity + auction duration.
        principal, interest_amount, apr: Loan economics copied at creation.
        grace_period_price: Borrower's repurchase price.
        buy_now_period_price: Price open to any buyer.
        borrower: Wallet holding first-refusal rights.
        loan_id: Loan the collateral was pledged against.
        currency_type: Currency the loan was denominated in.
    """
    collateral_type: str
    token_id: int
    start_time: int
    grace_period_maturity: int
    buy_now_period_maturity: int
    auction_period_maturity: int
    principal: int
    interest_amount: int
    apr: int
    grace_period_price: int
    buy_now_period_price: int
    borrower: str
    loan_id: int
    currency_type: str

    @classmethod
    def empty(cls) -> Liquidation:
        """Zero record returned when no liquidation is active for a key."""
        return cls(
            collateral_type="", token_id=0, start_time=0,
            grace_period_maturity=0, buy_now_period_maturity=0,
            auction_period_maturity=0, principal=0, interest_amount=0, apr=0,
            grace_period_price=0, buy_now_period_price=0,
            borrower="", loan_id=0, currency_type="",
        )

    @property
    def key(self) -> CollateralKey:
        return (self.collateral_type, self.token_id)

    @property
    def is_active(self) -> bool:
        return bool(self.collateral_type)

    def __repr__(self) -> str:
        if not self.is_active:
            return "Liquidation(<none>)"
        return (
            f"Liquidation({self.collateral_type}#{self.token_id}, "
            f"borrower={self.borrower}, grace<{self.grace_period_maturity}, "
            f"buy_now<{self.buy_now_period_maturity}, {self.currency_type})"
        )


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class Clock(Protocol):
    """Source of the current logical time (POSIX seconds)."""

    def now(self) -> int:
        ...


@runtime_checkable
class LoanLedger(Protocol):
    """
    Read-only access to loans.

    The liquidation core never mutates loans; it only checks status and
    collateral membership and copies the economics.
    """

    def get_loan(self, borrower: str, loan_id: int) -> Optional[Loan]:
        """Return the loan, or None if the borrower has no such loan."""
        ...


@runtime_checkable
class CollateralCustodian(Protocol):
    """Authoritative holder of collateral items."""

    def is_held_in_custody(self, collateral_type: str, token_id: int) -> bool:
        ...

    def transfer_custody(self, collateral_type: str, token_id: int, to: str) -> None:
        """
        Release a held item to a wallet.

        Raises:
            CustodyError: If the item is not held in custody.
        """
        ...


@runtime_checkable
class FundsTransferAgent(Protocol):
    """
    Moves currency from a buyer to the liquidation's beneficiary.

    Attributes:
        beneficiary: Wallet that receives liquidation proceeds.
    """

    beneficiary: str

    def transfer_from(self, currency_type: str, payer: str, amount: int, beneficiary: str) -> None:
        """
        Raises:
            FundsError: On insufficient balance or allowance.
        """
        ...


@runtime_checkable
class SupportsSnapshot(Protocol):
    """
    Collaborators that can take part in all-or-nothing settlement.

    snapshot() returns an opaque token; restore(token) puts the collaborator
    back to exactly that state.
    """

    def snapshot(self) -> Any:
        ...

    def restore(self, token: Any) -> None:
        ...


# ============================================================================
# ARGUMENT CHECKS
# ============================================================================

def require_identifier(name: str, value: Any) -> None:
    """Raise InvalidArgument unless value is a non-blank string."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} is empty")


def require_non_negative_int(name: str, value: Any) -> None:
    """Raise InvalidArgument unless value is an int >= 0 (bools rejected)."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidArgument(f"{name} must be a non-negative int, got {value!r}")
