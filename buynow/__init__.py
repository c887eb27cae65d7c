"""
buynow - Time-Gated Liquidation of Defaulted Loan Collateral

A defaulted loan's collateral goes through three sale phases:

    GRACE_PERIOD    only the borrower may buy, at the grace period price
    BUY_NOW_PERIOD  anyone may buy, at the buy-now price
    AUCTION_PERIOD  configured window, no settlement rule

Prices are frozen when the liquidation is created. Phases are derived from
the clock on every access and never stored.

Usage:
    from buynow import (
        LiquidationStateMachine, LiquidationSettings, AddressRegistry,
        ManualClock, TokenBook, LendingPool, CollateralVault, LoanBook,
        Collateral,
    )

    clock = ManualClock(1_700_000_000)
    book, vault, loans = TokenBook(), CollateralVault(), LoanBook(clock)
    pool = LendingPool(book, "WETH", "pool")

    settings = LiquidationSettings("admin", verbose=False)
    registry = AddressRegistry("admin", verbose=False)
    registry.set_custodian("admin", vault)
    registry.add_loan_ledger("admin", "WETH", loans)
    registry.add_funds_agent("admin", "WETH", pool)

    machine = LiquidationStateMachine(settings, registry, clock)
    machine.create_liquidation("PUNKS", 7, "alice", 0, "WETH")
    machine.buy_during_grace_period("PUNKS", 7, caller="alice")
"""

# Core types
from .core import (
    Collateral,
    CollateralKey,
    Loan,
    LoanStatus,
    Liquidation,
    PeriodDurations,
    Phase,
    # Protocols
    Clock,
    LoanLedger,
    CollateralCustodian,
    FundsTransferAgent,
    SupportsSnapshot,
    # Exceptions
    LiquidationError,
    AuthorizationError,
    ValidationError,
    StateError,
    NotFoundError,
    SettlementError,
    CallerNotBorrower,
    NotOwner,
    NotProposedOwner,
    InvalidArgument,
    CollateralNotInLoan,
    CollateralNotInCustody,
    LoanNotDefaulted,
    WrongPhase,
    LiquidationAlreadyActive,
    LiquidationNotFound,
    NotRegistered,
    CustodyError,
    FundsError,
    InsufficientFunds,
    InsufficientAllowance,
    # Constants
    BPS_SCALE,
    SECONDS_PER_DAY,
    DAYS_PER_YEAR,
    SECONDS_PER_YEAR,
    GRACE_PERIOD_PRICE_DAYS,
    BUY_NOW_PERIOD_PRICE_DAYS,
    DEFAULT_GRACE_PERIOD_DURATION,
    DEFAULT_BUY_NOW_PERIOD_DURATION,
    DEFAULT_AUCTION_PERIOD_DURATION,
)

# Pricing
from .pricing import (
    LiquidationPrices,
    calculate_interest_amount,
    calculate_apr,
    calculate_period_price,
    calculate_grace_period_price,
    calculate_buy_now_period_price,
    calculate_prices,
    price_loan,
)

# Phases
from .phases import compute_maturities, phase_at, price_at

# Events
from .events import (
    EventLog,
    LiquidationAdded,
    LiquidationRemoved,
    NFTPurchased,
    OwnerProposed,
    OwnershipTransferred,
    GracePeriodDurationChanged,
    BuyNowPeriodDurationChanged,
    AuctionPeriodDurationChanged,
    LoanLedgerAdded,
    LoanLedgerRemoved,
    FundsAgentAdded,
    FundsAgentRemoved,
    CustodianSet,
)

# Configuration and registry
from .governance import Ownable
from .config import LiquidationSettings
from .registry import AddressRegistry

# Clocks
from .clock import ManualClock, SystemClock

# State machine
from .liquidations import LiquidationStateMachine

# Reference collaborators
from .book import TokenBook, LendingPool, CollateralVault, LoanBook


__all__ = [
    'Collateral', 'CollateralKey', 'Loan', 'LoanStatus', 'Liquidation',
    'PeriodDurations', 'Phase',
    'Clock', 'LoanLedger', 'CollateralCustodian', 'FundsTransferAgent',
    'SupportsSnapshot',
    'LiquidationError', 'AuthorizationError', 'ValidationError', 'StateError',
    'NotFoundError', 'SettlementError', 'CallerNotBorrower', 'NotOwner',
    'NotProposedOwner', 'InvalidArgument', 'CollateralNotInLoan',
    'CollateralNotInCustody', 'LoanNotDefaulted', 'WrongPhase',
    'LiquidationAlreadyActive', 'LiquidationNotFound', 'NotRegistered',
    'CustodyError', 'FundsError', 'InsufficientFunds', 'InsufficientAllowance',
    'BPS_SCALE', 'SECONDS_PER_DAY', 'DAYS_PER_YEAR', 'SECONDS_PER_YEAR',
    'GRACE_PERIOD_PRICE_DAYS', 'BUY_NOW_PERIOD_PRICE_DAYS',
    'DEFAULT_GRACE_PERIOD_DURATION', 'DEFAULT_BUY_NOW_PERIOD_DURATION',
    'DEFAULT_AUCTION_PERIOD_DURATION',
    'LiquidationPrices', 'calculate_interest_amount', 'calculate_apr',
    'calculate_period_price', 'calculate_grace_period_price',
    'calculate_buy_now_period_price', 'calculate_prices', 'price_loan',
    'compute_maturities', 'phase_at', 'price_at',
    'EventLog', 'LiquidationAdded', 'LiquidationRemoved', 'NFTPurchased',
    'OwnerProposed', 'OwnershipTransferred', 'GracePeriodDurationChanged',
    'BuyNowPeriodDurationChanged', 'AuctionPeriodDurationChanged',
    'LoanLedgerAdded', 'LoanLedgerRemoved', 'FundsAgentAdded',
    'FundsAgentRemoved', 'CustodianSet',
    'Ownable', 'LiquidationSettings', 'AddressRegistry',
    'ManualClock', 'SystemClock',
    'LiquidationStateMachine',
    'TokenBook', 'LendingPool', 'CollateralVault', 'LoanBook',
]

__version__ = '1.0.0'
