"""
helpers.py - Test constants and setup helpers

Values mirror a small real-world liquidation: a 0.1 WETH loan at 2.5% over
30 days, with 5-second sale phases so tests can step through every phase.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from buynow import (
    AddressRegistry, Collateral, CollateralVault, EventLog, LendingPool,
    LiquidationSettings, LiquidationStateMachine, LoanBook, ManualClock,
    TokenBook, SECONDS_PER_DAY,
)


START_TIME = 1_700_000_000

OWNER = "admin"
BORROWER = "alice"
BUYER = "bob"
POOL_WALLET = "pool"

CURRENCY = "WETH"
COLLECTION = "PUNKS"

GRACE_PERIOD_DURATION = 5
BUY_NOW_PERIOD_DURATION = 5
AUCTION_PERIOD_DURATION = 5

LOAN_DURATION = 30 * SECONDS_PER_DAY
LOAN_AMOUNT = 10 ** 17              # 0.1 of an 18-decimal currency
LOAN_INTEREST = 250                 # 2.5% in parts per 10000


def open_defaulted_loan(
    loans: LoanBook,
    vault: CollateralVault,
    borrower: str = BORROWER,
    token_ids: Iterable[int] = (0,),
    collection: str = COLLECTION,
    principal: int = LOAN_AMOUNT,
    interest_rate_bps: int = LOAN_INTEREST,
    duration: int = LOAN_DURATION,
) -> int:
    """Deposit collateral, create, start and default a loan; return its id."""
    token_ids = list(token_ids)
    for token_id in token_ids:
        vault.deposit(collection, token_id)
    loan_id = loans.add_loan(
        borrower,
        principal,
        interest_rate_bps,
        loans.clock.now() + duration,
        [Collateral(collection, token_id, principal) for token_id in token_ids],
    )
    loans.start_loan(borrower, loan_id)
    loans.mark_defaulted(borrower, loan_id)
    return loan_id


def fund(book: TokenBook, wallet: str, amount: int, spender: str = POOL_WALLET) -> None:
    """Mint `amount` to wallet and approve the pool to pull it."""
    book.mint(CURRENCY, wallet, amount)
    book.approve(CURRENCY, wallet, spender, amount)


@dataclass
class System:
    """Everything a liquidation needs, wired for one currency."""
    clock: ManualClock
    book: TokenBook
    vault: CollateralVault
    loans: LoanBook
    pool: LendingPool
    events: EventLog
    settings: LiquidationSettings
    registry: AddressRegistry
    machine: LiquidationStateMachine


def build_system(
    start_time: int = START_TIME,
    grace_period: int = GRACE_PERIOD_DURATION,
    buy_now_period: int = BUY_NOW_PERIOD_DURATION,
    auction_period: int = AUCTION_PERIOD_DURATION,
) -> System:
    """Fresh system for property tests, where pytest fixtures are not reset between examples."""
    clock = ManualClock(start_time)
    book = TokenBook()
    vault = CollateralVault("vault")
    loans = LoanBook(clock)
    pool = LendingPool(book, CURRENCY, POOL_WALLET)
    events = EventLog()
    settings = LiquidationSettings(
        OWNER,
        grace_period_duration=grace_period,
        buy_now_period_duration=buy_now_period,
        auction_period_duration=auction_period,
        events=events,
        verbose=False,
    )
    registry = AddressRegistry(OWNER, events=events, verbose=False)
    registry.set_custodian(OWNER, vault)
    registry.add_loan_ledger(OWNER, CURRENCY, loans)
    registry.add_funds_agent(OWNER, CURRENCY, pool)
    machine = LiquidationStateMachine(settings, registry, clock, events=events, verbose=False)
    return System(clock, book, vault, loans, pool, events, settings, registry, machine)
