"""
conftest.py - Shared pytest fixtures for liquidation tests

Provides common fixtures used across unit, conformance and functional tests:
- A manual clock and the in-memory collaborators (tokens, vault, loans, pool)
- Settings and registry wired for one currency
- A ready LiquidationStateMachine and an active liquidation
"""

import pytest

from buynow import (
    AddressRegistry, CollateralVault, EventLog, LendingPool,
    LiquidationSettings, LiquidationStateMachine, LoanBook, ManualClock,
    TokenBook,
)

from tests.helpers import (
    START_TIME, OWNER, BORROWER, POOL_WALLET, CURRENCY, COLLECTION,
    GRACE_PERIOD_DURATION, BUY_NOW_PERIOD_DURATION, AUCTION_PERIOD_DURATION,
    open_defaulted_loan,
)


@pytest.fixture
def clock():
    return ManualClock(START_TIME)


@pytest.fixture
def book():
    return TokenBook()


@pytest.fixture
def vault():
    return CollateralVault("vault")


@pytest.fixture
def loans(clock):
    return LoanBook(clock)


@pytest.fixture
def pool(book):
    return LendingPool(book, CURRENCY, POOL_WALLET)


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def settings(event_log):
    return LiquidationSettings(
        OWNER,
        grace_period_duration=GRACE_PERIOD_DURATION,
        buy_now_period_duration=BUY_NOW_PERIOD_DURATION,
        auction_period_duration=AUCTION_PERIOD_DURATION,
        events=event_log,
        verbose=False,
    )


@pytest.fixture
def registry(event_log, vault, loans, pool):
    registry = AddressRegistry(OWNER, events=event_log, verbose=False)
    registry.set_custodian(OWNER, vault)
    registry.add_loan_ledger(OWNER, CURRENCY, loans)
    registry.add_funds_agent(OWNER, CURRENCY, pool)
    return registry


@pytest.fixture
def machine(settings, registry, clock, event_log):
    return LiquidationStateMachine(settings, registry, clock, events=event_log, verbose=False)


@pytest.fixture
def liquidation(machine, loans, vault):
    """An active liquidation of PUNKS#0 created at START_TIME."""
    loan_id = open_defaulted_loan(loans, vault)
    return machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, CURRENCY)
