"""
test_liquidation_scenarios.py - End-to-end liquidation scenario tests

Tests complete liquidation lifecycles:
- Maturities of a freshly created liquidation
- Borrower repurchase during the grace period
- Third-party purchase during the buy-now period
- Rejected creations and purchases
- Multi-collateral loans sold item by item
- Several currencies side by side
"""

import pytest

from buynow import (
    Collateral, LendingPool, LoanBook, Phase,
    CallerNotBorrower, LoanNotDefaulted, CollateralNotInLoan, WrongPhase,
    LiquidationAdded, LiquidationRemoved, NFTPurchased,
)

from tests.helpers import (
    START_TIME, OWNER, BORROWER, BUYER, POOL_WALLET, CURRENCY, COLLECTION,
    LOAN_AMOUNT, LOAN_INTEREST, LOAN_DURATION,
    build_system, open_defaulted_loan, fund,
)


class TestBasicScenarios:
    """Single-item liquidations from creation to settlement."""

    def test_maturities_after_creation(self):
        """Durations of 5 seconds each put the maturities at start+5, +10 and +15."""
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault)

        liq = system.machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, CURRENCY)

        assert liq.start_time == START_TIME
        assert liq.grace_period_maturity == START_TIME + 5
        assert liq.buy_now_period_maturity == START_TIME + 10
        assert liq.auction_period_maturity == START_TIME + 15

    def test_borrower_repurchases_in_grace(self):
        """Borrower pays the exact grace price to the pool and gets the item back."""
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault)
        liq = system.machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, CURRENCY)

        fund(system.book, BORROWER, liq.grace_period_price + 1_000)
        system.clock.advance(2)
        system.machine.buy_during_grace_period(COLLECTION, 0, BORROWER)

        assert system.book.balance_of(CURRENCY, BORROWER) == 1_000
        assert system.book.balance_of(CURRENCY, POOL_WALLET) == liq.grace_period_price
        assert system.vault.owner_of(COLLECTION, 0) == BORROWER
        assert not system.machine.is_liquidation_active(COLLECTION, 0)
        assert [type(e) for e in system.events.events[-3:]] == [
            LiquidationAdded, LiquidationRemoved, NFTPurchased,
        ]

    def test_stranger_rejected_in_grace(self):
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault)
        liq = system.machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, CURRENCY)
        fund(system.book, BUYER, liq.grace_period_price)

        with pytest.raises(CallerNotBorrower):
            system.machine.buy_during_grace_period(COLLECTION, 0, BUYER)

        assert system.machine.get_liquidation(COLLECTION, 0) == liq
        assert system.book.balance_of(CURRENCY, BUYER) == liq.grace_period_price
        assert system.vault.is_held_in_custody(COLLECTION, 0)

    def test_loan_not_defaulted(self):
        system = build_system()
        system.vault.deposit(COLLECTION, 0)
        loan_id = system.loans.add_loan(
            BORROWER, LOAN_AMOUNT, LOAN_INTEREST, START_TIME + LOAN_DURATION,
            [Collateral(COLLECTION, 0, LOAN_AMOUNT)],
        )
        system.loans.start_loan(BORROWER, loan_id)

        with pytest.raises(LoanNotDefaulted):
            system.machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, CURRENCY)
        assert len(system.machine) == 0

    def test_collateral_not_in_loan(self):
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault, token_ids=(0,))
        system.vault.deposit(COLLECTION, 1)

        with pytest.raises(CollateralNotInLoan):
            system.machine.create_liquidation(COLLECTION, 1, BORROWER, loan_id, CURRENCY)

    def test_buy_now_after_borrower_passes(self):
        """The borrower lets the grace period lapse and a third party buys."""
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault)
        liq = system.machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, CURRENCY)
        fund(system.book, BUYER, liq.buy_now_period_price)

        with pytest.raises(WrongPhase):
            system.machine.buy_during_buy_now_period(COLLECTION, 0, BUYER)

        system.clock.advance(5)
        assert system.machine.phase_of(COLLECTION, 0) == Phase.BUY_NOW_PERIOD
        with pytest.raises(WrongPhase):
            system.machine.buy_during_grace_period(COLLECTION, 0, BORROWER)

        purchase = system.machine.buy_during_buy_now_period(COLLECTION, 0, BUYER)

        assert purchase.amount == liq.buy_now_period_price > liq.grace_period_price
        assert system.vault.owner_of(COLLECTION, 0) == BUYER
        assert system.pool.received == [(BUYER, liq.buy_now_period_price)]

    def test_unsold_item_stays_locked(self):
        """Nobody buys: the item sits through auction and expiry, still in custody."""
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault)
        liq = system.machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, CURRENCY)
        fund(system.book, BUYER, liq.buy_now_period_price)

        system.clock.set(liq.buy_now_period_maturity)
        assert system.machine.phase_of(COLLECTION, 0) == Phase.AUCTION_PERIOD
        with pytest.raises(WrongPhase):
            system.machine.buy_during_buy_now_period(COLLECTION, 0, BUYER)

        system.clock.set(liq.auction_period_maturity)
        assert system.machine.phase_of(COLLECTION, 0) == Phase.EXPIRED
        assert system.machine.get_liquidation(COLLECTION, 0) == liq
        assert system.vault.is_held_in_custody(COLLECTION, 0)


class TestMultiCollateral:
    """Loans backed by several items."""

    def test_items_sold_independently(self):
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault, token_ids=(10, 11, 12))
        for token_id in (10, 11, 12):
            system.machine.create_liquidation(COLLECTION, token_id, BORROWER, loan_id, CURRENCY)
        liq = system.machine.get_liquidation(COLLECTION, 10)

        # Every item of the loan carries the loan's prices
        assert {item.grace_period_price for item in system.machine.list_liquidations()} == {
            liq.grace_period_price
        }

        fund(system.book, BORROWER, liq.grace_period_price)
        system.machine.buy_during_grace_period(COLLECTION, 10, BORROWER)

        system.clock.advance(5)
        fund(system.book, BUYER, liq.buy_now_period_price)
        system.machine.buy_during_buy_now_period(COLLECTION, 11, BUYER)

        assert system.vault.owner_of(COLLECTION, 10) == BORROWER
        assert system.vault.owner_of(COLLECTION, 11) == BUYER
        assert system.vault.is_held_in_custody(COLLECTION, 12)
        assert [item.token_id for item in system.machine.list_liquidations()] == [12]
        assert system.pool.total_received == liq.grace_period_price + liq.buy_now_period_price

    def test_staggered_creation_has_own_windows(self):
        system = build_system()
        loan_id = open_defaulted_loan(system.loans, system.vault, token_ids=(1, 2))
        first = system.machine.create_liquidation(COLLECTION, 1, BORROWER, loan_id, CURRENCY)
        system.clock.advance(7)
        second = system.machine.create_liquidation(COLLECTION, 2, BORROWER, loan_id, CURRENCY)

        assert system.machine.phase_of(COLLECTION, 1) == Phase.BUY_NOW_PERIOD
        assert system.machine.phase_of(COLLECTION, 2) == Phase.GRACE_PERIOD
        assert second.grace_period_maturity == first.grace_period_maturity + 7
        assert second.grace_period_price == first.grace_period_price


class TestMultiCurrency:
    """Collaborators resolved per loan currency."""

    def test_usdc_loan_paid_into_usdc_pool(self):
        system = build_system()
        usdc_loans = LoanBook(system.clock)
        usdc_pool = LendingPool(system.book, "USDC", "usdc-pool")
        system.registry.add_loan_ledger(OWNER, "USDC", usdc_loans)
        system.registry.add_funds_agent(OWNER, "USDC", usdc_pool)

        loan_id = open_defaulted_loan(usdc_loans, system.vault, principal=5_000_000,
                                      interest_rate_bps=800)
        liq = system.machine.create_liquidation(COLLECTION, 0, BORROWER, loan_id, "USDC")
        system.book.mint("USDC", BORROWER, liq.grace_period_price)
        system.book.approve("USDC", BORROWER, "usdc-pool", liq.grace_period_price)

        system.machine.buy_during_grace_period(COLLECTION, 0, BORROWER)

        assert liq.currency_type == "USDC"
        assert system.book.balance_of("USDC", "usdc-pool") == liq.grace_period_price
        assert system.book.balance_of(CURRENCY, POOL_WALLET) == 0
        assert system.pool.received == []
