"""
liquidations.py - Liquidation State Machine

The LiquidationStateMachine is the only component that creates, reads and
deletes liquidation records. It is the stateful counterpart of the pure
functions in pricing.py and phases.py.

Key responsibilities:
    - Create a liquidation from a defaulted loan, freezing prices and maturities
    - Gate purchases by phase (derived from the clock) and by caller
    - Settle purchases atomically: record deletion, funds and custody all
      apply together or not at all
    - Publish notifications only for committed operations

Settlement ordering:
    The record is deleted BEFORE the funds agent and the custodian are
    called. A collaborator that calls back into the machine during
    settlement finds no active liquidation and is rejected with
    LiquidationNotFound, so a liquidation can never be paid out twice.
    While the external calls run the key is marked as settling, and a
    create_liquidation() for it is rejected with LiquidationAlreadyActive
    until settlement finishes.

Atomicity:
    Every operation runs inside a unit of work that snapshots the record
    table, the pending notifications and every enlisted collaborator that
    implements SupportsSnapshot. Any exception restores all of them and is
    re-raised unchanged. A collaborator without snapshot()/restore() is
    still called but is not rolled back: whatever it did before the failure
    stays done.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from .core import (
    Clock, CollateralKey, Liquidation, Phase, SupportsSnapshot,
    CollateralNotInCustody, LoanNotDefaulted, CollateralNotInLoan,
    LiquidationAlreadyActive, LiquidationNotFound, WrongPhase, CallerNotBorrower,
    require_identifier, require_non_negative_int,
)
from .config import LiquidationSettings
from .events import EventLog, LiquidationAdded, LiquidationRemoved, NFTPurchased
from .phases import compute_maturities, phase_at, price_at
from .pricing import price_loan
from .registry import AddressRegistry


class _UnitOfWork:
    """Undo information for collaborators touched by one operation."""

    def __init__(self):
        self._undo: List[Tuple[SupportsSnapshot, Any]] = []

    def enlist(self, participant: Any) -> Any:
        """Snapshot a collaborator (once) before it is called; returns it."""
        if isinstance(participant, SupportsSnapshot):
            if all(p is not participant for p, _ in self._undo):
                self._undo.append((participant, participant.snapshot()))
        return participant

    def rollback(self) -> None:
        for participant, token in reversed(self._undo):
            participant.restore(token)


class LiquidationStateMachine:
    """
    Active liquidations keyed by (collateral_type, token_id).

    Phases per key are never stored:

        NONE -> GRACE_PERIOD -> BUY_NOW_PERIOD -> AUCTION_PERIOD -> EXPIRED

    A record leaves the table only through a successful purchase.

    Rollback:
        Only collaborators implementing SupportsSnapshot are restored when
        a purchase fails. Side effects of any other funds agent or
        custodian are not undone.

    Thread Safety:
        Not thread-safe. Operations must be executed one at a time.

    Example:
        machine = LiquidationStateMachine(settings, registry, clock)
        machine.create_liquidation("PUNKS", 7, "alice", 0, "WETH")
        machine.buy_during_grace_period("PUNKS", 7, caller="alice")
    """

    def __init__(
        self,
        settings: LiquidationSettings,
        registry: AddressRegistry,
        clock: Clock,
        events: Optional[EventLog] = None,
        verbose: bool = True,
    ):
        """
        Args:
            settings: Phase durations (read when a liquidation is created)
            registry: Custodian and per-currency loan ledgers / funds agents
            clock: Source of the current time
            events: Log receiving committed notifications (a new one if omitted)
            verbose: Print one line per committed or rejected operation
        """
        self.settings = settings
        self.registry = registry
        self.clock = clock
        self.events = events if events is not None else EventLog()
        self.verbose = verbose
        self._liquidations: Dict[CollateralKey, Liquidation] = {}
        self._pending_events: List[Any] = []
        self._settling: Set[CollateralKey] = set()
        self._depth = 0

    # ========================================================================
    # READ-ONLY
    # ========================================================================

    def get_liquidation(self, collateral_type: str, token_id: int) -> Liquidation:
        """Active liquidation for the key, or Liquidation.empty() if none."""
        return self._liquidations.get((collateral_type, token_id), Liquidation.empty())

    def is_liquidation_active(self, collateral_type: str, token_id: int) -> bool:
        return (collateral_type, token_id) in self._liquidations

    def phase_of(self, collateral_type: str, token_id: int) -> Phase:
        return phase_at(self.get_liquidation(collateral_type, token_id), self.clock.now())

    def current_price(self, collateral_type: str, token_id: int) -> Optional[int]:
        """Price payable right now, or None if the item cannot be bought now."""
        return price_at(self.get_liquidation(collateral_type, token_id), self.clock.now())

    def list_liquidations(self) -> List[Liquidation]:
        return [self._liquidations[key] for key in sorted(self._liquidations)]

    def __len__(self) -> int:
        return len(self._liquidations)

    # ========================================================================
    # ATOMIC UNIT OF WORK
    # ========================================================================

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[_UnitOfWork]:
        records = dict(self._liquidations)
        pending_mark = len(self._pending_events)
        unit = _UnitOfWork()
        self._depth += 1
        try:
            yield unit
        except Exception as exc:
            unit.rollback()
            self._liquidations = records
            del self._pending_events[pending_mark:]
            if self.verbose and self._depth == 1:
                print(f"✗ REJECTED {operation}: {type(exc).__name__}: {exc}")
            raise
        finally:
            self._depth -= 1
        if self._depth == 0:
            committed, self._pending_events = self._pending_events, []
            self.events.publish(*committed)

    def _emit(self, event: Any) -> None:
        self._pending_events.append(event)

    # ========================================================================
    # CREATION
    # ========================================================================

    def create_liquidation(
        self,
        collateral_type: str,
        token_id: int,
        borrower: str,
        loan_id: int,
        currency_type: str,
    ) -> Liquidation:
        """
        Open a liquidation for a collateral item of a defaulted loan.

        Prices and maturities are computed here and frozen.

        Raises (first violated precondition, in this order):
            InvalidArgument: Empty identifiers or negative ids
            NotRegistered: No custodian, or no loan ledger for currency_type
            CollateralNotInCustody: Custodian does not hold the item
            LoanNotDefaulted: Loan missing or not DEFAULTED
            CollateralNotInLoan: Item is not pledged against the loan
            LiquidationAlreadyActive: A liquidation exists for the item, or
                one is being settled
        """
        require_identifier("collateral_type", collateral_type)
        require_non_negative_int("token_id", token_id)
        require_identifier("borrower", borrower)
        require_non_negative_int("loan_id", loan_id)
        require_identifier("currency_type", currency_type)

        now = self.clock.now()
        key = (collateral_type, token_id)
        with self._atomic("create_liquidation"):
            custodian = self.registry.custodian
            if not custodian.is_held_in_custody(collateral_type, token_id):
                raise CollateralNotInCustody(f"{collateral_type}#{token_id} not held in custody")

            loan = self.registry.loan_ledger(currency_type).get_loan(borrower, loan_id)
            if loan is None or not loan.defaulted:
                status = "missing" if loan is None else loan.status.value
                raise LoanNotDefaulted(f"loan {borrower}/{loan_id} is {status}")

            if not loan.has_collateral(collateral_type, token_id):
                raise CollateralNotInLoan(
                    f"{collateral_type}#{token_id} not in loan {borrower}/{loan_id}"
                )

            if key in self._liquidations or key in self._settling:
                raise LiquidationAlreadyActive(f"{collateral_type}#{token_id} already in liquidation")

            prices = price_loan(loan)
            grace, buy_now, auction = compute_maturities(now, self.settings.durations)
            liquidation = Liquidation(
                collateral_type=collateral_type,
                token_id=token_id,
                start_time=now,
                grace_period_maturity=grace,
                buy_now_period_maturity=buy_now,
                auction_period_maturity=auction,
                principal=loan.principal,
                interest_amount=prices.interest_amount,
                apr=prices.apr,
                grace_period_price=prices.grace_period_price,
                buy_now_period_price=prices.buy_now_period_price,
                borrower=borrower,
                loan_id=loan_id,
                currency_type=currency_type,
            )
            self._liquidations[key] = liquidation
            self._emit(LiquidationAdded(
                collateral_type=collateral_type,
                token_id=token_id,
                currency_type=currency_type,
                grace_period_price=prices.grace_period_price,
                buy_now_period_price=prices.buy_now_period_price,
            ))

        if self.verbose:
            print(f"✓ LIQUIDATION ADDED: {liquidation!r} "
                  f"grace={liquidation.grace_period_price} buy_now={liquidation.buy_now_period_price}")
        return liquidation

    # ========================================================================
    # PURCHASES
    # ========================================================================

    def buy_during_grace_period(self, collateral_type: str, token_id: int, caller: str) -> NFTPurchased:
        """
        Borrower repurchases the item before the grace period matures.

        Raises (first violated precondition, in this order):
            InvalidArgument: Empty identifiers or negative token_id
            NotRegistered: No custodian, or no funds agent for the currency
            CollateralNotInCustody: Item already left custody
            LiquidationNotFound: No active liquidation for the item
            WrongPhase: Grace period has matured
            CallerNotBorrower: Caller is not the loan's borrower
            SettlementError: Raised by the funds agent or the custodian
        """
        return self._buy(collateral_type, token_id, caller, Phase.GRACE_PERIOD)

    def buy_during_buy_now_period(self, collateral_type: str, token_id: int, caller: str) -> NFTPurchased:
        """
        Anyone buys the item between grace and buy-now maturities.

        Same failures as buy_during_grace_period() except CallerNotBorrower.
        """
        return self._buy(collateral_type, token_id, caller, Phase.BUY_NOW_PERIOD)

    def _buy(self, collateral_type: str, token_id: int, caller: str, phase: Phase) -> NFTPurchased:
        require_identifier("collateral_type", collateral_type)
        require_non_negative_int("token_id", token_id)
        require_identifier("caller", caller)

        now = self.clock.now()
        key = (collateral_type, token_id)
        operation = f"buy_during_{phase.value}"
        with self._atomic(operation) as unit:
            custodian = self.registry.custodian
            if not custodian.is_held_in_custody(collateral_type, token_id):
                raise CollateralNotInCustody(f"{collateral_type}#{token_id} not held in custody")

            liquidation = self._liquidations.get(key)
            if liquidation is None:
                raise LiquidationNotFound(f"no active liquidation for {collateral_type}#{token_id}")

            current = phase_at(liquidation, now)
            if current != phase:
                raise WrongPhase(f"{collateral_type}#{token_id} is in {current.value}, not {phase.value}")

            if phase == Phase.GRACE_PERIOD and caller != liquidation.borrower:
                raise CallerNotBorrower(f"{caller!r} is not the borrower")

            agent = self.registry.funds_agent(liquidation.currency_type)
            price = (liquidation.grace_period_price if phase == Phase.GRACE_PERIOD
                     else liquidation.buy_now_period_price)

            # Internal state first, external calls last
            del self._liquidations[key]
            self._emit(LiquidationRemoved(
                collateral_type=collateral_type,
                token_id=token_id,
                currency_type=liquidation.currency_type,
            ))

            unit.enlist(agent)
            unit.enlist(custodian)
            self._settling.add(key)
            try:
                agent.transfer_from(liquidation.currency_type, caller, price, agent.beneficiary)
                custodian.transfer_custody(collateral_type, token_id, caller)
            finally:
                self._settling.discard(key)

            purchase = NFTPurchased(
                collateral_type=collateral_type,
                token_id=token_id,
                amount=price,
                buyer=caller,
                currency_type=liquidation.currency_type,
            )
            self._emit(purchase)

        if self.verbose:
            print(f"✓ PURCHASED: {collateral_type}#{token_id} by {caller} "
                  f"for {price} {liquidation.currency_type} ({phase.value})")
        return purchase
