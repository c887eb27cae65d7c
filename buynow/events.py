"""
events.py - Notifications and the Event Log

Every committed state change emits an immutable notification. The EventLog
is the audit trail: an ordered record of everything that was committed.
Notifications from an operation that rolled back never reach the log.

Field sets are fixed. Liquidation and ownership events carry only primitives
and compare by value; registry events carry the collaborator objects
themselves, which compare by identity.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Type, TypeVar


# ============================================================================
# LIQUIDATION EVENTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class LiquidationAdded:
    collateral_type: str
    token_id: int
    currency_type: str
    grace_period_price: int
    buy_now_period_price: int


@dataclass(frozen=True, slots=True)
class LiquidationRemoved:
    collateral_type: str
    token_id: int
    currency_type: str


@dataclass(frozen=True, slots=True)
class NFTPurchased:
    collateral_type: str
    token_id: int
    amount: int
    buyer: str
    currency_type: str


# ============================================================================
# ADMINISTRATIVE EVENTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class OwnerProposed:
    owner: str
    proposed_owner: str


@dataclass(frozen=True, slots=True)
class OwnershipTransferred:
    owner: str              # Previous owner
    proposed_owner: str     # New owner


@dataclass(frozen=True, slots=True)
class GracePeriodDurationChanged:
    current_value: int
    new_value: int


@dataclass(frozen=True, slots=True)
class BuyNowPeriodDurationChanged:
    current_value: int
    new_value: int


@dataclass(frozen=True, slots=True)
class AuctionPeriodDurationChanged:
    current_value: int
    new_value: int


@dataclass(frozen=True, slots=True)
class LoanLedgerAdded:
    currency_type: str
    current_value: Any
    new_value: Any


@dataclass(frozen=True, slots=True)
class LoanLedgerRemoved:
    currency_type: str
    current_value: Any


@dataclass(frozen=True, slots=True)
class FundsAgentAdded:
    currency_type: str
    current_value: Any
    new_value: Any


@dataclass(frozen=True, slots=True)
class FundsAgentRemoved:
    currency_type: str
    current_value: Any


@dataclass(frozen=True, slots=True)
class CustodianSet:
    current_value: Any
    new_value: Any


# ============================================================================
# EVENT LOG
# ============================================================================

E = TypeVar("E")
Listener = Callable[[Any], None]


class EventLog:
    """
    Ordered, append-only record of committed events.

    Listeners are called synchronously, in subscription order, for each
    event as it is published. A listener that raises propagates to the
    publisher.

    Example:
        log = EventLog()
        log.subscribe(print)
        machine = LiquidationStateMachine(settings, registry, clock, events=log)
        ...
        log.last(NFTPurchased).amount
    """

    def __init__(self):
        self.events: List[Any] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def publish(self, *events: Any) -> None:
        """
        Append events to the log, then notify listeners.

        Every event is logged before the first listener runs, so a listener
        that raises cannot keep later events of the same batch out of the log.
        """
        self.events.extend(events)
        for event in events:
            for listener in self._listeners:
                listener(event)

    def of_type(self, event_type: Type[E]) -> List[E]:
        """All committed events of a given type, oldest first."""
        return [e for e in self.events if isinstance(e, event_type)]

    def last(self, event_type: Type[E]) -> Optional[E]:
        """Most recent committed event of a given type, or None."""
        for event in reversed(self.events):
            if isinstance(event, event_type):
                return event
        return None

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)
