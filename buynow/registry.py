"""
registry.py - Per-Currency Collaborator Registry

Maps each currency type to the loan ledger that records loans in that
currency and the funds agent that collects liquidation proceeds in it. Also
holds the single collateral custodian.

All mutation is owner-only. Lookups used by the liquidation core raise
NotRegistered for missing entries.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

from .core import (
    LoanLedger, FundsTransferAgent, CollateralCustodian,
    InvalidArgument, NotRegistered, require_identifier,
)
from .events import (
    EventLog,
    LoanLedgerAdded, LoanLedgerRemoved,
    FundsAgentAdded, FundsAgentRemoved,
    CustodianSet,
)
from .governance import Ownable


def _check_collaborator(value: Any, protocol: type, current: Any) -> None:
    if value is None:
        raise InvalidArgument(f"{protocol.__name__} is None")
    if not isinstance(value, protocol):
        raise InvalidArgument(f"{type(value).__name__} is not a {protocol.__name__}")
    if value is current:
        raise InvalidArgument("new value is the same")


class AddressRegistry(Ownable):
    """
    Owner-gated registry of collaborators.

    Example:
        registry = AddressRegistry("admin")
        registry.set_custodian("admin", vault)
        registry.add_loan_ledger("admin", "WETH", loans)
        registry.add_funds_agent("admin", "WETH", pool)
        loans, pool = registry.resolve("WETH")
    """

    def __init__(self, owner: str, events: Optional[EventLog] = None, verbose: bool = True):
        super().__init__(owner, events=events, verbose=verbose)
        self._loan_ledgers: Dict[str, LoanLedger] = {}
        self._funds_agents: Dict[str, FundsTransferAgent] = {}
        self._custodian: Optional[CollateralCustodian] = None

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    @property
    def custodian(self) -> CollateralCustodian:
        if self._custodian is None:
            raise NotRegistered("collateral custodian not set")
        return self._custodian

    def loan_ledger(self, currency_type: str) -> LoanLedger:
        ledger = self._loan_ledgers.get(currency_type)
        if ledger is None:
            raise NotRegistered(f"no loan ledger for {currency_type!r}")
        return ledger

    def funds_agent(self, currency_type: str) -> FundsTransferAgent:
        agent = self._funds_agents.get(currency_type)
        if agent is None:
            raise NotRegistered(f"no funds agent for {currency_type!r}")
        return agent

    def resolve(self, currency_type: str) -> Tuple[LoanLedger, FundsTransferAgent]:
        """
        Return (loan ledger, funds agent) for a currency type.

        Raises:
            NotRegistered: If either entry is missing
        """
        return self.loan_ledger(currency_type), self.funds_agent(currency_type)

    def currency_types(self) -> List[str]:
        """Currency types with a loan ledger or a funds agent, sorted."""
        return sorted(set(self._loan_ledgers) | set(self._funds_agents))

    # ========================================================================
    # MUTATION (owner only)
    # ========================================================================

    def set_custodian(self, caller: str, custodian: CollateralCustodian) -> None:
        self._only_owner(caller)
        _check_collaborator(custodian, CollateralCustodian, self._custodian)
        current = self._custodian
        self._custodian = custodian
        self._emit(CustodianSet(current_value=current, new_value=custodian))

    def add_loan_ledger(self, caller: str, currency_type: str, ledger: LoanLedger) -> None:
        self._only_owner(caller)
        require_identifier("currency_type", currency_type)
        current = self._loan_ledgers.get(currency_type)
        _check_collaborator(ledger, LoanLedger, current)
        self._loan_ledgers[currency_type] = ledger
        self._emit(LoanLedgerAdded(currency_type=currency_type, current_value=current, new_value=ledger))

    def remove_loan_ledger(self, caller: str, currency_type: str) -> None:
        self._only_owner(caller)
        require_identifier("currency_type", currency_type)
        if currency_type not in self._loan_ledgers:
            raise NotRegistered(f"no loan ledger for {currency_type!r}")
        current = self._loan_ledgers.pop(currency_type)
        self._emit(LoanLedgerRemoved(currency_type=currency_type, current_value=current))

    def add_funds_agent(self, caller: str, currency_type: str, agent: FundsTransferAgent) -> None:
        self._only_owner(caller)
        require_identifier("currency_type", currency_type)
        current = self._funds_agents.get(currency_type)
        _check_collaborator(agent, FundsTransferAgent, current)
        self._funds_agents[currency_type] = agent
        self._emit(FundsAgentAdded(currency_type=currency_type, current_value=current, new_value=agent))

    def remove_funds_agent(self, caller: str, currency_type: str) -> None:
        self._only_owner(caller)
        require_identifier("currency_type", currency_type)
        if currency_type not in self._funds_agents:
            raise NotRegistered(f"no funds agent for {currency_type!r}")
        current = self._funds_agents.pop(currency_type)
        self._emit(FundsAgentRemoved(currency_type=currency_type, current_value=current))
