"""
book.py - In-Memory Reference Collaborators

Minimal, self-contained implementations of the collaborator protocols the
liquidation core depends on. They are used by the test suite and demo.py,
and are small enough to serve as a template for real adapters.

    TokenBook        fungible balances and allowances per (currency, wallet)
    LendingPool      FundsTransferAgent paying proceeds into a pool wallet
    CollateralVault  CollateralCustodian tracking ownership of every item
    LoanBook         LoanLedger with a small loan status lifecycle

TokenBook and CollateralVault implement snapshot()/restore() so they take
part in all-or-nothing settlement.

Not thread-safe.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .core import (
    Clock, Collateral, CollateralKey, Loan, LoanStatus,
    CustodyError, InsufficientAllowance, InsufficientFunds, InvalidArgument,
    StateError, require_identifier, require_non_negative_int,
)


# ============================================================================
# TOKEN BOOK
# ============================================================================

class TokenBook:
    """
    Balances and spending allowances for any number of currencies.

    Example:
        book = TokenBook()
        book.mint("WETH", "alice", 10**18)
        book.approve("WETH", "alice", "pool", 10**18)
        book.transfer_from("WETH", "pool", "alice", 10**17, "pool")
    """

    def __init__(self):
        self._balances: Dict[Tuple[str, str], int] = defaultdict(int)
        # (currency, owner, spender) -> amount
        self._allowances: Dict[Tuple[str, str, str], int] = defaultdict(int)

    def balance_of(self, currency: str, wallet: str) -> int:
        return self._balances.get((currency, wallet), 0)

    def allowance(self, currency: str, owner: str, spender: str) -> int:
        return self._allowances.get((currency, owner, spender), 0)

    def total_supply(self, currency: str) -> int:
        return sum(q for (c, _), q in self._balances.items() if c == currency)

    def mint(self, currency: str, wallet: str, amount: int) -> None:
        require_identifier("currency", currency)
        require_identifier("wallet", wallet)
        require_non_negative_int("amount", amount)
        self._balances[(currency, wallet)] += amount

    def approve(self, currency: str, owner: str, spender: str, amount: int) -> None:
        """Set (not add to) the amount spender may pull from owner."""
        require_identifier("currency", currency)
        require_identifier("owner", owner)
        require_identifier("spender", spender)
        require_non_negative_int("amount", amount)
        self._allowances[(currency, owner, spender)] = amount

    def transfer(self, currency: str, source: str, dest: str, amount: int) -> None:
        require_non_negative_int("amount", amount)
        balance = self.balance_of(currency, source)
        if balance < amount:
            raise InsufficientFunds(
                f"{source} holds {balance} {currency}, needs {amount}"
            )
        self._balances[(currency, source)] = balance - amount
        self._balances[(currency, dest)] += amount

    def transfer_from(self, currency: str, spender: str, payer: str, amount: int, dest: str) -> None:
        """
        Pull funds from payer on behalf of spender.

        Raises:
            InsufficientAllowance: If payer approved less than amount for spender
            InsufficientFunds: If payer's balance is below amount
        """
        require_non_negative_int("amount", amount)
        allowed = self.allowance(currency, payer, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{payer} approved {allowed} {currency} for {spender}, needs {amount}"
            )
        self.transfer(currency, payer, dest, amount)
        self._allowances[(currency, payer, spender)] = allowed - amount

    def snapshot(self) -> Tuple[Dict, Dict]:
        return dict(self._balances), dict(self._allowances)

    def restore(self, token: Tuple[Dict, Dict]) -> None:
        balances, allowances = token
        self._balances = defaultdict(int, balances)
        self._allowances = defaultdict(int, allowances)


# ============================================================================
# LENDING POOL (FundsTransferAgent)
# ============================================================================

class LendingPool:
    """
    Funds agent for one currency, collecting proceeds into the pool wallet.

    Buyers approve the pool wallet as spender before purchasing. Every
    successful pull is recorded in `received` as (payer, amount).
    """

    def __init__(self, book: TokenBook, currency: str, wallet: str):
        require_identifier("currency", currency)
        require_identifier("wallet", wallet)
        self.book = book
        self.currency = currency
        self.beneficiary = wallet
        self.received: List[Tuple[str, int]] = []

    def transfer_from(self, currency_type: str, payer: str, amount: int, beneficiary: str) -> None:
        if currency_type != self.currency:
            raise InvalidArgument(f"pool handles {self.currency}, not {currency_type}")
        self.book.transfer_from(currency_type, self.beneficiary, payer, amount, beneficiary)
        self.received.append((payer, amount))

    @property
    def total_received(self) -> int:
        return sum(amount for _, amount in self.received)

    def snapshot(self) -> Tuple[Tuple[Dict, Dict], int]:
        return self.book.snapshot(), len(self.received)

    def restore(self, token: Tuple[Tuple[Dict, Dict], int]) -> None:
        book_token, received = token
        self.book.restore(book_token)
        del self.received[received:]


# ============================================================================
# COLLATERAL VAULT (CollateralCustodian)
# ============================================================================

class CollateralVault:
    """
    Tracks the owner of every collateral item; items owned by the vault
    wallet are in custody.
    """

    def __init__(self, wallet: str = "vault"):
        require_identifier("wallet", wallet)
        self.wallet = wallet
        self._owners: Dict[CollateralKey, str] = {}

    def mint(self, collateral_type: str, token_id: int, owner: str) -> None:
        """Create an item owned by `owner`."""
        require_identifier("collateral_type", collateral_type)
        require_non_negative_int("token_id", token_id)
        require_identifier("owner", owner)
        key = (collateral_type, token_id)
        if key in self._owners:
            raise InvalidArgument(f"{collateral_type}#{token_id} already exists")
        self._owners[key] = owner

    def deposit(self, collateral_type: str, token_id: int) -> None:
        """Move an item into custody, minting it into the vault if unknown."""
        key = (collateral_type, token_id)
        if key not in self._owners:
            self.mint(collateral_type, token_id, self.wallet)
        else:
            self._owners[key] = self.wallet

    def owner_of(self, collateral_type: str, token_id: int) -> Optional[str]:
        return self._owners.get((collateral_type, token_id))

    def is_held_in_custody(self, collateral_type: str, token_id: int) -> bool:
        return self._owners.get((collateral_type, token_id)) == self.wallet

    def transfer_custody(self, collateral_type: str, token_id: int, to: str) -> None:
        require_identifier("to", to)
        if not self.is_held_in_custody(collateral_type, token_id):
            raise CustodyError(f"{collateral_type}#{token_id} is not held in custody")
        self._owners[(collateral_type, token_id)] = to

    def snapshot(self) -> Dict[CollateralKey, str]:
        return dict(self._owners)

    def restore(self, token: Dict[CollateralKey, str]) -> None:
        self._owners = dict(token)


# ============================================================================
# LOAN BOOK (LoanLedger)
# ============================================================================

class LoanBook:
    """
    Loans per borrower, numbered from 0 in creation order.

    Lifecycle: PENDING -> STARTED -> PAID | DEFAULTED

    Zero-duration loans are rejected at creation, so pricing never divides
    by zero.
    """

    def __init__(self, clock: Clock):
        self.clock = clock
        self._loans: Dict[str, List[Loan]] = defaultdict(list)

    def add_loan(
        self,
        borrower: str,
        principal: int,
        interest_rate_bps: int,
        maturity: int,
        collaterals: Iterable[Collateral],
    ) -> int:
        """
        Record a new PENDING loan and return its id.

        Raises:
            InvalidArgument: On empty borrower, non-positive principal,
                maturity not in the future, or no collateral
        """
        require_identifier("borrower", borrower)
        require_non_negative_int("principal", principal)
        require_non_negative_int("interest_rate_bps", interest_rate_bps)
        require_non_negative_int("maturity", maturity)
        collaterals = tuple(collaterals)
        if principal == 0:
            raise InvalidArgument("principal is 0")
        if maturity <= self.clock.now():
            raise InvalidArgument(f"maturity {maturity} is not in the future")
        if not collaterals:
            raise InvalidArgument("loan has no collateral")
        loan_id = len(self._loans[borrower])
        self._loans[borrower].append(Loan(
            loan_id=loan_id,
            borrower=borrower,
            principal=principal,
            interest_rate_bps=interest_rate_bps,
            maturity=maturity,
            start_time=0,
            status=LoanStatus.PENDING,
            collaterals=collaterals,
        ))
        return loan_id

    def get_loan(self, borrower: str, loan_id: int) -> Optional[Loan]:
        loans = self._loans.get(borrower, [])
        if not isinstance(loan_id, int) or not 0 <= loan_id < len(loans):
            return None
        return loans[loan_id]

    def _require_loan(self, borrower: str, loan_id: int) -> Loan:
        loan = self.get_loan(borrower, loan_id)
        if loan is None:
            raise InvalidArgument(f"{borrower} has no loan {loan_id}")
        return loan

    def _transition(self, borrower: str, loan_id: int, expected: LoanStatus, new: LoanStatus, **changes) -> Loan:
        loan = self._require_loan(borrower, loan_id)
        if loan.status != expected:
            raise StateError(f"loan {loan_id} is {loan.status.value}, expected {expected.value}")
        updated = replace(loan, status=new, **changes)
        self._loans[borrower][loan_id] = updated
        return updated

    def start_loan(self, borrower: str, loan_id: int) -> Loan:
        """Release funds: start_time becomes now."""
        now = self.clock.now()
        loan = self._require_loan(borrower, loan_id)
        if loan.maturity <= now:
            raise InvalidArgument(f"loan {loan_id} matured before it started")
        return self._transition(borrower, loan_id, LoanStatus.PENDING, LoanStatus.STARTED, start_time=now)

    def pay_loan(self, borrower: str, loan_id: int) -> Loan:
        return self._transition(borrower, loan_id, LoanStatus.STARTED, LoanStatus.PAID)

    def mark_defaulted(self, borrower: str, loan_id: int) -> Loan:
        return self._transition(borrower, loan_id, LoanStatus.STARTED, LoanStatus.DEFAULTED)

    def loans_of(self, borrower: str) -> List[Loan]:
        return list(self._loans.get(borrower, []))
