"""
governance.py - Two-Step Ownership

Owner-gated components inherit from Ownable. Ownership moves in two steps so
that a mistyped owner can never lock the component:

    1. The current owner proposes a new owner  (propose_owner)
    2. The proposed owner claims ownership     (claim_ownership)

Until the claim, the current owner keeps full control and may re-propose.
"""

from __future__ import annotations
from typing import Optional

from .core import InvalidArgument, NotOwner, NotProposedOwner, require_identifier
from .events import EventLog, OwnerProposed, OwnershipTransferred


class Ownable:
    """
    Base class for owner-gated configuration.

    Args:
        owner: Initial owner wallet
        events: Log receiving administrative events (a new one if omitted)
        verbose: Print one line per administrative change
    """

    def __init__(self, owner: str, events: Optional[EventLog] = None, verbose: bool = True):
        require_identifier("owner", owner)
        self._owner = owner
        self._proposed_owner: Optional[str] = None
        self.events = events if events is not None else EventLog()
        self.verbose = verbose

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def proposed_owner(self) -> Optional[str]:
        return self._proposed_owner

    def _only_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise NotOwner(f"{caller!r} is not the owner")

    def _emit(self, event) -> None:
        self.events.publish(event)
        if self.verbose:
            print(f"⚙ {type(self).__name__}: {event}")

    def propose_owner(self, caller: str, new_owner: str) -> None:
        """
        Propose a new owner.

        Raises:
            NotOwner: If caller is not the owner
            InvalidArgument: If new_owner is empty, is already the owner,
                or is already the proposed owner
        """
        self._only_owner(caller)
        if not isinstance(new_owner, str) or not new_owner.strip():
            raise InvalidArgument("proposed owner is empty")
        if new_owner == self._owner:
            raise InvalidArgument("proposed owner is the owner")
        if new_owner == self._proposed_owner:
            raise InvalidArgument("proposed owner is the same")
        self._proposed_owner = new_owner
        self._emit(OwnerProposed(owner=self._owner, proposed_owner=new_owner))

    def claim_ownership(self, caller: str) -> None:
        """
        Complete a transfer started by propose_owner().

        Raises:
            NotProposedOwner: If caller is not the proposed owner
        """
        if self._proposed_owner is None or caller != self._proposed_owner:
            raise NotProposedOwner(f"{caller!r} is not the proposed owner")
        previous = self._owner
        self._owner = caller
        self._proposed_owner = None
        self._emit(OwnershipTransferred(owner=previous, proposed_owner=caller))
