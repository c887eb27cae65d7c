#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Liquidating Defaulted Loan Collateral

A step-by-step walkthrough of a liquidation, from a defaulted loan to a
settled purchase. Each step builds on the previous one. Press Enter to
advance.

WHAT YOU'LL LEARN:
  1-3:  Setup       - Collaborators, settings, registry
  4-5:  Creation    - Defaulted loans and frozen prices
  6-8:  Phases      - Grace period, buy-now period, auction and expiry
  9-10: Settlement  - Rejections, atomic purchases, the event log

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from buynow import (
    # State machine and configuration
    LiquidationStateMachine, LiquidationSettings, AddressRegistry, EventLog,
    # Reference collaborators
    ManualClock, TokenBook, LendingPool, CollateralVault, LoanBook, Collateral,
    # Errors
    CallerNotBorrower, WrongPhase, InsufficientAllowance,
    # Constants
    SECONDS_PER_DAY,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: int = 1_700_000_000

    # Loan terms
    principal: int = 10 ** 17           # 0.1 WETH in base units
    interest_rate_bps: int = 250        # 2.5% over the loan's life
    loan_days: int = 30

    # Sale phases
    grace_period: int = 2 * SECONDS_PER_DAY
    buy_now_period: int = 15 * SECONDS_PER_DAY
    auction_period: int = 15 * SECONDS_PER_DAY


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def eth(amount: int) -> str:
    return f"{amount / 10**18:.6f} WETH"


@dataclass
class World:
    clock: ManualClock
    book: TokenBook
    vault: CollateralVault
    loans: LoanBook
    pool: LendingPool
    events: EventLog
    settings: LiquidationSettings = None
    registry: AddressRegistry = None
    machine: LiquidationStateMachine = None


# ============================================================================
# PHASE 1: SETUP (Steps 1-3)
# ============================================================================

def step_01_collaborators() -> World:
    """Create the clock and the in-memory collaborators."""
    step_header(1, "Collaborators",
        "The liquidation core owns only its records; everything else is a collaborator.")

    print("""
    A liquidation touches four outside systems:

    CLOCK       - what time it is (we control it with ManualClock)
    LOAN LEDGER - the loans and their status (LoanBook)
    CUSTODIAN   - who holds the collateral (CollateralVault)
    FUNDS AGENT - where the sale proceeds go (LendingPool over a TokenBook)
    """)

    wait_for_enter()

    clock = ManualClock(CONFIG.start_time)
    book = TokenBook()
    world = World(
        clock=clock,
        book=book,
        vault=CollateralVault("vault"),
        loans=LoanBook(clock),
        pool=LendingPool(book, "WETH", "pool"),
        events=EventLog(),
    )
    print(f">>> clock = {world.clock!r}")
    print(f">>> pool.beneficiary = {world.pool.beneficiary!r}")
    return world


def step_02_settings(world: World) -> World:
    """Configure phase durations."""
    step_header(2, "Liquidation Settings",
        "Phase durations are owner-controlled and read once per liquidation.")

    world.settings = LiquidationSettings(
        "admin",
        grace_period_duration=CONFIG.grace_period,
        buy_now_period_duration=CONFIG.buy_now_period,
        auction_period_duration=CONFIG.auction_period,
        events=world.events,
    )
    print(f"Grace period:    {world.settings.grace_period_duration // SECONDS_PER_DAY} days")
    print(f"Buy-now period:  {world.settings.buy_now_period_duration // SECONDS_PER_DAY} days")
    print(f"Auction period:  {world.settings.auction_period_duration // SECONDS_PER_DAY} days")

    section_header("Two-step ownership")
    world.settings.propose_owner("admin", "ops")
    world.settings.claim_ownership("ops")
    print(f"Owner is now {world.settings.owner!r}")
    return world


def step_03_registry(world: World) -> World:
    """Register collaborators for WETH."""
    step_header(3, "Address Registry",
        "Each currency resolves to its own loan ledger and funds agent.")

    world.registry = AddressRegistry("ops", events=world.events)
    world.registry.set_custodian("ops", world.vault)
    world.registry.add_loan_ledger("ops", "WETH", world.loans)
    world.registry.add_funds_agent("ops", "WETH", world.pool)
    world.machine = LiquidationStateMachine(
        world.settings, world.registry, world.clock, events=world.events,
    )
    print(f"Registered currencies: {world.registry.currency_types()}")
    return world


# ============================================================================
# PHASE 2: CREATION (Steps 4-5)
# ============================================================================

def step_04_default(world: World) -> int:
    """Open a loan against two items and let it default."""
    step_header(4, "A Defaulted Loan",
        "Only collateral of a DEFAULTED loan, held in custody, can be liquidated.")

    for token_id in (7, 8):
        world.vault.deposit("PUNKS", token_id)
    loan_id = world.loans.add_loan(
        "alice",
        CONFIG.principal,
        CONFIG.interest_rate_bps,
        CONFIG.start_time + CONFIG.loan_days * SECONDS_PER_DAY,
        [Collateral("PUNKS", 7, CONFIG.principal), Collateral("PUNKS", 8, CONFIG.principal)],
    )
    world.loans.start_loan("alice", loan_id)
    loan = world.loans.mark_defaulted("alice", loan_id)
    print(f"Loan {loan_id}: principal {eth(loan.principal)}, status {loan.status.value}")
    print(f"Collateral: {[c.key for c in loan.collaterals]}")
    return loan_id


def step_05_create(world: World, loan_id: int):
    """Create liquidations and inspect the frozen prices."""
    step_header(5, "Creating Liquidations",
        "Prices and maturities are computed once, at creation, in integers.")

    liq = world.machine.create_liquidation("PUNKS", 7, "alice", loan_id, "WETH")
    world.machine.create_liquidation("PUNKS", 8, "alice", loan_id, "WETH")

    section_header("Frozen economics")
    print(f"Principal:         {eth(liq.principal)}")
    print(f"Interest amount:   {eth(liq.interest_amount)}")
    print(f"APR (bps):         {liq.apr}")
    print(f"Grace price:       {eth(liq.grace_period_price)}")
    print(f"Buy-now price:     {eth(liq.buy_now_period_price)}")

    section_header("Key Insight")
    print("""
    Changing the settings now does not touch existing liquidations.
    Their maturities were fixed the moment they were created.
    """)
    return liq


# ============================================================================
# PHASE 3: PHASES (Steps 6-8)
# ============================================================================

def step_06_grace(world: World, liq):
    """Only the borrower may buy during the grace period."""
    step_header(6, "Grace Period",
        "The borrower gets first refusal at the grace period price.")

    print(f"Phase: {world.machine.phase_of('PUNKS', 7).value}")
    try:
        world.machine.buy_during_grace_period("PUNKS", 7, "bob")
    except CallerNotBorrower as exc:
        print(f"bob was turned away: {exc}")

    section_header("Borrower without an allowance")
    world.book.mint("WETH", "alice", liq.grace_period_price)
    try:
        world.machine.buy_during_grace_period("PUNKS", 7, "alice")
    except InsufficientAllowance:
        print(f"Record still active: {world.machine.is_liquidation_active('PUNKS', 7)}")

    section_header("Borrower repurchases")
    world.book.approve("WETH", "alice", "pool", liq.grace_period_price)
    world.machine.buy_during_grace_period("PUNKS", 7, "alice")
    print(f"PUNKS#7 owner: {world.vault.owner_of('PUNKS', 7)}")


def step_07_buy_now(world: World):
    """Anyone may buy once the grace period has matured."""
    step_header(7, "Buy-Now Period",
        "After the grace period the item is open to every buyer.")

    world.clock.advance(CONFIG.grace_period)
    print(f"Phase: {world.machine.phase_of('PUNKS', 8).value}")
    price = world.machine.current_price("PUNKS", 8)
    world.book.mint("WETH", "bob", price)
    world.book.approve("WETH", "bob", "pool", price)
    world.machine.buy_during_buy_now_period("PUNKS", 8, "bob")
    print(f"PUNKS#8 owner: {world.vault.owner_of('PUNKS', 8)}")


def step_08_auction(world: World):
    """Past the buy-now period nothing can be bought."""
    step_header(8, "Auction and Expiry",
        "The auction window has no settlement rule; both purchases are rejected.")

    world.vault.deposit("PUNKS", 9)
    loan_id = world.loans.add_loan(
        "alice", CONFIG.principal, CONFIG.interest_rate_bps,
        world.clock.now() + CONFIG.loan_days * SECONDS_PER_DAY,
        [Collateral("PUNKS", 9, CONFIG.principal)],
    )
    world.loans.start_loan("alice", loan_id)
    world.loans.mark_defaulted("alice", loan_id)
    liq = world.machine.create_liquidation("PUNKS", 9, "alice", loan_id, "WETH")

    world.clock.set(liq.buy_now_period_maturity)
    print(f"Phase: {world.machine.phase_of('PUNKS', 9).value}")
    try:
        world.machine.buy_during_buy_now_period("PUNKS", 9, "bob")
    except WrongPhase as exc:
        print(f"Rejected: {exc}")

    world.clock.set(liq.auction_period_maturity)
    print(f"Phase: {world.machine.phase_of('PUNKS', 9).value}")
    print(f"Still in custody: {world.vault.is_held_in_custody('PUNKS', 9)}")


# ============================================================================
# PHASE 4: SETTLEMENT (Steps 9-10)
# ============================================================================

def step_09_event_log(world: World):
    """Review the committed notifications."""
    step_header(9, "Event Log",
        "Only committed operations appear; rejected ones left no trace.")

    for event in world.events:
        print(f"  {type(event).__name__}")


def step_10_totals(world: World):
    """Proceeds collected by the pool."""
    step_header(10, "Proceeds",
        "Each purchase moved exactly the frozen price into the pool.")

    for payer, amount in world.pool.received:
        print(f"  {payer:<8} {eth(amount)}")
    print(f"  {'total':<8} {eth(world.pool.total_received)}")


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       BUYNOW - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    world = step_01_collaborators()
    wait_for_enter()
    world = step_02_settings(world)
    wait_for_enter()
    world = step_03_registry(world)
    wait_for_enter()

    loan_id = step_04_default(world)
    wait_for_enter()
    liq = step_05_create(world, loan_id)
    wait_for_enter()

    step_06_grace(world, liq)
    wait_for_enter()
    step_07_buy_now(world)
    wait_for_enter()
    step_08_auction(world)
    wait_for_enter()

    step_09_event_log(world)
    wait_for_enter()
    step_10_totals(world)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See buynow/liquidations.py for the state machine
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
