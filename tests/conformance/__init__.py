"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the liquidation state machine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. uniqueness.py - At most one active liquidation per collateral item
2. temporal.py - Phases are derived from time and only move forward
3. determinism.py - Prices depend only on loan economics
4. atomic_settlement.py - Purchases apply completely or not at all

These tests use hypothesis for property-based testing.
"""
