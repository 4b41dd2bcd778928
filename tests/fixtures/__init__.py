"""
Test fixtures package for Merkle mine tests.

This package provides factory functions for creating test objects.
- common.py: Addresses, trees, genesis parameters and in-memory ledgers

Usage:
    from fixtures.common import make_tree, make_genesis, make_ledger

    def test_something():
        tree = make_tree()
        ledger = make_ledger(make_genesis(tree), block=240)
"""

from .common import (
    make_address,
    make_addresses,
    make_tree,
    make_genesis,
    make_ledger,
    make_snapshot,
)

__all__ = [
    "make_address",
    "make_addresses",
    "make_tree",
    "make_genesis",
    "make_ledger",
    "make_snapshot",
]
