"""
Common test fixtures shared by all modules.

Provides factory functions for core Merkle mine data structures:
- Addresses
- MerkleTree
- GenesisConfig
- InMemoryLedger / LedgerSnapshot

Default distribution: 10 recipients sharing 10_000_000 tokens, genesis at
block 100, caller window from block 200 to block 300.
"""

from typing import Any, Optional, Sequence

from core.ledger.memory import InMemoryLedger
from core.ledger.snapshot import LedgerSnapshot
from core.merkle.merkle_tree import MerkleTree
from core.schemas.genesis import GenesisConfig


DEFAULT_TOTAL_TOKENS = 10_000_000
DEFAULT_RECIPIENTS = 10
GENESIS_BLOCK = 100
CALLER_START_BLOCK = 200
CALLER_END_BLOCK = 300


# =============================================================================
# Address Factories
# =============================================================================

def make_address(i: int) -> str:
    """Deterministic lowercase hex address for index i."""
    return "0x" + format(i, "040x")


def make_addresses(count: int = DEFAULT_RECIPIENTS, start: int = 1) -> list[str]:
    """Create `count` distinct addresses starting at index `start`."""
    return [make_address(i) for i in range(start, start + count)]


CALLER = make_address(0xCA11E4)
OUTSIDER = make_address(0xDEAD)


# =============================================================================
# Tree / Genesis Factories
# =============================================================================

def make_tree(addresses: Optional[Sequence[Any]] = None) -> MerkleTree:
    """Create a MerkleTree over the given (or default) addresses."""
    if addresses is None:
        addresses = make_addresses()
    return MerkleTree(addresses)


def make_genesis(
    tree: Optional[MerkleTree] = None,
    total_tokens: int = DEFAULT_TOTAL_TOKENS,
    total_recipients: Optional[int] = None,
    root: Optional[bytes] = None,
    genesis_block: int = GENESIS_BLOCK,
    start_block: int = CALLER_START_BLOCK,
    end_block: int = CALLER_END_BLOCK,
) -> GenesisConfig:
    """
    Create a GenesisConfig committing to a tree.

    Args:
        tree: Tree whose root and leaf count are committed
        total_tokens: Total tokens distributed
        total_recipients: Override the committed recipient count
        root: Override the committed root
    """
    if tree is None:
        tree = make_tree()
    return GenesisConfig(
        root=root if root is not None else tree.root,
        total_tokens=total_tokens,
        total_recipients=total_recipients if total_recipients is not None else tree.num_leaves,
        genesis_block=genesis_block,
        caller_allocation_start_block=start_block,
        caller_allocation_end_block=end_block,
    )


# =============================================================================
# Ledger Factories
# =============================================================================

def make_ledger(
    genesis: Optional[GenesisConfig] = None,
    funded: bool = True,
    started: bool = True,
    block: Optional[int] = None,
) -> InMemoryLedger:
    """
    Create an InMemoryLedger.

    Args:
        genesis: Genesis parameters (default distribution if omitted)
        funded: Mint the full supply to the ledger
        started: Call start() (requires funded)
        block: Current block (defaults to the genesis block)
    """
    if genesis is None:
        genesis = make_genesis()
    ledger = InMemoryLedger(
        genesis,
        token_balance=genesis.total_tokens if funded else 0,
        current_block=block,
    )
    if started:
        ledger.start()
    return ledger


def make_snapshot(
    ledger: InMemoryLedger,
    recipients: Sequence[Any] = (),
) -> LedgerSnapshot:
    """Capture a snapshot including the generated flags of `recipients`."""
    return LedgerSnapshot.capture(ledger, recipients)
