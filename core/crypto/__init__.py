"""
Core cryptographic utilities.

Module 01 provides the commitment hash and the canonical combine rule.
"""
from .hashing import (
    EMPTY_TREE_ROOT,
    HASH_LENGTH,
    keccak256,
    hash_pair,
    to_hex,
    from_hex,
)

__all__ = [
    "EMPTY_TREE_ROOT",
    "HASH_LENGTH",
    "keccak256",
    "hash_pair",
    "to_hex",
    "from_hex",
]
