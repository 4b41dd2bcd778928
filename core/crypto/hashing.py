"""
Module 01 - Hashing Utilities
Commitment hashing for the genesis Merkle tree.

Owner: Protocol/Crypto Engineer
Module ID: M01

This module provides:
- Keccak-256 hashing for raw bytes (Ethereum keccak256, not NIST SHA3-256)
- The canonical ordered-pair combine rule used for every internal node
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- The combine rule sorts the two children by raw bytes before hashing.
  Proofs therefore carry no left/right flags, and any verifier (including
  the ledger contract) must apply the same rule or roots will diverge.
- Sorting gives up positional binding of siblings. This is an accepted
  tradeoff shared with the ledger-side verifier.
"""
from __future__ import annotations

from typing import Optional

from eth_utils import keccak


HASH_LENGTH: int = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def hash_pair(first: Optional[bytes], second: Optional[bytes]) -> Optional[bytes]:
    """
    Combine two sibling hashes with the canonical ordered-pair rule.

    Rule: if either side is absent, return the other unchanged; otherwise
    keccak256(min(a, b) + max(a, b)) by raw byte order.

    Args:
        first: One child hash (or None)
        second: The other child hash (or None)

    Returns:
        Parent hash, or the present child when the other is absent
    """
    if not first:
        return second
    if not second:
        return first
    if second < first:
        first, second = second, first
    return keccak256(first + second)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


# Sentinel root of a tree built from no addresses
EMPTY_TREE_ROOT: bytes = keccak256(b"")


__all__ = [
    "HASH_LENGTH",
    "EMPTY_TREE_ROOT",
    "keccak256",
    "hash_pair",
    "to_hex",
    "from_hex",
]
