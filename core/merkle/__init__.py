"""
Module 02 - Merkle Tree and Commitments
Deterministic Merkle tree construction + proof generation/verification
over genesis recipient addresses.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- MerkleTree: Sorted, deduplicated keccak tree with per-address proofs
- verify_proof: Verify an address's proof against a root
- BatchProofCodec: Pack/unpack many proofs for batched claims

Usage:
    from core.merkle import MerkleTree, verify_proof

    tree = MerkleTree(addresses)
    proof = tree.get_proof(addresses[0])
    assert verify_proof(addresses[0], proof, tree.root)
"""
from .merkle_tree import (
    Proof,
    MerkleTree,
    build_layers,
    leaf_hash,
    verify_proof,
    parse_hex_proof,
    split_proof_bytes,
)

from .batch_proofs import (
    SIZE_PREFIX_LENGTH,
    BatchProofCodec,
    encode_batch_proofs,
    decode_batch_proofs,
)


__all__ = [
    # Core types
    "Proof",
    "MerkleTree",
    # Core functions
    "build_layers",
    "leaf_hash",
    "verify_proof",
    "parse_hex_proof",
    "split_proof_bytes",
    # Batch codec
    "SIZE_PREFIX_LENGTH",
    "BatchProofCodec",
    "encode_batch_proofs",
    "decode_batch_proofs",
]
