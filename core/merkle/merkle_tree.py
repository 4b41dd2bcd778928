"""
Module 02 - Merkle Tree Implementation
Deterministic Merkle tree over a set of genesis recipient addresses.

Owner: Protocol/Crypto Engineer
Module ID: M02

Canonical Commitment Rules (Hard Contracts):
1. Input: duplicate addresses collapse to one leaf; empty entries are dropped
2. Leaf hashing: leaf = keccak256(address_20_bytes)
3. Leaf order: ascending by raw leaf bytes (not by address)
4. Parent hashing: keccak256(sorted(left, right)) via hash_pair()
5. Odd layers: the unpaired last node moves up unchanged (no padding)
6. Empty tree: root = EMPTY_TREE_ROOT (keccak256(b"")), no proofs

Determinism Notes:
- The same address set yields the same root regardless of input order
- Proofs are sibling hashes only, ordered leaf to root
"""
from __future__ import annotations

import logging
from bisect import bisect_left
from typing import Any, Iterable, Sequence

from core.crypto.hashing import (
    EMPTY_TREE_ROOT,
    HASH_LENGTH,
    from_hex,
    hash_pair,
    keccak256,
    to_hex,
)
from core.schemas.addresses import normalize_address
from core.schemas.errors import (
    EmptyTreeException,
    MalformedProofException,
    ProofNotFoundException,
)


logger = logging.getLogger(__name__)


# A proof is the ordered list of sibling hashes from leaf to root
Proof = list[bytes]


def leaf_hash(address: Any) -> bytes:
    """Leaf value for an address: keccak256 of its 20-byte form."""
    return keccak256(normalize_address(address))


def build_layers(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every layer of the tree from sorted leaves up to the root.

    Args:
        leaves: Sorted, unique leaf hashes

    Returns:
        Layers bottom-up; the last layer holds only the root.
        An empty leaf list yields [[EMPTY_TREE_ROOT]].
    """
    if len(leaves) == 0:
        return [[EMPTY_TREE_ROOT]]

    layers: list[list[bytes]] = [list(leaves)]

    while len(layers[-1]) > 1:
        current = layers[-1]
        next_layer: list[bytes] = []
        for i in range(0, len(current), 2):
            right = current[i + 1] if i + 1 < len(current) else None
            next_layer.append(hash_pair(current[i], right))
        layers.append(next_layer)

    return layers


def verify_proof(address: Any, proof: Sequence[bytes], root: bytes) -> bool:
    """
    Verify that an address is committed under a root.

    Folds the proof starting from keccak256(address), combining with each
    sibling in order.

    Args:
        address: Address in any accepted form
        proof: Sibling hashes, leaf to root
        root: Expected Merkle root

    Returns:
        True if the folded value equals root
    """
    computed = leaf_hash(address)
    for sibling in proof:
        computed = hash_pair(computed, sibling)
    return computed == root


def parse_hex_proof(hex_proof: str) -> Proof:
    """
    Split a 0x-prefixed concatenation of sibling hashes.

    Raises:
        MalformedProofException: If the payload is not whole 32-byte hashes
    """
    try:
        raw = from_hex(hex_proof)
    except ValueError as e:
        raise MalformedProofException(str(e)) from e
    return split_proof_bytes(raw)


def split_proof_bytes(raw: bytes) -> Proof:
    """Split raw proof bytes into 32-byte sibling hashes."""
    if len(raw) % HASH_LENGTH != 0:
        raise MalformedProofException(
            f"Proof length {len(raw)} is not a multiple of {HASH_LENGTH}",
            details={"length": len(raw)},
        )
    return [raw[i:i + HASH_LENGTH] for i in range(0, len(raw), HASH_LENGTH)]


class MerkleTree:
    """
    Immutable Merkle tree over a recipient address snapshot.

    Example:
        >>> tree = MerkleTree(["0xaa...", "0xbb..."])
        >>> proof = tree.get_proof("0xaa...")
        >>> verify_proof("0xaa...", proof, tree.root)
        True
    """

    def __init__(self, addresses: Iterable[Any]) -> None:
        unique: set[bytes] = set()
        for address in addresses:
            if not address:
                continue
            unique.add(normalize_address(address))

        self._leaves: list[bytes] = sorted(keccak256(a) for a in unique)
        self._layers: list[list[bytes]] = build_layers(self._leaves)

        logger.debug(
            f"Built Merkle tree with {len(self._leaves)} leaves "
            f"and root {to_hex(self.root)}"
        )

    @property
    def num_leaves(self) -> int:
        return len(self._leaves)

    @property
    def leaves(self) -> list[bytes]:
        return list(self._leaves)

    @property
    def layers(self) -> list[list[bytes]]:
        return [list(layer) for layer in self._layers]

    @property
    def depth(self) -> int:
        """Number of layers from leaves to root (0 for an empty tree)."""
        return len(self._layers) if self._leaves else 0

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    @property
    def hex_root(self) -> str:
        return to_hex(self.root)

    def leaf_index(self, address: Any) -> int:
        """
        Position of an address's leaf in the sorted leaf layer.

        Raises:
            ProofNotFoundException: If the address is not in the tree
        """
        leaf = leaf_hash(address)
        idx = bisect_left(self._leaves, leaf)
        if idx == len(self._leaves) or self._leaves[idx] != leaf:
            raise ProofNotFoundException(to_hex(normalize_address(address)))
        return idx

    def contains(self, address: Any) -> bool:
        try:
            self.leaf_index(address)
        except ProofNotFoundException:
            return False
        return True

    def get_proof(self, address: Any) -> Proof:
        """
        Generate the inclusion proof for an address.

        At each layer the sibling is at idx ^ 1; when it falls past the
        end of an odd layer nothing is appended for that layer.

        Raises:
            EmptyTreeException: If the tree has no leaves
            ProofNotFoundException: If the address is not in the tree
        """
        if not self._leaves:
            raise EmptyTreeException()

        idx = self.leaf_index(address)
        proof: Proof = []

        for layer in self._layers:
            pair_idx = idx ^ 1
            if pair_idx < len(layer):
                proof.append(layer[pair_idx])
            idx = idx // 2

        return proof

    def get_hex_proof(self, address: Any) -> str:
        """Proof as 0x + concatenated sibling hashes."""
        return to_hex(b"".join(self.get_proof(address)))

    def verify_proof(self, address: Any, proof: Sequence[bytes]) -> bool:
        """Verify a proof against this tree's root."""
        return verify_proof(address, proof, self.root)

    def get_batch_proofs(self, addresses: Sequence[Any]) -> bytes:
        """Pack the proofs of several addresses, in order, for a batch claim."""
        from core.merkle.batch_proofs import encode_batch_proofs

        return encode_batch_proofs([self.get_proof(a) for a in addresses])

    def get_hex_batch_proofs(self, addresses: Sequence[Any]) -> str:
        return to_hex(self.get_batch_proofs(addresses))

    def __len__(self) -> int:
        return self.num_leaves

    def __contains__(self, address: Any) -> bool:
        return self.contains(address)

    def __repr__(self) -> str:
        return f"MerkleTree(num_leaves={self.num_leaves}, root={self.hex_root})"


__all__ = [
    "Proof",
    "MerkleTree",
    "build_layers",
    "leaf_hash",
    "verify_proof",
    "parse_hex_proof",
    "split_proof_bytes",
]
