"""
Module 04 - Claim Call Data
ABI encoding of claim instructions for the ledger contracts.

Owner: Protocol/Crypto Engineer
Module ID: M04

Functions encoded:
- generate(address _recipient, bytes _merkleProof)                 on the Merkle mine
- multiGenerate(address _merkleMine, address[] _recipients, bytes _merkleProofs)
                                                                    on the batch contract
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from core.crypto.hashing import to_hex
from core.schemas.addresses import checksum, normalize_address


GENERATE_SIGNATURE = "generate(address,bytes)"
MULTI_GENERATE_SIGNATURE = "multiGenerate(address,address[],bytes)"


def function_selector(signature: str) -> bytes:
    """4-byte selector of a canonical function signature."""
    return function_signature_to_4byte_selector(signature)


@dataclass(frozen=True)
class ClaimInstruction:
    """
    Transaction payload handed to the external signer/broadcaster.

    Attributes:
        to: Target contract address (20 bytes)
        data: ABI-encoded call data
        value: Wei attached (always 0 for claims)
        gas: Gas limit, if the caller already estimated one
    """
    to: bytes
    data: bytes
    value: int = 0
    gas: Optional[int] = None

    @property
    def selector(self) -> bytes:
        return self.data[:4]

    def to_dict(self) -> dict[str, Any]:
        tx: dict[str, Any] = {
            "to": checksum(self.to),
            "data": to_hex(self.data),
            "value": self.value,
        }
        if self.gas is not None:
            tx["gas"] = self.gas
        return tx


def encode_generate_call(recipient: Any, proof: Sequence[bytes]) -> bytes:
    """Call data for generate(recipient, proof)."""
    args = encode(
        ["address", "bytes"],
        [normalize_address(recipient), b"".join(proof)],
    )
    return function_selector(GENERATE_SIGNATURE) + args


def encode_multi_generate_call(
    merkle_mine: Any,
    recipients: Sequence[Any],
    packed_proofs: bytes,
) -> bytes:
    """Call data for multiGenerate(merkleMine, recipients, packedProofs)."""
    args = encode(
        ["address", "address[]", "bytes"],
        [
            normalize_address(merkle_mine),
            [normalize_address(r) for r in recipients],
            packed_proofs,
        ],
    )
    return function_selector(MULTI_GENERATE_SIGNATURE) + args


def generate_instruction(merkle_mine: Any, recipient: Any, proof: Sequence[bytes]) -> ClaimInstruction:
    return ClaimInstruction(
        to=normalize_address(merkle_mine),
        data=encode_generate_call(recipient, proof),
    )


def multi_generate_instruction(
    batch_contract: Any,
    merkle_mine: Any,
    recipients: Sequence[Any],
    packed_proofs: bytes,
) -> ClaimInstruction:
    return ClaimInstruction(
        to=normalize_address(batch_contract),
        data=encode_multi_generate_call(merkle_mine, recipients, packed_proofs),
    )


__all__ = [
    "GENERATE_SIGNATURE",
    "MULTI_GENERATE_SIGNATURE",
    "ClaimInstruction",
    "function_selector",
    "encode_generate_call",
    "encode_multi_generate_call",
    "generate_instruction",
    "multi_generate_instruction",
]
