"""
Module 02 - Batch Proof Codec
Packs many inclusion proofs into one transportable value.

Owner: Protocol/Crypto Engineer
Module ID: M02

Wire format (one entry per recipient, in recipient order):
    [32-byte big-endian proof size in bytes][proof bytes]

The size is always a multiple of 32. An empty batch encodes to b"".
This is the layout the batch claim contract walks when it splits the
packed argument back into individual proofs.
"""
from __future__ import annotations

from typing import Optional, Sequence, Union

from core.crypto.hashing import HASH_LENGTH, from_hex, to_hex
from core.merkle.merkle_tree import Proof, split_proof_bytes
from core.schemas.errors import CountMismatchException, MalformedBatchException


SIZE_PREFIX_LENGTH: int = 32


def encode_batch_proofs(proofs: Sequence[Sequence[bytes]]) -> bytes:
    """
    Encode proofs as length-prefixed concatenations.

    Args:
        proofs: One proof (list of 32-byte siblings) per recipient

    Returns:
        Packed bytes

    Raises:
        MalformedBatchException: If a sibling is not 32 bytes
    """
    chunks: list[bytes] = []
    for i, proof in enumerate(proofs):
        for sibling in proof:
            if len(sibling) != HASH_LENGTH:
                raise MalformedBatchException(
                    f"Proof {i} has a sibling of {len(sibling)} bytes",
                    details={"proof_index": i},
                )
        body = b"".join(proof)
        chunks.append(len(body).to_bytes(SIZE_PREFIX_LENGTH, "big"))
        chunks.append(body)
    return b"".join(chunks)


def decode_batch_proofs(
    data: Union[bytes, str],
    expected_count: Optional[int] = None,
) -> list[Proof]:
    """
    Decode a packed batch back into individual proofs.

    Args:
        data: Packed bytes, or its 0x hex form
        expected_count: Number of recipients the proofs belong to

    Returns:
        Proofs in encoding order

    Raises:
        MalformedBatchException: On truncated data or a size that is not
            a multiple of 32
        CountMismatchException: If expected_count is given and differs
    """
    if isinstance(data, str):
        try:
            data = from_hex(data)
        except ValueError as e:
            raise MalformedBatchException(str(e)) from e

    proofs: list[Proof] = []
    offset = 0

    while offset < len(data):
        if offset + SIZE_PREFIX_LENGTH > len(data):
            raise MalformedBatchException(
                "Truncated proof size prefix",
                offset=offset,
            )
        size = int.from_bytes(data[offset:offset + SIZE_PREFIX_LENGTH], "big")
        if size % HASH_LENGTH != 0:
            raise MalformedBatchException(
                f"Proof size {size} is not a multiple of {HASH_LENGTH}",
                offset=offset,
            )
        start = offset + SIZE_PREFIX_LENGTH
        end = start + size
        if end > len(data):
            raise MalformedBatchException(
                f"Proof of {size} bytes overruns batch of {len(data)} bytes",
                offset=offset,
            )
        proofs.append(split_proof_bytes(data[start:end]))
        offset = end

    if expected_count is not None and expected_count != len(proofs):
        raise CountMismatchException(recipients=expected_count, proofs=len(proofs))

    return proofs


class BatchProofCodec:
    """
    Class-based interface to the batch proof encoding.

    Example:
        >>> packed = BatchProofCodec.encode([tree.get_proof(a) for a in addrs])
        >>> BatchProofCodec.decode(packed, expected_count=len(addrs))
    """

    @staticmethod
    def encode(proofs: Sequence[Sequence[bytes]]) -> bytes:
        return encode_batch_proofs(proofs)

    @staticmethod
    def encode_hex(proofs: Sequence[Sequence[bytes]]) -> str:
        return to_hex(encode_batch_proofs(proofs))

    @staticmethod
    def decode(data: Union[bytes, str], expected_count: Optional[int] = None) -> list[Proof]:
        return decode_batch_proofs(data, expected_count)


__all__ = [
    "SIZE_PREFIX_LENGTH",
    "BatchProofCodec",
    "encode_batch_proofs",
    "decode_batch_proofs",
]
