"""
Module 00 - Schemas
File: addresses.py

Purpose: Canonical handling of 20-byte account addresses.
Textual addresses are case-insensitive; everything downstream works on the
canonical 20-byte binary value.
"""

from typing import Annotated, Any

from eth_utils import to_canonical_address, to_checksum_address
from pydantic import BeforeValidator

from .errors import InvalidAddressException


ADDRESS_LENGTH: int = 20


def normalize_address(value: Any) -> bytes:
    """
    Canonicalize an address to its 20-byte binary form.

    Accepts a 0x-prefixed hex string in any letter case (checksums are not
    enforced) or a raw 20-byte value.

    Raises:
        InvalidAddressException: If the value is not an address
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_LENGTH:
            raise InvalidAddressException(
                f"Address must be {ADDRESS_LENGTH} bytes, got {len(value)}",
                value=value,
            )
        return bytes(value)

    if isinstance(value, str):
        text = value.strip().lower()
        if not text.startswith("0x"):
            raise InvalidAddressException(f"Address {value!r} must be 0x-prefixed", value=value)
        try:
            return to_canonical_address(text)
        except (ValueError, TypeError) as e:
            raise InvalidAddressException(f"Invalid address {value!r}: {e}", value=value) from e

    raise InvalidAddressException(
        f"Unsupported address type {type(value).__name__}",
        value=value,
    )


def checksum(address: bytes) -> str:
    """EIP-55 display form of a canonical address."""
    return to_checksum_address(address)


# Pydantic field type: accepts any address form, stores canonical bytes
Address = Annotated[bytes, BeforeValidator(normalize_address)]


__all__ = [
    "ADDRESS_LENGTH",
    "Address",
    "normalize_address",
    "checksum",
]
