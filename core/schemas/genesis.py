"""
Module 00 - Schemas
File: genesis.py

Purpose: Genesis parameters committed in the ledger.
These values are fixed when the ledger is deployed and are read-only from
the core's perspective.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from core.crypto.hashing import HASH_LENGTH, from_hex, to_hex


def normalize_hash(value: Any) -> bytes:
    """Accept a 32-byte value or its 0x hex form."""
    if isinstance(value, str):
        value = from_hex(value)
    if not isinstance(value, (bytes, bytearray)) or len(value) != HASH_LENGTH:
        raise ValueError(f"Expected a {HASH_LENGTH}-byte hash")
    return bytes(value)


Hash32 = Annotated[bytes, BeforeValidator(normalize_hash)]


class GenesisConfig(BaseModel):
    """
    Parameters of a Merkle mine distribution.

    Invariants:
    - total_recipients > 0
    - genesis_block <= caller_allocation_start_block < caller_allocation_end_block
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: Hash32 = Field(..., description="Merkle root committing the genesis recipients")
    total_tokens: int = Field(..., ge=0, description="Total tokens distributed")
    total_recipients: int = Field(..., gt=0, description="Number of genesis recipients")
    balance_threshold: int = Field(default=0, ge=0, description="Recipient balance threshold")
    genesis_block: int = Field(..., ge=0, description="Block of the genesis snapshot")
    caller_allocation_start_block: int = Field(..., ge=0)
    caller_allocation_end_block: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_blocks(self) -> "GenesisConfig":
        if self.caller_allocation_end_block <= self.caller_allocation_start_block:
            raise ValueError(
                "caller_allocation_end_block must be greater than caller_allocation_start_block"
            )
        if self.genesis_block > self.caller_allocation_start_block:
            raise ValueError(
                "genesis_block must not be after caller_allocation_start_block"
            )
        return self

    @property
    def tokens_per_allocation(self) -> int:
        """floor(total_tokens / total_recipients)."""
        return self.total_tokens // self.total_recipients

    @property
    def caller_allocation_period(self) -> int:
        return self.caller_allocation_end_block - self.caller_allocation_start_block

    @property
    def hex_root(self) -> str:
        return to_hex(self.root)


__all__ = [
    "Hash32",
    "GenesisConfig",
    "normalize_hash",
]
