"""
Module 00 - Schemas
File: claims.py

Purpose: Value records produced by claim validation.
A ClaimResult is the terminal artifact handed to the signer/broadcaster;
it is never mutated once produced.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .addresses import Address, checksum


class ClaimResult(BaseModel):
    """
    Predicted outcome of a single accepted claim.

    recipient_token_amount + caller_token_amount always equals the
    allocation the claim was computed for.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    recipient: Address
    caller: Address
    recipient_token_amount: int = Field(..., ge=0)
    caller_token_amount: int = Field(..., ge=0)
    block: int = Field(..., ge=0, description="Block the split was computed for")

    @property
    def total(self) -> int:
        return self.recipient_token_amount + self.caller_token_amount

    @property
    def is_self_claim(self) -> bool:
        return self.recipient == self.caller

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient": checksum(self.recipient),
            "caller": checksum(self.caller),
            "recipient_token_amount": self.recipient_token_amount,
            "caller_token_amount": self.caller_token_amount,
            "block": self.block,
        }


class BatchClaimResult(BaseModel):
    """
    Aggregate outcome of one batched claim.

    `claims` lists the recipients that will be credited, in input order;
    `skipped` lists recipients passed over because their allocation was
    already generated (including repeated entries within the batch).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    caller: Address
    block: int = Field(..., ge=0)
    claims: tuple[ClaimResult, ...] = ()
    skipped: tuple[Address, ...] = ()
    total_caller_amount: int = Field(default=0, ge=0)
    total_recipient_amount: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_totals(self) -> "BatchClaimResult":
        caller_total = sum(c.caller_token_amount for c in self.claims)
        recipient_total = sum(c.recipient_token_amount for c in self.claims)
        if caller_total != self.total_caller_amount:
            raise ValueError(
                f"total_caller_amount {self.total_caller_amount} != sum of claims {caller_total}"
            )
        if recipient_total != self.total_recipient_amount:
            raise ValueError(
                f"total_recipient_amount {self.total_recipient_amount} != sum of claims {recipient_total}"
            )
        return self

    @property
    def is_empty(self) -> bool:
        return not self.claims

    def to_dict(self) -> dict[str, Any]:
        return {
            "caller": checksum(self.caller),
            "block": self.block,
            "claims": [c.to_dict() for c in self.claims],
            "skipped": [checksum(a) for a in self.skipped],
            "total_caller_amount": self.total_caller_amount,
            "total_recipient_amount": self.total_recipient_amount,
        }


__all__ = [
    "ClaimResult",
    "BatchClaimResult",
]
