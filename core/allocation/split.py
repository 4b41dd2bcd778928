"""
Module 03 - Allocation Split
Time-decaying split of one allocation between recipient and caller.

Owner: Protocol/Crypto Engineer
Module ID: M03

Rules (must match the ledger's integer arithmetic exactly):
- block < start:        caller share 0
- block >= end:         caller share 1
- otherwise:            (block - start) / (end - start)
- caller amount = floor(allocation * share)
- recipient amount = allocation - caller amount
- self-claims (caller == recipient) always give the caller 0

No floating point anywhere: the share is a Fraction and amounts are ints.
"""
from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from core.schemas.errors import InvalidGenesisConfigException


@dataclass(frozen=True)
class AllocationSplit:
    """
    Division of one allocation.

    Attributes:
        recipient_amount: Tokens credited to the recipient
        caller_amount: Tokens credited to the caller
    """
    recipient_amount: int
    caller_amount: int

    @property
    def total(self) -> int:
        return self.recipient_amount + self.caller_amount


def tokens_per_allocation(total_tokens: int, total_recipients: int) -> int:
    """
    Allocation per genesis recipient: floor(total_tokens / total_recipients).

    Raises:
        InvalidGenesisConfigException: If total_recipients is not positive
    """
    if total_recipients <= 0:
        raise InvalidGenesisConfigException(
            f"total_recipients must be positive, got {total_recipients}",
            details={"total_recipients": total_recipients},
        )
    return total_tokens // total_recipients


def _check_window(start_block: int, end_block: int) -> None:
    if end_block <= start_block:
        raise InvalidGenesisConfigException(
            f"Caller allocation end block {end_block} must be after start block {start_block}",
            details={"start_block": start_block, "end_block": end_block},
        )


def caller_share_at_block(current_block: int, start_block: int, end_block: int) -> Fraction:
    """
    Fraction of an allocation owed to a third-party caller at a block.

    Returns:
        Fraction in [0, 1]
    """
    _check_window(start_block, end_block)
    if current_block < start_block:
        return Fraction(0)
    if current_block >= end_block:
        return Fraction(1)
    return Fraction(current_block - start_block, end_block - start_block)


def caller_token_amount_at_block(
    allocation: int,
    current_block: int,
    start_block: int,
    end_block: int,
) -> int:
    """floor(allocation * caller_share_at_block(...)) in exact integer math."""
    share = caller_share_at_block(current_block, start_block, end_block)
    return allocation * share.numerator // share.denominator


def split_allocation(
    allocation: int,
    current_block: int,
    start_block: int,
    end_block: int,
    *,
    self_claim: bool = False,
) -> AllocationSplit:
    """
    Split an allocation between recipient and caller.

    The recipient amount is computed by subtraction so the two parts
    always sum to the allocation.

    Args:
        allocation: Tokens per allocation
        current_block: Block the claim executes in
        start_block: callerAllocationStartBlock
        end_block: callerAllocationEndBlock
        self_claim: True when the caller is the recipient

    Returns:
        AllocationSplit
    """
    if allocation < 0:
        raise ValueError(f"Allocation must be non-negative, got {allocation}")

    if self_claim:
        _check_window(start_block, end_block)
        return AllocationSplit(recipient_amount=allocation, caller_amount=0)

    caller_amount = caller_token_amount_at_block(allocation, current_block, start_block, end_block)
    return AllocationSplit(
        recipient_amount=allocation - caller_amount,
        caller_amount=caller_amount,
    )


class VestingSplitCalculator:
    """
    Split calculator bound to one caller allocation window.

    Example:
        >>> calc = VestingSplitCalculator(start_block=100, end_block=200)
        >>> calc.split(1_000_000, current_block=140)
        AllocationSplit(recipient_amount=600000, caller_amount=400000)
    """

    def __init__(self, start_block: int, end_block: int) -> None:
        _check_window(start_block, end_block)
        self.start_block = start_block
        self.end_block = end_block

    def caller_share(self, current_block: int) -> Fraction:
        return caller_share_at_block(current_block, self.start_block, self.end_block)

    def caller_amount(self, allocation: int, current_block: int) -> int:
        return caller_token_amount_at_block(
            allocation, current_block, self.start_block, self.end_block
        )

    def split(self, allocation: int, current_block: int, *, self_claim: bool = False) -> AllocationSplit:
        return split_allocation(
            allocation,
            current_block,
            self.start_block,
            self.end_block,
            self_claim=self_claim,
        )


__all__ = [
    "AllocationSplit",
    "VestingSplitCalculator",
    "tokens_per_allocation",
    "caller_share_at_block",
    "caller_token_amount_at_block",
    "split_allocation",
]
