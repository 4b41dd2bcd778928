"""
Module 03 - Allocation Split

Public API:
- tokens_per_allocation: floor(total_tokens / total_recipients)
- caller_share_at_block: linear caller share as a Fraction
- split_allocation: recipient/caller amounts for one claim
- VestingSplitCalculator: the same, bound to one caller window
"""
from .split import (
    AllocationSplit,
    VestingSplitCalculator,
    tokens_per_allocation,
    caller_share_at_block,
    caller_token_amount_at_block,
    split_allocation,
)

__all__ = [
    "AllocationSplit",
    "VestingSplitCalculator",
    "tokens_per_allocation",
    "caller_share_at_block",
    "caller_token_amount_at_block",
    "split_allocation",
]
