"""
Module 03 - Allocation Split Unit Tests
Tests for core/allocation/split.py

Covers:
- recipient + caller == allocation for every block of the window and beyond
- boundaries at the start and end blocks
- self-claims never pay the caller
- the 10_000_000 / 10 recipients scenario at 40% of the window
"""
from fractions import Fraction

import pytest

from core.allocation.split import (
    AllocationSplit,
    VestingSplitCalculator,
    caller_share_at_block,
    caller_token_amount_at_block,
    split_allocation,
    tokens_per_allocation,
)
from core.schemas.errors import InvalidGenesisConfigException


START = 200
END = 300


class TestTokensPerAllocation:
    def test_even_division(self):
        assert tokens_per_allocation(10_000_000, 10) == 1_000_000

    def test_floors(self):
        assert tokens_per_allocation(10, 3) == 3

    @pytest.mark.parametrize("recipients", [0, -1])
    def test_non_positive_recipients(self, recipients):
        with pytest.raises(InvalidGenesisConfigException):
            tokens_per_allocation(100, recipients)


class TestCallerShare:
    """Tests for caller_share_at_block()."""

    def test_before_start_is_zero(self):
        assert caller_share_at_block(START - 1, START, END) == 0
        assert caller_share_at_block(0, START, END) == 0

    def test_at_start_is_zero(self):
        assert caller_share_at_block(START, START, END) == 0

    def test_linear_ramp(self):
        assert caller_share_at_block(240, START, END) == Fraction(2, 5)
        assert caller_share_at_block(250, START, END) == Fraction(1, 2)

    def test_at_and_after_end_is_one(self):
        assert caller_share_at_block(END, START, END) == 1
        assert caller_share_at_block(END + 10_000, START, END) == 1

    def test_exact_fraction_type(self):
        assert isinstance(caller_share_at_block(233, START, END), Fraction)

    @pytest.mark.parametrize("start,end", [(300, 300), (300, 200)])
    def test_empty_window_rejected(self, start, end):
        with pytest.raises(InvalidGenesisConfigException):
            caller_share_at_block(250, start, end)


class TestCallerTokenAmount:
    def test_matches_ledger_integer_formula(self):
        """tokens * (block - start) // (end - start), the ledger's formula."""
        start, end = 1_000, 8_777
        for block in range(start, end, 97):
            expected = 999_999_999 * (block - start) // (end - start)
            assert caller_token_amount_at_block(999_999_999, block, start, end) == expected

    def test_floors_instead_of_rounding(self):
        # 10 * 2/3 = 6.66..
        assert caller_token_amount_at_block(10, 2, 0, 3) == 6


class TestSplitAllocation:
    """Tests for split_allocation()."""

    def test_scenario_forty_percent(self):
        """10_000_000 tokens / 10 recipients, 40% into the window."""
        allocation = tokens_per_allocation(10_000_000, 10)

        split = split_allocation(allocation, 240, START, END)

        assert split == AllocationSplit(recipient_amount=600_000, caller_amount=400_000)

    @pytest.mark.parametrize("allocation", [1, 3, 7, 999, 1_000_000, 333_333_333_333_333_333])
    def test_sum_invariant_full_range(self, allocation):
        """recipient + caller == allocation for every block in and around the window."""
        for block in range(0, END + 50):
            split = split_allocation(allocation, block, START, END)
            assert split.recipient_amount + split.caller_amount == allocation
            assert split.total == allocation
            assert 0 <= split.caller_amount <= allocation

    def test_sum_invariant_awkward_window(self):
        """Non-dividing window length exercises the flooring."""
        for block in range(10, 30):
            split = split_allocation(1_000_003, block, 11, 24)
            assert split.recipient_amount + split.caller_amount == 1_000_003

    def test_caller_amount_monotonic(self):
        amounts = [split_allocation(1_000_000, b, START, END).caller_amount for b in range(START, END + 1)]

        assert amounts == sorted(amounts)

    def test_boundary_at_start(self):
        split = split_allocation(1_000_000, START, START, END)

        assert split.caller_amount == 0
        assert split.recipient_amount == 1_000_000

    def test_boundary_at_end(self):
        split = split_allocation(1_000_000, END, START, END)

        assert split.caller_amount == 1_000_000
        assert split.recipient_amount == 0

    @pytest.mark.parametrize("block", [0, START, 240, END, END * 10])
    def test_self_claim_never_pays_caller(self, block):
        split = split_allocation(1_000_000, block, START, END, self_claim=True)

        assert split.caller_amount == 0
        assert split.recipient_amount == 1_000_000

    def test_zero_allocation(self):
        assert split_allocation(0, 250, START, END) == AllocationSplit(0, 0)

    def test_negative_allocation_rejected(self):
        with pytest.raises(ValueError):
            split_allocation(-1, 250, START, END)


class TestVestingSplitCalculator:
    def test_bound_window(self):
        calc = VestingSplitCalculator(start_block=START, end_block=END)

        assert calc.caller_share(240) == Fraction(2, 5)
        assert calc.caller_amount(1_000_000, 240) == 400_000
        assert calc.split(1_000_000, 240) == AllocationSplit(600_000, 400_000)
        assert calc.split(1_000_000, 240, self_claim=True) == AllocationSplit(1_000_000, 0)

    def test_rejects_empty_window(self):
        with pytest.raises(InvalidGenesisConfigException):
            VestingSplitCalculator(start_block=10, end_block=10)
