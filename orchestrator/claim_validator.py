"""
Module 05 - Claim Validator

Purpose: Sequence the pre-conditions a single claim must meet before it is
handed to the signer/broadcaster, and predict its split.

Checks run in a fixed order and stop at the first failure:
1. recipient_count   tree leaves == ledger totalRecipients
2. root_match        local root == ledger root
3. proof             recipient is in the tree and its proof folds to the root
4. started           generation has started
5. ledger_balance    ledger holds at least one allocation
6. not_generated     recipient has not been generated yet
7. caller_window     caller != recipient requires block >= callerAllocationStartBlock

Validation is predictive. Nothing is marked as claimed here; the ledger does
that when the instruction executes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from core.allocation.split import split_allocation
from core.crypto.hashing import to_hex
from core.ledger.calldata import ClaimInstruction, generate_instruction
from core.ledger.snapshot import LedgerSnapshot
from core.merkle.merkle_tree import MerkleTree, verify_proof
from core.schemas.addresses import normalize_address
from core.schemas.claims import ClaimResult
from core.schemas.errors import (
    AlreadyGeneratedException,
    GenerationNotStartedException,
    InsufficientLedgerBalanceException,
    MerkleMineException,
    OutsideCallerWindowException,
    ProofInvalidException,
    RecipientCountMismatchException,
    RootMismatchException,
)
from core.schemas.verification import CheckResult, VerificationResult


logger = logging.getLogger(__name__)


@dataclass
class _Claim:
    """Inputs of one validation pass."""
    snapshot: LedgerSnapshot
    recipient: bytes
    caller: bytes
    proof: Optional[list[bytes]]
    block: int


class ClaimValidator:
    """
    Validates single claims against a recipient tree and a ledger snapshot.

    Example:
        >>> validator = ClaimValidator(tree)
        >>> snapshot = LedgerSnapshot.capture(reader, [recipient])
        >>> result = validator.validate(snapshot, recipient, caller)
        >>> instruction = validator.build_instruction(result, merkle_mine_address)
    """

    def __init__(self, tree: MerkleTree) -> None:
        self.tree = tree
        self._checks: list[tuple[str, Callable[[_Claim], dict[str, Any]]]] = [
            ("recipient_count", self._check_recipient_count),
            ("root_match", self._check_root),
            ("proof", self._check_proof),
            ("started", self._check_started),
            ("ledger_balance", self._check_balance),
            ("not_generated", self._check_not_generated),
            ("caller_window", self._check_caller_window),
        ]

    def validate(
        self,
        snapshot: LedgerSnapshot,
        recipient: Any,
        caller: Any,
        proof: Optional[Sequence[bytes]] = None,
        block: Optional[int] = None,
    ) -> ClaimResult:
        """
        Run every check and predict the split.

        Args:
            snapshot: Ledger state captured for this attempt
            recipient: Recipient address
            caller: Account that will execute the claim
            proof: Proof to check; taken from the tree when omitted
            block: Block the claim is expected to land in; defaults to
                the snapshot's current block

        Returns:
            ClaimResult with the predicted amounts

        Raises:
            ClaimValidationException subclass for the first failing check
        """
        claim = self._claim(snapshot, recipient, caller, proof, block)
        for _check_id, check in self._checks:
            check(claim)

        split = split_allocation(
            snapshot.tokens_per_allocation,
            claim.block,
            snapshot.caller_allocation_start_block,
            snapshot.caller_allocation_end_block,
            self_claim=claim.caller == claim.recipient,
        )
        result = ClaimResult(
            recipient=claim.recipient,
            caller=claim.caller,
            recipient_token_amount=split.recipient_amount,
            caller_token_amount=split.caller_amount,
            block=claim.block,
        )
        logger.info(
            f"Claim for {to_hex(claim.recipient)} valid at block {claim.block}: "
            f"recipient {split.recipient_amount}, caller {split.caller_amount}"
        )
        return result

    def check(
        self,
        snapshot: LedgerSnapshot,
        recipient: Any,
        caller: Any,
        proof: Optional[Sequence[bytes]] = None,
        block: Optional[int] = None,
    ) -> VerificationResult:
        """
        Run the checks without raising.

        Returns one CheckResult per check executed, stopping after the
        first failure, which is also reported as the result's error.
        """
        claim = self._claim(snapshot, recipient, caller, proof, block)
        results: list[CheckResult] = []

        for check_id, check in self._checks:
            try:
                details = check(claim)
            except MerkleMineException as e:
                results.append(CheckResult.failed(check_id, e.message, details=e.details))
                return VerificationResult.failure(results, error=e.to_error_model())
            results.append(CheckResult.passed(check_id, details=details))

        return VerificationResult.success(results)

    def check_commitment(self, snapshot: LedgerSnapshot) -> None:
        """
        Run only the tree-vs-ledger checks (recipient count and root).

        Raises:
            RecipientCountMismatchException, RootMismatchException
        """
        self._check_recipient_count_values(snapshot)
        self._check_root_values(snapshot)

    def build_instruction(self, result: ClaimResult, merkle_mine_address: Any) -> ClaimInstruction:
        """generate(recipient, proof) call for a validated claim."""
        return generate_instruction(
            merkle_mine_address,
            result.recipient,
            self.tree.get_proof(result.recipient),
        )

    # ------------------------------------------------------------------
    # Checks (each raises on failure and returns the compared values)
    # ------------------------------------------------------------------

    def _claim(
        self,
        snapshot: LedgerSnapshot,
        recipient: Any,
        caller: Any,
        proof: Optional[Sequence[bytes]],
        block: Optional[int],
    ) -> _Claim:
        if block is not None and block < 0:
            raise ValueError(f"block must be non-negative, got {block}")
        return _Claim(
            snapshot=snapshot,
            recipient=normalize_address(recipient),
            caller=normalize_address(caller),
            proof=None if proof is None else list(proof),
            block=snapshot.current_block if block is None else block,
        )

    def _check_recipient_count_values(self, snapshot: LedgerSnapshot) -> dict[str, Any]:
        if self.tree.num_leaves != snapshot.total_recipients:
            raise RecipientCountMismatchException(
                num_leaves=self.tree.num_leaves,
                total_recipients=snapshot.total_recipients,
            )
        return {"num_leaves": self.tree.num_leaves, "total_recipients": snapshot.total_recipients}

    def _check_root_values(self, snapshot: LedgerSnapshot) -> dict[str, Any]:
        if self.tree.root != snapshot.root:
            raise RootMismatchException(local_root=self.tree.hex_root, ledger_root=to_hex(snapshot.root))
        return {"root": self.tree.hex_root}

    def _check_recipient_count(self, claim: _Claim) -> dict[str, Any]:
        return self._check_recipient_count_values(claim.snapshot)

    def _check_root(self, claim: _Claim) -> dict[str, Any]:
        return self._check_root_values(claim.snapshot)

    def _check_proof(self, claim: _Claim) -> dict[str, Any]:
        # Absence in the tree is reported separately from a bad proof
        index = self.tree.leaf_index(claim.recipient)
        proof = claim.proof if claim.proof is not None else self.tree.get_proof(claim.recipient)
        if not verify_proof(claim.recipient, proof, self.tree.root):
            raise ProofInvalidException(to_hex(claim.recipient), self.tree.hex_root, index=index)
        return {"leaf_index": index, "proof_length": len(proof)}

    def _check_started(self, claim: _Claim) -> dict[str, Any]:
        if not claim.snapshot.started:
            raise GenerationNotStartedException()
        return {"started": True}

    def _check_balance(self, claim: _Claim) -> dict[str, Any]:
        required = claim.snapshot.tokens_per_allocation
        balance = claim.snapshot.ledger_balance
        if balance < required:
            raise InsufficientLedgerBalanceException(balance=balance, required=required)
        return {"balance": balance, "required": required}

    def _check_not_generated(self, claim: _Claim) -> dict[str, Any]:
        if claim.snapshot.is_generated(claim.recipient):
            raise AlreadyGeneratedException(to_hex(claim.recipient))
        return {"generated": False}

    def _check_caller_window(self, claim: _Claim) -> dict[str, Any]:
        start_block = claim.snapshot.caller_allocation_start_block
        if claim.caller != claim.recipient and claim.block < start_block:
            raise OutsideCallerWindowException(block=claim.block, start_block=start_block)
        return {"block": claim.block, "start_block": start_block, "self_claim": claim.caller == claim.recipient}


__all__ = ["ClaimValidator"]
