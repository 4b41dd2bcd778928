"""
Module 06 - Batch Claim Orchestrator

Purpose: Validate many claims for one caller against a single ledger
snapshot and aggregate the caller's share.

Per batch:
- recipients and proofs must pair up one to one (empty/empty is fine)
- the batch intermediary is never a recipient, so the caller window
  always applies
- recipients already generated, or repeated earlier in the batch, are
  skipped without failing the rest
- any other failure (bad proof, not started, ledger short of tokens) fails
  the whole batch

The result predicts what multiGenerate will credit when it executes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from core.allocation.split import split_allocation
from core.crypto.hashing import to_hex
from core.ledger.calldata import ClaimInstruction, multi_generate_instruction
from core.ledger.reader import LedgerReader
from core.ledger.snapshot import LedgerSnapshot
from core.merkle.batch_proofs import decode_batch_proofs, encode_batch_proofs
from core.merkle.merkle_tree import MerkleTree, Proof, verify_proof
from core.schemas.addresses import normalize_address
from core.schemas.claims import BatchClaimResult, ClaimResult
from core.schemas.errors import (
    CountMismatchException,
    GenerationNotStartedException,
    InsufficientLedgerBalanceException,
    OutsideCallerWindowException,
    ProofInvalidException,
)
from orchestrator.claim_validator import ClaimValidator


logger = logging.getLogger(__name__)


ProofsInput = Union[bytes, str, Sequence[Sequence[bytes]]]


@dataclass(frozen=True)
class BatchClaimPlan:
    """
    One submittable batch.

    Attributes:
        result: Predicted outcome of the batch
        instruction: multiGenerate call covering the recipients in result.claims
    """
    result: BatchClaimResult
    instruction: ClaimInstruction


@dataclass
class _Running:
    """State carried across the items (and chunks) of one snapshot."""
    claimed: set[bytes] = field(default_factory=set)
    spent: int = 0


class BatchClaimOrchestrator:
    """
    Drives batched claims for one Merkle mine.

    Example:
        >>> orchestrator = BatchClaimOrchestrator(reader, mine_address, batch_address)
        >>> result = orchestrator.process(recipients, tree.get_batch_proofs(recipients), caller)
        >>> plans = orchestrator.plan(tree, recipients, caller)
    """

    def __init__(
        self,
        reader: LedgerReader,
        merkle_mine_address: Any,
        batch_contract_address: Any,
        max_batch_size: int = 50,
    ) -> None:
        if max_batch_size <= 0:
            raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")
        self.reader = reader
        self.merkle_mine_address = normalize_address(merkle_mine_address)
        self.batch_contract_address = normalize_address(batch_contract_address)
        self.max_batch_size = max_batch_size

    @classmethod
    def from_config(cls, reader: LedgerReader, config: Any) -> "BatchClaimOrchestrator":
        """Build from a RuntimeConfig."""
        return cls(
            reader,
            config.ledger.merkle_mine_address,
            config.ledger.batch_contract_address,
            max_batch_size=config.claim.max_batch_size,
        )

    def process(
        self,
        recipients: Sequence[Any],
        proofs: ProofsInput,
        caller: Any,
        block: Optional[int] = None,
    ) -> BatchClaimResult:
        """
        Validate one batch against a fresh snapshot.

        Args:
            recipients: Recipient addresses; duplicates allowed
            proofs: Packed batch proofs (bytes or 0x hex) or one proof per recipient
            caller: Account receiving the summed caller share
            block: Block the batch is expected to land in; defaults to the
                snapshot's current block

        Returns:
            BatchClaimResult

        Raises:
            CountMismatchException: recipients and proofs differ in length
            OutsideCallerWindowException: block is before callerAllocationStartBlock
            ProofInvalidException, GenerationNotStartedException,
            InsufficientLedgerBalanceException: for any non-skipped recipient
        """
        addresses = [normalize_address(r) for r in recipients]
        proof_list = self._proofs(proofs, len(addresses))
        caller_address = normalize_address(caller)

        if not addresses:
            at_block = self.reader.current_block() if block is None else block
            logger.info("Empty batch, nothing to claim")
            return BatchClaimResult(caller=caller_address, block=at_block)

        snapshot = LedgerSnapshot.capture(self.reader, addresses)
        return self._process(snapshot, addresses, proof_list, caller_address, block, _Running())

    def plan(
        self,
        tree: MerkleTree,
        recipients: Sequence[Any],
        caller: Any,
        block: Optional[int] = None,
    ) -> list[BatchClaimPlan]:
        """
        Split recipients into submittable batches of at most max_batch_size.

        All chunks are validated against one snapshot, with the ledger
        balance and the skip set carried from chunk to chunk. Chunks where
        every recipient is skipped produce no plan.

        Raises:
            RecipientCountMismatchException, RootMismatchException: If the
                tree does not match the ledger commitment
            ProofNotFoundException: If a recipient is not in the tree
        """
        addresses = [normalize_address(r) for r in recipients]
        caller_address = normalize_address(caller)

        snapshot = LedgerSnapshot.capture(self.reader, addresses)
        ClaimValidator(tree).check_commitment(snapshot)

        running = _Running()
        plans: list[BatchClaimPlan] = []

        for offset in range(0, len(addresses), self.max_batch_size):
            chunk = addresses[offset:offset + self.max_batch_size]
            chunk_proofs = [tree.get_proof(a) for a in chunk]
            result = self._process(snapshot, chunk, chunk_proofs, caller_address, block, running)
            if result.is_empty:
                logger.info(f"Batch at offset {offset} has nothing left to claim")
                continue
            claimed = [c.recipient for c in result.claims]
            plans.append(BatchClaimPlan(
                result=result,
                instruction=self.build_instruction(claimed, [tree.get_proof(a) for a in claimed]),
            ))

        logger.info(
            f"Planned {len(plans)} batches for {len(addresses)} recipients "
            f"(caller total {sum(p.result.total_caller_amount for p in plans)})"
        )
        return plans

    def build_instruction(self, recipients: Sequence[Any], proofs: Sequence[Proof]) -> ClaimInstruction:
        """multiGenerate call for recipients and their proofs."""
        if len(recipients) != len(proofs):
            raise CountMismatchException(recipients=len(recipients), proofs=len(proofs))
        return multi_generate_instruction(
            self.batch_contract_address,
            self.merkle_mine_address,
            recipients,
            encode_batch_proofs(proofs),
        )

    # ------------------------------------------------------------------

    @staticmethod
    def _proofs(proofs: ProofsInput, count: int) -> list[Proof]:
        if isinstance(proofs, bytearray):
            proofs = bytes(proofs)
        if isinstance(proofs, (bytes, str)):
            return decode_batch_proofs(proofs, expected_count=count)
        proof_list = [list(p) for p in proofs]
        if len(proof_list) != count:
            raise CountMismatchException(recipients=count, proofs=len(proof_list))
        return proof_list

    def _process(
        self,
        snapshot: LedgerSnapshot,
        addresses: list[bytes],
        proofs: list[Proof],
        caller: bytes,
        block: Optional[int],
        running: _Running,
    ) -> BatchClaimResult:
        at_block = snapshot.current_block if block is None else block
        start_block = snapshot.caller_allocation_start_block

        if at_block < start_block:
            raise OutsideCallerWindowException(block=at_block, start_block=start_block)

        allocation = snapshot.tokens_per_allocation
        claims: list[ClaimResult] = []
        skipped: list[bytes] = []

        for address, proof in zip(addresses, proofs):
            if address in running.claimed or snapshot.is_generated(address):
                logger.debug(f"Skipping {to_hex(address)}: already generated")
                skipped.append(address)
                continue

            if not verify_proof(address, proof, snapshot.root):
                raise ProofInvalidException(to_hex(address), to_hex(snapshot.root))
            if not snapshot.started:
                raise GenerationNotStartedException()

            remaining = snapshot.ledger_balance - running.spent
            if remaining < allocation:
                raise InsufficientLedgerBalanceException(balance=remaining, required=allocation)

            split = split_allocation(
                allocation,
                at_block,
                start_block,
                snapshot.caller_allocation_end_block,
            )
            running.claimed.add(address)
            running.spent += allocation
            claims.append(ClaimResult(
                recipient=address,
                caller=caller,
                recipient_token_amount=split.recipient_amount,
                caller_token_amount=split.caller_amount,
                block=at_block,
            ))

        result = BatchClaimResult(
            caller=caller,
            block=at_block,
            claims=tuple(claims),
            skipped=tuple(skipped),
            total_caller_amount=sum(c.caller_token_amount for c in claims),
            total_recipient_amount=sum(c.recipient_token_amount for c in claims),
        )
        logger.info(
            f"Batch of {len(addresses)} at block {at_block}: {len(claims)} claims, "
            f"{len(skipped)} skipped, caller total {result.total_caller_amount}"
        )
        return result


__all__ = [
    "BatchClaimOrchestrator",
    "BatchClaimPlan",
]
