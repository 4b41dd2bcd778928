"""
Module 04 - In-Memory Ledger
Reference implementation of the authoritative ledger state machine.

Owner: Protocol/Crypto Engineer
Module ID: M04

Behaves like the deployed Merkle mine plus its batch claim contract:
- start() requires the ledger to hold the full token supply
- generate() marks the recipient generated and credits the split
- multi_generate() skips already generated recipients and forwards the
  summed caller share to the batch caller

Every mutating call is atomic: on any failure the state is left untouched.
Used for simulation and as the arbiter in tests.
"""
from __future__ import annotations

import copy
import logging
from collections import defaultdict
from typing import Any, Sequence, Union

from core.allocation.split import split_allocation
from core.crypto.hashing import to_hex
from core.ledger.reader import LedgerReader
from core.merkle.batch_proofs import decode_batch_proofs
from core.merkle.merkle_tree import verify_proof
from core.schemas.addresses import normalize_address
from core.schemas.claims import BatchClaimResult, ClaimResult
from core.schemas.errors import (
    AlreadyGeneratedException,
    GenerationNotStartedException,
    InsufficientLedgerBalanceException,
    OutsideCallerWindowException,
    ProofInvalidException,
)
from core.schemas.genesis import GenesisConfig


logger = logging.getLogger(__name__)


class InMemoryLedger(LedgerReader):
    """
    In-process Merkle mine.

    Example:
        >>> ledger = InMemoryLedger(genesis, token_balance=genesis.total_tokens)
        >>> ledger.start()
        >>> ledger.generate(recipient, tree.get_proof(recipient), caller=recipient)
    """

    def __init__(
        self,
        genesis: GenesisConfig,
        *,
        token_balance: int = 0,
        current_block: int | None = None,
    ) -> None:
        self.genesis = genesis
        self._token_balance = token_balance
        self._block = genesis.genesis_block if current_block is None else current_block
        self._started = False
        self._generated: set[bytes] = set()
        self.balances: dict[bytes, int] = defaultdict(int)

    # ------------------------------------------------------------------
    # LedgerReader
    # ------------------------------------------------------------------

    def genesis_root(self) -> bytes:
        return self.genesis.root

    def total_tokens(self) -> int:
        return self.genesis.total_tokens

    def total_recipients(self) -> int:
        return self.genesis.total_recipients

    def balance_threshold(self) -> int:
        return self.genesis.balance_threshold

    def genesis_block(self) -> int:
        return self.genesis.genesis_block

    def caller_allocation_start_block(self) -> int:
        return self.genesis.caller_allocation_start_block

    def caller_allocation_end_block(self) -> int:
        return self.genesis.caller_allocation_end_block

    def started(self) -> bool:
        return self._started

    def generated(self, address: Any) -> bool:
        return normalize_address(address) in self._generated

    def current_block(self) -> int:
        return self._block

    def token_balance(self) -> int:
        return self._token_balance

    def genesis_config(self) -> GenesisConfig:
        return self.genesis

    # ------------------------------------------------------------------
    # Chain controls
    # ------------------------------------------------------------------

    def mint(self, amount: int) -> None:
        """Credit tokens to the ledger itself."""
        if amount < 0:
            raise ValueError(f"Cannot mint a negative amount: {amount}")
        self._token_balance += amount

    def advance_to(self, block: int) -> None:
        if block < self._block:
            raise ValueError(f"Cannot move back from block {self._block} to {block}")
        self._block = block

    def mine(self, blocks: int = 1) -> None:
        self.advance_to(self._block + blocks)

    def start(self) -> None:
        """Open generation; requires the full supply to be held."""
        if self._token_balance < self.genesis.total_tokens:
            raise InsufficientLedgerBalanceException(
                balance=self._token_balance,
                required=self.genesis.total_tokens,
            )
        self._started = True
        logger.info(f"Ledger started at block {self._block}")

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def generate(self, recipient: Any, proof: Sequence[bytes], caller: Any) -> ClaimResult:
        """
        Execute a single claim.

        Raises:
            GenerationNotStartedException, AlreadyGeneratedException,
            ProofInvalidException, OutsideCallerWindowException,
            InsufficientLedgerBalanceException
        """
        with self._atomic():
            return self._generate(
                normalize_address(recipient),
                proof,
                normalize_address(caller),
                self_claim=None,
            )

    def multi_generate(
        self,
        recipients: Sequence[Any],
        packed_proofs: Union[bytes, str],
        caller: Any,
    ) -> BatchClaimResult:
        """
        Execute a batched claim through the batch intermediary.

        The intermediary is the caller seen by generate(), so the caller
        window applies to every item and the caller share is forwarded to
        `caller`.
        """
        caller_address = normalize_address(caller)
        addresses = [normalize_address(r) for r in recipients]

        if self._block < self.genesis.caller_allocation_start_block:
            raise OutsideCallerWindowException(
                block=self._block,
                start_block=self.genesis.caller_allocation_start_block,
            )

        proofs = decode_batch_proofs(packed_proofs, expected_count=len(addresses))

        with self._atomic():
            claims: list[ClaimResult] = []
            skipped: list[bytes] = []
            for address, proof in zip(addresses, proofs):
                if address in self._generated:
                    skipped.append(address)
                    continue
                claims.append(self._generate(address, proof, caller_address, self_claim=False))

            return BatchClaimResult(
                caller=caller_address,
                block=self._block,
                claims=tuple(claims),
                skipped=tuple(skipped),
                total_caller_amount=sum(c.caller_token_amount for c in claims),
                total_recipient_amount=sum(c.recipient_token_amount for c in claims),
            )

    def _generate(
        self,
        recipient: bytes,
        proof: Sequence[bytes],
        caller: bytes,
        self_claim: bool | None,
    ) -> ClaimResult:
        if not self._started:
            raise GenerationNotStartedException()
        if recipient in self._generated:
            raise AlreadyGeneratedException(to_hex(recipient))
        if not verify_proof(recipient, proof, self.genesis.root):
            raise ProofInvalidException(to_hex(recipient), self.genesis.hex_root)

        if self_claim is None:
            self_claim = caller == recipient
        if not self_claim and self._block < self.genesis.caller_allocation_start_block:
            raise OutsideCallerWindowException(
                block=self._block,
                start_block=self.genesis.caller_allocation_start_block,
            )

        allocation = self.genesis.tokens_per_allocation
        if self._token_balance < allocation:
            raise InsufficientLedgerBalanceException(balance=self._token_balance, required=allocation)

        split = split_allocation(
            allocation,
            self._block,
            self.genesis.caller_allocation_start_block,
            self.genesis.caller_allocation_end_block,
            self_claim=self_claim,
        )

        self._generated.add(recipient)
        self._token_balance -= allocation
        self.balances[recipient] += split.recipient_amount
        self.balances[caller] += split.caller_amount

        return ClaimResult(
            recipient=recipient,
            caller=caller,
            recipient_token_amount=split.recipient_amount,
            caller_token_amount=split.caller_amount,
            block=self._block,
        )

    def _atomic(self) -> "_Rollback":
        return _Rollback(self)


class _Rollback:
    """Restores ledger state if the wrapped block raises."""

    def __init__(self, ledger: InMemoryLedger) -> None:
        self._ledger = ledger

    def __enter__(self) -> None:
        ledger = self._ledger
        self._saved = (
            ledger._token_balance,
            set(ledger._generated),
            copy.copy(ledger.balances),
        )

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            ledger = self._ledger
            ledger._token_balance, ledger._generated, ledger.balances = self._saved
        return False


__all__ = ["InMemoryLedger"]
