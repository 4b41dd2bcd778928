"""
Module 07 - Claim Submission

Purpose: Model the hand-off to the external signer/broadcaster as two
sequential results instead of callbacks:

    submitted = submitter.submit(instruction)          # Submitted{handle}
    status = wait_for_confirmation(submitter, submitted)  # Confirmed{...}

Failed submissions are not retried here. A failure means validation has to
be re-run against a fresh snapshot.
"""

from __future__ import annotations

import itertools
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from core.config.runtime import ClaimConfig, RuntimeConfig
from core.crypto.hashing import keccak256, to_hex
from core.ledger.calldata import (
    GENERATE_SIGNATURE,
    MULTI_GENERATE_SIGNATURE,
    ClaimInstruction,
    function_selector,
)
from core.ledger.memory import InMemoryLedger
from core.merkle.merkle_tree import split_proof_bytes
from core.schemas.addresses import normalize_address
from core.schemas.errors import (
    MerkleMineException,
    SubmissionFailedException,
    SubmissionTimeoutException,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Submitted:
    """Instruction accepted by the broadcaster; outcome not yet known."""
    handle: str
    instruction: ClaimInstruction


@dataclass(frozen=True)
class Confirmed:
    """Instruction executed on the ledger."""
    handle: str
    block: Optional[int] = None
    receipt: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Failed:
    """Instruction rejected or reverted by the ledger."""
    handle: str
    reason: str


SubmissionStatus = Union[Confirmed, Failed]


class ClaimSubmitter(ABC):
    """Sink for claim instructions (signer + broadcaster)."""

    @abstractmethod
    def submit(self, instruction: ClaimInstruction) -> Submitted:
        """Hand an instruction off for execution."""

    @abstractmethod
    def poll(self, submitted: Submitted) -> Optional[SubmissionStatus]:
        """Terminal status of a submission, or None while pending."""


def wait_for_confirmation(
    submitter: ClaimSubmitter,
    submitted: Submitted,
    timeout_s: float = 300.0,
    poll_interval_s: float = 2.0,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Confirmed:
    """
    Block until a submission reaches a terminal status.

    Args:
        submitter: Submitter that produced `submitted`
        submitted: Handle returned by submit()
        timeout_s: Maximum seconds to wait
        poll_interval_s: Seconds between polls

    Returns:
        Confirmed status

    Raises:
        SubmissionFailedException: If the ledger rejected the instruction
        SubmissionTimeoutException: If no terminal status arrived in time
    """
    deadline = clock() + timeout_s

    while True:
        status = submitter.poll(submitted)
        if isinstance(status, Confirmed):
            logger.info(f"Submission {submitted.handle} confirmed")
            return status
        if isinstance(status, Failed):
            logger.warning(f"Submission {submitted.handle} failed: {status.reason}")
            raise SubmissionFailedException(submitted.handle, status.reason)

        remaining = deadline - clock()
        if remaining <= 0:
            raise SubmissionTimeoutException(submitted.handle, timeout_s)
        sleep(min(poll_interval_s, remaining))


def submit_and_confirm(
    submitter: ClaimSubmitter,
    instruction: ClaimInstruction,
    config: Optional[RuntimeConfig] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Confirmed:
    """Submit one instruction and wait using the configured timeout and poll interval."""
    claim = config.claim if config is not None else ClaimConfig()
    submitted = submitter.submit(instruction)
    logger.info(f"Submitted claim {submitted.handle} to {to_hex(instruction.to)}")
    return wait_for_confirmation(
        submitter,
        submitted,
        timeout_s=claim.confirmation_timeout_s,
        poll_interval_s=claim.poll_interval_s,
        sleep=sleep,
        clock=clock,
    )


class InMemorySubmitter(ClaimSubmitter):
    """
    Executes instructions directly against an InMemoryLedger.

    `account` plays the signer: it is the caller seen by generate() and
    the recipient of the caller share in multiGenerate().
    """

    def __init__(self, ledger: InMemoryLedger, account: Any) -> None:
        self.ledger = ledger
        self.account = normalize_address(account)
        self._statuses: dict[str, SubmissionStatus] = {}
        self._nonce = itertools.count()

    @classmethod
    def from_config(cls, ledger: InMemoryLedger, config: RuntimeConfig) -> "InMemorySubmitter":
        """Build with the configured caller account as signer."""
        if not config.claim.caller_address:
            raise ValueError("claim.caller_address is not configured")
        return cls(ledger, config.claim.caller_address)

    def submit(self, instruction: ClaimInstruction) -> Submitted:
        handle = to_hex(keccak256(instruction.data + next(self._nonce).to_bytes(32, "big")))
        try:
            result = self._execute(instruction)
        except MerkleMineException as e:
            self._statuses[handle] = Failed(handle=handle, reason=f"{e.code}: {e.message}")
        except (DecodingError, ValueError, TypeError) as e:
            # Undecodable call data reverts on the ledger as well
            self._statuses[handle] = Failed(handle=handle, reason=f"Invalid call data: {e}")
        else:
            self._statuses[handle] = Confirmed(
                handle=handle,
                block=self.ledger.current_block(),
                receipt=result.to_dict(),
            )
        return Submitted(handle=handle, instruction=instruction)

    def poll(self, submitted: Submitted) -> Optional[SubmissionStatus]:
        return self._statuses.get(submitted.handle)

    def _execute(self, instruction: ClaimInstruction) -> Any:
        selector, args = instruction.selector, instruction.data[4:]

        if selector == function_selector(GENERATE_SIGNATURE):
            recipient, proof = decode(["address", "bytes"], args)
            return self.ledger.generate(recipient, split_proof_bytes(proof), self.account)

        if selector == function_selector(MULTI_GENERATE_SIGNATURE):
            _merkle_mine, recipients, packed = decode(["address", "address[]", "bytes"], args)
            return self.ledger.multi_generate(list(recipients), packed, self.account)

        raise ValueError(f"Unknown selector {to_hex(selector)}")


__all__ = [
    "Submitted",
    "Confirmed",
    "Failed",
    "SubmissionStatus",
    "ClaimSubmitter",
    "InMemorySubmitter",
    "wait_for_confirmation",
    "submit_and_confirm",
]
