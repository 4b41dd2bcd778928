"""
Claim Orchestration

Wires the Merkle tree, the ledger snapshot and the split calculator into
single and batched claims ready for an external signer/broadcaster.

Public API:
- ClaimValidator: Ordered pre-checks and split prediction for one claim
- BatchClaimOrchestrator: Batched claims against one snapshot
- BatchClaimPlan: A validated batch plus its multiGenerate instruction
- ClaimSubmitter: Interface of the signer/broadcaster
- Submitted / Confirmed / Failed: Submission states
- wait_for_confirmation: Poll a submission to a terminal state
- submit_and_confirm: Submit and wait with the configured timings
"""

from orchestrator.claim_validator import ClaimValidator
from orchestrator.batch_claim import BatchClaimOrchestrator, BatchClaimPlan
from orchestrator.submission import (
    ClaimSubmitter,
    Confirmed,
    Failed,
    InMemorySubmitter,
    Submitted,
    SubmissionStatus,
    submit_and_confirm,
    wait_for_confirmation,
)


__all__ = [
    "ClaimValidator",
    "BatchClaimOrchestrator",
    "BatchClaimPlan",
    "ClaimSubmitter",
    "InMemorySubmitter",
    "Submitted",
    "Confirmed",
    "Failed",
    "SubmissionStatus",
    "wait_for_confirmation",
    "submit_and_confirm",
]
