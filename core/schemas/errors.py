"""
Module 00 - Schemas
File: errors.py

Purpose: Standard error taxonomy for tree building, claim validation and
submission. Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Three families:
- Structural: malformed or inconsistent input. Always fatal.
- Claim validation: a precondition of the claim does not hold. Actionable,
  not retryable until ledger state changes.
- External: ledger reads and transaction submission failed outside the core.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Structural Errors
    INVALID_ADDRESS = "INVALID_ADDRESS"
    EMPTY_TREE = "EMPTY_TREE"
    MALFORMED_PROOF = "MALFORMED_PROOF"
    MALFORMED_BATCH = "MALFORMED_BATCH"
    COUNT_MISMATCH = "COUNT_MISMATCH"
    RECIPIENT_COUNT_MISMATCH = "RECIPIENT_COUNT_MISMATCH"
    INVALID_GENESIS_CONFIG = "INVALID_GENESIS_CONFIG"

    # Claim Validation Errors
    ROOT_MISMATCH = "ROOT_MISMATCH"
    PROOF_NOT_FOUND = "PROOF_NOT_FOUND"
    PROOF_INVALID = "PROOF_INVALID"
    GENERATION_NOT_STARTED = "GENERATION_NOT_STARTED"
    INSUFFICIENT_LEDGER_BALANCE = "INSUFFICIENT_LEDGER_BALANCE"
    ALREADY_GENERATED = "ALREADY_GENERATED"
    OUTSIDE_CALLER_WINDOW = "OUTSIDE_CALLER_WINDOW"

    # External Errors
    LEDGER_READ_FAILED = "LEDGER_READ_FAILED"
    SUBMISSION_FAILED = "SUBMISSION_FAILED"
    SUBMISSION_TIMEOUT = "SUBMISSION_TIMEOUT"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class MerkleMineError(BaseModel):
    """
    Base error model for structured error communication.

    Used to hand failures to the orchestrating layer without exceptions,
    e.g. when reporting per-recipient diagnostics.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.ROOT_MISMATCH],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Compared values and other context for the failure",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried as-is",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleMineException(Exception):
    """
    Base exception for all Merkle mine errors.

    Carries structured error information and can be converted to a
    MerkleMineError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_MINE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> MerkleMineError:
        """Convert this exception to a MerkleMineError model."""
        return MerkleMineError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class StructuralException(MerkleMineException):
    """Malformed, empty or inconsistent input."""


class ClaimValidationException(MerkleMineException):
    """A claim precondition does not hold against the ledger snapshot."""


class ExternalException(MerkleMineException):
    """Failure in a collaborator outside the core (ledger reads, submission)."""


def _with(details: dict[str, Any] | None, **extra: Any) -> dict[str, Any]:
    full_details = dict(details or {})
    for key, value in extra.items():
        if value is not None:
            full_details[key] = value
    return full_details


# -----------------------------------------------------------------------------
# Structural
# -----------------------------------------------------------------------------

class InvalidAddressException(StructuralException):
    """Exception raised when a value cannot be read as a 20-byte address."""

    def __init__(self, message: str, value: Any = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_ADDRESS,
            details=_with(details, value=None if value is None else repr(value)),
        )


class EmptyTreeException(StructuralException):
    """Exception raised when a proof is requested from an empty tree."""

    def __init__(self, message: str = "Cannot prove membership in an empty tree") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_TREE)


class MalformedProofException(StructuralException):
    """Exception raised when a proof is not a whole number of 32-byte hashes."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=ErrorCodes.MALFORMED_PROOF, details=details)


class MalformedBatchException(StructuralException):
    """Exception raised when a packed batch of proofs cannot be decoded."""

    def __init__(
        self,
        message: str,
        offset: int | None = None,
        details: dict[str, Any] | None = None,
        code: str = ErrorCodes.MALFORMED_BATCH,
    ) -> None:
        super().__init__(message=message, code=code, details=_with(details, offset=offset))


class CountMismatchException(MalformedBatchException):
    """Exception raised when recipients and proofs differ in number."""

    def __init__(self, recipients: int, proofs: int) -> None:
        super().__init__(
            message=f"Number of recipients {recipients} != number of proofs {proofs}",
            details={"recipients": recipients, "proofs": proofs},
            code=ErrorCodes.COUNT_MISMATCH,
        )


class RecipientCountMismatchException(StructuralException):
    """Exception raised when the local tree size differs from the ledger's recipient count."""

    def __init__(self, num_leaves: int, total_recipients: int) -> None:
        super().__init__(
            message=(
                f"Number of candidate accounts {num_leaves} != "
                f"totalGenesisRecipients {total_recipients}"
            ),
            code=ErrorCodes.RECIPIENT_COUNT_MISMATCH,
            details={"num_leaves": num_leaves, "total_recipients": total_recipients},
        )


class InvalidGenesisConfigException(StructuralException):
    """Exception raised when genesis parameters are inconsistent."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=ErrorCodes.INVALID_GENESIS_CONFIG, details=details)


# -----------------------------------------------------------------------------
# Claim validation
# -----------------------------------------------------------------------------

class RootMismatchException(ClaimValidationException):
    """Exception raised when the locally built root differs from the ledger root."""

    def __init__(self, local_root: str, ledger_root: str) -> None:
        super().__init__(
            message=(
                f"Locally generated Merkle root {local_root} does not match "
                f"Merkle root stored in the ledger {ledger_root}"
            ),
            code=ErrorCodes.ROOT_MISMATCH,
            details={"local_root": local_root, "ledger_root": ledger_root},
        )


class ProofNotFoundException(ClaimValidationException):
    """Exception raised when an address is not a leaf of the tree."""

    def __init__(self, address: str) -> None:
        super().__init__(
            message=f"The recipient address {address} was not included in the genesis state",
            code=ErrorCodes.PROOF_NOT_FOUND,
            details={"address": address},
        )


class ProofInvalidException(ClaimValidationException):
    """Exception raised when a proof does not fold to the expected root."""

    def __init__(self, address: str, root: str, index: int | None = None) -> None:
        super().__init__(
            message=f"Merkle proof for {address} does not verify against root {root}",
            code=ErrorCodes.PROOF_INVALID,
            details=_with(None, address=address, root=root, index=index),
        )


class GenerationNotStartedException(ClaimValidationException):
    """Exception raised when the ledger has not started generation."""

    def __init__(self) -> None:
        super().__init__(
            message="Generation period has not started for the ledger",
            code=ErrorCodes.GENERATION_NOT_STARTED,
            details={"started": False},
        )


class InsufficientLedgerBalanceException(ClaimValidationException):
    """Exception raised when the ledger cannot cover an allocation."""

    def __init__(self, balance: int, required: int) -> None:
        super().__init__(
            message=(
                f"Tokens per allocation is {required} but the ledger "
                f"only has balance of {balance}"
            ),
            code=ErrorCodes.INSUFFICIENT_LEDGER_BALANCE,
            details={"balance": balance, "required": required},
        )


class AlreadyGeneratedException(ClaimValidationException):
    """Exception raised when a recipient's allocation was already generated."""

    def __init__(self, address: str) -> None:
        super().__init__(
            message=f"Allocation for {address} already generated",
            code=ErrorCodes.ALREADY_GENERATED,
            details={"address": address},
        )


class OutsideCallerWindowException(ClaimValidationException):
    """Exception raised when a third party claims before the caller allocation period."""

    def __init__(self, block: int, start_block: int) -> None:
        super().__init__(
            message=(
                f"Block {block} is before callerAllocationStartBlock {start_block}; "
                f"only the recipient may claim"
            ),
            code=ErrorCodes.OUTSIDE_CALLER_WINDOW,
            details={"block": block, "caller_allocation_start_block": start_block},
        )


# -----------------------------------------------------------------------------
# External
# -----------------------------------------------------------------------------

class LedgerReadException(ExternalException):
    """Exception raised when ledger state cannot be read."""

    def __init__(self, message: str, method: str | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.LEDGER_READ_FAILED,
            details=_with(details, method=method),
            retryable=True,
        )


class SubmissionFailedException(ExternalException):
    """Exception raised when a submitted claim is rejected by the ledger."""

    def __init__(self, handle: str, reason: str) -> None:
        super().__init__(
            message=f"Claim submission {handle} failed: {reason}",
            code=ErrorCodes.SUBMISSION_FAILED,
            details={"handle": handle, "reason": reason},
        )


class SubmissionTimeoutException(ExternalException):
    """Exception raised when a submission is not confirmed in time."""

    def __init__(self, handle: str, timeout_s: float) -> None:
        super().__init__(
            message=f"Claim submission {handle} not confirmed within {timeout_s}s",
            code=ErrorCodes.SUBMISSION_TIMEOUT,
            details={"handle": handle, "timeout_s": timeout_s},
        )
