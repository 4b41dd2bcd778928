"""
Module 00 - Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Addresses
from .addresses import (
    ADDRESS_LENGTH,
    Address,
    checksum,
    normalize_address,
)

# Error models and exceptions
from .errors import (
    AlreadyGeneratedException,
    ClaimValidationException,
    CountMismatchException,
    EmptyTreeException,
    ErrorCodes,
    ExternalException,
    GenerationNotStartedException,
    InsufficientLedgerBalanceException,
    InvalidAddressException,
    InvalidGenesisConfigException,
    LedgerReadException,
    MalformedBatchException,
    MalformedProofException,
    MerkleMineError,
    MerkleMineException,
    OutsideCallerWindowException,
    ProofInvalidException,
    ProofNotFoundException,
    RecipientCountMismatchException,
    RootMismatchException,
    StructuralException,
    SubmissionFailedException,
    SubmissionTimeoutException,
)

# Genesis parameters
from .genesis import (
    GenesisConfig,
    Hash32,
    normalize_hash,
)

# Claim records
from .claims import (
    BatchClaimResult,
    ClaimResult,
)

# Verification schemas
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)


__all__ = [
    # Addresses
    "ADDRESS_LENGTH",
    "Address",
    "checksum",
    "normalize_address",
    # Errors
    "ErrorCodes",
    "MerkleMineError",
    "MerkleMineException",
    "StructuralException",
    "ClaimValidationException",
    "ExternalException",
    "InvalidAddressException",
    "EmptyTreeException",
    "MalformedProofException",
    "MalformedBatchException",
    "CountMismatchException",
    "RecipientCountMismatchException",
    "InvalidGenesisConfigException",
    "RootMismatchException",
    "ProofNotFoundException",
    "ProofInvalidException",
    "GenerationNotStartedException",
    "InsufficientLedgerBalanceException",
    "AlreadyGeneratedException",
    "OutsideCallerWindowException",
    "LedgerReadException",
    "SubmissionFailedException",
    "SubmissionTimeoutException",
    # Genesis
    "GenesisConfig",
    "Hash32",
    "normalize_hash",
    # Claims
    "ClaimResult",
    "BatchClaimResult",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
