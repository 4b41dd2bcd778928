"""
Ledger Module

Read access to the authoritative ledger, claim call encoding, and an
in-process reference ledger.
"""

from .calldata import (
    GENERATE_SIGNATURE,
    MULTI_GENERATE_SIGNATURE,
    ClaimInstruction,
    encode_generate_call,
    encode_multi_generate_call,
    function_selector,
    generate_instruction,
    multi_generate_instruction,
)
from .memory import InMemoryLedger
from .reader import LedgerReader
from .rpc import JsonRpcLedgerReader
from .snapshot import LedgerSnapshot

__all__ = [
    # Reading
    "LedgerReader",
    "LedgerSnapshot",
    "JsonRpcLedgerReader",
    "InMemoryLedger",
    # Calldata
    "GENERATE_SIGNATURE",
    "MULTI_GENERATE_SIGNATURE",
    "ClaimInstruction",
    "function_selector",
    "encode_generate_call",
    "encode_multi_generate_call",
    "generate_instruction",
    "multi_generate_instruction",
]
