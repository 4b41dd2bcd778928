"""
Module 04 - Ledger Snapshot
Ledger state captured at a single point in time.

Owner: Protocol/Crypto Engineer
Module ID: M04

Validation reads only from a snapshot. A snapshot can go stale (another
claim lands first); the ledger then rejects the submission and the caller
re-runs validation against a fresh snapshot.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from core.crypto.hashing import to_hex
from core.ledger.reader import LedgerReader
from core.schemas.addresses import Address, normalize_address
from core.schemas.errors import LedgerReadException
from core.schemas.genesis import GenesisConfig


logger = logging.getLogger(__name__)


class LedgerSnapshot(BaseModel):
    """
    Consistent read of ledger state for one validation or claim attempt.

    `generated` holds the flags of the recipients requested at capture time.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    genesis: GenesisConfig
    started: bool
    current_block: int = Field(..., ge=0)
    ledger_balance: int = Field(..., ge=0, description="Token balance of the ledger")
    generated: dict[Address, bool] = Field(default_factory=dict)

    @classmethod
    def capture(cls, reader: LedgerReader, recipients: Iterable[Any] = ()) -> "LedgerSnapshot":
        """
        Read everything validation needs from a ledger reader.

        Args:
            reader: Ledger accessor
            recipients: Recipients whose generated flags are needed

        Returns:
            LedgerSnapshot
        """
        reader = reader.pinned()
        genesis = reader.genesis_config()
        flags: dict[bytes, bool] = {}
        for recipient in recipients:
            address = normalize_address(recipient)
            if address not in flags:
                flags[address] = reader.generated(address)

        snapshot = cls(
            genesis=genesis,
            started=reader.started(),
            current_block=reader.current_block(),
            ledger_balance=reader.token_balance(),
            generated=flags,
        )
        logger.debug(
            f"Captured ledger snapshot at block {snapshot.current_block} "
            f"(root {genesis.hex_root}, {len(flags)} generated flags)"
        )
        return snapshot

    @property
    def root(self) -> bytes:
        return self.genesis.root

    @property
    def total_recipients(self) -> int:
        return self.genesis.total_recipients

    @property
    def tokens_per_allocation(self) -> int:
        return self.genesis.tokens_per_allocation

    @property
    def caller_allocation_start_block(self) -> int:
        return self.genesis.caller_allocation_start_block

    @property
    def caller_allocation_end_block(self) -> int:
        return self.genesis.caller_allocation_end_block

    def is_generated(self, address: Any) -> bool:
        """
        Generated flag of a recipient as of capture time.

        Raises:
            LedgerReadException: If the flag was not captured
        """
        key = normalize_address(address)
        try:
            return self.generated[key]
        except KeyError:
            raise LedgerReadException(
                f"Generated flag for {to_hex(key)} was not captured in the snapshot",
                method="generated",
            ) from None


__all__ = ["LedgerSnapshot"]
