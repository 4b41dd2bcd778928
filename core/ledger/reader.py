"""
Module 04 - Ledger Reader
Read-only view of the authoritative ledger.

Owner: Protocol/Crypto Engineer
Module ID: M04

The ledger (the deployed Merkle mine contract) is the source of truth for
the genesis parameters, the started flag, generated flags, the current
block and its own token balance. Implementations may hit the network;
the core only ever sees a LedgerSnapshot captured from a reader.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import ValidationError

from core.schemas.errors import InvalidGenesisConfigException
from core.schemas.genesis import GenesisConfig


class LedgerReader(ABC):
    """Accessors for ledger state."""

    @abstractmethod
    def genesis_root(self) -> bytes:
        """Merkle root committed in the ledger."""

    @abstractmethod
    def total_tokens(self) -> int:
        """totalGenesisTokens."""

    @abstractmethod
    def total_recipients(self) -> int:
        """totalGenesisRecipients."""

    @abstractmethod
    def balance_threshold(self) -> int:
        """balanceThreshold."""

    @abstractmethod
    def genesis_block(self) -> int:
        """genesisBlock."""

    @abstractmethod
    def caller_allocation_start_block(self) -> int:
        """callerAllocationStartBlock."""

    @abstractmethod
    def caller_allocation_end_block(self) -> int:
        """callerAllocationEndBlock."""

    @abstractmethod
    def started(self) -> bool:
        """Whether generation has started."""

    @abstractmethod
    def generated(self, address: bytes) -> bool:
        """Whether the allocation of a recipient was already generated."""

    @abstractmethod
    def current_block(self) -> int:
        """Latest block number."""

    @abstractmethod
    def token_balance(self) -> int:
        """Token balance held by the ledger."""

    def pinned(self) -> "LedgerReader":
        """
        Reader whose accessors all observe the same block.

        In-process ledgers are already consistent; network readers return
        a copy bound to the current block number.
        """
        return self

    def genesis_config(self) -> GenesisConfig:
        """
        Read the fixed genesis parameters in one go.

        Raises:
            InvalidGenesisConfigException: If the ledger reports inconsistent parameters
        """
        try:
            return GenesisConfig(
                root=self.genesis_root(),
                total_tokens=self.total_tokens(),
                total_recipients=self.total_recipients(),
                balance_threshold=self.balance_threshold(),
                genesis_block=self.genesis_block(),
                caller_allocation_start_block=self.caller_allocation_start_block(),
                caller_allocation_end_block=self.caller_allocation_end_block(),
            )
        except ValidationError as e:
            raise InvalidGenesisConfigException(
                f"Ledger genesis parameters are invalid ({e.error_count()} errors)",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e


__all__ = ["LedgerReader"]
