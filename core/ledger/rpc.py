"""
Module 04 - JSON-RPC Ledger Reader
LedgerReader over an Ethereum JSON-RPC endpoint.

Owner: Protocol/Crypto Engineer
Module ID: M04

Reads the Merkle mine's public getters with eth_call and the chain head
with eth_blockNumber. All failures (transport, HTTP status, RPC error,
undecodable result) surface as LedgerReadException.
"""
from __future__ import annotations

import itertools
import logging
from typing import Any, Optional, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from core.crypto.hashing import from_hex, to_hex
from core.http.client import HttpClient, HttpError
from core.ledger.reader import LedgerReader
from core.schemas.addresses import checksum, normalize_address
from core.schemas.errors import LedgerReadException


logger = logging.getLogger(__name__)


class JsonRpcLedgerReader(LedgerReader):
    """
    Ledger reader backed by eth_call.

    Example:
        >>> reader = JsonRpcLedgerReader("http://localhost:8545", merkle_mine_address)
        >>> snapshot = LedgerSnapshot.capture(reader, [recipient])
    """

    def __init__(
        self,
        rpc_url: str,
        merkle_mine_address: Any,
        *,
        http: Optional[HttpClient] = None,
        token_address: Any = None,
        block_tag: str = "latest",
    ) -> None:
        self.rpc_url = rpc_url
        self.merkle_mine_address = normalize_address(merkle_mine_address)
        self.token_address = None if token_address is None else normalize_address(token_address)
        self.block_tag = block_tag
        self._http = http if http is not None else HttpClient()
        self._ids = itertools.count(1)

    @classmethod
    def from_config(cls, config: Any, session: Any = None) -> "JsonRpcLedgerReader":
        """
        Build from a RuntimeConfig.

        Raises:
            ValueError: If no Merkle mine address is configured
        """
        if not config.ledger.merkle_mine_address:
            raise ValueError("ledger.merkle_mine_address is not configured")
        return cls(
            config.ledger.rpc_url,
            config.ledger.merkle_mine_address,
            http=HttpClient(timeout=config.ledger.timeout, session=session),
        )

    def pinned(self) -> "JsonRpcLedgerReader":
        block = self.current_block()
        return JsonRpcLedgerReader(
            self.rpc_url,
            self.merkle_mine_address,
            http=self._http,
            token_address=self.token_address,
            block_tag=hex(block),
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = self._http.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except HttpError as e:
            raise LedgerReadException(f"{method} request failed: {e}", method=method) from e
        except ValueError as e:
            raise LedgerReadException(f"{method} returned invalid JSON: {e}", method=method) from e

        if not isinstance(body, dict):
            raise LedgerReadException(f"{method} returned a non-object response", method=method)
        if body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise LedgerReadException(
                f"{method} returned error: {message}",
                method=method,
                details={"error": error},
            )
        if "result" not in body:
            raise LedgerReadException(f"{method} response has no result", method=method)
        return body["result"]

    def _call(
        self,
        to: bytes,
        signature: str,
        output_types: Sequence[str],
        input_types: Sequence[str] = (),
        args: Sequence[Any] = (),
    ) -> tuple:
        data = function_signature_to_4byte_selector(signature)
        if input_types:
            data += encode(list(input_types), list(args))

        result = self._rpc(
            "eth_call",
            [{"to": checksum(to), "data": to_hex(data)}, self.block_tag],
        )
        try:
            return decode(list(output_types), from_hex(result))
        except (DecodingError, ValueError, TypeError) as e:
            raise LedgerReadException(
                f"Could not decode {signature} result {result!r}: {e}",
                method=signature,
            ) from e

    def _mine(self, signature: str, output_type: str, *input_args: tuple[str, Any]) -> Any:
        input_types = [t for t, _ in input_args]
        args = [a for _, a in input_args]
        return self._call(self.merkle_mine_address, signature, [output_type], input_types, args)[0]

    # ------------------------------------------------------------------
    # LedgerReader
    # ------------------------------------------------------------------

    def genesis_root(self) -> bytes:
        return self._mine("genesisRoot()", "bytes32")

    def total_tokens(self) -> int:
        return self._mine("totalGenesisTokens()", "uint256")

    def total_recipients(self) -> int:
        return self._mine("totalGenesisRecipients()", "uint256")

    def balance_threshold(self) -> int:
        return self._mine("balanceThreshold()", "uint256")

    def genesis_block(self) -> int:
        return self._mine("genesisBlock()", "uint256")

    def caller_allocation_start_block(self) -> int:
        return self._mine("callerAllocationStartBlock()", "uint256")

    def caller_allocation_end_block(self) -> int:
        return self._mine("callerAllocationEndBlock()", "uint256")

    def started(self) -> bool:
        return self._mine("started()", "bool")

    def generated(self, address: Any) -> bool:
        return self._mine("generated(address)", "bool", ("address", normalize_address(address)))

    def token(self) -> bytes:
        """Address of the token distributed by the Merkle mine."""
        return normalize_address(self._mine("token()", "address"))

    def current_block(self) -> int:
        if self.block_tag.startswith("0x"):
            return int(self.block_tag, 16)
        result = self._rpc("eth_blockNumber", [])
        try:
            return int(result, 16)
        except (TypeError, ValueError) as e:
            raise LedgerReadException(
                f"eth_blockNumber returned {result!r}",
                method="eth_blockNumber",
            ) from e

    def token_balance(self) -> int:
        token = self.token_address if self.token_address is not None else self.token()
        (balance,) = self._call(
            token,
            "balanceOf(address)",
            ["uint256"],
            ["address"],
            [self.merkle_mine_address],
        )
        return balance


__all__ = ["JsonRpcLedgerReader"]
