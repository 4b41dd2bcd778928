"""
Runtime Configuration

Central configuration for ledger access, claim batching and logging.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LedgerConfig:
    """Where the authoritative ledger lives."""
    rpc_url: str = "http://localhost:8545"
    merkle_mine_address: Optional[str] = None
    batch_contract_address: Optional[str] = None
    timeout: float = 30.0


@dataclass
class ClaimConfig:
    """How claims are batched and confirmed."""
    caller_address: Optional[str] = None
    max_batch_size: int = 50
    confirmation_timeout_s: float = 300.0
    poll_interval_s: float = 2.0

    def __post_init__(self):
        if self.max_batch_size <= 0:
            raise ValueError(f"max_batch_size must be positive, got {self.max_batch_size}")


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    claim: ClaimConfig = field(default_factory=ClaimConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - MERKLE_MINE_RPC_URL: JSON-RPC endpoint
        - MERKLE_MINE_ADDRESS: Merkle mine contract address
        - MERKLE_MINE_BATCH_ADDRESS: Batch claim contract address
        - MERKLE_MINE_RPC_TIMEOUT: RPC timeout in seconds
        - MERKLE_MINE_CALLER: Caller account address
        - MERKLE_MINE_MAX_BATCH_SIZE: Recipients per batch claim
        - MERKLE_MINE_CONFIRMATION_TIMEOUT: Seconds to wait for a claim
        - MERKLE_MINE_POLL_INTERVAL: Seconds between confirmation polls
        - MERKLE_MINE_LOG_LEVEL: Logging level name
        - MERKLE_MINE_LOG_FILE: Optional log file
        - MERKLE_MINE_DEBUG: Shortcut for DEBUG logging (true/false)
        """
        overrides: dict[str, Any] = {}

        # Ledger
        if os.getenv("MERKLE_MINE_RPC_URL"):
            overrides.setdefault("ledger", {})["rpc_url"] = os.getenv("MERKLE_MINE_RPC_URL")
        if os.getenv("MERKLE_MINE_ADDRESS"):
            overrides.setdefault("ledger", {})["merkle_mine_address"] = os.getenv("MERKLE_MINE_ADDRESS")
        if os.getenv("MERKLE_MINE_BATCH_ADDRESS"):
            overrides.setdefault("ledger", {})["batch_contract_address"] = os.getenv("MERKLE_MINE_BATCH_ADDRESS")
        if os.getenv("MERKLE_MINE_RPC_TIMEOUT"):
            overrides.setdefault("ledger", {})["timeout"] = float(os.environ["MERKLE_MINE_RPC_TIMEOUT"])

        # Claims
        if os.getenv("MERKLE_MINE_CALLER"):
            overrides.setdefault("claim", {})["caller_address"] = os.getenv("MERKLE_MINE_CALLER")
        if os.getenv("MERKLE_MINE_MAX_BATCH_SIZE"):
            overrides.setdefault("claim", {})["max_batch_size"] = int(os.environ["MERKLE_MINE_MAX_BATCH_SIZE"])
        if os.getenv("MERKLE_MINE_CONFIRMATION_TIMEOUT"):
            overrides.setdefault("claim", {})["confirmation_timeout_s"] = float(
                os.environ["MERKLE_MINE_CONFIRMATION_TIMEOUT"]
            )
        if os.getenv("MERKLE_MINE_POLL_INTERVAL"):
            overrides.setdefault("claim", {})["poll_interval_s"] = float(os.environ["MERKLE_MINE_POLL_INTERVAL"])

        # Logging
        if os.getenv("MERKLE_MINE_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv("MERKLE_MINE_LOG_LEVEL")
        if os.getenv("MERKLE_MINE_LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv("MERKLE_MINE_LOG_FILE")
        if os.getenv("MERKLE_MINE_DEBUG") and _env_bool(os.environ["MERKLE_MINE_DEBUG"]):
            overrides.setdefault("logging", {})["level"] = "DEBUG"

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        ledger_data = data.get("ledger", {})
        claim_data = data.get("claim", {})
        logging_data = data.get("logging", {})

        return cls(
            ledger=LedgerConfig(**ledger_data) if ledger_data else LedgerConfig(),
            claim=ClaimConfig(**claim_data) if claim_data else ClaimConfig(),
            logging=LoggingConfig(**logging_data) if logging_data else LoggingConfig(),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)
        for section, values in overrides.items():
            target = getattr(new_config, section)
            for key, value in values.items():
                setattr(target, key, value)
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "ledger": {
                "rpc_url": self.ledger.rpc_url,
                "merkle_mine_address": self.ledger.merkle_mine_address,
                "batch_contract_address": self.ledger.batch_contract_address,
                "timeout": self.ledger.timeout,
            },
            "claim": {
                "caller_address": self.claim.caller_address,
                "max_batch_size": self.claim.max_batch_size,
                "confirmation_timeout_s": self.claim.confirmation_timeout_s,
                "poll_interval_s": self.claim.poll_interval_s,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": self.extra,
        }

    def configure_logging(self) -> None:
        setup_logging(self.logging.level, self.logging.file)


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure root logging to stderr and an optional file."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
