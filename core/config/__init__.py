"""
Runtime Configuration Module

Provides configuration loading and logging setup.
"""

from .runtime import ClaimConfig, LedgerConfig, LoggingConfig, RuntimeConfig, setup_logging

__all__ = [
    "RuntimeConfig",
    "LedgerConfig",
    "ClaimConfig",
    "LoggingConfig",
    "setup_logging",
]
