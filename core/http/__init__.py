"""
HTTP Client Module

requests-based HTTP client for JSON-RPC ledger reads.
"""

from .client import HttpClient, HttpError, HttpResponse

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
]
