"""
HTTP Client

Thin requests-based client used for JSON-RPC ledger reads.
The session is created when the client is constructed, or injected.
"""

from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass
from typing import Any, Optional

import requests


@dataclass
class HttpResponse:
    """
    Response from an HTTP request.
    """
    status_code: int
    content: bytes
    url: str = ""

    @property
    def ok(self) -> bool:
        """Check if request was successful (2xx status)."""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parse response as JSON."""
        return jsonlib.loads(self.content)

    def raise_for_status(self) -> None:
        """Raise exception if status is not 2xx."""
        if not self.ok:
            raise HttpError(
                f"HTTP {self.status_code}",
                status_code=self.status_code,
                response=self,
            )


class HttpError(Exception):
    """HTTP request error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[HttpResponse] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class HttpClient:
    """
    HTTP client over a requests session.

    Usage:
        client = HttpClient(timeout=10.0)

        response = client.post("https://rpc.example.com", json=payload)
        if response.ok:
            data = response.json()
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            timeout: Default request timeout in seconds
            session: Pre-built session (tests inject a stub here)
        """
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    def request(
        self,
        method: str,
        url: str,
        *,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """
        Make an HTTP request.

        Raises:
            HttpError: On transport failure
        """
        try:
            response = self._session.request(
                method=method,
                url=url,
                json=json,
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            raise HttpError(str(e)) from e

        return HttpResponse(
            status_code=response.status_code,
            content=response.content,
            url=str(response.url),
        )

    def post(
        self,
        url: str,
        *,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """Make a POST request."""
        return self.request("POST", url, json=json, timeout=timeout)
