"""HTTP transport abstraction and the default httpx implementation.

The clients never touch httpx directly: they hand a URL, headers and an
optional JSON body to a Transport and get a TransportResponse envelope back.
Network failures are reported in the envelope's ``error`` field rather than
raised, so the clients decide how to surface them. HTTP error statuses are
not raised either; ActiveCampaign describes those in the body.

Any object implementing Transport can be injected into the clients; tests
use an in-memory one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class TransportResponse(BaseModel):
    """Envelope returned by every transport call.

    ``body`` is the decoded JSON document, the raw text when the response is
    not JSON, or ``""`` for an empty response. ``error`` is set only when the
    request never produced a response.
    """

    status_code: int | None = None
    body: Any = None
    error: str | None = None


class Transport(ABC):
    """Abstract interface for the HTTP calls the clients need."""

    @abstractmethod
    async def get(self, url: str, headers: dict[str, str]) -> TransportResponse:
        """Issue a GET request."""
        ...

    @abstractmethod
    async def post(self, url: str, headers: dict[str, str], data: Any) -> TransportResponse:
        """Issue a POST request with a JSON body."""
        ...

    @abstractmethod
    async def delete(self, url: str, headers: dict[str, str]) -> TransportResponse:
        """Issue a DELETE request."""
        ...


class HttpxTransport(Transport):
    """Transport backed by httpx.AsyncClient.

    A short-lived client is opened per request unless a long-lived one is
    injected, in which case the caller owns its lifecycle.

    Args:
        timeout: Per-request timeout in seconds.
        client: Optional pre-built httpx.AsyncClient to reuse.
    """

    def __init__(self, timeout: float = 30.0, client: httpx.AsyncClient | None = None) -> None:
        self._timeout = timeout
        self._shared_client = client

    async def get(self, url: str, headers: dict[str, str]) -> TransportResponse:
        return await self._send("GET", url, headers)

    async def post(self, url: str, headers: dict[str, str], data: Any) -> TransportResponse:
        return await self._send("POST", url, headers, data)

    async def delete(self, url: str, headers: dict[str, str]) -> TransportResponse:
        return await self._send("DELETE", url, headers)

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: Any = None,
    ) -> TransportResponse:
        try:
            if self._shared_client is not None:
                response = await self._dispatch(self._shared_client, method, url, headers, data)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._dispatch(client, method, url, headers, data)
        except httpx.RequestError as exc:
            logger.warning(
                "transport.request_failed",
                method=method,
                url=url,
                error=str(exc) or type(exc).__name__,
            )
            return TransportResponse(error=str(exc) or type(exc).__name__)

        return TransportResponse(
            status_code=response.status_code,
            body=_decode_body(response),
        )

    @staticmethod
    async def _dispatch(
        client: httpx.AsyncClient,
        method: str,
        url: str,
        headers: dict[str, str],
        data: Any,
    ) -> httpx.Response:
        if method == "GET":
            return await client.get(url, headers=headers)
        if method == "POST":
            return await client.post(url, headers=headers, json=data)
        return await client.delete(url, headers=headers)


def _decode_body(response: httpx.Response) -> Any:
    """Decode JSON when possible, fall back to text, empty content to ""."""
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text
