"""Test fixtures for the ActiveCampaign clients.

Provides:
- RecordingTransport: in-memory Transport that serves queued responses per
  (method, path) and records every call
- Clients wired to that transport against a fake account URL
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

import pytest

from src.activecampaign.contacts import ContactClient
from src.activecampaign.fields import FieldClient
from src.activecampaign.tags import TagClient
from src.activecampaign.transport import Transport, TransportResponse

BASE_URL = "https://acme.api-us1.com"
TOKEN = "test-token"


class RecordingTransport(Transport):
    """Serves canned responses and records (method, path, headers, data) calls.

    Responses queued with ``respond`` are consumed in order; the last one
    keeps being served once the queue is down to a single entry. Unrouted
    calls fail the test.
    """

    def __init__(self, base_url: str = BASE_URL) -> None:
        self._base_url = base_url
        self._routes: dict[tuple[str, str], list[TransportResponse]] = defaultdict(list)
        self.calls: list[dict[str, Any]] = []

    def respond(
        self,
        method: str,
        path: str,
        body: Any = None,
        error: str | None = None,
        status_code: int = 200,
    ) -> RecordingTransport:
        response = TransportResponse(
            status_code=None if error else status_code,
            body=body,
            error=error,
        )
        self._routes[(method, path)].append(response)
        return self

    def calls_to(self, method: str, path: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    async def get(self, url: str, headers: dict[str, str]) -> TransportResponse:
        return self._handle("GET", url, headers, None)

    async def post(self, url: str, headers: dict[str, str], data: Any) -> TransportResponse:
        return self._handle("POST", url, headers, data)

    async def delete(self, url: str, headers: dict[str, str]) -> TransportResponse:
        return self._handle("DELETE", url, headers, None)

    def _handle(self, method: str, url: str, headers: dict[str, str], data: Any) -> TransportResponse:
        assert url.startswith(self._base_url), f"unexpected host in {url}"
        path = url[len(self._base_url):]
        self.calls.append({"method": method, "path": path, "headers": headers, "data": data})

        queue = self._routes.get((method, path))
        assert queue, f"no response routed for {method} {path}"
        return queue.pop(0) if len(queue) > 1 else queue[0]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def contact_client(transport) -> ContactClient:
    return ContactClient(url=BASE_URL, token=TOKEN, http=transport)


@pytest.fixture
def field_client(transport) -> FieldClient:
    return FieldClient(url=BASE_URL, token=TOKEN, http=transport)


@pytest.fixture
def tag_client(transport) -> TagClient:
    return TagClient(url=BASE_URL, token=TOKEN, http=transport)


@pytest.fixture
def field_catalog() -> dict:
    """GET /api/3/fields body with two custom fields."""
    return {
        "fields": [
            {"id": "1", "title": "Company", "perstag": "COMPANY", "type": "text"},
            {"id": "2", "title": "Plan", "perstag": "PLAN", "type": "dropdown"},
        ],
        "meta": {"total": "2"},
    }


@pytest.fixture
def tag_catalog() -> dict:
    """GET /api/3/tags body with two tags."""
    return {
        "tags": [
            {"id": "10", "tag": "customer", "tagType": "contact", "description": ""},
            {"id": "11", "tag": "vip", "tagType": "contact", "description": "Top accounts"},
        ],
        "meta": {"total": "2"},
    }
