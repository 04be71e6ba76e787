"""Shared plumbing for the ActiveCampaign resource clients.

ActiveCampaignClient validates construction parameters, builds the
``Api-Token`` header, dispatches requests through the injected Transport and
maps response envelopes onto the error taxonomy in errors.py.
"""

from __future__ import annotations

from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.activecampaign.config import Settings, get_settings
from src.activecampaign.errors import RemoteApplicationError, TransportError, ValidationError
from src.activecampaign.transport import HttpxTransport, Transport, TransportResponse

logger = structlog.get_logger(__name__)

ClientT = TypeVar("ClientT", bound="ActiveCampaignClient")
ModelT = TypeVar("ModelT", bound=BaseModel)


class ActiveCampaignClient:
    """Base client holding the account URL, API token and transport.

    Args:
        url: ActiveCampaign account base URL (e.g. https://acme.api-us1.com).
        token: API token sent as the Api-Token header.
        http: Transport to use. Defaults to HttpxTransport.
    """

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        http: Transport | None = None,
    ) -> None:
        if not url:
            raise ValidationError(f"{type(self).__name__} expects parameter url")
        if not token:
            raise ValidationError(f"{type(self).__name__} expects parameter token")

        self.url = url.rstrip("/")
        self._token = token
        self.http = http if http is not None else HttpxTransport()

    @classmethod
    def from_settings(
        cls: type[ClientT],
        settings: Settings | None = None,
        http: Transport | None = None,
        **kwargs: Any,
    ) -> ClientT:
        """Build a client from ACTIVECAMPAIGN_* settings."""
        settings = settings or get_settings()
        if http is None:
            http = HttpxTransport(timeout=settings.ACTIVECAMPAIGN_TIMEOUT)
        return cls(
            url=settings.ACTIVECAMPAIGN_URL,
            token=settings.ACTIVECAMPAIGN_API_TOKEN,
            http=http,
            **kwargs,
        )

    @property
    def headers(self) -> dict[str, str]:
        return {"Api-Token": self._token}

    async def _get(self, path: str) -> Any:
        response = await self.http.get(self.url + path, self.headers)
        return self._unwrap(path, response)

    async def _post(self, path: str, data: Any) -> Any:
        response = await self.http.post(self.url + path, self.headers, data)
        return self._unwrap(path, response)

    async def _delete(self, path: str) -> Any:
        response = await self.http.delete(self.url + path, self.headers)
        return self._unwrap(path, response)

    @staticmethod
    def _unwrap(path: str, response: TransportResponse) -> Any:
        """Return the body, raising TransportError if the request never completed."""
        if response.error is not None:
            raise TransportError(path, response.error)
        return response.body

    @staticmethod
    def _expect(path: str, body: Any, key: str) -> Any:
        """Return ``body[key]``, raising RemoteApplicationError on error bodies.

        A body is an error when it is not a JSON object, carries an ``errors``
        member, or lacks the expected envelope key.
        """
        if not isinstance(body, dict) or "errors" in body or key not in body:
            raise RemoteApplicationError(body, path)
        return body[key]

    @classmethod
    def _expect_entity(cls, path: str, body: Any, key: str) -> dict[str, Any]:
        """Like _expect, but the envelope must hold an object with an ``id``."""
        entity = cls._expect(path, body, key)
        if not isinstance(entity, dict) or entity.get("id") is None:
            raise RemoteApplicationError(body, path)
        return entity

    @classmethod
    def _expect_models(cls, path: str, body: Any, key: str, model: type[ModelT]) -> list[ModelT]:
        """Parse ``body[key]`` as a list of ``model``.

        A missing list or an entry the model rejects makes the whole body a
        RemoteApplicationError.
        """
        items = cls._expect(path, body, key)
        if not isinstance(items, list):
            raise RemoteApplicationError(body, path)
        return [cls._validate(path, body, model, item) for item in items]

    @staticmethod
    def _validate(path: str, body: Any, model: type[ModelT], data: Any) -> ModelT:
        """Validate ``data`` as ``model``, reporting failures against ``body``."""
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise RemoteApplicationError(body, path) from exc
