"""Error taxonomy for the ActiveCampaign clients.

Every failure surfaced by a client derives from ActiveCampaignError:
- ValidationError: bad construction parameters or input, raised before any request
- RemoteApplicationError: the request went through but the body reports an error
- NotFoundError: a referenced tag or field is missing from the remote catalog
- TransportError: network-level failure reported by the transport

Errors raised out of ContactClient.sync carry ``progress`` describing the
phases and items the remote service acknowledged before the failure.
Nothing is rolled back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.activecampaign.schemas import SyncProgress


class ActiveCampaignError(Exception):
    """Base class for every error raised by the ActiveCampaign clients.

    Attributes:
        progress: Partial sync progress at the time of failure, if the error
            escaped from ContactClient.sync. None otherwise.
    """

    def __init__(self, message: str) -> None:
        self.progress: SyncProgress | None = None
        super().__init__(message)


class ValidationError(ActiveCampaignError):
    """Raised for missing construction parameters or malformed input."""


class RemoteApplicationError(ActiveCampaignError):
    """Raised when the API answers with an application-level error body.

    Attributes:
        payload: The response body, verbatim.
        path: API path of the failed request.
    """

    def __init__(self, payload: Any, path: str) -> None:
        self.payload = payload
        self.path = path
        super().__init__(f"ActiveCampaign rejected {path}: {_describe(payload)}")


class NotFoundError(ActiveCampaignError):
    """Raised when a tag or field name has no match in the remote catalog.

    Attributes:
        kind: "tag" or "field".
        name: The unresolved reference.
    """

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} not exist: {name}")


class TransportError(ActiveCampaignError):
    """Raised when the transport reports a network failure.

    Attributes:
        path: API path of the failed request.
        reason: Error text reported by the transport.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Transport failure on {path}: {reason}")


def _describe(payload: Any) -> str:
    """Render an error body for exception messages.

    ActiveCampaign reports ``{"errors": [{"title": ..., "detail": ...}]}``;
    titles are joined when present, anything else is shown as-is.
    """
    if isinstance(payload, dict):
        errors = payload.get("errors")
        if isinstance(errors, list):
            titles = [
                str(err.get("title") or err.get("detail"))
                for err in errors
                if isinstance(err, dict) and (err.get("title") or err.get("detail"))
            ]
            if titles:
                return "; ".join(titles)
    if payload in (None, ""):
        return "empty response"
    return repr(payload)
