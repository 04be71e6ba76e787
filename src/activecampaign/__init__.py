"""ActiveCampaign contact sync client.

Provides async clients over the ActiveCampaign v3 REST API:
- ContactClient: Sync a contact with its custom field values and tags; delete contacts
- FieldClient: List the custom field catalog, write field values
- TagClient: List the tag catalog, assign tags to contacts

All clients take an account ``url`` and API ``token`` and share an injectable
Transport (HttpxTransport by default).
"""

from src.activecampaign.contacts import ContactClient
from src.activecampaign.errors import (
    ActiveCampaignError,
    NotFoundError,
    RemoteApplicationError,
    TransportError,
    ValidationError,
)
from src.activecampaign.fields import FieldClient
from src.activecampaign.schemas import (
    ContactInput,
    FieldValueInput,
    SyncedContact,
    SyncPhase,
    SyncProgress,
)
from src.activecampaign.tags import TagClient
from src.activecampaign.transport import HttpxTransport, Transport, TransportResponse

__all__ = [
    "ContactClient",
    "FieldClient",
    "TagClient",
    "ContactInput",
    "FieldValueInput",
    "SyncedContact",
    "SyncPhase",
    "SyncProgress",
    "ActiveCampaignError",
    "ValidationError",
    "RemoteApplicationError",
    "NotFoundError",
    "TransportError",
    "Transport",
    "HttpxTransport",
    "TransportResponse",
]
