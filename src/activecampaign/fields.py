"""Custom field resource client."""

from __future__ import annotations

from typing import Any

import structlog

from src.activecampaign.client import ActiveCampaignClient
from src.activecampaign.normalizers import to_field_value_payload
from src.activecampaign.schemas import CustomField, FieldCatalog, SyncedFieldValue

logger = structlog.get_logger(__name__)

FIELDS_PATH = "/api/3/fields"
FIELD_VALUES_PATH = "/api/3/fieldValues"


class FieldClient(ActiveCampaignClient):
    """Reads the custom field catalog and writes field values."""

    async def list(self) -> list[CustomField]:
        """Fetch every custom field defined on the account.

        Returns:
            The field catalog, in the order the API returned it.

        Raises:
            TransportError: If the request did not complete.
            RemoteApplicationError: If the API answered with an error body.
        """
        return (await self.catalog()).fields

    async def catalog(self) -> FieldCatalog:
        """Fetch the field list together with the total the API reports.

        ActiveCampaign pages list endpoints; ``meta.total`` tells whether the
        returned page holds every field.
        """
        body = await self._get(FIELDS_PATH)
        fields = self._expect_models(FIELDS_PATH, body, "fields", CustomField)
        catalog = FieldCatalog(fields=fields, total=_meta_total(body))
        logger.debug(
            "activecampaign.fields_listed",
            count=len(fields),
            total=catalog.total,
        )
        return catalog

    async def upsert_value(
        self,
        contact_id: str | int,
        field_id: str | int,
        value: Any,
    ) -> SyncedFieldValue:
        """Create or update one field value for a contact.

        Returns:
            The acknowledged field value with its remote id.
        """
        body = await self._post(
            FIELD_VALUES_PATH,
            to_field_value_payload(contact_id, field_id, value),
        )
        field_value = self._expect_entity(FIELD_VALUES_PATH, body, "fieldValue")
        synced = self._validate(
            FIELD_VALUES_PATH,
            body,
            SyncedFieldValue,
            {
                "id": field_value["id"],
                "field": field_value.get("field", field_id),
                "value": field_value.get("value", value),
            },
        )
        logger.debug(
            "activecampaign.field_value_upserted",
            contact_id=contact_id,
            field_id=synced.field,
            field_value_id=synced.id,
        )
        return synced


def _meta_total(body: dict[str, Any]) -> int | None:
    """Read ``meta.total`` (sent as a string), None when absent or unparseable."""
    meta = body.get("meta")
    if not isinstance(meta, dict):
        return None
    try:
        return int(meta["total"])
    except (KeyError, TypeError, ValueError):
        return None
