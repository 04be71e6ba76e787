"""Tag resource client.

Tags are only ever looked up, never created: a name missing from the
account's catalog is reported as NotFoundError.
"""

from __future__ import annotations

import structlog

from src.activecampaign.client import ActiveCampaignClient
from src.activecampaign.errors import NotFoundError, RemoteApplicationError
from src.activecampaign.normalizers import to_contact_tag_payload
from src.activecampaign.schemas import ContactTag, TagDefinition

logger = structlog.get_logger(__name__)

TAGS_PATH = "/api/3/tags"
CONTACT_TAGS_PATH = "/api/3/contactTags"


class TagClient(ActiveCampaignClient):
    """Reads the tag catalog and links tags to contacts."""

    async def list(self) -> list[TagDefinition]:
        """Fetch every tag defined on the account.

        Raises:
            TransportError: If the request did not complete.
            RemoteApplicationError: If the API answered with an error body.
        """
        body = await self._get(TAGS_PATH)
        tags = self._expect_models(TAGS_PATH, body, "tags", TagDefinition)
        logger.debug("activecampaign.tags_listed", count=len(tags))
        return tags

    @staticmethod
    def find(tags: list[TagDefinition], name: str) -> TagDefinition:
        """Return the tag whose name matches exactly.

        Raises:
            NotFoundError: If no tag has that name.
        """
        for tag in tags:
            if tag.tag == name:
                return tag
        raise NotFoundError("tag", name)

    async def add_to_contact(self, contact_id: str | int, tag_id: str | int) -> ContactTag:
        """Create the association between a contact and an existing tag."""
        body = await self._post(CONTACT_TAGS_PATH, to_contact_tag_payload(contact_id, tag_id))
        link = self._expect(CONTACT_TAGS_PATH, body, "contactTag")
        if not isinstance(link, dict):
            raise RemoteApplicationError(body, CONTACT_TAGS_PATH)
        association = self._validate(
            CONTACT_TAGS_PATH,
            body,
            ContactTag,
            {**link, "contact": link.get("contact", contact_id), "tag": link.get("tag", tag_id)},
        )
        logger.debug(
            "activecampaign.tag_added",
            contact_id=contact_id,
            tag_id=tag_id,
            contact_tag_id=association.id,
        )
        return association

    async def assign_tag(self, contact_id: str | int, tag_name: str) -> None:
        """Tag a contact by tag name, using a freshly fetched catalog.

        Raises:
            NotFoundError: If the tag does not exist (message "tag not exist: <name>").
        """
        tag = self.find(await self.list(), tag_name)
        await self.add_to_contact(contact_id, tag.id)
        logger.info("activecampaign.tag_assigned", contact_id=contact_id, tag_id=tag.id)
