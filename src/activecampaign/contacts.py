"""Contact sync orchestration against the ActiveCampaign v3 API.

ContactClient.sync composes three remote resources into one logical
"sync a contact" operation:

1. Upsert the base contact (keyed by email) and pick up its remote id.
2. If field values were requested: fetch the field catalog once, resolve
   every reference, then write each value.
3. If tags were requested: fetch the tag catalog once, resolve every name,
   then link each tag to the contact.

A phase only completes once every one of its items is acknowledged, and the
first failure stops the run. Remote writes are not rolled back: errors leaving
sync carry a SyncProgress describing what was already applied.

Writes within a phase run one at a time unless ``concurrency`` > 1, in which
case up to that many are in flight and the phase waits for all of them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar

import structlog

from src.activecampaign.client import ActiveCampaignClient, ClientT
from src.activecampaign.config import Settings, get_settings
from src.activecampaign.errors import ActiveCampaignError, RemoteApplicationError, ValidationError
from src.activecampaign.fields import FieldClient
from src.activecampaign.normalizers import (
    coerce_contact_input,
    contact_id_of,
    resolve_field,
    to_contact_payload,
)
from src.activecampaign.schemas import (
    ContactInput,
    ContactTag,
    FieldValueInput,
    SyncedContact,
    SyncedFieldValue,
    SyncPhase,
    SyncProgress,
)
from src.activecampaign.tags import TagClient
from src.activecampaign.transport import Transport

logger = structlog.get_logger(__name__)

CONTACT_SYNC_PATH = "/api/3/contact/sync"
CONTACTS_PATH = "/api/3/contacts"

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class ContactClient(ActiveCampaignClient):
    """Syncs and deletes contacts, including their custom fields and tags.

    Args:
        url: ActiveCampaign account base URL.
        token: API token.
        http: Transport shared with the field and tag clients.
        concurrency: Max field value / tag writes in flight. 1 keeps them
            strictly sequential, in input order.
    """

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        http: Transport | None = None,
        concurrency: int = 1,
    ) -> None:
        super().__init__(url=url, token=token, http=http)
        if concurrency < 1:
            raise ValidationError("concurrency must be at least 1")
        self._concurrency = concurrency
        self._fields = FieldClient(url=self.url, token=self._token, http=self.http)
        self._tags = TagClient(url=self.url, token=self._token, http=self.http)

    @classmethod
    def from_settings(
        cls: type[ClientT],
        settings: Settings | None = None,
        http: Transport | None = None,
        **kwargs: Any,
    ) -> ClientT:
        settings = settings or get_settings()
        kwargs.setdefault("concurrency", settings.SYNC_CONCURRENCY)
        return super().from_settings(settings=settings, http=http, **kwargs)

    async def sync(self, contact: ContactInput | Mapping[str, Any]) -> SyncedContact:
        """Upsert a contact, then its field values, then its tags.

        Args:
            contact: ContactInput or mapping with ``email`` (required),
                ``firstName``/``first_name``, ``lastName``/``last_name``,
                ``phone``, ``fields`` ([{field, value}]) and ``tags`` ([name]).

        Returns:
            The contact with its remote id and every acknowledged field value
            and tag link.

        Raises:
            ValidationError: Input is malformed; nothing was sent.
            RemoteApplicationError: The API rejected a request.
            NotFoundError: A field or tag reference is not in the catalog.
            TransportError: A request did not complete.

            Errors from any phase carry ``progress`` with what was applied.
        """
        contact_input = coerce_contact_input(contact)
        progress = SyncProgress()

        try:
            synced = await self._upsert_contact(contact_input)
            progress.contact_id = synced.id
            progress.completed_phases.append(SyncPhase.CONTACT)

            if contact_input.fields:
                synced.field_values = await self._sync_field_values(
                    synced.id, contact_input.fields, progress
                )
                progress.completed_phases.append(SyncPhase.FIELD_VALUES)

            if contact_input.tags:
                synced.tags = await self._sync_tags(synced.id, contact_input.tags, progress)
                progress.completed_phases.append(SyncPhase.TAGS)

        except ActiveCampaignError as exc:
            exc.progress = progress
            logger.error(
                "activecampaign.sync_failed",
                contact_id=progress.contact_id,
                completed_phases=[phase.value for phase in progress.completed_phases],
                error=str(exc),
            )
            raise

        logger.info(
            "activecampaign.contact_synced",
            contact_id=synced.id,
            field_values=len(synced.field_values),
            tags=len(synced.tags),
        )
        return synced

    async def delete(self, contact: ContactInput | Mapping[str, Any] | str | int) -> None:
        """Delete a contact by its remote id.

        Raises:
            ValidationError: The contact carries no id; nothing was sent.
            RemoteApplicationError: The API answered with a non-empty body.
            TransportError: The request did not complete.
        """
        contact_id = contact_id_of(contact)
        path = f"{CONTACTS_PATH}/{contact_id}"

        body = await self._delete(path)
        if body not in ("", None, {}):
            logger.error("activecampaign.delete_failed", contact_id=contact_id)
            raise RemoteApplicationError(body, path)

        logger.info("activecampaign.contact_deleted", contact_id=contact_id)

    # ── Phases ──────────────────────────────────────────────────────────────

    async def _upsert_contact(self, contact: ContactInput) -> SyncedContact:
        body = await self._post(CONTACT_SYNC_PATH, to_contact_payload(contact))
        remote = self._expect_entity(CONTACT_SYNC_PATH, body, "contact")

        logger.debug("activecampaign.contact_upserted", contact_id=remote["id"])
        return SyncedContact(
            id=remote["id"],
            email=contact.email,
            first_name=contact.first_name,
            last_name=contact.last_name,
            phone=contact.phone,
        )

    async def _sync_field_values(
        self,
        contact_id: str | int,
        field_values: list[FieldValueInput],
        progress: SyncProgress,
    ) -> list[SyncedFieldValue]:
        catalog = await self._fields.catalog()
        resolved = [
            (resolve_field(item.field, catalog.fields, catalog.is_complete).id, item.value)
            for item in field_values
        ]

        async def write(pair: tuple[str | int, Any]) -> SyncedFieldValue:
            field_id, value = pair
            synced = await self._fields.upsert_value(contact_id, field_id, value)
            progress.field_values.append(synced)
            return synced

        return await self._run_all(resolved, write)

    async def _sync_tags(
        self,
        contact_id: str | int,
        tag_names: list[str],
        progress: SyncProgress,
    ) -> list[ContactTag]:
        catalog = await self._tags.list()
        tag_ids = [self._tags.find(catalog, name).id for name in tag_names]

        async def link(tag_id: str | int) -> ContactTag:
            association = await self._tags.add_to_contact(contact_id, tag_id)
            progress.tags.append(association)
            return association

        return await self._run_all(tag_ids, link)

    async def _run_all(
        self,
        items: Sequence[ItemT],
        operation: Callable[[ItemT], Awaitable[ResultT]],
    ) -> list[ResultT]:
        """Apply ``operation`` to every item, returning results in input order.

        Sequential when concurrency is 1. Otherwise a semaphore bounds the
        writes in flight; the first failure cancels the rest and propagates.
        """
        if self._concurrency == 1:
            results: list[ResultT] = []
            for item in items:
                results.append(await operation(item))
            return results

        semaphore = asyncio.Semaphore(self._concurrency)

        async def bounded(item: ItemT) -> ResultT:
            async with semaphore:
                return await operation(item)

        tasks = [asyncio.ensure_future(bounded(item)) for item in items]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
