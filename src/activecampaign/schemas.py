"""Pydantic schemas for ActiveCampaign contact sync.

Defines all structured types for a sync run:
- Enums: SyncPhase
- Inputs: FieldValueInput, ContactInput (accept snake_case names or the API's camelCase)
- Remote catalog entries: CustomField, FieldCatalog, TagDefinition
- Remote acknowledgements: ContactTag, SyncedFieldValue
- Results: SyncedContact, SyncProgress
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Enums ───────────────────────────────────────────────────────────────────


class SyncPhase(str, Enum):
    """Phases of ContactClient.sync, in execution order."""

    CONTACT = "contact"
    FIELD_VALUES = "field_values"
    TAGS = "tags"


# ── Inputs ──────────────────────────────────────────────────────────────────


class FieldValueInput(BaseModel):
    """One custom field assignment requested for a contact.

    ``field`` references the remote field by id, title or personalization tag.
    """

    field: str | int
    value: Any = None


class ContactInput(BaseModel):
    """Logical contact record handed to ContactClient.sync.

    Numbers are accepted where strings are expected and a null
    ``fields``/``tags`` means no items.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str | int | None = None
    email: str = Field(min_length=1)
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    phone: str | None = None
    fields: list[FieldValueInput] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @field_validator("fields", "tags", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


# ── Remote Entities ─────────────────────────────────────────────────────────


class CustomField(BaseModel):
    """Custom field definition from GET /api/3/fields."""

    model_config = ConfigDict(extra="allow")

    id: str | int
    title: str = ""
    perstag: str | None = None
    type: str | None = None


class FieldCatalog(BaseModel):
    """One GET /api/3/fields page plus the total the API reports."""

    fields: list[CustomField] = Field(default_factory=list)
    total: int | None = None

    @property
    def is_complete(self) -> bool:
        """False when the API reports more fields than this page holds."""
        return self.total is None or self.total <= len(self.fields)


class TagDefinition(BaseModel):
    """Tag definition from GET /api/3/tags."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | int
    tag: str
    tag_type: str | None = Field(default=None, alias="tagType")
    description: str | None = None


class ContactTag(BaseModel):
    """Contact to tag association returned by POST /api/3/contactTags."""

    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    contact: str | int
    tag: str | int


class SyncedFieldValue(BaseModel):
    """Field value acknowledged by POST /api/3/fieldValues."""

    id: str | int
    field: str | int
    value: Any = None


# ── Results ─────────────────────────────────────────────────────────────────


class SyncedContact(BaseModel):
    """Contact after a sync run, carrying its remote id and acknowledged items."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | int
    email: str
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    phone: str | None = None
    field_values: list[SyncedFieldValue] = Field(default_factory=list, alias="fieldValues")
    tags: list[ContactTag] = Field(default_factory=list)


class SyncProgress(BaseModel):
    """What a sync run got acknowledged so far.

    Attached to errors escaping ContactClient.sync so callers can see which
    remote mutations already happened.
    """

    contact_id: str | int | None = None
    completed_phases: list[SyncPhase] = Field(default_factory=list)
    field_values: list[SyncedFieldValue] = Field(default_factory=list)
    tags: list[ContactTag] = Field(default_factory=list)

    def is_complete(self, phase: SyncPhase) -> bool:
        """Return True if the given phase finished."""
        return phase in self.completed_phases
