"""Payload shaping for the ActiveCampaign v3 API.

Defines:
- CONTACT_PROPERTY_MAP: Maps internal contact attribute names to API keys.
- coerce_contact_input(): Turns a loose mapping into a validated ContactInput.
- contact_id_of(): Extracts the remote id from a contact-like value.
- to_contact_payload(): ContactInput -> {"contact": {...}} for /contact/sync.
- to_field_value_payload(): -> {"fieldValue": {...}} for /fieldValues.
- to_contact_tag_payload(): -> {"contactTag": {...}} for /contactTags.
- resolve_field(): Finds a catalog entry for a field reference.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.activecampaign.errors import NotFoundError, ValidationError
from src.activecampaign.schemas import ContactInput, CustomField


# ── Contact Property Mapping ───────────────────────────────────────────────

CONTACT_PROPERTY_MAP: dict[str, str] = {
    "email": "email",
    "first_name": "firstName",
    "last_name": "lastName",
    "phone": "phone",
}


# ── Input Coercion ─────────────────────────────────────────────────────────


def coerce_contact_input(contact: ContactInput | Mapping[str, Any]) -> ContactInput:
    """Validate a contact given either as a ContactInput or a plain mapping.

    Raises:
        ValidationError: If the email is missing/empty or the shape is wrong.
    """
    if isinstance(contact, ContactInput):
        return contact
    if not isinstance(contact, Mapping):
        raise ValidationError(
            f"Contact must be a mapping or ContactInput, got {type(contact).__name__}"
        )
    try:
        return ContactInput.model_validate(dict(contact))
    except PydanticValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid contact: {problems}") from exc


def contact_id_of(contact: ContactInput | Mapping[str, Any] | str | int) -> str | int:
    """Return the remote id carried by a contact, without requiring an email.

    Raises:
        ValidationError: If no id is present.
    """
    if isinstance(contact, (str, int)) and not isinstance(contact, bool):
        contact_id: Any = contact
    elif isinstance(contact, ContactInput):
        contact_id = contact.id
    elif isinstance(contact, Mapping):
        contact_id = contact.get("id")
    else:
        raise ValidationError(
            f"Contact must be a mapping, ContactInput or id, got {type(contact).__name__}"
        )

    if contact_id is None or contact_id == "":
        raise ValidationError("Contact id is required")
    return contact_id


# ── Payload Builders ───────────────────────────────────────────────────────


def to_contact_payload(contact: ContactInput) -> dict[str, Any]:
    """Build the /contact/sync body. Unset attributes are left out."""
    body: dict[str, Any] = {}
    for attr, api_key in CONTACT_PROPERTY_MAP.items():
        value = getattr(contact, attr)
        if value is not None:
            body[api_key] = value
    return {"contact": body}


def to_field_value_payload(contact_id: str | int, field_id: str | int, value: Any) -> dict[str, Any]:
    """Build the /fieldValues body for one custom field assignment."""
    return {
        "fieldValue": {
            "contact": contact_id,
            "field": field_id,
            "value": value,
        }
    }


def to_contact_tag_payload(contact_id: str | int, tag_id: str | int) -> dict[str, Any]:
    """Build the /contactTags body linking a contact to a tag."""
    return {
        "contactTag": {
            "contact": contact_id,
            "tag": tag_id,
        }
    }


# ── Catalog Resolution ─────────────────────────────────────────────────────


def resolve_field(
    reference: str | int,
    catalog: list[CustomField],
    complete: bool = True,
) -> CustomField:
    """Find the catalog entry a field reference points at.

    Matches on remote id first, then exact title, then personalization tag
    (case-insensitive, surrounding % signs ignored). When ``catalog`` is only
    one page of a larger list (``complete=False``), an unmatched numeric
    reference is taken to be a field id on another page and passed through.

    Raises:
        NotFoundError: If nothing in the catalog matches.
    """
    ref = str(reference)

    for field in catalog:
        if str(field.id) == ref:
            return field

    for field in catalog:
        if field.title == ref:
            return field

    perstag = ref.strip("%").upper()
    for field in catalog:
        if field.perstag and field.perstag.upper() == perstag:
            return field

    if not complete and ref.isdigit():
        return CustomField(id=reference)

    raise NotFoundError("field", ref)
