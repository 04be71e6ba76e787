"""Unit tests for payload shaping, input coercion and catalog resolution."""

from __future__ import annotations

import pytest

from src.activecampaign.errors import NotFoundError, ValidationError
from src.activecampaign.normalizers import (
    CONTACT_PROPERTY_MAP,
    coerce_contact_input,
    contact_id_of,
    resolve_field,
    to_contact_payload,
    to_contact_tag_payload,
    to_field_value_payload,
)
from src.activecampaign.schemas import ContactInput, CustomField


class TestCoerceContactInput:

    def test_camel_case_mapping(self):
        contact = coerce_contact_input(
            {
                "email": "a@x.com",
                "firstName": "A",
                "lastName": "B",
                "fields": [{"field": "1", "value": "x"}],
                "tags": ["vip"],
            }
        )

        assert contact.first_name == "A"
        assert contact.last_name == "B"
        assert contact.fields[0].field == "1"
        assert contact.tags == ["vip"]

    def test_snake_case_mapping(self):
        contact = coerce_contact_input({"email": "a@x.com", "first_name": "A"})
        assert contact.first_name == "A"

    def test_model_passes_through(self):
        original = ContactInput(email="a@x.com")
        assert coerce_contact_input(original) is original

    def test_missing_email(self):
        with pytest.raises(ValidationError, match="email"):
            coerce_contact_input({"firstName": "A"})

    def test_malformed_fields(self):
        with pytest.raises(ValidationError, match="fields"):
            coerce_contact_input({"email": "a@x.com", "fields": "Company=Acme"})

    def test_numbers_become_strings(self):
        contact = coerce_contact_input(
            {"email": "a@x.com", "phone": 5551234, "firstName": 7, "tags": [101, "vip"]}
        )

        assert contact.phone == "5551234"
        assert contact.first_name == "7"
        assert contact.tags == ["101", "vip"]

    @pytest.mark.parametrize("key", ["fields", "tags"])
    def test_null_collections_are_empty(self, key):
        contact = coerce_contact_input({"email": "a@x.com", key: None})

        assert contact.fields == []
        assert contact.tags == []


class TestContactIdOf:

    @pytest.mark.parametrize(
        "contact, expected",
        [
            ({"id": "42"}, "42"),
            ({"id": 42, "email": "a@x.com"}, 42),
            (ContactInput(id="7", email="a@x.com"), "7"),
            ("9", "9"),
            (9, 9),
        ],
    )
    def test_extracts_id(self, contact, expected):
        assert contact_id_of(contact) == expected

    @pytest.mark.parametrize("contact", [{}, {"id": None}, {"id": ""}, ContactInput(email="a@x.com")])
    def test_missing_id(self, contact):
        with pytest.raises(ValidationError, match="id is required"):
            contact_id_of(contact)

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError):
            contact_id_of(3.5)  # type: ignore[arg-type]


class TestPayloads:

    def test_contact_payload_omits_unset(self):
        payload = to_contact_payload(ContactInput(email="a@x.com", phone="555"))
        assert payload == {"contact": {"email": "a@x.com", "phone": "555"}}

    def test_contact_payload_uses_api_keys(self):
        payload = to_contact_payload(
            ContactInput(email="a@x.com", first_name="A", last_name="B", phone="1")
        )
        assert set(payload["contact"]) == set(CONTACT_PROPERTY_MAP.values())

    def test_contact_payload_excludes_fields_and_tags(self):
        payload = to_contact_payload(
            ContactInput(email="a@x.com", fields=[{"field": "1", "value": "x"}], tags=["vip"])
        )
        assert payload == {"contact": {"email": "a@x.com"}}

    def test_field_value_payload(self):
        assert to_field_value_payload("42", "3", "Acme") == {
            "fieldValue": {"contact": "42", "field": "3", "value": "Acme"}
        }

    def test_contact_tag_payload(self):
        assert to_contact_tag_payload("42", "10") == {
            "contactTag": {"contact": "42", "tag": "10"}
        }


class TestResolveField:

    @pytest.fixture
    def catalog(self):
        return [
            CustomField(id="1", title="Company", perstag="COMPANY"),
            CustomField(id="2", title="1", perstag="ODD_TITLE"),
            CustomField(id="3", title="Plan", perstag="PLAN"),
        ]

    def test_by_id_wins_over_title(self, catalog):
        assert resolve_field("1", catalog).id == "1"

    def test_by_int_id(self, catalog):
        assert resolve_field(3, catalog).id == "3"

    def test_by_title(self, catalog):
        assert resolve_field("Plan", catalog).id == "3"

    def test_by_perstag(self, catalog):
        assert resolve_field("%plan%", catalog).id == "3"
        assert resolve_field("COMPANY", catalog).id == "1"

    def test_unknown(self, catalog):
        with pytest.raises(NotFoundError) as exc_info:
            resolve_field("F1", catalog)

        assert exc_info.value.kind == "field"
        assert exc_info.value.name == "F1"

    def test_numeric_reference_passes_through_partial_catalog(self, catalog):
        field = resolve_field("25", catalog, complete=False)

        assert field.id == "25"

    def test_known_reference_still_resolved_in_partial_catalog(self, catalog):
        assert resolve_field("Plan", catalog, complete=False).id == "3"

    @pytest.mark.parametrize("reference", ["25", "Region", "%REGION%"])
    def test_unknown_in_complete_catalog(self, catalog, reference):
        with pytest.raises(NotFoundError, match=f"field not exist: {reference}"):
            resolve_field(reference, catalog, complete=True)

    def test_unknown_title_in_partial_catalog(self, catalog):
        with pytest.raises(NotFoundError, match="field not exist: Region"):
            resolve_field("Region", catalog, complete=False)
