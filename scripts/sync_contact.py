#!/usr/bin/env python3
"""CLI script to sync, tag or delete ActiveCampaign contacts.

Usage:
    uv run python scripts/sync_contact.py sync --email jane@acme.com --first-name Jane --field Company=Acme --tag customer
    uv run python scripts/sync_contact.py assign-tag --contact-id 42 --tag vip
    uv run python scripts/sync_contact.py delete --id 42
    uv run python scripts/sync_contact.py fields
    uv run python scripts/sync_contact.py tags

Reads ACTIVECAMPAIGN_URL and ACTIVECAMPAIGN_API_TOKEN from environment or .env file.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.activecampaign
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


def parse_field(raw: str) -> dict[str, str]:
    """Parse a REF=VALUE argument into a field value mapping."""
    ref, sep, value = raw.partition("=")
    if not sep or not ref:
        raise argparse.ArgumentTypeError(f"expected REF=VALUE, got {raw!r}")
    return {"field": ref, "value": value}


async def run(args: argparse.Namespace) -> int:
    """Execute the selected subcommand. Returns the process exit code."""
    from src.activecampaign import ActiveCampaignError, ContactClient, FieldClient, TagClient
    from src.activecampaign.observability import configure_structlog

    configure_structlog()

    try:
        if args.command == "sync":
            client = ContactClient.from_settings(
                **({"concurrency": args.concurrency} if args.concurrency is not None else {})
            )
            contact = {
                "email": args.email,
                "firstName": args.first_name,
                "lastName": args.last_name,
                "phone": args.phone,
                "fields": args.field,
                "tags": args.tag,
            }
            synced = await client.sync(contact)
            print(f"Contact synced: id={synced.id}")
            for value in synced.field_values:
                print(f"  Field {value.field}: {value.value!r} (fieldValue {value.id})")
            for link in synced.tags:
                print(f"  Tag {link.tag} (contactTag {link.id})")

        elif args.command == "assign-tag":
            await TagClient.from_settings().assign_tag(args.contact_id, args.tag)
            print(f"Tag {args.tag!r} assigned to contact {args.contact_id}")

        elif args.command == "delete":
            await ContactClient.from_settings().delete(args.id)
            print(f"Contact {args.id} deleted")

        elif args.command == "fields":
            for field in await FieldClient.from_settings().list():
                print(f"{field.id}\t{field.perstag or ''}\t{field.title}")

        elif args.command == "tags":
            for tag in await TagClient.from_settings().list():
                print(f"{tag.id}\t{tag.tag}")

    except ActiveCampaignError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if exc.progress is not None:
            phases = ", ".join(phase.value for phase in exc.progress.completed_phases) or "none"
            print(f"  Contact id:       {exc.progress.contact_id}", file=sys.stderr)
            print(f"  Completed phases: {phases}", file=sys.stderr)
            print(f"  Field values set: {len(exc.progress.field_values)}", file=sys.stderr)
            print(f"  Tags linked:      {len(exc.progress.tags)}", file=sys.stderr)
        return 1

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync contacts with ActiveCampaign")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Upsert a contact with field values and tags")
    sync.add_argument("--email", required=True, help="Contact email (upsert key)")
    sync.add_argument("--first-name", default=None)
    sync.add_argument("--last-name", default=None)
    sync.add_argument("--phone", default=None)
    sync.add_argument(
        "--field",
        action="append",
        default=[],
        type=parse_field,
        help="Custom field as REF=VALUE; REF is a field id, title or perstag (repeatable)",
    )
    sync.add_argument("--tag", action="append", default=[], help="Existing tag name (repeatable)")
    sync.add_argument("--concurrency", type=int, default=None, help="Writes in flight per phase")

    assign = subparsers.add_parser("assign-tag", help="Assign an existing tag to a contact")
    assign.add_argument("--contact-id", required=True)
    assign.add_argument("--tag", required=True)

    delete = subparsers.add_parser("delete", help="Delete a contact by id")
    delete.add_argument("--id", required=True)

    subparsers.add_parser("fields", help="List custom fields")
    subparsers.add_parser("tags", help="List tags")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
