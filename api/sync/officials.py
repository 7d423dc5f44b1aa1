"""
Sync current council officials from Legistar office records.

Positions are matched by jurisdiction + position type + district; people by
`external_ids->>'legistar_id'`; terms by the office record id.

Usage (from `api/`):
    python -m sync.officials --jurisdiction Chicago
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from core import db, logs
from core.legistar import LegistarClient, LegistarError

from . import repository, rows

logger = logging.getLogger(__name__)

PERSON_PAGE_URL = "https://{client}.legistar.com/people/{person_id}"


@dataclass
class SyncStats:
    synced: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0


def person_fields(record: dict[str, Any], person: dict[str, Any] | None, *, client: str) -> dict[str, Any]:
    legistar_id = record.get("OfficeRecordPersonId")
    fields: dict[str, Any] = {
        "external_ids": {
            "legistar_id": legistar_id,
            "legistar_guid": (person or {}).get("PersonGuid") or "",
        },
        "first_name": record.get("OfficeRecordFirstName"),
        "last_name": record.get("OfficeRecordLastName"),
        "full_name": record.get("OfficeRecordFullName"),
        "email": record.get("OfficeRecordEmail"),
        "image_url": "",
    }
    if person is not None:
        fields["image_url"] = PERSON_PAGE_URL.format(client=client, person_id=person.get("PersonId"))
        fields["phone"] = person.get("PersonPhone")
        fields["website"] = person.get("PersonWWW")
        fields["headshot_last_updated"] = datetime.now(timezone.utc)
    return fields


def term_fields(record: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {"start_date": rows.parse_api_day(record.get("OfficeRecordStartDate"))}
    end_date = rows.parse_api_day(record.get("OfficeRecordEndDate"))
    if end_date is not None:
        fields["end_date"] = end_date
    return fields


async def sync_record(
    record: dict[str, Any],
    *,
    jurisdiction_id: int,
    persons: dict[int, dict[str, Any]],
    client: str,
    stats: SyncStats,
) -> None:
    ward = rows.extract_ward(record)
    kind = rows.position_type(record, ward)
    name = record.get("OfficeRecordFullName")

    position_id = await repository.find_position_id(
        jurisdiction_id,
        position_type=kind,
        district_number=ward if ward > 0 else None,
    )
    if position_id is None:
        logger.warning("position_not_found name=%s type=%s ward=%s", name, kind, ward)
        stats.skipped += 1
        return

    legistar_id = int(record["OfficeRecordPersonId"])
    fields = person_fields(record, persons.get(legistar_id), client=client)
    person_id = await repository.find_person_by_legistar_id(legistar_id)
    if person_id is None:
        person_id = await repository.insert_person(fields)
        logger.info("person_created name=%s person_id=%s", name, person_id)
        stats.created += 1
    else:
        await repository.update_person(person_id, fields)
        logger.info("person_updated name=%s person_id=%s", name, person_id)
        stats.updated += 1

    record_id = int(record["OfficeRecordId"])
    term = {"person_id": person_id, **term_fields(record)}
    term_id = await repository.find_term_by_external_id(record_id)
    if term_id is None:
        await repository.insert_term(
            {
                "position_id": position_id,
                "external_id": record_id,
                "external_guid": record.get("OfficeRecordGuid"),
                **term,
            }
        )
    else:
        await repository.update_term(term_id, term)
    stats.synced += 1


async def run(*, jurisdiction: str = "Chicago", client: str | None = None) -> SyncStats:
    jurisdiction_id = await repository.find_jurisdiction_id(jurisdiction, "city")
    if jurisdiction_id is None:
        raise db.StoreError(f"{jurisdiction} jurisdiction not found. Run the migrations first.")

    async with LegistarClient(client) as api:
        records = await api.office_records()
        persons = {int(p["PersonId"]): p for p in await api.persons() if p.get("PersonId") is not None}
        client_name = api.client

    now = datetime.now(timezone.utc)
    current = [r for r in records if rows.is_current_council_record(r, now=now)]
    logger.info("office_records count=%s current=%s persons=%s", len(records), len(current), len(persons))

    stats = SyncStats()
    for record in current:
        try:
            await sync_record(
                record,
                jurisdiction_id=jurisdiction_id,
                persons=persons,
                client=client_name,
                stats=stats,
            )
        except db.StoreError as exc:
            logger.warning("official_sync_failed name=%s error=%s", record.get("OfficeRecordFullName"), exc)
            stats.skipped += 1
    return stats


async def _main(args: argparse.Namespace) -> SyncStats:
    await db.init_pool()
    try:
        return await run(jurisdiction=args.jurisdiction, client=args.client)
    finally:
        await db.close_pool()


def main(argv: list[str] | None = None) -> int:
    logs.configure_logging()
    parser = argparse.ArgumentParser(description="Sync current council officials from Legistar office records.")
    parser.add_argument("--jurisdiction", default="Chicago", help="Jurisdiction name in the jurisdictions table")
    parser.add_argument("--client", default=None, help="Legistar client name (default: $LEGISTAR_CLIENT or chicago)")
    args = parser.parse_args(argv)

    try:
        stats = asyncio.run(_main(args))
    except (LegistarError, db.StoreError) as exc:
        logger.error("officials_sync_failed error=%s", exc)
        return 1

    logger.info(
        "officials_sync_complete synced=%s created=%s updated=%s skipped=%s",
        stats.synced,
        stats.created,
        stats.updated,
        stats.skipped,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
