"""
Sync persistence (raw SQL upserts keyed on Legistar ids).
"""

from __future__ import annotations

from typing import Any

from core import db

from . import rows

# table -> conflict key column
UPSERT_KEYS = {
    "bodies": "body_id",
    "matters": "matter_id",
    "votes": "vote_id",
    "events": "event_id",
    "event_items": "event_item_id",
}

JSONB_COLUMNS = {"matter_sponsors", "matter_attachments", "event_items", "external_ids"}


def build_upsert(table: str, columns: list[str]) -> str:
    key = UPSERT_KEYS[table]
    values = ", ".join(
        f"${i}::jsonb" if name in JSONB_COLUMNS else f"${i}"
        for i, name in enumerate(columns, start=1)
    )
    updates = ", ".join(f"{name} = EXCLUDED.{name}" for name in columns if name != key)
    return f"""
        INSERT INTO {table} ({", ".join(columns)})
        VALUES ({values})
        ON CONFLICT ({key}) DO UPDATE
        SET {updates}
    """


def _args(row: dict[str, Any], columns: list[str]) -> list[Any]:
    return [db.json_arg(row[name]) if name in JSONB_COLUMNS else row[name] for name in columns]


async def upsert_row(table: str, row: dict[str, Any]) -> None:
    columns = list(row)
    await db.execute(build_upsert(table, columns), *_args(row, columns))


async def find_jurisdiction_id(name: str, jurisdiction_type: str) -> int | None:
    row = await db.fetch_one(
        """
        SELECT id
        FROM jurisdictions
        WHERE name = $1
          AND jurisdiction_type = $2
        LIMIT 1
        """,
        name,
        jurisdiction_type,
    )
    return int(row["id"]) if row is not None else None


async def find_position_id(jurisdiction_id: int, *, position_type: str, district_number: int | None) -> int | None:
    row = await db.fetch_one(
        """
        SELECT id
        FROM positions
        WHERE jurisdiction_id = $1
          AND position_type = $2
          AND district_number IS NOT DISTINCT FROM $3
        LIMIT 1
        """,
        jurisdiction_id,
        position_type,
        district_number,
    )
    return int(row["id"]) if row is not None else None


async def find_person_by_legistar_id(legistar_id: int) -> int | None:
    row = await db.fetch_one(
        """
        SELECT id
        FROM people
        WHERE external_ids->>'legistar_id' = $1
        LIMIT 1
        """,
        str(legistar_id),
    )
    return int(row["id"]) if row is not None else None


async def person_ids_by_legistar_id() -> dict[int, int]:
    """
    {Legistar person id: people.id} for every person synced from Legistar.
    """
    found = await db.fetch_all(
        """
        SELECT id, external_ids->>'legistar_id' AS legistar_id
        FROM people
        WHERE external_ids->>'legistar_id' IS NOT NULL
        """
    )
    mapping: dict[int, int] = {}
    for row in found:
        legistar_id = rows.legistar_int(row["legistar_id"])
        if legistar_id is not None:
            mapping[legistar_id] = int(row["id"])
    return mapping


async def insert_person(fields: dict[str, Any]) -> int:
    columns = list(fields)
    values = ", ".join(
        f"${i}::jsonb" if name in JSONB_COLUMNS else f"${i}"
        for i, name in enumerate(columns, start=1)
    )
    row = await db.fetch_one(
        f"""
        INSERT INTO people ({", ".join(columns)})
        VALUES ({values})
        RETURNING id
        """,
        *_args(fields, columns),
    )
    if row is None:
        raise db.StoreError("Failed to create person.")
    return int(row["id"])


async def update_person(person_id: int, fields: dict[str, Any]) -> None:
    columns = list(fields)
    assignments = ", ".join(
        f"{name} = ${i}::jsonb" if name in JSONB_COLUMNS else f"{name} = ${i}"
        for i, name in enumerate(columns, start=2)
    )
    await db.execute(
        f"UPDATE people SET {assignments} WHERE id = $1",
        person_id,
        *_args(fields, columns),
    )


async def find_term_by_external_id(external_id: int) -> int | None:
    row = await db.fetch_one(
        "SELECT id FROM terms WHERE external_id = $1 LIMIT 1",
        external_id,
    )
    return int(row["id"]) if row is not None else None


async def insert_term(fields: dict[str, Any]) -> None:
    columns = list(fields)
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
    await db.execute(
        f"INSERT INTO terms ({', '.join(columns)}) VALUES ({placeholders})",
        *[fields[name] for name in columns],
    )


async def update_term(term_id: int, fields: dict[str, Any]) -> None:
    columns = list(fields)
    assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(columns, start=2))
    await db.execute(
        f"UPDATE terms SET {assignments} WHERE id = $1",
        term_id,
        *[fields[name] for name in columns],
    )
