"""
Officials persistence (raw SQL).

Reads go through the `current_officials` view (one row per person holding a
current term); writes go to the `people` table.
"""

from __future__ import annotations

from typing import Any

from core import db

OFFICIAL_COLUMNS = """
    person_id, full_name, district_number, party_affiliation,
    position_type, email, image_url
"""

PERSON_COLUMNS = """
    id, first_name, last_name, full_name, email, phone, website, image_url
"""

# Columns a client may write through the API.
WRITABLE_PERSON_FIELDS = (
    "first_name",
    "last_name",
    "full_name",
    "email",
    "phone",
    "website",
    "image_url",
)


async def list_officials() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {OFFICIAL_COLUMNS}
        FROM current_officials
        ORDER BY district_number NULLS LAST, full_name
        """
    )


async def get_official(person_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {OFFICIAL_COLUMNS}
        FROM current_officials
        WHERE person_id = $1
        LIMIT 1
        """,
        person_id,
    )


async def list_officials_by_party(party: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {OFFICIAL_COLUMNS}
        FROM current_officials
        WHERE party_affiliation = $1
        ORDER BY district_number NULLS LAST, full_name
        """,
        party,
    )


async def list_officials_by_district(district_number: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {OFFICIAL_COLUMNS}
        FROM current_officials
        WHERE district_number = $1
        ORDER BY full_name
        """,
        district_number,
    )


async def create_person(fields: dict[str, Any]) -> dict[str, Any]:
    columns = [name for name in WRITABLE_PERSON_FIELDS if name in fields]
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
    row = await db.fetch_one(
        f"""
        INSERT INTO people ({", ".join(columns)})
        VALUES ({placeholders})
        RETURNING {PERSON_COLUMNS}
        """,
        *[fields[name] for name in columns],
    )
    if row is None:
        raise db.StoreError("Failed to create person.")
    return row


async def update_person(person_id: int, fields: dict[str, Any]) -> dict[str, Any] | None:
    """
    Update the given columns of one person. Returns None when the person does not exist.
    """
    columns = [name for name in WRITABLE_PERSON_FIELDS if name in fields]
    if not columns:
        return await db.fetch_one(
            f"SELECT {PERSON_COLUMNS} FROM people WHERE id = $1",
            person_id,
        )

    assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(columns, start=2))
    return await db.fetch_one(
        f"""
        UPDATE people
        SET {assignments}
        WHERE id = $1
        RETURNING {PERSON_COLUMNS}
        """,
        person_id,
        *[fields[name] for name in columns],
    )


async def delete_person(person_id: int) -> bool:
    # Terms are removed by ON DELETE CASCADE.
    row = await db.fetch_one(
        """
        DELETE FROM people
        WHERE id = $1
        RETURNING id
        """,
        person_id,
    )
    return row is not None
