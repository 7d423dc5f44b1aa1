"""
Votes persistence (raw SQL).

`votes.person_id` is `people.id` (the sync resolves Legistar person ids).
"""

from __future__ import annotations

from typing import Any

from core import db

VOTE_COLUMNS = """
    vote_id, matter_id, person_id, person_name, vote_value, vote_date, vote_event_id, created_at
"""

RECENT_VOTES_LIMIT = 10


async def list_votes_for_person(person_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {VOTE_COLUMNS}
        FROM votes
        WHERE person_id = $1
        ORDER BY vote_date NULLS LAST, vote_id
        """,
        person_id,
    )


async def list_vote_values_for_person(person_id: int) -> list[dict[str, Any]]:
    """
    Only (matter_id, vote_value) pairs with a recorded value, in insertion order.
    """
    return await db.fetch_all(
        """
        SELECT matter_id, vote_value
        FROM votes
        WHERE person_id = $1
          AND vote_value IS NOT NULL
          AND matter_id IS NOT NULL
        ORDER BY created_at, vote_id
        """,
        person_id,
    )


async def list_recent_votes_for_person(person_id: int, *, limit: int = RECENT_VOTES_LIMIT) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT
          v.vote_id,
          v.matter_id,
          v.person_id,
          v.vote_value,
          v.vote_date,
          v.created_at,
          m.matter_name,
          m.matter_type_name AS matter_type
        FROM votes v
        LEFT JOIN matters m ON m.matter_id = v.matter_id
        WHERE v.person_id = $1
        ORDER BY v.created_at DESC
        LIMIT $2
        """,
        person_id,
        limit,
    )


async def create_vote(fields: dict[str, Any]) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO votes (vote_id, matter_id, person_id, person_name, vote_value, vote_date, vote_event_id)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING {VOTE_COLUMNS}
        """,
        fields["vote_id"],
        fields["matter_id"],
        fields["person_id"],
        fields.get("person_name"),
        fields["vote_value"],
        fields.get("vote_date"),
        fields.get("vote_event_id"),
    )
    if row is None:
        raise db.StoreError("Failed to insert vote.")
    return row
