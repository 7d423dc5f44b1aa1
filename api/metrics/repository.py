"""
Metrics persistence (raw SQL).

`person_metrics` is written by the `sync.metrics` command and read by the API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from core import db

METRIC_COLUMNS = (
    "bills_introduced_total",
    "bills_introduced_current_term",
    "bills_passed_total",
    "bills_passed_current_term",
    "total_votes_cast",
    "votes_yea",
    "votes_nay",
    "votes_present",
    "votes_absent",
    "voting_participation_rate",
    "committee_attendance_rate",
    "transparency_score",
)


async def get_person_metrics(person_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT person_id, {", ".join(METRIC_COLUMNS)}, last_calculated_at
        FROM person_metrics
        WHERE person_id = $1
        """,
        person_id,
    )


async def get_ward_metrics(district_number: int) -> dict[str, Any] | None:
    row = await db.fetch_one(
        f"""
        SELECT
          co.person_id,
          co.full_name,
          co.district_number,
          co.party_affiliation,
          {", ".join(f"pm.{name}" for name in METRIC_COLUMNS)},
          pm.last_calculated_at
        FROM current_officials co
        LEFT JOIN person_metrics pm ON pm.person_id = co.person_id
        WHERE co.district_number = $1
        ORDER BY co.full_name
        LIMIT 1
        """,
        district_number,
    )
    if row is None:
        return None

    official = {k: row[k] for k in ("person_id", "full_name", "district_number", "party_affiliation")}
    metrics = None
    if row.get("last_calculated_at") is not None:
        metrics = {name: row[name] for name in METRIC_COLUMNS}
        metrics["last_calculated_at"] = row["last_calculated_at"]
    return {**official, "person_metrics": metrics}


async def vote_value_counts() -> list[dict[str, Any]]:
    """
    [(person_id, vote_value, n), ...] across all stored votes.
    """
    return await db.fetch_all(
        """
        SELECT person_id, vote_value, count(*) AS n
        FROM votes
        WHERE person_id IS NOT NULL
        GROUP BY person_id, vote_value
        """
    )


async def vote_event_counts() -> list[dict[str, Any]]:
    """
    Distinct vote events per person, for attendance.
    """
    return await db.fetch_all(
        """
        SELECT person_id, count(DISTINCT vote_event_id) AS events_attended
        FROM votes
        WHERE person_id IS NOT NULL
          AND vote_event_id IS NOT NULL
          AND coalesce(lower(vote_value), '') NOT IN ('absent', 'excused')
        GROUP BY person_id
        """
    )


async def total_vote_events() -> int:
    row = await db.fetch_one(
        """
        SELECT count(DISTINCT vote_event_id) AS n
        FROM votes
        WHERE vote_event_id IS NOT NULL
        """
    )
    return int((row or {}).get("n") or 0)


async def list_matter_sponsorships() -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT matter_id, matter_sponsors, matter_intro_date, matter_passed_date
        FROM matters
        WHERE matter_sponsors IS NOT NULL
        """
    )


async def upsert_person_metrics(person_id: int, metrics: dict[str, Any], *, calculated_at: datetime) -> None:
    values = [metrics[name] for name in METRIC_COLUMNS]
    placeholders = ", ".join(f"${i}" for i in range(2, len(METRIC_COLUMNS) + 2))
    updates = ", ".join(f"{name} = EXCLUDED.{name}" for name in METRIC_COLUMNS)
    await db.execute(
        f"""
        INSERT INTO person_metrics (person_id, {", ".join(METRIC_COLUMNS)}, last_calculated_at)
        VALUES ($1, {placeholders}, ${len(METRIC_COLUMNS) + 2})
        ON CONFLICT (person_id) DO UPDATE
        SET {updates},
            last_calculated_at = EXCLUDED.last_calculated_at
        """,
        person_id,
        *values,
        calculated_at,
    )
