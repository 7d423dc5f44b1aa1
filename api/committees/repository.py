"""
Committee persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core import db


async def list_committees() -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, name, description, created_at
        FROM committees
        ORDER BY name
        """
    )


async def list_memberships_for_official(official_id: int) -> list[dict[str, Any]]:
    rows = await db.fetch_all(
        """
        SELECT
          oc.id,
          oc.official_id,
          oc.committee_id,
          oc.role,
          oc.created_at,
          c.name AS committee_name,
          c.description AS committee_description
        FROM official_committees oc
        JOIN committees c ON c.id = oc.committee_id
        WHERE oc.official_id = $1
        ORDER BY c.name
        """,
        official_id,
    )
    # Nest the committee under each membership.
    return [
        {
            "id": row["id"],
            "official_id": row["official_id"],
            "committee_id": row["committee_id"],
            "role": row["role"],
            "created_at": row["created_at"],
            "committee": {
                "id": row["committee_id"],
                "name": row["committee_name"],
                "description": row["committee_description"],
            },
        }
        for row in rows
    ]
