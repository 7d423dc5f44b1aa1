"""
Postgres-backed stores for the alignment calculation.
"""

from __future__ import annotations

from core import settings
from officials import repository as officials_repository
from votes import repository as votes_repository

from .alignment import DEFAULT_BLOC, DEFAULT_BLOC_LABELS, BlocRules, Official, VoteRecord


class PostgresVoteStore:
    async def votes_by_actor(self, actor_id: int) -> list[VoteRecord]:
        rows = await votes_repository.list_vote_values_for_person(actor_id)
        return [VoteRecord(matter_id=str(row["matter_id"]), vote_value=str(row["vote_value"])) for row in rows]


class PostgresOfficialStore:
    async def all_officials(self) -> list[Official]:
        rows = await officials_repository.list_officials()
        return [
            Official(
                id=int(row["person_id"]),
                name=str(row.get("full_name") or ""),
                district=int(row["district_number"]) if row.get("district_number") is not None else None,
                party=str(row.get("party_affiliation") or ""),
            )
            for row in rows
        ]


def bloc_rules() -> BlocRules:
    return BlocRules(
        labels=settings.env_json_dict("ALLIES_BLOC_LABELS", DEFAULT_BLOC_LABELS),
        default=settings.env_str("ALLIES_DEFAULT_BLOC", DEFAULT_BLOC),
    )
