"""
Voting-allies API endpoint.

Response shape:
    {"official_id": 1, "allies": [...], "count": 10, "skipped": 0}

The ranked list lives under `allies` (best first, at most 10 records of
official_id/name/ward/party/alignment/bloc). `skipped` counts officials left
out because their votes could not be loaded.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from . import alignment, stores

router = APIRouter()


def get_vote_store() -> alignment.VoteStore:
    return stores.PostgresVoteStore()


def get_official_store() -> alignment.OfficialStore:
    return stores.PostgresOfficialStore()


def get_bloc_rules() -> alignment.BlocRules:
    return stores.bloc_rules()


@router.get("/officials/{official_id}/voting-allies")
async def voting_allies(
    official_id: int,
    vote_store: alignment.VoteStore = Depends(get_vote_store),
    official_store: alignment.OfficialStore = Depends(get_official_store),
    bloc_rules: alignment.BlocRules = Depends(get_bloc_rules),
) -> dict:
    result = await alignment.voting_allies(
        official_id,
        vote_store=vote_store,
        official_store=official_store,
        bloc_rules=bloc_rules,
    )
    return {
        "official_id": result.official_id,
        "allies": [ally.to_dict() for ally in result.allies],
        "count": len(result.allies),
        "skipped": len(result.skipped),
    }
