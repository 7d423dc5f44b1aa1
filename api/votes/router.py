"""
Voting-record API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from . import repository, schemas

router = APIRouter()


@router.get("/officials/{official_id}/voting-records")
async def list_voting_records(official_id: int) -> list[dict]:
    return await repository.list_votes_for_person(official_id)


@router.get("/officials/{official_id}/recent-votes")
async def list_recent_votes(official_id: int) -> list[dict]:
    return await repository.list_recent_votes_for_person(official_id)


@router.post("/voting-records", status_code=status.HTTP_201_CREATED)
async def create_voting_record(request: schemas.VoteCreateRequest) -> dict:
    return await repository.create_vote(request.model_dump())
