"""
Committee API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import repository

router = APIRouter()


@router.get("/committees")
async def list_committees() -> list[dict]:
    return await repository.list_committees()


@router.get("/officials/{official_id}/committees")
async def list_official_committees(official_id: int) -> list[dict]:
    return await repository.list_memberships_for_official(official_id)
