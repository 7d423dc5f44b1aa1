"""
Metrics API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from . import service

router = APIRouter()


def _parse_ward(ward: str) -> int:
    try:
        return int(ward)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ward number")


@router.get("/officials/{official_id}/metrics")
async def get_official_metrics(official_id: int) -> dict:
    return await service.official_metrics(official_id)


@router.get("/wards/{ward}/metrics")
async def get_ward_metrics(ward: str) -> dict:
    return await service.ward_metrics(_parse_ward(ward))


@router.get("/wards/{ward}/statistics")
async def get_ward_statistics(ward: str) -> dict:
    return await service.ward_statistics(_parse_ward(ward))
