"""
Officials API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from . import repository, schemas, service

router = APIRouter()


@router.get("/officials")
async def list_officials() -> list[dict]:
    return await repository.list_officials()


@router.post("/officials", status_code=status.HTTP_201_CREATED)
async def create_official(request: schemas.OfficialCreateRequest) -> dict:
    return await service.create_official(request)


@router.get("/officials/party/{party}")
async def list_officials_by_party(party: str) -> list[dict]:
    return await repository.list_officials_by_party(party)


@router.get("/officials/ward/{ward}")
async def list_officials_by_ward(ward: int) -> list[dict]:
    return await repository.list_officials_by_district(ward)


@router.get("/officials/{official_id}")
async def get_official(official_id: int) -> dict:
    return await service.get_official(official_id)


@router.put("/officials/{official_id}")
async def update_official(official_id: int, request: schemas.OfficialUpdateRequest) -> dict:
    return await service.update_official(official_id, request)


@router.delete("/officials/{official_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_official(official_id: int) -> Response:
    await service.delete_official(official_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
