"""
Officials business logic.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from . import repository, schemas


async def get_official(person_id: int) -> dict:
    row = await repository.get_official(person_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Official not found")
    return row


async def create_official(payload: schemas.OfficialCreateRequest) -> dict:
    fields = payload.model_dump(exclude_none=True)
    fields["full_name"] = fields["full_name"].strip()
    if not fields["full_name"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="full_name is required.")
    return await repository.create_person(fields)


async def update_official(person_id: int, payload: schemas.OfficialUpdateRequest) -> dict:
    fields = payload.model_dump(exclude_unset=True)
    if "full_name" in fields and not (fields["full_name"] or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="full_name cannot be empty.")

    row = await repository.update_person(person_id, fields)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Official not found")
    return row


async def delete_official(person_id: int) -> None:
    deleted = await repository.delete_person(person_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Official not found")
