"""
Pydantic schemas for voting-record endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class VoteCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vote_id: str = Field(..., min_length=1, max_length=64)
    matter_id: str = Field(..., min_length=1, max_length=64)
    person_id: int = Field(..., ge=1)
    person_name: str | None = Field(default=None, max_length=200)
    # Open set of tokens ("Yea", "Nay", "Present", "Abstain", ...).
    vote_value: str = Field(..., min_length=1, max_length=50)
    vote_date: datetime | None = None
    vote_event_id: int | None = None
