"""
Pydantic schemas for officials endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OfficialCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(..., min_length=1, max_length=200)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    website: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=500)


class OfficialUpdateRequest(BaseModel):
    """
    Partial update: only fields present in the request body are written.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, min_length=1, max_length=200)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    website: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=500)
