"""Pydantic schemas for the cleanup endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CleanupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deleted_count: int = Field(..., serialization_alias="deletedCount")
    errors: list[str] = []
