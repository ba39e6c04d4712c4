from __future__ import annotations

from pydantic import BaseModel, Field


class SchoolFilterParams(BaseModel):
    """Query parameters for listing schools."""

    city: str | None = None
    search: str | None = None
    limit: int | None = Field(default=None, ge=1, le=500)
    offset: int | None = Field(default=None, ge=0)
