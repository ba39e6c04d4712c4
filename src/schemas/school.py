from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict


class SchoolResponse(BaseModel):
    """Summary representation of a school for list views."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    city: str
    phase: list[str] = []
    boarding_type: list[str] = []
    curricula: list[str] = []
    gender: str | None = None
    learning_environment: str | None = None
    website: str | None = None
    facebook_url: str | None = None
    logo: str | None = None
    hero_image: str | None = None


class SchoolDetailResponse(SchoolResponse):
    """Full school detail including facilities and contact data."""

    address: str | None = None
    contact: str | None = None
    facilities: dict[str, bool] = {}
    last_verified_at: datetime.datetime | None = None
