"""Pydantic schemas for the recommendation endpoint.

The request model accepts the payload keys used by the web form and the
chat front-end (``type`` for phase, ``type2`` for day/boarding) and
normalises every field before it reaches the matching engine.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from src.services.filters import SearchPreferences
from src.services.matching import MatchResult
from src.services.promotion import PinnedSchoolSummary


class RecommendRequest(BaseModel):
    """Search preferences submitted by a parent."""

    city: str | None = None  # absent -> default city; blank -> no city constraint
    learning_environment: str | None = Field(
        default=None, validation_alias=AliasChoices("learningEnvironment", "learning_environment")
    )
    curriculum: list[str] = Field(default_factory=list)
    phase: list[str] = Field(default_factory=list, validation_alias=AliasChoices("type", "phase", "schoolPhase"))
    boarding_type: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("type2", "boardingType", "boarding_type")
    )
    facilities: list[str] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=1, le=100)

    @field_validator("city", "learning_environment", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        """Trim strings; blank values mean "not given"."""
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("curriculum", "phase", "boarding_type", "facilities", mode="before")
    @classmethod
    def _clean_list(cls, value: Any) -> list[str]:
        """Accept a list or a comma-separated string; drop blank entries."""
        if value is None:
            return []
        if isinstance(value, str):
            items = value.split(",")
        elif isinstance(value, (list, tuple, set)):
            items = list(value)
        else:
            items = [value]
        return [str(item).strip() for item in items if item is not None and str(item).strip()]

    def to_preferences(self, default_city: str) -> SearchPreferences:
        """Build engine preferences; *default_city* applies only when ``city`` was not sent."""
        return SearchPreferences(
            city=self.city if "city" in self.model_fields_set else default_city,
            learning_environment=self.learning_environment,
            curriculum=list(self.curriculum),
            phase=list(self.phase),
            boarding_type=list(self.boarding_type),
            facilities=list(self.facilities),
        )


class MatchResultResponse(BaseModel):
    """One ranked school with its match score and explanation."""

    id: int | str
    slug: str
    name: str
    city: str
    curriculum: list[str] = []
    phase: list[str] = []
    boarding_type: list[str] = []
    learning_environment: str | None = None
    website: str | None = None
    facebook_url: str | None = None
    logo: str | None = None
    hero_image: str | None = None
    match_score: float
    reasons: list[str] = []
    reason: str = ""
    is_pinned: bool = False

    @classmethod
    def from_result(cls, result: MatchResult) -> MatchResultResponse:
        school = result.school
        return cls(
            id=school.id,
            slug=school.slug,
            name=school.name,
            city=school.city,
            curriculum=list(school.curricula),
            phase=list(school.phase),
            boarding_type=list(school.boarding_type),
            learning_environment=school.learning_environment,
            website=school.website,
            facebook_url=school.facebook_url,
            logo=school.logo,
            hero_image=school.hero_image,
            match_score=result.match_score,
            reasons=list(result.reasons),
            reason=result.reason,
            is_pinned=result.is_pinned,
        )


class PinnedSchoolResponse(BaseModel):
    """The promoted school with its registration and document links."""

    id: int | str
    slug: str
    name: str
    city: str
    register_url: str
    hero_image: str | None = None
    document_urls: list[str] = []
    image_urls: list[str] = []

    @classmethod
    def from_summary(cls, summary: PinnedSchoolSummary) -> PinnedSchoolResponse:
        return cls(
            id=summary.id,
            slug=summary.slug,
            name=summary.name,
            city=summary.city,
            register_url=summary.register_url,
            hero_image=summary.hero_image,
            document_urls=list(summary.document_urls),
            image_urls=list(summary.image_urls),
        )


class RecommendResponse(BaseModel):
    recommendations: list[MatchResultResponse]
    pinned_school: PinnedSchoolResponse | None = None
