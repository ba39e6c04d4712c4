from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from src.config import Settings, get_settings
from src.db.base import SchoolRepository
from src.db.factory import get_school_repository
from src.schemas.recommend import (
    MatchResultResponse,
    PinnedSchoolResponse,
    RecommendRequest,
    RecommendResponse,
)
from src.services.promotion import build_pinned_summary
from src.services.recommendation import recommend_from_repository

router = APIRouter(tags=["recommend"])


@router.post("/api/recommend", response_model=RecommendResponse)
async def recommend_schools(
    request: RecommendRequest,
    repo: Annotated[SchoolRepository, Depends(get_school_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RecommendResponse:
    """Rank schools against a parent's preferences, promoted school first."""
    results = await recommend_from_repository(request.to_preferences(settings.DEFAULT_CITY), repo, settings)

    recommendations = results.recommendations
    if request.limit is not None:
        recommendations = recommendations[: request.limit]

    pinned = results.pinned
    return RecommendResponse(
        recommendations=[MatchResultResponse.from_result(r) for r in recommendations],
        pinned_school=(
            PinnedSchoolResponse.from_summary(build_pinned_summary(pinned, settings)) if pinned is not None else None
        ),
    )
