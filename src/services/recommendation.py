"""Repository-backed entry point shared by the web and chat endpoints."""

from __future__ import annotations

import logging

from src.config import Settings
from src.db.base import SchoolFilters, SchoolRepository
from src.services.catalog import school_record_from_orm
from src.services.filters import SearchPreferences, describe_filter
from src.services.matching import RecommendationSet, recommend

logger = logging.getLogger(__name__)


async def recommend_from_repository(
    preferences: SearchPreferences,
    repo: SchoolRepository,
    settings: Settings,
) -> RecommendationSet:
    """Fetch the city's catalog from *repo* and run the matching engine over it.

    The repository query is only narrowed by city, so the pinned school can
    still be found when the other preferences exclude it.
    """
    if settings.DEBUG_RECOMMEND:
        logger.info("recommend filter: %s", describe_filter(preferences))

    schools = await repo.find_schools(SchoolFilters(city=preferences.city))
    catalog = [school_record_from_orm(s) for s in schools]

    result = recommend(
        preferences,
        catalog,
        pinned=settings.pinned_schools(),
        limit=settings.RECOMMEND_LIMIT,
    )
    logger.info(
        "recommend city=%r: %d candidates, %d results, pinned=%s",
        preferences.city,
        len(catalog),
        len(result.recommendations),
        result.pinned is not None,
    )
    return result
