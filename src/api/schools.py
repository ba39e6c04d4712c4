from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from src.db.base import SchoolFilters, SchoolRepository
from src.db.factory import get_school_repository
from src.schemas.filters import SchoolFilterParams
from src.schemas.school import SchoolDetailResponse, SchoolResponse

router = APIRouter(tags=["schools"])


def _to_school_filters(params: SchoolFilterParams) -> SchoolFilters:
    """Convert API filter params to the repository's filter dataclass."""
    return SchoolFilters(
        city=params.city,
        search=params.search,
        limit=params.limit,
        offset=params.offset,
    )


@router.get("/api/schools", response_model=list[SchoolResponse])
async def list_schools(
    filters: Annotated[SchoolFilterParams, Query()],
    repo: Annotated[SchoolRepository, Depends(get_school_repository)],
) -> list[SchoolResponse]:
    """List schools, optionally narrowed by city or name."""
    schools = await repo.find_schools(_to_school_filters(filters))
    return schools


@router.get("/api/schools/{slug}", response_model=SchoolDetailResponse)
async def get_school(
    slug: str,
    repo: Annotated[SchoolRepository, Depends(get_school_repository)],
) -> SchoolDetailResponse:
    """Get full details for a single school by slug."""
    school = await repo.get_school_by_slug(slug)
    if school is None:
        raise HTTPException(status_code=404, detail="School not found")
    return SchoolDetailResponse.model_validate(school, from_attributes=True)


@router.get("/api/cities", response_model=list[str])
async def list_cities(
    repo: Annotated[SchoolRepository, Depends(get_school_repository)],
) -> list[str]:
    """Return the distinct cities present in the catalog."""
    return await repo.list_cities()
