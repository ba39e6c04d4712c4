from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.db.models import School


@dataclass
class SchoolFilters:
    """Coarse catalog query criteria.

    Only narrows by location and name; preference matching happens in
    :mod:`src.services.matching` on the fetched rows.
    """

    city: str | None = None  # case-insensitive, whitespace-tolerant substring
    search: str | None = None  # name-based search (case-insensitive substring)
    limit: int | None = None  # max results to return
    offset: int | None = None  # number of results to skip


class SchoolRepository(ABC):
    """Abstract interface for all school data access."""

    @abstractmethod
    async def find_schools(self, filters: SchoolFilters) -> list[School]:
        """Return schools matching the supplied filter criteria, sorted by name."""
        ...

    @abstractmethod
    async def get_school_by_id(self, school_id: int) -> School | None:
        """Return a single school by primary key, or ``None`` if not found."""
        ...

    @abstractmethod
    async def get_school_by_slug(self, slug: str) -> School | None:
        """Return a single school by slug (case-insensitive), or ``None``."""
        ...

    @abstractmethod
    async def list_cities(self) -> list[str]:
        """Return a sorted list of distinct city names present in the database."""
        ...
