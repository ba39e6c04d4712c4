from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.db.base import SchoolFilters, SchoolRepository
from src.db.models import Base, School


def _like_pattern(value: str) -> str:
    """Build a ``LIKE`` pattern where each whitespace run matches anything.

    ``"mount  pleasant"`` becomes ``"%mount%pleasant%"``.  LIKE wildcards in the
    input are escaped with a backslash.
    """
    tokens = [t.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") for t in value.split()]
    return "%" + "%".join(tokens) + "%"


class SQLiteSchoolRepository(SchoolRepository):
    """SQLite-backed implementation of :class:`SchoolRepository`.

    Uses *aiosqlite* via SQLAlchemy's async engine.
    """

    def __init__(self, sqlite_path: str = "./data/schools.db") -> None:
        url = f"sqlite+aiosqlite:///{sqlite_path}"
        self._engine = create_async_engine(url, echo=False)
        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self._engine, expire_on_commit=False
        )

    @property
    def engine(self) -> AsyncEngine:
        """Expose the underlying async engine (used by the application lifespan)."""
        return self._engine

    async def init_db(self) -> None:
        """Create all tables if they do not already exist."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def find_schools(self, filters: SchoolFilters) -> list[School]:
        stmt = select(School)

        if filters.city and filters.city.strip():
            stmt = stmt.where(School.city.ilike(_like_pattern(filters.city), escape="\\"))

        if filters.search and filters.search.strip():
            stmt = stmt.where(School.name.ilike(_like_pattern(filters.search), escape="\\"))

        stmt = stmt.order_by(School.name, School.id)

        if filters.offset is not None:
            stmt = stmt.offset(filters.offset)
        if filters.limit is not None:
            stmt = stmt.limit(filters.limit)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_school_by_id(self, school_id: int) -> School | None:
        stmt = select(School).where(School.id == school_id)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_school_by_slug(self, slug: str) -> School | None:
        stmt = select(School).where(func.lower(School.slug) == slug.strip().lower())
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalars().first()

    async def list_cities(self) -> list[str]:
        stmt = select(School.city).distinct().order_by(School.city)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
