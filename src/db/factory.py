from __future__ import annotations

from src.config import get_settings
from src.db.base import SchoolRepository
from src.db.sqlite_repo import SQLiteSchoolRepository


def get_school_repository() -> SchoolRepository:
    """Return the appropriate :class:`SchoolRepository` implementation.

    The backend is selected by the ``DB_BACKEND`` setting:

    * ``"sqlite"`` (default) -- uses :class:`SQLiteSchoolRepository`
    * ``"postgres"``         -- reserved for a future PostgreSQL backend

    Raises:
        NotImplementedError: If the requested backend is not yet implemented.
    """
    settings = get_settings()
    backend = settings.DB_BACKEND.lower()

    if backend == "sqlite":
        return SQLiteSchoolRepository(settings.SQLITE_PATH)

    if backend == "postgres":
        raise NotImplementedError(
            "PostgreSQL backend is not yet implemented. "
            "Set DB_BACKEND=sqlite or omit the variable to use the default SQLite backend."
        )

    raise ValueError(f"Unknown DB_BACKEND: {backend!r}. Supported values: 'sqlite', 'postgres'.")
