"""Shared pytest fixtures for the school-finder test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.db.base import SchoolRepository
from src.db.factory import get_school_repository
from src.db.models import Base, School
from src.db.sqlite_repo import SQLiteSchoolRepository
from src.main import app
from src.services.catalog import FACILITY_KEYS, SchoolRecord

# ---------------------------------------------------------------------------
# Test data helpers
# ---------------------------------------------------------------------------


def _facilities(*present: str) -> dict[str, bool]:
    return {key: key in present for key in FACILITY_KEYS}


def _create_test_schools() -> list[School]:
    """Return a fresh list of realistic Harare (and one Bulawayo) school records."""
    return [
        School(
            id=1,
            name="St Eurit International School",
            slug="st-eurit-international-school-harare",
            normalized_name="st eurit international school",
            city="Harare",
            phase=["Pre-School", "Primary School", "High School"],
            boarding_type=["Day"],
            curricula=["Cambridge"],
            learning_environment="Enhanced",
            tier="upper-middle",
            facilities=_facilities("library", "wifiCampus"),
            website="https://steuritintenationalschool.org",
        ),
        School(
            id=2,
            name="Greendale Junior School",
            slug="greendale-junior-school-harare",
            normalized_name="greendale junior school",
            city="Harare",
            phase=["Primary School"],
            boarding_type=["Day"],
            curricula=["CAIE"],
            learning_environment="Advanced",
            tier="premium",
            facilities=_facilities("swimmingPool", "library"),
        ),
        School(
            id=3,
            name="Highfield Heights College",
            slug="highfield-heights-college-harare",
            normalized_name="highfield heights college",
            city="Harare",
            phase=["High School"],
            boarding_type=["Day", "Boarding"],
            curricula=["ZIMSEC"],
            learning_environment="Comprehensive",
            tier="lower-middle",
            facilities=_facilities("boarding", "scienceLabs"),
        ),
        School(
            id=4,
            name="Mount Pleasant Academy",
            slug="mount-pleasant-academy-harare",
            normalized_name="mount pleasant academy",
            city="Harare",
            phase=["Secondary"],
            boarding_type=[],
            curricula=["International Baccalaureate"],
            learning_environment="Advanced",
            tier="premium",
            facilities=_facilities("boarding", "swimmingPool"),
        ),
        School(
            id=5,
            name="Hillside Grammar School",
            slug="hillside-grammar-school-bulawayo",
            normalized_name="hillside grammar school",
            city="Bulawayo",
            phase=["High School"],
            boarding_type=["Day & Boarding"],
            curricula=["ZIMSEC"],
            learning_environment="Enhanced",
            facilities=_facilities("boarding"),
        ),
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_record() -> Callable[..., SchoolRecord]:
    """Factory for in-memory :class:`SchoolRecord` values with sensible defaults."""
    counter = iter(range(1000, 10_000))

    def _make(name: str = "Green Hills", **kwargs: Any) -> SchoolRecord:
        kwargs.setdefault("id", next(counter))
        kwargs.setdefault("city", "Harare")
        kwargs.setdefault("slug", name.lower().replace(" ", "-"))
        for list_field in ("phase", "boarding_type", "curricula"):
            if list_field in kwargs:
                kwargs[list_field] = tuple(kwargs[list_field])
        return SchoolRecord(name=name, **kwargs)

    return _make


@pytest.fixture()
def db_path(tmp_path) -> str:
    """Create a temporary SQLite database seeded with test data and return its path."""
    path = str(tmp_path / "test_schools.db")
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)

    with Session(sync_engine) as session:
        session.add_all(_create_test_schools())
        session.commit()

    sync_engine.dispose()
    return path


@pytest.fixture()
def test_repo(db_path) -> SQLiteSchoolRepository:
    """Return an async :class:`SQLiteSchoolRepository` backed by the test database."""
    return SQLiteSchoolRepository(db_path)


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    """Settings with a fixed site URL and default pinning."""
    return Settings(
        SQLITE_PATH=str(tmp_path / "lifespan.db"),
        SITE_URL="https://zimedufinder.example",
        PINNED_SCHOOLS="st eurit international school",
    )


@pytest.fixture()
def test_client(db_path, test_settings) -> TestClient:
    """Return a FastAPI ``TestClient`` wired to the test database."""
    repo = SQLiteSchoolRepository(db_path)

    def _override() -> SchoolRepository:
        return repo

    app.dependency_overrides[get_school_repository] = _override
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
