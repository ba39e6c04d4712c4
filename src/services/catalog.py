"""Catalog records shared by the filter builder and the matching engine.

``SchoolRecord`` is a flat, read-only copy of a ``schools`` row so that the
matching code does not depend on SQLAlchemy and can be exercised with
in-memory fixtures.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.db.models import School

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PHASES: tuple[str, ...] = ("Pre-School", "Primary School", "High School")
BOARDING_TYPES: tuple[str, ...] = ("Day", "Boarding")
CURRICULA: tuple[str, ...] = ("Cambridge", "ZIMSEC", "IB")
LEARNING_ENVIRONMENTS: tuple[str, ...] = ("Advanced", "Enhanced", "Comprehensive")

# Best first.  Used only to order candidates before the result cap.
TIERS: tuple[str, ...] = ("premium", "upper-middle", "lower-middle")

FACILITY_KEYS: tuple[str, ...] = (
    # Academics
    "scienceLabs",
    "computerLab",
    "library",
    "makerSpaceSteamLab",
    "examCentreCambridge",
    "examCentreZimsec",
    # Arts & culture
    "artStudio",
    "musicRoom",
    "dramaTheatre",
    # Sports
    "swimmingPool",
    "athleticsTrack",
    "rugbyField",
    "hockeyField",
    "tennisCourts",
    "basketballCourt",
    "netballCourt",
    "footballPitch",
    "cricketField",
    # Student support & welfare
    "counseling",
    "learningSupportSEN",
    "schoolClinicNurse",
    "cafeteria",
    "aftercare",
    # Boarding & logistics
    "boarding",
    "transportBuses",
    # Campus & safety
    "wifiCampus",
    "cctvSecurity",
    "powerBackup",
)


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchoolRecord:
    """Flat representation of a catalog school used by the matching engine."""

    id: Any
    name: str
    slug: str = ""
    city: str = ""
    phase: tuple[str, ...] = ()
    boarding_type: tuple[str, ...] = ()
    curricula: tuple[str, ...] = ()
    learning_environment: str | None = None
    facilities: Mapping[str, bool] = field(default_factory=dict)
    tier: str | None = None
    normalized_name: str | None = None
    website: str | None = None
    facebook_url: str | None = None
    logo: str | None = None
    hero_image: str | None = None

    def has_facility(self, key: str) -> bool:
        return self.facilities.get(key) is True


def school_record_from_orm(school: School) -> SchoolRecord:
    """Build a :class:`SchoolRecord` from a ``School`` ORM instance."""
    return SchoolRecord(
        id=school.id,
        name=school.name,
        slug=school.slug or "",
        city=school.city or "",
        phase=tuple(school.phase or ()),
        boarding_type=tuple(school.boarding_type or ()),
        curricula=tuple(school.curricula or ()),
        learning_environment=school.learning_environment,
        facilities=dict(school.facilities or {}),
        tier=school.tier,
        normalized_name=school.normalized_name,
        website=school.website,
        facebook_url=school.facebook_url,
        logo=school.logo,
        hero_image=school.hero_image,
    )


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------


def collapse_whitespace(value: str) -> str:
    """Lowercase *value* and collapse every whitespace run to a single space."""
    return " ".join(value.lower().split())


def _ascii(value: str) -> str:
    return unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")


def normalize_name(name: str) -> str:
    """Return the comparison key for a school name.

    ``"St. Eurit  International School"`` -> ``"st eurit international school"``
    """
    value = _ascii(name).lower().replace("&", " and ")
    value = re.sub(r"[^a-z0-9\s]", " ", value)
    return " ".join(value.split())


def slugify(name: str, city: str | None = None) -> str:
    """Return a URL-safe slug built from *name* and, when given, *city*."""
    parts = [name, city] if city else [name]
    value = _ascii(" ".join(parts)).lower().replace("&", " and ")
    return re.sub(r"[^a-z0-9]+", "-", value).strip("-")
