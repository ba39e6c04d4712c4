"""Seed or import the school catalog.

Reads a school CSV (the format exported from the admin spreadsheet), maps
each row to the School model, and upserts the records into the SQLite
database.  Without a CSV the built-in sample catalog is used.

Usage::

    python -m src.db.seed                       # built-in sample data
    python -m src.db.seed --csv schools.csv     # local export
    python -m src.db.seed --url https://.../schools.csv --city Harare

CSV columns
-----------
``name`` is required.  Optional columns: ``city``, ``phase`` (or ``type``),
``boarding_type`` (or ``type2``), ``curricula`` (or ``curriculum_list``),
``learning_environment``, ``tier``, ``gender``, ``address``, ``contact``,
``website``, ``facebook_url``, ``logo``, ``hero_image``, ``facilities``.
List cells are separated by ``|``, ``;`` or ``,``.  The ``facilities`` cell
lists the facility keys the school has (e.g. ``swimmingPool|library``).
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from datetime import datetime
from pathlib import Path

import httpx
import polars as pl
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.db.models import Base, School
from src.services.catalog import FACILITY_KEYS, LEARNING_ENVIRONMENTS, TIERS, normalize_name, slugify

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SEEDS_DIR = PROJECT_ROOT / "data" / "seeds"
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "schools.db"

# ---------------------------------------------------------------------------
# CSV column aliases
# ---------------------------------------------------------------------------
# The admin export has used both camelCase and snake_case headers.

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "city": ("city",),
    "phase": ("phase", "type"),
    "boarding_type": ("boarding_type", "type2"),
    "curricula": ("curricula", "curriculum_list", "curriculum"),
    "learning_environment": ("learning_environment", "learningEnvironment"),
    "tier": ("tier",),
    "gender": ("gender",),
    "address": ("address",),
    "contact": ("contact",),
    "website": ("website",),
    "facebook_url": ("facebook_url", "facebookUrl"),
    "logo": ("logo",),
    "hero_image": ("hero_image", "heroImage"),
    "facilities": ("facilities",),
}

_LIST_SEPARATORS = re.compile(r"[|;,]")


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


def _cell(row: dict[str, str], field: str) -> str:
    for column in COLUMN_ALIASES[field]:
        value = row.get(column)
        if value:
            return value.strip()
    return ""


def _split_list(value: str) -> list[str]:
    return [v.strip() for v in _LIST_SEPARATORS.split(value) if v.strip()]


def _parse_facilities(value: str) -> dict[str, bool]:
    """Map a list of facility keys to the facilities flag dict.

    Keys are matched case-insensitively; unknown keys are dropped.
    """
    lookup = {key.lower(): key for key in FACILITY_KEYS}
    present = {lookup[v.lower()] for v in _split_list(value) if v.lower() in lookup}
    return {key: key in present for key in FACILITY_KEYS}


def _choice(value: str, allowed: tuple[str, ...]) -> str | None:
    for option in allowed:
        if value.lower() == option.lower():
            return option
    return None


def _make_school(
    name: str,
    city: str,
    *,
    phase: list[str] | None = None,
    boarding_type: list[str] | None = None,
    curricula: list[str] | None = None,
    facilities: list[str] | None = None,
    source: str = "seed",
    **extra: str | None,
) -> School:
    return School(
        name=name,
        slug=slugify(name, city),
        normalized_name=normalize_name(name),
        city=city,
        phase=phase or [],
        boarding_type=boarding_type or [],
        curricula=curricula or [],
        facilities={key: key in (facilities or []) for key in FACILITY_KEYS},
        source=source,
        last_verified_at=datetime.now(),
        **extra,
    )


def _row_to_school(row: dict[str, str], default_city: str = "Harare") -> School | None:
    """Map one CSV row to a ``School``; rows without a name are skipped."""
    name = " ".join(_cell(row, "name").split())
    if not name:
        return None
    city = _cell(row, "city") or default_city

    school = _make_school(
        name,
        city,
        phase=_split_list(_cell(row, "phase")),
        boarding_type=_split_list(_cell(row, "boarding_type")),
        curricula=_split_list(_cell(row, "curricula")),
        source="csv",
        learning_environment=_choice(_cell(row, "learning_environment"), LEARNING_ENVIRONMENTS),
        tier=_choice(_cell(row, "tier"), TIERS),
        gender=_cell(row, "gender") or None,
        address=_cell(row, "address") or None,
        contact=_cell(row, "contact") or None,
        website=_cell(row, "website") or None,
        facebook_url=_cell(row, "facebook_url") or None,
        logo=_cell(row, "logo") or None,
        hero_image=_cell(row, "hero_image") or None,
    )
    school.facilities = _parse_facilities(_cell(row, "facilities"))
    return school


# ---------------------------------------------------------------------------
# Built-in sample catalog
# ---------------------------------------------------------------------------


def _generate_test_schools(city: str | None = None) -> list[School]:
    """Return the built-in sample catalog, optionally restricted to *city*."""
    schools = [
        _make_school(
            "St Eurit International School",
            "Harare",
            phase=["Pre-School", "Primary School", "High School"],
            boarding_type=["Day"],
            curricula=["Cambridge"],
            facilities=["scienceLabs", "computerLab", "library", "wifiCampus", "cctvSecurity", "aftercare"],
            learning_environment="Enhanced",
            tier="upper-middle",
            address="Borrowdale, Harare",
            website="https://steuritintenationalschool.org",
        ),
        _make_school(
            "Greendale Junior School",
            "Harare",
            phase=["Primary School"],
            boarding_type=["Day"],
            curricula=["Cambridge"],
            facilities=["library", "swimmingPool", "musicRoom", "footballPitch"],
            learning_environment="Advanced",
            tier="premium",
            address="Greendale, Harare",
        ),
        _make_school(
            "Highfield Heights College",
            "Harare",
            phase=["High School"],
            boarding_type=["Day", "Boarding"],
            curricula=["ZIMSEC", "Cambridge"],
            facilities=["scienceLabs", "boarding", "rugbyField", "cricketField", "library"],
            learning_environment="Comprehensive",
            tier="lower-middle",
            address="Highfield, Harare",
        ),
        _make_school(
            "Mount Pleasant Academy",
            "Harare",
            phase=["Primary School", "High School"],
            boarding_type=["Boarding"],
            curricula=["IB", "Cambridge"],
            facilities=["scienceLabs", "swimmingPool", "tennisCourts", "boarding", "dramaTheatre", "wifiCampus"],
            learning_environment="Advanced",
            tier="premium",
            address="Mount Pleasant, Harare",
        ),
        _make_school(
            "Little Acorns Early Learning Centre",
            "Harare",
            phase=["Pre-School"],
            curricula=["ZIMSEC"],
            facilities=["aftercare", "cafeteria"],
            learning_environment="Comprehensive",
        ),
        _make_school(
            "Hillside Grammar School",
            "Bulawayo",
            phase=["High School"],
            boarding_type=["Day & Boarding"],
            curricula=["ZIMSEC"],
            facilities=["scienceLabs", "boarding", "athleticsTrack", "hockeyField"],
            learning_environment="Enhanced",
            tier="upper-middle",
            address="Hillside, Bulawayo",
        ),
        _make_school(
            "Matopos Preparatory School",
            "Bulawayo",
            phase=["Primary School"],
            boarding_type=["Boarding"],
            curricula=["Cambridge"],
            facilities=["boarding", "swimmingPool", "library"],
            learning_environment="Advanced",
            tier="premium",
        ),
    ]
    if city is None:
        return schools
    return [s for s in schools if s.city.lower() == city.lower()]


# ---------------------------------------------------------------------------
# CSV input
# ---------------------------------------------------------------------------


def _download_csv(url: str) -> Path:
    """Download a catalog CSV into ``data/seeds/`` and return the local path."""
    print(f"  Downloading CSV from {url} ...")
    with httpx.Client(timeout=60.0, follow_redirects=True) as client:
        resp = client.get(url)
        resp.raise_for_status()

    SEEDS_DIR.mkdir(parents=True, exist_ok=True)
    path = SEEDS_DIR / (Path(httpx.URL(url).path).name or "schools.csv")
    path.write_bytes(resp.content)
    print(f"  Saved to {path} ({len(resp.content) / 1024:.1f} KB)")
    return path


def _read_csv(path: Path) -> list[dict[str, str]]:
    """Read a catalog CSV into a list of row dicts using Polars.

    Spreadsheet exports are usually UTF-8 (with or without BOM); cp1252 is
    tried last.
    """
    for encoding in ("utf-8-sig", "utf-8", "cp1252"):
        try:
            df = pl.read_csv(
                path,
                encoding=encoding,
                infer_schema_length=0,  # keep all columns as strings
                null_values=[""],
                truncate_ragged_lines=True,
            )
        except (pl.exceptions.PolarsError, UnicodeDecodeError):
            continue
        return [{k: (v if v is not None else "") for k, v in row.items()} for row in df.iter_rows(named=True)]
    print(f"  ERROR: Could not decode {path} with any known encoding.", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


def _ensure_database(db_path: Path) -> Session:
    """Create the SQLite database and tables, then return a Session."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    Base.metadata.create_all(engine)
    return Session(engine)


def _unique_slug(session: Session, slug: str, owner_id: int | None) -> str:
    candidate, n = slug, 2
    while True:
        clash = session.query(School).filter_by(slug=candidate).first()
        if clash is None or clash.id == owner_id:
            return candidate
        candidate = f"{slug}-{n}"
        n += 1


def _upsert_schools(session: Session, schools: list[School]) -> tuple[int, int]:
    """Insert new schools and update existing ones (matched by city + normalized name).

    Returns ``(inserted, updated)`` counts.
    """
    inserted = 0
    updated = 0

    for school in schools:
        existing = (
            session.query(School)
            .filter(School.city == school.city, School.normalized_name == school.normalized_name)
            .first()
        )
        if existing is None:
            school.slug = _unique_slug(session, school.slug, None)
            session.add(school)
            session.flush()
            inserted += 1
        else:
            existing.name = school.name
            existing.phase = school.phase
            existing.boarding_type = school.boarding_type
            existing.curricula = school.curricula
            existing.facilities = school.facilities
            existing.learning_environment = school.learning_environment
            existing.tier = school.tier
            existing.gender = school.gender
            existing.address = school.address
            existing.contact = school.contact
            existing.website = school.website
            existing.facebook_url = school.facebook_url
            existing.logo = school.logo
            existing.hero_image = school.hero_image
            existing.source = school.source
            existing.last_verified_at = school.last_verified_at
            updated += 1

    session.commit()
    return inserted, updated


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="python -m src.db.seed",
        description="Seed the school catalog from a CSV export or the built-in sample data.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--csv", type=Path, help="Path to a local catalog CSV.")
    source.add_argument("--url", help="URL of a catalog CSV to download.")
    parser.add_argument(
        "--city",
        default=None,
        help="Only import rows for this city; also the default for rows without a city (default: Harare).",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=DEFAULT_DB_PATH,
        help=f"Path to the SQLite database file (default: {DEFAULT_DB_PATH}).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the seed script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = parse_args(argv)
    city: str | None = args.city
    db_path: Path = args.db

    print("Zim School Finder - Catalog Seed")
    print(f"  City filter : {city or '(all)'}")
    print(f"  Database    : {db_path}")
    print()

    # ------------------------------------------------------------------
    # 1. Obtain the CSV (local, download, or built-in data)
    # ------------------------------------------------------------------
    print("[1/3] Obtaining catalog ...")
    csv_path: Path | None = args.csv
    if args.url:
        try:
            csv_path = _download_csv(args.url)
        except httpx.HTTPError as exc:
            logger.warning("CSV download failed: %s", exc)
            print("  Will use built-in sample data instead.")
            csv_path = None

    schools: list[School] = []
    if csv_path is None:
        schools = _generate_test_schools(city)
        print(f"  Using {len(schools)} built-in sample schools")
    else:
        rows = _read_csv(csv_path)
        print(f"  Total rows in CSV: {len(rows)}")
        if rows and "name" not in rows[0]:
            print(f"  ERROR: {csv_path} has no 'name' column.", file=sys.stderr)
            sys.exit(1)

        # --------------------------------------------------------------
        # 2. Map rows to School objects
        # --------------------------------------------------------------
        print("[2/3] Mapping to School records ...")
        skipped = 0
        for row in rows:
            school = _row_to_school(row, default_city=city or "Harare")
            if school is None or (city and school.city.lower() != city.lower()):
                skipped += 1
                continue
            schools.append(school)
        print(f"  Schools to import: {len(schools)}  (skipped {skipped})")

    # ------------------------------------------------------------------
    # 3. Write to database
    # ------------------------------------------------------------------
    print("[3/3] Writing to database ...")
    session = _ensure_database(db_path)
    try:
        inserted, updated = _upsert_schools(session, schools)
        print(f"  Inserted: {inserted}")
        print(f"  Updated : {updated}")

        print()
        print("=" * 60)
        print("  SUMMARY")
        print("=" * 60)
        from collections import Counter

        city_counts = Counter(s.city for s in session.query(School).all())
        for name, count in sorted(city_counts.items()):
            print(f"    {name:25s}: {count}")
        print("=" * 60)
    finally:
        session.close()

    print()
    print("Done.")


if __name__ == "__main__":
    main()
