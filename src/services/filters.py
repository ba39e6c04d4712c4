"""Filter construction for school recommendation queries.

Translates a ``SearchPreferences`` parameter object into a predicate over
:class:`~src.services.catalog.SchoolRecord` values.  Each preference field
contributes one independent test and the tests are ANDed together; a field
that is absent or empty contributes no test at all.

The filter types handled are:
  * city (case-insensitive, whitespace-tolerant substring)
  * learning environment (case-insensitive substring)
  * curriculum (synonym expansion, any requested term matches)
  * school phase (synonym expansion, any requested term matches)
  * day / boarding (with the ``facilities.boarding`` flag as a fallback)
  * facilities (every requested facility must be present)

Synonyms are resolved by set membership against explicit alias tables, so
no regular expressions are ever built from request input.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.services.catalog import FACILITY_KEYS, SchoolRecord, collapse_whitespace

# ---------------------------------------------------------------------------
# Synonym tables
# ---------------------------------------------------------------------------
# Canonical term -> accepted lowercase aliases.  Stored catalog values are
# compared after lowercasing and collapsing whitespace.
# ---------------------------------------------------------------------------

CURRICULUM_SYNONYMS: dict[str, frozenset[str]] = {
    "Cambridge": frozenset({"cambridge", "caie", "cie"}),
    "ZIMSEC": frozenset({"zimsec"}),
    "IB": frozenset({"ib", "international baccalaureate"}),
}

PHASE_SYNONYMS: dict[str, frozenset[str]] = {
    "Pre-School": frozenset({"pre-school", "preschool", "early years", "ece"}),
    "Primary School": frozenset({"primary", "primary school", "junior"}),
    "High School": frozenset({"high school", "secondary", "senior"}),
}

DAY_VALUES: frozenset[str] = frozenset({"day", "day & boarding", "day and boarding"})
BOARDING_VALUES: frozenset[str] = frozenset({"boarding", "day & boarding", "day and boarding"})


# ---------------------------------------------------------------------------
# SearchPreferences dataclass
# ---------------------------------------------------------------------------


@dataclass
class SearchPreferences:
    """Parameters a parent can set to narrow down recommendations.

    Callers are expected to hand over already-normalised values: trimmed
    strings, ``None`` for absent text fields and lists for the multi-value
    fields.
    """

    city: str | None = "Harare"
    learning_environment: str | None = None
    curriculum: list[str] = field(default_factory=list)
    phase: list[str] = field(default_factory=list)  # "type" in request payloads
    boarding_type: list[str] = field(default_factory=list)  # "type2" in request payloads
    facilities: list[str] = field(default_factory=list)

    @property
    def wants_day(self) -> bool:
        return any("day" in v.lower() for v in self.boarding_type)

    @property
    def wants_boarding(self) -> bool:
        return any("boarding" in v.lower() for v in self.boarding_type)

    @property
    def known_facilities(self) -> list[str]:
        """Requested facility keys that exist in the catalog schema, in request order."""
        seen: list[str] = []
        for key in self.facilities:
            if key in FACILITY_KEYS and key not in seen:
                seen.append(key)
        return seen


# ---------------------------------------------------------------------------
# Synonym expansion
# ---------------------------------------------------------------------------


def expand_terms(requested: Iterable[str], synonyms: Mapping[str, frozenset[str]]) -> frozenset[str]:
    """Expand requested terms into the set of accepted lowercase catalog values.

    A term naming a canonical entry (or any of its aliases) expands to the
    canonical name plus all aliases.  Unknown terms expand to themselves.
    """
    accepted: set[str] = set()
    for raw in requested:
        term = collapse_whitespace(raw)
        if not term:
            continue
        accepted.add(term)
        for canonical, aliases in synonyms.items():
            if term == canonical.lower() or term in aliases:
                accepted.add(canonical.lower())
                accepted.update(aliases)
    return frozenset(accepted)


def _any_member(values: Iterable[str], accepted: frozenset[str]) -> bool:
    return any(collapse_whitespace(v) in accepted for v in values if v)


# ---------------------------------------------------------------------------
# Per-field hit tests
# ---------------------------------------------------------------------------


def city_matches(school: SchoolRecord, city: str) -> bool:
    return collapse_whitespace(city) in collapse_whitespace(school.city or "")


def environment_matches(school: SchoolRecord, learning_environment: str) -> bool:
    if not school.learning_environment:
        return False
    return collapse_whitespace(learning_environment) in collapse_whitespace(school.learning_environment)


def curriculum_matches(school: SchoolRecord, curriculum: Iterable[str]) -> bool:
    return _any_member(school.curricula, expand_terms(curriculum, CURRICULUM_SYNONYMS))


def phase_matches(school: SchoolRecord, phase: Iterable[str]) -> bool:
    return _any_member(school.phase, expand_terms(phase, PHASE_SYNONYMS))


def day_matches(school: SchoolRecord) -> bool:
    # No boarding flag is taken as evidence of a day school.
    return _any_member(school.boarding_type, DAY_VALUES) or not school.has_facility("boarding")


def boarding_matches(school: SchoolRecord) -> bool:
    return _any_member(school.boarding_type, BOARDING_VALUES) or school.has_facility("boarding")


def facilities_match(school: SchoolRecord, facilities: Iterable[str]) -> bool:
    return all(school.has_facility(key) for key in facilities)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

SchoolPredicate = Callable[[SchoolRecord], bool]


def build_tests(preferences: SearchPreferences) -> list[SchoolPredicate]:
    """Build the list of independent tests implied by *preferences*.

    An empty list means "no constraint": every school passes.
    """
    tests: list[SchoolPredicate] = []

    # -- City --
    if preferences.city:
        city = preferences.city
        tests.append(lambda s: city_matches(s, city))

    # -- Learning environment --
    if preferences.learning_environment:
        environment = preferences.learning_environment
        tests.append(lambda s: environment_matches(s, environment))

    # -- Curriculum (OR across requested terms and synonyms) --
    if preferences.curriculum:
        accepted_curricula = expand_terms(preferences.curriculum, CURRICULUM_SYNONYMS)
        tests.append(lambda s: _any_member(s.curricula, accepted_curricula))

    # -- Phase (OR across requested terms and synonyms) --
    if preferences.phase:
        accepted_phases = expand_terms(preferences.phase, PHASE_SYNONYMS)
        tests.append(lambda s: _any_member(s.phase, accepted_phases))

    # -- Day / Boarding --
    # Both selected means "either is fine", so no test is added.
    wants_day, wants_boarding = preferences.wants_day, preferences.wants_boarding
    if wants_boarding and not wants_day:
        tests.append(boarding_matches)
    elif wants_day and not wants_boarding:
        tests.append(day_matches)

    # -- Facilities (AND) --
    facilities = preferences.known_facilities
    if facilities:
        tests.append(lambda s: facilities_match(s, facilities))

    return tests


def build_predicate(preferences: SearchPreferences) -> SchoolPredicate:
    """Return a single predicate that ANDs every test from :func:`build_tests`."""
    tests = build_tests(preferences)

    def predicate(school: SchoolRecord) -> bool:
        return all(test(school) for test in tests)

    return predicate


def describe_filter(preferences: SearchPreferences) -> dict[str, Any]:
    """Return a JSON-serialisable description of the active filter (for logging)."""
    description: dict[str, Any] = {}
    if preferences.city:
        description["city"] = {"contains": collapse_whitespace(preferences.city)}
    if preferences.learning_environment:
        description["learning_environment"] = {"contains": collapse_whitespace(preferences.learning_environment)}
    if preferences.curriculum:
        description["curricula"] = {"any_of": sorted(expand_terms(preferences.curriculum, CURRICULUM_SYNONYMS))}
    if preferences.phase:
        description["phase"] = {"any_of": sorted(expand_terms(preferences.phase, PHASE_SYNONYMS))}
    if preferences.wants_boarding and not preferences.wants_day:
        description["boarding_type"] = {"any_of": sorted(BOARDING_VALUES), "or": "facilities.boarding == true"}
    elif preferences.wants_day and not preferences.wants_boarding:
        description["boarding_type"] = {"any_of": sorted(DAY_VALUES), "or": "facilities.boarding != true"}
    if preferences.known_facilities:
        description["facilities"] = {"all_of": preferences.known_facilities}
    return description
