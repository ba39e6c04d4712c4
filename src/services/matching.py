"""School recommendation engine.

Filters a catalog of :class:`~src.services.catalog.SchoolRecord` values
against a parent's :class:`~src.services.filters.SearchPreferences`, scores
every surviving candidate, and makes sure the promoted ("pinned") school is
surfaced first when one is configured.

Scoring counts *signal groups*: learning environment, phase, day/boarding,
curriculum and facilities.  Every group the parent filled in adds one to the
denominator (day/boarding adds two when both were asked for) and every group
the school satisfies adds one to the numerator.  All groups weigh the same.
With no preferences at all every school scores 100.

The engine is pure: it performs no I/O and keeps no state between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from src.services.catalog import TIERS, SchoolRecord, collapse_whitespace
from src.services.filters import (
    SearchPreferences,
    boarding_matches,
    build_predicate,
    city_matches,
    curriculum_matches,
    day_matches,
    describe_filter,
    environment_matches,
    facilities_match,
    phase_matches,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_LIMIT = 100
REASON_SEPARATOR = " · "


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class MatchResult:
    """A candidate school together with its match score and explanation."""

    school: SchoolRecord
    match_score: float
    reasons: list[str] = field(default_factory=list)
    is_pinned: bool = False

    @property
    def reason(self) -> str:
        """The reasons as a single display string."""
        return REASON_SEPARATOR.join(self.reasons)


@dataclass
class RecommendationSet:
    """Engine output: ranked results plus the pinned entry, if any."""

    recommendations: list[MatchResult]

    @property
    def pinned(self) -> MatchResult | None:
        return next((r for r in self.recommendations if r.is_pinned), None)


# ---------------------------------------------------------------------------
# Pinning
# ---------------------------------------------------------------------------


def is_pinned(school: SchoolRecord, pins: Iterable[str]) -> bool:
    """Return ``True`` when *school* is named by any entry of *pins*.

    *pins* are compared against the whitespace-collapsed lowercase name, the
    lowercase slug and the lowercase normalised name.
    """
    keys = {
        collapse_whitespace(school.name or ""),
        (school.slug or "").strip().lower(),
        (school.normalized_name or "").strip().lower(),
    }
    keys.discard("")
    return any(p in keys for p in pins)


def _find_pinned(catalog: Iterable[SchoolRecord], pins: Sequence[str], city: str | None) -> SchoolRecord | None:
    """Secondary lookup: the first pinned school in *catalog*, ignoring preferences except city."""
    for school in catalog:
        if is_pinned(school, pins) and (not city or city_matches(school, city)):
            return school
    return None


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def signal_count(preferences: SearchPreferences) -> int:
    """Return the score denominator: how many signal groups the parent filled in."""
    count = 0
    if preferences.learning_environment:
        count += 1
    if preferences.phase:
        count += 1
    if preferences.boarding_type:
        count += 2 if preferences.wants_day and preferences.wants_boarding else 1
    if preferences.curriculum:
        count += 1
    if preferences.known_facilities:
        count += 1
    return count


def score(school: SchoolRecord, preferences: SearchPreferences) -> tuple[float, list[str]]:
    """Return ``(match_score, reasons)`` for *school* against *preferences*.

    Reasons follow the fixed group order: environment, phase, day/boarding,
    curriculum, facilities.
    """
    reasons: list[str] = []
    matched = 0

    if preferences.learning_environment and environment_matches(school, preferences.learning_environment):
        matched += 1
        reasons.append(f"{school.learning_environment} learning environment")

    if preferences.phase and phase_matches(school, preferences.phase):
        matched += 1
        reasons.append(" & ".join(school.phase))

    if preferences.boarding_type:
        if preferences.wants_day and day_matches(school):
            matched += 1
            reasons.append("Day")
        if preferences.wants_boarding and boarding_matches(school):
            matched += 1
            reasons.append("Boarding")

    if preferences.curriculum and curriculum_matches(school, preferences.curriculum):
        matched += 1
        reasons.append(", ".join(school.curricula))

    facilities = preferences.known_facilities
    if facilities and facilities_match(school, facilities):
        matched += 1
        reasons.append(f"Facilities: {', '.join(facilities)}")

    denominator = signal_count(preferences)
    if denominator == 0:
        return 100.0, reasons
    return matched / denominator * 100.0, reasons


# ---------------------------------------------------------------------------
# Ordering helpers
# ---------------------------------------------------------------------------


def _identity(school: SchoolRecord) -> Any:
    """Dedupe key: the id, else the slug, else ``None`` (record is never deduped)."""
    if school.id is not None:
        return ("id", school.id)
    if school.slug:
        return ("slug", school.slug)
    return None


def _dedupe(schools: Iterable[SchoolRecord]) -> list[SchoolRecord]:
    seen: set[Any] = set()
    unique: list[SchoolRecord] = []
    for school in schools:
        key = _identity(school)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        unique.append(school)
    return unique


# Business ranking, best tier first and untiered last; not an alphabetical
# sort of the raw tier string.
def _tier_rank(school: SchoolRecord) -> int:
    try:
        return TIERS.index((school.tier or "").lower())
    except ValueError:
        return len(TIERS)


def _candidate_order(school: SchoolRecord) -> tuple[int, str, str]:
    return (_tier_rank(school), (school.name or "").casefold(), school.name or "")


def _result_order(result: MatchResult) -> tuple[bool, float, str, str]:
    name = result.school.name or ""
    return (not result.is_pinned, -result.match_score, name.casefold(), name)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def recommend(
    preferences: SearchPreferences,
    catalog: Sequence[SchoolRecord],
    *,
    pinned: Sequence[str] = (),
    limit: int = DEFAULT_LIMIT,
) -> RecommendationSet:
    """Rank the schools in *catalog* against *preferences*.

    Parameters
    ----------
    preferences:
        Normalised search preferences.
    catalog:
        Schools to consider.  May be the whole catalog or a superset already
        narrowed by the caller; the preference filter is applied here either way.
    pinned:
        Lowercase names / slugs of the promoted school.  When none of the
        filtered candidates is pinned, the first pinned school in *catalog*
        from the requested city is added regardless of the other preferences.
    limit:
        Maximum number of filtered candidates kept before scoring (the
        pinned fallback comes on top of this).

    Returns
    -------
    RecommendationSet
        Results sorted by pinned first, then score descending, then name.
    """
    predicate = build_predicate(preferences)
    logger.debug("recommend filter: %s", describe_filter(preferences))
    unknown = [key for key in preferences.facilities if key not in preferences.known_facilities]
    if unknown:
        logger.debug("recommend: ignoring unknown facility keys %s", unknown)

    candidates = _dedupe(s for s in catalog if predicate(s))
    candidates.sort(key=_candidate_order)
    candidates = candidates[: max(limit, 0)]
    logger.debug("recommend: %d of %d schools passed the filter", len(candidates), len(catalog))

    pins = [p for p in pinned if p]
    if pins and not any(is_pinned(s, pins) for s in candidates):
        fallback = _find_pinned(catalog, pins, preferences.city)
        if fallback is not None:
            logger.debug("recommend: adding pinned school %r outside the filter", fallback.name)
            candidates.insert(0, fallback)

    results: list[MatchResult] = []
    for school in candidates:
        match_score, reasons = score(school, preferences)
        results.append(
            MatchResult(
                school=school,
                match_score=match_score,
                reasons=reasons,
                is_pinned=bool(pins) and is_pinned(school, pins),
            )
        )

    results.sort(key=_result_order)
    return RecommendationSet(recommendations=results)
