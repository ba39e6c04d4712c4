"""Text command front-end for messaging channels.

Parses short commands such as ``find harare cambridge boarding primary``
into :class:`SearchPreferences` and renders recommendation results as a
plain-text reply.  Transport concerns (webhook signatures, channel markup)
belong to whichever channel adapter calls :func:`handle_message`.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from src.config import Settings
from src.db.base import SchoolRepository
from src.services.catalog import FACILITY_KEYS
from src.services.filters import SearchPreferences
from src.services.matching import RecommendationSet
from src.services.promotion import build_pinned_summary
from src.services.recommendation import recommend_from_repository

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

GREETINGS = frozenset({"hi", "hello", "hey"})

CURRICULUM_WORDS: dict[str, str] = {
    "cambridge": "Cambridge",
    "caie": "Cambridge",
    "cie": "Cambridge",
    "zimsec": "ZIMSEC",
    "ib": "IB",
}

BOARDING_WORDS: dict[str, str] = {
    "boarding": "Boarding",
    "board": "Boarding",
    "day": "Day",
}

PHASE_WORDS: dict[str, str] = {
    "preschool": "Pre-School",
    "pre-school": "Pre-School",
    "ece": "Pre-School",
    "primary": "Primary School",
    "junior": "Primary School",
    "secondary": "High School",
    "high": "High School",
    "senior": "High School",
}

ENVIRONMENT_WORDS: dict[str, str] = {
    "advanced": "Advanced",
    "enhanced": "Enhanced",
    "comprehensive": "Comprehensive",
}

FACILITY_WORDS: dict[str, str] = {key.lower(): key for key in FACILITY_KEYS}

KEYWORDS = frozenset(
    {*CURRICULUM_WORDS, *BOARDING_WORDS, *PHASE_WORDS, *ENVIRONMENT_WORDS, *FACILITY_WORDS}
)

GREETING_TEXT = (
    "Hi! I'm ZimEduFinder 🤖\n\n"
    "Commands:\n"
    "• find [city] [filters]\n"
    "   e.g. 'find harare cambridge boarding primary'\n"
    "• help"
)

HELP_TEXT = (
    "ZimEduFinder Help:\n"
    "• find [city] [filters]\n"
    "Filters: curriculum (cambridge, zimsec, ib), boarding/day, "
    "phase (preschool/primary/secondary), environment (advanced/enhanced/comprehensive), "
    "facilities (e.g. swimmingpool, library)\n"
    "Examples:\n"
    "• find harare cambridge boarding primary\n"
    "• find bulawayo zimsec day secondary"
)

UNKNOWN_TEXT = "Sorry, I didn't understand. Send 'help' for usage."


class CommandKind(enum.Enum):
    GREETING = "greeting"
    HELP = "help"
    FIND = "find"
    UNKNOWN = "unknown"


@dataclass
class ChatCommand:
    kind: CommandKind
    preferences: SearchPreferences | None = None


@dataclass
class ChatReply:
    text: str
    media_urls: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _add(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


def parse_find(words: list[str], default_city: str = "Harare") -> SearchPreferences:
    """Build preferences from the words following ``find``.

    The first word is the city unless it is itself a filter keyword.
    """
    city = default_city
    rest = words
    if words and words[0] not in KEYWORDS:
        city = words[0].title()
        rest = words[1:]

    preferences = SearchPreferences(city=city)
    for word in rest:
        if word in CURRICULUM_WORDS:
            _add(preferences.curriculum, CURRICULUM_WORDS[word])
        elif word in BOARDING_WORDS:
            _add(preferences.boarding_type, BOARDING_WORDS[word])
        elif word in PHASE_WORDS:
            _add(preferences.phase, PHASE_WORDS[word])
        elif word in ENVIRONMENT_WORDS:
            preferences.learning_environment = ENVIRONMENT_WORDS[word]
        elif word in FACILITY_WORDS:
            _add(preferences.facilities, FACILITY_WORDS[word])
    return preferences


def parse_message(text: str, default_city: str = "Harare") -> ChatCommand:
    """Classify an incoming message and extract search preferences for ``find``."""
    words = text.strip().lower().split()
    if not words or (len(words) == 1 and words[0] in GREETINGS):
        return ChatCommand(CommandKind.GREETING)
    if words == ["help"]:
        return ChatCommand(CommandKind.HELP)
    if words[0] == "find":
        return ChatCommand(CommandKind.FIND, parse_find(words[1:], default_city))
    return ChatCommand(CommandKind.UNKNOWN)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_recommendations(city: str, results: RecommendationSet, settings: Settings) -> ChatReply:
    """Render the top results as a chat reply, attaching the pinned school's media."""
    top = results.recommendations[: settings.CHAT_RESULT_LIMIT]
    if not top:
        return ChatReply(f'No matches found for "{city}" with those filters. Try fewer filters or \'help\'.')

    lines = [f"Top {len(top)} matches for {city}:"]
    media_urls: list[str] = []
    for result in top:
        school = result.school
        lines.append(f"\n• {school.name}" + (f" — {school.city}" if school.city else ""))
        if school.curricula:
            lines.append(f"  Curriculum: {', '.join(school.curricula)}")
        if school.website:
            lines.append(f"  Website: {school.website}")
        if result.is_pinned:
            summary = build_pinned_summary(result, settings)
            lines.append(f"  Register: {summary.register_url}")
            media_urls = summary.media_urls

    lines.append("\nReply 'help' for commands.")
    return ChatReply("\n".join(lines), media_urls)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def handle_message(sender: str, text: str, repo: SchoolRepository, settings: Settings) -> ChatReply:
    """Answer one inbound chat message."""
    command = parse_message(text, settings.DEFAULT_CITY)
    logger.info("chat message from %s parsed as %s", sender or "<unknown>", command.kind.value)

    if command.kind is CommandKind.GREETING:
        return ChatReply(GREETING_TEXT)
    if command.kind is CommandKind.HELP:
        return ChatReply(HELP_TEXT)
    if command.kind is CommandKind.UNKNOWN or command.preferences is None:
        return ChatReply(UNKNOWN_TEXT)

    results = await recommend_from_repository(command.preferences, repo, settings)
    return format_recommendations(command.preferences.city or settings.DEFAULT_CITY, results, settings)
