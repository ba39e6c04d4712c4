"""Tests for the text command front-end."""

from __future__ import annotations

import pytest

from src.config import Settings
from src.services.chat import (
    GREETING_TEXT,
    HELP_TEXT,
    UNKNOWN_TEXT,
    CommandKind,
    format_recommendations,
    handle_message,
    parse_message,
)
from src.services.filters import SearchPreferences
from src.services.matching import recommend

# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseMessage:
    @pytest.mark.parametrize("text", ["", "   ", "hi", "Hello", "HEY"])
    def test_greetings(self, text):
        assert parse_message(text).kind is CommandKind.GREETING

    def test_help(self):
        assert parse_message(" Help ").kind is CommandKind.HELP

    def test_unknown(self):
        assert parse_message("what schools are there").kind is CommandKind.UNKNOWN

    def test_find_with_city_and_filters(self):
        command = parse_message("find harare cambridge boarding primary")
        assert command.kind is CommandKind.FIND
        assert command.preferences == SearchPreferences(
            city="Harare",
            curriculum=["Cambridge"],
            boarding_type=["Boarding"],
            phase=["Primary School"],
        )

    def test_find_without_city_uses_default(self):
        command = parse_message("find zimsec day secondary", default_city="Bulawayo")
        prefs = command.preferences
        assert prefs.city == "Bulawayo"
        assert prefs.curriculum == ["ZIMSEC"]
        assert prefs.boarding_type == ["Day"]
        assert prefs.phase == ["High School"]

    def test_find_alone(self):
        command = parse_message("find")
        assert command.kind is CommandKind.FIND
        assert command.preferences == SearchPreferences(city="Harare")

    def test_environment_and_facilities(self):
        prefs = parse_message("find mutare advanced swimmingpool library").preferences
        assert prefs.city == "Mutare"
        assert prefs.learning_environment == "Advanced"
        assert prefs.facilities == ["swimmingPool", "library"]

    def test_repeated_keywords_are_kept_once(self):
        prefs = parse_message("find harare cambridge caie cie").preferences
        assert prefs.curriculum == ["Cambridge"]

    def test_unrecognised_words_are_ignored(self):
        prefs = parse_message("find harare cambridge please").preferences
        assert prefs.curriculum == ["Cambridge"]
        assert prefs.phase == []


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatRecommendations:
    def test_no_results(self, test_settings: Settings):
        results = recommend(SearchPreferences(city="Gweru"), [])
        reply = format_recommendations("Gweru", results, test_settings)
        assert reply.text.startswith('No matches found for "Gweru"')
        assert reply.media_urls == []

    def test_pinned_school_gets_register_link_and_media(self, make_record, test_settings: Settings):
        catalog = [
            make_record(
                "St Eurit International School",
                slug="st-eurit-international-school-harare",
                curricula=["Cambridge"],
                website="https://steuritintenationalschool.org",
            ),
            make_record("Greendale Junior School", curricula=["Cambridge"]),
        ]
        results = recommend(SearchPreferences(), catalog, pinned=test_settings.pinned_schools())
        reply = format_recommendations("Harare", results, test_settings)

        lines = reply.text.splitlines()
        assert lines[0] == "Top 2 matches for Harare:"
        assert "• St Eurit International School — Harare" in lines
        assert "  Website: https://steuritintenationalschool.org" in lines
        assert (
            "  Register: https://zimedufinder.example/register/st-eurit-international-school-harare" in lines
        )
        assert reply.text.endswith("Reply 'help' for commands.")
        assert reply.media_urls[0] == "https://zimedufinder.example/docs/st-eurit.jpg"
        assert reply.media_urls[-1] == "https://zimedufinder.example/docs/st-eurit-enrollment-requirements.pdf"

    def test_reply_is_capped(self, make_record, tmp_path):
        settings = Settings(SQLITE_PATH=str(tmp_path / "x.db"), CHAT_RESULT_LIMIT=2)
        catalog = [make_record(f"School {n}") for n in range(5)]
        reply = format_recommendations("Harare", recommend(SearchPreferences(), catalog), settings)
        assert reply.text.startswith("Top 2 matches for Harare:")
        assert "School 2" not in reply.text
        assert reply.media_urls == []


# ---------------------------------------------------------------------------
# handle_message
# ---------------------------------------------------------------------------


class TestHandleMessage:
    @pytest.mark.asyncio
    async def test_greeting(self, test_repo, test_settings):
        reply = await handle_message("+263700000000", "hi", test_repo, test_settings)
        assert reply.text == GREETING_TEXT

    @pytest.mark.asyncio
    async def test_help(self, test_repo, test_settings):
        reply = await handle_message("", "help", test_repo, test_settings)
        assert reply.text == HELP_TEXT

    @pytest.mark.asyncio
    async def test_unknown(self, test_repo, test_settings):
        reply = await handle_message("", "show me schools", test_repo, test_settings)
        assert reply.text == UNKNOWN_TEXT

    @pytest.mark.asyncio
    async def test_find_runs_recommendations(self, test_repo, test_settings):
        reply = await handle_message("", "find harare zimsec", test_repo, test_settings)
        assert reply.text.startswith("Top 2 matches for Harare:")
        assert reply.text.index("St Eurit International School") < reply.text.index("Highfield Heights College")
        assert reply.media_urls

    @pytest.mark.asyncio
    async def test_find_in_unknown_city(self, test_repo, test_settings):
        reply = await handle_message("", "find gweru", test_repo, test_settings)
        assert reply.text.startswith('No matches found for "Gweru"')
