"""Tests for request normalisation in the recommendation schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.schemas.recommend import RecommendRequest
from src.services.filters import SearchPreferences


class TestRecommendRequest:
    def test_absent_city_uses_supplied_default(self):
        request = RecommendRequest()
        assert request.city is None
        assert request.to_preferences("Harare") == SearchPreferences(city="Harare")
        assert request.to_preferences("Bulawayo").city == "Bulawayo"

    def test_payload_aliases(self):
        request = RecommendRequest.model_validate(
            {"learningEnvironment": "Advanced", "type": ["High School"], "type2": ["Boarding"]}
        )
        assert request.learning_environment == "Advanced"
        assert request.phase == ["High School"]
        assert request.boarding_type == ["Boarding"]

    def test_blank_city_means_no_city(self):
        request = RecommendRequest.model_validate({"city": "   "})
        assert request.city is None
        assert request.to_preferences("Harare").city is None

    def test_text_is_trimmed(self):
        request = RecommendRequest.model_validate({"city": "  Bulawayo ", "learning_environment": " "})
        assert request.city == "Bulawayo"
        assert request.learning_environment is None

    def test_comma_string_becomes_list(self):
        request = RecommendRequest.model_validate({"curriculum": "Cambridge, ZIMSEC,", "facilities": "library"})
        assert request.curriculum == ["Cambridge", "ZIMSEC"]
        assert request.facilities == ["library"]

    def test_blank_list_entries_dropped(self):
        request = RecommendRequest.model_validate({"type": ["", " Primary School ", None], "type2": None})
        assert request.phase == ["Primary School"]
        assert request.boarding_type == []

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit):
        with pytest.raises(ValidationError):
            RecommendRequest.model_validate({"limit": limit})
