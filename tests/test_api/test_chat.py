"""Integration tests for POST /api/chat using FastAPI TestClient."""

from __future__ import annotations

from fastapi.testclient import TestClient


class TestChatEndpoint:
    def test_greeting(self, test_client: TestClient):
        response = test_client.post("/api/chat", json={"sender": "+263771234567", "body": "hi"})
        assert response.status_code == 200
        data = response.json()
        assert data["reply"].startswith("Hi! I'm ZimEduFinder")
        assert data["media_urls"] == []

    def test_empty_body_greets(self, test_client: TestClient):
        response = test_client.post("/api/chat", json={})
        assert response.json()["reply"].startswith("Hi! I'm ZimEduFinder")

    def test_find_returns_matches_and_media(self, test_client: TestClient):
        response = test_client.post("/api/chat", json={"body": "find harare boarding secondary"})
        data = response.json()

        assert data["reply"].startswith("Top 3 matches for Harare:")
        assert "Register: https://zimedufinder.example/register/st-eurit-international-school-harare" in data["reply"]
        assert "https://zimedufinder.example/docs/st-eurit-profile.pdf" in data["media_urls"]

    def test_find_without_pinned_school(self, test_client: TestClient):
        response = test_client.post("/api/chat", json={"body": "find bulawayo zimsec"})
        data = response.json()
        assert "Hillside Grammar School — Bulawayo" in data["reply"]
        assert data["media_urls"] == []

    def test_unknown_command(self, test_client: TestClient):
        response = test_client.post("/api/chat", json={"body": "register me"})
        assert response.json()["reply"] == "Sorry, I didn't understand. Send 'help' for usage."
