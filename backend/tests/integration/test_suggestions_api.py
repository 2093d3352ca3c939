"""
Integration tests for the Suggestions API endpoint.
"""

from sqlalchemy.exc import OperationalError

from backend.src.services.suggestion_service import SuggestionService


class TestSuggestionsAPI:
    """Tests for GET /api/suggestions."""

    def _seed(self, test_client, sample_event_data):
        names = ["Fluffy", "Flash", "Biscuit", "Fluffy"]
        test_client.post("/api/events", json=[
            sample_event_data(uid=f"pet-{i}", summary=name) for i, name in enumerate(names)
        ])

    def test_matches(self, test_client, sample_event_data):
        self._seed(test_client, sample_event_data)

        response = test_client.get("/api/suggestions", params={"q": "fl"})

        assert response.status_code == 200
        assert response.json() == ["Flash", "Fluffy"]

    def test_short_query(self, test_client, sample_event_data):
        self._seed(test_client, sample_event_data)

        response = test_client.get("/api/suggestions", params={"q": "f"})

        assert response.status_code == 200
        assert response.json() == []

    def test_missing_query(self, test_client):
        response = test_client.get("/api/suggestions")

        assert response.status_code == 200
        assert response.json() == []

    def test_store_failure_is_generic_500(self, test_client, mocker):
        mocker.patch.object(
            SuggestionService, "search_summaries",
            side_effect=OperationalError("SELECT", {}, Exception("db down")),
        )

        response = test_client.get("/api/suggestions", params={"q": "fl"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to fetch suggestions"}
