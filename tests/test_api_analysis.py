"""
Tests for the analysis API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from codesage.api.app import create_app
from codesage.store import SessionStore


@pytest.fixture
def failing_client(test_settings, store: SessionStore, failing_oracle) -> TestClient:
    return TestClient(create_app(config=test_settings, store=store, oracle=failing_oracle))


class TestAnalyzeEndpoint:
    """Tests for POST /api/analyze."""

    def test_analyze_print_hi(self, api_client: TestClient):
        response = api_client.post("/api/analyze", json={"code": "print('hi')"})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 1
        assert data["code"] == "print('hi')"
        assert data["language"] == "python"
        assert data["filename"] is None
        assert data["explanation"] == {
            "lineRanges": [
                {"start": 1, "end": 1, "title": "Print", "explanation": "Prints hi"}
            ]
        }
        assert data["issues"] == []
        assert "createdAt" in data

    def test_analyze_passes_code_and_filename_to_oracle(
        self, api_client: TestClient, oracle
    ):
        api_client.post(
            "/api/analyze",
            json={"code": "x = 1", "filename": "x.py", "language": "python"},
        )

        assert oracle.analysis_calls == [("x = 1", "x.py")]

    def test_analyze_result_is_stored(self, api_client: TestClient):
        created = api_client.post("/api/analyze", json={"code": "print('hi')"}).json()

        fetched = api_client.get(f"/api/analysis/{created['id']}").json()

        assert fetched == created

    def test_analyze_missing_code(self, api_client: TestClient, oracle):
        response = api_client.post("/api/analyze", json={"filename": "a.py"})

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Invalid request data"
        assert data["errors"][0]["loc"] == ["body", "code"]
        assert oracle.call_count == 0

    def test_analyze_wrong_type(self, api_client: TestClient, store: SessionStore):
        response = api_client.post("/api/analyze", json={"code": 123})

        assert response.status_code == 400
        assert store.stats()["analyses"] == 0

    def test_oracle_failure_keeps_unanalyzed_record(
        self, failing_client: TestClient, store: SessionStore
    ):
        response = failing_client.post("/api/analyze", json={"code": "print('hi')"})

        assert response.status_code == 500
        assert response.json() == {
            "message": "Failed to analyze code: rate limit exceeded"
        }

        assert store.stats()["analyses"] == 1
        orphan = failing_client.get("/api/analysis/1").json()
        assert orphan["code"] == "print('hi')"
        assert orphan["explanation"] is None
        assert orphan["issues"] is None

    def test_each_analyze_creates_new_record(self, api_client: TestClient):
        first = api_client.post("/api/analyze", json={"code": "x = 1"}).json()
        second = api_client.post("/api/analyze", json={"code": "x = 1"}).json()

        assert second["id"] == first["id"] + 1


class TestGetAnalysisEndpoint:
    """Tests for GET /api/analysis/{id}."""

    def test_get_unknown_analysis(self, api_client: TestClient):
        response = api_client.get("/api/analysis/999")

        assert response.status_code == 404
        assert response.json() == {"message": "Analysis not found"}

    def test_get_uploaded_analysis(self, api_client: TestClient):
        upload = api_client.post(
            "/api/upload", files={"file": ("a.py", b"x = 1\n", "text/x-python")}
        ).json()

        response = api_client.get(f"/api/analysis/{upload['analysisId']}")

        assert response.status_code == 200
        data = response.json()
        assert data["filename"] == "a.py"
        assert data["explanation"] is None
        assert data["issues"] is None

    def test_get_non_integer_id(self, api_client: TestClient):
        response = api_client.get("/api/analysis/abc")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"
