"""
Tests for the upload API endpoint.
"""

import pytest
from fastapi.testclient import TestClient

from codesage.api.app import create_app
from codesage.config import Settings
from codesage.store import SessionStore

SAMPLE_CODE = b"def greet(name):\n    return f'hello {name}'\n"


@pytest.fixture
def small_limit_client(tmp_path, store: SessionStore, oracle) -> TestClient:
    """Client whose app only accepts uploads up to 1 KiB."""
    config = Settings(
        _env_file=None,
        log_dir=str(tmp_path / "logs"),
        log_file_enabled=False,
        log_console_enabled=False,
        max_upload_bytes=1024,
    )
    return TestClient(create_app(config=config, store=store, oracle=oracle))


class TestUploadEndpoint:
    """Tests for POST /api/upload."""

    def test_upload_python_file(self, api_client: TestClient, store: SessionStore):
        response = api_client.post(
            "/api/upload",
            files={"file": ("greet.py", SAMPLE_CODE, "text/x-python")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["analysisId"] == 1
        assert data["filename"] == "greet.py"
        assert data["code"] == SAMPLE_CODE.decode()

    def test_upload_creates_unanalyzed_record(self, api_client: TestClient):
        response = api_client.post(
            "/api/upload",
            files={"file": ("greet.py", SAMPLE_CODE, "application/octet-stream")},
        )

        analysis = api_client.get(f"/api/analysis/{response.json()['analysisId']}").json()
        assert analysis["filename"] == "greet.py"
        assert analysis["language"] == "python"
        assert analysis["explanation"] is None
        assert analysis["issues"] is None

    def test_upload_does_not_call_oracle(self, api_client: TestClient, oracle):
        api_client.post(
            "/api/upload", files={"file": ("greet.py", SAMPLE_CODE, "text/x-python")}
        )

        assert oracle.call_count == 0

    def test_upload_text_plain_without_py_extension(self, api_client: TestClient):
        response = api_client.post(
            "/api/upload", files={"file": ("snippet.txt", b"x = 1\n", "text/plain")}
        )

        assert response.status_code == 200
        assert response.json()["filename"] == "snippet.txt"

    def test_upload_wrong_type_rejected(
        self, api_client: TestClient, store: SessionStore
    ):
        response = api_client.post(
            "/api/upload",
            files={"file": ("script.js", b"console.log('hi')", "application/javascript")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only Python files (.py) are allowed"
        assert store.stats()["analyses"] == 0

    def test_upload_missing_file(self, api_client: TestClient):
        response = api_client.post("/api/upload")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"

    def test_upload_too_large_rejected(
        self, small_limit_client: TestClient, store: SessionStore
    ):
        response = small_limit_client.post(
            "/api/upload",
            files={"file": ("big.py", b"#" * 2048, "text/x-python")},
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("File too large")
        assert store.stats()["analyses"] == 0

    def test_upload_at_limit_accepted(self, small_limit_client: TestClient):
        response = small_limit_client.post(
            "/api/upload",
            files={"file": ("edge.py", b"#" * 1024, "text/x-python")},
        )

        assert response.status_code == 200

    def test_upload_invalid_utf8_is_replaced(self, api_client: TestClient):
        response = api_client.post(
            "/api/upload",
            files={"file": ("latin.py", b"name = '\xe9'\n", "text/x-python")},
        )

        assert response.status_code == 200
        assert "\ufffd" in response.json()["code"]

    def test_default_limit_message(self, api_client: TestClient, test_settings):
        too_big = b"#" * (test_settings.max_upload_bytes + 1)

        response = api_client.post(
            "/api/upload", files={"file": ("huge.py", too_big, "text/x-python")}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File too large. Maximum size is 5 MB."
