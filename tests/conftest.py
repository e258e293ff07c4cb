"""
Pytest configuration and fixtures for CodeSage tests.

Every test gets its own SessionStore and a deterministic stub oracle, so no
test touches the network or shares records with another.
"""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from codesage.api.app import create_app
from codesage.config import Settings
from codesage.exceptions import OracleError
from codesage.models import AnalysisResult
from codesage.oracle import CodeOracle
from codesage.store import SessionStore

PRINT_HI_RESULT = {
    "explanation": {
        "lineRanges": [
            {"start": 1, "end": 1, "title": "Print", "explanation": "Prints hi"}
        ]
    },
    "issues": [],
}


class StubOracle(CodeOracle):
    """Oracle returning canned results and recording every call."""

    def __init__(
        self,
        analysis: Optional[dict] = None,
        answer: str = "It prints hi to the console.",
        error: Optional[Exception] = None,
    ):
        self.analysis = AnalysisResult.model_validate(analysis or PRINT_HI_RESULT)
        self.answer = answer
        self.error = error
        self.analysis_calls: list[tuple[str, Optional[str]]] = []
        self.answer_calls: list[tuple[str, str, Optional[str]]] = []

    @property
    def call_count(self) -> int:
        return len(self.analysis_calls) + len(self.answer_calls)

    async def request_analysis(
        self, code: str, filename: Optional[str] = None
    ) -> AnalysisResult:
        self.analysis_calls.append((code, filename))
        if self.error is not None:
            raise self.error
        return self.analysis

    async def request_answer(
        self, code: str, question: str, context: Optional[str] = None
    ) -> str:
        self.answer_calls.append((code, question, context))
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        log_dir=str(tmp_path / "logs"),
        log_file_enabled=False,
        log_console_enabled=False,
        llm_logging_enabled=False,
    )


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def oracle() -> StubOracle:
    return StubOracle()


@pytest.fixture
def failing_oracle() -> StubOracle:
    return StubOracle(error=OracleError("Failed to analyze code: rate limit exceeded"))


@pytest.fixture
def app(test_settings: Settings, store: SessionStore, oracle: StubOracle):
    """FastAPI app wired to the per-test store and stub oracle."""
    return create_app(config=test_settings, store=store, oracle=oracle)


@pytest.fixture
def api_client(app) -> TestClient:
    """Test client for the app (lifespan not run)."""
    return TestClient(app)
