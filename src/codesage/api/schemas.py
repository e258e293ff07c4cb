"""
API schemas for CodeSage.

Pydantic models for request/response validation. JSON keys are camelCase;
request bodies also accept the snake_case field names.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from codesage.models.analysis import CamelModel, Issue, StructuredExplanation

# ===== Requests =====


class AnalyzeRequest(CamelModel):
    """Body of POST /api/analyze."""

    code: str
    filename: Optional[str] = None
    language: str = "python"


class ChatRequest(CamelModel):
    """Body of POST /api/chat."""

    analysis_id: int = Field(strict=True)
    message: str = Field(min_length=1)


# ===== Responses =====


class UploadResponse(CamelModel):
    """Response schema for an uploaded source file."""

    analysis_id: int
    filename: str
    code: str


class CodeAnalysisResponse(CamelModel):
    """Response schema for a code analysis record."""

    id: int
    filename: Optional[str] = None
    code: str
    language: str
    explanation: Optional[StructuredExplanation] = None
    issues: Optional[list[Issue]] = None
    created_at: datetime


class ChatMessageResponse(CamelModel):
    """Response schema for a chat message record."""

    id: int
    analysis_id: int
    message: str
    response: str
    created_at: datetime


class ErrorResponse(CamelModel):
    """Body of every error response."""

    message: str
    errors: Optional[list[dict]] = None


class HealthResponse(CamelModel):
    """Health check payload."""

    status: str
    oracle_provider: str
    analyses: int
    chat_messages: int
