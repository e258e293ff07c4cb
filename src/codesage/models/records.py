"""
Stored record models.

Plain dataclasses owned by the session store. Handlers receive these from
the store and convert them to API schemas on the way out.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from codesage.models.analysis import Issue, StructuredExplanation


@dataclass
class User:
    """Registered user (registration is not exposed over the API)."""

    id: int
    username: str
    password: str


@dataclass
class CodeAnalysis:
    """Submitted code paired with its (eventually attached) analysis."""

    id: int
    code: str
    created_at: datetime
    filename: Optional[str] = None
    language: str = "python"
    explanation: Optional[StructuredExplanation] = None
    issues: Optional[list[Issue]] = None

    @property
    def is_analyzed(self) -> bool:
        """Whether oracle results have been attached."""
        return self.explanation is not None


@dataclass
class ChatMessage:
    """A follow-up question and its answer, scoped to one analysis."""

    id: int
    analysis_id: int
    message: str
    response: str
    created_at: datetime

    def as_exchange(self) -> str:
        """Render as a Q/A block for oracle context."""
        return f"Q: {self.message}\nA: {self.response}"
