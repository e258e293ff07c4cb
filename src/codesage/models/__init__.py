"""Data models for CodeSage."""

from codesage.models.analysis import (
    AnalysisResult,
    CamelModel,
    Issue,
    LineRange,
    Severity,
    StructuredExplanation,
)
from codesage.models.records import ChatMessage, CodeAnalysis, User

__all__ = [
    "AnalysisResult",
    "CamelModel",
    "ChatMessage",
    "CodeAnalysis",
    "Issue",
    "LineRange",
    "Severity",
    "StructuredExplanation",
    "User",
]
