"""
Analysis result models.

Pydantic models describing what the oracle returns for a code analysis.
They double as the validation layer for the model's JSON output and as the
wire format (camelCase) of the explanation and issue fields.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Severity = Literal["error", "warning", "info"]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LineRange(CamelModel):
    """A contiguous span of source lines with a title and explanation."""

    start: int
    end: int
    title: str
    explanation: str


class StructuredExplanation(CamelModel):
    """Explanation of the code split into line ranges.

    Ranges are advisory: they are not checked for coverage, overlap or
    order against the submitted source.
    """

    line_ranges: list[LineRange]


class Issue(CamelModel):
    """A single flagged concern in the code."""

    line: int
    severity: Severity
    type: str
    description: str
    suggestion: str


class AnalysisResult(CamelModel):
    """Complete oracle output for an analysis request."""

    explanation: StructuredExplanation
    issues: list[Issue]
