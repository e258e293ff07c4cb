"""
Analysis API routes.

Endpoints for analyzing submitted code and retrieving analysis records.
"""

import logging

from fastapi import APIRouter, Depends

from codesage.api.deps import get_oracle, get_store
from codesage.api.schemas import AnalyzeRequest, CodeAnalysisResponse, ErrorResponse
from codesage.exceptions import NotFoundError
from codesage.oracle import CodeOracle
from codesage.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/analyze",
    response_model=CodeAnalysisResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_code(
    request: AnalyzeRequest,
    store: SessionStore = Depends(get_store),
    oracle: CodeOracle = Depends(get_oracle),
) -> CodeAnalysisResponse:
    """
    Analyze submitted code.

    Creates an analysis record, asks the oracle for an explanation and issue
    list, and returns the record with both attached. If the oracle fails the
    record is kept without results and the error is returned.
    """
    analysis = await store.create_code_analysis(
        code=request.code,
        filename=request.filename,
        language=request.language,
    )
    logger.info(f"Analyzing code analysis {analysis.id}")

    result = await oracle.request_analysis(request.code, request.filename)

    updated = await store.attach_analysis_result(
        analysis.id, explanation=result.explanation, issues=result.issues
    )
    logger.info(
        f"Analysis {analysis.id} complete: "
        f"{len(result.explanation.line_ranges)} section(s), {len(result.issues)} issue(s)"
    )
    return CodeAnalysisResponse.model_validate(updated)


@router.get(
    "/analysis/{analysis_id}",
    response_model=CodeAnalysisResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_analysis(
    analysis_id: int,
    store: SessionStore = Depends(get_store),
) -> CodeAnalysisResponse:
    """Get a code analysis by id."""
    analysis = await store.get_code_analysis(analysis_id)
    if analysis is None:
        raise NotFoundError("Analysis", analysis_id)
    return CodeAnalysisResponse.model_validate(analysis)
