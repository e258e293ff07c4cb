"""
Upload API routes.

Endpoint for uploading a Python source file as a new code analysis.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from codesage.api.deps import get_settings, get_store
from codesage.api.schemas import ErrorResponse, UploadResponse
from codesage.config import Settings
from codesage.exceptions import UploadRejectedError
from codesage.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSION = ".py"
ALLOWED_CONTENT_TYPE = "text/plain"


def _is_allowed_type(upload: UploadFile) -> bool:
    filename = upload.filename or ""
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    return filename.endswith(ALLOWED_EXTENSION) or content_type == ALLOWED_CONTENT_TYPE


async def read_limited(upload: UploadFile, max_bytes: int) -> bytes:
    """
    Read an upload, refusing anything larger than max_bytes.

    The declared size is checked before any bytes are read; the bounded
    read covers parts that arrive without one.

    Raises:
        UploadRejectedError: If the file exceeds max_bytes
    """
    too_large = UploadRejectedError(
        f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB."
    )
    if upload.size is not None and upload.size > max_bytes:
        raise too_large

    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise too_large
    return content


@router.post(
    "", response_model=UploadResponse, responses={400: {"model": ErrorResponse}}
)
async def upload_source_file(
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_store),
    config: Settings = Depends(get_settings),
) -> UploadResponse:
    """
    Upload a Python source file.

    Accepts one .py (or text/plain) file up to the configured size limit,
    stores it as a new code analysis and returns its id and contents. The
    oracle is not called; analysis happens through POST /api/analyze.
    """
    if not _is_allowed_type(file):
        logger.info(
            f"Rejected upload {file.filename!r} with content type {file.content_type!r}"
        )
        raise UploadRejectedError("Only Python files (.py) are allowed")

    content = await read_limited(file, config.max_upload_bytes)
    code = content.decode("utf-8", errors="replace")
    filename = file.filename or "untitled.py"

    analysis = await store.create_code_analysis(
        code=code, filename=filename, language="python"
    )
    logger.info(f"Uploaded {filename} as analysis {analysis.id} ({len(content)} bytes)")

    return UploadResponse(analysis_id=analysis.id, filename=filename, code=code)
