"""
HTTP client for the CodeSage API.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from codesage.api.schemas import (
    ChatMessageResponse,
    CodeAnalysisResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when the API answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


def check_response(response: httpx.Response) -> None:
    """Raise ApiError carrying the server's message for non-2xx responses."""
    if response.is_success:
        return

    message = response.text or response.reason_phrase
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = body["message"]
    raise ApiError(message, status_code=response.status_code)


class CodeSageClient:
    """
    Asynchronous HTTP client for the CodeSage API.

    Usage:
        async with CodeSageClient("http://localhost:8000") as client:
            analysis = await client.analyze(code="print('hi')")
            message = await client.send_chat_message(analysis.id, "Why?")
    """

    def __init__(
        self,
        server_url: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            server_url: Base URL of the CodeSage server
            timeout: Request timeout in seconds (oracle calls are slow)
            transport: Optional httpx transport (e.g. ASGITransport in tests)
        """
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.server_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CodeSageClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def upload_file(
        self, filename: str, content: bytes, content_type: str = "text/x-python"
    ) -> UploadResponse:
        """Upload source file contents."""
        response = await self.client.post(
            "/api/upload",
            files={"file": (filename, content, content_type)},
        )
        check_response(response)
        return UploadResponse.model_validate(response.json())

    async def upload_path(self, path: Path) -> UploadResponse:
        """Upload a file from disk."""
        return await self.upload_file(path.name, path.read_bytes())

    async def analyze(
        self,
        code: str,
        filename: Optional[str] = None,
        language: str = "python",
    ) -> CodeAnalysisResponse:
        """Submit code for analysis and wait for the result."""
        payload: dict[str, Any] = {"code": code, "language": language}
        if filename is not None:
            payload["filename"] = filename

        response = await self.client.post("/api/analyze", json=payload)
        check_response(response)
        return CodeAnalysisResponse.model_validate(response.json())

    async def get_analysis(self, analysis_id: int) -> CodeAnalysisResponse:
        response = await self.client.get(f"/api/analysis/{analysis_id}")
        check_response(response)
        return CodeAnalysisResponse.model_validate(response.json())

    async def send_chat_message(
        self, analysis_id: int, message: str
    ) -> ChatMessageResponse:
        response = await self.client.post(
            "/api/chat",
            json={"analysisId": analysis_id, "message": message},
        )
        check_response(response)
        return ChatMessageResponse.model_validate(response.json())

    async def get_chat_messages(self, analysis_id: int) -> list[ChatMessageResponse]:
        response = await self.client.get(f"/api/chat/{analysis_id}")
        check_response(response)
        return [ChatMessageResponse.model_validate(item) for item in response.json()]
