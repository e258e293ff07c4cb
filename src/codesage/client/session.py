"""
Client session controller.

Tracks what a user is working on (code buffer, filename, active analysis)
and runs upload, analyze and chat operations against the API. Each
operation has its own slot with a pending/success/error status so a UI can
show progress for each one independently.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar

import httpx

from codesage.api.schemas import (
    ChatMessageResponse,
    CodeAnalysisResponse,
    UploadResponse,
)
from codesage.client.api import ApiError, CodeSageClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class OperationSlot(Generic[T]):
    """State of one asynchronous operation."""

    name: str
    status: OperationStatus = OperationStatus.IDLE
    result: Optional[T] = None
    error: Optional[str] = None

    def start(self) -> None:
        self.status = OperationStatus.PENDING
        self.error = None

    def succeed(self, result: T) -> None:
        self.status = OperationStatus.SUCCESS
        self.result = result
        self.error = None

    def fail(self, error: str) -> None:
        self.status = OperationStatus.ERROR
        self.error = error


@dataclass
class Notification:
    """A transient user-facing message."""

    title: str
    description: str = ""
    destructive: bool = False


Notifier = Callable[[Notification], None]


def _log_notification(notification: Notification) -> None:
    level = logging.WARNING if notification.destructive else logging.INFO
    logger.log(level, f"{notification.title}: {notification.description}")


@dataclass
class SessionController:
    """
    State machine behind a code analysis session.

    Usage:
        async with CodeSageClient(url) as client:
            session = SessionController(client, notify=print)
            await session.upload_path(Path("script.py"))
            await session.analyze()
            await session.send_message("What does main() do?")
            for message in session.chat_messages:
                ...

    Operations never raise API errors; failures are recorded on the slot and
    sent to the notifier.
    """

    client: CodeSageClient
    notify: Notifier = _log_notification
    code: str = ""
    filename: Optional[str] = None
    analysis_id: Optional[int] = None
    analysis: Optional[CodeAnalysisResponse] = None
    chat_messages: list[ChatMessageResponse] = field(default_factory=list)

    upload: OperationSlot[UploadResponse] = field(
        default_factory=lambda: OperationSlot("upload")
    )
    analyze_op: OperationSlot[CodeAnalysisResponse] = field(
        default_factory=lambda: OperationSlot("analyze")
    )
    chat: OperationSlot[ChatMessageResponse] = field(
        default_factory=lambda: OperationSlot("chat")
    )
    history: OperationSlot[list[ChatMessageResponse]] = field(
        default_factory=lambda: OperationSlot("history")
    )

    def set_code(self, code: str, filename: Optional[str] = None) -> None:
        """Replace the code buffer (e.g. after the user edits it)."""
        self.code = code
        if filename is not None:
            self.filename = filename

    async def _run(
        self,
        slot: OperationSlot[T],
        operation: Callable[[], Any],
        failure_title: str,
    ) -> Optional[T]:
        slot.start()
        try:
            result = await operation()
        except (ApiError, httpx.HTTPError, OSError) as e:
            slot.fail(str(e))
            self.notify(Notification(failure_title, str(e), destructive=True))
            return None
        slot.succeed(result)
        return result

    async def upload_file(self, filename: str, content: bytes) -> Optional[UploadResponse]:
        """Upload a file and load it into the code buffer."""
        result = await self._run(
            self.upload,
            lambda: self.client.upload_file(filename, content),
            "Upload failed",
        )
        if result is not None:
            self.code = result.code
            self.filename = result.filename
            self.notify(
                Notification(
                    "File uploaded successfully",
                    f"{result.filename} is ready for analysis",
                )
            )
        return result

    async def upload_path(self, path: Path) -> Optional[UploadResponse]:
        try:
            content = path.read_bytes()
        except OSError as e:
            self.upload.fail(str(e))
            self.notify(Notification("Upload failed", str(e), destructive=True))
            return None
        return await self.upload_file(path.name, content)

    async def analyze(self) -> Optional[CodeAnalysisResponse]:
        """Analyze the current code buffer and make it the active analysis."""
        if not self.code.strip():
            self.notify(
                Notification(
                    "No code to analyze",
                    "Please paste or upload some Python code first",
                    destructive=True,
                )
            )
            return None

        result = await self._run(
            self.analyze_op,
            lambda: self.client.analyze(
                code=self.code.strip(), filename=self.filename
            ),
            "Analysis failed",
        )
        if result is not None:
            self.analysis = result
            self.notify(
                Notification(
                    "Analysis complete", "Your code has been analyzed successfully"
                )
            )
            await self.set_active_analysis(result.id)
        return result

    async def set_active_analysis(self, analysis_id: int) -> None:
        """Switch the active analysis and load its chat thread."""
        if analysis_id != self.analysis_id:
            self.chat_messages = []
        self.analysis_id = analysis_id
        await self.refresh_chat()

    async def refresh_chat(self) -> list[ChatMessageResponse]:
        """Re-fetch the chat thread of the active analysis."""
        if self.analysis_id is None:
            return self.chat_messages

        analysis_id = self.analysis_id
        messages = await self._run(
            self.history,
            lambda: self.client.get_chat_messages(analysis_id),
            "Failed to load chat messages",
        )
        # A slower fetch for a previous analysis must not overwrite the thread
        if messages is not None and analysis_id == self.analysis_id:
            self.chat_messages = messages
        return self.chat_messages

    async def send_message(self, message: str) -> Optional[ChatMessageResponse]:
        """
        Ask a question about the active analysis.

        The thread is re-fetched after the answer arrives; nothing is
        appended locally before that.
        """
        if not message.strip():
            return None

        if self.analysis_id is None:
            self.notify(
                Notification(
                    "No analysis available",
                    "Please analyze your code first before asking questions",
                    destructive=True,
                )
            )
            return None

        analysis_id = self.analysis_id
        result = await self._run(
            self.chat,
            lambda: self.client.send_chat_message(analysis_id, message.strip()),
            "Failed to send message",
        )
        if result is not None:
            await self.refresh_chat()
        return result
