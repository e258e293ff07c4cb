"""Client-side access to the CodeSage API."""

from codesage.client.api import ApiError, CodeSageClient
from codesage.client.session import (
    Notification,
    OperationSlot,
    OperationStatus,
    SessionController,
)

__all__ = [
    "ApiError",
    "CodeSageClient",
    "Notification",
    "OperationSlot",
    "OperationStatus",
    "SessionController",
]
