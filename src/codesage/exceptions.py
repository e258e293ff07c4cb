"""Custom exceptions for CodeSage."""


class CodeSageError(Exception):
    """Base class for errors the API translates into HTTP responses."""


class NotFoundError(CodeSageError):
    """Raised when a referenced record does not exist."""

    def __init__(self, resource: str, resource_id: int | None = None):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class UploadRejectedError(CodeSageError):
    """Raised when an uploaded file fails the type or size checks."""


class OracleError(CodeSageError):
    """Raised when the external model call fails."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class MalformedOracleResponseError(OracleError):
    """Raised when the model output cannot be parsed into the expected shape."""

    def __init__(self, message: str, raw_content: str = "", cause: Exception | None = None):
        self.raw_content = raw_content
        super().__init__(message, cause=cause)
