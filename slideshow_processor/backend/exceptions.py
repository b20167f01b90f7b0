class BackendError(Exception):
    """Base exception for all backend API errors."""


class BackendNetworkError(BackendError):
    """Raised when the backend cannot be reached or times out."""


class BackendResponseError(BackendError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendSchemaError(BackendError):
    """Raised when a backend response body does not match its schema."""
