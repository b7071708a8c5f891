from typing import Optional


class WaitError(Exception):
    """Base class for every terminal outcome of a wait other than success."""

    def __init__(self, message: str, *, description: str = "resource"):
        super().__init__(message)
        self.description = description


class TransportFailureError(WaitError):
    """Raised when fetching the resource state fails. Never retried."""

    def __init__(self, cause: BaseException, *, description: str = "resource"):
        super().__init__(
            f"Fetching {description} failed: {cause!r}", description=description
        )
        self.cause = cause


class MalformedResponseError(WaitError):
    """Raised when a fetched representation lacks a field needed to classify it."""

    def __init__(self, detail: Optional[str], *, description: str = "resource"):
        super().__init__(
            f"Malformed response for {description}: {detail or 'missing field'}",
            description=description,
        )
        self.detail = detail


class OperationFailedError(WaitError):
    """Raised when the resource reports a known failure status."""

    def __init__(self, token: Optional[str], *, description: str = "resource"):
        super().__init__(
            f"Operation on {description} failed with status {token!r}",
            description=description,
        )
        self.token = token


class WaitTimeoutError(WaitError, TimeoutError):
    def __init__(self, timeout: float, attempts: int, *, description: str = "resource"):
        super().__init__(
            f"{description} did not reach a terminal state within {timeout} seconds "
            f"({attempts} polls)",
            description=description,
        )
        self.timeout = timeout
        self.attempts = attempts


class WaitCancelledError(WaitError):
    def __init__(self, *, description: str = "resource"):
        super().__init__(f"Wait for {description} was cancelled", description=description)
