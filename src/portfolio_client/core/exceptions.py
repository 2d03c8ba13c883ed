"""Application-level exceptions."""

from typing import Iterable, Optional


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class FxRateUnavailableError(AppError):
    """Raised when a required currency has no resolvable rate to the base currency."""

    def __init__(self, currencies: Iterable[str]):
        self.currencies = sorted(set(currencies))
        if len(self.currencies) == 1:
            message = f"Missing FX rate for {self.currencies[0]}."
        else:
            message = "Missing FX rates for selected currencies."
        super().__init__(message, code="FX_RATE_UNAVAILABLE")


# Backend errors


class RemoteError(AppError):
    """Base exception for failures talking to the backend."""

    def __init__(self, message: str, code: str = "REMOTE_ERROR"):
        super().__init__(message, code=code)


class NetworkError(RemoteError):
    """Raised on connectivity failures or timeouts."""

    def __init__(self, message: str):
        super().__init__(f"Network error: {message}", code="NETWORK_ERROR")


class UnauthorizedError(RemoteError):
    """Raised on HTTP 401. The session must be re-established by signing in."""

    def __init__(self, message: str = "Unauthorized - please sign in again"):
        super().__init__(message, code="UNAUTHORIZED")


class ServerError(RemoteError):
    """Raised on any other non-success HTTP status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Server error ({status_code}): {body}", code="SERVER_ERROR")


class DecodeError(RemoteError):
    """Raised when a response does not match the expected shape."""

    def __init__(self, message: str, payload: str = ""):
        self.payload = payload
        super().__init__(f"Failed to decode response: {message}", code="DECODE_ERROR")


class InvalidResponseError(RemoteError):
    """Raised when the backend answers successfully but without the expected rows."""

    def __init__(self, message: str = "Invalid response from server"):
        super().__init__(message, code="INVALID_RESPONSE")


class AuthenticationError(RemoteError):
    """Raised when sign-in or sign-up is rejected."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="AUTH_ERROR")


class PartialSubmissionError(AppError):
    """
    Raised when a multi-leg submission fails after the group was created.

    The group id stays recorded as pending so a reconciliation sweep can
    remove it later.
    """

    def __init__(self, group_id: str, created_ids: list[str], cause: Exception):
        self.group_id = group_id
        self.created_ids = list(created_ids)
        self.cause = cause
        super().__init__(
            f"Transaction was only partially saved (group {group_id}): {cause}",
            code="PARTIAL_SUBMISSION",
        )
