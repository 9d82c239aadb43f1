"""Error types raised along the gateway pipeline.

Every error carries the HTTP status and the message shown to the caller. The
message is always generic enough not to reveal which internal check failed.
"""

from typing import Dict, Optional

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class CoachError(Exception):
    """Base class for failures converted into JSON error responses."""

    status_code = 500
    public_message = GENERIC_ERROR_MESSAGE

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        retry_after: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.public_message
        self.retry_after = retry_after
        self.headers = dict(headers or {})
        if retry_after is not None:
            self.headers["Retry-After"] = str(retry_after)
        super().__init__(self.message)

    def to_content(self) -> dict:
        content = {"error": self.message}
        if self.retry_after is not None:
            content["retryAfter"] = self.retry_after
        return content


class MethodNotAllowedError(CoachError):
    status_code = 405
    public_message = "Method not allowed"


class PayloadTooLargeError(CoachError):
    status_code = 413
    public_message = "Request body too large"


class InvalidRequestError(CoachError):
    status_code = 400
    public_message = "Invalid request format"


class AuthenticationError(CoachError):
    status_code = 401
    public_message = "Authentication required"


class RateLimitedError(CoachError):
    status_code = 429
    public_message = "Too many requests. Please slow down and try again shortly."


class UpstreamUnavailableError(CoachError):
    status_code = 503
    public_message = "Service temporarily unavailable. Please try again later."


class UpstreamError(CoachError):
    status_code = 500


class ConfigurationError(CoachError):
    """Server misconfiguration. The detail is logged, never returned."""

    status_code = 500

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__()
