"""API exception hierarchy.

All API exceptions inherit from CohortlineAPIError, whose status_code and
error_code are used by the global exception handler to build the error
response.
"""

from cohortline.api.models import ErrorCode


class CohortlineAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidRequestError(CohortlineAPIError):
    """Raised when a request argument is missing, blank or malformed."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST
