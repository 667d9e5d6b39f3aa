"""
Client exceptions.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError


class ApiRequestError(ExternalServiceError):
    """The Hackboard API could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message,
            service="hackboard-api",
            code="API_REQUEST_FAILED",
            details={"status_code": status_code},
        )
        self.status_code = status_code
