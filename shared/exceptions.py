"""
Error hierarchy for Hackboard.

Services raise these instead of HTTP errors. ``api.errors`` picks the status
code from the base class, so a new module error only has to choose which
base it extends.
"""

from typing import Optional, Any


class HackboardError(Exception):
    """
    Root of every error the account service raises on purpose.

    ``message`` is shown to the user as is. ``code`` is a stable identifier
    for clients and defaults to the class name.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Body of the JSON error response."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(HackboardError):
    """No account (or other record) matched the lookup."""


class ValidationError(HackboardError):
    """Bad input, rejected before the credential store is touched."""


class ConflictError(HackboardError):
    """Write rejected because it collides with existing data."""


class AuthenticationError(HackboardError):
    """The caller could not be identified: bad credentials or token."""


class AuthorizationError(HackboardError):
    """The caller is known but may not act on this account."""


class ExternalServiceError(HackboardError):
    """A collaborator outside the process (SMTP, the API for clients) failed."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
