"""
Users module exceptions.
"""

from typing import Optional

from shared.exceptions import ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when no user matches a lookup."""

    def __init__(self, user_id: Optional[str] = None, email: Optional[str] = None):
        details = {}
        if user_id is not None:
            details["user_id"] = user_id
        if email is not None:
            details["email"] = email
        super().__init__(
            "We couldn't find that user.",
            code="USER_NOT_FOUND",
            details=details,
        )


class EmailAlreadyExistsError(ConflictError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            "An account for this email already exists.",
            code="EMAIL_ALREADY_EXISTS",
            details={"email": email},
        )
