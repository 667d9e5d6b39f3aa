"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
This enables testing with mocks.
"""

from typing import Protocol, Optional, runtime_checkable

from shared.models import AuthenticatedUser


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to the API layer. Implementations must provide all these methods.
    """

    async def validate_token(self, token: Optional[str]) -> AuthenticatedUser:
        """
        Validate a session token and return the authenticated user.

        Args:
            token: Session token issued at login or registration

        Returns:
            AuthenticatedUser for the account the token belongs to

        Raises:
            MissingTokenError: If no token is given
            ExpiredTokenError: If the token has expired
            InvalidTokenError: If the token is malformed, was issued for
                another purpose, or its account no longer exists
        """
        ...
