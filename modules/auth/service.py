"""
Authentication service implementation.

Validates session tokens and resolves them to stored accounts.
"""

from datetime import datetime, timezone
from typing import Optional

from shared.models import AuthenticatedUser
from modules.users.interfaces import IUserRepository

from .interfaces import IAuthService
from .exceptions import InvalidTokenError
from .tokens import TokenManager, get_token_manager


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Session tokens only carry the user ID; the account itself is loaded from
    the credential store so that deleted accounts stop authenticating.
    """

    def __init__(
        self,
        users: IUserRepository,
        tokens: Optional[TokenManager] = None,
    ):
        self._users = users
        self._tokens = tokens or get_token_manager()

    async def validate_token(self, token: Optional[str]) -> AuthenticatedUser:
        claims = self._tokens.verify_auth_token(token)

        user = self._users.find_by_id(claims.sub)
        if user is None:
            raise InvalidTokenError("Account no longer exists")

        return AuthenticatedUser(
            id=user.id,
            email=user.email,
            verified=user.verified,
            token_issued_at=datetime.fromtimestamp(claims.iat, tz=timezone.utc),
        )
