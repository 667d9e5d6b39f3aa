"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService
    from modules.auth.tokens import TokenManager
    from modules.mail.interfaces import IMailer
    from modules.users.interfaces import IUserRepository, IUserService


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self) -> None:
        self._tokens: "TokenManager | None" = None
        self._mailer: "IMailer | None" = None
        self._user_repository: "IUserRepository | None" = None
        self._user_service: "IUserService | None" = None
        self._auth_service: "IAuthService | None" = None

    @property
    def tokens(self) -> "TokenManager":
        """Get the token manager."""
        if self._tokens is None:
            from modules.auth.tokens import get_token_manager
            self._tokens = get_token_manager()
        return self._tokens

    @property
    def mailer(self) -> "IMailer":
        """Get the mailer instance."""
        if self._mailer is None:
            from modules.mail.service import SmtpMailer
            self._mailer = SmtpMailer()
        return self._mailer

    @property
    def user_repository(self) -> "IUserRepository":
        """Get the user repository instance."""
        if self._user_repository is None:
            from modules.users.repository import get_user_repository
            self._user_repository = get_user_repository()
        return self._user_repository

    @property
    def users(self) -> "IUserService":
        """Get the user workflow service instance."""
        if self._user_service is None:
            from modules.users.service import UserService
            self._user_service = UserService(
                repository=self.user_repository,
                mailer=self.mailer,
                tokens=self.tokens,
            )
        return self._user_service

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                users=self.user_repository,
                tokens=self.tokens,
            )
        return self._auth_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._tokens = None
        self._mailer = None
        self._user_repository = None
        self._user_service = None
        self._auth_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container with new
    service instances. Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_user_service() -> "IUserService":
    """FastAPI dependency for the user workflow service."""
    return get_container().users
