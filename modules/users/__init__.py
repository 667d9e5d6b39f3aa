"""
Users module.

The user account workflow: registration, login, verification, password
reset and change, profile and submission updates, listing.

Public API:
- IUserService / IUserRepository: Interfaces
- User, UserPublic, Profile, Submission: Models
- Users exceptions: UserNotFoundError, EmailAlreadyExistsError
"""

from .interfaces import IUserRepository, IUserService
from .models import (
    User,
    UserPublic,
    UserStatus,
    Profile,
    Submission,
    AuthResult,
    UserPage,
    MessageResult,
)
from .exceptions import UserNotFoundError, EmailAlreadyExistsError

__all__ = [
    # Interfaces
    "IUserRepository",
    "IUserService",
    # Models
    "User",
    "UserPublic",
    "UserStatus",
    "Profile",
    "Submission",
    "AuthResult",
    "UserPage",
    "MessageResult",
    # Exceptions
    "UserNotFoundError",
    "EmailAlreadyExistsError",
]
