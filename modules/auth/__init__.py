"""
Authentication module.

Handles password hashing, purpose-tagged tokens, and session validation.

Public API:
- IAuthService: Interface for session validation
- TokenManager: Issues and verifies session/verification/reset tokens
- generate_hash / check_password: Password hashing
- Auth exceptions: InvalidTokenError, ExpiredTokenError, etc.
"""

from .interfaces import IAuthService
from .models import (
    TokenPurpose,
    SessionClaims,
    EmailVerificationClaims,
    PasswordResetClaims,
)
from .passwords import generate_hash, check_password
from .tokens import (
    TokenManager,
    SessionToken,
    EmailVerificationToken,
    PasswordResetToken,
    get_token_manager,
)
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    InvalidCredentialsError,
    InsufficientPermissionsError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Models
    "TokenPurpose",
    "SessionClaims",
    "EmailVerificationClaims",
    "PasswordResetClaims",
    # Passwords and tokens
    "generate_hash",
    "check_password",
    "TokenManager",
    "SessionToken",
    "EmailVerificationToken",
    "PasswordResetToken",
    "get_token_manager",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "InsufficientPermissionsError",
]
