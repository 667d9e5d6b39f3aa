"""
Purpose-tagged JWT tokens.

Three kinds of token are issued: session tokens for API access, email
verification tokens, and single-use password reset tokens. Each purpose is
signed with its own key (derived from the configured secret) and carries its
own audience, so a token minted for one purpose fails verification for any
other purpose even before the ``purpose`` claim is compared.
"""

import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, NewType, Optional, Type, TypeVar

import jwt
from pydantic import BaseModel, ValidationError as PydanticValidationError

from shared.config import Settings, get_settings

from .exceptions import ExpiredTokenError, InvalidTokenError, MissingTokenError
from .models import (
    EmailVerificationClaims,
    PasswordResetClaims,
    SessionClaims,
    TokenPurpose,
)

ALGORITHM = "HS256"

SessionToken = NewType("SessionToken", str)
EmailVerificationToken = NewType("EmailVerificationToken", str)
PasswordResetToken = NewType("PasswordResetToken", str)

ClaimsT = TypeVar("ClaimsT", bound=BaseModel)


def password_fingerprint(password_hash: str) -> str:
    """Short digest of a stored password hash, embedded in reset tokens."""
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]


class TokenManager:
    """
    Issues and verifies tokens for each purpose.

    Args:
        secret: Master secret. Per-purpose signing keys are derived from it.
        session_ttl: Lifetime of session tokens.
        verification_ttl: Lifetime of email verification tokens.
        reset_ttl: Lifetime of password reset tokens.
    """

    def __init__(
        self,
        secret: str,
        session_ttl: timedelta = timedelta(days=7),
        verification_ttl: timedelta = timedelta(hours=24),
        reset_ttl: timedelta = timedelta(hours=1),
    ):
        if not secret:
            raise RuntimeError(
                "Token signing secret missing. Set the JWT_SECRET environment variable."
            )
        self._secret = secret
        self._ttls = {
            TokenPurpose.SESSION: session_ttl,
            TokenPurpose.EMAIL_VERIFICATION: verification_ttl,
            TokenPurpose.PASSWORD_RESET: reset_ttl,
        }

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TokenManager":
        settings = settings or get_settings()
        return cls(
            secret=settings.jwt_secret,
            session_ttl=timedelta(minutes=settings.session_token_expire_minutes),
            verification_ttl=timedelta(hours=settings.verification_token_expire_hours),
            reset_ttl=timedelta(minutes=settings.reset_token_expire_minutes),
        )

    # -------------------------------------------------------------------------
    # Issuing
    # -------------------------------------------------------------------------

    def generate_auth_token(self, user_id: str) -> SessionToken:
        """Issue a session token for a user."""
        return SessionToken(self._encode(TokenPurpose.SESSION, {"sub": user_id}))

    def generate_email_verification_token(self, email: str) -> EmailVerificationToken:
        """Issue a token proving control of ``email``."""
        return EmailVerificationToken(
            self._encode(TokenPurpose.EMAIL_VERIFICATION, {"email": email.lower()})
        )

    def generate_temp_auth_token(self, user_id: str, password_hash: str) -> PasswordResetToken:
        """
        Issue a password reset token.

        The token is bound to the current password hash, so it stops
        verifying once the password has been changed.
        """
        return PasswordResetToken(
            self._encode(
                TokenPurpose.PASSWORD_RESET,
                {"sub": user_id, "fp": password_fingerprint(password_hash)},
            )
        )

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def verify_auth_token(self, token: Optional[str]) -> SessionClaims:
        return self._decode(TokenPurpose.SESSION, token, SessionClaims)

    def verify_email_verification_token(self, token: Optional[str]) -> EmailVerificationClaims:
        return self._decode(TokenPurpose.EMAIL_VERIFICATION, token, EmailVerificationClaims)

    def verify_temp_auth_token(self, token: Optional[str]) -> PasswordResetClaims:
        return self._decode(TokenPurpose.PASSWORD_RESET, token, PasswordResetClaims)

    @staticmethod
    def matches_password(claims: PasswordResetClaims, password_hash: str) -> bool:
        """Whether a reset token was issued against this password hash."""
        return hmac.compare_digest(claims.fp, password_fingerprint(password_hash))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _key(self, purpose: TokenPurpose) -> str:
        return hmac.new(
            self._secret.encode("utf-8"),
            purpose.value.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _encode(self, purpose: TokenPurpose, claims: dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "purpose": purpose.value,
            "aud": purpose.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttls[purpose]).timestamp()),
        }
        return jwt.encode(payload, self._key(purpose), algorithm=ALGORITHM)

    def _decode(
        self,
        purpose: TokenPurpose,
        token: Optional[str],
        claims_model: Type[ClaimsT],
    ) -> ClaimsT:
        if not token:
            raise MissingTokenError()

        try:
            payload = jwt.decode(
                token,
                self._key(purpose),
                algorithms=[ALGORITHM],
                audience=purpose.audience,
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        if payload.get("purpose") != purpose.value:
            raise InvalidTokenError("Token was not issued for this purpose")

        try:
            return claims_model(**payload)
        except PydanticValidationError:
            raise InvalidTokenError("Token is missing required claims")


# Module-level instance getter
_token_manager: Optional[TokenManager] = None


def get_token_manager() -> TokenManager:
    """Get the token manager singleton, built from settings."""
    global _token_manager
    if _token_manager is None:
        _token_manager = TokenManager.from_settings()
    return _token_manager


def reset_token_manager() -> None:
    """Reset the token manager singleton (for testing)."""
    global _token_manager
    _token_manager = None
