"""
Authentication module data models.

Every token carries a ``purpose`` claim and is decoded into the claims model
for that purpose only. The three claim types share no base class, so a
function typed to take session claims never accepts reset claims.
"""

from enum import Enum
from pydantic import BaseModel, Field


class TokenPurpose(str, Enum):
    """What a token authorizes."""

    SESSION = "session"
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"

    @property
    def audience(self) -> str:
        return f"hackboard:{self.value}"


class SessionClaims(BaseModel):
    """Decoded session (login) token."""

    sub: str = Field(..., description="User ID")
    purpose: TokenPurpose = Field(default=TokenPurpose.SESSION)
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")

    model_config = {"frozen": True}


class EmailVerificationClaims(BaseModel):
    """Decoded email verification token."""

    email: str = Field(..., description="Email address being verified")
    purpose: TokenPurpose = Field(default=TokenPurpose.EMAIL_VERIFICATION)
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")

    model_config = {"frozen": True}


class PasswordResetClaims(BaseModel):
    """Decoded password reset token."""

    sub: str = Field(..., description="User ID")
    fp: str = Field(..., description="Fingerprint of the password hash at issue time")
    purpose: TokenPurpose = Field(default=TokenPurpose.PASSWORD_RESET)
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")

    model_config = {"frozen": True}

