"""
Users module data models.

``User`` is the stored account including its password hash. Everything that
leaves the service is a ``UserPublic``, which has no password field at all.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field


class Profile(BaseModel):
    """Participant profile filled in after verification."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    school: Optional[str] = Field(None, max_length=120, description="School or company")
    graduation_year: Optional[int] = Field(None, ge=1900, le=2100)
    description: Optional[str] = Field(None, max_length=300, description="Short bio")
    essay: Optional[str] = Field(None, max_length=1500, description="Why are you joining?")

    model_config = {"extra": "forbid"}


class UserStatus(BaseModel):
    """Progress flags for an account."""

    completed_profile: bool = Field(default=False)


class Submission(BaseModel):
    """A user's code submission. Each user holds at most one."""

    code: str = Field(..., description="Submitted source code or repository link")
    title: str = Field(..., max_length=200, description="Submission title")


class UserPublic(BaseModel):
    """A user record with the password hash removed."""

    id: str = Field(..., description="User ID (UUID)")
    email: str = Field(..., description="Lowercased email address")
    verified: bool = Field(default=False, description="Whether email is verified")
    profile: Optional[Profile] = Field(None)
    status: UserStatus = Field(default_factory=UserStatus)
    team_code: Optional[str] = Field(None, description="Team the user belongs to")
    code: Optional[str] = Field(None, description="Current submission code")
    title: Optional[str] = Field(None, description="Current submission title")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Account creation time",
    )
    last_updated: Optional[datetime] = Field(None, description="Last profile update")


class User(UserPublic):
    """A stored user, including the password hash."""

    password: str = Field(..., repr=False, description="Salted password hash")

    def sanitized(self) -> UserPublic:
        """Copy of this user without the password hash."""
        return UserPublic(**self.model_dump(exclude={"password"}))


# =============================================================================
# Results
# =============================================================================


class AuthResult(BaseModel):
    """Session token plus the user it belongs to."""

    token: str
    user: UserPublic


class UserPage(BaseModel):
    """One page of users."""

    users: list[UserPublic]
    page: int = Field(..., description="Page index (0-indexed)")
    size: int = Field(..., description="Page size")
    total_pages: int = Field(..., description="ceil(matching users / size)")


class MessageResult(BaseModel):
    """Plain acknowledgement."""

    message: str


# =============================================================================
# Requests
# =============================================================================


class RegisterRequest(BaseModel):
    """Request to create an account."""

    email: str
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Login with either email and password, or an existing session token."""

    email: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None


class PasswordResetRequest(BaseModel):
    """Request a password reset email."""

    email: str


class PasswordResetCompleteRequest(BaseModel):
    """Set a new password using a reset token."""

    token: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Change password while logged in."""

    old_password: Optional[str] = None
    new_password: Optional[str] = None
