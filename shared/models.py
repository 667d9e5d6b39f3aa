"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AuthenticatedUser(BaseModel):
    """
    Represents the caller of an authenticated request.

    Built from a verified session token plus the stored account, and made
    available to route handlers via dependency injection.
    """

    id: str = Field(..., description="User ID (UUID)")
    email: EmailStr = Field(..., description="User's email address")
    verified: bool = Field(default=False, description="Whether email is verified")
    token_issued_at: Optional[datetime] = Field(
        None, description="When the session token was issued"
    )

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }
