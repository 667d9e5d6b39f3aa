"""
Account API endpoints.

Two routers: ``auth_router`` for registration, login, verification and
passwords, and ``router`` for reading and updating users. Failures are
HackboardErrors, turned into JSON responses by the app's error handler.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from api.dependencies import get_user_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser
from modules.auth.exceptions import InsufficientPermissionsError

from .interfaces import IUserService
from .models import (
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    MessageResult,
    PasswordResetCompleteRequest,
    PasswordResetRequest,
    RegisterRequest,
    Submission,
    UserPage,
    UserPublic,
)

auth_router = APIRouter()
router = APIRouter()


def _require_self(user: AuthenticatedUser, user_id: str) -> None:
    if user.id != user_id:
        raise InsufficientPermissionsError(user.id, user_id)


# =============================================================================
# /api/auth
# =============================================================================


@auth_router.post("/register", response_model=AuthResult, status_code=201)
async def register(
    request: RegisterRequest,
    service: IUserService = Depends(get_user_service),
) -> AuthResult:
    """
    Create an account.

    Sends a verification email and returns a session token right away;
    the account stays unverified until the emailed link is followed.
    """
    return await service.create_user(request.email, request.password)


@auth_router.post("/login", response_model=AuthResult)
async def login(
    request: LoginRequest,
    service: IUserService = Depends(get_user_service),
) -> AuthResult:
    """
    Log in with email and password, or resume a session with a token.
    """
    if request.token:
        return await service.login_with_token(request.token)
    return await service.login_with_password(request.email, request.password)


@auth_router.get("/verify/{token}", response_model=UserPublic)
async def verify_email(
    token: str,
    service: IUserService = Depends(get_user_service),
) -> UserPublic:
    return await service.verify_by_token(token)


@auth_router.post("/verify/resend", response_model=MessageResult)
async def resend_verification(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> MessageResult:
    await service.send_verification_email_by_id(user.id)
    return MessageResult(message="Verification email sent.")


@auth_router.post("/reset", response_model=MessageResult)
async def request_password_reset(
    request: PasswordResetRequest,
    service: IUserService = Depends(get_user_service),
) -> MessageResult:
    """
    Send a password reset link.

    Responds the same way whether or not the email has an account.
    """
    return await service.send_password_reset_email(request.email)


@auth_router.post("/reset/password", response_model=MessageResult)
async def reset_password(
    request: PasswordResetCompleteRequest,
    service: IUserService = Depends(get_user_service),
) -> MessageResult:
    return await service.reset_password(request.token, request.password)


@auth_router.put("/password", response_model=UserPublic)
async def change_password(
    request: ChangePasswordRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserPublic:
    return await service.change_password(user.id, request.old_password, request.new_password)


# =============================================================================
# /api/users
# =============================================================================


@router.get("", response_model=UserPage)
async def list_users(
    page: int = Query(default=0, ge=0, description="Page index (0-indexed)"),
    size: int = Query(default=50, ge=1, le=200, description="Users per page"),
    text: str = Query(default="", max_length=100, description="Search text"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserPage:
    """
    List users sorted by profile name.

    ``text`` matches email, profile name or team code, ignoring case.
    """
    return await service.get_page(page, size, text)


@router.get("/me", response_model=UserPublic)
async def get_me(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserPublic:
    return await service.get_by_id(user.id)


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(
    user_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserPublic:
    return await service.get_by_id(user_id)


@router.put("/{user_id}/profile", response_model=UserPublic)
async def update_profile(
    user_id: str,
    profile: dict[str, Any] = Body(...),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserPublic:
    """
    Replace the caller's profile.

    Only verified users can update their profile.
    """
    _require_self(user, user_id)
    return await service.update_profile_by_id(user_id, profile)


@router.put("/{user_id}/submission", response_model=UserPublic)
async def update_submission(
    user_id: str,
    submission: Submission,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserPublic:
    """
    Replace the caller's submission.
    """
    _require_self(user, user_id)
    return await service.push_submission_by_id(user_id, submission)
