"""
User account workflow.

Registration, login, email verification, password reset and change,
profile and submission updates, and listing. Each operation validates its
input first, then reads and writes the credential store, then triggers any
email. The first failing step raises and nothing after it runs.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Awaitable, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import ValidationError as PydanticValidationError

from shared.config import get_settings
from shared.exceptions import ValidationError
from modules.auth.exceptions import InvalidCredentialsError, InvalidTokenError
from modules.auth.passwords import check_password, dummy_verify, generate_hash
from modules.auth.tokens import TokenManager, get_token_manager
from modules.mail.exceptions import MailDeliveryError
from modules.mail.interfaces import IMailer

from .exceptions import EmailAlreadyExistsError, UserNotFoundError
from .interfaces import IUserRepository, IUserService
from .models import (
    AuthResult,
    MessageResult,
    Profile,
    Submission,
    UserPage,
    UserPublic,
)

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = (
    "If an account exists for that email, a password reset link has been sent."
)
RESET_COMPLETE_MESSAGE = "Password successfully reset!"


class UserService(IUserService):
    """
    User workflow service.

    Args:
        repository: Credential store
        mailer: Sends verification/reset/notification emails
        tokens: Token issuer; defaults to the settings-backed singleton
        min_password_length: Shortest accepted password
    """

    def __init__(
        self,
        repository: IUserRepository,
        mailer: IMailer,
        tokens: Optional[TokenManager] = None,
        min_password_length: Optional[int] = None,
    ):
        self._users = repository
        self._mailer = mailer
        self._tokens = tokens or get_token_manager()
        self._min_password_length = (
            min_password_length
            if min_password_length is not None
            else get_settings().min_password_length
        )

    # -------------------------------------------------------------------------
    # Registration and login
    # -------------------------------------------------------------------------

    async def create_user(self, email: Any, password: Optional[str]) -> AuthResult:
        """Create an account, send its verification email, and log it in."""
        if not isinstance(email, str):
            raise ValidationError("Email must be a string.")
        if not self._is_email(email):
            raise ValidationError("Invalid email")
        self._check_password_length(password)

        email = email.lower()

        if self._users.find_one_by_email(email) is not None:
            raise EmailAlreadyExistsError(email)

        user = self._users.create({
            "email": email,
            "password": generate_hash(password),
            "verified": False,
        })
        logger.info("Registered user %s", user.id)

        token = self._tokens.generate_auth_token(user.id)
        verification_token = self._tokens.generate_email_verification_token(user.email)
        await self._notify(self._mailer.send_verification_email(user.email, verification_token))

        return AuthResult(token=token, user=user.sanitized())

    async def login_with_password(self, email: Any, password: Optional[str]) -> AuthResult:
        if not password:
            raise ValidationError("Please enter a password")
        if not self._is_email(email):
            raise ValidationError("Invalid email")

        user = self._users.find_one_by_email(email)
        if user is None:
            dummy_verify()
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()
        if not check_password(password, user.password):
            logger.info("Login failed: wrong password for user %s", user.id)
            raise InvalidCredentialsError()

        token = self._tokens.generate_auth_token(user.id)
        return AuthResult(token=token, user=user.sanitized())

    async def login_with_token(self, token: Optional[str]) -> AuthResult:
        """Resolve an existing session token. No new token is issued."""
        user = await self.get_by_token(token)
        return AuthResult(token=token, user=user)

    async def get_by_token(self, token: Optional[str]) -> UserPublic:
        claims = self._tokens.verify_auth_token(token)
        return await self.get_by_id(claims.sub)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_all(self) -> list[UserPublic]:
        """Every user. Large; prefer get_page."""
        return [user.sanitized() for user in self._users.find_all()]

    async def get_page(self, page: int, size: int, text: str = "") -> UserPage:
        """
        One page of users sorted by profile name.

        Args:
            page: Page index, starting at 0
            size: Users per page
            text: Optional case-insensitive search over email, profile
                name and team code

        Returns:
            UserPage whose total_pages counts only matching users
        """
        if size < 1:
            raise ValidationError("Page size must be at least 1.")
        if page < 0:
            raise ValidationError("Page must not be negative.")
        text = (text or "").strip()

        users = self._users.find(text, page, size)
        count = self._users.count(text)

        return UserPage(
            users=[user.sanitized() for user in users],
            page=page,
            size=size,
            total_pages=math.ceil(count / size),
        )

    async def get_by_id(self, user_id: str) -> UserPublic:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return user.sanitized()

    # -------------------------------------------------------------------------
    # Profile and submission
    # -------------------------------------------------------------------------

    async def update_profile_by_id(self, user_id: str, profile: Any) -> UserPublic:
        """
        Store a profile and mark it completed.

        Only verified users can update their profile; for anyone else the
        update matches nothing and UserNotFoundError is raised.
        """
        try:
            validated = Profile.model_validate(profile)
        except PydanticValidationError:
            raise ValidationError("invalid profile")

        user = self._users.find_one_and_update(
            {"id": user_id, "verified": True},
            {
                "profile": validated.model_dump(),
                "status": {"completed_profile": True},
                "last_updated": datetime.now(timezone.utc).isoformat(),
            },
        )
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return user.sanitized()

    async def push_submission_by_id(self, user_id: str, submission: Submission) -> UserPublic:
        """Replace the user's submission. The previous one is discarded."""
        user = self._users.find_one_and_update(
            {"id": user_id},
            {"code": submission.code, "title": submission.title},
        )
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        logger.info("User %s pushed submission %r", user_id, submission.title)
        return user.sanitized()

    # -------------------------------------------------------------------------
    # Email verification
    # -------------------------------------------------------------------------

    async def verify_by_token(self, token: Optional[str]) -> UserPublic:
        claims = self._tokens.verify_email_verification_token(token)

        user = self._users.find_one_by_email(claims.email)
        if user is None:
            raise UserNotFoundError(email=claims.email)

        updated = self._users.find_one_and_update({"id": user.id}, {"verified": True})
        if updated is None:
            raise UserNotFoundError(user_id=user.id)
        logger.info("Verified email for user %s", updated.id)
        return updated.sanitized()

    async def send_verification_email_by_id(self, user_id: str) -> UserPublic:
        """Re-send the verification email to an unverified user."""
        user = self._users.find_one({"id": user_id, "verified": False})
        if user is None:
            raise UserNotFoundError(user_id=user_id)

        token = self._tokens.generate_email_verification_token(user.email)
        await self._mailer.send_verification_email(user.email, token)
        return user.sanitized()

    # -------------------------------------------------------------------------
    # Passwords
    # -------------------------------------------------------------------------

    async def send_password_reset_email(self, email: str) -> MessageResult:
        """
        Email a single-use reset link.

        The result is the same whether or not the account exists.
        """
        user = self._users.find_one_by_email(email) if isinstance(email, str) else None
        if user is None:
            logger.info("Password reset requested for unknown email")
            return MessageResult(message=RESET_REQUESTED_MESSAGE)

        token = self._tokens.generate_temp_auth_token(user.id, user.password)
        await self._notify(self._mailer.send_password_reset_email(user.email, token))
        logger.info("Password reset requested for user %s", user.id)
        return MessageResult(message=RESET_REQUESTED_MESSAGE)

    async def change_password(
        self,
        user_id: str,
        old_password: Optional[str],
        new_password: Optional[str],
    ) -> UserPublic:
        if not user_id or not old_password or not new_password:
            raise ValidationError("Bad arguments.")
        self._check_password_length(new_password)

        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        if not check_password(old_password, user.password):
            raise InvalidCredentialsError("Incorrect password")

        updated = self._users.find_one_and_update(
            {"id": user_id},
            {"password": generate_hash(new_password)},
        )
        if updated is None:
            raise UserNotFoundError(user_id=user_id)

        await self._notify(self._mailer.send_password_changed_email(updated.email))
        logger.info("Password changed for user %s", user_id)
        return updated.sanitized()

    async def reset_password(
        self,
        token: Optional[str],
        password: Optional[str],
    ) -> MessageResult:
        if not password or not token:
            raise ValidationError("Bad arguments")
        self._check_password_length(password)

        claims = self._tokens.verify_temp_auth_token(token)

        user = self._users.find_by_id(claims.sub)
        if user is None:
            raise UserNotFoundError(user_id=claims.sub)
        if not self._tokens.matches_password(claims, user.password):
            raise InvalidTokenError("This reset link has already been used")

        updated = self._users.find_one_and_update(
            {"id": user.id},
            {"password": generate_hash(password)},
        )
        if updated is None:
            raise UserNotFoundError(user_id=user.id)

        await self._notify(self._mailer.send_password_changed_email(updated.email))
        logger.info("Password reset for user %s", user.id)
        return MessageResult(message=RESET_COMPLETE_MESSAGE)

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    async def _notify(self, send: Awaitable[None]) -> None:
        """
        Await an email send whose outcome must not change the result.

        Used once the store write has happened (or, for reset requests,
        where a failure would reveal that the account exists).
        """
        try:
            await send
        except MailDeliveryError as e:
            logger.error("Email not delivered: %s", e.message)

    def _check_password_length(self, password: Optional[str]) -> None:
        if not password or len(password) < self._min_password_length:
            raise ValidationError(
                f"Password must be {self._min_password_length} or more characters."
            )

    @staticmethod
    def _is_email(email: Any) -> bool:
        if not isinstance(email, str):
            return False
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True
