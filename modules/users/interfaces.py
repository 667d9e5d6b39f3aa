"""
Users module interfaces.

IUserRepository is the credential store contract the workflow service is
written against; IUserService is what the API layer depends on.
"""

from typing import Any, Protocol, Optional, runtime_checkable

from .models import (
    AuthResult,
    MessageResult,
    Submission,
    User,
    UserPage,
    UserPublic,
)


@runtime_checkable
class IUserRepository(Protocol):
    """
    Credential store operations.

    Emails are stored lowercased, so lookups by email normalize their input
    the same way. Filters are column/value equality matches combined with AND.
    """

    def find_one_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def find_one(self, filters: dict[str, Any]) -> Optional[User]:
        ...

    def find_all(self) -> list[User]:
        ...

    def find(self, text: str, page: int, size: int) -> list[User]:
        """
        Users whose email, profile name or team code contain ``text``
        (case-insensitive), sorted by profile name, skipping ``page * size``
        rows and returning at most ``size``. Empty text matches everyone.
        """
        ...

    def count(self, text: str) -> int:
        """Number of users ``find`` would match across all pages."""
        ...

    def find_one_and_update(
        self,
        filters: dict[str, Any],
        update: dict[str, Any],
    ) -> Optional[User]:
        """Apply ``update`` to the first user matching ``filters`` and return it."""
        ...

    def create(self, data: dict[str, Any]) -> User:
        """
        Insert a new user.

        Raises:
            EmailAlreadyExistsError: If the email is already taken
        """
        ...


@runtime_checkable
class IUserService(Protocol):
    """
    Interface for the user account workflow.

    Every method raises a HackboardError subclass on failure; validation
    failures are raised before the credential store is touched.
    """

    async def create_user(self, email: Any, password: Optional[str]) -> AuthResult:
        ...

    async def login_with_password(self, email: Any, password: Optional[str]) -> AuthResult:
        ...

    async def login_with_token(self, token: Optional[str]) -> AuthResult:
        ...

    async def get_by_token(self, token: Optional[str]) -> UserPublic:
        ...

    async def get_all(self) -> list[UserPublic]:
        ...

    async def get_page(self, page: int, size: int, text: str = "") -> UserPage:
        ...

    async def get_by_id(self, user_id: str) -> UserPublic:
        ...

    async def update_profile_by_id(self, user_id: str, profile: Any) -> UserPublic:
        ...

    async def verify_by_token(self, token: Optional[str]) -> UserPublic:
        ...

    async def send_verification_email_by_id(self, user_id: str) -> UserPublic:
        ...

    async def send_password_reset_email(self, email: str) -> MessageResult:
        ...

    async def change_password(
        self,
        user_id: str,
        old_password: Optional[str],
        new_password: Optional[str],
    ) -> UserPublic:
        ...

    async def reset_password(
        self,
        token: Optional[str],
        password: Optional[str],
    ) -> MessageResult:
        ...

    async def push_submission_by_id(self, user_id: str, submission: Submission) -> UserPublic:
        ...
