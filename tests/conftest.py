"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import uuid
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from api.dependencies import reset_container
from modules.auth.passwords import generate_hash
from modules.auth.tokens import TokenManager, reset_token_manager
from modules.mail.interfaces import IMailer
from modules.users.exceptions import EmailAlreadyExistsError
from modules.users.models import User
from modules.users.repository import reset_user_repository
from modules.users.service import UserService
from shared.config import get_settings
from shared.database import reset_client_cache


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_PASSWORD = "hunter22"


class InMemoryUserRepository:
    """
    IUserRepository backed by a dict, with the same matching and ordering
    rules as the Supabase implementation.
    """

    def __init__(self) -> None:
        self.rows: dict[str, User] = {}
        self.writes = 0

    def add(self, **fields: Any) -> User:
        """Insert a user directly, bypassing the workflow service."""
        fields.setdefault("id", str(uuid.uuid4()))
        fields.setdefault("password", generate_hash(TEST_PASSWORD))
        fields["email"] = fields["email"].lower()
        user = User.model_validate(fields)
        self.rows[user.id] = user
        return user

    def find_one_by_email(self, email: str) -> Optional[User]:
        return self.find_one({"email": email.lower()})

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.find_one({"id": user_id})

    def find_one(self, filters: dict[str, Any]) -> Optional[User]:
        for user in self.rows.values():
            if all(getattr(user, column) == value for column, value in filters.items()):
                return user
        return None

    def find_all(self) -> list[User]:
        return sorted(self.rows.values(), key=_name_key)

    def find(self, text: str, page: int, size: int) -> list[User]:
        matches = sorted(self._matching(text), key=_name_key)
        return matches[page * size:(page + 1) * size]

    def count(self, text: str) -> int:
        return len(self._matching(text))

    def find_one_and_update(
        self,
        filters: dict[str, Any],
        update: dict[str, Any],
    ) -> Optional[User]:
        user = self.find_one(filters)
        if user is None:
            return None
        updated = User.model_validate({**user.model_dump(), **update})
        self.rows[user.id] = updated
        self.writes += 1
        return updated

    def create(self, data: dict[str, Any]) -> User:
        if self.find_one_by_email(data["email"]) is not None:
            raise EmailAlreadyExistsError(data["email"])
        self.writes += 1
        return self.add(**data)

    def _matching(self, text: str) -> list[User]:
        if not text:
            return list(self.rows.values())
        needle = text.lower()
        return [
            user for user in self.rows.values()
            if any(needle in (value or "").lower() for value in _search_values(user))
        ]


def _search_values(user: User) -> tuple[Optional[str], ...]:
    return (user.email, user.profile.name if user.profile else None, user.team_code)


def _name_key(user: User) -> tuple[bool, str]:
    # Postgres puts NULLs last in ascending order
    name = user.profile.name if user.profile else None
    return (name is None, name or "")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module singletons before and after each test."""
    get_settings.cache_clear()
    reset_container()
    reset_token_manager()
    reset_user_repository()
    reset_client_cache()
    yield
    get_settings.cache_clear()
    reset_container()
    reset_token_manager()
    reset_user_repository()
    reset_client_cache()


@pytest.fixture
def tokens() -> TokenManager:
    """Token manager signing with the test secret."""
    return TokenManager(TEST_JWT_SECRET)


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def mailer() -> MagicMock:
    """Mailer whose sends are recorded instead of delivered."""
    mock = MagicMock(spec=IMailer)
    mock.send_verification_email = AsyncMock()
    mock.send_password_reset_email = AsyncMock()
    mock.send_password_changed_email = AsyncMock()
    return mock


@pytest.fixture
def user_service(repository, mailer, tokens) -> UserService:
    return UserService(
        repository=repository,
        mailer=mailer,
        tokens=tokens,
        min_password_length=6,
    )


@pytest.fixture
def test_user(repository) -> User:
    """A verified user with password TEST_PASSWORD."""
    return repository.add(email="alice@example.com", verified=True)


@pytest.fixture
def unverified_user(repository) -> User:
    return repository.add(email="bob@example.com", verified=False)


@pytest.fixture
def auth_token(tokens, test_user) -> str:
    """Create a valid session token for test_user."""
    return tokens.generate_auth_token(test_user.id)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}
