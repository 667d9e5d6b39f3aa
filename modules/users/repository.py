"""
User repository for database access.

Encapsulates all Supabase queries and row mapping for the ``users`` table.
The table layout lives in migrations/001_create_users.sql; ``profile`` and
``status`` are JSONB columns.
"""

import logging
from typing import Any, Optional

from postgrest.exceptions import APIError

from shared.config import get_settings
from shared.repository import BaseRepository

from .exceptions import EmailAlreadyExistsError
from .models import User

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"

SEARCH_COLUMNS = ("email", "profile->>name", "team_code")
SORT_COLUMN = "profile->>name"


def like_pattern(text: str) -> str:
    """
    Substring ILIKE pattern for ``text``.

    ``%``, ``_`` and backslashes match literally. PostgREST rewrites every
    ``*`` in a like value to ``%`` and has no escape for it, so ``*`` is sent
    as ``_`` and matches any single character, the literal ``*`` included.
    """
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    escaped = escaped.replace("*", "_")
    return f"%{escaped}%"


def quote_filter_value(value: str) -> str:
    """Double-quote a value for a PostgREST logical filter (or=...)."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def search_filter(text: str) -> str:
    """PostgREST ``or`` filter matching ``text`` in any search column."""
    pattern = quote_filter_value(like_pattern(text))
    return ",".join(f"{column}.ilike.{pattern}" for column in SEARCH_COLUMNS)


class UserRepository(BaseRepository[User]):
    """
    Repository for user data access.

    Note: This repository does NOT perform validation or authorization.
    The service layer is responsible for both.
    """

    table_name = "users"

    def find_one_by_email(self, email: str) -> Optional[User]:
        return self.find_one({"email": email.lower()})

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.find_one({"id": user_id})

    def find_one(self, filters: dict[str, Any]) -> Optional[User]:
        query = self._table().select("*")
        for column, value in filters.items():
            query = query.eq(column, value)

        result = query.limit(1).execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def find_all(self) -> list[User]:
        result = self._table().select("*").order(SORT_COLUMN).execute()
        return [self._map_to_user(row) for row in result.data]

    def find(self, text: str, page: int, size: int) -> list[User]:
        offset = page * size

        query = self._table().select("*")
        if text:
            query = query.or_(search_filter(text))

        result = query.order(SORT_COLUMN).range(offset, offset + size - 1).execute()
        return [self._map_to_user(row) for row in result.data]

    def count(self, text: str) -> int:
        query = self._table().select("id", count="exact", head=True)
        if text:
            query = query.or_(search_filter(text))

        result = query.execute()
        return result.count or 0

    def find_one_and_update(
        self,
        filters: dict[str, Any],
        update: dict[str, Any],
    ) -> Optional[User]:
        query = self._table().update(update)
        for column, value in filters.items():
            query = query.eq(column, value)

        result = query.execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def create(self, data: dict[str, Any]) -> User:
        try:
            result = self._table().insert(data).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info("Concurrent registration rejected by unique index")
                raise EmailAlreadyExistsError(data.get("email", "")) from e
            raise
        return self._map_to_user(result.data[0])

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _map_to_user(self, row: dict[str, Any]) -> User:
        """Map a database row to a User model."""
        data = dict(row)
        # rows created before the profile step hold an empty JSON object
        if not data.get("profile"):
            data["profile"] = None
        if data.get("status") is None:
            data.pop("status", None)
        data["id"] = str(data["id"])
        return User(**data)


# =============================================================================
# Module-level singleton management
# =============================================================================

_repository_instance: Optional[UserRepository] = None


def get_user_repository() -> UserRepository:
    """Get the user repository singleton."""
    global _repository_instance
    if _repository_instance is None:
        from shared.database import get_supabase_client
        _repository_instance = UserRepository(
            get_supabase_client(),
            table_name=get_settings().users_table,
        )
    return _repository_instance


def reset_user_repository() -> None:
    """Reset the user repository singleton (for testing)."""
    global _repository_instance
    _repository_instance = None
