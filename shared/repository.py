"""
Base repository class for database access.

Wraps the Supabase client and the name of the table a repository owns, so
subclasses only deal with queries and row mapping.
"""

from typing import Any, TypeVar, Generic
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides:
    - Supabase client access via self._db
    - A query builder for the owned table via self._table()

    Subclasses implement domain-specific data access and map rows to
    Pydantic models internally; callers never see raw dicts.

    Example:
        class TeamRepository(BaseRepository[Team]):
            def find_by_code(self, code: str) -> Optional[Team]:
                result = self._table().select("*").eq("code", code).execute()
                if not result.data:
                    return None
                return Team(**result.data[0])
    """

    table_name: str = ""

    def __init__(self, db: Client, table_name: str | None = None) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
            table_name: Overrides the class-level table name.
        """
        self._db = db
        if table_name:
            self.table_name = table_name

    def _table(self) -> Any:
        """Start a query against this repository's table."""
        return self._db.table(self.table_name)
