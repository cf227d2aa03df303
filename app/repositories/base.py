"""
Base Repository - LeadGen Maturity Assessment
app/repositories/base.py

Snowflake access shared by repositories: one connection per statement,
DictCursor rows, and connector errors mapped onto RepositoryException.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Sequence

from snowflake.connector import DictCursor
from snowflake.connector.errors import DatabaseError, InterfaceError, OperationalError, ProgrammingError

from app.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    RepositoryException,
)
from app.services.snowflake import get_snowflake_connection

logger = logging.getLogger(__name__)


class BaseRepository:
    """Statement helpers over a short-lived Snowflake connection."""

    @contextmanager
    def cursor(self) -> Iterator[DictCursor]:
        try:
            conn = get_snowflake_connection()
        except (InterfaceError, OperationalError, DatabaseError) as e:
            raise DatabaseConnectionException(f"Failed to connect to Snowflake: {e}") from e

        try:
            cur = conn.cursor(DictCursor)
            try:
                yield cur
            finally:
                cur.close()
        finally:
            conn.close()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement and commit it. Returns the affected row count."""
        with self.cursor() as cur:
            try:
                cur.execute(sql, tuple(params))
                cur.connection.commit()
            except DatabaseError as e:
                raise self._translate(e) from e
            return cur.rowcount

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        with self.cursor() as cur:
            try:
                cur.execute(sql, tuple(params))
                return cur.fetchone()
            except DatabaseError as e:
                raise self._translate(e) from e

    @staticmethod
    def _translate(error: DatabaseError) -> RepositoryException:
        logger.warning("snowflake_statement_failed", extra={"error": str(error)})
        if isinstance(error, ProgrammingError):
            text = str(error).upper()
            if "UNIQUE" in text or "DUPLICATE" in text:
                return DuplicateEntityException(str(error))
            return RepositoryException(f"Query error: {error}")
        if isinstance(error, (InterfaceError, OperationalError)):
            return DatabaseConnectionException(f"Snowflake connection lost: {error}")
        return RepositoryException(f"Database error: {error}")

    # Column helpers

    @staticmethod
    def utc(dt: Optional[datetime]) -> Optional[datetime]:
        """TIMESTAMP_TZ/NTZ value as an aware UTC datetime."""
        if dt is None:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_variant(value: Any) -> Optional[str]:
        """JSON text for a VARIANT column bound through PARSE_JSON(%s)."""
        return None if value is None else json.dumps(value)

    @staticmethod
    def from_variant(value: Any) -> Any:
        # The connector hands VARIANT columns back as JSON text
        if isinstance(value, str):
            return json.loads(value)
        return value
