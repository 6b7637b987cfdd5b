"""Base repository pattern for PostgreSQL tables.

Subclasses map rows to entities and write their own reads; this class owns
the insert SQL and turns driver errors into ``RepositoryError`` subclasses.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, Sequence, TypeVar

import psycopg2

from .connection import ConnectionManager

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class DuplicateError(RepositoryError):
    """Duplicate entity already exists."""
    pass


class BaseRepository(ABC, Generic[T]):
    """Abstract repository keyed on an ``id`` column."""

    def __init__(
        self,
        connection_manager: ConnectionManager,
        table_name: str,
    ):
        self.connection_manager = connection_manager
        self.table_name = table_name

        logger.info(
            "REPOSITORY_INITIALIZED",
            extra={"table_name": table_name}
        )

    @abstractmethod
    def _row_to_entity(self, row: tuple) -> T:
        """Convert a database row to an entity."""

    @abstractmethod
    def _entity_to_params(self, entity: T) -> Dict[str, Any]:
        """Convert an entity to a column -> value mapping."""

    def _fetch_one(self, query: str, params: Sequence[Any]) -> Optional[tuple]:
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(query, params)
                except psycopg2.Error as e:
                    raise RepositoryError(f"{self.table_name}: {e}") from e
                return cur.fetchone()

    def insert(self, entity: T) -> T:
        """Insert a new row, raising ``DuplicateError`` on id conflict."""
        params = self._entity_to_params(entity)
        columns = ", ".join(params.keys())
        placeholders = ", ".join(["%s"] * len(params))

        query = f"INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders}) RETURNING *"

        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(query, list(params.values()))
                except psycopg2.IntegrityError as e:
                    raise DuplicateError(f"{self.table_name} {params.get('id')} already exists") from e
                except psycopg2.Error as e:
                    raise RepositoryError(f"{self.table_name}: {e}") from e
                row = cur.fetchone()
                conn.commit()

        return self._row_to_entity(row) if row else entity

