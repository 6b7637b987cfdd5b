"""Database connection management for WellWatch services.

Provides PostgreSQL connection pooling, health checks and the repository
base class used by the risk engine's persistence collaborators.
"""

from .connection import (
    DatabaseConfig,
    ConnectionManager,
    get_connection_manager,
)
from .repository import (
    BaseRepository,
    RepositoryError,
    DuplicateError,
)

__all__ = [
    "DatabaseConfig",
    "ConnectionManager",
    "get_connection_manager",
    "BaseRepository",
    "RepositoryError",
    "DuplicateError",
]
