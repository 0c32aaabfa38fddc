# ============================================================================
# BASE REPOSITORY - ERROR HANDLING PATTERNS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Infrastructure - Base repository patterns
# PURPOSE: Common error handling and logging for store access
# CREATED: 18 OCT 2026
# ============================================================================
"""
Base Repository Patterns

Abstract base class for store repositories:
- Consistent error handling with a context manager
- Per-class logger

Storage-specific repositories (Cassandra) extend this with their session
management.
"""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import Optional

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message)


class BaseRepository(ABC):
    """
    Abstract base repository with common patterns.

    Provides:
    - Error context manager for consistent error handling
    - Per-class logger

    Subclasses implement storage-specific operations.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.debug(f"{self.__class__.__name__} initialized")

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Context manager for consistent error handling.

        Any exception raised in the block is logged with context and
        re-raised as RepositoryError (the original chained as __cause__).
        RepositoryErrors pass through untouched.

        Args:
            operation: Human-readable description of the operation
            entity_id: Optional entity (keyspace.table, statement) for context

        Example:
            with self._error_context("table lookup", f"{keyspace}.{table}"):
                rows = session.execute(query, (keyspace, table))
        """
        try:
            yield
        except RepositoryError:
            raise
        except Exception as e:
            error_msg = f"{operation} failed"
            if entity_id:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise RepositoryError(error_msg, operation=operation, entity_id=entity_id) from e


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BaseRepository",
    "RepositoryError",
]
