# ============================================================================
# CASSANDRA CONNECTION INFRASTRUCTURE
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Infrastructure - Wide-column store session handling
# PURPOSE: Session management, statement execution, schema introspection
# CREATED: 18 OCT 2026
# DEPENDENCIES: cassandra-driver
# ============================================================================
"""
Cassandra Connection Infrastructure

Provides store connectivity for the schema tool:
- Password authentication when CASSANDRA_USERNAME is set
- Context manager that always shuts the cluster down
- Existence checks and table snapshots from system_schema

Usage:
    repo = CassandraRepository()
    with repo.get_session() as session:
        snapshot = repo.get_table_snapshot("app", "person", session=session)
        repo.execute("CREATE INDEX ...", session=session)
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, List, Optional, Sequence

from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster
from cassandra.query import dict_factory

from core.config.defaults import ConnectionDefaults, get_defaults
from core.mapping.row_codec import log_cql_statement
from core.models.columns import TableSnapshot
from core.schema.cql_utils import IntrospectionQueries
from infrastructure.base_repository import BaseRepository, RepositoryError

logger = logging.getLogger(__name__)


class StatementExecutionError(RepositoryError):
    """A statement was rejected by the store or could not be sent."""

    def __init__(self, message: str, statement: str):
        self.statement = statement
        super().__init__(message, operation="execute", entity_id=statement)


# ============================================================================
# CASSANDRA REPOSITORY
# ============================================================================

class CassandraRepository(BaseRepository):
    """
    Repository for statement execution and schema introspection.

    A session passed to the constructor is borrowed: it is used as-is and
    never shut down. Otherwise each get_session() block connects a new
    cluster and shuts it down on exit.
    """

    def __init__(
        self,
        connection: Optional[ConnectionDefaults] = None,
        session: Any = None,
    ):
        super().__init__()
        self.connection = connection or get_defaults().connection
        self._session = session

    def _build_cluster(self) -> Cluster:
        auth_provider = None
        if self.connection.has_credentials:
            auth_provider = PlainTextAuthProvider(
                username=self.connection.username,
                password=self.connection.password,
            )
        return Cluster(
            contact_points=list(self.connection.contact_points),
            port=self.connection.port,
            auth_provider=auth_provider,
            connect_timeout=self.connection.connect_timeout,
        )

    @contextmanager
    def get_session(self):
        """
        Context manager for store sessions.

        Yields:
            Session with dict rows
        """
        if self._session is not None:
            yield self._session
            return

        cluster = None
        try:
            logger.debug(f"Connecting to {', '.join(self.connection.contact_points)}:{self.connection.port}")
            with self._error_context("connect", ",".join(self.connection.contact_points)):
                cluster = self._build_cluster()
                session = cluster.connect()
                session.row_factory = dict_factory
            logger.debug("Session established")
            yield session
        finally:
            if cluster is not None:
                cluster.shutdown()

    # =========================================================================
    # EXECUTION
    # =========================================================================

    def execute(self, statement: str, params: Optional[Sequence[Any]] = None, session: Any = None) -> List[Any]:
        """
        Execute one statement.

        Raises:
            StatementExecutionError: The store rejected the statement
        """
        if session is None:
            with self.get_session() as owned:
                return self.execute(statement, params, session=owned)

        log_cql_statement(statement, params or (), logger)
        try:
            result = session.execute(statement, params) if params else session.execute(statement)
        except Exception as e:
            message = f"Statement failed: {statement}: {e}"
            logger.error(message)
            raise StatementExecutionError(message, statement) from e
        return list(result) if result is not None else []

    def prepare(self, statement: str, session: Any):
        """Prepared statement bound to the given session."""
        with self._error_context("prepare", statement):
            return session.prepare(statement)

    def fetch_all(self, query: str, params: Sequence[Any], session: Any = None) -> List[Any]:
        with self._error_context("query", query):
            return self.execute(query, params, session=session)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def keyspace_exists(self, keyspace: str, session: Any = None) -> bool:
        rows = self.fetch_all(IntrospectionQueries.KEYSPACE_EXISTS, (keyspace.lower(),), session=session)
        return len(rows) > 0

    def table_exists(self, keyspace: str, table: str, session: Any = None) -> bool:
        rows = self.fetch_all(IntrospectionQueries.TABLE_EXISTS, (keyspace.lower(), table.lower()), session=session)
        return len(rows) > 0

    def get_table_snapshot(self, keyspace: str, table: str, session: Any = None) -> TableSnapshot:
        """
        Fresh physical view of a table (columns, types, indexes).

        Unquoted identifiers are stored lower-cased, so lookups are too.
        """
        if not self.table_exists(keyspace, table, session=session):
            return TableSnapshot.missing(keyspace, table)
        params = (keyspace.lower(), table.lower())
        columns = self.fetch_all(IntrospectionQueries.TABLE_COLUMNS, params, session=session)
        indexes = self.fetch_all(IntrospectionQueries.TABLE_INDEXES, params, session=session)
        return TableSnapshot.from_rows(keyspace, table, columns, indexes)


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_default_repo: Optional[CassandraRepository] = None
_repo_lock = threading.Lock()


def get_cassandra_repository() -> CassandraRepository:
    """Get shared repository instance."""
    global _default_repo
    if _default_repo is None:
        with _repo_lock:
            if _default_repo is None:
                _default_repo = CassandraRepository()
    return _default_repo


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CassandraRepository",
    "StatementExecutionError",
    "get_cassandra_repository",
]
