# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Infrastructure - Store access and schema synchronization
# PURPOSE: Session handling, DDL execution or scripting, schema operations
# CREATED: 18 OCT 2026
# ============================================================================
"""
Infrastructure module for the schema mapper.

Provides:
- CassandraRepository: Session management, execution, introspection
- DdlScriptWriter: DDL-as-script output
- CassandraSchemaHandler: Create / validate / delete schema for classes

Usage:
    from infrastructure import CassandraSchemaHandler

    handler = CassandraSchemaHandler(loader=DescriptorLoader("descriptors"))
    result = handler.create_schema_for_classes(["Person"])
"""

from infrastructure.base_repository import (
    BaseRepository,
    RepositoryError,
)
from infrastructure.cassandra import (
    CassandraRepository,
    StatementExecutionError,
    get_cassandra_repository,
)
from infrastructure.ddl_writer import DdlScriptWriter
from infrastructure.schema_handler import (
    CassandraSchemaHandler,
    ClassSchemaResult,
    SchemaOperationResult,
)

__all__ = [
    # Base
    'BaseRepository',
    'RepositoryError',
    # Cassandra
    'CassandraRepository',
    'StatementExecutionError',
    'get_cassandra_repository',
    # DDL output
    'DdlScriptWriter',
    # Schema
    'CassandraSchemaHandler',
    'ClassSchemaResult',
    'SchemaOperationResult',
]
