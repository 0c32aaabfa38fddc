# ============================================================================
# SCHEMA HANDLER - SCHEMA SYNCHRONIZATION
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Infrastructure - Create / validate / delete orchestration
# PURPOSE: Reconcile store tables and indexes with class descriptors
# CREATED: 18 OCT 2026
# ============================================================================
"""
CassandraSchemaHandler - schema synchronization for mapped classes.

Per class, per operation:

    create:   snapshot -> plan (CREATE TABLE / ALTER ADD, then CREATE INDEX)
              -> execute, or append to the DDL script
    delete:   snapshot -> drop field indexes, class indexes, then the table
    validate: snapshot -> compare; all issues raised once at the end

One session is held for the whole batch and released on every exit path.
A statement the store rejects aborts the batch and propagates; statements
already executed for earlier classes stay applied.

Usage:
    handler = CassandraSchemaHandler(loader=DescriptorLoader("descriptors"))
    result = handler.create_schema_for_classes(["Person"])

    # Script mode: write the DDL instead of executing it
    result = handler.create_schema_for_classes(["Person"], ddl_filename="out/schema.cql")

    # Raises SchemaValidationError listing every issue
    handler.validate_schema(["Person"])
"""

from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from core.config.defaults import NamingDefaults, SchemaDefaults, get_defaults
from core.contracts import SchemaOperation
from core.logging import ComponentType, get_logger, log_context
from core.models.descriptors import ClassDescriptor
from core.models.loader import DescriptorLoader
from core.schema.cql_generator import CqlGenerator, SchemaPlan
from core.schema.embedding import EmbeddingResolver
from core.schema.table import TableMapping
from core.schema.type_mapper import TypeMapper
from core.schema.validator import SchemaValidationError, SchemaValidator, ValidationIssue
from infrastructure.cassandra import CassandraRepository
from infrastructure.ddl_writer import DdlScriptWriter

logger = get_logger(__name__, ComponentType.SCHEMA)

ClassRef = Union[str, ClassDescriptor]


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class ClassSchemaResult:
    """Result for one class."""
    class_name: str
    table: str
    status: str  # 'success', 'skipped', 'failed'
    statements: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_name": self.class_name,
            "table": self.table,
            "status": self.status,
            "statements": self.statements,
            "warnings": self.warnings,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass
class SchemaOperationResult:
    """Complete result of one schema operation over a batch of classes."""
    operation: SchemaOperation
    keyspace: str
    timestamp: str
    ddl_filename: Optional[str] = None
    classes: List[ClassSchemaResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(c.status != "failed" for c in self.classes)

    @property
    def statements(self) -> List[str]:
        return [stmt for c in self.classes for stmt in c.statements]

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "total_classes": len(self.classes),
            "successful": len([c for c in self.classes if c.status == "success"]),
            "skipped": len([c for c in self.classes if c.status == "skipped"]),
            "failed": len([c for c in self.classes if c.status == "failed"]),
            "statements": len(self.statements),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "operation": self.operation.value,
            "keyspace": self.keyspace,
            "timestamp": self.timestamp,
            "ddl_filename": self.ddl_filename,
            "success": self.success,
            "classes": [c.to_dict() for c in self.classes],
            "warnings": self.warnings,
            "summary": self.summary,
        }


# ============================================================================
# SCHEMA HANDLER
# ============================================================================

class CassandraSchemaHandler:
    """
    Schema synchronizer for mapped classes.

    Holds configuration and collaborators only; every call builds its own
    plans and results, so one handler can serve concurrent callers as long
    as the repository hands each of them its own session.
    """

    def __init__(
        self,
        repository: Optional[CassandraRepository] = None,
        loader: Optional[DescriptorLoader] = None,
        schema: Optional[SchemaDefaults] = None,
        naming: Optional[NamingDefaults] = None,
        type_mapper: Optional[TypeMapper] = None,
    ):
        defaults = get_defaults()
        self.repository = repository or CassandraRepository(defaults.connection)
        self.loader = loader or DescriptorLoader()
        self.schema = schema or defaults.schema
        self.naming = naming or defaults.naming
        self.resolver = EmbeddingResolver(type_mapper or TypeMapper(), separator=self.schema.column_separator)
        self.generator = CqlGenerator(self.schema)
        self.validator = SchemaValidator()

    # =========================================================================
    # KEYSPACE
    # =========================================================================

    def create_schema(
        self,
        keyspace: Optional[str] = None,
        replication: Optional[str] = None,
        durable_writes: Optional[bool] = None,
    ) -> str:
        """Create the keyspace if it does not exist. Returns the statement."""
        stmt = self.generator.create_keyspace(keyspace, replication, durable_writes)
        with log_context(keyspace=keyspace or self.schema.keyspace, operation="create_schema"):
            with self.repository.get_session() as session:
                logger.debug(f"Creating keyspace : {stmt}")
                self.repository.execute(stmt, session=session)
                logger.debug("Keyspace created successfully")
        return stmt

    def delete_schema(self, keyspace: Optional[str] = None) -> str:
        """Drop the keyspace if it exists. Returns the statement."""
        stmt = self.generator.drop_keyspace(keyspace)
        with log_context(keyspace=keyspace or self.schema.keyspace, operation="delete_schema"):
            with self.repository.get_session() as session:
                logger.debug(f"Dropping keyspace : {stmt}")
                self.repository.execute(stmt, session=session)
                logger.debug("Keyspace dropped successfully")
        return stmt

    # =========================================================================
    # CLASSES
    # =========================================================================

    def mapping_for(self, descriptor: ClassDescriptor) -> TableMapping:
        return TableMapping.build(descriptor, self.resolver, self.schema, self.naming)

    def create_schema_for_classes(
        self,
        classes: Iterable[ClassRef],
        ddl_filename: Optional[str] = None,
    ) -> SchemaOperationResult:
        """
        Create tables, missing columns and indexes for each class.

        Args:
            classes: Class names (resolved through the loader) or descriptors
            ddl_filename: Write statements to this file instead of executing
                them (defaults to the configured ddl_filename)

        Raises:
            StatementExecutionError: The store rejected a statement
        """
        return self._apply_plans(SchemaOperation.CREATE, classes, ddl_filename, self.generator.plan_create)

    def delete_schema_for_classes(
        self,
        classes: Iterable[ClassRef],
        ddl_filename: Optional[str] = None,
    ) -> SchemaOperationResult:
        """
        Drop indexes and tables of each class. Missing tables are skipped.

        Raises:
            StatementExecutionError: The store rejected a statement
        """
        return self._apply_plans(SchemaOperation.DELETE, classes, ddl_filename, self.generator.plan_delete)

    def validate_schema(self, classes: Iterable[ClassRef]) -> SchemaOperationResult:
        """
        Compare every class with its table.

        Every class is checked before anything is raised.

        Raises:
            SchemaValidationError: Aggregate of all issues in the batch
        """
        result = self._new_result(SchemaOperation.VALIDATE, None)
        issues: List[ValidationIssue] = []

        with log_context(operation=SchemaOperation.VALIDATE.value):
            with self.repository.get_session() as session:
                for descriptor in self._resolve(classes, result):
                    mapping = self.mapping_for(descriptor)
                    with log_context(keyspace=mapping.keyspace, table=mapping.table, class_name=descriptor.name):
                        snapshot = self.repository.get_table_snapshot(mapping.keyspace, mapping.table, session=session)
                        class_issues = self.validator.compare(mapping, snapshot)
                    issues.extend(class_issues)
                    result.classes.append(ClassSchemaResult(
                        class_name=descriptor.name,
                        table=mapping.table,
                        status="failed" if class_issues else "success",
                        warnings=list(mapping.warnings),
                        issues=class_issues,
                    ))

        self._log_summary(result)
        if issues:
            raise SchemaValidationError(issues)
        return result

    def run(
        self,
        operation: SchemaOperation,
        classes: Iterable[ClassRef],
        ddl_filename: Optional[str] = None,
    ) -> SchemaOperationResult:
        """Dispatch on the operation selector."""
        if operation is SchemaOperation.CREATE:
            return self.create_schema_for_classes(classes, ddl_filename)
        if operation is SchemaOperation.DELETE:
            return self.delete_schema_for_classes(classes, ddl_filename)
        return self.validate_schema(classes)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _apply_plans(self, operation, classes, ddl_filename, planner) -> SchemaOperationResult:
        ddl_filename = ddl_filename or self.schema.ddl_filename
        result = self._new_result(operation, ddl_filename)

        logger.info("=" * 70)
        logger.info(f"SCHEMA {operation.value.upper()}")
        logger.info(f"   Keyspace: {self.schema.keyspace}")
        logger.info(f"   Mode: {'SCRIPT ' + ddl_filename if ddl_filename else 'EXECUTE'}")
        logger.info("=" * 70)

        with ExitStack() as stack:
            stack.enter_context(log_context(operation=operation.value))
            writer = stack.enter_context(DdlScriptWriter(ddl_filename)) if ddl_filename else None
            session = stack.enter_context(self.repository.get_session())

            for descriptor in self._resolve(classes, result):
                mapping = self.mapping_for(descriptor)
                with log_context(keyspace=mapping.keyspace, table=mapping.table, class_name=descriptor.name):
                    snapshot = self.repository.get_table_snapshot(mapping.keyspace, mapping.table, session=session)
                    plan = planner(mapping, snapshot)
                    class_result = ClassSchemaResult(
                        class_name=descriptor.name,
                        table=mapping.table,
                        status="skipped" if plan.skipped else "success",
                        warnings=list(plan.warnings),
                    )
                    result.classes.append(class_result)
                    self._emit(plan, class_result, session, writer)

        self._log_summary(result)
        return result

    def _emit(self, plan: SchemaPlan, class_result: ClassSchemaResult, session: Any, writer) -> None:
        for stmt in plan.statements():
            if writer is not None:
                writer.write(stmt)
            else:
                logger.debug(f"Executing : {stmt}")
                try:
                    self.repository.execute(stmt, session=session)
                except Exception:
                    class_result.status = "failed"
                    raise
            class_result.statements.append(stmt)

    def _resolve(self, classes: Iterable[ClassRef], result: SchemaOperationResult) -> List[ClassDescriptor]:
        descriptors = []
        for ref in classes:
            if isinstance(ref, ClassDescriptor):
                descriptors.append(ref)
                continue
            descriptor = self.loader.get(ref)
            if descriptor is None:
                message = f"No descriptor for class {ref}, ignoring"
                logger.warning(message)
                result.warnings.append(message)
                continue
            descriptors.append(descriptor)
        return descriptors

    def _new_result(self, operation: SchemaOperation, ddl_filename: Optional[str]) -> SchemaOperationResult:
        return SchemaOperationResult(
            operation=operation,
            keyspace=self.schema.keyspace,
            timestamp=datetime.now(timezone.utc).isoformat(),
            ddl_filename=ddl_filename,
        )

    @staticmethod
    def _log_summary(result: SchemaOperationResult) -> None:
        summary = result.summary
        logger.info(
            f"{result.operation.value.upper()} {'COMPLETE' if result.success else 'FAILED'}: "
            f"{summary['successful']} succeeded, {summary['skipped']} skipped, "
            f"{summary['failed']} failed, {summary['statements']} statements"
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CassandraSchemaHandler",
    "ClassSchemaResult",
    "SchemaOperationResult",
]
