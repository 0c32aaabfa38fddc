# ============================================================================
# CQL DDL GENERATOR
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - DDL planning for one class
# PURPOSE: Compute the statements that reconcile a table with its mapping
# CREATED: 18 OCT 2026
# EXPORTS: CqlGenerator, SchemaPlan
# DEPENDENCIES: none
# ============================================================================
"""
CQL DDL Generator.

Pure statement assembly: given a TableMapping and a fresh TableSnapshot,
return the statements to run. Nothing here talks to the store.

In a create plan, table statements (CREATE TABLE, ALTER TABLE ADD) always
precede index statements. A delete plan drops indexes before the table.

Usage:
    generator = CqlGenerator(schema_defaults)
    plan = generator.plan_create(mapping, snapshot)
    for stmt in plan.statements():
        session.execute(stmt)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from core.config.defaults import SchemaDefaults
from core.models.columns import TableSnapshot
from core.schema.cql_utils import IndexBuilder, KeyspaceBuilder, TableBuilder
from core.schema.table import TableMapping

logger = logging.getLogger(__name__)


@dataclass
class SchemaPlan:
    """Statements for one class in execution order."""
    class_name: str
    table: str
    table_statements: List[str] = field(default_factory=list)
    index_statements: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped: bool = False
    indexes_first: bool = False  # drop plans remove indexes before the table

    def statements(self) -> List[str]:
        if self.indexes_first:
            return self.index_statements + self.table_statements
        return self.table_statements + self.index_statements

    @property
    def is_empty(self) -> bool:
        return not self.table_statements and not self.index_statements


class CqlGenerator:
    """
    Plans DDL for classes.

    Holds only configuration; each plan gets its own lists.
    """

    def __init__(self, schema: Optional[SchemaDefaults] = None):
        self.schema = schema or SchemaDefaults()

    # =========================================================================
    # KEYSPACE
    # =========================================================================

    def create_keyspace(
        self,
        keyspace: Optional[str] = None,
        replication: Optional[str] = None,
        durable_writes: Optional[bool] = None
    ) -> str:
        durable = self.schema.durable_writes if durable_writes is None else durable_writes
        return KeyspaceBuilder.create(
            keyspace or self.schema.keyspace,
            replication or self.schema.replication,
            durable,
        )

    def drop_keyspace(self, keyspace: Optional[str] = None) -> str:
        return KeyspaceBuilder.drop(keyspace or self.schema.keyspace)

    # =========================================================================
    # CREATE
    # =========================================================================

    def plan_create(self, mapping: TableMapping, snapshot: TableSnapshot) -> SchemaPlan:
        """
        Statements that bring the table and its indexes up to the mapping.

        - Table absent, auto-create-tables on: one CREATE TABLE
        - Table present, auto-create-columns on: ALTER TABLE ADD per missing
          non-key column (missing key columns are reported as warnings)
        - auto-create-constraints on: CREATE INDEX per declared single-column
          index whose column is not already indexed
        """
        plan = SchemaPlan(mapping.descriptor.name, mapping.table, warnings=list(mapping.warnings))
        keyspace = mapping.keyspace

        if not snapshot.exists:
            if self.schema.auto_create_tables:
                plan.table_statements.append(
                    TableBuilder.create(keyspace, mapping.table, mapping.definitions(), mapping.primary_key)
                )
            else:
                message = f"Table {keyspace}.{mapping.table} does not exist and auto-create-tables is disabled"
                logger.warning(message)
                plan.warnings.append(message)
        elif self.schema.auto_create_columns:
            key_columns = set(mapping.primary_key)
            for column in mapping.columns:
                if snapshot.has_column(column.name):
                    continue
                if column.name in key_columns:
                    # Key columns cannot be added to an existing table
                    message = (
                        f"Primary key column {keyspace}.{mapping.table}.{column.name} "
                        "is missing and cannot be added"
                    )
                    logger.warning(message)
                    plan.warnings.append(message)
                else:
                    plan.table_statements.append(
                        TableBuilder.add_column(keyspace, mapping.table, column.name, column.type_name)
                    )

        table_available = snapshot.exists or bool(plan.table_statements)
        if self.schema.auto_create_constraints and table_available:
            for index in mapping.all_indexes():
                if snapshot.exists and snapshot.is_indexed(index.column):
                    logger.debug(f"Column {mapping.table}.{index.column} already indexed, skipping {index.name}")
                    continue
                plan.index_statements.append(
                    IndexBuilder.create(keyspace, mapping.table, index.column, index.name)
                )

        return plan

    # =========================================================================
    # DELETE
    # =========================================================================

    def plan_delete(self, mapping: TableMapping, snapshot: TableSnapshot) -> SchemaPlan:
        """
        Drop field-level indexes, then class-level indexes, then the table.
        Only indexes present in the snapshot are dropped.

        A missing table yields an empty, skipped plan.
        """
        plan = SchemaPlan(
            mapping.descriptor.name, mapping.table, warnings=list(mapping.warnings), indexes_first=True
        )
        if not snapshot.exists:
            logger.debug(f"Class {mapping.descriptor.name} table={mapping.table} didn't exist so can't be dropped")
            plan.skipped = True
            return plan

        present = {name.lower() for name in snapshot.index_names()}
        for index in mapping.field_indexes() + list(mapping.class_indexes):
            if index.name.lower() not in present:
                logger.debug(f"Index {index.name} not present on {mapping.table}, no drop needed")
                continue
            plan.index_statements.append(IndexBuilder.drop(mapping.keyspace, index.name))
        plan.table_statements.append(TableBuilder.drop(mapping.keyspace, mapping.table))
        return plan


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CqlGenerator",
    "SchemaPlan",
]
