# ============================================================================
# SCHEMA VALIDATOR
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Logical model vs physical table comparison
# PURPOSE: Report missing tables/columns/indexes, type mismatches, extra columns
# CREATED: 18 OCT 2026
# EXPORTS: SchemaValidator, ValidationIssue, SchemaValidationError
# DEPENDENCIES: none
# ============================================================================
"""
Schema Validator.

Compares a TableMapping with a TableSnapshot:

- column names compare case-insensitively (the store lower-cases unquoted
  identifiers)
- column types compare by exact name, no widening
- every physical column must be explained by the mapping
- every declared single-column index must sit on an indexed column

Issues accumulate across the whole batch and are raised once, as one
SchemaValidationError, at the end.

Usage:
    validator = SchemaValidator()
    issues = validator.compare(mapping, snapshot)
    validator.raise_for_issues(issues)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.contracts import IssueKind
from core.models.columns import TableSnapshot
from core.schema.table import TableMapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """One structural mismatch."""
    kind: IssueKind
    class_name: str
    table: str
    column: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None
    index: Optional[str] = None

    @property
    def message(self) -> str:
        if self.kind is IssueKind.MISSING_TABLE:
            return f"Table for class {self.class_name} doesn't exist : should have name {self.table}"
        if self.kind is IssueKind.MISSING_COLUMN:
            return f"Table {self.table} doesn't have column {self.column} (expected type {self.expected})"
        if self.kind is IssueKind.TYPE_MISMATCH:
            return (
                f"Table {self.table} column {self.column} has type={self.actual} "
                f"yet ought to be using type={self.expected}"
            )
        if self.kind is IssueKind.UNEXPECTED_COLUMN:
            return f"Table {self.table} has column {self.column} (type={self.actual}) not explained by class {self.class_name}"
        return f"Table {self.table} column {self.column} has no index (expected {self.index})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "class_name": self.class_name,
            "table": self.table,
            "column": self.column,
            "expected": self.expected,
            "actual": self.actual,
            "index": self.index,
            "message": self.message,
        }


class SchemaValidationError(Exception):
    """Aggregate of every validation issue found in one validate call."""

    def __init__(self, issues: Sequence[ValidationIssue]):
        self.issues = list(issues)
        lines = [f"Schema validation failed with {len(self.issues)} issue(s):"]
        lines.extend(f"  - {issue.message}" for issue in self.issues)
        super().__init__("\n".join(lines))

    def columns(self, kind: Optional[IssueKind] = None) -> List[str]:
        return [i.column for i in self.issues if i.column and (kind is None or i.kind is kind)]


class SchemaValidator:
    """Stateless comparison of mappings with snapshots."""

    @staticmethod
    def types_match(expected: Optional[str], actual: Optional[str]) -> bool:
        return expected == actual

    def compare(self, mapping: TableMapping, snapshot: TableSnapshot) -> List[ValidationIssue]:
        """Every issue of one class; empty when the table matches."""
        class_name = mapping.descriptor.name
        table = mapping.table
        issues: List[ValidationIssue] = []

        if not snapshot.exists:
            issues.append(ValidationIssue(IssueKind.MISSING_TABLE, class_name, table))
            return self._log(issues)

        expected_names = set()
        for column in mapping.columns:
            expected_names.add(column.name)
            details = snapshot.get(column.name)
            if details is None:
                issues.append(ValidationIssue(
                    IssueKind.MISSING_COLUMN, class_name, table,
                    column=column.name, expected=column.type_name,
                ))
            elif not self.types_match(column.type_name, details.type_name):
                issues.append(ValidationIssue(
                    IssueKind.TYPE_MISMATCH, class_name, table,
                    column=column.name, expected=column.type_name, actual=details.type_name,
                ))

        for name in sorted(snapshot.column_names() - expected_names):
            issues.append(ValidationIssue(
                IssueKind.UNEXPECTED_COLUMN, class_name, table,
                column=name, actual=snapshot.columns[name].type_name,
            ))

        for index in mapping.all_indexes():
            if not snapshot.is_indexed(index.column):
                issues.append(ValidationIssue(
                    IssueKind.MISSING_INDEX, class_name, table,
                    column=index.column, index=index.name,
                ))

        return self._log(issues)

    def validate(self, pairs: Iterable) -> List[ValidationIssue]:
        """
        Compare (mapping, snapshot) pairs and raise once at the end.

        Raises:
            SchemaValidationError: If any pair has issues
        """
        issues: List[ValidationIssue] = []
        for mapping, snapshot in pairs:
            issues.extend(self.compare(mapping, snapshot))
        self.raise_for_issues(issues)
        return issues

    @staticmethod
    def raise_for_issues(issues: Sequence[ValidationIssue]) -> None:
        if issues:
            raise SchemaValidationError(issues)

    @staticmethod
    def _log(issues: List[ValidationIssue]) -> List[ValidationIssue]:
        for issue in issues:
            logger.error(issue.message)
        return issues


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SchemaValidator",
    "ValidationIssue",
    "SchemaValidationError",
]
