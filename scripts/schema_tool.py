#!/usr/bin/env python
# ============================================================================
# SCHEMA TOOL SCRIPT
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# PURPOSE: Create, validate or delete the schema of mapped classes
# USAGE:
#   python scripts/schema_tool.py create -d descriptors Person Address
#   python scripts/schema_tool.py create -d descriptors --ddl-file out/schema.cql
#   python scripts/schema_tool.py validate -d descriptors
#   python scripts/schema_tool.py delete -d descriptors Person
#   python scripts/schema_tool.py create-keyspace --keyspace app
# ============================================================================

import argparse
import json
import os
import sys
from dataclasses import replace
from typing import List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config.defaults import get_defaults
from core.contracts import SchemaOperation
from core.logging import configure_logging
from core.models.loader import DescriptorLoader
from core.schema.table import ColumnCollisionError
from core.schema.validator import SchemaValidationError
from infrastructure.base_repository import RepositoryError
from infrastructure.schema_handler import CassandraSchemaHandler, SchemaOperationResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Synchronize the wide-column schema with class descriptors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/schema_tool.py create -d descriptors               # All classes
  python scripts/schema_tool.py create -d descriptors --ddl-file x  # Script only
  python scripts/schema_tool.py validate -d descriptors Person
  python scripts/schema_tool.py delete-keyspace --keyspace app

Environment Variables:
  CASSANDRA_CONTACT_POINTS    Comma separated hosts (default: 127.0.0.1)
  CASSANDRA_PORT              Native protocol port (default: 9042)
  CASSANDRA_USERNAME          Username (enables password auth)
  CASSANDRA_PASSWORD          Password
  CASSANDRA_KEYSPACE          Default keyspace (default: app)
  SCHEMA_AUTO_CREATE_TABLES   Allow CREATE TABLE (default: true)
  SCHEMA_AUTO_CREATE_COLUMNS  Allow ALTER TABLE ADD (default: false)
  SCHEMA_AUTO_CREATE_CONSTRAINTS  Allow CREATE INDEX (default: true)
  SCHEMA_TENANT_ID            Adds a tenant column to every table
        """
    )
    parser.add_argument(
        "operation",
        choices=["create", "validate", "delete", "create-keyspace", "delete-keyspace"],
        help="Schema operation"
    )
    parser.add_argument(
        "classes",
        nargs="*",
        help="Class names (default: every loaded class)"
    )
    parser.add_argument(
        "--descriptors", "-d",
        type=str,
        help="Directory of descriptor YAML files"
    )
    parser.add_argument(
        "--keyspace",
        type=str,
        help="Keyspace (overrides CASSANDRA_KEYSPACE)"
    )
    parser.add_argument(
        "--replication",
        type=str,
        help="Replication map for create-keyspace"
    )
    parser.add_argument(
        "--no-durable-writes",
        action="store_true",
        help="Create the keyspace with durable_writes=false"
    )
    parser.add_argument(
        "--ddl-file",
        type=str,
        help="Write DDL to this file instead of executing it"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    return parser


def print_result(result: SchemaOperationResult, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print("\n[RESULTS]\n")
    for class_result in result.classes:
        print(f"[{class_result.status.upper():7}] {class_result.class_name} -> {class_result.table}")
        for stmt in class_result.statements:
            print(f"   {stmt}")
        for warning in class_result.warnings:
            print(f"   warning: {warning}")
        for issue in class_result.issues:
            print(f"   issue: {issue.message}")
    for warning in result.warnings:
        print(f"warning: {warning}")
    print(f"\nSummary: {result.summary}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "INFO")

    defaults = get_defaults()
    schema = defaults.schema
    if args.keyspace:
        schema = replace(schema, keyspace=args.keyspace)

    loader = DescriptorLoader(args.descriptors)
    handler = CassandraSchemaHandler(loader=loader, schema=schema)

    print("=" * 70)
    print(f"SCHEMA TOOL - {args.operation}")
    print(f"Keyspace: {schema.keyspace}")
    print("=" * 70)

    try:
        if args.operation == "create-keyspace":
            durable = False if args.no_durable_writes else None
            print(handler.create_schema(schema.keyspace, args.replication, durable))
            return 0
        if args.operation == "delete-keyspace":
            print(handler.delete_schema(schema.keyspace))
            return 0

        classes = args.classes or [d.name for d in loader.list_all()]
        result = handler.run(SchemaOperation(args.operation), classes, args.ddl_file)
    except SchemaValidationError as e:
        print(f"\n{e}")
        return 1
    except ColumnCollisionError as e:
        print(f"\nMapping error: {e}")
        return 1
    except RepositoryError as e:
        print(f"\nStore error: {e}")
        return 2

    print_result(result, args.json)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
