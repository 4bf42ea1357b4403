"""Command-line tool for inspecting entity schemas."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from typed_columns.builders import RecordKind
from typed_columns.composer import EntityComposer
from typed_columns.errors import TypedColumnsError
from typed_columns.schema import EntitySchema


def describe(composer: EntityComposer) -> list[str]:
    """Return a human-readable description of a composer's column layout."""
    schema = composer.entity_schema
    record_type = schema.record_type
    lines = [f"entity {schema.name} ({composer.kind.value} records)"]

    lines.append(f"key parts ({composer.key_part_count}):")
    for mapping in schema.key_mappings:
        field_def = record_type.get_field(mapping.field_name)
        lines.append(f"  [{mapping.key_ordinal}] {mapping.field_name}: {field_def.type_def.name}")

    column_mappings = schema.column_mappings
    if column_mappings:
        lines.append("columns:")
        for mapping in column_mappings:
            lines.append(f"  {mapping.field_name} -> {mapping.mapping_value}")

    kac_mappings = schema.key_as_column_mappings
    if kac_mappings:
        lines.append("spread fields:")
        for mapping in kac_mappings:
            field_def = record_type.get_field(mapping.field_name)
            family = f" -> {mapping.family}:*" if mapping.family else ""
            lines.append(f"  {mapping.field_name}: {field_def.type_def.name}{family}")

    required = schema.required_columns()
    if required:
        lines.append("required columns: " + ", ".join(required))
    return lines


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        prog="typed-columns",
        description="Inspect how entity schemas map onto columns",
    )
    subparsers = arg_parser.add_subparsers(dest="command", required=True)

    describe_parser = subparsers.add_parser(
        "describe",
        help="Show the key layout, columns and spread fields of a schema",
    )
    describe_parser.add_argument(
        "schema_file",
        type=Path,
        help="Path to the schema file",
    )
    describe_parser.add_argument(
        "--kind",
        choices=[kind.value for kind in RecordKind],
        default=RecordKind.DYNAMIC.value,
        help="Record representation to compose (fixed also resolves record classes)",
    )
    describe_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = arg_parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
        logging.getLogger("typed_columns").setLevel(logging.DEBUG)

    if not args.schema_file.exists():
        print(f"Error: File not found: {args.schema_file}", file=sys.stderr)
        return 1

    try:
        schema = EntitySchema.load(args.schema_file)
        composer = EntityComposer(schema, kind=RecordKind(args.kind))
    except (OSError, UnicodeDecodeError, SyntaxError, TypedColumnsError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in describe(composer):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
