"""Parsing module for the entity schema DSL."""

from typed_columns.parsing.schema_parser import SchemaParser

__all__ = [
    "SchemaParser",
]
