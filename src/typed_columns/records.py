"""Entity representations: fixed-layout record classes and dynamic records."""

from __future__ import annotations

import dataclasses
from typing import Any

from typed_columns.errors import SchemaValidationException
from typed_columns.types import RecordTypeDefinition

# Field names that would shadow the IndexedRecord methods on a FixedRecord.
RESERVED_FIELD_NAMES = frozenset({"SCHEMA", "get", "put", "get_schema"})


class IndexedRecord:
    """Positional access to a schema-described record.

    Positions are the field positions of the record's own schema.
    """

    __slots__ = ()

    def get_schema(self) -> RecordTypeDefinition:
        """Return the record type describing this record."""
        raise NotImplementedError

    def get(self, pos: int) -> Any:
        """Return the value of the field at ``pos``."""
        raise NotImplementedError

    def put(self, pos: int, value: Any) -> None:
        """Set the value of the field at ``pos``."""
        raise NotImplementedError


class FixedRecord(IndexedRecord):
    """Base class for precompiled, fixed-layout record classes.

    Subclasses are dataclasses that bind ``SCHEMA`` to the record type they
    implement and declare one attribute per schema field. Numeric and boolean
    attributes default to their zero value, so they are never absent::

        @dataclass
        class Address(FixedRecord):
            SCHEMA = ADDRESS_TYPE

            street: str | None = None
            number: int = 0
    """

    SCHEMA: RecordTypeDefinition

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        schema = cls.__dict__.get("SCHEMA")
        if schema is None:
            return
        clashes = RESERVED_FIELD_NAMES.intersection(schema.field_names)
        if clashes:
            raise TypeError(
                f"Record '{schema.name}' has fields that clash with "
                f"FixedRecord attributes: {sorted(clashes)}"
            )

    def get_schema(self) -> RecordTypeDefinition:
        return self.SCHEMA

    def get(self, pos: int) -> Any:
        return getattr(self, self.SCHEMA.fields[pos].name)

    def put(self, pos: int, value: Any) -> None:
        setattr(self, self.SCHEMA.fields[pos].name, value)


class DynamicRecord(IndexedRecord):
    """Record that carries its own schema and stores values by position.

    Every field starts out absent (None), including numeric ones.
    """

    __slots__ = ("_schema", "_values")

    def __init__(self, schema: RecordTypeDefinition) -> None:
        self._schema = schema
        self._values: list[Any] = [None] * len(schema.fields)

    def get_schema(self) -> RecordTypeDefinition:
        return self._schema

    def get(self, pos: int) -> Any:
        return self._values[pos]

    def put(self, pos: int, value: Any) -> None:
        self._values[pos] = value

    def _position(self, name: str) -> int:
        field_def = self._schema.get_field(name)
        if field_def is None:
            raise SchemaValidationException(
                f"No field named '{name}' in record '{self._schema.name}'"
            )
        return field_def.pos

    def __getitem__(self, name: str) -> Any:
        return self._values[self._position(name)]

    def __setitem__(self, name: str, value: Any) -> None:
        self._values[self._position(name)] = value

    def to_dict(self) -> dict[str, Any]:
        """Return the field values keyed by field name."""
        return {f.name: self._values[f.pos] for f in self._schema.fields}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DynamicRecord):
            return NotImplemented
        return self._schema.name == other._schema.name and self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DynamicRecord({self._schema.name!r}, {self.to_dict()!r})"


def compile_record_class(
    record_type: RecordTypeDefinition, module: str | None = None
) -> type[FixedRecord]:
    """Generate a FixedRecord dataclass for a record type.

    Each field defaults to its type's zero value (None for non-numeric
    types). The class is named after the record's simple name and placed in
    ``module``, or in the record's namespace when no module is given.

    Args:
        record_type: The record type to generate a class for.
        module: Value for the generated class's ``__module__``.

    Returns:
        The generated class.
    """
    cls = dataclasses.make_dataclass(
        record_type.simple_name,
        [
            (f.name, Any, dataclasses.field(default=f.type_def.default_value))
            for f in record_type.fields
        ],
        bases=(FixedRecord,),
        namespace={"SCHEMA": record_type},
    )
    cls.__module__ = module or record_type.namespace or __name__
    return cls
