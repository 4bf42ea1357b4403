"""Value type definitions for entity schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from typed_columns.errors import SchemaValidationException


class PrimitiveType(Enum):
    """Built-in scalar types supported by entity schemas."""

    INT = "int"
    LONG = "long"
    BOOLEAN = "boolean"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    BYTES = "bytes"

    @property
    def default_value(self) -> Any:
        """Return the zero value for this type, or None if it has none.

        Only the numeric and boolean kinds have a zero value. A fixed-layout
        record always holds one of these for such fields, never None.
        """
        return _PRIMITIVE_DEFAULTS.get(self)


_PRIMITIVE_DEFAULTS: dict[PrimitiveType, Any] = {
    PrimitiveType.INT: 0,
    PrimitiveType.LONG: 0,
    PrimitiveType.BOOLEAN: False,
    PrimitiveType.FLOAT: 0.0,
    PrimitiveType.DOUBLE: 0.0,
}

# Mapping from type name strings to PrimitiveType enum values
PRIMITIVE_TYPE_NAMES: dict[str, PrimitiveType] = {pt.value: pt for pt in PrimitiveType}


@dataclass
class TypeDefinition:
    """Base class for all type definitions."""

    name: str

    @property
    def default_value(self) -> Any:
        """Return the value an unset field of this type reads back as."""
        return None

    @property
    def is_primitive(self) -> bool:
        """Return whether this type is a primitive type."""
        return False

    @property
    def is_map(self) -> bool:
        """Return whether this type is a map type."""
        return False

    @property
    def is_array(self) -> bool:
        """Return whether this type is an array type."""
        return False

    @property
    def is_record(self) -> bool:
        """Return whether this type is a record type."""
        return False


@dataclass
class PrimitiveTypeDefinition(TypeDefinition):
    """Type definition wrapping a primitive type."""

    primitive: PrimitiveType

    @property
    def default_value(self) -> Any:
        return self.primitive.default_value

    @property
    def is_primitive(self) -> bool:
        return True


@dataclass
class MapTypeDefinition(TypeDefinition):
    """Type definition for string-keyed maps (e.g., map<int>)."""

    value_type: TypeDefinition

    @property
    def is_map(self) -> bool:
        return True


@dataclass
class ArrayTypeDefinition(TypeDefinition):
    """Type definition for array types (e.g., array<string>)."""

    element_type: TypeDefinition

    @property
    def is_array(self) -> bool:
        return True


@dataclass
class FieldDefinition:
    """Definition of a field within a record type."""

    name: str
    type_def: TypeDefinition
    pos: int = -1  # assigned by the owning record


@dataclass
class RecordTypeDefinition(TypeDefinition):
    """Type definition for named records.

    ``name`` is the fully-qualified record name (``namespace.SimpleName``);
    it is also the name used to resolve a fixed-layout record class.
    """

    fields: list[FieldDefinition] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.set_fields(self.fields)

    @property
    def is_record(self) -> bool:
        return True

    @property
    def namespace(self) -> str | None:
        """Return the dotted namespace, or None for an unqualified name."""
        namespace, _, _ = self.name.rpartition(".")
        return namespace or None

    @property
    def simple_name(self) -> str:
        """Return the name without its namespace."""
        return self.name.rpartition(".")[2]

    def set_fields(self, fields: list[FieldDefinition]) -> None:
        """Replace the field list, numbering fields by declaration order."""
        seen: set[str] = set()
        for f in fields:
            if f.name in seen:
                raise SchemaValidationException(
                    f"Duplicate field '{f.name}' in record '{self.name}'"
                )
            seen.add(f.name)
        for pos, f in enumerate(fields):
            f.pos = pos
        self.fields = list(fields)

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def field_names(self) -> list[str]:
        """Return the field names in declaration order."""
        return [f.name for f in self.fields]

    # Records are identified by name; the field list is mutable while parsing
    # and may refer back to this record.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordTypeDefinition):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"RecordTypeDefinition({self.name!r}, fields={self.field_names!r})"


class TypeRegistry:
    """Registry of all defined types."""

    def __init__(self) -> None:
        self._types: dict[str, TypeDefinition] = {}
        self._register_primitives()

    def _register_primitives(self) -> None:
        """Register all primitive types."""
        for pt in PrimitiveType:
            self._types[pt.value] = PrimitiveTypeDefinition(name=pt.value, primitive=pt)

    def register(self, type_def: TypeDefinition) -> None:
        """Register a type definition."""
        if type_def.name in self._types:
            raise SchemaValidationException(f"Type '{type_def.name}' is already defined")
        self._types[type_def.name] = type_def

    def get(self, name: str) -> TypeDefinition | None:
        """Get a type by name."""
        return self._types.get(name)

    def get_or_raise(self, name: str) -> TypeDefinition:
        """Get a type by name, raising if not found."""
        type_def = self._types.get(name)
        if type_def is None:
            raise SchemaValidationException(f"Type '{name}' not found")
        return type_def

    def map_of(self, value_type: TypeDefinition) -> MapTypeDefinition:
        """Get or create the map type for the given value type."""
        map_name = f"map<{value_type.name}>"
        existing = self._types.get(map_name)
        if isinstance(existing, MapTypeDefinition):
            return existing
        map_type = MapTypeDefinition(name=map_name, value_type=value_type)
        self._types[map_name] = map_type
        return map_type

    def array_of(self, element_type: TypeDefinition) -> ArrayTypeDefinition:
        """Get or create the array type for the given element type."""
        array_name = f"array<{element_type.name}>"
        existing = self._types.get(array_name)
        if isinstance(existing, ArrayTypeDefinition):
            return existing
        array_type = ArrayTypeDefinition(name=array_name, element_type=element_type)
        self._types[array_name] = array_type
        return array_type

    def register_stub(self, name: str) -> RecordTypeDefinition:
        """Pre-register an empty record for forward references.

        Raises SchemaValidationException if the name is already taken.
        """
        if name in self._types:
            raise SchemaValidationException(f"Type '{name}' is already defined")
        stub = RecordTypeDefinition(name=name, fields=[])
        self._types[name] = stub
        return stub

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())

    def list_records(self) -> list[RecordTypeDefinition]:
        """List all registered record types in registration order."""
        return [td for td in self._types.values() if isinstance(td, RecordTypeDefinition)]

    def __contains__(self, name: str) -> bool:
        return name in self._types
