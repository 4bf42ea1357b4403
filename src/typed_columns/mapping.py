"""Field mapping descriptors: how each entity field is laid out in columns."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from typed_columns.errors import SchemaValidationException


class MappingType(Enum):
    """How a field of an entity is stored."""

    KEY = "key"
    COLUMN = "column"
    KEY_AS_COLUMN = "keyAsColumn"


@dataclass(frozen=True)
class FieldMapping:
    """Storage mapping for a single entity field.

    For KEY mappings ``mapping_value`` holds the field's ordinal within the
    composite key. For COLUMN mappings it is the column identifier, usually
    ``family:qualifier``. KEY_AS_COLUMN mappings may name the column family
    the spread columns are written to; the value is otherwise unused.
    """

    field_name: str
    mapping_type: MappingType
    mapping_value: str | None = None

    @property
    def key_ordinal(self) -> int:
        """Return the 0-based position of a KEY field in the composite key."""
        if self.mapping_type is not MappingType.KEY:
            raise SchemaValidationException(
                f"Field '{self.field_name}' is not a key field"
            )
        try:
            return int(self.mapping_value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise SchemaValidationException(
                f"Key field '{self.field_name}' has invalid ordinal {self.mapping_value!r}"
            ) from None

    @property
    def family(self) -> str | None:
        """Return the column family for COLUMN and KEY_AS_COLUMN mappings."""
        if self.mapping_type is MappingType.KEY or not self.mapping_value:
            return None
        return self.mapping_value.split(":", 1)[0]

    @classmethod
    def key(cls, field_name: str, ordinal: int) -> FieldMapping:
        """Create a KEY mapping at the given ordinal."""
        return cls(field_name, MappingType.KEY, str(ordinal))

    @classmethod
    def column(cls, field_name: str, column: str) -> FieldMapping:
        """Create a COLUMN mapping to the given column identifier."""
        return cls(field_name, MappingType.COLUMN, column)

    @classmethod
    def key_as_column(cls, field_name: str, family: str | None = None) -> FieldMapping:
        """Create a KEY_AS_COLUMN mapping, optionally within a column family."""
        return cls(field_name, MappingType.KEY_AS_COLUMN, family)
