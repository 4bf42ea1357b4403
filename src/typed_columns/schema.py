"""Entity schema: a record type paired with its field mappings."""

from __future__ import annotations

from pathlib import Path

from typed_columns.errors import SchemaValidationException
from typed_columns.mapping import FieldMapping, MappingType
from typed_columns.types import RecordTypeDefinition


class EntitySchema:
    """Record type of an entity plus the storage mapping of its fields.

    Treated as read-only once constructed. Construction validates that every
    mapping names a distinct field of the record and that key ordinals cover
    ``0..n-1`` exactly once.
    """

    def __init__(
        self,
        record_type: RecordTypeDefinition,
        field_mappings: list[FieldMapping],
    ) -> None:
        """Initialize an entity schema.

        Args:
            record_type: Record type describing the entity's fields.
            field_mappings: One mapping per mapped field.

        Raises:
            SchemaValidationException: If a mapping is invalid.
        """
        self.record_type = record_type
        self.field_mappings: tuple[FieldMapping, ...] = tuple(field_mappings)
        self._mappings_by_name: dict[str, FieldMapping] = {}

        for mapping in self.field_mappings:
            if mapping.field_name in self._mappings_by_name:
                raise SchemaValidationException(
                    f"Field '{mapping.field_name}' is mapped more than once"
                )
            if record_type.get_field(mapping.field_name) is None:
                raise SchemaValidationException(
                    f"No field named '{mapping.field_name}' in record '{record_type.name}'"
                )
            if mapping.mapping_type is MappingType.COLUMN and not mapping.mapping_value:
                raise SchemaValidationException(
                    f"Column field '{mapping.field_name}' has no column name"
                )
            self._mappings_by_name[mapping.field_name] = mapping

        self.key_mappings: tuple[FieldMapping, ...] = self._validate_key_ordinals()

    @classmethod
    def parse(cls, text: str) -> EntitySchema:
        """Parse an entity schema from schema DSL text.

        Args:
            text: DSL string defining records and exactly one entity.

        Returns:
            The parsed EntitySchema.
        """
        from typed_columns.parsing import SchemaParser

        return SchemaParser().parse(text)

    @classmethod
    def load(cls, path: Path | str) -> EntitySchema:
        """Read and parse an entity schema file."""
        return cls.parse(Path(path).read_text(encoding="utf-8"))

    def _validate_key_ordinals(self) -> tuple[FieldMapping, ...]:
        """Check key ordinals and return the key mappings in ordinal order."""
        by_ordinal: dict[int, FieldMapping] = {}
        for mapping in self.field_mappings:
            if mapping.mapping_type is not MappingType.KEY:
                continue
            ordinal = mapping.key_ordinal
            if ordinal in by_ordinal:
                raise SchemaValidationException(
                    f"Key fields '{by_ordinal[ordinal].field_name}' and "
                    f"'{mapping.field_name}' share ordinal {ordinal}"
                )
            by_ordinal[ordinal] = mapping

        expected = set(range(len(by_ordinal)))
        if set(by_ordinal) != expected:
            raise SchemaValidationException(
                f"Key ordinals must cover 0..{len(by_ordinal) - 1}, "
                f"found {sorted(by_ordinal)}"
            )
        return tuple(by_ordinal[i] for i in range(len(by_ordinal)))

    @property
    def name(self) -> str:
        """Return the entity's fully-qualified record name."""
        return self.record_type.name

    @property
    def key_part_count(self) -> int:
        """Return the number of fields in the composite key."""
        return len(self.key_mappings)

    @property
    def column_mappings(self) -> list[FieldMapping]:
        """Return the COLUMN mappings in declaration order."""
        return self._mappings_of(MappingType.COLUMN)

    @property
    def key_as_column_mappings(self) -> list[FieldMapping]:
        """Return the KEY_AS_COLUMN mappings in declaration order."""
        return self._mappings_of(MappingType.KEY_AS_COLUMN)

    def _mappings_of(self, mapping_type: MappingType) -> list[FieldMapping]:
        return [m for m in self.field_mappings if m.mapping_type is mapping_type]

    def get_field_mapping(self, field_name: str) -> FieldMapping | None:
        """Get the mapping for a field, or None if the field is unmapped."""
        return self._mappings_by_name.get(field_name)

    def required_columns(self) -> list[str]:
        """Return the columns a reader must fetch to rebuild an entity.

        COLUMN mappings contribute their column identifier. KEY_AS_COLUMN
        mappings that name a family contribute ``family:``, standing for every
        column in that family. Key fields live in the row key and need none.
        """
        columns: list[str] = []
        for mapping in self.field_mappings:
            if mapping.mapping_type is MappingType.COLUMN:
                column = mapping.mapping_value
            elif mapping.mapping_type is MappingType.KEY_AS_COLUMN and mapping.family:
                column = f"{mapping.family}:"
            else:
                continue
            if column not in columns:
                columns.append(column)
        return columns

    def __repr__(self) -> str:
        return f"EntitySchema({self.name!r}, mappings={len(self.field_mappings)})"
