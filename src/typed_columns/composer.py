"""Composes entities from stored parts and decomposes them into column values."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from typed_columns.builders import (
    ClassResolver,
    RecordBuilder,
    RecordBuilderFactory,
    RecordKind,
    build_record_builder_factory,
)
from typed_columns.errors import SchemaValidationException
from typed_columns.mapping import MappingType
from typed_columns.records import IndexedRecord
from typed_columns.schema import EntitySchema
from typed_columns.types import FieldDefinition, RecordTypeDefinition

logger = logging.getLogger(__name__)


class EntityBuilder:
    """Builds one entity. Obtained from :meth:`EntityComposer.get_builder`."""

    def __init__(self, record_builder: RecordBuilder) -> None:
        self._record_builder = record_builder

    def put(self, field_name: str, value: Any) -> EntityBuilder:
        """Set a field of the entity and return this builder."""
        self._record_builder.put(field_name, value)
        return self

    def build(self) -> IndexedRecord:
        """Return the entity."""
        return self._record_builder.build()


class EntityComposer:
    """Translates between entities and their column-mapped parts.

    The composer handles both fixed-layout and dynamic records; the choice is
    fixed at construction. All record builder factories are created up front,
    so a composer is read-only afterwards and may be shared between threads.
    Builders returned by :meth:`get_builder` may not.
    """

    def __init__(
        self,
        entity_schema: EntitySchema,
        kind: RecordKind = RecordKind.DYNAMIC,
        resolver: ClassResolver | None = None,
    ) -> None:
        """Initialize a composer for an entity schema.

        Args:
            entity_schema: Schema of the entities this composer composes.
            kind: Record representation to build entities as.
            resolver: Class lookup for FIXED records. Defaults to importing
                the record's fully-qualified name.

        Raises:
            DatasetException: If a FIXED record class cannot be resolved.
        """
        self.entity_schema = entity_schema
        self.kind = kind
        self._resolver = resolver
        self.record_builder_factory = self._build_factory(entity_schema.record_type)

        self.key_part_count = sum(
            1 for m in entity_schema.field_mappings if m.mapping_type is MappingType.KEY
        )

        # Spread record fields are rebuilt from their columns field by field,
        # so each needs a factory of its own. Map fields are rebuilt directly.
        self.kac_record_builder_factories: dict[str, RecordBuilderFactory] = {}
        for mapping in entity_schema.key_as_column_mappings:
            field_type = self._get_field(mapping.field_name).type_def
            if field_type.is_record:
                self.kac_record_builder_factories[mapping.field_name] = self._build_factory(
                    field_type  # type: ignore[arg-type]
                )

        logger.debug(
            "Created %s entity composer for %s (%d key parts, %d spread record fields)",
            kind.value,
            entity_schema.name,
            self.key_part_count,
            len(self.kac_record_builder_factories),
        )

    def _build_factory(self, record_type: RecordTypeDefinition) -> RecordBuilderFactory:
        return build_record_builder_factory(record_type, self.kind, self._resolver)

    def _get_field(self, field_name: str) -> FieldDefinition:
        record_type = self.entity_schema.record_type
        field_def = record_type.get_field(field_name)
        if field_def is None:
            raise SchemaValidationException(
                f"No field named '{field_name}' in schema '{record_type.name}'"
            )
        return field_def

    def get_builder(self) -> EntityBuilder:
        """Return a builder for a new entity."""
        return EntityBuilder(self.record_builder_factory.get_builder())

    def extract_field(self, entity: IndexedRecord, field_name: str) -> Any:
        """Return the value of a field of an entity.

        An absent value of an int, long, boolean, float or double field reads
        as that type's zero value, the same as a fixed-layout record would
        hold. Absent values of other types read as None.

        Raises:
            SchemaValidationException: If the schema has no such field.
        """
        field_def = self._get_field(field_name)
        value = entity.get(field_def.pos)
        if value is None:
            value = field_def.type_def.default_value
        return value

    def extract_key_as_column_values(
        self, field_name: str, field_value: Any
    ) -> dict[str, Any]:
        """Split a spread field's value into column name/value pairs.

        A map value is copied as-is. A record value yields one entry per
        field of the record, keyed by field name. An unset value (None) has
        no columns and yields an empty dict.

        Raises:
            SchemaValidationException: If the field is unknown or is neither a
                map nor a record.
        """
        field_type = self._get_field(field_name).type_def
        if field_type.is_map:
            return {} if field_value is None else dict(field_value)
        if field_type.is_record:
            if field_value is None:
                return {}
            return {
                f.name: field_value.get(f.pos) for f in field_value.get_schema().fields
            }
        raise SchemaValidationException(
            f"Only map or record type valid for keyAsColumn fields. Found {field_type.name}"
        )

    def build_key_as_column_field(
        self, field_name: str, key_as_column_values: Mapping[str, Any]
    ) -> Any:
        """Rebuild a spread field's value from its column name/value pairs.

        Raises:
            SchemaValidationException: If the field is unknown, is neither a
                map nor a record, or is a record not mapped as keyAsColumn.
        """
        field_type = self._get_field(field_name).type_def
        if field_type.is_map:
            return dict(key_as_column_values)
        if field_type.is_record:
            factory = self.kac_record_builder_factories.get(field_name)
            if factory is None:
                raise SchemaValidationException(
                    f"Field '{field_name}' is not mapped as keyAsColumn"
                )
            builder = factory.get_builder()
            for name, value in key_as_column_values.items():
                builder.put(name, value)
            return builder.build()
        raise SchemaValidationException(
            f"Only map or record type valid for keyAsColumn fields. Found {field_type.name}"
        )

    def get_partition_key_parts(self, entity: IndexedRecord) -> list[Any]:
        """Return the entity's composite key parts in key order.

        Part ``i`` is the value of the key field with ordinal ``i``.
        """
        record_type = self.entity_schema.record_type
        parts: list[Any] = [None] * self.key_part_count
        for mapping in self.entity_schema.field_mappings:
            if mapping.mapping_type is MappingType.KEY:
                pos = record_type.get_field(mapping.field_name).pos
                parts[mapping.key_ordinal] = entity.get(pos)
        return parts
