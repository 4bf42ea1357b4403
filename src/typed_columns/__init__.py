"""Typed Columns - compose schema-described entities from column-mapped parts."""

from typed_columns.builders import (
    DynamicRecordBuilderFactory,
    FixedRecordBuilderFactory,
    RecordBuilder,
    RecordBuilderFactory,
    RecordKind,
    build_record_builder_factory,
    import_record_class,
)
from typed_columns.composer import EntityBuilder, EntityComposer
from typed_columns.errors import (
    DatasetException,
    SchemaValidationException,
    TypedColumnsError,
    ValidationException,
)
from typed_columns.mapping import FieldMapping, MappingType
from typed_columns.parsing import SchemaParser
from typed_columns.records import (
    DynamicRecord,
    FixedRecord,
    IndexedRecord,
    compile_record_class,
)
from typed_columns.schema import EntitySchema
from typed_columns.types import (
    ArrayTypeDefinition,
    FieldDefinition,
    MapTypeDefinition,
    PrimitiveType,
    PrimitiveTypeDefinition,
    RecordTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)

__all__ = [
    # Main API
    "EntityComposer",
    "EntityBuilder",
    "EntitySchema",
    "SchemaParser",
    # Mappings
    "FieldMapping",
    "MappingType",
    # Records and builders
    "IndexedRecord",
    "FixedRecord",
    "DynamicRecord",
    "compile_record_class",
    "RecordKind",
    "RecordBuilder",
    "RecordBuilderFactory",
    "FixedRecordBuilderFactory",
    "DynamicRecordBuilderFactory",
    "build_record_builder_factory",
    "import_record_class",
    # Type definitions
    "TypeDefinition",
    "PrimitiveType",
    "PrimitiveTypeDefinition",
    "MapTypeDefinition",
    "ArrayTypeDefinition",
    "RecordTypeDefinition",
    "FieldDefinition",
    "TypeRegistry",
    # Errors
    "TypedColumnsError",
    "DatasetException",
    "ValidationException",
    "SchemaValidationException",
]

__version__ = "0.1.0"
