"""Record builders and the factories that produce them.

A RecordBuilder accumulates named field values for one record and produces
it on ``build()``. Two representations are supported, selected by
:class:`RecordKind`:

- ``FIXED``: a precompiled :class:`~typed_columns.records.FixedRecord`
  subclass, resolved by the record's fully-qualified name.
- ``DYNAMIC``: a :class:`~typed_columns.records.DynamicRecord` carrying the
  record type itself.
"""

from __future__ import annotations

import dataclasses
import importlib
import logging
from enum import Enum
from typing import Any, Callable

from typed_columns.errors import DatasetException, SchemaValidationException
from typed_columns.records import DynamicRecord, FixedRecord, IndexedRecord
from typed_columns.types import FieldDefinition, RecordTypeDefinition

logger = logging.getLogger(__name__)

# Maps a fully-qualified record name to the class implementing it.
ClassResolver = Callable[[str], Any]


class RecordKind(Enum):
    """Which concrete representation records are built as."""

    FIXED = "fixed"
    DYNAMIC = "dynamic"


class RecordBuilder:
    """Accumulates field values for a single record.

    Fields may be put in any order and need not all be set; unset fields
    keep the representation's default. A builder produces exactly one record.
    """

    def __init__(self, record_type: RecordTypeDefinition) -> None:
        self.record_type = record_type
        self._built = False

    def _field(self, name: str) -> FieldDefinition:
        if self._built:
            raise RuntimeError("Record builder has already been built")
        field_def = self.record_type.get_field(name)
        if field_def is None:
            raise SchemaValidationException(
                f"No field named '{name}' in record '{self.record_type.name}'"
            )
        return field_def

    def put(self, name: str, value: Any) -> None:
        """Set the value of the named field."""
        self._set(self._field(name), value)

    def build(self) -> IndexedRecord:
        """Return the finished record. The builder cannot be used afterwards."""
        if self._built:
            raise RuntimeError("Record builder has already been built")
        self._built = True
        return self._record()

    def _set(self, field_def: FieldDefinition, value: Any) -> None:
        raise NotImplementedError

    def _record(self) -> IndexedRecord:
        raise NotImplementedError


class FixedRecordBuilder(RecordBuilder):
    """Builds an instance of a FixedRecord class, setting attributes by name."""

    def __init__(
        self, record_type: RecordTypeDefinition, record_class: type[FixedRecord]
    ) -> None:
        super().__init__(record_type)
        self._instance = record_class()

    def _set(self, field_def: FieldDefinition, value: Any) -> None:
        setattr(self._instance, field_def.name, value)

    def _record(self) -> IndexedRecord:
        return self._instance


class DynamicRecordBuilder(RecordBuilder):
    """Builds a DynamicRecord for a record type."""

    def __init__(self, record_type: RecordTypeDefinition) -> None:
        super().__init__(record_type)
        self._instance = DynamicRecord(record_type)

    def _set(self, field_def: FieldDefinition, value: Any) -> None:
        self._instance.put(field_def.pos, value)

    def _record(self) -> IndexedRecord:
        return self._instance


class RecordBuilderFactory:
    """Produces fresh RecordBuilders for one record type.

    Factories are immutable after construction and may be shared.
    """

    def __init__(self, record_type: RecordTypeDefinition) -> None:
        self.record_type = record_type

    def get_builder(self) -> RecordBuilder:
        """Return a new builder."""
        raise NotImplementedError


class FixedRecordBuilderFactory(RecordBuilderFactory):
    """Factory for builders of a precompiled record class.

    The class is resolved once, when the factory is constructed.
    """

    def __init__(
        self,
        record_type: RecordTypeDefinition,
        resolver: ClassResolver | None = None,
    ) -> None:
        """Resolve the record class for ``record_type``.

        Args:
            record_type: The record type to build.
            resolver: Looks up a class by fully-qualified name. Defaults to
                :func:`import_record_class`.

        Raises:
            DatasetException: If no usable class can be found.
        """
        super().__init__(record_type)
        self.record_class = _resolve_record_class(record_type, resolver or import_record_class)

    def get_builder(self) -> RecordBuilder:
        return FixedRecordBuilder(self.record_type, self.record_class)


class DynamicRecordBuilderFactory(RecordBuilderFactory):
    """Factory for DynamicRecord builders."""

    def get_builder(self) -> RecordBuilder:
        return DynamicRecordBuilder(self.record_type)


def import_record_class(full_name: str) -> Any:
    """Import the class named by a dotted ``module.ClassName`` path."""
    module_name, _, class_name = full_name.rpartition(".")
    if not module_name:
        raise ImportError(f"Record name '{full_name}' has no module part")
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


def _resolve_record_class(
    record_type: RecordTypeDefinition, resolver: ClassResolver
) -> type[FixedRecord]:
    """Look up and check the FixedRecord class implementing a record type."""
    class_name = record_type.name
    try:
        record_class = resolver(class_name)
    except (ImportError, AttributeError, LookupError) as e:
        raise DatasetException(f"Could not get class for {class_name}") from e
    if record_class is None:
        raise DatasetException(f"Could not get class for {class_name}")

    if not (isinstance(record_class, type) and issubclass(record_class, FixedRecord)):
        raise DatasetException(f"Class for {class_name} is not a FixedRecord: {record_class!r}")
    if not dataclasses.is_dataclass(record_class):
        raise DatasetException(f"Class for {class_name} is not a dataclass")
    # FixedRecord.get() reads by position, so the class layout must match.
    layout = getattr(record_class, "SCHEMA", None)
    if layout is None or layout.field_names != record_type.field_names:
        raise DatasetException(f"Class for {class_name} does not match the record's field layout")
    declared = {f.name for f in dataclasses.fields(record_class)}
    missing = [name for name in record_type.field_names if name not in declared]
    if missing:
        raise DatasetException(f"Class for {class_name} lacks fields {missing}")
    # Builders start from record_class() and may leave fields unset.
    for f in dataclasses.fields(record_class):
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            raise DatasetException(f"Class for {class_name} field '{f.name}' has no default")

    logger.debug("Resolved record class %s.%s for %s",
                 record_class.__module__, record_class.__qualname__, class_name)
    return record_class


def build_record_builder_factory(
    record_type: RecordTypeDefinition,
    kind: RecordKind,
    resolver: ClassResolver | None = None,
) -> RecordBuilderFactory:
    """Create the factory for ``record_type`` matching the record kind."""
    if kind is RecordKind.FIXED:
        factory: RecordBuilderFactory = FixedRecordBuilderFactory(record_type, resolver)
    else:
        factory = DynamicRecordBuilderFactory(record_type)
    logger.debug("Built %s record builder factory for %s", kind.value, record_type.name)
    return factory
