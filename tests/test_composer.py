"""Tests for the entity composer."""

import pytest

from typed_columns.builders import RecordKind
from typed_columns.composer import EntityBuilder, EntityComposer
from typed_columns.errors import DatasetException, SchemaValidationException
from typed_columns.mapping import FieldMapping
from typed_columns.parsing import SchemaParser
from typed_columns.records import DynamicRecord, FixedRecord, compile_record_class
from typed_columns.schema import EntitySchema
from typed_columns.types import FieldDefinition, RecordTypeDefinition, TypeRegistry

USER_SCHEMA = """
record com.example.Address {
    street: string
    city: string
    number: int
}

entity com.example.User {
    name: string column("meta:name")
    id: long key(1)
    visits: int column("meta:visits")
    score: float column("meta:score")
    balance: double column("meta:balance")
    active: boolean column("meta:active")
    region: string key(0)
    tags: map<int> keyAsColumn("tags")
    address: com.example.Address keyAsColumn("addr")
    home: com.example.Address column("meta:home")
    count: int keyAsColumn("bad")
}
"""


def make_composer(kind: RecordKind, text: str = USER_SCHEMA) -> EntityComposer:
    """Create a composer, compiling record classes for FIXED composers."""
    parser = SchemaParser()
    schema = parser.parse(text)
    classes = {record.name: compile_record_class(record) for record in parser.registry.list_records()}
    return EntityComposer(schema, kind=kind, resolver=classes.__getitem__)


@pytest.fixture(params=[RecordKind.DYNAMIC, RecordKind.FIXED], ids=["dynamic", "fixed"])
def composer(request):
    return make_composer(request.param)


@pytest.fixture
def address(composer):
    return composer.build_key_as_column_field(
        "address", {"street": "Main St", "city": "Springfield", "number": 742}
    )


@pytest.fixture
def user(composer, address):
    return (
        composer.get_builder()
        .put("region", "us")
        .put("id", 42)
        .put("name", "Homer")
        .put("tags", {"a": 1, "b": 2})
        .put("address", address)
        .build()
    )


class TestConstruction:
    """Tests for composer construction."""

    def test_key_part_count(self, composer):
        assert composer.key_part_count == 2

    def test_factories_only_for_spread_records(self, composer):
        assert list(composer.kac_record_builder_factories) == ["address"]
        factory = composer.kac_record_builder_factories["address"]
        assert factory.record_type.name == "com.example.Address"

    def test_fixed_resolves_entity_and_spread_records(self):
        resolved = []
        parser = SchemaParser()
        schema = parser.parse(USER_SCHEMA)
        classes = {r.name: compile_record_class(r) for r in parser.registry.list_records()}

        def resolver(name):
            resolved.append(name)
            return classes[name]

        EntityComposer(schema, kind=RecordKind.FIXED, resolver=resolver)
        assert resolved == ["com.example.User", "com.example.Address"]

    def test_fixed_unresolvable_entity_class(self):
        schema = EntitySchema.parse(USER_SCHEMA)
        with pytest.raises(DatasetException, match="com.example.User"):
            EntityComposer(schema, kind=RecordKind.FIXED)

    def test_fixed_unresolvable_spread_record_class(self):
        parser = SchemaParser()
        schema = parser.parse(USER_SCHEMA)
        classes = {"com.example.User": compile_record_class(schema.record_type)}
        with pytest.raises(DatasetException, match="com.example.Address"):
            EntityComposer(schema, kind=RecordKind.FIXED, resolver=classes.__getitem__)

    def test_dynamic_is_default(self):
        composer = EntityComposer(EntitySchema.parse(USER_SCHEMA))
        assert composer.kind is RecordKind.DYNAMIC
        assert isinstance(composer.get_builder().build(), DynamicRecord)


class TestGetBuilder:
    """Tests for EntityComposer.get_builder."""

    def test_put_is_chainable(self, composer):
        builder = composer.get_builder()
        assert isinstance(builder, EntityBuilder)
        assert builder.put("region", "us") is builder

    def test_builds_representation(self, composer, user):
        if composer.kind is RecordKind.FIXED:
            assert isinstance(user, FixedRecord)
        else:
            assert isinstance(user, DynamicRecord)
        assert user.get_schema().name == "com.example.User"

    def test_fresh_builder_each_call(self, composer):
        first = composer.get_builder().put("region", "us").build()
        second = composer.get_builder().build()
        assert composer.extract_field(first, "region") == "us"
        assert composer.extract_field(second, "region") is None

    def test_unknown_field(self, composer):
        with pytest.raises(SchemaValidationException):
            composer.get_builder().put("nickname", "h")


class TestExtractField:
    """Tests for EntityComposer.extract_field."""

    def test_set_values(self, composer, user, address):
        assert composer.extract_field(user, "region") == "us"
        assert composer.extract_field(user, "id") == 42
        assert composer.extract_field(user, "name") == "Homer"
        assert composer.extract_field(user, "address") == address

    def test_unset_primitives_read_as_zero(self, composer):
        entity = composer.get_builder().build()
        assert composer.extract_field(entity, "visits") == 0
        assert composer.extract_field(entity, "id") == 0
        assert composer.extract_field(entity, "active") is False
        assert composer.extract_field(entity, "score") == 0.0
        assert isinstance(composer.extract_field(entity, "score"), float)
        assert composer.extract_field(entity, "balance") == 0.0
        assert isinstance(composer.extract_field(entity, "balance"), float)

    def test_unset_non_primitives_read_as_none(self, composer):
        entity = composer.get_builder().build()
        assert composer.extract_field(entity, "name") is None
        assert composer.extract_field(entity, "region") is None
        assert composer.extract_field(entity, "tags") is None
        assert composer.extract_field(entity, "address") is None

    def test_explicit_none_primitive(self, composer):
        entity = composer.get_builder().put("visits", None).build()
        assert composer.extract_field(entity, "visits") == 0

    def test_set_zero_is_kept(self, composer):
        entity = composer.get_builder().put("active", True).put("visits", 0).build()
        assert composer.extract_field(entity, "active") is True
        assert composer.extract_field(entity, "visits") == 0

    def test_every_field_readable_after_empty_build(self, composer):
        entity = composer.get_builder().build()
        values = {
            name: composer.extract_field(entity, name)
            for name in composer.entity_schema.record_type.field_names
        }
        assert values == {
            "name": None,
            "id": 0,
            "visits": 0,
            "score": 0.0,
            "balance": 0.0,
            "active": False,
            "region": None,
            "tags": None,
            "address": None,
            "home": None,
            "count": 0,
        }

    def test_unknown_field(self, composer, user):
        with pytest.raises(SchemaValidationException, match="No field named 'nickname'"):
            composer.extract_field(user, "nickname")


class TestGetPartitionKeyParts:
    """Tests for EntityComposer.get_partition_key_parts."""

    def test_ordered_by_ordinal(self, composer, user):
        assert composer.get_partition_key_parts(user) == ["us", 42]

    def test_unset_key_fields(self, composer):
        parts = composer.get_partition_key_parts(composer.get_builder().build())
        assert len(parts) == 2
        if composer.kind is RecordKind.FIXED:
            assert parts == [None, 0]
        else:
            assert parts == [None, None]

    def test_three_part_key(self):
        composer = make_composer(RecordKind.DYNAMIC, """
            entity Event {
                c: string key(2)
                a: string key(0)
                payload: string column("d:payload")
                b: int key(1)
            }
        """)
        entity = composer.get_builder().put("a", "x").put("b", 7).put("c", "z").build()
        assert composer.get_partition_key_parts(entity) == ["x", 7, "z"]

    def test_no_key_fields(self):
        composer = make_composer(RecordKind.DYNAMIC, """
            entity Blob { data: bytes column("d:data") }
        """)
        assert composer.get_partition_key_parts(composer.get_builder().build()) == []


class TestExtractKeyAsColumnValues:
    """Tests for EntityComposer.extract_key_as_column_values."""

    def test_map(self, composer):
        assert composer.extract_key_as_column_values("tags", {"a": 1, "b": 2}) == {"a": 1, "b": 2}

    def test_map_is_copied(self, composer):
        tags = {"a": 1}
        values = composer.extract_key_as_column_values("tags", tags)
        assert values is not tags
        values["b"] = 2
        assert tags == {"a": 1}

    def test_record(self, composer, address):
        assert composer.extract_key_as_column_values("address", address) == {
            "street": "Main St",
            "city": "Springfield",
            "number": 742,
        }

    def test_partial_record(self, composer):
        address = composer.build_key_as_column_field("address", {"city": "Shelbyville"})
        values = composer.extract_key_as_column_values("address", address)
        assert values["city"] == "Shelbyville"
        assert values["street"] is None

    def test_unset_map(self, composer):
        entity = composer.get_builder().put("id", 7).build()
        tags = composer.extract_field(entity, "tags")
        assert composer.extract_key_as_column_values("tags", tags) == {}

    def test_unset_record(self, composer):
        entity = composer.get_builder().put("id", 7).build()
        address = composer.extract_field(entity, "address")
        assert composer.extract_key_as_column_values("address", address) == {}

    def test_unsupported_type(self, composer):
        with pytest.raises(SchemaValidationException, match="Found int"):
            composer.extract_key_as_column_values("count", 5)

    def test_unsupported_type_unset(self, composer):
        with pytest.raises(SchemaValidationException, match="Found int"):
            composer.extract_key_as_column_values("count", None)

    def test_unknown_field(self, composer):
        with pytest.raises(SchemaValidationException, match="No field named 'nickname'"):
            composer.extract_key_as_column_values("nickname", {})


class TestBuildKeyAsColumnField:
    """Tests for EntityComposer.build_key_as_column_field."""

    def test_map(self, composer):
        columns = {"a": 1, "b": 2}
        tags = composer.build_key_as_column_field("tags", columns)
        assert tags == columns
        assert tags is not columns

    def test_record(self, composer, address):
        assert address.get_schema().name == "com.example.Address"
        assert composer.extract_key_as_column_values("address", address)["number"] == 742

    def test_record_in_any_order(self, composer, address):
        rebuilt = composer.build_key_as_column_field(
            "address", {"number": 742, "city": "Springfield", "street": "Main St"}
        )
        assert rebuilt == address

    def test_record_unknown_column(self, composer):
        with pytest.raises(SchemaValidationException, match="No field named 'zip'"):
            composer.build_key_as_column_field("address", {"zip": "49007"})

    def test_record_not_mapped_as_key_as_column(self, composer):
        with pytest.raises(SchemaValidationException, match="not mapped as keyAsColumn"):
            composer.build_key_as_column_field("home", {"street": "Evergreen"})

    def test_unsupported_type(self, composer):
        with pytest.raises(SchemaValidationException, match="Found int"):
            composer.build_key_as_column_field("count", {"x": 1})

    def test_unknown_field(self, composer):
        with pytest.raises(SchemaValidationException):
            composer.build_key_as_column_field("nickname", {})


class TestRoundTrip:
    """Spread fields survive decomposition and recomposition."""

    def test_record_round_trip(self, composer, address):
        columns = composer.extract_key_as_column_values("address", address)
        assert composer.build_key_as_column_field("address", columns) == address

    def test_map_round_trip(self, composer):
        tags = {"a": 1, "b": 2}
        rebuilt = composer.build_key_as_column_field(
            "tags", composer.extract_key_as_column_values("tags", tags)
        )
        assert rebuilt == tags
        assert rebuilt is not tags

    def test_entity_round_trip(self, composer, user):
        builder = composer.get_builder()
        schema = composer.entity_schema
        for mapping, value in zip(schema.key_mappings, composer.get_partition_key_parts(user)):
            builder.put(mapping.field_name, value)
        for mapping in schema.column_mappings:
            builder.put(mapping.field_name, composer.extract_field(user, mapping.field_name))
        for name in ["tags", "address"]:
            columns = composer.extract_key_as_column_values(name, composer.extract_field(user, name))
            builder.put(name, composer.build_key_as_column_field(name, columns))
        rebuilt = builder.build()

        for name in schema.record_type.field_names:
            assert composer.extract_field(rebuilt, name) == composer.extract_field(user, name)


class TestScenario:
    """The region/id/tags example end to end with hand-built schema objects."""

    def test_key_parts_and_tags(self):
        registry = TypeRegistry()
        record_type = RecordTypeDefinition(
            name="Item",
            fields=[
                FieldDefinition(name="id", type_def=registry.get_or_raise("int")),
                FieldDefinition(name="region", type_def=registry.get_or_raise("string")),
                FieldDefinition(name="tags", type_def=registry.map_of(registry.get_or_raise("int"))),
            ],
        )
        schema = EntitySchema(
            record_type,
            [
                FieldMapping.key("id", 1),
                FieldMapping.key("region", 0),
                FieldMapping.key_as_column("tags"),
            ],
        )
        composer = EntityComposer(schema)
        entity = (
            composer.get_builder()
            .put("region", "us")
            .put("id", 42)
            .put("tags", {"a": 1, "b": 2})
            .build()
        )

        assert composer.get_partition_key_parts(entity) == ["us", 42]
        assert composer.extract_key_as_column_values("tags", {"a": 1, "b": 2}) == {"a": 1, "b": 2}
