"""Example usage of the typed_columns library."""

from typed_columns import EntityComposer, EntitySchema

# Define an entity and the records it spreads across columns using the DSL
schema_text = """
record com.example.Address {
    street: string
    city: string
    number: int
}

entity com.example.User {
    id: long key(1)
    region: string key(0)
    name: string column("meta:name")
    visits: int column("meta:visits")
    tags: map<int> keyAsColumn("tags")
    address: com.example.Address keyAsColumn("addr")
}
"""

schema = EntitySchema.parse(schema_text)
composer = EntityComposer(schema)

# Build the nested address from the columns a reader would have fetched
address = composer.build_key_as_column_field(
    "address", {"street": "Main St", "city": "Springfield", "number": 742}
)

user = (
    composer.get_builder()
    .put("region", "us")
    .put("id", 42)
    .put("name", "Homer")
    .put("tags", {"a": 1, "b": 2})
    .put("address", address)
    .build()
)
print(f"Built: {user}")

# Decompose the entity the way a writer lays it out
print(f"\nRow key parts: {composer.get_partition_key_parts(user)}")
for mapping in schema.column_mappings:
    value = composer.extract_field(user, mapping.field_name)
    print(f"  {mapping.mapping_value} = {value!r}")
for mapping in schema.key_as_column_mappings:
    value = composer.extract_field(user, mapping.field_name)
    columns = composer.extract_key_as_column_values(mapping.field_name, value)
    for qualifier, column_value in columns.items():
        print(f"  {mapping.family}:{qualifier} = {column_value!r}")
