"""Parser for the entity schema DSL.

A schema document declares any number of records and exactly one entity::

    record com.example.Address {
        street: string
        city: string
    }

    entity com.example.User {
        region: string key(0)
        id: long key(1)
        name: string column("meta:name")
        tags: map<int> keyAsColumn("tags")
        address: com.example.Address keyAsColumn
    }

Every entity field carries a mapping; record fields carry none.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import ply.yacc as yacc

from typed_columns.errors import SchemaValidationException
from typed_columns.mapping import FieldMapping, MappingType
from typed_columns.parsing.schema_lexer import SchemaLexer
from typed_columns.schema import EntitySchema
from typed_columns.types import (
    FieldDefinition,
    TypeDefinition,
    TypeRegistry,
)


@dataclass
class TypeRef:
    """Reference to a type, possibly wrapped in a map or array."""

    name: str
    container: str | None = None  # "map", "array" or None
    inner: TypeRef | None = None


@dataclass
class MappingSpec:
    """Field mapping as written in the DSL."""

    mapping_type: MappingType
    value: str | None = None


@dataclass
class FieldSpec:
    """A parsed field before resolution."""

    name: str
    type_ref: TypeRef
    mapping: MappingSpec | None = None
    lineno: int = 0


@dataclass
class RecordSpec:
    """A parsed record or entity before resolution."""

    name: str
    fields: list[FieldSpec]
    is_entity: bool = False


class SchemaParser:
    """Parser for the entity schema DSL."""

    tokens = SchemaLexer.tokens

    def __init__(self) -> None:
        self.lexer = SchemaLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.registry: TypeRegistry = TypeRegistry()
        self._specs: list[RecordSpec] = []

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : definition_list"""
        p[0] = p[1]

    def p_definition_list_single(self, p: yacc.YaccProduction) -> None:
        """definition_list : definition"""
        p[0] = [p[1]]

    def p_definition_list_multiple(self, p: yacc.YaccProduction) -> None:
        """definition_list : definition_list definition"""
        p[0] = p[1] + [p[2]]

    def p_definition_record(self, p: yacc.YaccProduction) -> None:
        """definition : RECORD IDENTIFIER body"""
        p[0] = RecordSpec(name=p[2], fields=p[3])

    def p_definition_entity(self, p: yacc.YaccProduction) -> None:
        """definition : ENTITY IDENTIFIER body"""
        p[0] = RecordSpec(name=p[2], fields=p[3], is_entity=True)

    def p_body(self, p: yacc.YaccProduction) -> None:
        """body : LBRACE field_list RBRACE
                | LBRACE field_list COMMA RBRACE"""
        p[0] = p[2]

    def p_body_empty(self, p: yacc.YaccProduction) -> None:
        """body : LBRACE RBRACE"""
        p[0] = []

    def p_field_list_single(self, p: yacc.YaccProduction) -> None:
        """field_list : field"""
        p[0] = [p[1]]

    def p_field_list_multiple(self, p: yacc.YaccProduction) -> None:
        """field_list : field_list field
                      | field_list COMMA field"""
        p[0] = p[1] + [p[len(p) - 1]]

    def p_field(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER COLON type_ref"""
        p[0] = FieldSpec(name=p[1], type_ref=p[3], lineno=p.lineno(1))

    def p_field_mapped(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER COLON type_ref mapping"""
        p[0] = FieldSpec(name=p[1], type_ref=p[3], mapping=p[4], lineno=p.lineno(1))

    def p_mapping_key(self, p: yacc.YaccProduction) -> None:
        """mapping : KEY LPAREN INTEGER RPAREN"""
        p[0] = MappingSpec(MappingType.KEY, str(p[3]))

    def p_mapping_column(self, p: yacc.YaccProduction) -> None:
        """mapping : COLUMN LPAREN STRING RPAREN"""
        p[0] = MappingSpec(MappingType.COLUMN, p[3])

    def p_mapping_key_as_column(self, p: yacc.YaccProduction) -> None:
        """mapping : KEY_AS_COLUMN LPAREN STRING RPAREN"""
        p[0] = MappingSpec(MappingType.KEY_AS_COLUMN, p[3])

    def p_mapping_key_as_column_bare(self, p: yacc.YaccProduction) -> None:
        """mapping : KEY_AS_COLUMN
                   | KEY_AS_COLUMN LPAREN RPAREN"""
        p[0] = MappingSpec(MappingType.KEY_AS_COLUMN)

    def p_type_ref_simple(self, p: yacc.YaccProduction) -> None:
        """type_ref : IDENTIFIER"""
        p[0] = TypeRef(name=p[1])

    def p_type_ref_map(self, p: yacc.YaccProduction) -> None:
        """type_ref : MAP LT type_ref GT"""
        p[0] = TypeRef(name=f"map<{p[3].name}>", container="map", inner=p[3])

    def p_type_ref_array(self, p: yacc.YaccProduction) -> None:
        """type_ref : ARRAY LT type_ref GT"""
        p[0] = TypeRef(name=f"array<{p[3].name}>", container="array", inner=p[3])

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> EntitySchema:
        """Parse a schema document and return its entity schema.

        Every record defined in the document is registered in
        ``self.registry``.

        Raises:
            SyntaxError: If the document is not well formed.
            SchemaValidationException: If it is well formed but invalid.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.registry = TypeRegistry()
        self.lexer.lexer.lineno = 1

        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        if specs is None:
            specs = []
        self._specs = specs

        return self._resolve_specs()

    def _resolve_type_ref(self, type_ref: TypeRef) -> TypeDefinition:
        """Resolve a type reference to a type definition."""
        if type_ref.container == "map":
            return self.registry.map_of(self._resolve_type_ref(type_ref.inner))  # type: ignore[arg-type]
        if type_ref.container == "array":
            return self.registry.array_of(self._resolve_type_ref(type_ref.inner))  # type: ignore[arg-type]
        return self.registry.get_or_raise(type_ref.name)

    def _resolve_specs(self) -> EntitySchema:
        """Resolve all specs into record types and build the entity schema.

        Phase 1: Pre-register stubs for every record so that records may
        refer to records defined later, or to themselves.
        Phase 2: Populate each stub's fields.
        """
        entities = [spec for spec in self._specs if spec.is_entity]
        if len(entities) != 1:
            raise SchemaValidationException(
                f"Schema must define exactly one entity, found {len(entities)}"
            )

        # Phase 1: Pre-register record stubs
        stubs = [self.registry.register_stub(spec.name) for spec in self._specs]

        # Phase 2: Populate stubs
        for spec, stub in zip(self._specs, stubs):
            fields: list[FieldDefinition] = []
            for field_spec in spec.fields:
                if spec.is_entity and field_spec.mapping is None:
                    raise SchemaValidationException(
                        f"Field '{field_spec.name}' of entity '{spec.name}' has no mapping "
                        f"(line {field_spec.lineno})"
                    )
                if not spec.is_entity and field_spec.mapping is not None:
                    raise SchemaValidationException(
                        f"Field '{field_spec.name}' of record '{spec.name}' cannot have a "
                        f"mapping (line {field_spec.lineno})"
                    )
                fields.append(
                    FieldDefinition(
                        name=field_spec.name,
                        type_def=self._resolve_type_ref(field_spec.type_ref),
                    )
                )
            stub.set_fields(fields)

        entity_spec = entities[0]
        entity_type = stubs[self._specs.index(entity_spec)]
        mappings = [
            FieldMapping(f.name, f.mapping.mapping_type, f.mapping.value)  # type: ignore[union-attr]
            for f in entity_spec.fields
        ]
        return EntitySchema(entity_type, mappings)
