"""Convert a subgraph ``schema.graphql`` into the SubQuery dialect.

The document is parsed with graphql-core and rebuilt as new nodes; nodes
returned by the parser are never modified.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from graphql import (
    ArgumentNode,
    DirectiveNode,
    DocumentNode,
    FieldDefinitionNode,
    GraphQLError,
    ListTypeNode,
    ListValueNode,
    NamedTypeNode,
    NameNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectValueNode,
    Source,
    StringValueNode,
    TypeDefinitionNode,
    TypeNode,
    parse,
    print_ast,
)
from graphql.language import Node

from subql_migrate.config import SCHEMA_DOCS_URL
from subql_migrate.errors import StructuralParseError

logger = logging.getLogger(__name__)

SCHEMA_TYPE_NAME = "_Schema_"
DERIVED_FROM_PLACEHOLDER = "<replace-me>"
DEFAULT_FULLTEXT_LANGUAGE = "english"

# Scalars available to SubQuery projects.
SUBQL_SCALARS: frozenset[str] = frozenset(
    {"String", "Int", "Boolean", "ID", "Date", "Bytes", "Float", "BigInt", "BigDecimal"}
)

# See https://academy.subquery.network/indexer/build/graph-migration.html#differences-in-the-graphql-schema
TYPE_RENAMES: dict[str, str] = {
    "Int8": "Int",
    "Timestamp": "Date",
    "BigDecimal": "Float",
    "Bytes": "String",
}

UNSUPPORTED_ENTITY_ARGUMENTS: dict[str, str] = {
    "immutable": "Immutable",
    "timeseries": "Timeseries",
}


def migrate_schema(subgraph_schema_path: str | Path, subql_schema_path: str | Path) -> None:
    source = Path(subgraph_schema_path).read_text(encoding="utf-8")
    output = migrate_schema_from_string(source)
    target = Path(subql_schema_path)
    target.unlink(missing_ok=True)
    target.write_text(output, encoding="utf-8")
    logger.info(
        "schema.graphql has been migrated. If there are any issues see our documentation for more details %s",
        SCHEMA_DOCS_URL,
    )


def migrate_schema_from_string(sdl: str) -> str:
    try:
        doc = parse(Source(sdl))
    except GraphQLError as e:
        raise StructuralParseError(f"Invalid subgraph schema: {e.message}") from e

    # Lookups see aggregation types too, so relations to them resolve without a directive
    type_definitions = {d.name.value: d for d in doc.definitions if isinstance(d, TypeDefinitionNode)}
    remaining = [d for d in doc.definitions if not _is_aggregation(d)]

    fulltext: dict[str, list[DirectiveNode]] = {}
    for definition in remaining:
        if _is_object_type(definition) and definition.name.value == SCHEMA_TYPE_NAME:
            for directive in definition.directives or ():
                converted = _convert_fulltext_directive(directive, type_definitions)
                if converted is not None:
                    entity_name, fulltext_directive = converted
                    fulltext.setdefault(entity_name, []).append(fulltext_directive)

    updated = [
        _migrate_definition(d, type_definitions, fulltext.get(d.name.value, []))
        if _is_object_type(d)
        else d
        for d in remaining
        if not (_is_object_type(d) and d.name.value == SCHEMA_TYPE_NAME)
    ]
    return print_ast(DocumentNode(definitions=tuple(updated)))


# ---------------------------------------------------------------------------
# Definition rewriting
# ---------------------------------------------------------------------------


def _is_aggregation(definition: Node) -> bool:
    if not _is_object_type(definition):
        return False
    if _find_directive(definition.directives, "aggregation") is None:
        return False
    logger.warning(
        'The Aggregation directive is not supported. type="%s" has been removed', definition.name.value
    )
    return True


def _migrate_definition(
    definition: ObjectTypeDefinitionNode,
    type_definitions: dict[str, TypeDefinitionNode],
    extra_directives: list[DirectiveNode],
) -> ObjectTypeDefinitionNode:
    type_name = definition.name.value
    fields = tuple(_migrate_field(definition, f, type_definitions) for f in definition.fields or ())

    entity_directive = _find_directive(definition.directives, "entity")
    if entity_directive is None:
        raise StructuralParseError(f"Object type {type_name} is missing entity directive")

    directives = [
        _strip_entity_arguments(d, type_name) if d is entity_directive else d for d in definition.directives or ()
    ]
    directives.extend(extra_directives)
    return _copy_node(definition, fields=tuple(fields), directives=tuple(directives))


def _strip_entity_arguments(directive: DirectiveNode, type_name: str) -> DirectiveNode:
    kept = []
    for argument in directive.arguments or ():
        label = UNSUPPORTED_ENTITY_ARGUMENTS.get(argument.name.value)
        if label is not None:
            logger.warning('%s option is not supported. Removing from entity="%s"', label, type_name)
            continue
        kept.append(argument)
    return _copy_node(directive, arguments=tuple(kept))


def _migrate_field(
    definition: ObjectTypeDefinitionNode,
    field: FieldDefinitionNode,
    type_definitions: dict[str, TypeDefinitionNode],
) -> FieldDefinitionNode:
    field_name = field.name.value

    def rename(name: str) -> str:
        # SubQuery only supports ID type for id
        if field_name == "id":
            return "ID"
        return TYPE_RENAMES.get(name, name)

    new_type = _map_named_type(field.type, rename)
    directives = list(field.directives or ())

    inner_name = _named_type(new_type).name.value
    if (
        inner_name not in SUBQL_SCALARS
        and _is_list_type(field.type)
        and _find_directive(field.directives, "derivedFrom") is None
    ):
        derived = _derived_from_for(definition, field, inner_name, type_definitions)
        if derived is not None:
            directives.append(derived)

    return _copy_node(field, type=new_type, directives=tuple(directives))


def _derived_from_for(
    definition: ObjectTypeDefinitionNode,
    field: FieldDefinitionNode,
    referenced: str,
    type_definitions: dict[str, TypeDefinitionNode],
) -> DirectiveNode | None:
    type_name = definition.name.value
    field_name = field.name.value
    target = type_definitions.get(referenced)
    if target is None:
        raise StructuralParseError(f"Cannot find entity referenced by field {field_name} on type {type_name}")
    # Enums, interfaces and JSON types are not relations
    if not _is_object_type(target) or _find_directive(target.directives, "entity") is None:
        return None

    matches = [f for f in target.fields or () if _is_field_of_type(f.type, type_name)]
    if len(matches) == 1:
        return _make_directive("derivedFrom", field=StringValueNode(value=matches[0].name.value))

    if matches:
        logger.warning(
            'Found multiple matches of %s for "%s.%s". You will need to manually set the "field" property',
            referenced,
            type_name,
            field_name,
        )
    else:
        logger.warning(
            'Unable to find a lookup on %s for "%s.%s". You will need to manually set the "field" property',
            referenced,
            type_name,
            field_name,
        )
    return _make_directive("derivedFrom", field=StringValueNode(value=DERIVED_FROM_PLACEHOLDER))


# ---------------------------------------------------------------------------
# Fulltext
# ---------------------------------------------------------------------------


def _convert_fulltext_directive(
    directive: DirectiveNode, type_definitions: dict[str, TypeDefinitionNode]
) -> tuple[str, DirectiveNode] | None:
    """Translate a ``_Schema_`` ``@fulltext`` into ``(entity name, @fullText directive)``."""
    if directive.name.value != "fulltext":
        return None

    name_arg = _find_argument(directive.arguments, "name")
    search_name = name_arg.value.value if name_arg and isinstance(name_arg.value, StringValueNode) else None

    include_arg = _find_argument(directive.arguments, "include")
    if include_arg is None:
        raise StructuralParseError("Expected fulltext directive to have an 'include' argument")
    if not isinstance(include_arg.value, ListValueNode):
        raise StructuralParseError("Expected include argument to be a list")
    if len(include_arg.value.values) != 1:
        raise StructuralParseError(f"SubQuery only supports fulltext search on a single entity. name={search_name}")

    include = include_arg.value.values[0]
    if not isinstance(include, ObjectValueNode):
        raise StructuralParseError(f"Expected object value, received {include.kind}")

    entity_value = _find_object_field(include, "entity")
    if entity_value is None or not isinstance(entity_value, StringValueNode):
        raise StructuralParseError("Entity name is invalid")

    fields_value = _find_object_field(include, "fields")
    if fields_value is None:
        raise StructuralParseError("Unable to find fields for fulltext search")
    if not isinstance(fields_value, ListValueNode):
        raise StructuralParseError("Expected fields to be a list")

    field_names: list[str] = []
    for item in fields_value.values:
        if not isinstance(item, ObjectValueNode):
            raise StructuralParseError("Field is invalid")
        name_value = _find_object_field(item, "name")
        if name_value is None:
            raise StructuralParseError("Fields field is missing name")
        if not isinstance(name_value, StringValueNode):
            raise StructuralParseError("Field name must be a string")
        field_names.append(name_value.value)
    if not field_names:
        raise StructuralParseError("Fulltext search requires at least one field")

    entity_name = entity_value.value
    if not _is_object_type(type_definitions.get(entity_name)):
        raise StructuralParseError(f"Unable to find entity {entity_name} for fulltext search")

    return entity_name, _make_fulltext_directive(field_names)


def _make_fulltext_directive(fields: Sequence[str], language: str = DEFAULT_FULLTEXT_LANGUAGE) -> DirectiveNode:
    return _make_directive(
        "fullText",
        fields=ListValueNode(values=tuple(StringValueNode(value=f) for f in fields)),
        language=StringValueNode(value=language),
    )


# ---------------------------------------------------------------------------
# AST helpers
# ---------------------------------------------------------------------------


def _copy_node(node: Any, **changes: Any) -> Any:
    values = {key: getattr(node, key, None) for key in node.keys if key != "loc"}
    values.update(changes)
    return type(node)(**values)


def _make_directive(name: str, **arguments: Any) -> DirectiveNode:
    return DirectiveNode(
        name=NameNode(value=name),
        arguments=tuple(ArgumentNode(name=NameNode(value=key), value=value) for key, value in arguments.items()),
    )


def _is_object_type(node: Any) -> bool:
    return isinstance(node, ObjectTypeDefinitionNode)


def _find_directive(directives: Iterable[DirectiveNode] | None, name: str) -> DirectiveNode | None:
    return next((d for d in directives or () if d.name.value == name), None)


def _find_argument(arguments: Iterable[ArgumentNode] | None, name: str) -> ArgumentNode | None:
    return next((a for a in arguments or () if a.name.value == name), None)


def _find_object_field(node: ObjectValueNode, name: str) -> Any:
    found = next((f for f in node.fields or () if f.name.value == name), None)
    return found.value if found is not None else None


def _map_named_type(type_node: TypeNode, fn: Callable[[str], str]) -> TypeNode:
    """Return a copy of *type_node* with the innermost named type renamed by *fn*."""
    if isinstance(type_node, (NonNullTypeNode, ListTypeNode)):
        return _copy_node(type_node, type=_map_named_type(type_node.type, fn))
    return _copy_node(type_node, name=NameNode(value=fn(type_node.name.value)))


def _named_type(type_node: TypeNode) -> NamedTypeNode:
    while isinstance(type_node, (NonNullTypeNode, ListTypeNode)):
        type_node = type_node.type
    return type_node


def _is_list_type(type_node: TypeNode) -> bool:
    if isinstance(type_node, ListTypeNode):
        return True
    if isinstance(type_node, NonNullTypeNode):
        return _is_list_type(type_node.type)
    return False


def _is_field_of_type(type_node: TypeNode, desired: str) -> bool:
    """True when *type_node* is *desired*, ignoring nullability but not lists."""
    if isinstance(type_node, NonNullTypeNode):
        return _is_field_of_type(type_node.type, desired)
    return isinstance(type_node, NamedTypeNode) and type_node.name.value == desired
