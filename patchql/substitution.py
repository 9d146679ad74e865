"""
Schema-build hook replacing annotated input fields with table patch types.

Given the field map of an input object type, the ``@patch`` annotation of the
procedure (for mutation inputs) or composite type behind it decides which
fields get retyped::

    create function app.update_entity(id uuid, patch json) ...
    comment on function app.update_entity is E'@patch patch app.entity_table';

    input UpdateEntityInput { id: UUID, patch: JSON }              # before
    input UpdateEntityInput { id: UUID, patch: EntityTablePatch }  # after
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from graphql import GraphQLInputField, GraphQLInputObjectType, Undefined, is_input_object_type

from .config import PatchConfig
from .core.resolver import resolve_patch_annotation
from .core.tags import declaration_for_scope
from .errors import PatchTypeNotFoundError
from .introspection import CompositeTypeDescriptor, IntrospectionResults

logger = logging.getLogger(__name__)

__all__ = ['InputObjectScope', 'patch_type_name', 'substitute_patch_fields']


@dataclass(frozen=True)
class InputObjectScope:
    """What the schema builder knows about the input object being assembled."""
    type_name: str
    is_mutation_input: bool = False
    composite_type: Optional[CompositeTypeDescriptor] = None


def patch_type_name(table: Any, inflection: Any) -> str:
    return inflection.patch_type(inflection.table_type(table))


def _retyped(field: GraphQLInputField, type_: Any) -> GraphQLInputField:
    return GraphQLInputField(
        type_,
        default_value=field.default_value,
        description=field.description,
        out_name=field.out_name,
        extensions=field.extensions,
        ast_node=field.ast_node,
    )


def _warn_on_defaults(patch_type: GraphQLInputObjectType) -> None:
    # coercion fills defaults in, so omitted columns would reach the procedure
    defaulted = [name for name, field in patch_type.fields.items() if field.default_value is not Undefined]
    if defaulted:
        logger.warning(
            "%s declares defaults for %s; partial patches will carry those columns",
            patch_type.name, ', '.join(defaulted),
        )


def substitute_patch_fields(
    fields: Dict[str, GraphQLInputField],
    scope: InputObjectScope,
    introspection: IntrospectionResults,
    inflection: Any,
    get_type_by_name: Callable[[str], Any],
    config: Optional[PatchConfig] = None,
    substituted: Optional[List[Tuple[str, str, str]]] = None,
) -> Dict[str, GraphQLInputField]:
    """
    Return ``fields`` with every ``@patch``-annotated field retyped.

    Args:
        fields: Field map of the input object, keyed by GraphQL field name
        scope: Name and origin of the input object
        introspection: Introspected procedures, tables and composite types
        inflection: Inflector used for name matching and patch type names
        get_type_by_name: Schema type registry lookup
        config: Patch settings (tag name, missing table policy)
        substituted: Optional list collecting (type, field, patch type) triples

    Returns:
        The same mapping when no annotation applies, otherwise a new mapping
        in the original field order.

    Raises:
        MalformedPatchTagError: An annotation cannot be parsed
        PatchTypeNotFoundError: The patch type is not registered in the schema
            or is not an input object type
    """
    config = config or PatchConfig()
    declaration = declaration_for_scope(
        scope.type_name,
        introspection,
        inflection,
        is_mutation_input=scope.is_mutation_input,
        composite_type=scope.composite_type,
        tag_name=config.tag_name,
    )
    if declaration is None:
        return fields

    replacements: Dict[str, Any] = {}
    for entry in resolve_patch_annotation(
        declaration.patch_annotation(config.tag_name),
        introspection,
        inflection,
        on_missing_table=config.on_missing_table,
    ):
        if entry.table is None:
            continue
        if declaration.names_unknown(entry.tag.raw_name):
            logger.warning(
                "@patch tag %r on %s names %r, which %s does not declare",
                entry.tag.source, declaration.name, entry.tag.raw_name, declaration.kind,
            )
        if entry.field_name not in fields:
            logger.debug(f"{declaration!r}: no field {entry.field_name} on {scope.type_name}, tag ignored")
            continue
        target = patch_type_name(entry.table, inflection)
        patch_type = get_type_by_name(target)
        if patch_type is None:
            raise PatchTypeNotFoundError(scope.type_name, target, entry.field_name)
        if not is_input_object_type(patch_type):
            raise PatchTypeNotFoundError(
                scope.type_name, target, entry.field_name,
                reason=f"is a {type(patch_type).__name__}, not an input object type",
            )
        if fields[entry.field_name].type is patch_type:
            # already retyped by an earlier pass
            continue
        _warn_on_defaults(patch_type)
        replacements[entry.field_name] = patch_type

    if not replacements:
        return fields

    result = {}
    for name, field in fields.items():
        if name in replacements:
            result[name] = _retyped(field, replacements[name])
            logger.info(f"{scope.type_name}.{name} retyped as {replacements[name]}")
            if substituted is not None:
                substituted.append((scope.type_name, name, str(replacements[name])))
        else:
            result[name] = field
    return result
