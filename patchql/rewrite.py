"""
Per-call rewrite of mutation inputs whose fields were retyped as table patches.

Procedures receive their patch argument as JSON and hydrate a row from it, so
the keys must be raw column names::

    create table app.entity_table (first_column int, second_column int);
    create function app.update_entity(id uuid, patch json) ...;
    comment on function app.update_entity is E'@patch patch app.entity_table';

    submitted:  {id: "u1", patch: {firstColumn: 1, secondColumn: 2}}
    forwarded:  {id: "u1", patch: {first_column: 1, second_column: 2}}

The ``(type, field) -> table`` map of a mutation is computed once when its
resolver is wrapped; mutations without any ``@patch`` below their input keep
their original resolver.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Set

from graphql import GraphQLField, GraphQLSchema, default_field_resolver

from .config import PatchConfig
from .core.resolver import resolve_patch_annotation
from .core.shapes import TypeShape, annotatable, inner_type, object_fields, shape_of
from .core.tags import declaration_for_type_name
from .introspection import IntrospectionResults, ProcedureDescriptor, TableDescriptor

logger = logging.getLogger(__name__)

__all__ = [
    'PatchKey',
    'PatchMap',
    'build_patch_map',
    'patch_object',
    'rewrite_value',
    'wrap_patch_resolver',
    'PlannedResolver',
    'is_patch_resolver',
    'plan_patch_resolvers',
    'wrap_planned_resolvers',
    'install_patch_resolvers',
    'procedure_for_mutation',
]


class PatchKey(NamedTuple):
    type_name: str
    field_name: str


PatchMap = Dict[PatchKey, TableDescriptor]


def build_patch_map(
    input_type: Any,
    introspection: IntrospectionResults,
    inflection: Any,
    config: Optional[PatchConfig] = None,
) -> PatchMap:
    """Collect every annotated ``(type, field)`` reachable from ``input_type``.

    Annotations may sit at any depth, so all fields of every object-like type
    are visited whether or not the type itself is annotated. Each named type is
    visited once, which keeps self-referencing input types finite.
    """
    config = config or PatchConfig()
    patch_map: PatchMap = {}
    seen: Set[str] = set()

    def visit(type_: Any) -> None:
        shape = shape_of(type_)
        if shape in (TypeShape.LIST, TypeShape.NON_NULL):
            visit(inner_type(type_))
            return
        if shape is not TypeShape.OBJECT or type_.name in seen:
            return
        seen.add(type_.name)

        input_object = annotatable(type_)
        if input_object is not None:
            declaration = declaration_for_type_name(
                input_object.name, introspection, inflection, tag_name=config.tag_name
            )
            if declaration is not None:
                for entry in resolve_patch_annotation(
                    declaration.patch_annotation(config.tag_name),
                    introspection,
                    inflection,
                    on_missing_table=config.on_missing_table,
                ):
                    if entry.table is not None:
                        patch_map[PatchKey(input_object.name, entry.field_name)] = entry.table

        for field in object_fields(type_).values():
            visit(field.type)

    visit(input_type)
    return patch_map


def patch_object(value: Mapping[str, Any], table: TableDescriptor, inflection: Any) -> Dict[str, Any]:
    """Re-key a patch from inflected field names to raw column names.

    Only columns present in ``value`` are kept, so partial patches stay partial.
    """
    result = {}
    for attr in table.attributes:
        key = inflection.column(attr)
        if key in value:
            result[attr.name] = value[key]
    return result


def rewrite_value(
    type_: Any,
    value: Any,
    patch_map: PatchMap,
    inflection: Any,
    *,
    in_place: bool = False,
) -> Any:
    """
    Walk ``value`` alongside ``type_`` and re-key every patched sub-tree.

    Args:
        type_: GraphQL input type the value was coerced against
        value: Coerced argument value (dicts, lists and scalars)
        patch_map: Annotated fields, from ``build_patch_map``
        inflection: Inflector providing ``column(attr)``
        in_place: Mutate ``value`` instead of returning new containers

    Returns:
        The rewritten value. Scalars, ``None`` and values whose shape does
        not match the type are returned untouched.
    """
    shape = shape_of(type_)
    if shape is TypeShape.NON_NULL:
        return rewrite_value(inner_type(type_), value, patch_map, inflection, in_place=in_place)
    if shape is TypeShape.LIST:
        if not isinstance(value, list):
            return value
        item_type = inner_type(type_)
        if in_place:
            for i, item in enumerate(value):
                value[i] = rewrite_value(item_type, item, patch_map, inflection, in_place=True)
            return value
        return [rewrite_value(item_type, item, patch_map, inflection) for item in value]
    if shape is not TypeShape.OBJECT or not isinstance(value, Mapping):
        return value

    fields = object_fields(type_)
    # coerced dicts are keyed by out_name when a field declares one
    by_key = {field.out_name or name: (name, field) for name, field in fields.items()}
    result = value if in_place else {}
    for key, item in list(value.items()):
        name, field = by_key.get(key, (key, None))
        table = patch_map.get(PatchKey(type_.name, name))
        if table is not None and isinstance(item, Mapping):
            new_item = patch_object(item, table, inflection)
        elif field is not None:
            new_item = rewrite_value(field.type, item, patch_map, inflection, in_place=in_place)
        else:
            new_item = item
        result[key] = new_item
    return result


def wrap_patch_resolver(
    resolve: Optional[Callable[..., Any]],
    input_type: Any,
    patch_map: PatchMap,
    inflection: Any,
    config: Optional[PatchConfig] = None,
) -> Callable[..., Any]:
    """Wrap a graphql-core resolver so its input argument is rewritten first.

    Only the configured input argument is touched; the inner resolver's result
    (awaitable or not) is returned as is.
    """
    config = config or PatchConfig()
    inner = resolve or default_field_resolver
    arg_name = config.input_argument

    def resolve_with_patch(source, info, **args):
        if args.get(arg_name) is not None:
            args[arg_name] = rewrite_value(
                input_type, args[arg_name], patch_map, inflection, in_place=config.in_place
            )
            logger.debug("rewrote %s for %s", arg_name, getattr(info, 'field_name', None))
        return inner(source, info, **args)

    resolve_with_patch.__wrapped__ = inner  # type: ignore[attr-defined]
    resolve_with_patch.patch_map = patch_map  # type: ignore[attr-defined]
    return resolve_with_patch


def procedure_for_mutation(field_name: str, introspection: IntrospectionResults, inflection: Any) -> Optional[ProcedureDescriptor]:
    for proc in introspection.procedures:
        if inflection.function_mutation_name(proc) == field_name:
            return proc
    return None


class PlannedResolver(NamedTuple):
    field_name: str
    field: GraphQLField
    input_type: Any
    patch_map: PatchMap


def is_patch_resolver(resolve: Optional[Callable[..., Any]]) -> bool:
    return getattr(resolve, 'patch_map', None) is not None


def plan_patch_resolvers(
    schema: GraphQLSchema,
    introspection: IntrospectionResults,
    inflection: Any,
    config: Optional[PatchConfig] = None,
) -> List[PlannedResolver]:
    """Compute the patch map of every procedure mutation without touching the schema.

    Mutations whose resolver is already a patch resolver are skipped, so a
    schema patched twice does not rewrite its input twice.
    """
    config = config or PatchConfig()
    mutation_type = schema.mutation_type
    if mutation_type is None:
        return []

    planned = []
    for field_name, field in mutation_type.fields.items():
        if procedure_for_mutation(field_name, introspection, inflection) is None:
            continue
        if is_patch_resolver(field.resolve):
            logger.debug("mutation %s already rewrites its input, skipped", field_name)
            continue
        input_arg = field.args.get(config.input_argument)
        if input_arg is None:
            continue
        patch_map = build_patch_map(input_arg.type, introspection, inflection, config)
        if patch_map:
            planned.append(PlannedResolver(field_name, field, input_arg.type, patch_map))
    return planned


def wrap_planned_resolvers(planned: List[PlannedResolver], inflection: Any,
                           config: Optional[PatchConfig] = None) -> List[str]:
    wrapped = []
    for plan in planned:
        plan.field.resolve = wrap_patch_resolver(
            plan.field.resolve, plan.input_type, plan.patch_map, inflection, config
        )
        wrapped.append(plan.field_name)
        logger.info(
            f"Mutation {plan.field_name} rewrites patch fields "
            f"{sorted(f'{k.type_name}.{k.field_name}' for k in plan.patch_map)}"
        )
    return wrapped


def install_patch_resolvers(
    schema: GraphQLSchema,
    introspection: IntrospectionResults,
    inflection: Any,
    config: Optional[PatchConfig] = None,
) -> List[str]:
    """Wrap the resolver of every procedure mutation that has patched input fields.

    Returns the names of the mutation fields wrapped by this call.
    """
    planned = plan_patch_resolvers(schema, introspection, inflection, config)
    return wrap_planned_resolvers(planned, inflection, config)
