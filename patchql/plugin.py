"""
Apply ``@patch`` substitution and argument rewriting to a GraphQL schema.

Typical use with a schema generated from the database::

    introspection = build_introspection(metadata, procedures=[...], composite_types=[...])
    plugin = PatchPlugin(introspection)
    plugin.apply(graphql_schema)          # graphql-core GraphQLSchema
    plugin.apply_to_strawberry(schema)    # strawberry.Schema

Schema builders with an input-object field hook can call
``input_fields_hook`` directly instead of post-processing a finished schema.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field as dc_field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from graphql import GraphQLSchema, get_named_type, is_input_object_type

from .config import PatchConfig
from .core.tags import composite_for_input_type
from .inflection import Inflector
from .introspection import IntrospectionResults
from .rewrite import plan_patch_resolvers, procedure_for_mutation, wrap_planned_resolvers
from .substitution import InputObjectScope, substitute_patch_fields

logger = logging.getLogger(__name__)

__all__ = ['PatchReport', 'PatchPlugin', 'apply_patch_plugin']


@dataclass
class PatchReport:
    # (input type, field, patch type)
    substituted: List[Tuple[str, str, str]] = dc_field(default_factory=list)
    wrapped: List[str] = dc_field(default_factory=list)


class PatchPlugin:
    def __init__(self, introspection: IntrospectionResults, inflection: Optional[Any] = None,
                 config: Optional[PatchConfig] = None):
        self.introspection = introspection
        self.inflection = inflection or Inflector()
        self.config = config or PatchConfig()

    def input_fields_hook(self, fields: Dict[str, Any], scope: InputObjectScope,
                          get_type_by_name: Callable[[str], Any]) -> Dict[str, Any]:
        return substitute_patch_fields(
            fields, scope, self.introspection, self.inflection, get_type_by_name, self.config
        )

    def _mutation_input_names(self, schema: GraphQLSchema) -> Set[str]:
        names: Set[str] = set()
        if schema.mutation_type is None:
            return names
        for field_name, field in schema.mutation_type.fields.items():
            if procedure_for_mutation(field_name, self.introspection, self.inflection) is None:
                continue
            arg = field.args.get(self.config.input_argument)
            if arg is not None:
                names.add(get_named_type(arg.type).name)
        return names

    def apply(self, schema: GraphQLSchema) -> PatchReport:
        """Retype annotated input fields, then wrap the affected mutation resolvers.

        Every substitution and patch map is resolved before the schema is
        modified, so a bad tag leaves the schema as it was. Applying twice is
        a no-op.
        """
        report = PatchReport()
        mutation_inputs = self._mutation_input_names(schema)
        retyped = []
        for name, type_ in list(schema.type_map.items()):
            if name.startswith('__') or not is_input_object_type(type_):
                continue
            scope = InputObjectScope(
                type_name=name,
                is_mutation_input=name in mutation_inputs,
                composite_type=composite_for_input_type(name, self.introspection, self.inflection),
            )
            fields = type_.fields
            new_fields = substitute_patch_fields(
                fields, scope, self.introspection, self.inflection, schema.get_type, self.config,
                substituted=report.substituted,
            )
            if new_fields is not fields:
                retyped.append((fields, new_fields))
        planned = plan_patch_resolvers(schema, self.introspection, self.inflection, self.config)

        for fields, new_fields in retyped:
            fields.clear()
            fields.update(new_fields)
        report.wrapped = wrap_planned_resolvers(planned, self.inflection, self.config)
        logger.info(
            "patch plugin applied: %d field(s) retyped, %d mutation(s) wrapped",
            len(report.substituted), len(report.wrapped),
        )
        return report

    def apply_to_strawberry(self, schema: Any) -> PatchReport:
        """Apply to the graphql-core schema underlying a ``strawberry.Schema``."""
        return self.apply(schema._schema)


def apply_patch_plugin(schema: GraphQLSchema, introspection: IntrospectionResults,
                       inflection: Optional[Any] = None, config: Optional[PatchConfig] = None) -> PatchReport:
    return PatchPlugin(introspection, inflection, config).apply(schema)
