"""Naming rules between database identifiers and GraphQL names.

The defaults follow the conventions of database-first GraphQL generators:
procedures become camelCase mutations with a PascalCase ``...Input`` type,
tables become PascalCase types with a ``...Patch`` input, columns and
arguments become camelCase fields. A ``@name`` smart tag overrides the raw
name of a procedure, table, composite type or column. Subclass and override
single methods to match a different schema generator.
"""
from __future__ import annotations

from typing import Any, Optional

from .naming import snake_to_camel, snake_to_pascal

__all__ = ['Inflector']


def _tagged_name(entity: Any) -> str:
    tags = getattr(entity, 'tags', None) or {}
    name = tags.get('name')
    if isinstance(name, str) and name:
        return name
    return entity.name


class Inflector:

    def function_mutation_name(self, proc: Any) -> str:
        return snake_to_camel(_tagged_name(proc))

    def function_input_type(self, proc: Any) -> str:
        return snake_to_pascal(f"{self.function_mutation_name(proc)}_input")

    def domain_type(self, type_: Any) -> str:
        return snake_to_pascal(_tagged_name(type_))

    def input_type(self, type_name: str) -> str:
        return snake_to_pascal(f"{type_name}_input")

    def table_type(self, table: Any) -> str:
        return snake_to_pascal(_tagged_name(table))

    def patch_type(self, type_name: str) -> str:
        return snake_to_pascal(f"{type_name}_patch")

    def column(self, attr: Any) -> str:
        return snake_to_camel(_tagged_name(attr))

    def argument(self, name: Optional[str], index: int = 0) -> str:
        """camelCase argument name; unnamed arguments become ``arg<index>``."""
        return snake_to_camel(name or f"arg{index}")
