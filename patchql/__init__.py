"""patchql: table patch types for JSON arguments of database-generated GraphQL mutations.

A ``@patch <argument> <namespace>.<table>`` smart tag on a procedure or
composite type retypes that JSON argument as the table's ``...Patch`` input
object, and submitted values are re-keyed to raw column names before the
procedure is called.

Exposes:
- PatchPlugin, apply_patch_plugin, PatchReport
- PatchConfig, Inflector
- introspection descriptors and builders
- lower-level pieces: substitute_patch_fields, build_patch_map, rewrite_value
"""
from __future__ import annotations

import importlib as _importlib

_LAZY = {
    'PatchPlugin': 'plugin',
    'PatchReport': 'plugin',
    'apply_patch_plugin': 'plugin',
    'InputObjectScope': 'substitution',
    'substitute_patch_fields': 'substitution',
    'PatchKey': 'rewrite',
    'build_patch_map': 'rewrite',
    'rewrite_value': 'rewrite',
    'wrap_patch_resolver': 'rewrite',
    'install_patch_resolvers': 'rewrite',
    'resolve_patch_annotation': 'core.resolver',
    'parse_patch_annotation': 'core.resolver',
}

from .config import PatchConfig
from .errors import PatchError, MalformedPatchTagError, UnknownPatchTableError, PatchTypeNotFoundError
from .inflection import Inflector
from .introspection import (
    AttributeDescriptor,
    TableDescriptor,
    ProcedureDescriptor,
    CompositeTypeDescriptor,
    IntrospectionResults,
    build_introspection,
    parse_smart_comment,
    reflect_tables,
    tables_from_metadata,
)


def __getattr__(name: str):  # PEP 562 lazy exports
    module = _LAZY.get(name)
    if module is None:
        raise AttributeError(name)
    return getattr(_importlib.import_module(f"{__name__}.{module}"), name)


__all__ = [
    'PatchConfig', 'Inflector',
    'PatchError', 'MalformedPatchTagError', 'UnknownPatchTableError', 'PatchTypeNotFoundError',
    'AttributeDescriptor', 'TableDescriptor', 'ProcedureDescriptor', 'CompositeTypeDescriptor',
    'IntrospectionResults', 'build_introspection', 'parse_smart_comment', 'reflect_tables', 'tables_from_metadata',
    *_LAZY.keys(),
]
