"""
Resolution of ``@patch`` annotations against introspected tables.

An annotation is a string or a list of strings, each of the form
``<argument-or-field name> <namespace>.<table>``::

    comment on function app.update_entity(uuid, json) is
      E'@patch patch app.entity_table';

resolves to ``[ResolvedPatch(field_name='patch', table=<app.entity_table>)]``.
"""
from __future__ import annotations

import logging
from typing import Any, List, NamedTuple, Optional

from ..errors import MalformedPatchTagError, UnknownPatchTableError
from ..introspection import IntrospectionResults, TableDescriptor
from .tags import Annotation

logger = logging.getLogger(__name__)

__all__ = ['PatchTag', 'ResolvedPatch', 'parse_patch_annotation', 'resolve_patch_annotation']


class PatchTag(NamedTuple):
    raw_name: str
    namespace: str
    table: str
    source: str

    @property
    def table_id(self) -> str:
        return f"{self.namespace}.{self.table}"


class ResolvedPatch(NamedTuple):
    field_name: str
    table: Optional[TableDescriptor]
    tag: PatchTag


def _parse_one(value: Any) -> PatchTag:
    if not isinstance(value, str):
        raise MalformedPatchTagError(repr(value), "expected a string")
    parts = value.split()
    if len(parts) != 2:
        raise MalformedPatchTagError(value, f"expected '<name> <namespace>.<table>', got {len(parts)} token(s)")
    raw_name, table_id = parts
    table_parts = table_id.split('.')
    if len(table_parts) != 2 or not all(table_parts):
        raise MalformedPatchTagError(value, f"table identifier {table_id!r} must be '<namespace>.<table>'")
    namespace, table = table_parts
    return PatchTag(raw_name, namespace, table, value)


def parse_patch_annotation(value: Annotation) -> List[PatchTag]:
    """Split an annotation into tags, keeping declaration order."""
    if value is None:
        return []
    items = [value] if isinstance(value, str) else list(value)
    return [_parse_one(item) for item in items]


def resolve_patch_annotation(
    value: Annotation,
    introspection: IntrospectionResults,
    inflection: Any,
    *,
    on_missing_table: str = 'warn',
) -> List[ResolvedPatch]:
    """
    Resolve each tag of an annotation to its inflected field name and table.

    Args:
        value: Annotation value (string or sequence of strings)
        introspection: Introspected procedures, tables and composite types
        inflection: Inflector providing ``argument(name)``
        on_missing_table: 'ignore', 'warn' or 'error' for unknown tables

    Returns:
        One entry per tag in input order; ``table`` is None when the table
        was not introspected.

    Raises:
        MalformedPatchTagError: A tag does not have the expected shape
        UnknownPatchTableError: A table is missing and the policy is 'error'
    """
    resolved = []
    for tag in parse_patch_annotation(value):
        table = introspection.find_table(tag.namespace, tag.table)
        if table is None:
            if on_missing_table == 'error':
                raise UnknownPatchTableError(tag.source, tag.table_id)
            if on_missing_table == 'warn':
                logger.warning("@patch tag %r references unknown table %s; field left unchanged", tag.source, tag.table_id)
        resolved.append(ResolvedPatch(inflection.argument(tag.raw_name), table, tag))
    return resolved
