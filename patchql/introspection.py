"""
Introspection metadata consumed by patchql.

These descriptors are a read-only snapshot of the database catalog: tables
(with their ordered columns), stored procedures and composite types, each
carrying the smart tags parsed from its comment. Tables can be collected from
SQLAlchemy ``MetaData`` or reflected from a live connection; procedures and
composite types are described by the caller since SQLAlchemy does not reflect
them.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import MetaData, Table, inspect
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)

Tags = Dict[str, Any]

_TAG_LINE = re.compile(r"^@([A-Za-z_][A-Za-z0-9_]*)(?:\s+(.*))?$")


def parse_smart_comment(comment: Optional[str]) -> Tuple[Tags, Optional[str]]:
    """
    Split a database comment into smart tags and a description.

    Leading lines of the form ``@tag value`` are tags. A tag without a value is
    ``True``; a tag given several times collects its values into a list in
    order of appearance. Everything from the first non-tag line on is the
    description.

    Args:
        comment: Raw comment text, may be None

    Returns:
        Tuple of (tags, description or None)
    """
    if not comment:
        return {}, None

    tags: Tags = {}
    lines = comment.splitlines()
    index = 0
    for index, line in enumerate(lines):
        match = _TAG_LINE.match(line.strip())
        if not match:
            break
        name, value = match.group(1), match.group(2)
        value = value.strip() if value and value.strip() else True
        if name not in tags:
            tags[name] = value
        elif isinstance(tags[name], list):
            tags[name].append(value)
        else:
            tags[name] = [tags[name], value]
    else:
        index = len(lines)

    description = "\n".join(lines[index:]).strip()
    return tags, description or None


@dataclass(frozen=True)
class AttributeDescriptor:
    """A table column or composite type member, by raw storage name."""
    name: str
    type_name: Optional[str] = None
    tags: Tags = field(default_factory=dict, compare=False)
    description: Optional[str] = None


@dataclass(frozen=True)
class TableDescriptor:
    namespace: str
    name: str
    attributes: Tuple[AttributeDescriptor, ...] = ()
    tags: Tags = field(default_factory=dict, compare=False)
    description: Optional[str] = None

    @property
    def identifier(self) -> str:
        return f"{self.namespace}.{self.name}"


@dataclass(frozen=True)
class ProcedureDescriptor:
    namespace: str
    name: str
    argument_names: Tuple[str, ...] = ()
    tags: Tags = field(default_factory=dict, compare=False)
    description: Optional[str] = None

    @classmethod
    def from_comment(cls, namespace: str, name: str, comment: Optional[str] = None,
                     argument_names: Sequence[str] = ()) -> "ProcedureDescriptor":
        tags, description = parse_smart_comment(comment)
        return cls(namespace, name, tuple(argument_names), tags, description)


@dataclass(frozen=True)
class CompositeTypeDescriptor:
    namespace: str
    name: str
    attributes: Tuple[AttributeDescriptor, ...] = ()
    tags: Tags = field(default_factory=dict, compare=False)
    description: Optional[str] = None

    @classmethod
    def from_comment(cls, namespace: str, name: str, comment: Optional[str] = None,
                     attributes: Sequence[Any] = ()) -> "CompositeTypeDescriptor":
        tags, description = parse_smart_comment(comment)
        attrs = tuple(a if isinstance(a, AttributeDescriptor) else AttributeDescriptor(str(a)) for a in attributes)
        return cls(namespace, name, attrs, tags, description)


@dataclass(frozen=True)
class IntrospectionResults:
    """Everything patchql looks up: procedures, tables and composite types."""
    procedures: Tuple[ProcedureDescriptor, ...] = ()
    tables: Tuple[TableDescriptor, ...] = ()
    composite_types: Tuple[CompositeTypeDescriptor, ...] = ()

    def find_table(self, namespace: str, name: str) -> Optional[TableDescriptor]:
        for table in self.tables:
            if table.namespace == namespace and table.name == name:
                return table
        return None


def table_from_sqlalchemy(table: Table, default_namespace: str = 'public') -> TableDescriptor:
    """Describe a SQLAlchemy ``Table``; its comments are parsed as smart comments."""
    tags, description = parse_smart_comment(getattr(table, 'comment', None))
    attributes = []
    for column in table.columns:
        col_tags, col_description = parse_smart_comment(getattr(column, 'comment', None))
        try:
            type_name = str(column.type)
        except Exception:
            # Some dialect-specific types cannot render without a dialect
            type_name = None
        attributes.append(AttributeDescriptor(column.name, type_name, col_tags, col_description))
    return TableDescriptor(
        namespace=table.schema or default_namespace,
        name=table.name,
        attributes=tuple(attributes),
        tags=tags,
        description=description,
    )


def tables_from_metadata(metadata: MetaData, default_namespace: str = 'public') -> List[TableDescriptor]:
    return [table_from_sqlalchemy(t, default_namespace) for t in metadata.sorted_tables]


def reflect_tables(connection: Connection, schema: Optional[str] = None) -> List[TableDescriptor]:
    """
    Reflect tables from a live database.

    Works with a sync ``Connection``; for async engines call it through
    ``await conn.run_sync(reflect_tables)``. Tables reflected without an
    explicit schema are placed in the dialect's default schema.
    """
    metadata = MetaData()
    metadata.reflect(bind=connection, schema=schema)
    default_namespace = schema or inspect(connection).default_schema_name or 'public'
    tables = tables_from_metadata(metadata, default_namespace)
    logger.info(f"Reflected {len(tables)} tables from namespace {default_namespace}")
    return tables


def build_introspection(
    metadata: Optional[MetaData] = None,
    *,
    tables: Iterable[TableDescriptor] = (),
    procedures: Iterable[ProcedureDescriptor] = (),
    composite_types: Iterable[CompositeTypeDescriptor] = (),
    default_namespace: str = 'public',
) -> IntrospectionResults:
    all_tables = list(tables)
    if metadata is not None:
        all_tables.extend(tables_from_metadata(metadata, default_namespace))
    return IntrospectionResults(
        procedures=tuple(procedures),
        tables=tuple(all_tables),
        composite_types=tuple(composite_types),
    )


__all__ = [
    'Tags',
    'parse_smart_comment',
    'AttributeDescriptor',
    'TableDescriptor',
    'ProcedureDescriptor',
    'CompositeTypeDescriptor',
    'IntrospectionResults',
    'table_from_sqlalchemy',
    'tables_from_metadata',
    'reflect_tables',
    'build_introspection',
]
