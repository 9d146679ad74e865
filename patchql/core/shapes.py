"""Closed set of type shapes walked by the patch machinery.

GraphQL types reachable from a mutation input are classified once as list,
non-null, object-like (input object, object, interface) or scalar-like (scalar,
enum, union). Walkers switch on the shape instead of probing the type.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from graphql import (
    GraphQLInputObjectType,
    is_input_object_type,
    is_interface_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
)

__all__ = ['TypeShape', 'shape_of', 'inner_type', 'object_fields', 'annotatable']


class TypeShape(Enum):
    LIST = 'list'
    NON_NULL = 'non_null'
    OBJECT = 'object'
    SCALAR = 'scalar'


def shape_of(type_: Any) -> TypeShape:
    if is_list_type(type_):
        return TypeShape.LIST
    if is_non_null_type(type_):
        return TypeShape.NON_NULL
    if is_input_object_type(type_) or is_object_type(type_) or is_interface_type(type_):
        return TypeShape.OBJECT
    return TypeShape.SCALAR


def inner_type(type_: Any) -> Any:
    """Wrapped type of a LIST or NON_NULL shape."""
    return type_.of_type


def object_fields(type_: Any) -> Dict[str, Any]:
    """Fields of an OBJECT shape, keyed by GraphQL field name."""
    return type_.fields


def annotatable(type_: Any) -> Optional[GraphQLInputObjectType]:
    """Only input objects map back to procedures or composite types."""
    return type_ if is_input_object_type(type_) else None
