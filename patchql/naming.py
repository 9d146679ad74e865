"""String case helpers used by the inflector.

Provides camelCase/PascalCase/snake_case conversion for identifiers coming
from the database (procedure, table, column and argument names).
"""
from __future__ import annotations

import re

__all__ = ["snake_to_camel", "snake_to_pascal"]


def snake_to_camel(name: str, upper_first: bool = False) -> str:
    """Convert snake_case identifier to camelCase or PascalCase.

    upper_first=False returns lowerCamelCase (default), True returns UpperCamelCase.
    Leading and repeated underscores are dropped; dashes and spaces count as
    separators too, so ``"update_entity-input"`` becomes ``"updateEntityInput"``.
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    parts = [p for p in re.split(r"[_\-\s]+", name) if p]
    if not parts:
        return ''
    head = parts[0]
    first = (head[0].upper() if upper_first else head[0].lower()) + head[1:]
    rest = ''.join(p[0].upper() + p[1:] for p in parts[1:])
    return first + rest


def snake_to_pascal(name: str) -> str:
    return snake_to_camel(name, upper_first=True)
