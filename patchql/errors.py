"""Exceptions raised while resolving ``@patch`` smart tags."""
from __future__ import annotations

__all__ = [
    'PatchError',
    'MalformedPatchTagError',
    'UnknownPatchTableError',
    'PatchTypeNotFoundError',
]


class PatchError(Exception):
    """Base class for patchql errors."""


class MalformedPatchTagError(PatchError, ValueError):
    """A ``@patch`` tag value is not ``<name> <namespace>.<table>``."""

    def __init__(self, tag: str, reason: str):
        self.tag = tag
        self.reason = reason
        super().__init__(f"Malformed @patch tag {tag!r}: {reason}")


class UnknownPatchTableError(PatchError, LookupError):
    """A ``@patch`` tag points at a table missing from the introspection results."""

    def __init__(self, tag: str, table_id: str):
        self.tag = tag
        self.table_id = table_id
        super().__init__(f"@patch tag {tag!r} references unknown table {table_id!r}")


class PatchTypeNotFoundError(PatchError, LookupError):
    """The generated patch input type of a table is not usable in the schema.

    Raised when no type of that name is registered, or when the registered
    type is not an input object type.
    """

    def __init__(self, type_name: str, patch_type: str, field_name: str, reason: str = "is not in the schema"):
        self.type_name = type_name
        self.patch_type = patch_type
        self.field_name = field_name
        self.reason = reason
        super().__init__(
            f"Cannot substitute {type_name}.{field_name}: patch type {patch_type!r} {reason}"
        )
