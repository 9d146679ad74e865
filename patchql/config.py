from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

__all__ = ['PatchConfig', 'MISSING_TABLE_POLICIES']

MISSING_TABLE_POLICIES = ('ignore', 'warn', 'error')

_TRUTHY = ('1', 'true', 't', 'yes', 'y', 'on')


@dataclass(frozen=True)
class PatchConfig:
    """Settings shared by schema substitution and argument rewriting.

    tag_name: smart tag holding the annotation (``@patch`` by default).
    input_argument: mutation argument that gets rewritten.
    on_missing_table: what to do when a tag names a table that was not
        introspected: 'ignore' silently, 'warn' logs a warning, 'error' raises.
    in_place: rewrite the submitted argument dicts instead of building new ones.
    """
    tag_name: str = 'patch'
    input_argument: str = 'input'
    on_missing_table: str = 'warn'
    in_place: bool = False

    def __post_init__(self):
        if self.on_missing_table not in MISSING_TABLE_POLICIES:
            raise ValueError(
                f"Invalid on_missing_table '{self.on_missing_table}'. Must be one of {', '.join(MISSING_TABLE_POLICIES)}"
            )

    @classmethod
    def from_env(cls, prefix: str = 'PATCHQL_', environ: Optional[dict] = None) -> "PatchConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        in_place_raw = env.get(prefix + 'IN_PLACE')
        return cls(
            tag_name=env.get(prefix + 'TAG_NAME') or defaults.tag_name,
            input_argument=env.get(prefix + 'INPUT_ARGUMENT') or defaults.input_argument,
            on_missing_table=(env.get(prefix + 'ON_MISSING_TABLE') or defaults.on_missing_table).strip().lower(),
            in_place=defaults.in_place if in_place_raw is None else in_place_raw.strip().lower() in _TRUTHY,
        )
