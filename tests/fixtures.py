"""Shared fixtures for patchql tests."""

import pytest

from patchql import Inflector, PatchConfig
from tests.schema import build_test_introspection, build_test_schema


@pytest.fixture
def inflector():
    return Inflector()


@pytest.fixture
def introspection():
    return build_test_introspection()


@pytest.fixture
def graphql_schema():
    return build_test_schema()


@pytest.fixture
def patch_config():
    return PatchConfig(on_missing_table='ignore')


@pytest.fixture
def entity_table(introspection):
    return introspection.find_table('app', 'entity_table')


@pytest.fixture
def entity_children(introspection):
    return introspection.find_table('app', 'entity_children')
