import pytest
from graphql import build_schema, graphql_sync

from patchql import (
    CompositeTypeDescriptor,
    MalformedPatchTagError,
    PatchConfig,
    PatchPlugin,
    PatchTypeNotFoundError,
    UnknownPatchTableError,
    apply_patch_plugin,
)
from patchql.rewrite import install_patch_resolvers
from patchql.substitution import InputObjectScope
from tests.schema import COMPOSITE_TYPES, build_test_introspection, echo_arguments


def _run(schema, query, variables=None):
    result = graphql_sync(schema, query, variable_values=variables)
    assert result.errors is None, result.errors
    return result.data


def test_apply_retypes_annotated_fields(graphql_schema, introspection):
    report = PatchPlugin(introspection).apply(graphql_schema)

    def field_type(type_name, field_name):
        return str(graphql_schema.get_type(type_name).fields[field_name].type)

    assert field_type('UpdateEntityInput', 'patch') == 'EntityTablePatch'
    assert field_type('UpdateEntityInput', 'id') == 'String'
    assert field_type('EntityUpdateTypeInput', 'patch') == 'EntityTablePatch'
    assert field_type('EntityChildTypeInput', 'patch') == 'EntityChildrenPatch'
    assert field_type('EntityNodeTypeInput', 'parent') == 'EntityNodeTypeInput'
    assert field_type('MergeEntityInput', 'note') == 'String'
    assert field_type('MergeEntityInput', 'childPatch') == 'EntityChildrenPatch'
    # unresolved table and untagged procedure keep JSON
    assert field_type('ArchiveEntityInput', 'patch') == 'JSON'
    assert field_type('DeleteEntityInput', 'payload') == 'JSON'

    assert ('UpdateEntityInput', 'patch', 'EntityTablePatch') in report.substituted
    assert sorted(report.wrapped) == [
        'mergeEntity', 'saveEntityNode', 'saveEntityTree', 'updateEntities', 'updateEntity',
    ]


def test_unannotated_mutation_is_not_wrapped(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    mutation = graphql_schema.mutation_type
    assert mutation.fields['deleteEntity'].resolve is echo_arguments
    assert mutation.fields['archiveEntity'].resolve is echo_arguments
    # not a procedure mutation even though its input type is patched
    assert mutation.fields['ping'].resolve is echo_arguments
    assert mutation.fields['updateEntity'].resolve is not echo_arguments

    data = _run(graphql_schema, '''
      mutation { deleteEntity(input: {id: "u1", payload: {firstColumn: 1, nested: [1, 2]}}) }
    ''')
    assert data == {'deleteEntity': {'input': {'id': 'u1', 'payload': {'firstColumn': 1, 'nested': [1, 2]}}}}


def test_single_level_mutation(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    data = _run(graphql_schema, '''
      mutation { updateEntity(input: {id: "u1", patch: {firstColumn: 1, secondColumn: 2}}) }
    ''')
    assert data == {'updateEntity': {'input': {'id': 'u1', 'patch': {'first_column': 1, 'second_column': 2}}}}


def test_partial_patch_with_variables_and_sibling_argument(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    data = _run(
        graphql_schema,
        'mutation ($input: UpdateEntityInput!) { updateEntity(input: $input, dryRun: true) }',
        {'input': {'patch': {'firstColumn': 1}}},
    )
    assert data == {'updateEntity': {'input': {'patch': {'first_column': 1}}, 'dryRun': True}}


def test_list_of_composite_inputs(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    data = _run(graphql_schema, '''
      mutation {
        updateEntities(input: {entities: [
          {id: "a", patch: {firstColumn: 1}},
          {id: "b", patch: {secondColumn: 2, id: 7}}
        ]})
      }
    ''')
    assert data == {'updateEntities': {'input': {'entities': [
        {'id': 'a', 'patch': {'first_column': 1}},
        {'id': 'b', 'patch': {'id': 7, 'second_column': 2}},
    ]}}}


def test_nested_annotations(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    data = _run(graphql_schema, '''
      mutation {
        saveEntityTree(input: {entity: {
          id: "e1",
          patch: {firstColumn: 5},
          children: [{patch: {label: "a"}}, {patch: {label: "b", entityId: 1}}]
        }})
      }
    ''')
    assert data == {'saveEntityTree': {'input': {'entity': {
        'id': 'e1',
        'patch': {'first_column': 5},
        'children': [{'patch': {'child_name': 'a'}}, {'patch': {'child_name': 'b', 'entity_id': 1}}],
    }}}}


def test_recursive_input(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    data = _run(graphql_schema, '''
      mutation {
        saveEntityNode(input: {node: {patch: {firstColumn: 1}, parent: {patch: {secondColumn: 2}}}})
      }
    ''')
    assert data == {'saveEntityNode': {'input': {'node': {
        'patch': {'first_column': 1},
        'parent': {'patch': {'second_column': 2}},
    }}}}


def test_multiple_tags_on_one_procedure(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    data = _run(graphql_schema, '''
      mutation {
        mergeEntity(input: {note: "n", patch: {secondColumn: 3}, childPatch: {label: "x"}})
      }
    ''')
    assert data == {'mergeEntity': {'input': {
        'note': 'n',
        'patch': {'second_column': 3},
        'childPatch': {'child_name': 'x'},
    }}}


def test_unresolved_table_does_not_fail(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection, config=PatchConfig(on_missing_table='ignore'))
    data = _run(graphql_schema, 'mutation { archiveEntity(input: {id: "u1", patch: {firstColumn: 1}}) }')
    assert data == {'archiveEntity': {'input': {'id': 'u1', 'patch': {'firstColumn': 1}}}}


def test_unresolved_table_error_policy(graphql_schema, introspection):
    with pytest.raises(UnknownPatchTableError):
        apply_patch_plugin(graphql_schema, introspection, config=PatchConfig(on_missing_table='error'))


def test_in_place_config(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection, config=PatchConfig(in_place=True))
    data = _run(graphql_schema, 'mutation { updateEntity(input: {patch: {firstColumn: 1}}) }')
    assert data == {'updateEntity': {'input': {'patch': {'first_column': 1}}}}


def test_async_resolver_is_awaited(graphql_schema, introspection):
    import asyncio
    from graphql import graphql

    async def procedure_call(_source, _info, **args):
        return args

    graphql_schema.mutation_type.fields['updateEntity'].resolve = procedure_call
    apply_patch_plugin(graphql_schema, introspection)
    result = asyncio.run(graphql(graphql_schema, 'mutation { updateEntity(input: {patch: {secondColumn: 4}}) }'))
    assert result.errors is None, result.errors
    assert result.data == {'updateEntity': {'input': {'patch': {'second_column': 4}}}}


def test_schema_without_patch_tags_is_unchanged(graphql_schema):
    introspection = build_test_introspection(procedures=[], composite_types=[])
    report = apply_patch_plugin(graphql_schema, introspection)
    assert report.substituted == []
    assert report.wrapped == []
    assert str(graphql_schema.get_type('UpdateEntityInput').fields['patch'].type) == 'JSON'


def test_apply_twice_rewrites_once(graphql_schema, introspection):
    apply_patch_plugin(graphql_schema, introspection)
    resolve = graphql_schema.mutation_type.fields['updateEntity'].resolve

    report = apply_patch_plugin(graphql_schema, introspection)
    assert report.substituted == []
    assert report.wrapped == []
    assert graphql_schema.mutation_type.fields['updateEntity'].resolve is resolve

    data = _run(graphql_schema, 'mutation { updateEntity(input: {patch: {firstColumn: 1}}) }')
    assert data == {'updateEntity': {'input': {'patch': {'first_column': 1}}}}


def test_install_patch_resolvers_skips_wrapped_fields(graphql_schema, introspection, inflector):
    assert 'updateEntity' in install_patch_resolvers(graphql_schema, introspection, inflector)
    assert install_patch_resolvers(graphql_schema, introspection, inflector) == []
    assert graphql_schema.mutation_type.fields['updateEntity'].resolve.__wrapped__ is echo_arguments


def test_output_patch_type_fails_at_build(introspection):
    schema = build_schema('''
      scalar JSON
      type Query { ok: Boolean }
      type EntityTablePatch { firstColumn: Int }
      input UpdateEntityInput { id: String patch: JSON }
      type Mutation { updateEntity(input: UpdateEntityInput!): JSON }
    ''')
    with pytest.raises(PatchTypeNotFoundError):
        apply_patch_plugin(schema, introspection)
    assert str(schema.get_type('UpdateEntityInput').fields['patch'].type) == 'JSON'


def test_failed_apply_leaves_schema_untouched(graphql_schema):
    broken_node = CompositeTypeDescriptor.from_comment('app', 'entity_node_type', '@patch patch', ['patch', 'parent'])
    introspection = build_test_introspection(
        composite_types=[c for c in COMPOSITE_TYPES if c.name != 'entity_node_type'] + [broken_node],
    )
    with pytest.raises(MalformedPatchTagError):
        apply_patch_plugin(graphql_schema, introspection)

    for type_name in ('UpdateEntityInput', 'EntityUpdateTypeInput', 'MergeEntityInput'):
        assert str(graphql_schema.get_type(type_name).fields['patch'].type) == 'JSON'
    assert graphql_schema.mutation_type.fields['updateEntity'].resolve is echo_arguments


def test_input_fields_hook(graphql_schema, introspection):
    plugin = PatchPlugin(introspection)
    fields = dict(graphql_schema.get_type('UpdateEntityInput').fields)
    result = plugin.input_fields_hook(
        fields, InputObjectScope('UpdateEntityInput', is_mutation_input=True), graphql_schema.get_type
    )
    assert result['patch'].type is graphql_schema.get_type('EntityTablePatch')
