from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple, Union

from ..introspection import CompositeTypeDescriptor, IntrospectionResults, ProcedureDescriptor

Annotation = Union[str, Sequence[str]]

__all__ = [
    'Annotation',
    'AnnotatedDeclaration',
    'ProcedureDeclaration',
    'CompositeTypeDeclaration',
    'declaration_for_scope',
    'declaration_for_type_name',
    'procedure_for_input_type',
    'composite_for_input_type',
]


def _annotation_from_tags(tags: Any, tag_name: str) -> Optional[Annotation]:
    value = (tags or {}).get(tag_name)
    # Bare ``@patch`` (True) or any other non-text value carries no pairing
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        items = [v for v in value if isinstance(v, str)]
        return items or None
    return None


class AnnotatedDeclaration:
    """A database declaration that may carry a ``@patch`` annotation."""

    kind = 'declaration'

    def __init__(self, descriptor: Any):
        self.descriptor = descriptor

    @property
    def name(self) -> str:
        return f"{self.descriptor.namespace}.{self.descriptor.name}"

    def patch_annotation(self, tag_name: str = 'patch') -> Optional[Annotation]:
        return _annotation_from_tags(getattr(self.descriptor, 'tags', None), tag_name)

    def declared_names(self) -> Tuple[str, ...]:
        """Raw names a tag may refer to; empty when the declaration did not list them."""
        return ()

    def names_unknown(self, raw_name: str) -> bool:
        names = self.declared_names()
        return bool(names) and raw_name not in names

    def __repr__(self):
        return f"{type(self).__name__}({self.name})"


class ProcedureDeclaration(AnnotatedDeclaration):
    kind = 'procedure'

    def declared_names(self) -> Tuple[str, ...]:
        return tuple(self.descriptor.argument_names)


class CompositeTypeDeclaration(AnnotatedDeclaration):
    kind = 'composite_type'

    def declared_names(self) -> Tuple[str, ...]:
        return tuple(attr.name for attr in self.descriptor.attributes)


def procedure_for_input_type(type_name: str, introspection: IntrospectionResults, inflection: Any) -> Optional[ProcedureDescriptor]:
    for proc in introspection.procedures:
        if inflection.function_input_type(proc) == type_name:
            return proc
    return None


def composite_for_input_type(type_name: str, introspection: IntrospectionResults, inflection: Any) -> Optional[CompositeTypeDescriptor]:
    for composite in introspection.composite_types:
        if inflection.input_type(inflection.domain_type(composite)) == type_name:
            return composite
    return None


def declaration_for_scope(
    type_name: str,
    introspection: IntrospectionResults,
    inflection: Any,
    *,
    is_mutation_input: bool = False,
    composite_type: Optional[CompositeTypeDescriptor] = None,
    tag_name: str = 'patch',
) -> Optional[AnnotatedDeclaration]:
    """Pick the annotated declaration behind an input object during schema build.

    Mutation inputs are matched to the procedure whose inflected input type name
    equals ``type_name``. When that procedure has no annotation (or the type is
    not a mutation input) the composite type the builder attached to the type is
    used. Returns None when neither carries an annotation.
    """
    if is_mutation_input:
        proc = procedure_for_input_type(type_name, introspection, inflection)
        if proc is not None:
            declaration = ProcedureDeclaration(proc)
            if declaration.patch_annotation(tag_name):
                return declaration
    if composite_type is not None:
        declaration = CompositeTypeDeclaration(composite_type)
        if declaration.patch_annotation(tag_name):
            return declaration
    return None


def declaration_for_type_name(
    type_name: str,
    introspection: IntrospectionResults,
    inflection: Any,
    *,
    tag_name: str = 'patch',
) -> Optional[AnnotatedDeclaration]:
    """Pick the annotated declaration behind an input object from its name alone.

    Used when walking a finished schema, where no builder scope is available:
    procedures are tried first, then composite types.
    """
    return declaration_for_scope(
        type_name,
        introspection,
        inflection,
        is_mutation_input=True,
        composite_type=composite_for_input_type(type_name, introspection, inflection),
        tag_name=tag_name,
    )
