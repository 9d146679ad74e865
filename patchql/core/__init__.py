# Core subpackage: annotation parsing/resolution and type-shape helpers shared by
# schema substitution and argument rewriting.
from .tags import (
    Annotation, AnnotatedDeclaration, ProcedureDeclaration, CompositeTypeDeclaration,
    declaration_for_scope, declaration_for_type_name,
)
from .resolver import PatchTag, ResolvedPatch, parse_patch_annotation, resolve_patch_annotation
from .shapes import TypeShape, shape_of, inner_type, object_fields, annotatable

__all__ = [
    'Annotation', 'AnnotatedDeclaration', 'ProcedureDeclaration', 'CompositeTypeDeclaration',
    'declaration_for_scope', 'declaration_for_type_name',
    'PatchTag', 'ResolvedPatch', 'parse_patch_annotation', 'resolve_patch_annotation',
    'TypeShape', 'shape_of', 'inner_type', 'object_fields', 'annotatable',
]
