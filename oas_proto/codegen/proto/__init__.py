"""
Proto3 code generator module.

Flattens OpenAPI component schemas into proto3 messages and enums.
"""

from .generator import ProtoGenerator, SchemaEmitter, create_proto_generator
from .resolver import MergedShape, ReferenceResolver, merge_all_of
from .types import ProtoType, ProtoTypeMapper, SynthesisRequest, TypeKind

__all__ = [
    "ProtoGenerator",
    "SchemaEmitter",
    "create_proto_generator",
    "MergedShape",
    "ReferenceResolver",
    "merge_all_of",
    "ProtoType",
    "ProtoTypeMapper",
    "SynthesisRequest",
    "TypeKind",
]
