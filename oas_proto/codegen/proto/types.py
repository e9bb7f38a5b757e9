"""
Proto type system for code generation.

Maps schema nodes to proto type references. Nested shapes that need a
type of their own are reported back as synthesis requests; the
generator decides their final names and when they are emitted.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, FrozenSet, Optional, Union
from enum import Enum

from ...logging_config import get_logger
from ..core.naming import normalize_type_name
from ..core.schema import (
    ArrayNode,
    CompositionNode,
    EnumNode,
    ObjectNode,
    ReferenceNode,
    ScalarKind,
    ScalarNode,
    SchemaNode,
)
from .resolver import ReferenceResolver

logger = get_logger(__name__)


PROTO_SCALAR_TYPES = frozenset(
    {"string", "int32", "int64", "double", "float", "bool", "bytes"}
)


class TypeKind(Enum):
    SCALAR = "scalar"
    ENUM = "enum"
    MESSAGE = "message"
    REPEATED = "repeated"
    MAP = "map"


@dataclass(frozen=True)
class SynthesisRequest:
    """
    Request to emit a nested schema as a type of its own.

    Attributes:
        local_name: Normalized name derived from the field (e.g. "TagsItem")
        node: The schema to emit
        eager: Emit before the enclosing message (map values) instead of after
        lineage: Registry names already being expanded on this path
    """

    local_name: str
    node: SchemaNode = field(compare=False)
    eager: bool = False
    lineage: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ProtoType:
    """
    A proto type reference.

    Repeated and map types wrap an element (the map value); a synthesis
    request raised anywhere inside is carried on the outermost type.
    """

    kind: TypeKind
    name: str = ""
    element: Optional["ProtoType"] = None
    synthesis: Optional[SynthesisRequest] = None

    @property
    def is_scalar(self) -> bool:
        return self.kind == TypeKind.SCALAR and self.name in PROTO_SCALAR_TYPES

    def render(self) -> str:
        """Proto source text of this type."""
        if self.kind == TypeKind.REPEATED:
            return f"repeated {self.element.render()}"
        if self.kind == TypeKind.MAP:
            return f"map<string,{self.element.render()}>"
        return self.name

    def with_name(self, name: str) -> "ProtoType":
        """Rename the innermost (synthesized) type, keeping the wrappers."""
        if self.element is not None:
            return replace(self, element=self.element.with_name(name))
        return replace(self, name=name)


STRING = ProtoType(TypeKind.SCALAR, "string")


def scalar_type_name(node: Union[ScalarNode, CompositionNode]) -> str:
    """Map an OpenAPI primitive (and its format hint) to a proto scalar."""
    if node.scalar == ScalarKind.STRING:
        if node.format in ("byte", "binary"):
            return "bytes"
        return "string"
    if node.scalar == ScalarKind.INTEGER:
        return "int32" if node.format == "int32" else "int64"
    if node.scalar == ScalarKind.NUMBER:
        return "float" if node.format == "float" else "double"
    if node.scalar == ScalarKind.BOOLEAN:
        return "bool"
    return "string"


class ProtoTypeMapper:
    """
    Central engine for mapping schema nodes to proto types.

    Resolution order: enumeration, scalar, array, map, object or
    composition, then the plain string fallback.
    """

    def __init__(
        self,
        resolver: ReferenceResolver,
        warn: Optional[Callable[[str], None]] = None,
    ):
        self.resolver = resolver
        self._warn = warn or (lambda message: None)

    def map_type(
        self,
        field_name: str,
        node: Optional[SchemaNode],
        lineage: FrozenSet[str] = frozenset(),
    ) -> ProtoType:
        """
        Map a schema node to a proto type.

        Args:
            field_name: Field (or branch) name used to derive synthesized names
            node: Schema of the field; None maps to string
            lineage: Registry names being expanded by the enclosing types

        Returns:
            ProtoType, possibly carrying a SynthesisRequest
        """
        if node is None:
            return STRING

        if isinstance(node, ReferenceNode):
            if node.name in lineage and node.name in self.resolver.registry:
                # Self reference: point at the top-level type instead of
                # expanding the same schema again.
                return ProtoType(TypeKind.MESSAGE, normalize_type_name(node.name))
            target = self.resolver.resolve(node)
            if target is not node:
                lineage = lineage | {node.name}
            node = target

        if isinstance(node, EnumNode):
            return self._synthesize(TypeKind.ENUM, field_name, node, lineage)

        if isinstance(node, ScalarNode):
            return ProtoType(TypeKind.SCALAR, scalar_type_name(node))

        if isinstance(node, CompositionNode) and node.scalar is not None:
            # The declared type wins over the composition keywords
            return ProtoType(TypeKind.SCALAR, scalar_type_name(node))

        if isinstance(node, ArrayNode):
            if node.items is None:
                return ProtoType(TypeKind.REPEATED, element=STRING)
            element = self.map_type(f"{field_name}_item", node.items, lineage)
            return ProtoType(
                TypeKind.REPEATED, element=element, synthesis=element.synthesis
            )

        if isinstance(node, ObjectNode) and node.is_map:
            return self.map_of(
                f"{field_name}_value", node.additional_properties, lineage
            )

        if isinstance(node, (ObjectNode, CompositionNode)):
            return self._synthesize(TypeKind.MESSAGE, field_name, node, lineage)

        if isinstance(node, ReferenceNode):
            if self.resolver.is_dangling(node):
                self._warn(f"Unresolved reference '{node.ref or node.name}' mapped to string")
            else:
                self._warn(
                    f"Reference '{node.ref or node.name}' points to another reference; mapped to string"
                )
        else:
            logger.debug("Untyped schema for '%s' mapped to string", field_name)
        return STRING

    def map_of(
        self,
        value_name: str,
        value_node: Optional[SchemaNode],
        lineage: FrozenSet[str] = frozenset(),
    ) -> ProtoType:
        """
        Map type with string keys.

        A value type that needs synthesis is requested eagerly: it is
        emitted before the message that contains the map field.
        """
        value = self.map_type(value_name, value_node, lineage)
        synthesis = None
        if value.synthesis is not None:
            synthesis = replace(value.synthesis, eager=True)
        return ProtoType(TypeKind.MAP, element=value, synthesis=synthesis)

    def _synthesize(
        self,
        kind: TypeKind,
        field_name: str,
        node: SchemaNode,
        lineage: FrozenSet[str],
    ) -> ProtoType:
        local_name = normalize_type_name(field_name)
        return ProtoType(
            kind,
            local_name,
            synthesis=SynthesisRequest(local_name, node, lineage=lineage),
        )
