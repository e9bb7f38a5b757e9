"""
Reference resolution and allOf merging.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple

from ...logging_config import get_logger
from ..core.schema import ReferenceNode, Registry, SchemaNode, object_shape

logger = get_logger(__name__)


class ReferenceResolver:
    """Looks up referenced schemas in the registry."""

    def __init__(self, registry: Registry):
        self.registry = registry

    def resolve(self, node: SchemaNode) -> SchemaNode:
        """
        Resolve a reference by exactly one hop.

        A reference to another reference yields that inner reference node,
        not its final target. A dangling reference is returned unchanged.
        """
        if not isinstance(node, ReferenceNode):
            return node

        target = self.registry.get(node.name)
        if target is None:
            logger.debug("Dangling reference: %s", node.ref or node.name)
            return node
        return target

    def is_dangling(self, node: SchemaNode) -> bool:
        return isinstance(node, ReferenceNode) and node.name not in self.registry


@dataclass(frozen=True)
class MergedShape:
    """Effective object shape after folding in allOf branches."""

    properties: Dict[str, SchemaNode]
    required: Tuple[str, ...]


def merge_all_of(
    own_properties: Mapping[str, SchemaNode],
    all_of: Iterable[SchemaNode],
    resolver: ReferenceResolver,
    required: Tuple[str, ...] = (),
) -> MergedShape:
    """
    Merge allOf branches with a node's own properties.

    Branches are folded in declaration order (later branches overwrite
    earlier ones); the node's own properties are applied last and win.
    Required names come from the outer node only.
    """
    merged: Dict[str, SchemaNode] = {}
    for branch in all_of:
        shape = object_shape(resolver.resolve(branch))
        if shape is not None:
            merged.update(shape.properties)
    merged.update(own_properties)
    return MergedShape(properties=merged, required=tuple(required))
