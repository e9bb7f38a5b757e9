"""
Core schema representation for proto generation.

Converts raw OpenAPI schema objects into an immutable tagged union
that the generator can dispatch on without guessing which of the
optional keywords are meaningful.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple
from collections.abc import Mapping as MappingABC
from enum import Enum


class SchemaError(Exception):
    """Exception raised for malformed schema objects."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class NodeKind(Enum):
    """Discriminant of a schema node."""

    REFERENCE = "reference"
    SCALAR = "scalar"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"
    COMPOSITION = "composition"
    UNTYPED = "untyped"


class ScalarKind(Enum):
    """Primitive OpenAPI types."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class SchemaNode:
    """Base for all schema fragments."""

    kind: ClassVar[NodeKind]

    nullable: bool = field(default=False, kw_only=True)
    description: Optional[str] = field(default=None, kw_only=True)


@dataclass(frozen=True)
class ReferenceNode(SchemaNode):
    """Pointer-by-name to a registry entry."""

    kind: ClassVar[NodeKind] = NodeKind.REFERENCE

    name: str
    ref: str = ""


@dataclass(frozen=True)
class ScalarNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.SCALAR

    scalar: ScalarKind
    format: Optional[str] = None


@dataclass(frozen=True)
class EnumNode(SchemaNode):
    """Enumeration of literals; the declared scalar type is informational."""

    kind: ClassVar[NodeKind] = NodeKind.ENUM

    values: Tuple[str, ...]
    scalar: Optional[ScalarKind] = None


@dataclass(frozen=True)
class ArrayNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.ARRAY

    items: Optional[SchemaNode] = None


@dataclass(frozen=True)
class ObjectNode(SchemaNode):
    """
    Object with named properties.

    With no properties and an additional_properties schema it is a map.
    """

    kind: ClassVar[NodeKind] = NodeKind.OBJECT

    properties: Mapping[str, SchemaNode] = field(
        default_factory=lambda: MappingProxyType({})
    )
    required: Tuple[str, ...] = ()
    additional_properties: Optional[SchemaNode] = None

    @property
    def is_map(self) -> bool:
        return not self.properties and self.additional_properties is not None


@dataclass(frozen=True)
class CompositionNode(SchemaNode):
    """
    allOf / oneOf / anyOf, together with directly declared properties.

    A declared scalar type (and its format) is kept: as a field such a
    node maps to that scalar rather than to a message.
    """

    kind: ClassVar[NodeKind] = NodeKind.COMPOSITION

    base: ObjectNode = field(default_factory=ObjectNode)
    all_of: Tuple[SchemaNode, ...] = ()
    one_of: Tuple[SchemaNode, ...] = ()
    any_of: Tuple[SchemaNode, ...] = ()
    scalar: Optional[ScalarKind] = None
    format: Optional[str] = None


@dataclass(frozen=True)
class UntypedNode(SchemaNode):
    """Schema without a usable type (e.g. `{}`)."""

    kind: ClassVar[NodeKind] = NodeKind.UNTYPED


def object_shape(node: SchemaNode) -> Optional[ObjectNode]:
    """Return the directly declared object shape of a node, if any."""
    if isinstance(node, ObjectNode):
        return node
    if isinstance(node, CompositionNode):
        return node.base
    return None


def ref_name(ref: str) -> str:
    """Schema name of a local reference such as '#/components/schemas/Pet'."""
    return ref.rsplit("/", 1)[-1]


_COMPOSITION_KEYWORDS = ("allOf", "oneOf", "anyOf")


def parse_schema(raw: Any, path: str = "") -> SchemaNode:
    """
    Convert a raw schema object into a SchemaNode.

    Args:
        raw: Parsed JSON/YAML schema object
        path: Location used in error messages

    Returns:
        The matching SchemaNode variant

    Raises:
        SchemaError: If the schema object is malformed
    """
    if not isinstance(raw, MappingABC):
        raise SchemaError(
            f"Expected schema object, got {type(raw).__name__}", path
        )

    declared_type, nullable = _declared_type(raw.get("type"), path)
    nullable = nullable or bool(raw.get("nullable", False))
    description = raw.get("description")
    if description is not None:
        description = str(description)
    common = {"nullable": nullable, "description": description}

    ref = raw.get("$ref")
    if ref is not None:
        if not isinstance(ref, str):
            raise SchemaError("$ref must be a string", path)
        return ReferenceNode(name=ref_name(ref), ref=ref, **common)

    enum_values = raw.get("enum")
    if enum_values:
        if not isinstance(enum_values, list):
            raise SchemaError("enum must be a list", f"{path}/enum")
        return EnumNode(
            values=tuple(str(v) for v in enum_values if v is not None),
            scalar=_scalar_kind(declared_type),
            **common,
        )

    if any(raw.get(keyword) for keyword in _COMPOSITION_KEYWORDS):
        return CompositionNode(
            base=_parse_object(raw, path),
            all_of=_parse_branches(raw, "allOf", path),
            one_of=_parse_branches(raw, "oneOf", path),
            any_of=_parse_branches(raw, "anyOf", path),
            scalar=_scalar_kind(declared_type),
            format=_format(raw),
            **common,
        )

    if declared_type == "array" or "items" in raw:
        items = raw.get("items")
        return ArrayNode(
            items=parse_schema(items, f"{path}/items") if items is not None else None,
            **common,
        )

    if (
        declared_type == "object"
        or "properties" in raw
        or "additionalProperties" in raw
    ):
        shape = _parse_object(raw, path)
        return ObjectNode(
            properties=shape.properties,
            required=shape.required,
            additional_properties=shape.additional_properties,
            **common,
        )

    scalar = _scalar_kind(declared_type)
    if scalar is not None:
        return ScalarNode(scalar=scalar, format=_format(raw), **common)

    return UntypedNode(**common)


def _declared_type(value: Any, path: str) -> Tuple[Optional[str], bool]:
    """Split an OpenAPI type into (type, nullable); 3.1 allows a list with 'null'."""
    if value is None:
        return None, False
    if isinstance(value, str):
        return value, False
    if isinstance(value, list):
        types = [t for t in value if t != "null"]
        nullable = len(types) != len(value)
        return (str(types[0]) if types else None), nullable
    raise SchemaError(f"Invalid type: {value!r}", f"{path}/type")


def _scalar_kind(declared_type: Optional[str]) -> Optional[ScalarKind]:
    try:
        return ScalarKind(declared_type)
    except ValueError:
        return None


def _format(raw: Mapping) -> Optional[str]:
    fmt = raw.get("format")
    return str(fmt) if fmt is not None else None


def _parse_branches(raw: Mapping, keyword: str, path: str) -> Tuple[SchemaNode, ...]:
    branches = raw.get(keyword) or []
    if not isinstance(branches, list):
        raise SchemaError(f"{keyword} must be a list", f"{path}/{keyword}")
    return tuple(
        parse_schema(branch, f"{path}/{keyword}/{i}")
        for i, branch in enumerate(branches)
    )


def _parse_object(raw: Mapping, path: str) -> ObjectNode:
    properties = raw.get("properties") or {}
    if not isinstance(properties, MappingABC):
        raise SchemaError("properties must be an object", f"{path}/properties")

    parsed: Dict[str, SchemaNode] = {}
    for name, prop in properties.items():
        parsed[str(name)] = parse_schema(prop, f"{path}/properties/{name}")

    required = raw.get("required") or []
    if not isinstance(required, list):
        raise SchemaError("required must be a list", f"{path}/required")

    additional = raw.get("additionalProperties")
    if additional is True:
        additional_node: Optional[SchemaNode] = UntypedNode()
    elif additional is None or additional is False:
        additional_node = None
    else:
        additional_node = parse_schema(additional, f"{path}/additionalProperties")

    return ObjectNode(
        properties=MappingProxyType(parsed),
        required=tuple(str(r) for r in required),
        additional_properties=additional_node,
    )


class Registry(MappingABC):
    """Read-only, declaration-ordered mapping of schema name to SchemaNode."""

    def __init__(self, schemas: Mapping[str, SchemaNode]):
        self._schemas: Mapping[str, SchemaNode] = MappingProxyType(dict(schemas))

    def __getitem__(self, name: str) -> SchemaNode:
        return self._schemas[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def names(self, sort: bool = False) -> List[str]:
        """Schema names in declaration order, or alphabetically."""
        names = list(self._schemas)
        return sorted(names) if sort else names

    def __repr__(self) -> str:
        return f"Registry({list(self._schemas)!r})"


def build_registry(document: Mapping[str, Any]) -> Registry:
    """
    Build the schema registry from an OpenAPI document.

    Args:
        document: Parsed OpenAPI document

    Returns:
        Registry of components.schemas (possibly empty)

    Raises:
        SchemaError: If components.schemas or one of its entries is malformed
    """
    if not isinstance(document, MappingABC):
        raise SchemaError(
            f"Expected document object, got {type(document).__name__}"
        )

    components = document.get("components") or {}
    if not isinstance(components, MappingABC):
        raise SchemaError("components must be an object", "#/components")

    schemas = components.get("schemas") or {}
    if not isinstance(schemas, MappingABC):
        raise SchemaError("schemas must be an object", "#/components/schemas")

    return Registry(
        {
            str(name): parse_schema(raw, f"#/components/schemas/{name}")
            for name, raw in schemas.items()
        }
    )
