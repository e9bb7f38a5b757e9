"""
Core code generation components.

Provides the schema model, naming, configuration and per-run state
used by the proto generator.
"""

from .generator import (
    EmptyRegistryError,
    GenerationResult,
    GeneratorError,
    generate_code,
)
from .schema import (
    ArrayNode,
    CompositionNode,
    EnumNode,
    NodeKind,
    ObjectNode,
    ReferenceNode,
    Registry,
    ScalarKind,
    ScalarNode,
    SchemaError,
    SchemaNode,
    UntypedNode,
    build_registry,
    parse_schema,
)
from .naming import (
    NameNormalizer,
    NamingCase,
    normalize_enum_value,
    normalize_field_name,
    normalize_type_name,
)
from .config import AnyOfMode, ConfigError, ConfigManager, GeneratorConfig, load_config
from .context import GenerationContext, PendingSchema
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Generation results
    "EmptyRegistryError",
    "GenerationResult",
    "GeneratorError",
    "generate_code",
    # Schema model
    "ArrayNode",
    "CompositionNode",
    "EnumNode",
    "NodeKind",
    "ObjectNode",
    "ReferenceNode",
    "Registry",
    "ScalarKind",
    "ScalarNode",
    "SchemaError",
    "SchemaNode",
    "UntypedNode",
    "build_registry",
    "parse_schema",
    # Naming
    "NameNormalizer",
    "NamingCase",
    "normalize_enum_value",
    "normalize_field_name",
    "normalize_type_name",
    # Configuration
    "AnyOfMode",
    "ConfigError",
    "ConfigManager",
    "GeneratorConfig",
    "load_config",
    # Per-run state
    "GenerationContext",
    "PendingSchema",
    # Templates
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
