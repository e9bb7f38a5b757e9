"""
OpenAPI to proto3 code generation.
"""

from typing import Any, Dict, Optional, Union

from .core.config import GeneratorConfig, ConfigManager, load_config
from .core.generator import GenerationResult, GeneratorError, generate_code
from .core.schema import Registry, SchemaError, build_registry
from .proto.generator import ProtoGenerator


def generate_from_document(
    document: Dict[str, Any],
    config: Optional[Union[GeneratorConfig, Dict[str, Any]]] = None,
) -> GenerationResult:
    """
    Generate proto code from a parsed OpenAPI document.

    Args:
        document: Parsed OpenAPI document (JSON or YAML)
        config: Generator configuration object or overrides dict

    Returns:
        GenerationResult with generated code
    """
    if not isinstance(config, GeneratorConfig):
        config = load_config(custom_config=config)

    try:
        registry = build_registry(document)
    except SchemaError as e:
        return GenerationResult.error(f"Invalid schema: {str(e)}", exception=e)

    return generate_code(ProtoGenerator(config), registry)


def quick_generate(document: Union[str, Dict[str, Any]], **options) -> str:
    """
    Quick proto generation from document text or a parsed document.

    Args:
        document: OpenAPI document as JSON/YAML text or dict
        **options: Generator options

    Returns:
        Generated proto code
    """
    if isinstance(document, str):
        from oas_proto.utils import parse_document

        document = parse_document(document)

    result = generate_from_document(document, options)

    if result.success:
        return result.code
    else:
        raise GeneratorError(f"Code generation failed: {result.error_message}")


__all__ = [
    "ConfigManager",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "ProtoGenerator",
    "Registry",
    "build_registry",
    "generate_code",
    "generate_from_document",
    "load_config",
    "quick_generate",
]
