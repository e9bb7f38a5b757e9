"""
Generation results and the error-handling wrapper around a run.
"""

from typing import Dict, List, Any, Optional, TYPE_CHECKING

from ...logging_config import get_logger
from .schema import Registry
from .templates import TemplateError

if TYPE_CHECKING:
    from ..proto.generator import ProtoGenerator

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class EmptyRegistryError(GeneratorError):
    """Raised when there are no schemas to generate from."""

    pass


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        warnings: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(
        cls, message: str, exception: Optional[Exception] = None
    ) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def generate_code(generator: "ProtoGenerator", registry: Registry) -> GenerationResult:
    """
    Generate code using the specified generator with error handling.

    Args:
        generator: Proto generator instance
        registry: Schemas to generate code for

    Returns:
        GenerationResult with code, warnings, and metadata
    """
    try:
        context = generator.run(registry)
        code = generator.render(context)
    except (GeneratorError, TemplateError) as e:
        logger.error("Code generation failed: %s", e)
        return GenerationResult.error(f"Code generation failed: {str(e)}", exception=e)

    warnings = generator.validate_config() + list(context.warnings)
    metadata = {
        "language": generator.language_name,
        "file_extension": generator.file_extension,
        "schema_count": len(registry),
        "emitted_types": len(context.visited),
        "package": generator.config.package_name,
        "anyof_mode": generator.config.anyof_mode.value,
    }
    return GenerationResult(code, warnings, metadata)
