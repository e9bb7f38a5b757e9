"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with the built-in proto3 templates registered in memory.
"""

from typing import Dict, Any, Optional

from jinja2 import DictLoader, Environment, StrictUndefined


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        """
        Initialize template engine.

        Args:
            templates: In-memory templates keyed by name
        """
        self._loader = DictLoader(dict(templates or {}))
        self._env = Environment(
            loader=self._loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {str(e)}"
            ) from e


# Built-in proto3 templates
PROTO_HEADER_TEMPLATE = """\
syntax = "proto3";
package {{ package_name }};
option go_package = "{{ go_package }}";"""

PROTO_ENUM_TEMPLATE = """\
enum {{ enum_name }} {
{% for member in members %}
{{ indent }}{{ member.name }} = {{ member.number }};
{% endfor %}
}"""

PROTO_MESSAGE_TEMPLATE = """\
message {{ message_name }} {
{% for line in lines %}
{{ line }}
{% endfor %}
}"""

PROTO_WRAPPER_TEMPLATE = """\
// {{ kind }} schema {{ schema_name }} promoted to wrapper message
message {{ message_name }} { {{ field_type }} value = 1; }"""

PROTO_TEMPLATES = {
    "header.proto.j2": PROTO_HEADER_TEMPLATE,
    "enum.proto.j2": PROTO_ENUM_TEMPLATE,
    "message.proto.j2": PROTO_MESSAGE_TEMPLATE,
    "wrapper.proto.j2": PROTO_WRAPPER_TEMPLATE,
}


def create_template_engine() -> TemplateEngine:
    """Create a template engine with the built-in proto templates."""
    return TemplateEngine(PROTO_TEMPLATES)
