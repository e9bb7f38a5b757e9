"""
Proto3 code generator implementation.

Emits one flat message or enum per registry schema. Nested shapes are
flattened into top-level types named after their parent message and
field; they are emitted right after the parent, except map values,
which are emitted before it.
"""

from itertools import count
from typing import FrozenSet, List, Optional

from ...logging_config import get_logger
from ..core.config import AnyOfMode, ConfigManager, GeneratorConfig
from ..core.context import GenerationContext, PendingSchema
from ..core.generator import EmptyRegistryError
from ..core.naming import NameNormalizer
from ..core.schema import (
    ArrayNode,
    CompositionNode,
    EnumNode,
    ObjectNode,
    ReferenceNode,
    Registry,
    SchemaNode,
    object_shape,
)
from ..core.templates import TemplateEngine, create_template_engine
from .resolver import ReferenceResolver, merge_all_of
from .types import ProtoType, ProtoTypeMapper

logger = get_logger(__name__)


def oneline(text: str) -> str:
    """Collapse a multi-line description into a single line."""
    return " ".join(text.splitlines()).strip()


class SchemaEmitter:
    """Translates schemas into proto blocks for one generation run."""

    def __init__(self, context: GenerationContext, templates: TemplateEngine):
        self.ctx = context
        self.config = context.config
        self.templates = templates
        self.names = NameNormalizer()
        self.resolver = ReferenceResolver(context.registry)
        self.type_mapper = ProtoTypeMapper(self.resolver, warn=context.warn)

    def emit(
        self, name: str, node: SchemaNode, lineage: FrozenSet[str] = frozenset()
    ) -> None:
        """
        Emit a schema as a proto type, at most once per run.

        Args:
            name: Schema (or synthesized) name
            node: Schema to translate
            lineage: Registry names being expanded on the path to this schema
        """
        type_name = self.names.type_name(name)
        if not self.ctx.mark_visited(type_name):
            logger.debug("Skipping already emitted type %s", type_name)
            return

        resolved = self.resolver.resolve(node)
        if resolved is not node and isinstance(node, ReferenceNode):
            lineage = lineage | {node.name}

        if isinstance(resolved, EnumNode):
            self._emit_enum(type_name, resolved)
        elif isinstance(resolved, (ObjectNode, CompositionNode)):
            self._emit_message(type_name, resolved, lineage)
        else:
            self._emit_wrapper(name, type_name, resolved, lineage)

    def _emit_enum(self, enum_name: str, node: EnumNode) -> None:
        prefix = enum_name.upper()
        members = [{"name": f"{prefix}_UNSPECIFIED", "number": 0}]
        for number, literal in enumerate(node.values, start=1):
            members.append(
                {"name": f"{prefix}_{self.names.enum_value(literal)}", "number": number}
            )

        logger.debug("Emitting enum %s (%d values)", enum_name, len(node.values))
        self.ctx.blocks.append(
            self.templates.render_template(
                "enum.proto.j2",
                {
                    "enum_name": enum_name,
                    "members": members,
                    "indent": self.config.indent,
                },
            )
        )

    def _emit_message(
        self, message_name: str, node: SchemaNode, lineage: FrozenSet[str]
    ) -> None:
        shape = object_shape(node)
        composition = node if isinstance(node, CompositionNode) else None
        merged = merge_all_of(
            shape.properties,
            composition.all_of if composition else (),
            self.resolver,
            shape.required,
        )

        prop_names = list(merged.properties)
        if self.config.sort_fields:
            prop_names.sort()

        indent = self.config.indent
        numbers = count(1)
        lines: List[str] = []
        checkpoint = self.ctx.checkpoint()

        for prop in prop_names:
            prop_node = merged.properties[prop]
            field_type = self._field_type(message_name, prop, prop_node, lineage)

            qualifier = ""
            if prop_node.nullable and self.config.use_optional and field_type.is_scalar:
                qualifier = "optional "

            line = (
                f"{indent}{qualifier}{field_type.render()} "
                f"{self.names.field_name(prop)} = {next(numbers)};"
            )
            if self.config.add_comments and prop_node.description:
                line += f" // {oneline(prop_node.description)}"
            lines.append(line)

        if shape.additional_properties is not None and not merged.properties:
            map_type = self._register(
                message_name,
                self.type_mapper.map_of("value", shape.additional_properties, lineage),
            )
            lines.append(f"{indent}{map_type.render()} entries = {next(numbers)};")

        if composition and composition.one_of:
            lines.append(f"{indent}oneof one_of {{")
            for index, branch in enumerate(composition.one_of, start=1):
                field_name = f"choice_{index}"
                branch_type = self._field_type(message_name, field_name, branch, lineage)
                lines.append(
                    f"{indent * 2}{branch_type.render()} {field_name} = {next(numbers)};"
                )
            lines.append(f"{indent}}}")

        if composition and composition.any_of:
            lines.extend(
                self._any_of_lines(message_name, composition.any_of, numbers, lineage)
            )

        logger.debug("Emitting message %s (%d lines)", message_name, len(lines))
        self.ctx.blocks.append(
            self.templates.render_template(
                "message.proto.j2", {"message_name": message_name, "lines": lines}
            )
        )

        for pending in self.ctx.take_pending(checkpoint):
            self.emit(pending.name, pending.node, pending.lineage)

    def _any_of_lines(
        self,
        message_name: str,
        branches: tuple,
        numbers: count,
        lineage: FrozenSet[str],
    ) -> List[str]:
        indent = self.config.indent

        if self.config.anyof_mode == AnyOfMode.REPEAT:
            # Only the first alternative survives in repeat mode
            if len(branches) > 1:
                self.ctx.warn(
                    f"{message_name}: anyOf alternatives 2..{len(branches)} "
                    "dropped in repeat mode"
                )
            value_type = self._field_type(
                message_name, "anyof_value", branches[0], lineage
            )
            return [
                f"{indent}repeated {value_type.render()} anyof_value = {next(numbers)};"
                " // anyOf first schema repeated"
            ]

        lines = [f"{indent}oneof any_of {{"]
        for index, branch in enumerate(branches, start=1):
            field_name = f"alt_{index}"
            branch_type = self._field_type(message_name, field_name, branch, lineage)
            lines.append(
                f"{indent * 2}{branch_type.render()} {field_name} = {next(numbers)};"
            )
        lines.append(f"{indent}}}")
        return lines

    def _emit_wrapper(
        self,
        schema_name: str,
        type_name: str,
        node: SchemaNode,
        lineage: FrozenSet[str],
    ) -> None:
        """Promote a bare top-level scalar (or array) to a one-field message."""
        checkpoint = self.ctx.checkpoint()
        value_type = self._field_type(type_name, "value", node, lineage)
        kind = "Array" if isinstance(node, ArrayNode) else "Primitive"

        logger.debug("Promoting %s schema %s to wrapper message", kind.lower(), schema_name)
        self.ctx.blocks.append(
            self.templates.render_template(
                "wrapper.proto.j2",
                {
                    "kind": kind,
                    "schema_name": schema_name,
                    "message_name": type_name,
                    "field_type": value_type.render(),
                },
            )
        )

        for pending in self.ctx.take_pending(checkpoint):
            self.emit(pending.name, pending.node, pending.lineage)

    def _field_type(
        self,
        message_name: str,
        field_name: str,
        node: SchemaNode,
        lineage: FrozenSet[str],
    ) -> ProtoType:
        return self._register(
            message_name, self.type_mapper.map_type(field_name, node, lineage)
        )

    def _register(self, message_name: str, proto_type: ProtoType) -> ProtoType:
        """Name a requested nested type and schedule its emission."""
        request = proto_type.synthesis
        if request is None:
            return proto_type

        flat_name = self.names.type_name(f"{message_name}_{request.local_name}")
        proto_type = proto_type.with_name(flat_name)

        if request.eager:
            self.emit(flat_name, request.node, request.lineage)
        elif self.ctx.enqueue(PendingSchema(flat_name, request.node, request.lineage)):
            logger.debug("Queued nested type %s after %s", flat_name, message_name)
        return proto_type


class ProtoGenerator:
    """Code generator for proto3 message and enum definitions."""

    language_name = "proto"
    file_extension = ".proto"

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize proto generator with configuration."""
        self.config = config or GeneratorConfig()
        self.template_engine = create_template_engine()

    def run(self, registry: Registry) -> GenerationContext:
        """
        Emit every registry schema into a fresh generation context.

        Raises:
            EmptyRegistryError: If the registry holds no schemas
        """
        if len(registry) == 0:
            raise EmptyRegistryError("no components.schemas found")

        context = GenerationContext(registry=registry, config=self.config)
        emitter = SchemaEmitter(context, self.template_engine)

        for name in registry.names(sort=self.config.sort_fields):
            emitter.emit(name, registry[name], frozenset({name}))

        logger.info(
            "Generated %d proto types from %d schemas",
            len(context.blocks),
            len(registry),
        )
        return context

    def render(self, context: GenerationContext) -> str:
        """Assemble the header and emitted blocks into the final file."""
        header = self.template_engine.render_template(
            "header.proto.j2",
            {
                "package_name": self.config.package_name,
                "go_package": self.config.go_package,
            },
        )
        return "\n\n".join([header] + context.blocks) + "\n"

    def generate(self, registry: Registry) -> str:
        """Generate the complete proto file for a registry."""
        return self.render(self.run(registry))

    def validate_config(self) -> List[str]:
        return ConfigManager().validate_config(self.config)


def create_proto_generator(config: Optional[dict] = None) -> ProtoGenerator:
    """Create a proto generator from a configuration dict."""
    return ProtoGenerator(ConfigManager().get_config(custom_config=config))
