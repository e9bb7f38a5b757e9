"""Pytest configuration and shared fixtures."""

import re
from typing import Any, Callable, Dict

import pytest

from oas_proto.codegen import build_registry, load_config
from oas_proto.codegen.core.schema import Registry
from oas_proto.codegen.proto import ProtoGenerator

HEADER = (
    'syntax = "proto3";\n'
    "package api.v1;\n"
    'option go_package = "example.com/project/api/v1;v1";\n'
)


def make_document(schemas: Dict[str, Any]) -> Dict[str, Any]:
    return {"openapi": "3.0.3", "components": {"schemas": schemas}}


def extract_block(code: str, kind: str, name: str) -> str:
    """Return the text of one `message`/`enum` block from generated code."""
    match = re.search(
        rf"^{kind} {re.escape(name)} {{\n.*?^}}$", code, re.MULTILINE | re.DOTALL
    )
    assert match, f"{kind} {name} not found in:\n{code}"
    return match.group(0)


@pytest.fixture
def registry_from() -> Callable[[Dict[str, Any]], Registry]:
    """Build a registry from a components.schemas mapping."""

    def _build(schemas: Dict[str, Any]) -> Registry:
        return build_registry(make_document(schemas))

    return _build


@pytest.fixture
def generate(registry_from) -> Callable[..., str]:
    """Generate proto code for a components.schemas mapping."""

    def _generate(schemas: Dict[str, Any], **config: Any) -> str:
        generator = ProtoGenerator(load_config(custom_config=config))
        return generator.generate(registry_from(schemas))

    return _generate


@pytest.fixture
def petstore_document() -> Dict[str, Any]:
    return make_document(
        {
            "Pet": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Pet name\nshown to users",
                    },
                    "age": {"type": "integer", "format": "int32", "nullable": True},
                    "tags": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {"label": {"type": "string"}},
                        },
                    },
                    "status": {"type": "string", "enum": ["available", "sold"]},
                    "owner": {
                        "type": "object",
                        "properties": {"email": {"type": "string"}},
                    },
                },
            }
        }
    )
