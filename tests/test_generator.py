"""End-to-end tests for proto generation."""

import logging
import re

import pytest

from conftest import HEADER, extract_block, make_document
from oas_proto.codegen import (
    GeneratorError,
    ProtoGenerator,
    build_registry,
    generate_from_document,
    quick_generate,
)
from oas_proto.codegen.core.generator import EmptyRegistryError
from oas_proto.codegen.core.schema import Registry
from oas_proto.codegen.proto import create_proto_generator

OBJECT_X = {"type": "object", "properties": {"x": {"type": "string"}}}


def field_numbers(block: str):
    return [int(n) for n in re.findall(r"= (\d+);", block)]


class TestHeader:
    def test_default_header(self, generate):
        code = generate({"Name": {"type": "string"}})
        assert code.startswith(HEADER + "\n")
        assert code.endswith("}\n")

    def test_custom_package(self, generate):
        code = generate(
            {"Name": {"type": "string"}},
            package_name="petstore.v1",
            go_package="example.com/petstore;petstore",
        )
        assert code.startswith(
            'syntax = "proto3";\n'
            "package petstore.v1;\n"
            'option go_package = "example.com/petstore;petstore";\n\n'
        )


class TestEnums:
    def test_enum_has_unspecified_member_then_literals(self, generate):
        code = generate(
            {"Status": {"type": "string", "enum": ["active", "in-progress", "on hold"]}}
        )
        assert code == HEADER + (
            "\n"
            "enum Status {\n"
            "  STATUS_UNSPECIFIED = 0;\n"
            "  STATUS_ACTIVE = 1;\n"
            "  STATUS_IN_PROGRESS = 2;\n"
            "  STATUS_ON_HOLD = 3;\n"
            "}\n"
        )

    def test_integer_enum(self, generate):
        code = generate({"Code": {"type": "integer", "enum": [200, 404]}})
        block = extract_block(code, "enum", "Code")
        assert "CODE_200 = 1;" in block
        assert "CODE_404 = 2;" in block

    def test_enum_prefix_is_uppercased_type_name(self, generate):
        code = generate({"order_state": {"enum": ["open"]}})
        block = extract_block(code, "enum", "OrderState")
        assert "ORDERSTATE_UNSPECIFIED = 0;" in block
        assert "ORDERSTATE_OPEN = 1;" in block


class TestWrappers:
    def test_primitive_schema_is_promoted(self, generate):
        code = generate({"Count": {"type": "integer", "format": "int32"}})
        assert code == HEADER + (
            "\n"
            "// Primitive schema Count promoted to wrapper message\n"
            "message Count { int32 value = 1; }\n"
        )

    def test_untyped_schema_is_promoted_to_string(self, generate):
        code = generate({"Anything": {}})
        assert "message Anything { string value = 1; }" in code

    def test_array_schema_is_promoted(self, generate):
        code = generate(
            {
                "Pet": OBJECT_X,
                "Pets": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
            }
        )
        assert (
            "// Array schema Pets promoted to wrapper message\n"
            "message Pets { repeated PetsValueItem value = 1; }\n\n"
            "message PetsValueItem {\n"
            "  string x = 1;\n"
            "}\n"
        ) in code


class TestMessages:
    def test_pet_message(self, generate, petstore_document):
        code = generate(petstore_document["components"]["schemas"])
        assert code == HEADER + (
            "\n"
            "message Pet {\n"
            "  optional int32 age = 1;\n"
            "  string name = 2; // Pet name shown to users\n"
            "  PetOwner owner = 3;\n"
            "  PetStatus status = 4;\n"
            "  repeated PetTagsItem tags = 5;\n"
            "}\n"
            "\n"
            "message PetOwner {\n"
            "  string email = 1;\n"
            "}\n"
            "\n"
            "enum PetStatus {\n"
            "  PETSTATUS_UNSPECIFIED = 0;\n"
            "  PETSTATUS_AVAILABLE = 1;\n"
            "  PETSTATUS_SOLD = 2;\n"
            "}\n"
            "\n"
            "message PetTagsItem {\n"
            "  string label = 1;\n"
            "}\n"
        )

    def test_empty_object(self, generate):
        code = generate({"Empty": {"type": "object"}})
        assert "message Empty {\n}" in code

    def test_field_names_are_snake_case(self, generate):
        code = generate(
            {"Pet": {"properties": {"petId": {"type": "integer"}, "pet-name": {}}}}
        )
        block = extract_block(code, "message", "Pet")
        assert "  string pet_name = 1;" in block
        assert "  int64 pet_id = 2;" in block

    def test_multiline_description_is_one_comment(self, generate):
        code = generate(
            {"Pet": {"properties": {"name": {"type": "string", "description": "a\n b\n"}}}}
        )
        assert "  string name = 1; // a  b\n" in code

    def test_comments_disabled(self, generate, petstore_document):
        code = generate(petstore_document["components"]["schemas"], add_comments=False)
        assert "//" not in code

    def test_own_properties_win_over_all_of(self, generate):
        code = generate(
            {
                "Base": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "status": {"type": "integer"},
                    },
                },
                "Dog": {
                    "allOf": [
                        {"$ref": "#/components/schemas/Base"},
                        {"type": "object", "properties": {"bark": {"type": "boolean"}}},
                    ],
                    "properties": {"status": {"type": "string"}},
                },
            }
        )
        assert extract_block(code, "message", "Dog") == (
            "message Dog {\n"
            "  bool bark = 1;\n"
            "  int64 id = 2;\n"
            "  string status = 3;\n"
            "}"
        )

    def test_top_level_reference_copies_target(self, generate):
        code = generate(
            {
                "Alias": {"$ref": "#/components/schemas/Pet"},
                "Pet": OBJECT_X,
            }
        )
        assert extract_block(code, "message", "Alias") == (
            "message Alias {\n  string x = 1;\n}"
        )
        assert "message Pet {" in code


class TestOptional:
    SCHEMAS = {
        "Sample": {
            "type": "object",
            "properties": {
                "a": {"type": "string", "nullable": True},
                "b": {"type": "object", "nullable": True, "properties": {"x": {}}},
                "c": {"type": "array", "nullable": True, "items": {"type": "string"}},
                "d": {"type": ["string", "null"]},
                "e": {"type": "string"},
                "f": {"enum": ["x"], "nullable": True},
            },
        }
    }

    def test_only_nullable_scalars_are_optional(self, generate):
        block = extract_block(generate(self.SCHEMAS), "message", "Sample")
        assert block == (
            "message Sample {\n"
            "  optional string a = 1;\n"
            "  SampleB b = 2;\n"
            "  repeated string c = 3;\n"
            "  optional string d = 4;\n"
            "  string e = 5;\n"
            "  SampleF f = 6;\n"
            "}"
        )

    def test_optional_disabled(self, generate):
        code = generate(self.SCHEMAS, use_optional=False)
        assert "optional" not in code


class TestMaps:
    def test_map_schema_value_is_emitted_before_message(self, generate):
        code = generate(
            {
                "Labels": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "object",
                        "properties": {"v": {"type": "string"}},
                    },
                }
            }
        )
        assert code == HEADER + (
            "\n"
            "message LabelsValue {\n"
            "  string v = 1;\n"
            "}\n"
            "\n"
            "message Labels {\n"
            "  map<string,LabelsValue> entries = 1;\n"
            "}\n"
        )

    def test_map_of_scalars(self, generate):
        code = generate(
            {"Counts": {"type": "object", "additionalProperties": {"type": "integer"}}}
        )
        assert extract_block(code, "message", "Counts") == (
            "message Counts {\n  map<string,int64> entries = 1;\n}"
        )

    def test_untyped_map(self, generate):
        code = generate({"Extra": {"type": "object", "additionalProperties": True}})
        assert "  map<string,string> entries = 1;" in code

    def test_properties_take_precedence_over_additional_properties(self, generate):
        code = generate(
            {
                "Pet": {
                    "properties": {"name": {"type": "string"}},
                    "additionalProperties": {"type": "integer"},
                }
            }
        )
        block = extract_block(code, "message", "Pet")
        assert "entries" not in block
        assert "  string name = 1;" in block

    def test_map_property_value_is_emitted_before_parent(self, generate):
        code = generate(
            {
                "Pet": {
                    "type": "object",
                    "properties": {
                        "attrs": {
                            "type": "object",
                            "additionalProperties": OBJECT_X,
                        },
                        "owner": OBJECT_X,
                    },
                }
            }
        )
        assert "  map<string,PetAttrsValue> attrs = 1;" in code
        assert "  PetOwner owner = 2;" in code
        positions = [
            code.index("message PetAttrsValue {"),
            code.index("message Pet {"),
            code.index("message PetOwner {"),
        ]
        assert positions == sorted(positions)


class TestCompositions:
    def test_one_of_continues_field_numbers(self, generate):
        code = generate(
            {
                "Circle": {
                    "type": "object",
                    "properties": {"radius": {"type": "number"}},
                },
                "Shape": {
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                    "oneOf": [
                        {"$ref": "#/components/schemas/Circle"},
                        {"type": "string"},
                        {"type": "integer", "format": "int32"},
                    ],
                },
            }
        )
        assert extract_block(code, "message", "Shape") == (
            "message Shape {\n"
            "  string name = 1;\n"
            "  oneof one_of {\n"
            "    ShapeChoice1 choice_1 = 2;\n"
            "    string choice_2 = 3;\n"
            "    int32 choice_3 = 4;\n"
            "  }\n"
            "}"
        )
        assert extract_block(code, "message", "ShapeChoice1") == (
            "message ShapeChoice1 {\n  double radius = 1;\n}"
        )
        assert code.index("message Shape {") < code.index("message ShapeChoice1 {")

    def test_any_of_as_oneof(self, generate):
        code = generate({"Value": {"anyOf": [{"type": "string"}, {"type": "number"}]}})
        assert extract_block(code, "message", "Value") == (
            "message Value {\n"
            "  oneof any_of {\n"
            "    string alt_1 = 1;\n"
            "    double alt_2 = 2;\n"
            "  }\n"
            "}"
        )

    def test_any_of_repeat_keeps_first_alternative(self, generate):
        schemas = {
            "Value": {
                "anyOf": [
                    {"type": "integer", "format": "int32"},
                    {"type": "string"},
                    {"type": "boolean"},
                ]
            }
        }
        code = generate(schemas, anyof_mode="repeat")
        assert extract_block(code, "message", "Value") == (
            "message Value {\n"
            "  repeated int32 anyof_value = 1; // anyOf first schema repeated\n"
            "}"
        )

    def test_any_of_repeat_reports_dropped_alternatives(self):
        document = make_document(
            {"Value": {"anyOf": [{"type": "string"}, {"type": "boolean"}]}}
        )
        result = generate_from_document(document, {"anyof_mode": "repeat"})
        assert result.success
        assert "Value: anyOf alternatives 2..2 dropped in repeat mode" in result.warnings
        assert "bool" not in result.code

    def test_numbering_is_contiguous_across_all_sections(self, generate):
        code = generate(
            {
                "Combo": {
                    "properties": {"id": {"type": "integer"}},
                    "oneOf": [{"type": "string"}, {"type": "boolean"}],
                    "anyOf": [{"type": "number"}],
                },
                "Mixed": {
                    "additionalProperties": {"type": "string"},
                    "oneOf": [{"type": "string"}, {"type": "integer"}],
                },
            }
        )
        assert field_numbers(extract_block(code, "message", "Combo")) == [1, 2, 3, 4]
        mixed = extract_block(code, "message", "Mixed")
        assert "  map<string,string> entries = 1;" in mixed
        assert field_numbers(mixed) == [1, 2, 3]


    def test_declared_scalar_type_wins_for_fields(self, generate):
        code = generate(
            {
                "Event": {
                    "type": "object",
                    "properties": {
                        "when": {
                            "type": "string",
                            "oneOf": [{"format": "date"}, {"format": "date-time"}],
                        },
                        "level": {"type": "integer", "allOf": [{"minimum": 0}]},
                    },
                }
            }
        )
        assert code == HEADER + (
            "\n"
            "message Event {\n"
            "  int64 level = 1;\n"
            "  string when = 2;\n"
            "}\n"
        )

    def test_top_level_scalar_composition_is_a_message(self, generate):
        code = generate(
            {
                "Stamp": {
                    "type": "string",
                    "oneOf": [{"format": "date"}, {"format": "date-time"}],
                }
            }
        )
        assert extract_block(code, "message", "Stamp") == (
            "message Stamp {\n"
            "  oneof one_of {\n"
            "    string choice_1 = 1;\n"
            "    string choice_2 = 2;\n"
            "  }\n"
            "}"
        )


class TestEmissionOrder:
    def test_nested_types_follow_parent_depth_first(self, generate):
        code = generate(
            {
                "Order": {
                    "type": "object",
                    "properties": {
                        "customer": {
                            "type": "object",
                            "properties": {"address": OBJECT_X},
                        },
                        "item": OBJECT_X,
                    },
                }
            }
        )
        names = re.findall(r"^message (\w+) \{", code, re.MULTILINE)
        assert names == ["Order", "OrderCustomer", "OrderCustomerAddress", "OrderItem"]

    def test_schema_order_is_sorted_by_default(self, generate):
        code = generate(
            {
                "Zebra": {"properties": {"z": {"type": "string"}, "a": {"type": "string"}}},
                "Apple": OBJECT_X,
            }
        )
        assert code.index("message Apple {") < code.index("message Zebra {")
        assert "  string a = 1;\n  string z = 2;" in code

    def test_declaration_order_when_unsorted(self, generate):
        code = generate(
            {
                "Zebra": {"properties": {"z": {"type": "string"}, "a": {"type": "string"}}},
                "Apple": OBJECT_X,
            },
            sort_fields=False,
        )
        assert code.index("message Zebra {") < code.index("message Apple {")
        assert "  string z = 1;\n  string a = 2;" in code

    def test_each_type_is_emitted_once(self, generate):
        code = generate(
            {
                "Pet": {"properties": {"owner": {"properties": {"name": {"type": "string"}}}}},
                "PetOwner": {"properties": {"id": {"type": "integer"}}},
            }
        )
        assert code.count("message PetOwner {") == 1
        assert "  string name = 1;" in extract_block(code, "message", "PetOwner")

    def test_names_equal_after_normalization_are_emitted_once(self, generate):
        code = generate({"pet_owner": OBJECT_X, "PetOwner": OBJECT_X})
        assert code.count("message PetOwner {") == 1


class TestReferences:
    def test_dangling_reference_becomes_string(self):
        document = make_document(
            {"Pet": {"properties": {"owner": {"$ref": "#/components/schemas/Missing"}}}}
        )
        result = generate_from_document(document)
        assert result.success
        assert "  string owner = 1;" in result.code
        assert (
            "Unresolved reference '#/components/schemas/Missing' mapped to string"
            in result.warnings
        )

    def test_reference_chain_is_not_followed(self, generate):
        code = generate(
            {
                "B": {"$ref": "#/components/schemas/C"},
                "C": OBJECT_X,
                "Pet": {"properties": {"b": {"$ref": "#/components/schemas/B"}}},
            }
        )
        assert "  string b = 1;" in extract_block(code, "message", "Pet")
        assert extract_block(code, "message", "B") == "message B {\n  string x = 1;\n}"

    def test_self_reference_terminates(self, generate):
        code = generate(
            {
                "Node": {
                    "type": "object",
                    "properties": {
                        "children": {
                            "type": "array",
                            "items": {"$ref": "#/components/schemas/Node"},
                        },
                        "name": {"type": "string"},
                    },
                }
            }
        )
        assert code == HEADER + (
            "\n"
            "message Node {\n"
            "  repeated Node children = 1;\n"
            "  string name = 2;\n"
            "}\n"
        )

    def test_mutual_references_terminate(self, generate):
        code = generate(
            {
                "Child": {"properties": {"parent": {"$ref": "#/components/schemas/Parent"}}},
                "Parent": {"properties": {"child": {"$ref": "#/components/schemas/Child"}}},
            }
        )
        assert "  Child child = 1;" in extract_block(code, "message", "ChildParent")
        assert "  Parent parent = 1;" in extract_block(code, "message", "ParentChild")


class TestGenerationRuns:
    def test_warnings_are_logged(self, caplog):
        document = make_document(
            {"Pet": {"properties": {"owner": {"$ref": "#/components/schemas/Missing"}}}}
        )
        with caplog.at_level(logging.WARNING, logger="oas_proto"):
            generate_from_document(document)
        assert (
            "Unresolved reference '#/components/schemas/Missing' mapped to string"
            in caplog.messages
        )

    def test_empty_registry_raises(self):
        with pytest.raises(EmptyRegistryError, match="no components.schemas found"):
            ProtoGenerator().generate(Registry({}))

    def test_empty_registry_result(self):
        result = generate_from_document({"openapi": "3.0.0"})
        assert not result.success
        assert "no components.schemas found" in result.error_message
        assert isinstance(result.exception, EmptyRegistryError)
        assert result.code == ""

    def test_malformed_document_result(self):
        result = generate_from_document({"components": {"schemas": {"Bad": "nope"}}})
        assert not result.success
        assert result.error_message.startswith("Invalid schema:")

    def test_runs_are_independent(self, petstore_document):
        generator = ProtoGenerator()
        registry = build_registry(petstore_document)
        assert generator.generate(registry) == generator.generate(registry)

    def test_metadata(self, petstore_document):
        result = generate_from_document(petstore_document)
        assert result.metadata == {
            "language": "proto",
            "file_extension": ".proto",
            "schema_count": 1,
            "emitted_types": 4,
            "package": "api.v1",
            "anyof_mode": "oneof",
        }
        assert result.warnings == []

    def test_config_warnings_are_reported(self, petstore_document):
        result = generate_from_document(petstore_document, {"package_name": "my-api.v1"})
        assert result.success
        assert "Invalid proto package name: my-api.v1" in result.warnings

    def test_create_proto_generator(self, petstore_document):
        generator = create_proto_generator({"indent_size": 4})
        code = generator.generate(build_registry(petstore_document))
        assert "\n    optional int32 age = 1;" in code


class TestQuickGenerate:
    def test_yaml_text(self):
        code = quick_generate(
            "components:\n"
            "  schemas:\n"
            "    Count:\n"
            "      type: integer\n",
            package_name="demo.v1",
        )
        assert "package demo.v1;" in code
        assert "message Count { int64 value = 1; }" in code

    def test_failure_raises(self):
        with pytest.raises(GeneratorError, match="no components.schemas found"):
            quick_generate({"components": {"schemas": {}}})
