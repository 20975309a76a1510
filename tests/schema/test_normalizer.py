import copy
import json

from schemagate.schema import DiagnosticKind, normalize_schema


def test_nullable_string_becomes_type_union() -> None:
    result = normalize_schema({"type": "string", "nullable": True})

    assert result.schema == {"type": ["string", "null"], "description": "Value (string or null)."}
    assert result.errors == []
    assert result.warnings == []


def test_nullable_keeps_lone_null_and_existing_null() -> None:
    assert normalize_schema({"type": "null", "nullable": True}).schema["type"] == "null"
    assert normalize_schema({"type": ["string", "null"], "nullable": True}).schema["type"] == ["string", "null"]
    assert normalize_schema({"type": ["integer", "string"], "nullable": True}).schema["type"] == [
        "integer",
        "string",
        "null",
    ]


def test_nullable_without_resolvable_type_adds_nothing() -> None:
    result = normalize_schema({"nullable": True})

    assert result.schema == {"description": "Value."}


def test_nullable_false_is_consumed() -> None:
    result = normalize_schema({"type": "integer", "nullable": False})

    assert result.schema["type"] == "integer"
    assert "nullable" not in result.schema


def test_object_infers_required_from_non_nullable_properties() -> None:
    result = normalize_schema(
        {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "email": {"type": "string", "nullable": True},
            },
        }
    )

    assert result.schema["required"] == ["id"]
    assert result.schema["properties"]["email"]["type"] == ["string", "null"]
    assert result.schema["properties"]["id"]["description"] == "Id (string)."


def test_required_inference_skips_optional_default_union_and_untyped() -> None:
    result = normalize_schema(
        {
            "type": "object",
            "properties": {
                "a": {"type": "string"},
                "b": {"type": "string", "default": "x"},
                "c": {"type": "string", "optional": True},
                "d": {"type": ["string", "integer"]},
                "e": {"type": "string", "nullable": True},
                "f": {},
            },
        }
    )

    assert result.schema["required"] == ["a"]
    assert result.schema["properties"]["b"]["default"] == "x"
    assert result.schema["properties"]["c"]["optional"] is True


def test_required_inference_can_be_disabled() -> None:
    result = normalize_schema(
        {"type": "object", "properties": {"a": {"type": "string"}}},
        {"inferRequired": False},
    )

    assert "required" not in result.schema


def test_declared_required_is_filtered_against_properties() -> None:
    result = normalize_schema(
        {
            "type": "object",
            "properties": {"a": {"type": "string"}, "b": {"type": "number"}},
            "required": ["b", "missing", 3, "b"],
        }
    )

    assert result.schema["required"] == ["b"]
    assert "Removed unknown required key 'missing' at root" in result.warnings
    assert "Ignored non-string required entry at root: 3" in result.warnings


def test_required_without_properties_is_dropped() -> None:
    result = normalize_schema({"type": "object", "required": ["x"]})

    assert "required" not in result.schema
    assert "Removed unknown required key 'x' at root" in result.warnings


def test_required_on_non_object_is_ignored_with_warning() -> None:
    result = normalize_schema({"type": "string", "required": ["x"]})

    assert "required" not in result.schema
    assert "Ignoring 'required' at root because schema is not an object" in result.warnings


def test_unsupported_keywords_are_removed_with_paths() -> None:
    result = normalize_schema(
        {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "properties": {"a": {"type": "string", "$ref": "#/defs/a", "examples": ["x"]}},
        }
    )

    assert "$schema" not in result.schema
    assert result.schema["properties"]["a"] == {"type": "string", "description": "A (string)."}
    assert "Removed unsupported keyword '$schema' at root" in result.warnings
    assert "Removed unsupported keyword '$ref' at a" in result.warnings
    assert "Removed unsupported keyword 'examples' at a" in result.warnings


def test_unsupported_type_names_are_dropped() -> None:
    single = normalize_schema({"type": "foo"})
    multiple = normalize_schema({"type": ["string", "foo", "string"]})

    assert "type" not in single.schema
    assert "Dropped unsupported type 'foo' at root" in single.warnings
    assert multiple.schema["type"] == "string"


def test_type_is_inferred_from_structure() -> None:
    assert normalize_schema({"properties": {}}).schema["type"] == "object"
    assert normalize_schema({"items": {"type": "string"}}).schema["type"] == "array"
    assert normalize_schema({"enum": ["a", "b"]}).schema["type"] == "string"
    assert normalize_schema({"enum": [1, "a"]}).schema["type"] == ["number", "string"]
    assert normalize_schema({"pattern": "^a"}).schema["type"] == "string"
    assert normalize_schema({"minimum": 0}).schema["type"] == "number"
    assert normalize_schema({"default": True}).schema["type"] == "boolean"


def test_const_only_schema_follows_const_kind() -> None:
    number = normalize_schema({"const": 5})
    text = normalize_schema({"const": "on"})

    assert number.schema == {"type": "number", "const": 5, "description": "Value. Must equal 5."}
    assert text.schema["type"] == "string"


def test_const_only_properties_follow_required_inference() -> None:
    result = normalize_schema(
        {"type": "object", "properties": {"c": {"const": "x"}, "n": {"const": None}}}
    )

    assert result.schema["properties"]["c"]["type"] == "string"
    assert result.schema["properties"]["n"]["type"] == "null"
    assert result.schema["required"] == ["c"]


def test_self_referencing_values_are_dropped_with_warnings() -> None:
    loop: list = []
    loop.append(loop)
    ring: dict = {}
    ring["self"] = ring

    enum_result = normalize_schema({"enum": ["a", loop]})
    const_result = normalize_schema({"const": ring, "default": loop})

    assert enum_result.schema["enum"] == ["a"]
    assert enum_result.schema["type"] == "string"
    assert any("unserializable enum value" in warning for warning in enum_result.warnings)
    assert enum_result.errors == []

    assert "const" not in const_result.schema
    assert "default" not in const_result.schema
    assert any("unserializable const" in warning for warning in const_result.warnings)
    assert any("unserializable default" in warning for warning in const_result.warnings)
    json.dumps(const_result.schema)


def test_enum_is_deduplicated_and_described() -> None:
    result = normalize_schema({"enum": ["fast", "slow", "fast"]}, name="mode")

    assert result.schema["enum"] == ["fast", "slow"]
    assert result.schema["description"] == "Mode. Allowed values: fast, slow."


def test_enum_keeps_bool_and_int_apart() -> None:
    result = normalize_schema({"enum": [1, True, 1]})

    assert [type(value) for value in result.schema["enum"]] == [int, bool]


def test_constraints_are_gated_by_type() -> None:
    result = normalize_schema({"type": "string", "minLength": 2, "minimum": 3, "minItems": 1})

    assert result.schema["minLength"] == 2
    assert "minimum" not in result.schema
    assert "minItems" not in result.schema


def test_non_numeric_constraint_values_are_dropped() -> None:
    result = normalize_schema({"type": "integer", "minimum": "3", "maximum": 9})

    assert "minimum" not in result.schema
    assert result.schema["maximum"] == 9


def test_array_without_items_gets_object_items() -> None:
    result = normalize_schema({"type": "array"})

    assert result.schema["items"] == {"type": "object", "description": "Items (object)."}
    assert result.schema["description"] == "Array of Object for Value."


def test_array_at_depth_edge_omits_synthesized_items() -> None:
    schema = {"type": "object", "properties": {"a": {"type": "array"}}}

    first = normalize_schema(schema, {"maxDepth": 2})
    second = normalize_schema(first.schema, {"maxDepth": 2})

    assert "items" not in first.schema["properties"]["a"]
    assert first.errors == []
    assert second.errors == []
    assert second.schema == first.schema


def test_tuple_items_are_normalized_per_position() -> None:
    result = normalize_schema({"type": "array", "items": [{"type": "string"}, "bad"]})

    assert result.schema["items"][0]["type"] == "string"
    assert result.schema["items"][1] == {"type": "object"}
    assert result.errors[0].path == "items[1]"


def test_non_object_root_is_replaced_with_fallback() -> None:
    result = normalize_schema("nope")

    assert result.schema == {"type": "object"}
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.kind == DiagnosticKind.INVALID_SCHEMA
    assert error.path == "root"
    assert error.details == {"received": "string"}


def test_non_object_properties_reports_error() -> None:
    result = normalize_schema({"type": "object", "properties": [1, 2]})

    assert "properties" not in result.schema
    assert result.errors[0].kind == DiagnosticKind.INVALID_SCHEMA
    assert result.errors[0].path == "properties"


def test_depth_limit_replaces_deep_nodes() -> None:
    result = normalize_schema(
        {
            "type": "object",
            "properties": {
                "a": {"type": "object", "properties": {"b": {"type": "string"}}},
            },
        },
        {"maxDepth": 2},
    )

    assert result.schema["properties"]["a"]["properties"]["b"] == {"type": "object"}
    assert [error.kind for error in result.errors] == [DiagnosticKind.MAX_DEPTH_EXCEEDED]
    assert result.errors[0].path == "a.b"


def test_cycles_are_detected_and_cut() -> None:
    node = {"type": "object", "properties": {}}
    node["properties"]["self"] = node

    result = normalize_schema(node)

    assert result.schema["properties"]["self"] == {"type": "object"}
    assert [error.kind for error in result.errors] == [DiagnosticKind.CIRCULAR_REFERENCE]
    assert result.errors[0].path == "self"


def test_shared_subschema_is_not_a_cycle() -> None:
    shared = {"type": "string"}
    result = normalize_schema({"type": "object", "properties": {"a": shared, "b": shared}})

    assert result.errors == []
    assert result.schema["properties"]["a"]["type"] == "string"
    assert result.schema["properties"]["b"]["type"] == "string"


def test_input_is_never_mutated() -> None:
    schema = {
        "type": "object",
        "nullable": True,
        "$id": "x",
        "properties": {"a": {"type": "string", "nullable": True}},
        "required": ["a", "ghost"],
    }
    snapshot = copy.deepcopy(schema)

    normalize_schema(schema)

    assert schema == snapshot


def test_normalizing_twice_is_stable() -> None:
    schema = {
        "title": "Search",
        "type": "object",
        "properties": {
            "query": {"minLength": 1, "type": "string"},
            "limit": {"type": "integer", "minimum": 1, "default": 10},
            "tags": {"type": "array", "items": {"type": "string"}},
            "mode": {"enum": ["fast", "slow", "fast"]},
            "extra": {"additionalProperties": {"type": "number"}},
        },
        "required": ["query", "missing"],
    }

    first = normalize_schema(schema).schema
    second = normalize_schema(first)

    assert json.dumps(second.schema) == json.dumps(first)
    assert second.errors == []
    assert second.warnings == []


def test_descriptions_are_kept_trimmed_or_skipped() -> None:
    kept = normalize_schema({"type": "string", "description": "  an id  "})
    skipped = normalize_schema({"type": "string"}, {"generateDescriptions": False})

    assert kept.schema["description"] == "an id"
    assert "description" not in skipped.schema


def test_pattern_properties_and_additional_properties_recurse() -> None:
    result = normalize_schema(
        {
            "type": "object",
            "patternProperties": {"^x-": {"type": "string", "$comment": "c"}},
            "additionalProperties": {"type": "integer", "nullable": True},
        }
    )

    assert result.schema["patternProperties"]["^x-"]["type"] == "string"
    assert result.schema["additionalProperties"]["type"] == ["integer", "null"]
    assert "Removed unsupported keyword '$comment' at patternProperties[^x-]" in result.warnings


def test_output_keys_follow_canonical_order() -> None:
    result = normalize_schema({"maxLength": 5, "description": "d", "type": "string", "title": "T"})

    assert list(result.schema) == ["type", "title", "description", "maxLength"]


def test_to_dict_serializes_diagnostics() -> None:
    payload = normalize_schema(42).to_dict()

    assert payload["schema"] == {"type": "object"}
    assert payload["errors"] == [
        {
            "kind": "invalid_schema",
            "message": "Expected schema object",
            "path": "root",
            "details": {"received": "number"},
        }
    ]
    assert payload["warnings"] == []
