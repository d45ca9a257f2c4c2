"""
C dialect: header wrapper and one guarded call per instruction.
"""
from __future__ import annotations

import pytest

from schemagen.core.compiler import compile_model
from schemagen.core.generators import GeneratorOptions, generate, render
from schemagen.core.generators.dialects import c_string, c_uid
from schemagen.core.schema import Model


def _make_model(**overrides) -> Model:
    defaults = dict(
        entities=[
            {
                "name": "User",
                "id": "1:1001",
                "lastPropertyId": "1:2001",
                "properties": [{"name": "name", "type": "string", "id": "1:2001"}],
            }
        ],
        lastEntityId="1:1001",
    )
    defaults.update(overrides)
    return Model.model_validate(defaults)


def _body_lines(source: str):
    start = source.index("do {") + len("do {")
    end = source.index("successful = true;")
    return [line.strip() for line in source[start:end].splitlines() if line.strip()]


def test_user_model_body():
    source = generate(_make_model(), "c")
    assert _body_lines(source) == [
        'if (obx_model_entity(model, "User", 1, 1001)) break;',
        'if (obx_model_property(model, "name", OBXPropertyType_String, 1, 2001)) break;',
        "if (obx_model_entity_last_property_id(model, 1, 2001)) break;",
        "obx_model_last_entity_id(model, 1, 1001);",
    ]


def test_wrapper_structure():
    source = generate(_make_model(), "c")
    assert source.startswith("// Code generated by schemagen; DO NOT EDIT.\n")
    assert "#ifndef OBJECTBOX_MODEL_H\n#define OBJECTBOX_MODEL_H\n" in source
    assert '#include "objectbox.h"' in source
    assert "static inline OBX_model* create_obx_model() {" in source
    assert "OBX_model* model = obx_model();" in source
    assert "if (!model) return NULL;" in source
    assert source.rstrip().endswith("#endif  // OBJECTBOX_MODEL_H")


def test_failure_path_frees_the_model_once():
    source = generate(_make_model(), "c")
    assert source.count("obx_model_free(model);") == 1
    free_at = source.index("obx_model_free(model);")
    assert source.rindex("if (!successful) {", 0, free_at) < free_at
    assert source.index("return model;") > free_at


def test_flags_are_symbolic_and_follow_the_property():
    model = _make_model(
        entities=[
            {
                "name": "User",
                "id": "1:1001",
                "lastPropertyId": "1:2001",
                "properties": [
                    {"name": "name", "type": "string", "id": "1:2001", "flags": ["indexed", "not_null"]}
                ],
            }
        ]
    )
    lines = _body_lines(generate(model, "c"))
    assert lines[1].startswith("if (obx_model_property(model, \"name\"")
    assert lines[2] == (
        "if (obx_model_property_flags(model, (OBXPropertyFlags) (OBXPropertyFlags_NOT_NULL | OBXPropertyFlags_INDEXED))) break;"
    )


def test_indexes_and_relations():
    model = _make_model(
        entities=[
            {
                "name": "User",
                "id": "1:1001",
                "lastPropertyId": "1:2001",
                "properties": [
                    {"name": "email", "type": "string", "id": "1:2001", "flags": ["indexed"], "indexId": "1:3001"}
                ],
            },
            {
                "name": "Order",
                "id": "2:1002",
                "lastPropertyId": "1:2002",
                "properties": [
                    {"name": "user", "type": "relation", "id": "1:2002", "indexId": "2:3002", "relationTarget": "User"}
                ],
                "relations": [{"name": "watchers", "id": "1:4001", "target": "User"}],
            },
        ],
        lastEntityId="2:1002",
        lastIndexId="2:3002",
        lastRelationId="1:4001",
    )
    lines = _body_lines(generate(model, "c"))
    assert "if (obx_model_property_flags(model, OBXPropertyFlags_INDEXED)) break;" in lines
    assert "if (obx_model_property_index_id(model, 1, 3001)) break;" in lines
    assert 'if (obx_model_property(model, "user", OBXPropertyType_Relation, 1, 2002)) break;' in lines
    assert 'if (obx_model_property_relation(model, "User", 2, 3002)) break;' in lines
    assert "if (obx_model_relation(model, 1, 4001, 1, 1001)) break;" in lines
    assert lines[-3:] == [
        "obx_model_last_entity_id(model, 2, 1002);",
        "obx_model_last_index_id(model, 2, 3002);",
        "obx_model_last_relation_id(model, 1, 4001);",
    ]


def test_options_override_wrapper_names():
    source = generate(
        _make_model(),
        "c",
        {"function_name": "build_model", "guard": "MY_MODEL_H", "runtime": "vendor/objectbox.h"},
    )
    assert "static inline OBX_model* build_model() {" in source
    assert "#ifndef MY_MODEL_H" in source
    assert '#include "vendor/objectbox.h"' in source


def test_c_dialect_requires_a_guard():
    opts = GeneratorOptions(function_name="create_obx_model", runtime="objectbox.h", guard=None)
    with pytest.raises(ValueError):
        render(compile_model(_make_model()), "c", opts)


def test_render_is_deterministic():
    stream = compile_model(_make_model())
    assert render(stream, "c") == render(stream, "c")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("User", '"User"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("back\\slash", '"back\\\\slash"'),
        ("a??=b", '"a\\?\\?=b"'),
        ("Ünïcode", '"\\303\\234n\\303\\257code"'),
        ("tab\there", '"tab\\011here"'),
    ],
)
def test_c_string_escaping(text, expected):
    assert c_string(text) == expected


def test_large_uids_get_an_unsigned_suffix():
    assert c_uid(2**63 - 1) == str(2**63 - 1)
    assert c_uid(2**63) == f"{2**63}ull"
    assert c_uid(2**64 - 1) == f"{2**64 - 1}ull"
