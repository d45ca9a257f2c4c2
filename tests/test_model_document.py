"""
Persisted model documents (JSON / YAML).
"""
from __future__ import annotations

import json

import pytest

from schemagen.core.compiler import Op, compile_model
from schemagen.core.errors import ModelDocumentError
from schemagen.core.schema import Identifier, parse_model_document

# Shape written by the ObjectBox generator, trimmed to one entity.
PERSISTED = """
{
  "_note1": "KEEP THIS FILE! Check it into a version control system (VCS) like git.",
  "entities": [
    {
      "id": "1:6645479796472661194",
      "lastPropertyId": "3:2734296580359128487",
      "name": "Task",
      "properties": [
        {"id": "1:8245470765478637366", "name": "id", "type": 6, "flags": 1},
        {"id": "2:1716380880405347557", "name": "text", "type": 9},
        {"id": "3:2734296580359128487", "name": "date_created", "type": 10,
         "flags": 40, "indexId": "1:8910240573231432118"}
      ]
    }
  ],
  "lastEntityId": "1:6645479796472661194",
  "lastIndexId": "1:8910240573231432118",
  "lastRelationId": "",
  "modelVersion": 5,
  "retiredEntityUids": [],
  "retiredIndexUids": [],
  "retiredPropertyUids": [],
  "retiredRelationUids": []
}
"""


def test_parse_persisted_json_document():
    model = parse_model_document(PERSISTED)
    task = model.find_entity("Task")
    assert task.id == Identifier(id=1, uid=6645479796472661194)
    assert model.last_relation_id is None
    assert model.last_index_id.uid == 8910240573231432118

    stream = compile_model(model)
    flags = [i for i in stream.instructions if i.op == Op.PROPERTY_FLAGS]
    assert [f.flags for f in flags] == [1, 40]
    assert flags[1].flag_names == ("indexed", "unique")


def test_parse_yaml_document():
    text = """
entities:
  - name: User
    id: "1:1001"
    lastPropertyId: "1:2001"
    properties:
      - name: name
        type: string
        id: "1:2001"
        flags: [indexed, not_null]
lastEntityId: "1:1001"
"""
    model = parse_model_document(text)
    assert model.entities[0].properties[0].flags == ("indexed", "not_null")
    assert len(compile_model(model)) == 5


def test_snake_case_keys_are_accepted():
    doc = {
        "entities": [
            {"name": "User", "id": "1:1001", "last_property_id": "1:2001",
             "properties": [{"name": "name", "type": "string", "id": "1:2001"}]}
        ],
        "last_entity_id": "1:1001",
    }
    model = parse_model_document(json.dumps(doc))
    assert model.entities[0].last_property_id.uid == 2001


def test_non_mapping_document_is_rejected():
    with pytest.raises(ModelDocumentError):
        parse_model_document("[1, 2, 3]")


def test_unparseable_document_is_rejected():
    with pytest.raises(ModelDocumentError):
        parse_model_document("entities: [\n  {{{{")


def test_invalid_identifier_is_reported():
    with pytest.raises(ModelDocumentError) as ei:
        parse_model_document('{"entities": [], "lastEntityId": "nope"}')
    assert "lastEntityId" in str(ei.value)


def test_missing_last_entity_id_is_reported():
    with pytest.raises(ModelDocumentError):
        parse_model_document('{"entities": []}')
