"""
Persisted model document -> Model.

A document is the JSON (or YAML) form the generator keeps next to the
sources so identifiers survive regeneration:

    {
      "entities": [
        {"id": "1:1001", "lastPropertyId": "1:2001", "name": "User",
         "properties": [{"id": "1:2001", "name": "name", "type": 9}]}
      ],
      "lastEntityId": "1:1001",
      "lastIndexId": "",
      "lastRelationId": ""
    }

Keys the compiler has no use for (modelVersion, _note1, ...) are ignored.
In YAML, quote identifiers: an unquoted 1:10 is read as a base-60 integer.
"""
from __future__ import annotations

import json
import logging

import yaml
from pydantic import ValidationError

from schemagen.core.errors import ModelDocumentError

from .models import Model

_log = logging.getLogger("schemagen.schema")


def parse_model_document(text: str) -> Model:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ModelDocumentError(f"model document is neither JSON nor YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ModelDocumentError(
            f"model document must be a mapping, got {type(data).__name__}"
        )

    try:
        model = Model.model_validate(data)
    except ValidationError as exc:
        raise ModelDocumentError(f"invalid model document ({exc.error_count()} errors):\n{exc}") from exc

    _log.debug("Parsed model document with %d entities", len(model.entities))
    return model
