from __future__ import annotations

import json
from enum import Enum
from hashlib import sha256
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Op(str, Enum):
    ENTITY = "entity"
    PROPERTY = "property"
    PROPERTY_FLAGS = "property_flags"
    PROPERTY_INDEX_ID = "property_index_id"
    PROPERTY_RELATION = "property_relation"
    RELATION = "relation"
    ENTITY_LAST_PROPERTY_ID = "entity_last_property_id"
    MODEL_LAST_ENTITY_ID = "model_last_entity_id"
    MODEL_LAST_INDEX_ID = "model_last_index_id"
    MODEL_LAST_RELATION_ID = "model_last_relation_id"


class Instruction(BaseModel):
    """
    One builder step. Fields used per op:

      ENTITY, PROPERTY           name, id, uid (+ type_code, type_name)
      PROPERTY_FLAGS             flags, flag_names
      PROPERTY_INDEX_ID          id, uid of the index
      PROPERTY_RELATION          name = target entity, id, uid of the index
      RELATION                   id, uid, target_id, target_uid
      *_LAST_*_ID                id, uid
    """

    model_config = ConfigDict(frozen=True)

    op: Op
    name: Optional[str] = None
    id: Optional[int] = None
    uid: Optional[int] = None
    type_code: Optional[int] = None
    type_name: Optional[str] = None
    flags: Optional[int] = None
    flag_names: Tuple[str, ...] = ()
    target_id: Optional[int] = None
    target_uid: Optional[int] = None


class InstructionStream(BaseModel):
    model_config = ConfigDict(frozen=True)

    instructions: Tuple[Instruction, ...] = ()

    def __len__(self) -> int:
        return len(self.instructions)

    def ops(self) -> Tuple[Op, ...]:
        return tuple(i.op for i in self.instructions)

    def count(self, op: Op) -> int:
        return sum(1 for i in self.instructions if i.op == op)

    def deterministic_hash(self) -> str:
        raw = json.dumps(
            self.model_dump(mode="json"),
            sort_keys=True,
            separators=(",", ":"),
        )
        return sha256(raw.encode()).hexdigest()
