from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_ID = 2**32 - 1
MAX_UID = 2**64 - 1


class Identifier(BaseModel):
    """
    Dual identifier of a schema element.

    id:  dense sequential id, may be reassigned between generations
    uid: stable id, never reused for another element once assigned

    Accepts {"id": 1, "uid": 1001} or the persisted string form "1:1001".
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1, le=MAX_ID)
    uid: int = Field(ge=1, le=MAX_UID)

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            parts = value.strip().split(":")
            if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
                raise ValueError(f"identifier must look like 'id:uid', got {value!r}")
            return {"id": int(parts[0]), "uid": int(parts[1])}
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return {"id": value[0], "uid": value[1]}
        return value

    @classmethod
    def parse(cls, text: str) -> "Identifier":
        return cls.model_validate(text)

    def __str__(self) -> str:
        return f"{self.id}:{self.uid}"
