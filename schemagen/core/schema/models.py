from __future__ import annotations

from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .ids import Identifier


def _blank_to_none(value: Any) -> Any:
    # persisted documents write "" for a marker that was never assigned
    if isinstance(value, str) and not value.strip():
        return None
    return value


class _SchemaModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class Property(_SchemaModel):
    """
    type:  kind name ("string", "long", ...) or its integer code
    flags: modifier names or an integer mask

    Both are resolved by the compiler, so unknown values fail there and not here.
    """

    name: str = Field(min_length=1)
    type: Union[StrictInt, str]
    id: Identifier
    flags: Union[StrictInt, Tuple[str, ...]] = ()
    index_id: Optional[Identifier] = None
    relation_target: Optional[str] = None

    @field_validator("index_id", "relation_target", mode="before")
    @classmethod
    def _blank_index(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _relation_needs_index(self) -> "Property":
        if self.relation_target is not None and self.index_id is None:
            raise ValueError(f"relation property {self.name!r} requires an index_id")
        return self


class Relation(_SchemaModel):
    """Standalone (many-to-many) relation; target by entity name or entity identifier."""

    name: str = Field(min_length=1)
    id: Identifier
    target: Optional[str] = None
    target_id: Optional[Identifier] = None

    @field_validator("target", "target_id", mode="before")
    @classmethod
    def _blank_target(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _has_target(self) -> "Relation":
        if self.target is None and self.target_id is None:
            raise ValueError(f"relation {self.name!r} requires target or target_id")
        return self


class Entity(_SchemaModel):
    name: str = Field(min_length=1)
    id: Identifier
    properties: Tuple[Property, ...] = ()
    relations: Tuple[Relation, ...] = ()
    last_property_id: Identifier


class Model(_SchemaModel):
    """
    Schema model handed to the compiler.

    last_index_id / last_relation_id stay None until an index / relation has
    ever existed. retired_*_uids list stable ids of removed elements; they
    must never come back on a live element.
    """

    entities: Tuple[Entity, ...] = ()
    last_entity_id: Identifier
    last_index_id: Optional[Identifier] = None
    last_relation_id: Optional[Identifier] = None

    retired_entity_uids: Tuple[int, ...] = ()
    retired_property_uids: Tuple[int, ...] = ()
    retired_index_uids: Tuple[int, ...] = ()
    retired_relation_uids: Tuple[int, ...] = ()

    @field_validator("last_index_id", "last_relation_id", mode="before")
    @classmethod
    def _blank_markers(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator(
        "retired_entity_uids",
        "retired_property_uids",
        "retired_index_uids",
        "retired_relation_uids",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return () if value is None else value

    def find_entity(self, name: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None
