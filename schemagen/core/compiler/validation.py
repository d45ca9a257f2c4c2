from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from schemagen.core.errors import (
    DuplicateIdentifierError,
    HighWaterMarkError,
    UnresolvedRelationTargetError,
)
from schemagen.core.schema.ids import Identifier
from schemagen.core.schema.models import Entity, Model, Relation

Element = Tuple[str, Identifier]


class _IdRegistry:
    """Tracks ids and uids of one element kind within one scope."""

    def __init__(self, kind: str, *, scope: Optional[str] = None, retired: Iterable[int] = ()):
        self.kind = kind
        self.scope = scope
        self.retired = frozenset(retired)
        self._ids: Dict[int, str] = {}
        self._uids: Dict[int, str] = {}

    def _where(self) -> str:
        return f" in {self.scope}" if self.scope else ""

    def add(self, name: str, ident: Identifier, *, uid_only: bool = False) -> None:
        other = None if uid_only else self._ids.get(ident.id)
        if other is not None:
            raise DuplicateIdentifierError(
                f"{self.kind} {name!r} reuses id {ident.id} of {self.kind} {other!r}{self._where()}",
                kind=self.kind,
                name=name,
            )
        other = self._uids.get(ident.uid)
        if other is not None:
            raise DuplicateIdentifierError(
                f"{self.kind} {name!r} reuses uid {ident.uid} of {self.kind} {other!r}{self._where()}",
                kind=self.kind,
                name=name,
            )
        if ident.uid in self.retired:
            raise DuplicateIdentifierError(
                f"{self.kind} {name!r} uses retired uid {ident.uid}",
                kind=self.kind,
                name=name,
            )
        self._ids[ident.id] = name
        self._uids[ident.uid] = name


def _check_high_water_mark(
    kind: str,
    mark: Optional[Identifier],
    elements: List[Element],
    *,
    owner: str,
) -> None:
    if not elements:
        return
    if mark is None:
        raise HighWaterMarkError(
            f"{owner} declares {kind}s but has no last {kind} id",
            kind=kind,
            name=elements[0][0],
        )
    for name, ident in elements:
        if ident.id > mark.id:
            raise HighWaterMarkError(
                f"last {kind} id {mark} of {owner} is lower than {kind} {name!r} ({ident})",
                kind=kind,
                name=name,
            )
        if ident.id == mark.id and ident.uid != mark.uid:
            raise HighWaterMarkError(
                f"last {kind} id {mark} of {owner} does not match {kind} {name!r} ({ident})",
                kind=kind,
                name=name,
            )


def resolve_relation_target(model: Model, owner: Entity, relation: Relation) -> Entity:
    by_name = model.find_entity(relation.target) if relation.target is not None else None
    by_id = None
    if relation.target_id is not None:
        by_id = next((e for e in model.entities if e.id == relation.target_id), None)

    if relation.target is not None and by_name is None:
        raise UnresolvedRelationTargetError(
            f"relation {relation.name!r} of entity {owner.name!r} targets unknown entity {relation.target!r}",
            kind="relation",
            name=relation.name,
        )
    if relation.target_id is not None and by_id is None:
        raise UnresolvedRelationTargetError(
            f"relation {relation.name!r} of entity {owner.name!r} targets unknown entity id {relation.target_id}",
            kind="relation",
            name=relation.name,
        )
    if by_name is not None and by_id is not None and by_name is not by_id:
        raise UnresolvedRelationTargetError(
            f"relation {relation.name!r} of entity {owner.name!r}: target {relation.target!r} "
            f"does not match target id {relation.target_id}",
            kind="relation",
            name=relation.name,
        )
    return by_name or by_id


def validate_model(model: Model, *, check_high_water_marks: bool = True) -> None:
    """
    Raise on the first inconsistency:

    - DuplicateIdentifierError: two same-kind elements share an id or uid,
      two entities share a name, or a live element reuses a retired uid
    - HighWaterMarkError: a last-id marker is missing, too low or disagrees
      with the element it names
    - UnresolvedRelationTargetError: relation target is not an entity of the model

    Property ids are scoped to their entity; property uids and all index and
    relation identifiers are unique across the model.
    """
    entities = _IdRegistry("entity", retired=model.retired_entity_uids)
    property_uids = _IdRegistry("property", retired=model.retired_property_uids)
    indexes = _IdRegistry("index", retired=model.retired_index_uids)
    relations = _IdRegistry("relation", retired=model.retired_relation_uids)

    entity_elements: List[Element] = []
    index_elements: List[Element] = []
    relation_elements: List[Element] = []

    seen_names = set()
    for entity in model.entities:
        if entity.name in seen_names:
            raise DuplicateIdentifierError(
                f"entity name {entity.name!r} is declared more than once",
                kind="entity",
                name=entity.name,
            )
        seen_names.add(entity.name)
        entities.add(entity.name, entity.id)
        entity_elements.append((entity.name, entity.id))

        property_ids = _IdRegistry("property", scope=f"entity {entity.name!r}")
        property_elements: List[Element] = []
        for prop in entity.properties:
            property_ids.add(prop.name, prop.id)
            # ids are per entity, uids are unique across the model
            property_uids.add(f"{entity.name}.{prop.name}", prop.id, uid_only=True)
            property_elements.append((prop.name, prop.id))

            if prop.index_id is not None:
                index_name = f"{entity.name}.{prop.name}"
                indexes.add(index_name, prop.index_id)
                index_elements.append((index_name, prop.index_id))

            if prop.relation_target is not None and model.find_entity(prop.relation_target) is None:
                raise UnresolvedRelationTargetError(
                    f"property {prop.name!r} of entity {entity.name!r} targets unknown entity "
                    f"{prop.relation_target!r}",
                    kind="property",
                    name=prop.name,
                )

        for relation in entity.relations:
            relation_name = f"{entity.name}.{relation.name}"
            relations.add(relation_name, relation.id)
            relation_elements.append((relation_name, relation.id))
            resolve_relation_target(model, entity, relation)

        if check_high_water_marks:
            _check_high_water_mark(
                "property", entity.last_property_id, property_elements, owner=f"entity {entity.name!r}"
            )

    if check_high_water_marks:
        _check_high_water_mark("entity", model.last_entity_id, entity_elements, owner="model")
        _check_high_water_mark("index", model.last_index_id, index_elements, owner="model")
        _check_high_water_mark("relation", model.last_relation_id, relation_elements, owner="model")
