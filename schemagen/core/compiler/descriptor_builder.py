from __future__ import annotations

import logging
from typing import List

from schemagen.core.schema.codes import flags_mask, resolve_flags, resolve_type
from schemagen.core.schema.ids import Identifier
from schemagen.core.schema.models import Entity, Model, Property

from .instructions import Instruction, InstructionStream, Op
from .validation import resolve_relation_target, validate_model

log = logging.getLogger("schemagen.compiler")


def _id_step(op: Op, ident: Identifier) -> Instruction:
    return Instruction(op=op, id=ident.id, uid=ident.uid)


def _property_steps(entity: Entity, prop: Property) -> List[Instruction]:
    owner = f"{entity.name}.{prop.name}"
    type_name, type_code = resolve_type(prop.type, owner=owner)

    steps = [
        Instruction(
            op=Op.PROPERTY,
            name=prop.name,
            id=prop.id.id,
            uid=prop.id.uid,
            type_code=type_code,
            type_name=type_name,
        )
    ]

    flag_names = resolve_flags(prop.flags, owner=owner)
    if flag_names:
        steps.append(
            Instruction(
                op=Op.PROPERTY_FLAGS,
                flags=flags_mask(flag_names),
                flag_names=flag_names,
            )
        )

    if prop.relation_target is not None:
        steps.append(
            Instruction(
                op=Op.PROPERTY_RELATION,
                name=prop.relation_target,
                id=prop.index_id.id,
                uid=prop.index_id.uid,
            )
        )
    elif prop.index_id is not None:
        steps.append(_id_step(Op.PROPERTY_INDEX_ID, prop.index_id))

    return steps


def compile_model(model: Model, *, check_high_water_marks: bool = True) -> InstructionStream:
    """
    Compile a schema model into the ordered builder instruction stream.

    Per entity, in model order:
        ENTITY, then per property PROPERTY [PROPERTY_FLAGS]
        [PROPERTY_RELATION | PROPERTY_INDEX_ID], then RELATION per standalone
        relation, then ENTITY_LAST_PROPERTY_ID.
    Then MODEL_LAST_ENTITY_ID, MODEL_LAST_INDEX_ID (if set),
    MODEL_LAST_RELATION_ID (if set).

    Raises a CompileError subclass before anything is returned; the model is
    never modified.
    """
    validate_model(model, check_high_water_marks=check_high_water_marks)

    out: List[Instruction] = []
    emit = out.append

    for entity in model.entities:
        emit(Instruction(op=Op.ENTITY, name=entity.name, id=entity.id.id, uid=entity.id.uid))

        for prop in entity.properties:
            out.extend(_property_steps(entity, prop))

        for relation in entity.relations:
            target = resolve_relation_target(model, entity, relation)
            emit(
                Instruction(
                    op=Op.RELATION,
                    id=relation.id.id,
                    uid=relation.id.uid,
                    target_id=target.id.id,
                    target_uid=target.id.uid,
                )
            )

        emit(_id_step(Op.ENTITY_LAST_PROPERTY_ID, entity.last_property_id))

    emit(_id_step(Op.MODEL_LAST_ENTITY_ID, model.last_entity_id))
    if model.last_index_id is not None:
        emit(_id_step(Op.MODEL_LAST_INDEX_ID, model.last_index_id))
    if model.last_relation_id is not None:
        emit(_id_step(Op.MODEL_LAST_RELATION_ID, model.last_relation_id))

    stream = InstructionStream(instructions=tuple(out))
    log.debug(
        "Compiled model: entities=%d instructions=%d",
        len(model.entities),
        len(stream),
    )
    return stream
