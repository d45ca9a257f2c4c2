from __future__ import annotations

from hashlib import sha256
from typing import Optional

from fastapi import APIRouter, HTTPException

from schemagen.core.compiler.descriptor_builder import compile_model
from schemagen.core.compiler.instructions import InstructionStream
from schemagen.core.config import check_high_water_marks_enabled, default_dialect
from schemagen.core.errors import CompileError, UnknownDialectError
from schemagen.core.generators.dialects import DIALECTS, get_dialect
from schemagen.core.generators.emitter import options_from_config, render
from schemagen.core.observability.metrics import record_run
from schemagen.core.schema.models import Model

router = APIRouter(prefix="/api/v1", tags=["models"])


def _compile(model: Model, check_high_water_marks: Optional[bool]) -> InstructionStream:
    check = check_high_water_marks_enabled() if check_high_water_marks is None else check_high_water_marks
    try:
        stream = compile_model(model, check_high_water_marks=check)
    except CompileError as exc:
        record_run("compile", type(exc).__name__)
        raise HTTPException(status_code=422, detail=exc.to_dict())
    record_run("compile", "ok")
    return stream


@router.post("/models/compile")
def compile_endpoint(model: Model, check_high_water_marks: Optional[bool] = None):
    stream = _compile(model, check_high_water_marks)
    return {
        "instructions": [i.model_dump(mode="json", exclude_none=True) for i in stream.instructions],
        "count": len(stream),
        "hash": stream.deterministic_hash(),
    }


@router.post("/models/render")
def render_endpoint(
    model: Model,
    dialect: Optional[str] = None,
    check_high_water_marks: Optional[bool] = None,
):
    try:
        d = get_dialect(dialect or default_dialect())
    except UnknownDialectError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    stream = _compile(model, check_high_water_marks)
    try:
        source = render(stream, d, options_from_config(d))
    except ValueError as exc:
        record_run("render", type(exc).__name__)
        raise HTTPException(status_code=400, detail=str(exc))
    record_run("render", "ok")
    return {
        "dialect": d.name,
        "source": source,
        "hash": sha256(source.encode("utf-8")).hexdigest(),
    }


@router.get("/dialects")
def list_dialects():
    return {
        "default": default_dialect(),
        "dialects": {
            name: d.default_options.model_dump() for name, d in sorted(DIALECTS.items())
        },
    }
