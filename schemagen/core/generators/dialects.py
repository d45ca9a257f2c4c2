"""
Target dialects.

A dialect turns one Instruction into one call statement guarded by the
target's stop-at-first-failure construct. The surrounding boilerplate
(preamble, guard, entry function, cleanup path) lives in the dialect's
template; see emitter.render.
"""
from __future__ import annotations

import json
import re
from typing import Dict, FrozenSet, List, Optional, Union

from schemagen.core.compiler.instructions import Instruction, Op
from schemagen.core.errors import UnknownDialectError

from .options import GeneratorOptions

_INT64_MAX = 2**63 - 1
_MODULE_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


def _camel(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_"))


class Dialect:
    name: str = ""
    template: str = ""
    default_options: GeneratorOptions
    # steps whose runtime function reports nothing
    unchecked_ops: FrozenSet[Op] = frozenset()

    def call(self, instr: Instruction) -> str:
        raise NotImplementedError

    def note(self, instr: Instruction) -> Optional[str]:
        return None

    def checked(self, call: str, note: Optional[str]) -> str:
        raise NotImplementedError

    def unchecked(self, call: str, note: Optional[str]) -> str:
        raise NotImplementedError

    def validate_options(self, options: GeneratorOptions) -> None:
        return None

    def step(self, instr: Instruction) -> str:
        call = self.call(instr)
        note = self.note(instr)
        if instr.op in self.unchecked_ops:
            return self.unchecked(call, note)
        return self.checked(call, note)


# ------------------------------------------------------------
# C (runtime C API, objectbox.h)
# ------------------------------------------------------------
_C_FUNCTIONS: Dict[Op, str] = {
    Op.ENTITY: "obx_model_entity",
    Op.PROPERTY: "obx_model_property",
    Op.PROPERTY_FLAGS: "obx_model_property_flags",
    Op.PROPERTY_INDEX_ID: "obx_model_property_index_id",
    Op.PROPERTY_RELATION: "obx_model_property_relation",
    Op.RELATION: "obx_model_relation",
    Op.ENTITY_LAST_PROPERTY_ID: "obx_model_entity_last_property_id",
    Op.MODEL_LAST_ENTITY_ID: "obx_model_last_entity_id",
    Op.MODEL_LAST_INDEX_ID: "obx_model_last_index_id",
    Op.MODEL_LAST_RELATION_ID: "obx_model_last_relation_id",
}


def c_string(text: str) -> str:
    out: List[str] = []
    for ch in text:
        if ch in ('"', "\\", "?"):
            out.append("\\" + ch)
        elif 0x20 <= ord(ch) < 0x7F:
            out.append(ch)
        else:
            # octal escapes stop after three digits, hex escapes do not
            out.extend(f"\\{b:03o}" for b in ch.encode("utf-8"))
    return '"' + "".join(out) + '"'


def c_uid(uid: int) -> str:
    return f"{uid}ull" if uid > _INT64_MAX else str(uid)


class CDialect(Dialect):
    name = "c"
    template = "c/model.h.j2"
    default_options = GeneratorOptions(
        function_name="create_obx_model",
        runtime="objectbox.h",
        guard="OBJECTBOX_MODEL_H",
    )
    # obx_model_last_*_id() return void
    unchecked_ops = frozenset(
        {Op.MODEL_LAST_ENTITY_ID, Op.MODEL_LAST_INDEX_ID, Op.MODEL_LAST_RELATION_ID}
    )

    def call(self, instr: Instruction) -> str:
        op = instr.op
        if op == Op.ENTITY:
            args = [c_string(instr.name), str(instr.id), c_uid(instr.uid)]
        elif op == Op.PROPERTY:
            args = [
                c_string(instr.name),
                "OBXPropertyType_" + _camel(instr.type_name),
                str(instr.id),
                c_uid(instr.uid),
            ]
        elif op == Op.PROPERTY_FLAGS:
            names = ["OBXPropertyFlags_" + n.upper() for n in instr.flag_names]
            mask = " | ".join(names)
            # int to enum needs an explicit cast in C++
            args = [mask if len(names) == 1 else f"(OBXPropertyFlags) ({mask})"]
        elif op == Op.PROPERTY_RELATION:
            args = [c_string(instr.name), str(instr.id), c_uid(instr.uid)]
        elif op == Op.RELATION:
            args = [str(instr.id), c_uid(instr.uid), str(instr.target_id), c_uid(instr.target_uid)]
        else:
            args = [str(instr.id), c_uid(instr.uid)]
        return f"{_C_FUNCTIONS[op]}(model, {', '.join(args)})"

    def checked(self, call: str, note: Optional[str]) -> str:
        return f"if ({call}) break;"

    def unchecked(self, call: str, note: Optional[str]) -> str:
        return f"{call};"

    def validate_options(self, options: GeneratorOptions) -> None:
        if not options.guard:
            raise ValueError("the c dialect requires an include guard")


# ------------------------------------------------------------
# Python (descriptor-builder runtime module)
# ------------------------------------------------------------
_PY_FUNCTIONS: Dict[Op, str] = {
    Op.ENTITY: "declare_entity",
    Op.PROPERTY: "declare_property",
    Op.PROPERTY_FLAGS: "declare_property_flags",
    Op.PROPERTY_INDEX_ID: "declare_property_index_id",
    Op.PROPERTY_RELATION: "declare_property_relation",
    Op.RELATION: "declare_relation",
    Op.ENTITY_LAST_PROPERTY_ID: "declare_entity_last_property_id",
    Op.MODEL_LAST_ENTITY_ID: "declare_model_last_entity_id",
    Op.MODEL_LAST_INDEX_ID: "declare_model_last_index_id",
    Op.MODEL_LAST_RELATION_ID: "declare_model_last_relation_id",
}


def py_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class PythonDialect(Dialect):
    """
    Each declare_* function returns a truthy value on success. The import
    system is the multiple-definition guard, so options.guard is unused.
    """

    name = "python"
    template = "python/model.py.j2"
    default_options = GeneratorOptions(
        function_name="create_model",
        runtime="descriptor_runtime",
    )

    def call(self, instr: Instruction) -> str:
        op = instr.op
        if op in (Op.ENTITY, Op.PROPERTY_RELATION):
            args = [py_string(instr.name), str(instr.id), str(instr.uid)]
        elif op == Op.PROPERTY:
            args = [py_string(instr.name), str(instr.type_code), str(instr.id), str(instr.uid)]
        elif op == Op.PROPERTY_FLAGS:
            args = [str(instr.flags)]
        elif op == Op.RELATION:
            args = [str(instr.id), str(instr.uid), str(instr.target_id), str(instr.target_uid)]
        else:
            args = [str(instr.id), str(instr.uid)]
        return f"_rt.{_PY_FUNCTIONS[op]}(model, {', '.join(args)})"

    def note(self, instr: Instruction) -> Optional[str]:
        if instr.op == Op.PROPERTY:
            return instr.type_name
        if instr.op == Op.PROPERTY_FLAGS:
            return " | ".join(instr.flag_names)
        return None

    def checked(self, call: str, note: Optional[str]) -> str:
        head = f"if not {call}:"
        if note:
            head += f"  # {note}"
        return head + "\n    return None"

    def unchecked(self, call: str, note: Optional[str]) -> str:
        return call + (f"  # {note}" if note else "")

    def validate_options(self, options: GeneratorOptions) -> None:
        if not _MODULE_PATH.match(options.runtime):
            raise ValueError(f"the python dialect needs a module path as runtime, got {options.runtime!r}")


DIALECTS: Dict[str, Dialect] = {
    "c": CDialect(),
    "python": PythonDialect(),
}


def get_dialect(dialect: Union[str, Dialect]) -> Dialect:
    if isinstance(dialect, Dialect):
        return dialect
    key = (dialect or "").strip().lower()
    found = DIALECTS.get(key)
    if found is None:
        raise UnknownDialectError(
            f"unknown dialect {dialect!r} (available: {', '.join(sorted(DIALECTS))})"
        )
    return found


def dialect_names() -> List[str]:
    return sorted(DIALECTS)
