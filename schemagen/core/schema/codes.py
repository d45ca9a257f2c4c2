"""
Primitive type and property flag lookups.

Codes match the runtime's C API (OBXPropertyType / OBXPropertyFlags), so the
resolved integers can be handed to any dialect unchanged.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple, Union

from schemagen.core.errors import UnknownFlagError, UnknownTypeError

PROPERTY_TYPE_CODES: Dict[str, int] = {
    "bool": 1,
    "byte": 2,
    "short": 3,
    "char": 4,
    "int": 5,
    "long": 6,
    "float": 7,
    "double": 8,
    "string": 9,
    "date": 10,
    "relation": 11,
    "date_nano": 12,
    "flex": 13,
    "byte_vector": 23,
    "string_vector": 30,
}

PROPERTY_FLAG_CODES: Dict[str, int] = {
    "id": 1,
    "non_primitive_type": 2,
    "not_null": 4,
    "indexed": 8,
    "reserved": 16,
    "unique": 32,
    "id_monotonic_sequence": 64,
    "id_self_assignable": 128,
    "index_partial_skip_null": 256,
    "index_partial_skip_zero": 512,
    "virtual": 1024,
    "index_hash": 2048,
    "index_hash64": 4096,
    "unsigned": 8192,
    "id_companion": 16384,
}

TypeRef = Union[int, str]
FlagsRef = Union[int, Iterable[str]]


def _lookup_key(name: str) -> str:
    # "not-null", "NOT_NULL" and "notnull" are the same flag
    return name.strip().lower().replace("-", "").replace("_", "")


_TYPES_BY_KEY = {_lookup_key(k): k for k in PROPERTY_TYPE_CODES}
_TYPES_BY_CODE = {v: k for k, v in PROPERTY_TYPE_CODES.items()}
_FLAGS_BY_KEY = {_lookup_key(k): k for k in PROPERTY_FLAG_CODES}


def resolve_type(value: TypeRef, *, owner: Optional[str] = None) -> Tuple[str, int]:
    """Return (canonical_name, code) for a type name or integer code."""
    if isinstance(value, bool):
        raise UnknownTypeError(f"unknown property type {value!r}", kind="property", name=owner)
    if isinstance(value, int):
        name = _TYPES_BY_CODE.get(value)
        if name is None:
            raise UnknownTypeError(f"unknown property type code {value}", kind="property", name=owner)
        return name, value

    name = _TYPES_BY_KEY.get(_lookup_key(str(value)))
    if name is None:
        raise UnknownTypeError(f"unknown property type {value!r}", kind="property", name=owner)
    return name, PROPERTY_TYPE_CODES[name]


def resolve_flags(value: FlagsRef, *, owner: Optional[str] = None) -> Tuple[str, ...]:
    """Canonical flag names ordered by bit value, duplicates removed."""
    if isinstance(value, bool):
        raise UnknownFlagError(f"unknown property flags {value!r}", kind="property", name=owner)

    if isinstance(value, int):
        known = 0
        for code in PROPERTY_FLAG_CODES.values():
            known |= code
        if value < 0 or value & ~known:
            raise UnknownFlagError(
                f"unknown property flag bits in mask {value}", kind="property", name=owner
            )
        return tuple(n for n, code in PROPERTY_FLAG_CODES.items() if value & code)

    if isinstance(value, str):
        value = [value]

    names = set()
    for raw in value:
        name = _FLAGS_BY_KEY.get(_lookup_key(str(raw)))
        if name is None:
            raise UnknownFlagError(f"unknown property flag {raw!r}", kind="property", name=owner)
        names.add(name)
    return tuple(sorted(names, key=PROPERTY_FLAG_CODES.__getitem__))


def flags_mask(value: FlagsRef, *, owner: Optional[str] = None) -> int:
    mask = 0
    for name in resolve_flags(value, owner=owner):
        mask |= PROPERTY_FLAG_CODES[name]
    return mask
