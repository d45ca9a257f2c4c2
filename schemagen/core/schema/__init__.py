from .codes import PROPERTY_FLAG_CODES, PROPERTY_TYPE_CODES, flags_mask, resolve_flags, resolve_type
from .document import parse_model_document
from .ids import Identifier
from .models import Entity, Model, Property, Relation

__all__ = [
    "Identifier",
    "Property",
    "Relation",
    "Entity",
    "Model",
    "PROPERTY_TYPE_CODES",
    "PROPERTY_FLAG_CODES",
    "resolve_type",
    "resolve_flags",
    "flags_mask",
    "parse_model_document",
]
