from __future__ import annotations

from typing import Any, Dict, Optional


class CompileError(ValueError):
    """
    Base class for schema problems detected before any instruction is emitted.

    kind: entity | property | index | relation | model
    name: offending element name, when known
    """

    def __init__(self, message: str, *, kind: Optional[str] = None, name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.name = name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "kind": self.kind,
            "name": self.name,
            "message": self.message,
        }


class UnknownTypeError(CompileError):
    pass


class UnknownFlagError(CompileError):
    pass


class DuplicateIdentifierError(CompileError):
    pass


class HighWaterMarkError(DuplicateIdentifierError):
    """A last-id marker is below (or disagrees with) an id it must cover."""


class UnresolvedRelationTargetError(CompileError):
    pass


class UnknownDialectError(ValueError):
    pass


class ModelDocumentError(ValueError):
    pass


class CompilerNotFoundError(RuntimeError):
    pass
