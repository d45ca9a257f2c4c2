from __future__ import annotations

import logging
import re
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

_log = logging.getLogger("schemagen.generators")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RUNTIME_REF = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_./+-]*$")


class GeneratorOptions(BaseModel):
    """
    Wrapper settings of the generated source.

    runtime: header to include (C) or module to import (Python)
    guard:   multiple-inclusion guard macro, for dialects that need one
    """

    model_config = ConfigDict(frozen=True)

    function_name: str
    runtime: str
    guard: Optional[str] = None
    banner: str = "Code generated by schemagen; DO NOT EDIT."

    @field_validator("function_name")
    @classmethod
    def _function_name_is_identifier(cls, v: str) -> str:
        if not _IDENTIFIER.match(v):
            raise ValueError(f"function_name must be an identifier, got {v!r}")
        return v

    @field_validator("guard")
    @classmethod
    def _guard_is_identifier(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _IDENTIFIER.match(v):
            raise ValueError(f"guard must be an identifier, got {v!r}")
        return v

    @field_validator("runtime")
    @classmethod
    def _runtime_is_plain(cls, v: str) -> str:
        if not _RUNTIME_REF.match(v):
            raise ValueError(f"runtime must be a plain header path or module name, got {v!r}")
        return v

    @field_validator("banner")
    @classmethod
    def _banner_single_line(cls, v: str) -> str:
        if "\n" in v or "\r" in v:
            raise ValueError("banner must be a single line")
        return v

    def with_overrides(self, overrides: Mapping[str, str]) -> "GeneratorOptions":
        known = {k: v for k, v in overrides.items() if k in type(self).model_fields}
        unknown = sorted(set(overrides) - set(known))
        if unknown:
            _log.warning("Ignoring unknown generator options: %s", ", ".join(unknown))
        if not known:
            return self
        return type(self).model_validate({**self.model_dump(), **known})
