from .dialects import DIALECTS, CDialect, Dialect, PythonDialect, dialect_names, get_dialect
from .emitter import generate, options_from_config, render, resolve_options
from .options import GeneratorOptions

__all__ = [
    "DIALECTS",
    "Dialect",
    "CDialect",
    "PythonDialect",
    "GeneratorOptions",
    "dialect_names",
    "get_dialect",
    "generate",
    "options_from_config",
    "render",
    "resolve_options",
]
