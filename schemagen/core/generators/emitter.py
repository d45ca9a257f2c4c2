from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from schemagen.core.compiler.descriptor_builder import compile_model
from schemagen.core.compiler.instructions import InstructionStream
from schemagen.core.config import load_option_overrides
from schemagen.core.schema.models import Model

from .dialects import Dialect, get_dialect
from .options import GeneratorOptions

log = logging.getLogger("schemagen.generators")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

OptionsRef = Union[GeneratorOptions, Mapping[str, str], None]


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(enabled_extensions=()),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def resolve_options(dialect: Union[str, Dialect], options: OptionsRef = None) -> GeneratorOptions:
    d = get_dialect(dialect)
    if options is None:
        resolved = d.default_options
    elif isinstance(options, GeneratorOptions):
        resolved = options
    else:
        resolved = d.default_options.with_overrides(options)
    d.validate_options(resolved)
    return resolved


def options_from_config(dialect: Union[str, Dialect], path: Optional[Path] = None) -> GeneratorOptions:
    """
    Dialect defaults merged with the SCHEMAGEN_OPTIONS_FILE overrides for that
    dialect. Overrides that fail validation are dropped with a warning.
    """
    d = get_dialect(dialect)
    overrides = load_option_overrides(path).get(d.name, {})
    try:
        return resolve_options(d, overrides)
    except ValueError as exc:
        log.warning("Ignoring invalid %s generator options %s: %s", d.name, overrides, exc)
        return resolve_options(d)


def render(stream: InstructionStream, dialect: Union[str, Dialect], options: OptionsRef = None) -> str:
    """
    Project the instruction stream onto source text, one guarded call per
    instruction, in stream order.
    """
    d = get_dialect(dialect)
    opts = resolve_options(d, options)

    steps = [d.step(instr) for instr in stream.instructions]
    source = _environment().get_template(d.template).render(options=opts, steps=steps)

    log.debug("Rendered %d steps for dialect=%s", len(steps), d.name)
    return source


def generate(
    model: Model,
    dialect: Union[str, Dialect],
    options: OptionsRef = None,
    *,
    check_high_water_marks: bool = True,
) -> str:
    """compile_model + render."""
    stream = compile_model(model, check_high_water_marks=check_high_water_marks)
    return render(stream, dialect, options)
