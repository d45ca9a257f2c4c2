"""
schemagen command line.

    schemagen objectbox-model.json --dialect c > objectbox-model.h
    schemagen model.yaml --dialect python --compile-only
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from schemagen.core.compiler.descriptor_builder import compile_model
from schemagen.core.config import check_high_water_marks_enabled, default_dialect
from schemagen.core.errors import CompileError, ModelDocumentError, UnknownDialectError
from schemagen.core.generators.dialects import dialect_names
from schemagen.core.generators.emitter import options_from_config, render
from schemagen.core.schema.document import parse_model_document

log = logging.getLogger("schemagen.cli")


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="schemagen",
        description="Render model descriptor construction code from a model document.",
    )
    p.add_argument("model", type=Path, help="model document (JSON or YAML)")
    p.add_argument("--dialect", default=None, help=f"target dialect: {', '.join(dialect_names())}")
    p.add_argument("--options-file", type=Path, default=None, help="YAML/JSON generator option overrides")
    p.add_argument(
        "--no-high-water-check",
        action="store_true",
        help="skip last-id marker checks (legacy models)",
    )
    p.add_argument(
        "--compile-only",
        action="store_true",
        help="print the instruction stream as JSON instead of source",
    )
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    check = check_high_water_marks_enabled() and not args.no_high_water_check

    try:
        text = args.model.read_text(encoding="utf-8")
        model = parse_model_document(text)
        stream = compile_model(model, check_high_water_marks=check)

        if args.compile_only:
            payload = [i.model_dump(mode="json", exclude_none=True) for i in stream.instructions]
            sys.stdout.write(json.dumps(payload, indent=2) + "\n")
            return 0

        dialect = args.dialect or default_dialect()
        source = render(stream, dialect, options_from_config(dialect, args.options_file))
    except OSError as exc:
        print(f"error: cannot read {args.model}: {exc}", file=sys.stderr)
        return 2
    except (ModelDocumentError, CompileError, UnknownDialectError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(source)
    return 0


if __name__ == "__main__":
    sys.exit(main())
